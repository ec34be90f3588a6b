#!/usr/bin/env python3
"""
Centralized constants for YCD Alchemist.
Contains shared values used across the parser, search and playlist modules.
"""

import os
from pathlib import Path

from colorama import Fore

# Application metadata
APP_NAME = "YCD Alchemist"
APP_VERSION = "1.0.0"

# Directory paths
CONFIG_DIR = os.path.join(str(Path.home()), ".ycd-alchemist")
CREDENTIALS_FILE = os.path.join(CONFIG_DIR, "credentials.json")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")
TOKEN_CACHE_FILE = os.path.join(CONFIG_DIR, "spotify_token_cache")

DEFAULT_REDIRECT_URI = "http://127.0.0.1:8888/callback"

# Spotify API scopes needed to read the profile and write playlists
SPOTIFY_SCOPES = [
    "playlist-modify-public",
    "playlist-modify-private",
    "user-read-private",
    "user-read-email"
]

# API batch sizes and limits
BATCH_SIZES = {
    'playlist_add': 100,          # Max URIs per "add items to playlist" call
}

# Rate limiting delays (in seconds)
RATE_LIMITS = {
    'search_delay': 0.1,          # Delay between consecutive track searches
    'api_call_delay': 0.05,       # Delay before every wrapped API call
    'retry_base_delay': 1,        # Base delay for retries
    'max_retries': 3,             # Maximum retry attempts
}

# Search strategy names, in the order they are tried
STRATEGY_ARTIST_TRACK = "artist:track search"
STRATEGY_COMBINED = "combined search"
STRATEGY_TITLE_ARTIST_MATCH = "title search + artist matching"
STRATEGY_TITLE_ONLY = "title-only search (no artist match)"
STRATEGY_CLEANED = "cleaned search terms"

# Result cap per strategy query
SEARCH_LIMITS = {
    'artist_track': 3,
    'combined': 3,
    'title_only': 5,
    'cleaned': 3
}

# Confidence bonus awarded for the strategy that produced the match
STRATEGY_BONUSES = {
    STRATEGY_ARTIST_TRACK: 0.10,
    STRATEGY_COMBINED: 0.08,
    STRATEGY_TITLE_ARTIST_MATCH: 0.06,
    STRATEGY_CLEANED: 0.05,
    STRATEGY_TITLE_ONLY: 0.02
}

CONFIDENCE_WEIGHTS = {
    'artist': 0.40,
    'title': 0.50
}

# Confidence bands, highest first
CONFIDENCE_LEVELS = [
    {'name': 'excellent', 'min': 90, 'label': 'Excellent', 'color': Fore.GREEN},
    {'name': 'very_good', 'min': 75, 'label': 'Very Good', 'color': Fore.LIGHTGREEN_EX},
    {'name': 'good', 'min': 60, 'label': 'Good', 'color': Fore.YELLOW},
    {'name': 'fair', 'min': 40, 'label': 'Fair', 'color': Fore.LIGHTRED_EX},
    {'name': 'poor', 'min': 0, 'label': 'Poor', 'color': Fore.RED}
]

UNKNOWN_ARTIST = "Unknown Artist"

# Upload limits
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
ALLOWED_FILE_TYPES = ['.ycd', '.txt', '.m3u', '.m3u8']
DEFAULT_LEGACY_ENCODING = "cp1255"  # Hebrew Windows exports

# Playlist limits
MAX_PLAYLIST_NAME_LENGTH = 100
MAX_TRACKS_PER_PLAYLIST = 1000
DEFAULT_PLAYLIST_DESCRIPTION = f"Created with {APP_NAME}"

# Error messages
ERROR_MESSAGES = {
    'auth_required': "Not authenticated with Spotify. Please log in and try again.",
    'auth_failed': "Failed to authenticate with Spotify. Please check your credentials.",
    'search_unavailable': "Spotify search is currently unavailable. Please check your connection and try again.",
    'no_tracks_found': "No valid tracks found in file.",
    'file_not_found': "The specified file could not be found."
}

if __name__ == "__main__":
    print(f"{APP_NAME} v{APP_VERSION}")
    print(f"Configuration directory: {CONFIG_DIR}")
    print(f"Search strategies: {list(STRATEGY_BONUSES.keys())}")
