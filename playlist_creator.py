#!/usr/bin/env python3
"""
Create a Spotify playlist from the tracks a user kept after review.
"""

import re
import logging

from constants import (
    BATCH_SIZES, MAX_PLAYLIST_NAME_LENGTH, MAX_TRACKS_PER_PLAYLIST,
    DEFAULT_PLAYLIST_DESCRIPTION
)
from errors import ValidationError

logger = logging.getLogger(__name__)

INVALID_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def validate_playlist_name(name):
    """
    Check a playlist name.

    Returns:
        The trimmed name

    Raises:
        ValidationError: listing every problem with the name
    """
    if not name or not isinstance(name, str):
        raise ValidationError("Invalid playlist name", ["Playlist name is required"])

    errors = []
    trimmed = name.strip()

    if not trimmed:
        errors.append("Playlist name cannot be empty")
    if len(trimmed) > MAX_PLAYLIST_NAME_LENGTH:
        errors.append(f"Playlist name cannot exceed {MAX_PLAYLIST_NAME_LENGTH} characters")
    if INVALID_NAME_CHARS.search(trimmed):
        errors.append("Playlist name contains invalid characters")

    if errors:
        raise ValidationError("Invalid playlist name", errors)
    return trimmed


def collect_selected_uris(tracks):
    """URIs of the selected tracks that have a Spotify match, in order."""
    return [track.uri for track in tracks if track.selected and track.uri]


def validate_track_selection(tracks):
    """
    Check that the selection can become a playlist.

    Returns:
        List of URIs to add
    """
    uris = collect_selected_uris(tracks)

    if not uris:
        raise ValidationError("Invalid track selection", ["At least one track must be selected"])
    if len(uris) > MAX_TRACKS_PER_PLAYLIST:
        raise ValidationError(
            "Invalid track selection",
            [f"Too many tracks selected (maximum {MAX_TRACKS_PER_PLAYLIST})"]
        )
    return uris


def create_playlist_from_tracks(session, playlist_name, tracks,
                                description=DEFAULT_PLAYLIST_DESCRIPTION, public=True):
    """
    Create a new playlist and add every selected, matched track to it.

    Args:
        session: Authenticated SpotifySession
        playlist_name: Name for the new playlist
        tracks: List of AnnotatedTrack after review
        description: Playlist description
        public: Whether the playlist is public

    Returns:
        Dict with id, name, url, tracks_added and total_selected

    Raises:
        AuthRequired: the session has no valid credential
        ValidationError: bad name or empty selection
        CatalogError: a Spotify call failed
    """
    session.require_auth()
    name = validate_playlist_name(playlist_name)
    track_uris = validate_track_selection(tracks)

    user_id = session.get_me()['id']
    playlist = session.create_playlist(user_id, name, description=description, public=public)
    playlist_id = playlist['id']
    logger.info(f"Created playlist '{name}' ({playlist_id})")

    # Spotify accepts a limited number of URIs per call
    batch_size = BATCH_SIZES['playlist_add']
    tracks_added = 0
    for i in range(0, len(track_uris), batch_size):
        batch = track_uris[i:i + batch_size]
        session.add_tracks_to_playlist(playlist_id, batch)
        tracks_added += len(batch)
        logger.debug(f"Added batch {i // batch_size + 1} ({len(batch)} tracks)")

    return {
        'id': playlist_id,
        'name': playlist.get('name', name),
        'url': (playlist.get('external_urls') or {}).get('spotify', ''),
        'tracks_added': tracks_added,
        'total_selected': sum(1 for track in tracks if track.selected)
    }
