#!/usr/bin/env python3
"""
Shared utilities for Spotify API operations.
Includes rate limiting, error handling and the per-user session object.
"""

import os
import re
import time
import functools
import logging

import requests
import spotipy
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError

from print_utils import print_info, print_success
from constants import (
    SPOTIFY_SCOPES, RATE_LIMITS, BATCH_SIZES, TOKEN_CACHE_FILE, ERROR_MESSAGES
)
from errors import AuthRequired, CatalogError, SearchTransportFailure

# Initialize logger
logger = logging.getLogger(__name__)

# Failures that mean "the request did not get a usable answer"
TRANSPORT_ERRORS = (spotipy.SpotifyException, SpotifyOauthError, requests.exceptions.RequestException)

def show_spotify_setup_help():
    """Show standardized help for setting up Spotify API credentials."""
    print_info("\nTo set up a Spotify Developer account and create an app:")
    print("1. Go to https://developer.spotify.com/dashboard/")
    print("2. Log in and create a new app")
    print("3. Set the redirect URI to http://127.0.0.1:8888/callback")
    print("4. Copy the Client ID and Client Secret")
    print("5. Run this script again and provide the credentials when prompted")

def _is_rate_limit_error(error):
    http_status = getattr(error, 'http_status', None)
    if http_status is not None:
        return http_status == 429
    # No status code to go on, fall back to the message
    error_str = str(error).lower()
    return any(keyword in error_str for keyword in ['rate limit', '429', 'too many requests'])

def _retry_after_seconds(error):
    """Seconds the API asked us to wait, if it said."""
    headers = getattr(error, 'headers', None) or {}
    for key in ('Retry-After', 'retry-after'):
        if key in headers:
            try:
                return int(headers[key])
            except (TypeError, ValueError):
                return None
    retry_match = re.search(r'retry[^0-9]*(\d+)', str(error).lower())
    if retry_match:
        return int(retry_match.group(1))
    return None

def safe_spotify_call(func):
    """
    Decorator for Spotify API calls with automatic retry on rate limiting.

    Usage:
        @safe_spotify_call
        def my_api_call(sp, *args, **kwargs):
            return sp.some_api_method(*args, **kwargs)
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        max_retries = RATE_LIMITS['max_retries']
        retry_delay = RATE_LIMITS['retry_base_delay']

        for attempt in range(max_retries):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                if not _is_rate_limit_error(e) or attempt == max_retries - 1:
                    if _is_rate_limit_error(e):
                        logger.error(f"Rate limiting persists after {max_retries} attempts.")
                    raise

                retry_time = _retry_after_seconds(e)
                if retry_time:
                    logger.warning(f"Rate limit hit. Waiting {retry_time} seconds (from API)...")
                    time.sleep(retry_time)
                else:
                    logger.warning(f"Rate limit hit. Waiting {retry_delay} seconds...")
                    time.sleep(retry_delay)
                    retry_delay *= 2  # Exponential backoff for next attempt

    return wrapper

class SafeSpotifyClient:
    """
    Wrapper around spotipy.Spotify with built-in rate limiting and error handling.
    Can be used as a drop-in replacement for spotipy.Spotify.
    """

    def __init__(self, sp_client):
        """Initialize with an existing Spotify client."""
        self._sp = sp_client

    def __getattr__(self, name):
        """Wrap all Spotify API methods with rate limiting."""
        attr = getattr(self._sp, name)

        if callable(attr) and not name.startswith('_'):
            @safe_spotify_call
            def safe_method(*args, **kwargs):
                time.sleep(RATE_LIMITS['api_call_delay'])
                return attr(*args, **kwargs)

            return safe_method
        else:
            return attr

class SpotifySession:
    """
    One user's authenticated view of the Spotify catalog.

    Passed explicitly to the search and playlist functions instead of
    keeping tokens in module globals, so several users can be served from
    one process. A session built without a client is unauthenticated and
    every call on it raises AuthRequired.
    """

    def __init__(self, client=None):
        self._client = client
        self._user = None

    @classmethod
    def from_access_token(cls, access_token, requests_timeout=30, retries=3):
        """Build a session around an access token obtained elsewhere."""
        if not access_token:
            return cls(None)
        sp = spotipy.Spotify(auth=access_token, requests_timeout=requests_timeout, retries=retries)
        return cls(SafeSpotifyClient(sp))

    @property
    def is_authenticated(self):
        return self._client is not None

    def require_auth(self):
        """Raise AuthRequired unless the session holds a client."""
        if self._client is None:
            raise AuthRequired()
        return self._client

    def search_tracks(self, query, limit):
        """
        Run one track search.

        Returns:
            List of Spotify track objects (possibly empty)

        Raises:
            SearchTransportFailure: the request failed
        """
        client = self.require_auth()
        try:
            response = client.search(q=query, type='track', limit=limit)
        except TRANSPORT_ERRORS as e:
            raise SearchTransportFailure(
                f"Search failed for '{query}': {e}",
                http_status=getattr(e, 'http_status', None),
                query=query
            ) from e

        return ((response or {}).get('tracks') or {}).get('items') or []

    def get_me(self):
        """Current user's profile (fetched once per session)."""
        client = self.require_auth()
        if self._user is None:
            try:
                self._user = client.current_user()
            except TRANSPORT_ERRORS as e:
                raise self._catalog_error("Failed to fetch user profile", e) from e
        return self._user

    def create_playlist(self, user_id, name, description="", public=True):
        """Create an empty playlist owned by user_id."""
        client = self.require_auth()
        try:
            return client.user_playlist_create(user_id, name, public=public, description=description)
        except TRANSPORT_ERRORS as e:
            raise self._catalog_error(f"Failed to create playlist '{name}'", e) from e

    def add_tracks_to_playlist(self, playlist_id, uris):
        """Add up to one batch of track URIs to a playlist."""
        if len(uris) > BATCH_SIZES['playlist_add']:
            raise ValueError(f"At most {BATCH_SIZES['playlist_add']} URIs per call, got {len(uris)}")

        client = self.require_auth()
        try:
            return client.playlist_add_items(playlist_id, list(uris))
        except TRANSPORT_ERRORS as e:
            raise self._catalog_error(f"Failed to add tracks to playlist {playlist_id}", e) from e

    @staticmethod
    def _catalog_error(message, error):
        http_status = getattr(error, 'http_status', None)
        if http_status == 401:
            return AuthRequired(f"{message}: {ERROR_MESSAGES['auth_required']}")
        detail = getattr(error, 'msg', None) or str(error)
        return CatalogError(f"{message}: {detail}", http_status=http_status)

def create_spotify_session(scopes=None, cache_path=TOKEN_CACHE_FILE, auto_open_browser=True):
    """
    Create an authenticated SpotifySession using the stored app credentials.

    Args:
        scopes: List of required Spotify scopes (default: playlist scopes)
        cache_path: Where spotipy keeps the OAuth token
        auto_open_browser: Whether to automatically open browser for auth

    Raises:
        AuthRequired: credentials are missing or the login failed
    """
    from credentials_manager import get_spotify_credentials

    client_id, client_secret, redirect_uri = get_spotify_credentials()
    if not client_id or not client_secret:
        raise AuthRequired(ERROR_MESSAGES['auth_failed'])

    os.makedirs(os.path.dirname(cache_path), exist_ok=True)

    auth_manager = SpotifyOAuth(
        client_id=client_id,
        client_secret=client_secret,
        redirect_uri=redirect_uri,
        scope=" ".join(scopes or SPOTIFY_SCOPES),
        open_browser=auto_open_browser,
        cache_path=cache_path
    )

    sp = spotipy.Spotify(
        auth_manager=auth_manager,
        requests_timeout=30,
        retries=3,
        backoff_factor=0.3
    )

    session = SpotifySession(SafeSpotifyClient(sp))

    # Triggers the OAuth flow if there is no cached token
    try:
        session.get_me()
    except (AuthRequired, CatalogError) as e:
        raise AuthRequired(f"{ERROR_MESSAGES['auth_failed']} ({e})") from e

    print_success("✅ Successfully authenticated with Spotify!")
    return session
