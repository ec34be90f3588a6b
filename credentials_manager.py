#!/usr/bin/env python3
"""
Utility functions for managing Spotify API credentials.

Credentials are stored in a JSON file in the user's home directory, or taken
from the SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET / SPOTIFY_REDIRECT_URI
environment variables.
"""

import os
import json
import stat
import logging

from constants import CONFIG_DIR, CREDENTIALS_FILE, DEFAULT_REDIRECT_URI

logger = logging.getLogger(__name__)

def _save_credentials(credentials):
    """Write credentials with owner-only permissions."""
    os.makedirs(CONFIG_DIR, exist_ok=True)

    old_umask = os.umask(0o077)
    try:
        with open(CREDENTIALS_FILE, "w") as f:
            json.dump(credentials, f, indent=2)
        os.chmod(CREDENTIALS_FILE, stat.S_IRUSR | stat.S_IWUSR)
    finally:
        os.umask(old_umask)

def _prompt_for_credentials(client_id="", client_secret="", redirect_uri=""):
    """Ask the user for whatever is still missing."""
    print("Please enter your Spotify API credentials:")

    if not client_id:
        client_id = input("Client ID: ").strip()
    if not client_secret:
        client_secret = input("Client Secret: ").strip()
    if not redirect_uri:
        redirect_uri = input(f"Redirect URI [{DEFAULT_REDIRECT_URI}]: ").strip()

    return client_id, client_secret, redirect_uri or DEFAULT_REDIRECT_URI

def get_spotify_credentials():
    """
    Get Spotify API credentials.

    Returns:
        tuple: (client_id, client_secret, redirect_uri), or (None, None, None)
        when they are missing and no interactive input is available
    """
    if not os.path.exists(CREDENTIALS_FILE):
        # Check environment variables first
        client_id = os.environ.get("SPOTIFY_CLIENT_ID", "")
        client_secret = os.environ.get("SPOTIFY_CLIENT_SECRET", "")
        redirect_uri = os.environ.get("SPOTIFY_REDIRECT_URI", DEFAULT_REDIRECT_URI)

        if client_id and client_secret:
            return client_id, client_secret, redirect_uri

        print("Spotify API credentials not found.")
        try:
            client_id, client_secret, redirect_uri = _prompt_for_credentials(client_id, client_secret, redirect_uri)
        except EOFError:
            # No interactive input (tests, pipes)
            return None, None, None

        _save_credentials({
            "SPOTIFY_CLIENT_ID": client_id,
            "SPOTIFY_CLIENT_SECRET": client_secret,
            "SPOTIFY_REDIRECT_URI": redirect_uri
        })
        return client_id, client_secret, redirect_uri

    try:
        with open(CREDENTIALS_FILE, "r") as f:
            credentials = json.load(f)

        client_id = credentials.get("SPOTIFY_CLIENT_ID", "")
        client_secret = credentials.get("SPOTIFY_CLIENT_SECRET", "")
        redirect_uri = credentials.get("SPOTIFY_REDIRECT_URI", DEFAULT_REDIRECT_URI)

        if not client_id or not client_secret:
            raise ValueError("Invalid Spotify credentials")

        return client_id, client_secret, redirect_uri

    except (ValueError, IOError) as e:
        logger.warning(f"Error loading Spotify credentials: {e}")

        try:
            client_id, client_secret, redirect_uri = _prompt_for_credentials()
        except EOFError:
            return None, None, None

        _save_credentials({
            "SPOTIFY_CLIENT_ID": client_id,
            "SPOTIFY_CLIENT_SECRET": client_secret,
            "SPOTIFY_REDIRECT_URI": redirect_uri
        })
        return client_id, client_secret, redirect_uri

def clear_spotify_credentials():
    """Delete the stored credentials file, if any."""
    if os.path.exists(CREDENTIALS_FILE):
        os.remove(CREDENTIALS_FILE)
        return True
    return False
