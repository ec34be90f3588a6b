#!/usr/bin/env python3
"""
Configuration management for YCD Alchemist.
Handles loading settings from files and environment variables.
"""

import os
import json
import logging

from constants import CONFIG_DIR, CONFIG_FILE, RATE_LIMITS, DEFAULT_LEGACY_ENCODING

logger = logging.getLogger(__name__)

# Default configuration values
DEFAULT_CONFIG = {
    # Search settings
    "search_delay_seconds": RATE_LIMITS['search_delay'],
    "auto_select_threshold": 0,

    # Upload settings
    "legacy_encoding": DEFAULT_LEGACY_ENCODING,

    # Playlist settings
    "playlist_public": True,

    # UI settings
    "progress_bar_enabled": True,
    "colored_output": True
}

def _coerce_value(raw, type_func):
    """Convert a string setting (env var or command line) to its type."""
    if type_func == bool:
        return raw.strip().lower() in ('true', '1', 'yes', 'on')
    return type_func(raw)

class Config:
    """Configuration manager for YCD Alchemist."""

    def __init__(self, config_file=CONFIG_FILE):
        self.config_dir = os.path.dirname(config_file) or CONFIG_DIR
        self.config_file = config_file
        self._config = DEFAULT_CONFIG.copy()
        self.load_config()

    def load_config(self):
        """Load configuration from file and environment variables."""
        if os.path.exists(self.config_file):
            try:
                with open(self.config_file, 'r') as f:
                    file_config = json.load(f)
                    self._config.update(file_config)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Could not load config file: {e}")

        # Environment wins over the file
        self._load_from_env()

    def _load_from_env(self):
        """Load configuration from environment variables."""
        env_mappings = {
            "YCD_ALCHEMIST_SEARCH_DELAY": ("search_delay_seconds", float),
            "YCD_ALCHEMIST_AUTO_SELECT_THRESHOLD": ("auto_select_threshold", int),
            "YCD_ALCHEMIST_PLAYLIST_PUBLIC": ("playlist_public", bool),
            "YCD_ALCHEMIST_LEGACY_ENCODING": ("legacy_encoding", str),
            "YCD_ALCHEMIST_PROGRESS_BAR": ("progress_bar_enabled", bool),
            "YCD_ALCHEMIST_COLORED_OUTPUT": ("colored_output", bool),
        }

        for env_var, (config_key, type_func) in env_mappings.items():
            if env_var in os.environ:
                try:
                    value = _coerce_value(os.environ[env_var], type_func)
                    self._config[config_key] = value
                except (ValueError, TypeError) as e:
                    logger.warning(f"Invalid value for {env_var}: {e}")

    def get(self, key, default=None):
        """Get a configuration value."""
        return self._config.get(key, default)

    def set(self, key, value):
        """Set a configuration value."""
        self._config[key] = value

    def set_from_string(self, key, raw):
        """
        Set a known setting from its string form, converted to the default's type.

        Raises:
            ValueError: unknown key or a value of the wrong type
        """
        if key not in DEFAULT_CONFIG:
            raise ValueError(f"Unknown setting '{key}'. Known settings: {', '.join(DEFAULT_CONFIG)}")
        value = _coerce_value(raw, type(DEFAULT_CONFIG[key]))
        self.set(key, value)
        return value

    def save_config(self):
        """Save current configuration to file."""
        try:
            os.makedirs(self.config_dir, exist_ok=True)
            with open(self.config_file, 'w') as f:
                json.dump(self._config, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not save config file: {e}")

    def reset_to_defaults(self):
        """Reset configuration to default values."""
        self._config = DEFAULT_CONFIG.copy()
        self.save_config()

    @property
    def all_settings(self):
        """Get all configuration settings."""
        return self._config.copy()

# Global configuration instance
config = Config()

# Convenience functions for common settings
def get_search_delay():
    """Get the delay between consecutive track searches, in seconds."""
    return config.get("search_delay_seconds", RATE_LIMITS['search_delay'])

def get_auto_select_threshold():
    """Get the minimum confidence for a found track to start out selected."""
    return config.get("auto_select_threshold", 0)

def get_legacy_encoding():
    """Get the codec used for uploads that are not valid UTF-8."""
    return config.get("legacy_encoding", DEFAULT_LEGACY_ENCODING)

def is_playlist_public():
    """Check if new playlists are created public."""
    return config.get("playlist_public", True)

def is_progress_bar_enabled():
    """Check if progress bars are enabled."""
    return config.get("progress_bar_enabled", True)

def is_colored_output_enabled():
    """Check if colored output is enabled."""
    return config.get("colored_output", True)
