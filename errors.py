#!/usr/bin/env python3
"""
Exception types shared by the parser, search and playlist modules.

Every error carries a short machine-readable ``code`` so the CLI (or any
other caller) can tell user-actionable conditions apart.
"""

from constants import ERROR_MESSAGES


class YCDAlchemistError(Exception):
    """Base class for all YCD Alchemist errors."""

    code = "INTERNAL_ERROR"

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class ParseFailure(YCDAlchemistError):
    """A single line could not be turned into a track guess."""

    code = "PARSE_FAILURE"

    def __init__(self, line, reason=None):
        super().__init__(f"Could not parse line: {line!r}" + (f" ({reason})" if reason else ""))
        self.line = line
        self.reason = reason


class ValidationError(YCDAlchemistError):
    """Input (upload, playlist name, selection) failed validation."""

    code = "VALIDATION_ERROR"

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = list(errors or [])

    def __str__(self):
        if self.errors:
            return f"{self.message}: {'; '.join(self.errors)}"
        return self.message


class SearchTransportFailure(YCDAlchemistError):
    """One catalog query failed at the transport or auth level."""

    code = "SEARCH_TRANSPORT_FAILURE"

    def __init__(self, message, http_status=None, query=None):
        super().__init__(message)
        self.http_status = http_status
        self.query = query

    @property
    def is_auth_error(self):
        return self.http_status == 401


class SearchUnavailable(YCDAlchemistError):
    """Searching failed outright, as opposed to finding no match."""

    code = "SEARCH_UNAVAILABLE"

    def __init__(self, message=None, failures=None, partial_results=None):
        super().__init__(message or ERROR_MESSAGES['search_unavailable'])
        self.failures = list(failures or [])
        self.partial_results = list(partial_results or [])


class AuthRequired(YCDAlchemistError):
    """No valid Spotify access credential is available."""

    code = "AUTH_REQUIRED"

    def __init__(self, message=None):
        super().__init__(message or ERROR_MESSAGES['auth_required'])


class NoTracksFound(YCDAlchemistError):
    """An upload produced zero parseable tracks."""

    code = "NO_TRACKS_FOUND"

    def __init__(self, message=None, skipped=0):
        super().__init__(message or ERROR_MESSAGES['no_tracks_found'])
        self.skipped = skipped


class CatalogError(YCDAlchemistError):
    """A non-search catalog call (profile, playlist) failed."""

    code = "CATALOG_ERROR"

    def __init__(self, message, http_status=None):
        super().__init__(message)
        self.http_status = http_status
