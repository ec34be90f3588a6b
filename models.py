#!/usr/bin/env python3
"""
Data model for the track reconciliation pipeline.

TrackGuess -> SearchResult -> AnnotatedTrack, with CatalogTrack as the
read-only view of a Spotify search result.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class TrackGuess:
    """Artist/title reconstructed from one playlist line."""
    artist: str
    title: str
    original_path: str

    def __post_init__(self):
        if not self.artist or not self.title:
            raise ValueError("TrackGuess requires a non-empty artist and title")


@dataclass(frozen=True)
class CatalogTrack:
    """The fields of a Spotify track this project reads."""
    id: str
    name: str
    artists: List[str]
    album: str = ""
    uri: str = ""
    external_url: str = ""
    duration_ms: int = 0

    @classmethod
    def from_spotify(cls, item):
        """Build from a track object as returned by the search endpoint."""
        album = item.get('album') or {}
        external_urls = item.get('external_urls') or {}
        return cls(
            id=item.get('id') or "",
            name=item.get('name') or "",
            artists=[a.get('name', '') for a in item.get('artists') or []],
            album=album.get('name', ''),
            uri=item.get('uri') or "",
            external_url=external_urls.get('spotify', ''),
            duration_ms=item.get('duration_ms') or 0
        )

    @property
    def artist_names(self):
        return ", ".join(self.artists)


@dataclass(frozen=True)
class SearchResult:
    """Outcome of the strategy chain for one guess."""
    candidate: Optional[CatalogTrack] = None
    strategy_used: Optional[str] = None

    def __post_init__(self):
        if (self.candidate is None) != (self.strategy_used is None):
            raise ValueError("candidate and strategy_used must both be set or both be None")

    @classmethod
    def empty(cls):
        return cls(None, None)

    @property
    def found(self):
        return self.candidate is not None


@dataclass
class AnnotatedTrack:
    """A guess with its match and confidence, ready for review."""
    guess: TrackGuess
    result: SearchResult
    confidence: int = 0
    selected: bool = False
    search_status: str = field(default="not_found")

    @property
    def uri(self):
        return self.result.candidate.uri if self.result.candidate else None

    def toggle(self):
        """Flip selection; tracks without a match can never be selected."""
        self.selected = (not self.selected) and self.result.found
        return self.selected
