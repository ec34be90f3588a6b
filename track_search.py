#!/usr/bin/env python3
"""
Track search against the Spotify catalog.

Each guess is looked up with an ordered list of query strategies, most
specific first. The first strategy that returns anything wins:

    1. artist:<artist> track:<title>         (3 results)
    2. <artist> <title>                      (3 results)
    3. <title>, preferring the right artist  (5 results)
    4. punctuation-stripped artist and title (3 results, only if different)

A failed request only costs its own step. If every step that ran failed,
the search raises instead of reporting "no match".
"""

import time
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from constants import (
    SEARCH_LIMITS, STRATEGY_ARTIST_TRACK, STRATEGY_COMBINED,
    STRATEGY_TITLE_ARTIST_MATCH, STRATEGY_TITLE_ONLY, STRATEGY_CLEANED
)
from config import get_search_delay, get_auto_select_threshold, is_progress_bar_enabled
from errors import AuthRequired, SearchTransportFailure, SearchUnavailable
from models import AnnotatedTrack, CatalogTrack, SearchResult
from text_utils import strip_punctuation
from track_matching import calculate_confidence_score
from tqdm_utils import create_progress_bar, update_progress_bar, close_progress_bar

logger = logging.getLogger(__name__)


def _select_first(items, strategy, artist):
    return items[0], strategy.name


def _artist_in_track(track, artist):
    """Case-insensitive substring match, either direction, on any credited artist."""
    target = artist.lower()
    for credited in track.get('artists') or []:
        name = (credited.get('name') or '').lower()
        if name and (target in name or name in target):
            return True
    return False


def _select_by_artist(items, strategy, artist):
    for track in items:
        if _artist_in_track(track, artist):
            return track, STRATEGY_TITLE_ARTIST_MATCH
    return items[0], STRATEGY_TITLE_ONLY


def _cleaned_query(artist, title):
    clean_artist = strip_punctuation(artist)
    clean_title = strip_punctuation(title)
    if clean_artist == artist and clean_title == title:
        return None
    return f"{clean_artist} {clean_title}"


@dataclass(frozen=True)
class SearchStrategy:
    """
    One query formulation in the fallback chain.

    build_query returns None when the strategy does not apply to a guess;
    select picks (track, strategy name) from a non-empty result list.
    """
    name: str
    limit: int
    build_query: Callable[[str, str], Optional[str]]
    select: Callable[[list, "SearchStrategy", str], Tuple[dict, str]] = _select_first


SEARCH_STRATEGIES = (
    SearchStrategy(
        name=STRATEGY_ARTIST_TRACK,
        limit=SEARCH_LIMITS['artist_track'],
        build_query=lambda artist, title: f"artist:{artist} track:{title}"
    ),
    SearchStrategy(
        name=STRATEGY_COMBINED,
        limit=SEARCH_LIMITS['combined'],
        build_query=lambda artist, title: f"{artist} {title}"
    ),
    SearchStrategy(
        name=STRATEGY_TITLE_ARTIST_MATCH,
        limit=SEARCH_LIMITS['title_only'],
        build_query=lambda artist, title: title,
        select=_select_by_artist
    ),
    SearchStrategy(
        name=STRATEGY_CLEANED,
        limit=SEARCH_LIMITS['cleaned'],
        build_query=_cleaned_query
    ),
)


def search_spotify_track(session, artist, title, strategies=SEARCH_STRATEGIES):
    """
    Find the Spotify track for one (artist, title) guess.

    Args:
        session: SpotifySession (anything with search_tracks(query, limit))
        artist: Guessed artist
        title: Guessed title
        strategies: Ordered strategies to try

    Returns:
        SearchResult; SearchResult.empty() when nothing matched

    Raises:
        AuthRequired: every attempted step was rejected as unauthorized
        SearchUnavailable: every attempted step failed in transport
    """
    logger.debug(f"Searching: '{artist}' - '{title}'")

    attempted = 0
    failures = []

    for strategy in strategies:
        query = strategy.build_query(artist, title)
        if query is None:
            continue

        attempted += 1
        try:
            items = session.search_tracks(query, strategy.limit)
        except SearchTransportFailure as e:
            logger.warning(f"{strategy.name} failed: {e}")
            failures.append(e)
            continue

        if items:
            track, strategy_name = strategy.select(items, strategy, artist)
            logger.debug(f"Found with {strategy_name}")
            return SearchResult(CatalogTrack.from_spotify(track), strategy_name)

    if attempted and len(failures) == attempted:
        if all(f.is_auth_error for f in failures):
            raise AuthRequired()
        raise SearchUnavailable(failures=failures)

    logger.debug(f"No results found for '{artist}' - '{title}'")
    return SearchResult.empty()


def annotate_track(guess, result, auto_select_threshold=0):
    """Score a search result and wrap it for review."""
    confidence = calculate_confidence_score(guess, result.candidate, result.strategy_used)
    return AnnotatedTrack(
        guess=guess,
        result=result,
        confidence=confidence,
        selected=result.found and confidence >= auto_select_threshold,
        search_status="found" if result.found else "not_found"
    )


def search_tracks_batch(session, guesses, delay=None, cancel_event=None,
                        show_progress=None, on_result=None, auto_select_threshold=None,
                        strategies=SEARCH_STRATEGIES) -> List[AnnotatedTrack]:
    """
    Search every guess in order, one at a time, and score the matches.

    Args:
        session: SpotifySession
        guesses: List of TrackGuess
        delay: Seconds to wait between consecutive searches (default from config)
        cancel_event: Optional threading.Event; once set, no further searches start
        show_progress: Show a tqdm progress bar (default from config)
        on_result: Optional callback(index, annotated_track) after each track
        auto_select_threshold: Minimum confidence for a match to start selected
        strategies: Ordered strategies to try

    Returns:
        List of AnnotatedTrack, one per searched guess (shorter than guesses
        if cancelled)

    Raises:
        AuthRequired: no valid credential; aborts the batch
        SearchUnavailable: every track failed to search; partial_results holds them
    """
    session.require_auth()

    if delay is None:
        delay = get_search_delay()
    if show_progress is None:
        show_progress = is_progress_bar_enabled()
    if auto_select_threshold is None:
        auto_select_threshold = get_auto_select_threshold()

    results = []
    failures = []
    total = len(guesses)

    progress_bar = create_progress_bar(total=total, desc="Searching tracks", unit="track",
                                       disable=not show_progress)
    try:
        for i, guess in enumerate(guesses):
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Search cancelled after {len(results)}/{total} tracks")
                break

            logger.debug(f"Searching track {i + 1}/{total}: {guess.artist} - {guess.title}")

            try:
                result = search_spotify_track(session, guess.artist, guess.title, strategies)
                annotated = annotate_track(guess, result, auto_select_threshold)
            except SearchUnavailable as e:
                failures.append(e)
                annotated = AnnotatedTrack(guess=guess, result=SearchResult.empty(), search_status="error")

            logger.debug(f"Confidence: {annotated.confidence}% ({annotated.result.strategy_used or 'no match'})")
            results.append(annotated)

            if on_result is not None:
                on_result(i, annotated)
            update_progress_bar(progress_bar, 1)

            # Pause between searches, not after the last one
            if delay and i < total - 1:
                time.sleep(delay)
    finally:
        close_progress_bar(progress_bar)

    if results and len(failures) == len(results):
        raise SearchUnavailable(failures=failures, partial_results=results)

    found = sum(1 for track in results if track.result.found)
    logger.info(f"Completed searching {len(results)} tracks ({found} found)")
    return results
