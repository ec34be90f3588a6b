#!/usr/bin/env python3
"""
Match scoring between a parsed track guess and a Spotify candidate.

Weights: Artist 40%, Title 50%, Strategy bonus up to 10%
Score range: 0-100
"""

import math
import logging

from constants import CONFIDENCE_WEIGHTS, CONFIDENCE_LEVELS, STRATEGY_BONUSES
from text_utils import normalize_for_comparison

logger = logging.getLogger(__name__)


def _words_match(word1, word2):
    """Lenient word comparison: equal, contained, or same 3-letter stem."""
    if word1 == word2 or word1 in word2 or word2 in word1:
        return True
    if len(word1) > 3 and len(word2) > 3:
        return word1.startswith(word2[:3]) or word2.startswith(word1[:3])
    return False


def calculate_string_similarity(str1, str2):
    """
    Word-overlap similarity between two normalized strings.

    Deliberately forgiving (substrings and shared prefixes count) so that
    abbreviations and transliterations in file names still line up with
    Spotify's canonical names.

    Returns:
        Float in [0.0, 1.0]
    """
    if str1 == str2:
        return 1.0
    if not str1 or not str2:
        return 0.0

    # Substring matches score high without looking at words
    if str1 in str2 or str2 in str1:
        return 0.9

    words1 = [w for w in str1.split() if w]
    words2 = [w for w in str2.split() if w]

    if not words1 or not words2:
        return 0.0

    matching_words = sum(
        1 for word1 in words1
        if any(_words_match(word1, word2) for word2 in words2)
    )

    return matching_words / max(len(words1), len(words2))


def get_strategy_bonus(strategy):
    """Bonus for the search strategy that produced the match (0 if unknown)."""
    return STRATEGY_BONUSES.get(strategy, 0)


def combine_confidence(artist_similarity, title_similarity, strategy):
    """Weighted sum of the components as an integer percentage."""
    raw = (artist_similarity * CONFIDENCE_WEIGHTS['artist']
           + title_similarity * CONFIDENCE_WEIGHTS['title']
           + get_strategy_bonus(strategy))
    # Round half up so .5 never depends on float parity
    score = int(math.floor(min(raw, 1.0) * 100 + 0.5))
    return max(0, min(100, score))


def calculate_confidence_score(guess, candidate, strategy):
    """
    Confidence that a Spotify track is the one a guess describes.

    Args:
        guess: TrackGuess from the parser
        candidate: CatalogTrack returned by the search, or None
        strategy: Name of the strategy that found the candidate

    Returns:
        Integer 0-100
    """
    if candidate is None:
        return 0

    artist_similarity = calculate_string_similarity(
        normalize_for_comparison(guess.artist),
        normalize_for_comparison(candidate.artist_names)
    )
    title_similarity = calculate_string_similarity(
        normalize_for_comparison(guess.title),
        normalize_for_comparison(candidate.name)
    )

    score = combine_confidence(artist_similarity, title_similarity, strategy)
    logger.debug(
        f"Confidence {score}% for '{guess.artist} - {guess.title}' -> "
        f"'{candidate.artist_names} - {candidate.name}' "
        f"(artist {artist_similarity:.2f}, title {title_similarity:.2f}, {strategy})"
    )
    return score


def get_confidence_level(confidence):
    """Return the confidence band dict (name, min, label, color) for a score."""
    if not isinstance(confidence, (int, float)):
        return CONFIDENCE_LEVELS[-1]

    for level in CONFIDENCE_LEVELS:
        if confidence >= level['min']:
            return level
    return CONFIDENCE_LEVELS[-1]


def _scored_tracks(tracks):
    # Tracks whose search errored carry no confidence
    return [track for track in tracks if track.search_status != "error"]


def calculate_average_confidence(tracks):
    """Rounded mean confidence of the searched tracks (0 if there are none)."""
    scored = _scored_tracks(tracks)
    if not scored:
        return 0
    total = sum(track.confidence for track in scored)
    return int(math.floor(total / len(scored) + 0.5))


def calculate_confidence_distribution(tracks):
    """
    Count searched tracks per confidence band.

    Returns:
        Dict of band name -> count, highest band first, every band present
    """
    distribution = {level['name']: 0 for level in CONFIDENCE_LEVELS}
    for track in _scored_tracks(tracks):
        distribution[get_confidence_level(track.confidence)['name']] += 1
    return distribution
