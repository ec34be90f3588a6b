#!/usr/bin/env python3
"""
Unit tests for track_search.py

The Spotify session is replaced with a stub that answers queries from a
dict, so the strategy order, early exit and failure handling can be
checked call by call.
"""

import unittest
import threading
import sys
import os
from unittest.mock import patch

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from constants import (
    STRATEGY_ARTIST_TRACK, STRATEGY_COMBINED, STRATEGY_TITLE_ARTIST_MATCH,
    STRATEGY_TITLE_ONLY, STRATEGY_CLEANED
)
from errors import AuthRequired, SearchTransportFailure, SearchUnavailable
from models import TrackGuess
from spotify_utils import SpotifySession
from track_search import search_spotify_track, search_tracks_batch


def make_track(name, artists, track_id=None):
    track_id = track_id or name.lower().replace(' ', '')
    return {
        'id': track_id,
        'name': name,
        'artists': [{'name': a} for a in artists],
        'album': {'name': 'Album'},
        'uri': f"spotify:track:{track_id}",
        'external_urls': {'spotify': f"https://open.spotify.com/track/{track_id}"},
        'duration_ms': 200000
    }


def failure(status=500):
    return SearchTransportFailure("boom", http_status=status)


class StubSession:
    """Answers search_tracks from a query -> items (or exception) dict."""

    def __init__(self, responses=None, default=None):
        self.responses = responses or {}
        self.default = default
        self.calls = []

    def require_auth(self):
        return self

    def search_tracks(self, query, limit):
        self.calls.append((query, limit))
        response = self.responses.get(query, self.default)
        if isinstance(response, Exception):
            raise response
        return response or []


class TestSearchStrategies(unittest.TestCase):
    """Test the four-step fallback for a single guess."""

    def test_first_strategy_hit_stops_the_chain(self):
        session = StubSession({
            "artist:PSY track:Gangnam Style": [make_track("Gangnam Style", ["PSY"])]
        })

        result = search_spotify_track(session, "PSY", "Gangnam Style")

        self.assertEqual(session.calls, [("artist:PSY track:Gangnam Style", 3)])
        self.assertEqual(result.strategy_used, STRATEGY_ARTIST_TRACK)
        self.assertEqual(result.candidate.name, "Gangnam Style")
        self.assertEqual(result.candidate.uri, "spotify:track:gangnamstyle")

    def test_combined_search(self):
        session = StubSession({
            "Coldplay Yellow": [make_track("Yellow", ["Coldplay"])]
        })

        result = search_spotify_track(session, "Coldplay", "Yellow")

        self.assertEqual([q for q, _ in session.calls], ["artist:Coldplay track:Yellow", "Coldplay Yellow"])
        self.assertEqual(result.strategy_used, STRATEGY_COMBINED)

    def test_title_search_prefers_matching_artist(self):
        session = StubSession({
            "Yellow": [
                make_track("Yellow", ["Someone Else"], "a"),
                make_track("Yellow", ["Coldplay"], "b"),
            ]
        })

        result = search_spotify_track(session, "coldplay", "Yellow")

        self.assertEqual(session.calls[-1], ("Yellow", 5))
        self.assertEqual(result.strategy_used, STRATEGY_TITLE_ARTIST_MATCH)
        self.assertEqual(result.candidate.id, "b")

    def test_title_search_without_artist_match(self):
        session = StubSession({
            "Yellow": [
                make_track("Yellow", ["Someone Else"], "a"),
                make_track("Yellow", ["Another Band"], "b"),
            ]
        })

        result = search_spotify_track(session, "Coldplay", "Yellow")

        self.assertEqual(result.strategy_used, STRATEGY_TITLE_ONLY)
        self.assertEqual(result.candidate.id, "a")

    def test_cleaned_search_terms(self):
        session = StubSession({
            "Pnk So What": [make_track("So What", ["P!nk"])]
        })

        result = search_spotify_track(session, "P!nk", "So What")

        self.assertEqual([q for q, _ in session.calls], [
            "artist:P!nk track:So What", "P!nk So What", "So What", "Pnk So What"
        ])
        self.assertEqual(session.calls[-1][1], 3)
        self.assertEqual(result.strategy_used, STRATEGY_CLEANED)

    def test_no_match_skips_redundant_cleaned_query(self):
        session = StubSession()

        result = search_spotify_track(session, "Unknown Band", "Obscure Song")

        self.assertEqual(len(session.calls), 3)
        self.assertFalse(result.found)
        self.assertIsNone(result.candidate)
        self.assertIsNone(result.strategy_used)

    def test_failed_step_falls_through(self):
        session = StubSession({
            "artist:Coldplay track:Yellow": failure(500),
            "Coldplay Yellow": [make_track("Yellow", ["Coldplay"])]
        })

        result = search_spotify_track(session, "Coldplay", "Yellow")

        self.assertEqual(result.strategy_used, STRATEGY_COMBINED)

    def test_partial_failure_then_nothing_is_not_found(self):
        session = StubSession({"artist:Coldplay track:Yellow": failure(503)})

        result = search_spotify_track(session, "Coldplay", "Yellow")

        self.assertFalse(result.found)

    def test_every_step_failing_is_unavailable(self):
        session = StubSession(default=failure(503))

        with self.assertRaises(SearchUnavailable) as ctx:
            search_spotify_track(session, "Coldplay", "Yellow")
        self.assertEqual(len(ctx.exception.failures), 3)

    def test_every_step_unauthorized_is_auth_required(self):
        session = StubSession(default=failure(401))

        with self.assertRaises(AuthRequired):
            search_spotify_track(session, "P!nk", "So What")
        self.assertEqual(len(session.calls), 4)


class TestSearchBatch(unittest.TestCase):
    """Test search_tracks_batch."""

    def setUp(self):
        self.guesses = [
            TrackGuess("PSY", "Gangnam Style", "PSY - Gangnam Style.mp3"),
            TrackGuess("Coldplay", "Yellow", "Coldplay - Yellow.mp3"),
            TrackGuess("Unknown Band", "Obscure Song", "Unknown Band - Obscure Song.mp3"),
        ]
        self.responses = {
            "artist:PSY track:Gangnam Style": [make_track("Gangnam Style", ["PSY"])],
            "artist:Coldplay track:Yellow": [make_track("Yellow", ["Coldplay"])],
        }

    @patch('track_search.time.sleep')
    def test_results_in_input_order_with_delay_between(self, mock_sleep):
        session = StubSession(self.responses)

        results = search_tracks_batch(session, self.guesses, delay=0.1, show_progress=False,
                                      auto_select_threshold=0)

        self.assertEqual([r.guess for r in results], self.guesses)
        self.assertEqual(mock_sleep.call_count, 2)
        mock_sleep.assert_called_with(0.1)

        self.assertEqual(results[0].confidence, 100)
        self.assertTrue(results[0].selected)
        self.assertEqual(results[0].search_status, "found")
        self.assertEqual(results[2].confidence, 0)
        self.assertFalse(results[2].selected)
        self.assertEqual(results[2].search_status, "not_found")

    @patch('track_search.time.sleep')
    def test_threshold_controls_preselection(self, mock_sleep):
        guesses = [TrackGuess("Adele", "Hello", "x")]
        session = StubSession({"Hello": [make_track("Hello", ["Someone Else"])]})

        results = search_tracks_batch(session, guesses, delay=0, show_progress=False,
                                      auto_select_threshold=95)

        self.assertTrue(results[0].result.found)
        self.assertFalse(results[0].selected)

    @patch('track_search.time.sleep')
    def test_cancel_stops_before_next_search(self, mock_sleep):
        session = StubSession(self.responses)
        cancel_event = threading.Event()
        seen = []

        def on_result(index, track):
            seen.append(index)
            cancel_event.set()

        results = search_tracks_batch(session, self.guesses, delay=0.1, cancel_event=cancel_event,
                                      show_progress=False, on_result=on_result)

        self.assertEqual(len(results), 1)
        self.assertEqual(seen, [0])
        self.assertEqual(len(session.calls), 1)

    @patch('track_search.time.sleep')
    def test_single_track_failure_is_marked(self, mock_sleep):
        responses = dict(self.responses)
        for query in ("artist:Unknown Band track:Obscure Song", "Unknown Band Obscure Song", "Obscure Song"):
            responses[query] = failure(503)
        session = StubSession(responses)

        results = search_tracks_batch(session, self.guesses, delay=0, show_progress=False)

        self.assertEqual(len(results), 3)
        self.assertEqual(results[2].search_status, "error")
        self.assertFalse(results[2].selected)
        self.assertTrue(results[0].result.found)

    @patch('track_search.time.sleep')
    def test_everything_failing_raises_with_partial_results(self, mock_sleep):
        session = StubSession(default=failure(503))

        with self.assertRaises(SearchUnavailable) as ctx:
            search_tracks_batch(session, self.guesses, delay=0, show_progress=False)
        self.assertEqual(len(ctx.exception.partial_results), 3)

    @patch('track_search.time.sleep')
    def test_unauthorized_aborts_batch(self, mock_sleep):
        session = StubSession(default=failure(401))

        with self.assertRaises(AuthRequired):
            search_tracks_batch(session, self.guesses, delay=0, show_progress=False)
        # Only the first guess was attempted
        self.assertEqual(len(session.calls), 3)

    def test_unauthenticated_session(self):
        with self.assertRaises(AuthRequired):
            search_tracks_batch(SpotifySession(None), self.guesses, delay=0, show_progress=False)


if __name__ == '__main__':
    unittest.main()
