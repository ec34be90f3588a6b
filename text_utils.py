#!/usr/bin/env python3
"""
String normalization shared by path parsing, search and scoring.
"""

import re

_WHITESPACE_RE = re.compile(r'\s+')
_PUNCTUATION_RE = re.compile(r'[^\w\s]')


def collapse_whitespace(text):
    """Collapse runs of whitespace to a single space and trim."""
    return _WHITESPACE_RE.sub(' ', text).strip()


def strip_punctuation(text):
    """Drop every character that is neither a word character nor whitespace."""
    return _PUNCTUATION_RE.sub('', text).strip()


def normalize_for_comparison(text):
    """
    Normalize a string for similarity scoring.

    Lower-cases, removes punctuation and collapses whitespace, so
    "AC/DC -  Back In Black!" becomes "acdc back in black".
    """
    if not text:
        return ""
    return collapse_whitespace(_PUNCTUATION_RE.sub('', text.lower()))
