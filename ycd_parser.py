#!/usr/bin/env python3
"""
YCD Playlist Parser

Turns a YCD playlist export (one file-system path per line) into track
guesses. Each path is split into its components, the file name is matched
against the "Artist - Album - 01 - Title" and "Artist - Title" layouts, and
folder names are used as a last resort for the artist.

Example:
    M:\\Music\\David Guetta\\David Guetta - Listen - 03 - Lovers On The Sun.mp3
    -> artist "David Guetta", title "Lovers On The Sun"
"""

import os
import re
import logging

from constants import (
    ALLOWED_FILE_TYPES, MAX_FILE_SIZE, UNKNOWN_ARTIST, ERROR_MESSAGES
)
from config import get_legacy_encoding
from errors import ParseFailure, ValidationError, NoTracksFound
from models import TrackGuess
from text_utils import collapse_whitespace

logger = logging.getLogger(__name__)

# "Artist - Album - 01 - Title"
COMPLEX_PATTERN = re.compile(r'^(.+?)\s*-\s*(.+?)\s*-\s*\d+\s*-\s*(.+)$')
# "Artist - Title", shortest artist wins when there are several dashes
SIMPLE_PATTERN = re.compile(r'^(.+?)\s*-\s*(.+)$')

PATH_SEPARATORS = re.compile(r'[/\\]')
DRIVE_LETTER = re.compile(r'^[A-Z]:$')
EXTENSION = re.compile(r'\.[^.]*$')

# Folder names that never hold an artist
IGNORED_FOLDERS = {'Music'}

# Parenthesised release annotations dropped during cleanup
ANNOTATION_WORDS = ['Single', 'EP', 'Album', 'Version', 'Edit']

CLEANUP_PATTERNS = [
    (re.compile(r'^(The\s+|A\s+)', re.IGNORECASE), ''),          # leading article
    (re.compile(r'^\d+\s*[-.]?\s*'), ''),                         # leading track number
] + [
    (re.compile(r'\s*\([^)]*' + word + r'[^)]*\)\s*', re.IGNORECASE), ' ')
    for word in ANNOTATION_WORDS
] + [
    (re.compile(r'\s*-\s*\d+\s*$'), ''),                          # trailing "- 07"
    (re.compile(r'\s*\.\w+$'), ''),                               # dangling extension
]


def cleanup_string(text):
    """
    Strip common file-naming artifacts from an artist or title.

    Removes a leading "The "/"A ", a leading track number, parentheses
    mentioning Single/EP/Album/Version/Edit, a trailing "- <number>" and a
    trailing extension, then collapses whitespace.
    """
    for pattern, replacement in CLEANUP_PATTERNS:
        text = pattern.sub(replacement, text)
    return collapse_whitespace(text)


def _artist_from_folders(path_parts):
    """Pick the closest usable folder above the album folder."""
    for i in range(len(path_parts) - 3, -1, -1):
        part = path_parts[i]
        if part and part not in IGNORED_FOLDERS and not DRIVE_LETTER.match(part) and len(part) > 1:
            return part
    return ''


def extract_track_info_from_path(path):
    """
    Extract artist and title information from a playlist path.

    Returns:
        TrackGuess, or None when the line cannot be parsed
    """
    try:
        path_parts = PATH_SEPARATORS.split(path)
        filename = path_parts[-1]
        name_without_ext = EXTENSION.sub('', filename)

        logger.debug(f"Parsing: {name_without_ext}")

        complex_match = COMPLEX_PATTERN.match(name_without_ext)
        simple_match = None if complex_match else SIMPLE_PATTERN.match(name_without_ext)

        if complex_match:
            artist = complex_match.group(1).strip()
            title = complex_match.group(3).strip()
            logger.debug(f"Complex pattern matched: '{artist}' - '{title}'")
        elif simple_match:
            artist = simple_match.group(1).strip()
            title = simple_match.group(2).strip()
            logger.debug(f"Simple pattern matched: '{artist}' - '{title}'")
        else:
            title = name_without_ext.strip()
            artist = _artist_from_folders(path_parts)
            logger.debug(f"Fallback: '{artist}' - '{title}'")

        artist = cleanup_string(artist)
        title = cleanup_string(title)

        title = title or name_without_ext.strip()
        if not title:
            raise ParseFailure(path, "empty file name")

        return TrackGuess(
            artist=artist or UNKNOWN_ARTIST,
            title=title,
            original_path=path
        )
    except Exception as e:
        logger.warning(f"Error extracting track info: {e}")
        return None


def iter_ycd_lines(text):
    """Yield the trimmed, non-blank, non-comment lines of a YCD export."""
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith('#'):
            yield line


def parse_ycd_content(text):
    """Parse decoded YCD text into a list of TrackGuess, skipping bad lines."""
    tracks = []
    skipped = 0

    for line in iter_ycd_lines(text):
        track = extract_track_info_from_path(line)
        if track is None:
            skipped += 1
            continue
        tracks.append(track)

    if skipped:
        logger.warning(f"Skipped {skipped} unparseable line(s)")

    return tracks


def decode_ycd_bytes(data, legacy_encoding=None):
    """
    Decode raw upload bytes.

    UTF-8 (with or without BOM) is tried first; exports that are not valid
    UTF-8 are legacy 8-bit Windows files and are decoded with the configured
    code page (Hebrew cp1255 by default).
    """
    try:
        return data.decode('utf-8-sig')
    except UnicodeDecodeError:
        encoding = legacy_encoding or get_legacy_encoding()
        logger.info(f"File is not UTF-8, decoding as {encoding}")
        try:
            return data.decode(encoding, errors='replace')
        except LookupError:
            raise ValidationError(
                "File validation failed",
                [f"Unknown legacy encoding '{encoding}' (check legacy_encoding / YCD_ALCHEMIST_LEGACY_ENCODING)"]
            )


def validate_ycd_upload(filename, size):
    """Check an upload's name and size; raises ValidationError listing every problem."""
    errors = []

    if not filename:
        raise ValidationError("File validation failed", ["No file provided"])

    if size > MAX_FILE_SIZE:
        errors.append(f"File size exceeds maximum limit of {MAX_FILE_SIZE // (1024 * 1024)}MB")

    extension = os.path.splitext(filename)[1].lower()
    if extension not in ALLOWED_FILE_TYPES:
        errors.append(f"Invalid file type. Allowed types: {', '.join(ALLOWED_FILE_TYPES)}")

    if '..' in filename or '/' in filename or '\\' in filename:
        errors.append("Invalid filename containing path traversal characters")

    if errors:
        raise ValidationError("File validation failed", errors)


def parse_ycd_bytes(data, filename=None, legacy_encoding=None):
    """
    Validate, decode and parse an uploaded YCD export.

    Raises:
        ValidationError: the upload itself is unacceptable
        NoTracksFound: nothing in the file could be parsed
    """
    if filename is not None:
        validate_ycd_upload(filename, len(data))

    text = decode_ycd_bytes(data, legacy_encoding)
    tracks = parse_ycd_content(text)

    if not tracks:
        raise NoTracksFound(skipped=sum(1 for _ in iter_ycd_lines(text)))

    logger.info(f"Successfully parsed {len(tracks)} tracks")
    return tracks


def parse_ycd_file(file_path, legacy_encoding=None):
    """Read and parse a YCD export from disk."""
    if not os.path.isfile(file_path):
        raise ValidationError(ERROR_MESSAGES['file_not_found'], [file_path])

    filename = os.path.basename(file_path)
    validate_ycd_upload(filename, os.path.getsize(file_path))

    with open(file_path, 'rb') as f:
        data = f.read()

    return parse_ycd_bytes(data, legacy_encoding=legacy_encoding)
