#!/usr/bin/env python3
"""
YCD Alchemist

Converts a YCD playlist export into a Spotify playlist.

Features:
- Reconstructs artist and title from the file paths in the export
- Handles legacy (Windows-1255) exports as well as UTF-8
- Looks every track up on Spotify with a fallback chain of search strategies
- Scores each match with a confidence percentage
- Lets you review and toggle matches before anything is created
- Creates the playlist and adds the selected tracks in batches
"""

import os
import sys
import logging
import argparse
import threading
import concurrent.futures

import colorama
from colorama import Fore, Style

from constants import APP_NAME, APP_VERSION, CONFIDENCE_LEVELS, DEFAULT_PLAYLIST_DESCRIPTION
from config import (
    config, get_search_delay, get_auto_select_threshold, is_playlist_public, is_colored_output_enabled
)
from credentials_manager import clear_spotify_credentials
from errors import (
    AuthRequired, CatalogError, NoTracksFound, SearchUnavailable, ValidationError
)
from playlist_creator import create_playlist_from_tracks
from print_utils import (
    print_header, print_info, print_success, print_warning, print_error, print_status,
    print_separator
)
from spotify_utils import create_spotify_session, show_spotify_setup_help
from track_matching import (
    get_confidence_level, calculate_average_confidence, calculate_confidence_distribution
)
from track_search import search_tracks_batch
from ycd_parser import parse_ycd_file

# Initialize colorama for cross-platform color support
colorama.init(autoreset=True)

logger = logging.getLogger(__name__)


def parse_number_ranges(selection, max_value):
    """Parse comma-separated numbers and ranges like '1,3,5-10,15'."""
    indices = set()

    for part in selection.split(','):
        part = part.strip()
        if not part:
            continue

        if '-' in part:
            try:
                start, end = part.split('-', 1)
                start = int(start.strip())
                end = int(end.strip())
            except ValueError:
                raise ValueError(f"Invalid range format: {part}")

            if start < 1 or end > max_value or start > end:
                raise ValueError(f"Invalid range: {part}")

            indices.update(range(start, end + 1))
        else:
            try:
                num = int(part)
            except ValueError:
                raise ValueError(f"Invalid number: {part}")

            if num < 1 or num > max_value:
                raise ValueError(f"Number out of range: {num}")
            indices.add(num)

    return sorted(indices)


def format_track_line(index, track):
    """One table row: selection box, guess, match and confidence."""
    box = f"{Fore.GREEN}[x]" if track.selected else f"{Fore.WHITE}[ ]"
    guess = f"{track.guess.artist} - {track.guess.title}"

    candidate = track.result.candidate
    if candidate is None:
        status = "search failed" if track.search_status == "error" else "not found"
        return f"{box} {index:>3}. {guess}{Style.RESET_ALL}  {Fore.RED}✗ {status}{Style.RESET_ALL}"

    level = get_confidence_level(track.confidence)
    return (
        f"{box} {index:>3}. {guess}{Style.RESET_ALL}  →  "
        f"{candidate.artist_names} - {candidate.name}  "
        f"{level['color']}{track.confidence}% {level['label']}{Style.RESET_ALL} "
        f"({track.result.strategy_used})"
    )


def print_track_table(tracks):
    """Print every annotated track with its selection state."""
    for i, track in enumerate(tracks, 1):
        print(format_track_line(i, track))

    found = sum(1 for t in tracks if t.result.found)
    selected = sum(1 for t in tracks if t.selected)
    print_separator()
    print(f"{Fore.CYAN}{found}/{len(tracks)} found on Spotify, {selected} selected")
    for line in format_confidence_summary(tracks):
        print(line)


def format_confidence_summary(tracks):
    """Average confidence and per-band counts; empty when nothing was scored."""
    if not any(track.search_status != "error" for track in tracks):
        return []

    average = calculate_average_confidence(tracks)
    level = get_confidence_level(average)
    distribution = calculate_confidence_distribution(tracks)

    bands = "  ".join(
        f"{band['color']}{band['label']}: {distribution[band['name']]}{Style.RESET_ALL}"
        for band in CONFIDENCE_LEVELS
    )
    return [
        f"{Fore.CYAN}Avg. confidence: {level['color']}{average}%{Style.RESET_ALL}",
        f"{Fore.CYAN}Match quality: {Style.RESET_ALL}{bands}"
    ]


def review_tracks(tracks, input_func=input):
    """
    Let the user toggle which matches go into the playlist.

    Returns:
        True to create the playlist, False to abort
    """
    while True:
        print_track_table(tracks)
        print(f"\n{Fore.CYAN}Options:")
        print("  numbers/ranges (e.g. 1,3,5-8)  toggle tracks")
        print("  a  select all found tracks")
        print("  n  select none")
        print("  c  create playlist with selected tracks")
        print("  q  quit without creating a playlist")

        choice = input_func(f"\n{Fore.CYAN}Choice: ").strip().lower()

        if choice == 'c':
            return True
        if choice == 'q':
            return False
        if choice == 'a':
            for track in tracks:
                track.selected = track.result.found
            continue
        if choice == 'n':
            for track in tracks:
                track.selected = False
            continue

        try:
            numbers = parse_number_ranges(choice, len(tracks))
        except ValueError as e:
            print_warning(str(e))
            continue

        for number in numbers:
            track = tracks[number - 1]
            if not track.result.found:
                print_warning(f"Track {number} has no Spotify match and cannot be selected")
                continue
            track.toggle()


def run_search(session, guesses, delay, threshold):
    """
    Search in a worker thread so Ctrl-C can stop the batch cleanly.

    Tracks searched before the interrupt are kept.
    """
    cancel_event = threading.Event()

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(
            search_tracks_batch, session, guesses,
            delay=delay, cancel_event=cancel_event, auto_select_threshold=threshold
        )
        try:
            return future.result()
        except KeyboardInterrupt:
            cancel_event.set()
            print_warning("\nStopping search, keeping the tracks searched so far...")
            return future.result()


def apply_maintenance(args):
    """
    Run the settings actions requested on the command line.

    Credentials are reset first, then the config file is reset, updated
    and shown, in that order.

    Raises:
        ValueError: a --set-config entry is malformed or names an unknown setting
    """
    if args.reset_credentials:
        if clear_spotify_credentials():
            print_success("Stored Spotify credentials removed")
        else:
            print_info("No stored Spotify credentials to remove")

    if args.reset_config:
        config.reset_to_defaults()
        print_success("Settings restored to defaults")

    if args.set_config:
        for entry in args.set_config:
            key, sep, raw = entry.partition('=')
            if not sep:
                raise ValueError(f"Expected KEY=VALUE, got '{entry}'")
            try:
                value = config.set_from_string(key.strip(), raw.strip())
            except TypeError as e:
                raise ValueError(f"Invalid value for {key.strip()}: {e}")
            print_info(f"{key.strip()} = {value!r}")
        config.save_config()
        print_success(f"Settings saved to {config.config_file}")

    if args.show_config:
        print_header("Settings")
        for key, value in config.all_settings.items():
            print(f"  {Fore.CYAN}{key}{Style.RESET_ALL}: {value!r}")


def main(argv=None):
    """Main function to run the script."""
    parser = argparse.ArgumentParser(description="Convert a YCD playlist export into a Spotify playlist")
    parser.add_argument("file", nargs="?", help="YCD export to convert (.ycd, .txt, .m3u, .m3u8)")
    parser.add_argument("--name", help="Playlist name (default: the file name)")
    parser.add_argument("--description", default=DEFAULT_PLAYLIST_DESCRIPTION, help="Playlist description")
    parser.add_argument("--private", action="store_true", help="Create a private playlist")
    parser.add_argument("--threshold", type=int, default=None,
                        help="Only pre-select matches with at least this confidence (default: 0)")
    parser.add_argument("--delay", type=float, default=None,
                        help="Seconds between track searches (default: 0.1)")
    parser.add_argument("--dry-run", action="store_true", help="Search and report only, don't create a playlist")
    parser.add_argument("--yes", action="store_true", help="Skip review and create the playlist right away")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")

    maintenance = parser.add_argument_group("settings")
    maintenance.add_argument("--show-config", action="store_true", help="Print the current settings")
    maintenance.add_argument("--set-config", action="append", metavar="KEY=VALUE", default=[],
                             help="Save a setting to the config file (repeatable)")
    maintenance.add_argument("--reset-config", action="store_true", help="Restore the default settings")
    maintenance.add_argument("--reset-credentials", action="store_true",
                             help="Forget the stored Spotify credentials")

    args = parser.parse_args(argv)

    has_maintenance = args.show_config or args.set_config or args.reset_config or args.reset_credentials
    if not args.file and not has_maintenance:
        parser.error("a YCD file is required")

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    if args.debug:
        logger.debug("Debug logging enabled")

    if args.no_color or not is_colored_output_enabled():
        # Re-wrap stdout so colorama drops the ANSI codes
        colorama.deinit()
        colorama.init(strip=True, autoreset=True)

    if has_maintenance:
        try:
            apply_maintenance(args)
        except ValueError as e:
            print_error(f"❌ {e}")
            return 1
        if not args.file:
            return 0

    delay = args.delay if args.delay is not None else get_search_delay()
    threshold = args.threshold if args.threshold is not None else get_auto_select_threshold()
    public = is_playlist_public() and not args.private
    playlist_name = args.name or os.path.splitext(os.path.basename(args.file))[0]

    print_header(f"{APP_NAME} v{APP_VERSION}")

    # Parse the export
    try:
        guesses = parse_ycd_file(args.file)
    except (ValidationError, NoTracksFound) as e:
        print_error(f"❌ {e}")
        return 1

    print_success(f"Parsed {len(guesses)} tracks from {os.path.basename(args.file)}")

    try:
        print_info("Authenticating with Spotify...")
        session = create_spotify_session()

        tracks = run_search(session, guesses, delay, threshold)

        if len(tracks) < len(guesses):
            print_warning(f"Search stopped early: {len(tracks)}/{len(guesses)} tracks searched")

        if args.dry_run or args.yes:
            print_track_table(tracks)

        if args.dry_run:
            print_info("Dry run, no playlist created.")
            return 0

        if not args.yes and not review_tracks(tracks):
            print_info("No playlist created.")
            return 0

        summary = create_playlist_from_tracks(
            session, playlist_name, tracks, description=args.description, public=public
        )
    except AuthRequired as e:
        print_error(f"❌ {e}")
        show_spotify_setup_help()
        return 1
    except (SearchUnavailable, ValidationError, CatalogError) as e:
        print_error(f"❌ {e}")
        return 1
    except KeyboardInterrupt:
        print_error("\n❌ Interrupted, no playlist created.")
        return 130
    except EOFError:
        print_error("\n❌ No input available for review. Use --yes or --dry-run when not running interactively.")
        return 1

    print_status('success', f"Created playlist '{summary['name']}' with {summary['tracks_added']} tracks")
    if summary['url']:
        print_info(f"Open it at: {summary['url']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
