#!/usr/bin/env python3
"""
Shared print utilities for consistent terminal messaging.
"""

import colorama
from colorama import Fore, Style

# Initialize colorama
colorama.init(autoreset=True)

def print_success(text):
    """Print a success message in green."""
    print(f"{Fore.GREEN}{text}")

def print_error(text):
    """Print an error message in red."""
    print(f"{Fore.RED}{text}")

def print_warning(text):
    """Print a warning message in yellow."""
    print(f"{Fore.YELLOW}{text}")

def print_info(text):
    """Print an info message in blue."""
    print(f"{Fore.BLUE}{text}")

def print_header(text):
    """Print a formatted header in cyan."""
    print(f"\n{Fore.CYAN}{Style.BRIGHT}" + "="*50)
    print(f"{Fore.CYAN}{Style.BRIGHT}{text}")
    print(f"{Fore.CYAN}{Style.BRIGHT}" + "="*50)

def print_status(status_type, message):
    """
    Print a status message with appropriate icon and color.

    Args:
        status_type: 'success', 'error', 'warning', 'info'
        message: The message to display

    Example:
        ✓ Playlist created
        ✗ Track not found
    """
    icons_and_colors = {
        'success': ('✓', Fore.GREEN),
        'error': ('✗', Fore.RED),
        'warning': ('⚠', Fore.YELLOW),
        'info': ('ℹ', Fore.BLUE)
    }

    icon, color = icons_and_colors.get(status_type, ('•', Fore.WHITE))
    print(f"{color}{icon} {message}{Style.RESET_ALL}")

def print_separator(char='─', width=60, color=Fore.CYAN):
    """Print a visual separator line."""
    print(f"{color}{char * width}{Style.RESET_ALL}")
