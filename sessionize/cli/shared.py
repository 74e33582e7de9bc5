# ==============================================================================
# Shared Utilities for CLI Commands
# ==============================================================================
"""
Shared utilities and constants used across CLI command modules.

This module provides:
- ANSI color codes and status icons
- Settings overrides from command-line options
"""

from sessionize.utils.config import SessionizeSettings, get_settings


# ==============================================================================
# ANSI Colors and Icons
# ==============================================================================


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    # Colors
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"

    # Bright colors
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"


class Icons:
    """Status icons using Unicode symbols."""

    CHECK = "✓"
    CROSS = "✗"
    WARN = "!"
    ARROW = "→"


# Module-level aliases for convenience
C, I = Colors, Icons


# ==============================================================================
# Settings Helpers
# ==============================================================================


def settings_with_overrides(**overrides) -> SessionizeSettings:
    """
    Return the cached settings with command-line overrides applied.

    Options left as None keep the value from the environment.
    """
    settings = get_settings()
    updates = {k: v for k, v in overrides.items() if v is not None}
    if not updates:
        return settings
    # Rebuild rather than model_copy() so overrides are validated like env values
    return SessionizeSettings(**{**settings.model_dump(), **updates})


__all__ = [
    "Colors",
    "Icons",
    "C",
    "I",
    "settings_with_overrides",
]
