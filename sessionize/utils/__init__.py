# ==============================================================================
# Sessionize Utilities
# ==============================================================================
"""
Shared utilities for the sessionize package.

This module exports configuration for use throughout the package.
"""

from sessionize.utils.config import SessionizeSettings, get_settings

__all__ = [
    "SessionizeSettings",
    "get_settings",
]
