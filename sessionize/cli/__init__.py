# ==============================================================================
# CLI Commands Module
# ==============================================================================
"""
CLI commands for the sessionize engine.

Commands are organized into separate modules for maintainability:
- shared.py: Common utilities, constants, and helpers
- run.py: Sessionize a CSV file
- config.py: Show configuration
"""

from sessionize.cli.shared import C, Colors, I, Icons, settings_with_overrides

__all__ = [
    "C",
    "Colors",
    "I",
    "Icons",
    "settings_with_overrides",
]
