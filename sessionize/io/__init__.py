# ==============================================================================
# File Adapters
# ==============================================================================
"""
File adapters for reading events and writing sessions.
"""

from sessionize.io.csv_source import read_events, write_sessions

__all__ = [
    "read_events",
    "write_sessions",
]
