# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- A fixed UTC reference time (t0)
- A factory building one entity's events from minute offsets
- A CSV file of events for CLI and file adapter tests
- Clean cached settings per test
"""

from datetime import datetime, timedelta, timezone

import pytest

from sessionize.core.models import Event
from sessionize.utils.config import get_settings


@pytest.fixture()
def t0():
    """Reference timestamp for scenarios."""
    return datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture()
def make_events(t0):
    """Build events for one entity from minute offsets relative to t0.

    Payloads default to the position of the event in the list.
    """

    def _make(entity_id, offsets_minutes, payloads=None):
        if payloads is None:
            payloads = list(range(len(offsets_minutes)))
        return [
            Event(entity_id=entity_id, timestamp=t0 + timedelta(minutes=m), payload=p)
            for m, p in zip(offsets_minutes, payloads)
        ]

    return _make


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Settings are cached process-wide; reset around each test."""
    for name in (
        "SESSIONIZE_TIMEOUT_MINUTES",
        "SESSIONIZE_REDUCER",
        "SESSIONIZE_REDUCER_FIELD",
        "SESSIONIZE_ERROR_POLICY",
        "SESSIONIZE_TIMESTAMP_UNIT",
        "SESSIONIZE_WORKERS",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def events_csv(tmp_path):
    """A grouped, sorted CSV of events with an `amount` payload column.

    Entity 1: 09:00, 09:10, 09:45, 09:50  -> 2 sessions (2 + 2 events)
    Entity 2: 10:00, 10:32                -> 2 sessions (1 + 1 events)
    Entity 3: 11:00                       -> 1 session
    """
    path = tmp_path / "events.csv"
    path.write_text(
        "entity_id,timestamp,amount\n"
        "1,2024-01-01T09:00:00,1\n"
        "1,2024-01-01T09:10:00,2\n"
        "1,2024-01-01T09:45:00,3\n"
        "1,2024-01-01T09:50:00,4\n"
        "2,2024-01-01T10:00:00,5\n"
        "2,2024-01-01T10:32:00,6\n"
        "3,2024-01-01T11:00:00,7\n"
    )
    return path
