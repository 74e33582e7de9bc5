# ==============================================================================
# Gap Detector
# ==============================================================================
"""
Session boundary detection for a single entity.

For each event in a timestamp-sorted sequence, decides whether the event
starts a new session: the first event always does, and any later event does
when the gap since the previous event is at least the inactivity timeout.

The only state is the previous timestamp, carried as the accumulator of a
left fold over the sequence, so entities can be processed independently.
"""

import logging
from collections.abc import Iterable
from datetime import timedelta
from typing import Any

from sessionize.core.errors import InvalidConfiguration, MissingTimestamp, OrderingViolation
from sessionize.core.models import Timestamp
from sessionize.core.ordering import TIMESTAMP_UNITS

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = timedelta(minutes=30)


def validate_timeout(timeout: Any) -> timedelta:
    """
    Check that a timeout can be used as an inactivity threshold.

    A zero timeout is accepted (every event becomes its own session) but
    logged, since it is rarely what the caller meant.

    Raises:
        InvalidConfiguration: If timeout is not a timedelta or is negative
    """
    if not isinstance(timeout, timedelta):
        raise InvalidConfiguration(
            f"timeout must be a timedelta, got {type(timeout).__name__}"
        )
    if timeout < timedelta(0):
        raise InvalidConfiguration(f"timeout must not be negative, got {timeout}")
    if timeout == timedelta(0):
        logger.warning("Zero timeout configured: every event will start a new session")
    return timeout


class GapDetector:
    """
    Computes session boundary flags for one entity's events.

    Args:
        timeout: Inactivity gap that starts a new session (inclusive)
        timestamp_unit: Unit of numeric timestamps ("ms" or "s")
    """

    def __init__(self, timeout: timedelta = DEFAULT_TIMEOUT, timestamp_unit: str = "ms"):
        if timestamp_unit not in TIMESTAMP_UNITS:
            raise InvalidConfiguration(f"Unknown timestamp unit: {timestamp_unit!r}")
        self.timeout = validate_timeout(timeout)
        self.timestamp_unit = timestamp_unit
        # Numeric gaps are compared in their own unit; timedelta rounds to microseconds
        self._timeout_units = self.timeout.total_seconds() * TIMESTAMP_UNITS[timestamp_unit]

    def starts_session(self, previous: Timestamp | None, current: Timestamp) -> bool:
        """True if current begins a new session given the previous timestamp."""
        if previous is None:
            return True
        gap = current - previous
        if isinstance(gap, timedelta):
            return gap >= self.timeout
        return gap >= self._timeout_units

    def detect(self, timestamps: Iterable[Timestamp | None], entity_id: Any = None) -> list[bool]:
        """
        Produce one boundary flag per timestamp.

        Args:
            timestamps: One entity's timestamps, sorted ascending
            entity_id: Used only to tag errors

        Returns:
            List of flags parallel to timestamps; the first is always True

        Raises:
            MissingTimestamp: If a timestamp is None
            OrderingViolation: If a timestamp is earlier than its predecessor
        """
        flags: list[bool] = []
        previous: Timestamp | None = None

        for position, current in enumerate(timestamps):
            if current is None:
                raise MissingTimestamp(
                    f"Event {position} of entity {entity_id!r} has no timestamp",
                    entity_id=entity_id,
                    previous=previous,
                )
            if previous is not None and current < previous:
                raise OrderingViolation(
                    f"Timestamps for entity {entity_id!r} are not sorted: "
                    f"{current!r} follows {previous!r}",
                    entity_id=entity_id,
                    previous=previous,
                    current=current,
                )
            flags.append(self.starts_session(previous, current))
            previous = current

        return flags


def detect_boundaries(
    timestamps: Iterable[Timestamp | None],
    timeout: timedelta = DEFAULT_TIMEOUT,
    timestamp_unit: str = "ms",
) -> list[bool]:
    """Convenience wrapper around GapDetector.detect()."""
    return GapDetector(timeout, timestamp_unit).detect(timestamps)
