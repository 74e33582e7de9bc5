# ==============================================================================
# Ordering and Partitioning Utilities
# ==============================================================================
"""
Shared helpers for the sort/grouping precondition of the pipeline.

The pipeline expects input grouped by entity_id with each group sorted by
timestamp ascending. This module:
- Coerces raw records (mappings, tuples) into Event models
- Splits a grouped stream into per-entity groups lazily
- Converts timestamp differences into timedeltas
- Provides sort_events() for callers that need to establish the precondition
"""

from collections.abc import Iterable, Iterator, Mapping
from datetime import timedelta
from typing import Any

from sessionize.core.errors import InvalidConfiguration, MissingTimestamp, OrderingViolation
from sessionize.core.models import EntityId, Event, Timestamp

# Number of timestamp units per second for numeric timestamps
TIMESTAMP_UNITS = {
    "ms": 1000,
    "s": 1,
}


def coerce_event(record: Any) -> Event:
    """
    Convert a raw record into an Event.

    Accepts an Event, a mapping with entity_id/timestamp/payload keys, or a
    (entity_id, timestamp[, payload]) tuple.
    """
    if isinstance(record, Event):
        return record
    if isinstance(record, Mapping):
        return Event.model_validate(record)
    if isinstance(record, tuple) and len(record) in (2, 3):
        payload = record[2] if len(record) == 3 else None
        return Event(entity_id=record[0], timestamp=record[1], payload=payload)
    raise TypeError(f"Cannot interpret {type(record).__name__} as an event")


def to_timedelta(gap: Any, unit: str = "ms") -> timedelta:
    """
    Convert the difference of two timestamps into a timedelta.

    Differences of datetimes are already timedeltas; numeric differences are
    interpreted in the given unit ("ms" or "s").
    """
    if isinstance(gap, timedelta):
        return gap
    try:
        per_second = TIMESTAMP_UNITS[unit]
    except KeyError:
        raise InvalidConfiguration(f"Unknown timestamp unit: {unit!r}") from None
    return timedelta(seconds=gap / per_second)


def duration_seconds(start: Timestamp, end: Timestamp, unit: str = "ms") -> float:
    """Seconds elapsed between two timestamps of the same kind."""
    return to_timedelta(end - start, unit).total_seconds()


def iter_entity_groups(
    records: Iterable[Any], check_contiguous: bool = True
) -> Iterator[tuple[EntityId, list[Event]]]:
    """
    Lazily split a grouped stream into (entity_id, events) pairs.

    Only one entity's events are held in memory at a time. An entity that
    reappears after another entity's group has started means the input was
    not grouped, and raises OrderingViolation.

    Detecting a reappearing entity requires remembering every entity id seen
    so far, so memory grows with the number of distinct entities (not
    events). Pass check_contiguous=False for unbounded streams that are
    known to be grouped; a reappearing entity is then yielded as a new group.

    Args:
        records: Events (or raw records) grouped by entity_id
        check_contiguous: Track finished entities and reject any that reappear

    Yields:
        Tuples of (entity_id, list of that entity's events in input order)
    """
    finished: set = set()
    current_id: Any = None
    current: list[Event] = []

    for record in records:
        event = coerce_event(record)
        if current and event.entity_id == current_id:
            current.append(event)
            continue

        if current:
            if check_contiguous:
                finished.add(current_id)
            yield current_id, current

        if event.entity_id in finished:
            raise OrderingViolation(
                f"Events for entity {event.entity_id!r} are not contiguous; "
                "input must be grouped by entity_id",
                entity_id=event.entity_id,
            )
        current_id = event.entity_id
        current = [event]

    if current:
        yield current_id, current


def _entity_sort_key(entity_id: EntityId) -> tuple:
    # str and int ids cannot be compared directly
    return (isinstance(entity_id, str), entity_id)


def sort_events(records: Iterable[Any]) -> list[Event]:
    """
    Establish the pipeline precondition: group by entity, sort by timestamp.

    The sort is stable, so events sharing an entity and timestamp keep their
    input order. Never applied implicitly by the pipeline.

    Raises:
        MissingTimestamp: If any event has no timestamp
    """
    events = [coerce_event(r) for r in records]
    for event in events:
        if event.timestamp is None:
            raise MissingTimestamp(
                f"Event for entity {event.entity_id!r} has no timestamp",
                entity_id=event.entity_id,
            )
    return sorted(events, key=lambda e: (_entity_sort_key(e.entity_id), e.timestamp))
