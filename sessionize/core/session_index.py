# ==============================================================================
# Session Index Assigner
# ==============================================================================
"""
Turns boundary flags into per-entity session indices.

The index of an event is the running count of boundary flags seen so far,
minus one: a prefix sum over the flags read as 0/1. The first flag is always
True, so indices start at 0 and there are exactly as many sessions as True
flags.
"""

from collections.abc import Sequence
from itertools import accumulate

from sessionize.core.models import Event, IndexedEvent


def assign_session_indices(flags: Sequence[bool]) -> list[int]:
    """
    Compute zero-based session indices from boundary flags.

    Args:
        flags: Boundary flags for one entity, in timestamp order

    Returns:
        Non-decreasing list of indices, parallel to flags

    Raises:
        ValueError: If the first flag is not True
    """
    if not flags:
        return []
    if not flags[0]:
        raise ValueError("The first event of an entity must start a session")
    return [count - 1 for count in accumulate(int(flag) for flag in flags)]


def index_events(events: Sequence[Event], flags: Sequence[bool]) -> list[IndexedEvent]:
    """Attach flags and session indices to one entity's events."""
    if len(events) != len(flags):
        raise ValueError(f"Got {len(flags)} flags for {len(events)} events")
    indices = assign_session_indices(flags)
    return [
        IndexedEvent(event=event, is_new_session=flag, session_index=index)
        for event, flag, index in zip(events, flags, indices)
    ]
