# ==============================================================================
# Sessionization Domain Models
# ==============================================================================
"""
Pydantic models for events and sessions.

These models are used for:
- Validating events handed to the pipeline (or read from CSV)
- Carrying the intermediate boundary flag and session index
- Serializing session summaries for output

This module is part of the core domain layer and has no external dependencies
beyond Pydantic.
"""

from datetime import datetime
from typing import Any, Union

from pydantic import BaseModel, Field

EntityId = Union[str, int]
Timestamp = Union[int, float, datetime]


class Event(BaseModel):
    """
    Represents a single tracked action for one entity.

    Attributes:
        entity_id: Identifier used to partition events (user, device, cookie...)
        timestamp: Point in time; datetime or a number in the configured unit.
                   Nullable so that a missing value surfaces as MissingTimestamp
                   inside the pipeline rather than being guessed.
        payload: Opaque data carried through to the reducer
    """

    entity_id: EntityId = Field(..., description="Partitioning identity")
    timestamp: Timestamp | None = Field(..., description="Event time")
    payload: Any = Field(None, description="Opaque event data")

    model_config = {"frozen": True}


class IndexedEvent(BaseModel):
    """An event with its computed boundary flag and session index."""

    event: Event
    is_new_session: bool
    session_index: int = Field(..., ge=0)

    model_config = {"frozen": True}

    @property
    def entity_id(self) -> EntityId:
        return self.event.entity_id

    @property
    def timestamp(self) -> Timestamp | None:
        return self.event.timestamp


class Session(BaseModel):
    """
    Represents one session: a maximal run of an entity's events where every
    gap between consecutive events is below the inactivity timeout.

    Attributes:
        entity_id: Entity the session belongs to
        session_index: Zero-based ordinal of the session within the entity
        start_timestamp: Timestamp of the first (earliest) event
        end_timestamp: Timestamp of the last (latest) event
        event_count: Number of events in the session
        duration_seconds: end_timestamp - start_timestamp in seconds
        aggregate: Reducer output over the session payloads (None if count-only
                   or if the reducer failed under the collect policy)
    """

    entity_id: EntityId
    session_index: int = Field(..., ge=0)
    start_timestamp: Timestamp
    end_timestamp: Timestamp
    event_count: int = Field(..., ge=1)
    duration_seconds: float = Field(0.0, ge=0)
    aggregate: Any = None

    model_config = {"frozen": True}

    @property
    def session_id(self) -> str:
        """Stable identifier in the form "{entity_id}_{session_index}"."""
        return f"{self.entity_id}_{self.session_index}"

    def to_record(self) -> dict:
        """
        Convert session to a flat output record.

        Datetimes are rendered as ISO-8601 strings so the record is
        JSON-serializable; numeric timestamps are passed through.
        """
        return {
            "session_id": self.session_id,
            "entity_id": self.entity_id,
            "session_index": self.session_index,
            "start_timestamp": _render_timestamp(self.start_timestamp),
            "end_timestamp": _render_timestamp(self.end_timestamp),
            "duration_seconds": self.duration_seconds,
            "event_count": self.event_count,
            "aggregate": self.aggregate,
        }


def _render_timestamp(value: Timestamp) -> Timestamp | str:
    if isinstance(value, datetime):
        return value.isoformat()
    return value
