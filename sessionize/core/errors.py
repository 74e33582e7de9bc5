# ==============================================================================
# Sessionization Errors
# ==============================================================================
"""
Exception hierarchy for the sessionization engine.

All errors derive from SessionizeError so callers can catch the whole
family in one place:

- OrderingViolation: input broke the sort/grouping precondition
- MissingTimestamp: an event inside a sequence has no timestamp
- InvalidConfiguration: timeout, reducer or policy cannot be used
- ReducerFailure: a caller-supplied reducer raised on one session
"""

from typing import Any


class SessionizeError(Exception):
    """Base class for all sessionization errors."""


class OrderingViolation(SessionizeError):
    """
    Raised when events for an entity are not in non-decreasing timestamp order,
    or when an entity's events are not contiguous in the input.

    The pipeline never reorders input to recover from this.
    """

    def __init__(self, message: str, entity_id: Any = None, previous: Any = None, current: Any = None):
        super().__init__(message)
        self.entity_id = entity_id
        self.previous = previous
        self.current = current


class MissingTimestamp(OrderingViolation):
    """Raised when an event has a null timestamp."""


class InvalidConfiguration(SessionizeError):
    """Raised when a configuration value cannot be used by the pipeline."""


class ReducerFailure(SessionizeError):
    """
    Raised when a reducer fails on a single session.

    Attributes:
        entity_id: Entity whose session failed
        session_index: Index of the failed session within the entity
    """

    def __init__(self, entity_id: Any, session_index: int, cause: BaseException):
        super().__init__(
            f"Reducer failed for entity {entity_id!r} session {session_index}: "
            f"{type(cause).__name__}: {cause}"
        )
        self.entity_id = entity_id
        self.session_index = session_index
        self.cause = cause
