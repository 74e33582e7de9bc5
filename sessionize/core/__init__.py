# ==============================================================================
# Core Domain Logic
# ==============================================================================
"""
Pure domain logic with no external dependencies beyond Pydantic.

This module contains:
- Domain models (Event, IndexedEvent, Session)
- Error taxonomy (OrderingViolation, InvalidConfiguration, ReducerFailure)
- Gap detection, session index assignment and session aggregation
- The Sessionizer pipeline composing them

All code here is framework-agnostic and easily unit-testable.
"""

from sessionize.core.aggregator import ErrorPolicy, SessionAggregator
from sessionize.core.errors import (
    InvalidConfiguration,
    MissingTimestamp,
    OrderingViolation,
    ReducerFailure,
    SessionizeError,
)
from sessionize.core.gap_detector import DEFAULT_TIMEOUT, GapDetector, detect_boundaries
from sessionize.core.models import Event, IndexedEvent, Session
from sessionize.core.ordering import iter_entity_groups, sort_events
from sessionize.core.pipeline import SessionRun, Sessionizer, sessionize
from sessionize.core.reducers import REDUCERS, Reducer, field_reducer, get_reducer
from sessionize.core.session_index import assign_session_indices, index_events

__all__ = [
    # Models
    "Event",
    "IndexedEvent",
    "Session",
    # Errors
    "InvalidConfiguration",
    "MissingTimestamp",
    "OrderingViolation",
    "ReducerFailure",
    "SessionizeError",
    # Pipeline stages
    "DEFAULT_TIMEOUT",
    "GapDetector",
    "detect_boundaries",
    "assign_session_indices",
    "index_events",
    "ErrorPolicy",
    "SessionAggregator",
    # Reducers
    "REDUCERS",
    "Reducer",
    "field_reducer",
    "get_reducer",
    # Orchestration
    "SessionRun",
    "Sessionizer",
    "iter_entity_groups",
    "sessionize",
    "sort_events",
]
