# ==============================================================================
# Session Aggregator
# ==============================================================================
"""
Reduces indexed events into Session summaries.

Events are grouped by (entity_id, session_index). Each group yields one
Session with its start/end timestamps, event count, duration, and the
output of the configured reducer over the group's payloads.

Reducer failures are isolated per session and handled according to the
ErrorPolicy:
- FAIL_FAST: the ReducerFailure propagates to the caller
- COLLECT: the session is emitted with aggregate=None and the failure is
  appended to the caller's error list
"""

import logging
from collections.abc import Iterable
from enum import Enum

from sessionize.core.errors import ReducerFailure
from sessionize.core.models import IndexedEvent, Session
from sessionize.core.ordering import duration_seconds
from sessionize.core.reducers import Reducer, count_only

logger = logging.getLogger(__name__)


class ErrorPolicy(str, Enum):
    """How reducer failures are handled."""

    FAIL_FAST = "fail_fast"
    COLLECT = "collect"


class SessionAggregator:
    """
    Groups indexed events into sessions and reduces each group.

    Args:
        reducer: Callable applied to the payloads of each session
        error_policy: FAIL_FAST or COLLECT for reducer failures
        timestamp_unit: Unit of numeric timestamps, for duration_seconds
    """

    def __init__(
        self,
        reducer: Reducer = count_only,
        error_policy: ErrorPolicy = ErrorPolicy.FAIL_FAST,
        timestamp_unit: str = "ms",
    ):
        self.reducer = reducer
        self.error_policy = ErrorPolicy(error_policy)
        self.timestamp_unit = timestamp_unit

    def aggregate(
        self,
        indexed_events: Iterable[IndexedEvent],
        errors: list[ReducerFailure] | None = None,
    ) -> list[Session]:
        """
        Build one Session per (entity_id, session_index) group.

        Input may be in any order; sessions are returned in first-seen order.
        Within a group, payloads reach the reducer in input order.

        Args:
            indexed_events: Events with their session indices
            errors: List that receives ReducerFailures under COLLECT policy

        Returns:
            List of Session records

        Raises:
            ReducerFailure: Under FAIL_FAST policy, if the reducer raises
        """
        groups: dict[tuple, list[IndexedEvent]] = {}
        for item in indexed_events:
            groups.setdefault((item.entity_id, item.session_index), []).append(item)

        return [
            self._reduce_group(entity_id, session_index, group, errors)
            for (entity_id, session_index), group in groups.items()
        ]

    def _reduce_group(
        self,
        entity_id,
        session_index: int,
        group: list[IndexedEvent],
        errors: list[ReducerFailure] | None,
    ) -> Session:
        timestamps = [item.timestamp for item in group]
        start = min(timestamps)
        end = max(timestamps)

        try:
            aggregate = self.reducer([item.event.payload for item in group])
        except Exception as e:
            failure = ReducerFailure(entity_id, session_index, e)
            if self.error_policy is ErrorPolicy.FAIL_FAST:
                raise failure from e
            logger.warning("%s", failure)
            if errors is not None:
                errors.append(failure)
            aggregate = None

        return Session(
            entity_id=entity_id,
            session_index=session_index,
            start_timestamp=start,
            end_timestamp=end,
            event_count=len(group),
            duration_seconds=duration_seconds(start, end, self.timestamp_unit),
            aggregate=aggregate,
        )
