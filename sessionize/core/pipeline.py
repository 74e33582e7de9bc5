# ==============================================================================
# Sessionization Pipeline
# ==============================================================================
"""
Composes the gap detector, session index assigner and aggregator.

    events (grouped by entity, sorted by timestamp)
        -> GapDetector.detect()          boundary flags
        -> index_events()                session indices
        -> SessionAggregator.aggregate() Session records

The pipeline is a pure, lazy transform: each entity is processed in full
before any of its sessions are yielded, and only one entity's events are held
in memory at a time. Per-entity state (previous timestamp, running counter)
never outlives the entity.

Cancellation is cooperative and checked between entities only, so a
cancelled run never emits a partially sessionized entity.
"""

import logging
import threading
import time
from collections.abc import Iterable, Iterator
from datetime import timedelta
from typing import Any

from sessionize.core.aggregator import ErrorPolicy, SessionAggregator
from sessionize.core.errors import InvalidConfiguration, ReducerFailure
from sessionize.core.gap_detector import DEFAULT_TIMEOUT, GapDetector
from sessionize.core.models import EntityId, Event, Session
from sessionize.core.ordering import iter_entity_groups
from sessionize.core.reducers import Reducer, resolve_reducer
from sessionize.core.session_index import index_events
from sessionize.metrics import RunMetrics

logger = logging.getLogger(__name__)


class SessionRun:
    """
    Lazy result of Sessionizer.run().

    Iterating yields Session records. After (or during) iteration:
        errors: ReducerFailures collected under the COLLECT policy
        metrics: RunMetrics for the run
        cancelled: True if the run stopped on the cancel signal

    A run can be iterated only once.
    """

    def __init__(self, metrics: RunMetrics, errors: list[ReducerFailure]):
        self._sessions: Iterator[Session] = iter(())
        self._consumed = False
        self.metrics = metrics
        self.errors = errors
        self.cancelled = False

    def __iter__(self) -> Iterator[Session]:
        if self._consumed:
            raise RuntimeError("SessionRun can only be iterated once")
        self._consumed = True
        return self._sessions


class Sessionizer:
    """
    Gap-based sessionization of an event stream.

    Configuration is validated once here and is read-only afterwards, so a
    single Sessionizer may be shared across threads.

    Args:
        timeout: Inactivity gap that starts a new session (inclusive, default 30m)
        reducer: Callable over session payloads, a built-in reducer name,
                 or None for count-only
        reducer_field: If set, the reducer sees this key of each dict payload
        error_policy: FAIL_FAST (default) or COLLECT for reducer failures
        timestamp_unit: Unit of numeric timestamps ("ms" or "s")
        summary_interval_seconds: Interval for periodic throughput logging
    """

    def __init__(
        self,
        timeout: timedelta = DEFAULT_TIMEOUT,
        reducer: Reducer | str | None = None,
        reducer_field: str | None = None,
        error_policy: ErrorPolicy | str = ErrorPolicy.FAIL_FAST,
        timestamp_unit: str = "ms",
        summary_interval_seconds: float = 30.0,
    ):
        try:
            policy = ErrorPolicy(error_policy)
        except ValueError:
            raise InvalidConfiguration(f"Unknown error policy: {error_policy!r}") from None

        self.detector = GapDetector(timeout, timestamp_unit)
        self.aggregator = SessionAggregator(
            reducer=resolve_reducer(reducer, reducer_field),
            error_policy=policy,
            timestamp_unit=timestamp_unit,
        )
        self.summary_interval_seconds = summary_interval_seconds

    @staticmethod
    def settings_kwargs(settings) -> dict:
        """Constructor arguments taken from SessionizeSettings."""
        return dict(
            timeout=timedelta(minutes=settings.timeout_minutes),
            reducer=settings.reducer,
            reducer_field=settings.reducer_field,
            error_policy=settings.error_policy,
            timestamp_unit=settings.timestamp_unit,
            summary_interval_seconds=settings.summary_interval_seconds,
        )

    @classmethod
    def from_settings(cls, settings) -> "Sessionizer":
        """Build a Sessionizer from SessionizeSettings."""
        return cls(**cls.settings_kwargs(settings))

    @property
    def timeout(self) -> timedelta:
        return self.detector.timeout

    @property
    def error_policy(self) -> ErrorPolicy:
        return self.aggregator.error_policy

    def sessionize_entity(
        self,
        entity_id: EntityId,
        events: list[Event],
        errors: list[ReducerFailure] | None = None,
        metrics: RunMetrics | None = None,
    ) -> list[Session]:
        """
        Run the full pipeline for one entity.

        Args:
            entity_id: The entity all events belong to
            events: The entity's events, sorted by timestamp
            errors: Receives ReducerFailures under the COLLECT policy
            metrics: Optional RunMetrics to record counts and timings

        Returns:
            The entity's sessions in session_index order

        Raises:
            OrderingViolation: If timestamps decrease
            MissingTimestamp: If a timestamp is None
            ReducerFailure: Under FAIL_FAST, if the reducer raises
        """
        t0 = time.monotonic()
        flags = self.detector.detect((e.timestamp for e in events), entity_id=entity_id)

        t1 = time.monotonic()
        indexed = index_events(events, flags)

        t2 = time.monotonic()
        local_errors: list[ReducerFailure] = []
        sessions = self.aggregator.aggregate(indexed, local_errors)
        t3 = time.monotonic()

        if errors is not None:
            errors.extend(local_errors)

        if metrics is not None:
            metrics.record_entity(
                events=len(events),
                sessions=len(sessions),
                detect_ms=(t1 - t0) * 1000,
                index_ms=(t2 - t1) * 1000,
                aggregate_ms=(t3 - t2) * 1000,
                failures=len(local_errors),
            )

        logger.debug(
            "Entity %r: %d events -> %d sessions", entity_id, len(events), len(sessions)
        )
        return sessions

    def run(self, records: Iterable[Any], cancel_event: threading.Event | None = None) -> SessionRun:
        """
        Sessionize a grouped, sorted stream lazily.

        Args:
            records: Events (or mappings/tuples) grouped by entity_id, each
                     group sorted by timestamp ascending
            cancel_event: Optional signal checked between entities

        Returns:
            SessionRun yielding Session records as entities complete
        """
        metrics = RunMetrics(summary_interval_seconds=self.summary_interval_seconds)
        errors: list[ReducerFailure] = []
        result = SessionRun(metrics, errors)
        result._sessions = self._iter_sessions(records, cancel_event, result)
        return result

    def _iter_sessions(
        self,
        records: Iterable[Any],
        cancel_event: threading.Event | None,
        result: SessionRun,
    ) -> Iterator[Session]:
        try:
            for entity_id, events in iter_entity_groups(records):
                if cancel_event is not None and cancel_event.is_set():
                    logger.info("Cancellation requested, stopping before entity %r", entity_id)
                    result.cancelled = True
                    return
                yield from self.sessionize_entity(
                    entity_id, events, errors=result.errors, metrics=result.metrics
                )
        finally:
            result.metrics.log_final_summary()


def sessionize(records: Iterable[Any], **kwargs) -> list[Session]:
    """
    Sessionize a grouped, sorted stream and return all sessions.

    Keyword arguments are passed to Sessionizer. Under the COLLECT policy,
    failed sessions are returned with aggregate=None; use Sessionizer.run()
    to inspect the collected failures.

    Example:
        sessions = sessionize(events, timeout=timedelta(minutes=30), reducer="sum")
    """
    return list(Sessionizer(**kwargs).run(records))
