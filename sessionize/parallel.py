# ==============================================================================
# Parallel Sessionization
# ==============================================================================
"""
Data-parallel sessionization across entities.

All per-entity state is local to one entity's events, so entities are
submitted to a ThreadPoolExecutor with no cross-entity synchronization.
At most `max_in_flight` entities are pending at any time, so a lazy input is
never fully materialized. Sessions are yielded in input entity order, which
makes the output identical to the sequential Sessionizer. When the input
fails partway (e.g. an OrderingViolation), every entity read before the
failure is still emitted before the error propagates, as it would be
sequentially.
"""

import logging
import threading
from collections import deque
from collections.abc import Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from sessionize.core.errors import InvalidConfiguration, ReducerFailure
from sessionize.core.models import Session
from sessionize.core.ordering import iter_entity_groups
from sessionize.core.pipeline import SessionRun, Sessionizer

logger = logging.getLogger(__name__)


class ParallelSessionizer(Sessionizer):
    """
    Sessionizer that processes entities on a worker pool.

    Args:
        workers: Number of worker threads
        max_in_flight: Maximum entities submitted but not yet yielded
                       (defaults to 2 * workers)
        **kwargs: Passed to Sessionizer
    """

    def __init__(self, workers: int = 4, max_in_flight: int | None = None, **kwargs):
        super().__init__(**kwargs)
        if workers < 1:
            raise InvalidConfiguration(f"workers must be at least 1, got {workers}")
        self.workers = workers
        self.max_in_flight = max_in_flight or workers * 2

    def _process(self, entity_id, events) -> tuple[list[Session], list[ReducerFailure]]:
        errors: list[ReducerFailure] = []
        sessions = self.sessionize_entity(entity_id, events, errors=errors)
        return sessions, errors

    def _iter_sessions(
        self,
        records: Iterable[Any],
        cancel_event: threading.Event | None,
        result: SessionRun,
    ) -> Iterator[Session]:
        pending: deque[tuple[Any, int, Future]] = deque()

        def _drain_one() -> list[Session]:
            entity_id, num_events, future = pending.popleft()
            sessions, errors = future.result()
            result.errors.extend(errors)
            result.metrics.record_entity(
                events=num_events, sessions=len(sessions), failures=len(errors)
            )
            return sessions

        logger.info("Sessionizing with %d workers", self.workers)
        executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="sessionize")
        groups = iter_entity_groups(records)
        try:
            while True:
                try:
                    entity_id, events = next(groups)
                except StopIteration:
                    break
                except Exception:
                    # Entities read before the bad input are still emitted, in order
                    while pending:
                        yield from _drain_one()
                    raise

                if cancel_event is not None and cancel_event.is_set():
                    logger.info("Cancellation requested, stopping before entity %r", entity_id)
                    result.cancelled = True
                    break
                pending.append((entity_id, len(events), executor.submit(self._process, entity_id, events)))
                while len(pending) >= self.max_in_flight:
                    yield from _drain_one()

            # Entities already submitted complete in full, even when cancelled
            while pending:
                yield from _drain_one()
        finally:
            for _, _, future in pending:
                future.cancel()
            executor.shutdown(wait=True)
            result.metrics.log_final_summary()


def build_sessionizer(settings) -> Sessionizer:
    """
    Build the sessionizer described by SessionizeSettings.

    Returns a ParallelSessionizer when more than one worker is configured,
    otherwise the sequential Sessionizer.
    """
    kwargs = Sessionizer.settings_kwargs(settings)
    if settings.workers == 1:
        return Sessionizer(**kwargs)
    return ParallelSessionizer(workers=settings.workers, **kwargs)
