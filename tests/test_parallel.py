# ==============================================================================
# Tests for ParallelSessionizer — parallel.py
# ==============================================================================
"""
Tests for data-parallel sessionization across entities.

The parallel output must match the sequential pipeline exactly, including
entity order and collected reducer failures.
"""

import threading
from datetime import timedelta

import pytest

from sessionize.core.aggregator import ErrorPolicy
from sessionize.core.errors import InvalidConfiguration, OrderingViolation, ReducerFailure
from sessionize.core.pipeline import Sessionizer
from sessionize.parallel import ParallelSessionizer, build_sessionizer
from sessionize.utils.config import SessionizeSettings

# ==============================================================================
# Helpers
# ==============================================================================


def _many_entities(make_events, count=50):
    events = []
    for n in range(count):
        offsets = [0, 10, 45 + n % 7, 50 + n % 7, 200]
        events.extend(make_events(f"user-{n:03d}", offsets, payloads=[n] * len(offsets)))
    return events


def _fail_on_multiples_of_ten(payloads):
    if payloads and payloads[0] % 10 == 0:
        raise ValueError("multiple of ten")
    return sum(payloads)


# ==============================================================================
# Equivalence with the sequential pipeline
# ==============================================================================


class TestEquivalence:
    """Parallel and sequential runs produce identical output."""

    @pytest.mark.parametrize("workers", [2, 4, 8])
    def test_same_sessions(self, make_events, workers):
        events = _many_entities(make_events)
        sequential = list(Sessionizer(reducer="sum").run(events))
        parallel = list(ParallelSessionizer(workers=workers, reducer="sum").run(events))
        assert parallel == sequential

    def test_small_window(self, make_events):
        events = _many_entities(make_events, count=10)
        parallel = list(ParallelSessionizer(workers=3, max_in_flight=1).run(events))
        assert parallel == list(Sessionizer().run(events))

    def test_empty_input(self):
        assert list(ParallelSessionizer(workers=2).run([])) == []

    def test_metrics(self, make_events):
        run = ParallelSessionizer(workers=4).run(_many_entities(make_events, count=20))
        list(run)
        assert run.metrics.total_entities == 20
        assert run.metrics.total_events == 100

    def test_collected_errors_in_entity_order(self, make_events):
        events = _many_entities(make_events, count=30)
        run = ParallelSessionizer(
            workers=4, reducer=_fail_on_multiples_of_ten, error_policy=ErrorPolicy.COLLECT
        ).run(events)
        list(run)
        failed = sorted({e.entity_id for e in run.errors})
        assert failed == ["user-000", "user-010", "user-020"]
        assert [e.entity_id for e in run.errors] == sorted(e.entity_id for e in run.errors)

    def test_fail_fast_propagates(self, make_events):
        events = _many_entities(make_events, count=5)
        with pytest.raises(ReducerFailure):
            list(ParallelSessionizer(workers=2, reducer=_fail_on_multiples_of_ten).run(events))

    def test_ordering_violation_propagates(self, make_events):
        events = make_events("a", [0]) + make_events("b", [0]) + make_events("a", [1])
        with pytest.raises(OrderingViolation):
            list(ParallelSessionizer(workers=2).run(events))

    @pytest.mark.parametrize("workers", [1, 2, 4])
    def test_sessions_before_ordering_violation_match_sequential(self, make_events, workers):
        events = make_events("a", [0]) + make_events("b", [0]) + make_events("a", [5])

        def emitted_before_failure(sessionizer):
            emitted = []
            with pytest.raises(OrderingViolation):
                for session in sessionizer.run(events):
                    emitted.append(session.entity_id)
            return emitted

        sequential = emitted_before_failure(Sessionizer())
        parallel = emitted_before_failure(ParallelSessionizer(workers=workers))

        assert sequential == ["a", "b"]
        assert parallel == sequential

    def test_metrics_count_entities_emitted_before_ordering_violation(self, make_events):
        events = make_events("a", [0, 10]) + make_events("b", [0]) + make_events("a", [5])
        run = ParallelSessionizer(workers=2).run(events)
        with pytest.raises(OrderingViolation):
            list(run)
        assert run.metrics.total_entities == 2
        assert run.metrics.total_events == 3


# ==============================================================================
# Cancellation and configuration
# ==============================================================================


class TestCancellation:
    """Cancellation never yields a partial entity."""

    def test_cancel_emits_only_whole_entities(self, make_events):
        events = _many_entities(make_events, count=40)
        cancel = threading.Event()
        run = ParallelSessionizer(workers=2, max_in_flight=2).run(events, cancel_event=cancel)

        seen = []
        for session in run:
            seen.append(session)
            cancel.set()

        assert run.cancelled is True
        counts = {}
        for s in seen:
            counts[s.entity_id] = counts.get(s.entity_id, 0) + s.event_count
        # every emitted entity is complete (5 events each) and not all entities ran
        assert set(counts.values()) == {5}
        assert len(counts) < 40


class TestConfiguration:
    """Tests for worker configuration."""

    def test_zero_workers_rejected(self):
        with pytest.raises(InvalidConfiguration, match="workers must be at least 1"):
            ParallelSessionizer(workers=0)

    def test_build_sequential(self):
        sessionizer = build_sessionizer(SessionizeSettings(workers=1))
        assert type(sessionizer) is Sessionizer

    def test_build_parallel(self):
        sessionizer = build_sessionizer(SessionizeSettings(workers=3, timeout_minutes=10))
        assert isinstance(sessionizer, ParallelSessionizer)
        assert sessionizer.workers == 3
        assert sessionizer.timeout == timedelta(minutes=10)

    def test_build_rejects_zero_workers(self):
        with pytest.raises(InvalidConfiguration):
            build_sessionizer(SessionizeSettings(workers=0))
