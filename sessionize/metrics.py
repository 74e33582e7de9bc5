# ==============================================================================
# Run Metrics
# ==============================================================================
"""
Instrumentation for sessionization runs.

Every entity passes through the same 3-step pipeline:

    1. GapDetector.detect()            - boundary flags
    2. index_events()                  - session indices (prefix sum)
    3. SessionAggregator.aggregate()   - session summaries

RunMetrics records per-entity counts and stage timings (time.monotonic())
and provides:

- Periodic throughput summary (configurable interval, default 30s)
- Cumulative stats tracking
- Final summary at the end of a run

Usage:
    metrics = RunMetrics(summary_interval_seconds=30)
    metrics.record_entity(events=12, sessions=3, detect_ms=0.1, index_ms=0.1, aggregate_ms=0.4)
    ...
    metrics.log_final_summary()
"""

import logging
import threading
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class RunMetrics:
    """
    Counts and timings for one sessionization run.

    Thread-safe: entities processed by a worker pool may record concurrently.
    """

    def __init__(
        self,
        summary_interval_seconds: float = 30.0,
        on_summary: Callable[[], None] | None = None,
        log: logging.Logger | None = None,
    ):
        """
        Initialize run metrics.

        Args:
            summary_interval_seconds: How often to log throughput summaries
            on_summary: Optional callback invoked during periodic summaries
            log: Optional logger override. Defaults to this module's logger.
        """
        self._summary_interval = summary_interval_seconds
        self._on_summary = on_summary
        self._log = log or logger
        self._lock = threading.Lock()

        # Cumulative stats (lifetime of this run)
        self.total_entities = 0
        self.total_events = 0
        self.total_sessions = 0
        self.total_failures = 0
        self._cum_detect_ms = 0.0
        self._cum_index_ms = 0.0
        self._cum_aggregate_ms = 0.0
        self._start_time = time.monotonic()

        # Period stats (reset each summary interval)
        self._period_entities = 0
        self._period_events = 0
        self._period_sessions = 0
        self._last_summary_time = time.monotonic()

    def record_entity(
        self,
        events: int,
        sessions: int,
        detect_ms: float = 0.0,
        index_ms: float = 0.0,
        aggregate_ms: float = 0.0,
        failures: int = 0,
    ) -> None:
        """
        Record one sessionized entity.

        Triggers a periodic throughput summary when the configured interval
        has elapsed.
        """
        with self._lock:
            self.total_entities += 1
            self.total_events += events
            self.total_sessions += sessions
            self.total_failures += failures
            self._cum_detect_ms += detect_ms
            self._cum_index_ms += index_ms
            self._cum_aggregate_ms += aggregate_ms

            self._period_entities += 1
            self._period_events += events
            self._period_sessions += sessions

            now = time.monotonic()
            if now - self._last_summary_time >= self._summary_interval:
                self._log_summary(now)

    def _log_summary(self, now: float) -> None:
        """Log periodic throughput summary and reset period counters."""
        elapsed = now - self._last_summary_time
        if elapsed <= 0 or self._period_entities == 0:
            return

        events_per_sec = self._period_events / elapsed
        self._log.info(
            "Throughput (%.1fs): %s events/sec | entities=%s sessions=%s",
            elapsed,
            f"{events_per_sec:,.0f}",
            f"{self._period_entities:,}",
            f"{self._period_sessions:,}",
        )

        if self._on_summary:
            try:
                self._on_summary()
            except Exception as e:
                self._log.debug("on_summary callback error: %s", e)

        self._period_entities = 0
        self._period_events = 0
        self._period_sessions = 0
        self._last_summary_time = now

    @property
    def elapsed_seconds(self) -> float:
        return time.monotonic() - self._start_time

    def log_final_summary(self) -> None:
        """Log final summary at the end of a run."""
        total_elapsed = self.elapsed_seconds
        if self.total_entities == 0:
            self._log.info("Final: no events processed (%.1fs elapsed)", total_elapsed)
            return

        overall_eps = self.total_events / total_elapsed if total_elapsed > 0 else 0
        self._log.info(
            "Final: %s events, %s entities, %s sessions over %.1fs (%s events/sec) | "
            "detect=%.*fms index=%.*fms aggregate=%.*fms | reducer_failures=%d",
            f"{self.total_events:,}",
            f"{self.total_entities:,}",
            f"{self.total_sessions:,}",
            total_elapsed,
            f"{overall_eps:,.0f}",
            _precision(self._cum_detect_ms),
            self._cum_detect_ms,
            _precision(self._cum_index_ms),
            self._cum_index_ms,
            _precision(self._cum_aggregate_ms),
            self._cum_aggregate_ms,
            self.total_failures,
        )


def _precision(ms: float) -> int:
    """Return decimal precision for millisecond values.

    >= 10ms  → 0 decimals (e.g., 85ms)
    >= 1ms   → 1 decimal  (e.g., 3.2ms)
    < 1ms    → 2 decimals (e.g., 0.45ms)
    """
    if ms >= 10:
        return 0
    elif ms >= 1:
        return 1
    else:
        return 2
