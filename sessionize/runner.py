# ==============================================================================
# Sessionize Runner
# ==============================================================================
"""
Runner with lifecycle management for a file-to-file sessionization run.

Provides signal handling, logging setup, and shutdown coordination:
SIGINT/SIGTERM set a cancellation event that the pipeline checks between
entities, so an interrupted run still writes only complete entities.
"""

import logging
import signal
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from sessionize.core.errors import ReducerFailure
from sessionize.io.csv_source import read_events, write_sessions
from sessionize.parallel import build_sessionizer
from sessionize.utils.config import SessionizeSettings

logger = logging.getLogger(__name__)


@dataclass
class RunOutcome:
    """Summary of a completed run."""

    sessions_written: int = 0
    events_read: int = 0
    entities: int = 0
    cancelled: bool = False
    errors: list[ReducerFailure] = field(default_factory=list)


class SessionizeRunner:
    """
    Reads events from a CSV file, sessionizes them and writes JSON lines.

    Args:
        settings: Engine configuration
        input_path: CSV file with entity and timestamp columns
        output_path: JSON lines destination (None writes to stdout)
        sort: Sort the input by (entity, timestamp) before sessionizing
        entity_column: Name of the entity column in the CSV
        timestamp_column: Name of the timestamp column in the CSV
    """

    def __init__(
        self,
        settings: SessionizeSettings,
        input_path: Path,
        output_path: Path | None = None,
        sort: bool = False,
        entity_column: str = "entity_id",
        timestamp_column: str = "timestamp",
    ):
        self.settings = settings
        self.input_path = input_path
        self.output_path = output_path
        self.sort = sort
        self.entity_column = entity_column
        self.timestamp_column = timestamp_column
        self._cancel = threading.Event()
        self._previous_handlers: dict[int, object] = {}

    def run(self) -> RunOutcome:
        """Main entry point with signal handling."""
        self._setup_logging()
        self._setup_signal_handlers()
        try:
            return self._run()
        finally:
            self._cleanup()

    def _run(self) -> RunOutcome:
        sessionizer = build_sessionizer(self.settings)
        events = read_events(
            self.input_path,
            entity_column=self.entity_column,
            timestamp_column=self.timestamp_column,
            sort=self.sort,
        )
        logger.info(
            "Sessionizing %s (timeout=%s, reducer=%s, error_policy=%s)",
            self.input_path,
            sessionizer.timeout,
            self.settings.reducer,
            sessionizer.error_policy.value,
        )

        session_run = sessionizer.run(events, cancel_event=self._cancel)
        if self.output_path is None:
            written = write_sessions(session_run, sys.stdout)
        else:
            with open(self.output_path, "w", encoding="utf-8") as stream:
                written = write_sessions(session_run, stream)

        return RunOutcome(
            sessions_written=written,
            events_read=session_run.metrics.total_events,
            entities=session_run.metrics.total_entities,
            cancelled=session_run.cancelled,
            errors=list(session_run.errors),
        )

    def cancel(self) -> None:
        """Request cooperative cancellation; takes effect between entities."""
        self._cancel.set()

    @property
    def cancel_requested(self) -> bool:
        return self._cancel.is_set()

    def _setup_signal_handlers(self) -> None:
        # signal.signal() only works from the main thread
        if threading.current_thread() is not threading.main_thread():
            return
        for signum in (signal.SIGTERM, signal.SIGINT):
            self._previous_handlers[signum] = signal.signal(signum, self._handle_signal)

    def _handle_signal(self, signum, frame) -> None:
        """Handle shutdown signals."""
        logger.info("Received signal %d, requesting cancellation...", signum)
        self.cancel()

    def _setup_logging(self) -> None:
        logging.basicConfig(
            level=self.settings.log_level.upper(),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            stream=sys.stderr,
        )

    def _cleanup(self) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()
