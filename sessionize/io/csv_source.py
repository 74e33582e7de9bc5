# ==============================================================================
# CSV Event Source and JSON Lines Session Sink
# ==============================================================================
"""
Thin adapters between files and the sessionization pipeline.

read_events() loads a CSV with Polars and yields Event models:
- The entity and timestamp columns are configurable
- String timestamps are parsed as datetimes; numeric ones are passed through
- All remaining columns become a dict payload (None if there are none)

write_sessions() writes Session records as JSON lines.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TextIO

from sessionize.core.models import Event, Session

logger = logging.getLogger(__name__)


def read_events(
    filepath: Path,
    entity_column: str = "entity_id",
    timestamp_column: str = "timestamp",
    sort: bool = False,
    limit: int | None = None,
) -> Iterator[Event]:
    """
    Read events from a CSV file.

    Uses a Polars DataFrame for CSV parsing, which is significantly faster
    than a row-by-row CSV reader.

    Args:
        filepath: Path to events CSV file
        entity_column: Column holding the entity identifier
        timestamp_column: Column holding the event timestamp
        sort: Stable-sort by (entity, timestamp) to establish the pipeline
              precondition. Leave False if the file is already grouped and sorted.
        limit: Maximum number of events to read (None for all)

    Yields:
        Event models in file (or sorted) order

    Raises:
        ValueError: If a required column is missing
    """
    import polars as pl

    df = pl.read_csv(filepath)

    missing = [c for c in (entity_column, timestamp_column) if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required column(s) in {filepath}: {', '.join(missing)}")

    if df.schema[timestamp_column] == pl.Utf8:
        df = df.with_columns(pl.col(timestamp_column).str.to_datetime())

    if sort:
        df = df.sort([entity_column, timestamp_column], maintain_order=True)

    if limit:
        df = df.head(limit)

    payload_columns = [c for c in df.columns if c not in (entity_column, timestamp_column)]
    logger.info(
        "Loaded %s events from %s (payload columns: %s)",
        f"{len(df):,}",
        filepath,
        ", ".join(payload_columns) or "none",
    )

    for row in df.iter_rows(named=True):
        payload = {c: row[c] for c in payload_columns} if payload_columns else None
        yield Event(
            entity_id=row[entity_column],
            timestamp=row[timestamp_column],
            payload=payload,
        )


def write_sessions(sessions: Iterable[Session], stream: TextIO) -> int:
    """
    Write sessions as JSON lines.

    Returns:
        Number of sessions written
    """
    count = 0
    for session in sessions:
        stream.write(json.dumps(session.to_record(), default=str))
        stream.write("\n")
        count += 1
    return count
