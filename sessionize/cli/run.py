# ==============================================================================
# Run Command
# ==============================================================================
"""
Sessionize a CSV file of events into JSON lines of sessions.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError

from sessionize.cli.shared import C, I, settings_with_overrides
from sessionize.core.errors import SessionizeError


# ==============================================================================
# Commands
# ==============================================================================


def run_sessionize(
    input_path: Annotated[
        Path,
        typer.Argument(
            help="CSV file with entity and timestamp columns",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write JSON lines here instead of stdout"),
    ] = None,
    timeout_minutes: Annotated[
        Optional[float],
        typer.Option("--timeout-minutes", "-t", help="Inactivity gap that starts a new session"),
    ] = None,
    reducer: Annotated[
        Optional[str],
        typer.Option("--reducer", "-r", help="count, sum, first, last, collect or distinct"),
    ] = None,
    field: Annotated[
        Optional[str],
        typer.Option("--field", "-f", help="Payload column the reducer is applied to"),
    ] = None,
    error_policy: Annotated[
        Optional[str],
        typer.Option("--error-policy", help="fail_fast or collect"),
    ] = None,
    timestamp_unit: Annotated[
        Optional[str],
        typer.Option("--timestamp-unit", help="Unit of numeric timestamps (ms or s)"),
    ] = None,
    workers: Annotated[
        Optional[int],
        typer.Option("--workers", "-w", help="Worker threads (1 = sequential)"),
    ] = None,
    sort: Annotated[
        bool,
        typer.Option("--sort", help="Sort input by entity and timestamp first"),
    ] = False,
    entity_column: Annotated[
        str, typer.Option("--entity-column", help="Entity column name")
    ] = "entity_id",
    timestamp_column: Annotated[
        str, typer.Option("--timestamp-column", help="Timestamp column name")
    ] = "timestamp",
) -> None:
    """Group events into sessions separated by inactivity gaps.

    The input must be grouped by entity and sorted by timestamp, unless
    --sort is given. Extra CSV columns become the event payload.

    Examples:
        sessionize run events.csv -o sessions.jsonl
        sessionize run events.csv --sort -t 15 -r sum -f amount
    """
    from sessionize.runner import SessionizeRunner

    try:
        settings = settings_with_overrides(
            timeout_minutes=timeout_minutes,
            reducer=reducer,
            reducer_field=field,
            error_policy=error_policy,
            timestamp_unit=timestamp_unit,
            workers=workers,
        )
    except ValidationError as e:
        typer.echo(f"{C.BRIGHT_RED}{I.CROSS} Invalid option: {e}{C.RESET}", err=True)
        raise typer.Exit(1)

    runner = SessionizeRunner(
        settings,
        input_path,
        output_path=output,
        sort=sort,
        entity_column=entity_column,
        timestamp_column=timestamp_column,
    )

    try:
        outcome = runner.run()
    except (SessionizeError, ValueError) as e:
        typer.echo(f"{C.BRIGHT_RED}{I.CROSS} {e}{C.RESET}", err=True)
        raise typer.Exit(1)

    summary = (
        f"{outcome.sessions_written:,} sessions from {outcome.events_read:,} events "
        f"({outcome.entities:,} entities)"
    )
    if outcome.cancelled:
        typer.echo(f"{C.BRIGHT_YELLOW}{I.WARN} Cancelled: {summary}{C.RESET}", err=True)
    else:
        typer.echo(f"{C.BRIGHT_GREEN}{I.CHECK} {summary}{C.RESET}", err=True)

    if outcome.errors:
        typer.echo(
            f"{C.BRIGHT_RED}{I.CROSS} {len(outcome.errors)} session(s) failed to reduce:{C.RESET}",
            err=True,
        )
        for failure in outcome.errors:
            typer.echo(f"  {I.ARROW} {failure}", err=True)
        raise typer.Exit(2)
