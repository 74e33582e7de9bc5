# ==============================================================================
# Config Commands
# ==============================================================================
"""
Configuration commands for the sessionize CLI.
"""

import json
from typing import Annotated

import typer

from sessionize.cli.shared import C
from sessionize.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration."""
    settings = get_settings()

    if json_output:
        print(json.dumps(settings.model_dump(), indent=2))
        return

    field_column = settings.reducer_field or "(whole payload)"

    print()
    print(f"{C.BOLD}Configuration{C.RESET}")
    print()
    print(f"{C.CYAN}Sessions{C.RESET}")
    print(f"  Timeout:    {C.WHITE}{settings.timeout_minutes:g} minutes{C.RESET}")
    print(f"  Units:      {C.WHITE}{settings.timestamp_unit}{C.RESET}")
    print()
    print(f"{C.CYAN}Aggregation{C.RESET}")
    print(f"  Reducer:    {C.WHITE}{settings.reducer}{C.RESET}")
    print(f"  Field:      {C.WHITE}{field_column}{C.RESET}")
    print(f"  Errors:     {C.WHITE}{settings.error_policy}{C.RESET}")
    print()
    print(f"{C.CYAN}Execution{C.RESET}")
    print(f"  Workers:    {C.WHITE}{settings.workers}{C.RESET}")
    print(f"  Log level:  {C.WHITE}{settings.log_level}{C.RESET}")
    print()
