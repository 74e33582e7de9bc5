# ==============================================================================
# Sessionize CLI
# ==============================================================================
"""
Command-line interface for the sessionization engine.

Usage:
    sessionize --help
    sessionize run events.csv -o sessions.jsonl
    sessionize config show
    sessionize version
"""

import os

import typer

# Set consistent terminal width for help output formatting
if "COLUMNS" not in os.environ:
    os.environ["COLUMNS"] = "115"

app = typer.Typer(
    name="sessionize",
    help="Gap-based event sessionization CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register run command from cli.run module
from sessionize.cli.run import run_sessionize

app.command("run")(run_sessionize)

config_app = typer.Typer(
    help="Configuration operations",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

from sessionize.cli.config import config_show

config_app.command("show")(config_show)


@app.command("version")
def show_version() -> None:
    """Show the installed sessionize version."""
    from sessionize.utils.versions import get_runtime_versions, get_sessionize_version

    print(f"sessionize {get_sessionize_version()}")
    for name, package_version in get_runtime_versions().items():
        print(f"  {name} {package_version}")


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
