# ==============================================================================
# Version Utilities
# ==============================================================================
"""
Version reporting for `sessionize version`.

The sessionize version comes from the installed distribution metadata. When
running from a source checkout that was never installed, it is read from the
[project] table of the checkout's pyproject.toml instead.
"""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION = "sessionize"

# Libraries the engine and CLI are built on, reported alongside our version
RUNTIME_PACKAGES = ("pydantic", "pydantic-settings", "polars", "typer")

PYPROJECT_PATH = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _pyproject_version(path: Path = PYPROJECT_PATH) -> str | None:
    """Read [project].version from a pyproject.toml, or None if unavailable."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return None
    project = data.get("project", {})
    if project.get("name") != DISTRIBUTION:
        return None
    return project.get("version")


def get_sessionize_version(pyproject_path: Path = PYPROJECT_PATH) -> str:
    """
    Get the sessionize version.

    Returns:
        Installed version, else the source checkout's pyproject.toml version,
        else "unknown"
    """
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        return _pyproject_version(pyproject_path) or "unknown"


def get_package_version(package_name: str) -> str:
    """Version of an installed package, or "unknown" if it is not installed."""
    try:
        return version(package_name)
    except PackageNotFoundError:
        return "unknown"


def get_runtime_versions() -> dict[str, str]:
    """Versions of the runtime libraries, keyed by distribution name."""
    return {name: get_package_version(name) for name in RUNTIME_PACKAGES}
