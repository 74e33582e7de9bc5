# ==============================================================================
# Tests for Version Utilities — versions.py
# ==============================================================================
"""
Tests for version lookup, including the pyproject.toml fallback used when
running from an uninstalled source checkout.
"""

from importlib.metadata import PackageNotFoundError
from unittest.mock import patch

from sessionize.utils import versions
from sessionize.utils.versions import (
    RUNTIME_PACKAGES,
    get_package_version,
    get_runtime_versions,
    get_sessionize_version,
)


def _write_pyproject(path, name="sessionize", version="9.8.7"):
    path.write_text(f'[project]\nname = "{name}"\nversion = "{version}"\n')
    return path


def _not_installed(name):
    raise PackageNotFoundError(name)


class TestSessionizeVersion:
    """The version falls back to the checkout's pyproject.toml."""

    def test_installed_metadata_wins(self, tmp_path):
        pyproject = _write_pyproject(tmp_path / "pyproject.toml")
        with patch.object(versions, "version", return_value="1.2.3"):
            assert get_sessionize_version(pyproject) == "1.2.3"

    def test_falls_back_to_pyproject(self, tmp_path):
        pyproject = _write_pyproject(tmp_path / "pyproject.toml")
        with patch.object(versions, "version", side_effect=_not_installed):
            assert get_sessionize_version(pyproject) == "9.8.7"

    def test_ignores_other_projects_pyproject(self, tmp_path):
        pyproject = _write_pyproject(tmp_path / "pyproject.toml", name="other-project")
        with patch.object(versions, "version", side_effect=_not_installed):
            assert get_sessionize_version(pyproject) == "unknown"

    def test_missing_pyproject(self, tmp_path):
        with patch.object(versions, "version", side_effect=_not_installed):
            assert get_sessionize_version(tmp_path / "absent.toml") == "unknown"

    def test_malformed_pyproject(self, tmp_path):
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project\nname = ")
        with patch.object(versions, "version", side_effect=_not_installed):
            assert get_sessionize_version(pyproject) == "unknown"


class TestPackageVersions:
    """Runtime library versions are reported by distribution name."""

    def test_unknown_package(self):
        assert get_package_version("sessionize-no-such-distribution") == "unknown"

    def test_installed_package(self):
        assert get_package_version("pydantic") != "unknown"

    def test_runtime_versions_cover_stack(self):
        reported = get_runtime_versions()
        assert tuple(reported) == RUNTIME_PACKAGES
        assert all(v != "unknown" for v in reported.values())
