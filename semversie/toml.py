"""TOML reading and writing utilities.

Uses tomlkit to preserve formatting and comments when stamping a new
version into pyproject.toml.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

import tomlkit
from packaging.version import Version


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file.

    Returns a TOMLDocument that preserves formatting when modified and saved.
    """
    return tomlkit.parse(path.read_text())


def save_pyproject(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    path.write_text(tomlkit.dumps(doc))


def get_project_version(doc: tomlkit.TOMLDocument) -> str:
    """Extract version from [project].version, defaulting to '0.0.0'."""
    return doc.get("project", {}).get("version", "0.0.0")


def set_project_version(path: Path, version: str) -> str:
    """Write ``version`` into [project].version.

    The version is normalized through packaging first, so only valid
    PEP 440 strings ever reach the file.

    Raises:
        packaging.version.InvalidVersion: If version is not PEP 440.

    Returns:
        The normalized version that was written.
    """
    normalized = str(Version(version))
    doc = load_pyproject(path)
    # Cast needed because tomlkit types are complex unions
    project = cast(dict[str, Any], doc.setdefault("project", tomlkit.table()))
    project["version"] = normalized
    save_pyproject(path, doc)
    return normalized
