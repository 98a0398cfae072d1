"""Workspace discovery and directory traversal utilities."""

from __future__ import annotations

import json
from pathlib import Path, PurePosixPath
from typing import Callable, Dict, List, Optional, Sequence

from .errors import ManifestError
from .logging import get_logger

PACKAGE_JSON = "package.json"

logger = get_logger("workspace")


def load_package_json(directory: Path) -> Optional[Dict[str, object]]:
    """Return the parsed package.json of ``directory`` or None when absent."""
    package_json = directory / PACKAGE_JSON
    if not package_json.is_file():
        return None
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ManifestError(f"Unable to read {package_json}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"{package_json} must contain a JSON object")
    return data


def map_workspace_to_packages(root: Path, patterns: Sequence[str]) -> List[Path]:
    """Expand workspace globs into package directories that hold a package.json."""
    root = root.resolve()
    locations: set[Path] = set()
    for pattern in patterns:
        for candidate in root.glob(pattern):
            if candidate.is_dir() and (candidate / PACKAGE_JSON).is_file():
                locations.add(candidate)
    return sorted(locations)


def traverse_dirs(
    location: Path,
    action: Callable[[Path], None],
    *,
    level: int = 0,
    level_limit: int = 1,
) -> None:
    """Apply ``action`` to ``location`` and its subdirectories, pre-order.

    Directories more than ``level_limit`` levels below the starting point are
    not visited. Symlinked directories are not followed.
    """
    if level > level_limit:
        return

    action(location)

    for child in sorted(location.iterdir()):
        if child.is_dir() and not child.is_symlink():
            traverse_dirs(child, action, level=level + 1, level_limit=level_limit)


def report_file_name(package_name: str) -> str:
    """Return ``<basename>-dependency.json`` for a (possibly scoped) package name."""
    base = PurePosixPath(package_name).name or package_name
    return f"{base}-dependency.json"


__all__ = [
    "PACKAGE_JSON",
    "load_package_json",
    "map_workspace_to_packages",
    "report_file_name",
    "traverse_dirs",
]
