"""Utility functions for inspecting the target Go project.

This module reads the module identity from ``go.mod``, lists feature modules
and walks the project's Go sources.
"""

import re
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from .logging_config import get_logger

logger = get_logger(__name__)

GO_MOD_FILENAME = "go.mod"
MODULE_LINE_RE = re.compile(r"^module\s+(\S+)", re.MULTILINE)
SKIPPED_DIRS = {".git", "vendor", "node_modules"}


class ScaffoldError(Exception):
    """Base exception for scaffolding runs that must abort."""

    pass


class ProjectError(ScaffoldError):
    """Raised when the target directory is not a usable Go project."""

    pass


class PreconditionError(ScaffoldError):
    """Raised before any write when a run can not proceed safely."""

    pass


def find_project_root(start: str | Path) -> Path:
    """Find the nearest directory at or above ``start`` holding a go.mod.

    Args:
        start: Directory to start the search from.

    Returns:
        The project root.

    Raises:
        ProjectError: If no go.mod exists up to the filesystem root.
    """
    current = Path(start).resolve()
    for candidate in (current, *current.parents):
        if (candidate / GO_MOD_FILENAME).is_file():
            logger.debug("Project root found at %s", candidate)
            return candidate
    raise ProjectError(f"No {GO_MOD_FILENAME} found in {current} or its parents")


def read_module_path(project_root: str | Path) -> str:
    """Read the Go module path from the project's go.mod.

    Args:
        project_root: Directory containing go.mod.

    Returns:
        The module path, e.g. ``github.com/acme/shop``.

    Raises:
        ProjectError: If go.mod is missing, unreadable or has no module line.
    """
    go_mod = Path(project_root) / GO_MOD_FILENAME
    if not go_mod.is_file():
        raise ProjectError(f"{GO_MOD_FILENAME} not found at {go_mod}")

    try:
        content = go_mod.read_text(encoding="utf-8")
    except OSError as e:
        raise ProjectError(f"Error reading {go_mod}: {e}") from e

    match = MODULE_LINE_RE.search(content)
    if not match:
        raise ProjectError(f"Could not find module path in {go_mod}")

    return match.group(1)


def list_modules(
    project_root: str | Path,
    internal_dir: str = "internal",
    excluded: Iterable[str] = ("shared", "infra"),
) -> List[str]:
    """List feature module directories under the internal directory.

    Args:
        project_root: Project root.
        internal_dir: Directory holding the modules, relative to the root.
        excluded: Directory names that are not feature modules.

    Returns:
        Sorted module names; empty if the internal directory does not exist.
    """
    base = Path(project_root) / internal_dir
    if not base.is_dir():
        return []

    skip = set(excluded)
    return sorted(
        entry.name
        for entry in base.iterdir()
        if entry.is_dir() and entry.name not in skip and not entry.name.startswith(".")
    )


def iter_go_files(project_root: str | Path) -> Iterator[Path]:
    """Yield every .go file of the project, skipping VCS and vendor trees."""
    root = Path(project_root)
    for path in sorted(root.rglob("*.go")):
        if any(part in SKIPPED_DIRS for part in path.relative_to(root).parts):
            continue
        yield path


def module_path_from_remote(remote: str) -> Optional[str]:
    """Turn a git remote URL into a Go module path.

    ``git@github.com:acme/shop.git`` and ``https://github.com/acme/shop.git``
    both become ``github.com/acme/shop``.

    Returns:
        The module path, or None if the URL has no host/path part.
    """
    text = remote.strip()
    if not text:
        return None

    text = re.sub(r"^(ssh|https?|git)://", "", text)
    text = re.sub(r"^[^@/]+@", "", text)
    text = re.sub(r"\.git$", "", text)
    text = text.replace(":", "/", 1)

    if "/" not in text:
        return None
    return text.strip("/")
