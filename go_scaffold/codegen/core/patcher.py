"""
Anchor-based patching of existing source files.

New modules and entities are wired into files that already exist (the
composition root, a module's wiring and route files) by inserting text next
to a literal anchor. The patcher never parses Go; it only needs each anchor
to be present once it is asked to insert next to it.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from ...logging_config import get_logger

logger = get_logger(__name__)


class PatchError(Exception):
    """Base exception for patch application errors."""

    pass


class AnchorNotFoundError(PatchError):
    """Raised when an anchor is missing from its target file."""

    def __init__(self, file_path: Path, anchor: str):
        self.file_path = file_path
        self.anchor = anchor
        super().__init__(
            f"Anchor '{anchor}' not found in {file_path}; "
            "the new code would not be wired in"
        )


class PatchTargetMissingError(PatchError):
    """Raised when a file to patch does not exist."""

    pass


class InsertionMode(Enum):
    """Where the payload goes relative to the line holding the anchor."""

    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class PatchTarget:
    """One additive mutation of an existing file."""

    file_path: Path
    anchor: str
    payload: str
    mode: InsertionMode = InsertionMode.AFTER
    guard: Optional[str] = None  # Text whose presence means already applied
    description: str = ""

    @property
    def guard_text(self) -> str:
        return (self.guard if self.guard is not None else self.payload).strip()


@dataclass
class PatchOutcome:
    """Result of one patch target."""

    target: PatchTarget
    applied: bool
    message: str = ""


@dataclass
class PatchPlan:
    """Patched file contents computed in memory, not yet written."""

    contents: Dict[Path, str] = field(default_factory=dict)
    originals: Dict[Path, str] = field(default_factory=dict)
    outcomes: List[PatchOutcome] = field(default_factory=list)

    @property
    def changed_files(self) -> List[Path]:
        return [
            path
            for path, content in self.contents.items()
            if content != self.originals[path]
        ]

    @property
    def skipped(self) -> List[PatchOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.applied]


def _squash_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def contains_fragment(content: str, fragment: str) -> bool:
    """Check for a fragment ignoring differences in whitespace (gofmt alignment)."""
    return _squash_whitespace(fragment) in _squash_whitespace(content)


def insert_at_anchor(
    content: str, anchor: str, payload: str, mode: InsertionMode
) -> Optional[str]:
    """
    Insert payload lines before or after the line holding the first anchor match.

    Args:
        content: Current file content
        anchor: Literal text to locate
        payload: Text to insert (one or more lines, no trailing newline needed)
        mode: Insert above or below the anchor line

    Returns:
        New content, or None when the anchor does not occur
    """
    index = content.find(anchor)
    if index == -1:
        return None

    block = payload.rstrip("\n") + "\n"

    if mode == InsertionMode.BEFORE:
        line_start = content.rfind("\n", 0, index) + 1
        return content[:line_start] + block + content[line_start:]

    line_end = content.find("\n", index + len(anchor))
    if line_end == -1:
        return content + "\n" + block
    return content[: line_end + 1] + block + content[line_end + 1 :]


class CompositionPatcher:
    """Applies patch targets with a uniform idempotency guard."""

    def plan(self, targets: List[PatchTarget]) -> PatchPlan:
        """
        Compute the patched contents of every target file in memory.

        Targets are applied in order; several may hit the same file.

        Raises:
            PatchTargetMissingError: If a target file does not exist
            AnchorNotFoundError: If an anchor is missing
        """
        plan = PatchPlan()

        for target in targets:
            path = Path(target.file_path)

            if path not in plan.contents:
                if not path.is_file():
                    raise PatchTargetMissingError(f"File to patch not found: {path}")
                original = path.read_text(encoding="utf-8")
                plan.originals[path] = original
                plan.contents[path] = original

            content = plan.contents[path]

            if contains_fragment(content, target.guard_text):
                message = f"{target.description or 'Fragment'} already present in {path.name}"
                logger.warning("Skipping patch: %s", message)
                plan.outcomes.append(PatchOutcome(target, applied=False, message=message))
                continue

            patched = insert_at_anchor(content, target.anchor, target.payload, target.mode)
            if patched is None:
                logger.error("Anchor %r missing from %s", target.anchor, path)
                raise AnchorNotFoundError(path, target.anchor)

            plan.contents[path] = patched
            message = f"{target.description or 'Fragment'} added to {path.name}"
            logger.debug("Planned patch: %s", message)
            plan.outcomes.append(PatchOutcome(target, applied=True, message=message))

        return plan

    def commit(self, plan: PatchPlan) -> List[Path]:
        """Write every changed file of a plan and return their paths."""
        written = []
        for path in plan.changed_files:
            path.write_text(plan.contents[path], encoding="utf-8")
            logger.info("Patched %s", path)
            written.append(path)
        return written

    def apply(self, targets: List[PatchTarget]) -> List[PatchOutcome]:
        """Plan and write in one step."""
        plan = self.plan(targets)
        self.commit(plan)
        return plan.outcomes


def patch(file_path: Path, targets: List[PatchTarget]) -> List[PatchOutcome]:
    """Apply targets that all belong to one file."""
    for target in targets:
        if Path(target.file_path) != Path(file_path):
            raise PatchError(
                f"Patch target for {target.file_path} passed to patch({file_path})"
            )
    return CompositionPatcher().apply(targets)
