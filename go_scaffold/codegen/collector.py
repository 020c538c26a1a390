"""
Field schema collection.

Turns operator lines of the form ``name:TYPE`` into FieldSpecs until the
``done`` sentinel. Bad lines are reported and skipped; the loop never ends
on a typo. Prompting lives in ``interactive.py``; this module only parses.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Set, Tuple

from ..logging_config import get_logger
from ..utils import PreconditionError
from .core.naming import is_go_reserved
from .core.schema import IMPLICIT_COLUMNS, FieldSpec, FieldSpecError
from .core.types import GoTypeMapper

logger = get_logger(__name__)

DONE_TOKEN = "done"


@dataclass
class FieldFeedback:
    """Outcome of one input line."""

    line: str
    accepted: bool = False
    finished: bool = False
    field_spec: Optional[FieldSpec] = None
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def ignored(self) -> bool:
        """Blank lines are neither accepted nor rejected."""
        return not (self.accepted or self.finished or self.error)

    def confirmation(self) -> str:
        """Echo line for an accepted field with every derived form."""
        spec = self.field_spec
        if spec is None:
            return ""
        return (
            f"Added field: {spec.public_name} ({spec.host_type}) -> DB: "
            f"{spec.column_name}, Go: {spec.private_name}"
        )


class FieldSchemaCollector:
    """Accumulates the ordered field list of one entity."""

    def __init__(self, type_mapper: Optional[GoTypeMapper] = None):
        self.type_mapper = type_mapper or GoTypeMapper()
        self._fields: List[FieldSpec] = []
        self._columns: Set[str] = set()
        self._closed = False

    @property
    def fields(self) -> Tuple[FieldSpec, ...]:
        return tuple(self._fields)

    @property
    def closed(self) -> bool:
        return self._closed

    def add(self, raw_input: str) -> FieldSpec:
        """
        Parse and append one field.

        Raises:
            FieldSpecError: If the line is malformed or the column is taken
        """
        if self._closed:
            raise FieldSpecError("Field list is already complete")

        spec = FieldSpec.parse(raw_input, self.type_mapper)

        if spec.column_name in IMPLICIT_COLUMNS:
            raise FieldSpecError(
                f"Field '{spec.column_name}' is generated automatically; "
                "choose another name"
            )
        if spec.column_name in self._columns:
            raise FieldSpecError(f"Field '{spec.column_name}' was already added")

        self._fields.append(spec)
        self._columns.add(spec.column_name)
        logger.debug("Accepted field %s as %s", spec.column_name, spec.host_type)
        return spec

    def feed(self, line: str) -> FieldFeedback:
        """Process one operator line; never raises for bad input."""
        text = line.strip()
        feedback = FieldFeedback(line=line)

        if text.lower() == DONE_TOKEN:
            self._closed = True
            feedback.finished = True
            return feedback

        if not text:
            return feedback

        try:
            spec = self.add(text)
        except FieldSpecError as e:
            logger.debug("Rejected field input %r: %s", text, e)
            feedback.error = str(e)
            return feedback

        feedback.accepted = True
        feedback.field_spec = spec
        feedback.warnings.extend(spec.go_type.validation_hints)
        if is_go_reserved(spec.private_name):
            feedback.warnings.append(
                f"'{spec.private_name}' is a Go keyword or builtin; "
                "the generated code will need a manual rename"
            )
        return feedback

    def finish(self) -> Tuple[FieldSpec, ...]:
        """
        Freeze the field list.

        Raises:
            PreconditionError: If no field was accepted
        """
        self._closed = True
        if not self._fields:
            raise PreconditionError("At least one field is required")
        return self.fields

    def collect(
        self,
        lines: Iterable[str],
        on_feedback: Optional[Callable[[FieldFeedback], None]] = None,
    ) -> Tuple[FieldSpec, ...]:
        """
        Consume lines until ``done`` (or the end of input) and freeze the list.

        Args:
            lines: Operator input, one field per line
            on_feedback: Called with the outcome of every line

        Returns:
            The collected fields in input order

        Raises:
            PreconditionError: If no field was accepted
        """
        for line in lines:
            feedback = self.feed(line)
            if on_feedback is not None:
                on_feedback(feedback)
            if feedback.finished:
                break
        return self.finish()


def parse_fields(
    tokens: Iterable[str], type_mapper: Optional[GoTypeMapper] = None
) -> Tuple[FieldSpec, ...]:
    """
    Parse a non-interactive list of ``name:TYPE`` tokens.

    Unlike ``collect``, any bad token is an error.

    Raises:
        FieldSpecError: On the first malformed or duplicate token
        PreconditionError: If the list is empty
    """
    collector = FieldSchemaCollector(type_mapper)
    for token in tokens:
        collector.add(token)
    return collector.finish()
