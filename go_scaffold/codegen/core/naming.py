"""
Naming utilities for scaffolded code.

Derives the snake_case, camelCase and PascalCase spellings of one logical
identifier. Every generated artifact takes its names from the same
``NameForms`` instance, so a field is spelled identically in the SQL column
list, the Go struct and the JSON tags.
"""

import re
from dataclasses import dataclass
from typing import Set

# Go reserved words
GO_RESERVED_WORDS: Set[str] = {
    "break",
    "case",
    "chan",
    "const",
    "continue",
    "default",
    "defer",
    "else",
    "fallthrough",
    "for",
    "func",
    "go",
    "goto",
    "if",
    "import",
    "interface",
    "map",
    "package",
    "range",
    "return",
    "select",
    "struct",
    "switch",
    "type",
    "var",
}

# Predeclared identifiers that generated locals would shadow
GO_BUILTIN_NAMES: Set[str] = {
    "append",
    "bool",
    "byte",
    "cap",
    "close",
    "copy",
    "delete",
    "error",
    "float64",
    "int",
    "len",
    "make",
    "new",
    "panic",
    "string",
}


@dataclass(frozen=True)
class NameForms:
    """The three canonical spellings of one identifier."""

    snake: str
    camel: str
    pascal: str


def split_words(name: str) -> list[str]:
    """Split an identifier in any casing into lower-cased word segments.

    A new segment starts at an explicit ``_``/``-``/whitespace separator or at
    a lowercase (or digit) to uppercase transition.
    """
    # Anything that is not a letter or digit acts as a separator
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "_", name)

    # Insert underscore before uppercase letters that follow lowercase/digits
    cleaned = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", cleaned)

    return [part.lower() for part in cleaned.split("_") if part]


def normalize(name: str) -> NameForms:
    """
    Derive the canonical name forms of an identifier.

    ``user_name``, ``user-name``, ``userName`` and ``UserName`` all normalize
    to ``NameForms("user_name", "userName", "UserName")``.

    Args:
        name: Identifier typed by the operator

    Returns:
        NameForms with snake, camel and pascal spellings (empty for empty input)
    """
    parts = split_words(name)
    if not parts:
        return NameForms(snake="", camel="", pascal="")

    snake = "_".join(parts)
    camel = parts[0] + "".join(part.capitalize() for part in parts[1:])
    pascal = camel[0].upper() + camel[1:]

    return NameForms(snake=snake, camel=camel, pascal=pascal)


def is_go_reserved(name: str) -> bool:
    """Check whether a name would clash with a Go keyword or builtin."""
    return name in GO_RESERVED_WORDS or name in GO_BUILTIN_NAMES
