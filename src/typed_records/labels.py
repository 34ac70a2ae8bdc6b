"""Helpers for turning identifiers into human-readable labels."""

from __future__ import annotations

import re

# Word boundaries inside a single token: acronyms followed by a capitalized
# word, capitalized or lower-case words, bare acronyms, and digit runs.
_WORD_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+|[^\W\d_]+")

_SEPARATOR_PATTERN = re.compile(r"[\s_\-]+")

# Accessor prefixes: plain ``get`` is stripped, ``is``/``has`` are kept.
_ACCESSOR_PATTERN = re.compile(r"^(get|(is|has))([^a-z])(.*)$", re.DOTALL)


def to_label(name: str) -> str:
    """Convert an identifier such as ``firstName`` or ``first_name`` to ``First Name``.

    A trailing ``?`` is preserved.
    """
    suffix = ""
    if name.endswith("?"):
        name = name[:-1]
        suffix = "?"

    words: list[str] = []
    for token in _SEPARATOR_PATTERN.split(name):
        words.extend(_WORD_PATTERN.findall(token))

    return " ".join(w[:1].upper() + w[1:] for w in words) + suffix


def simple_name(name: str) -> str:
    """Drop package, class and nested-class qualifiers from a name."""
    dot_at = name.rfind(".")
    if dot_at > -1:
        name = name[dot_at + 1:]
    dollar_at = name.rfind("$")
    if dollar_at > -1:
        name = name[dollar_at + 1:]
    return name


def strip_accessor_prefix(name: str) -> str:
    """Strip a ``get`` accessor prefix, leaving ``is``/``has`` names alone.

    ``getFirstName`` becomes ``firstName``; ``isActive`` is returned as is.
    """
    match = _ACCESSOR_PATTERN.fullmatch(name)
    if match is None or match.group(2):
        return name
    return match.group(3).lower() + match.group(4)


def accessor_label(name: str) -> str:
    """Build a label for a possibly-qualified accessor name."""
    return to_label(strip_accessor_prefix(simple_name(name)))
