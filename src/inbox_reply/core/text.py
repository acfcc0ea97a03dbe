"""Word tokenisation for subject and body text."""

from __future__ import annotations

import re

# Runs of letters/digits, optionally joined by single '.' or "'" characters.
WORD_PATTERN = re.compile(r"[^\W_]+(?:[.'][^\W_]+)*")


def parse_words(text: str | None) -> list[str]:
    """Split text into word strings.

    Args:
        text: Input text, may be None.

    Returns:
        Words in order of appearance; empty list for empty input.
    """
    if not text:
        return []

    text = text.replace("’", "'").replace("`", "'")
    return WORD_PATTERN.findall(text)


CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def split_camel_case(text: str) -> str:
    """Insert spaces at camel-case boundaries: "FirstOnToLine" -> "First On To Line"."""
    return CAMEL_BOUNDARY.sub(" ", text)
