"""Classify single characters of a shell input line."""

from enum import Enum


class CharClass(Enum):
    ORDINARY = "ordinary"
    QUOTE = "quote"
    TRIGGER = "trigger"
    SEPARATOR = "separator"


class QuoteContext(Enum):
    """Active quoting delimiter. The value is the delimiter character."""

    NONE = ""
    SINGLE = "'"
    DOUBLE = '"'


class Trigger(Enum):
    """Characters that start a substitution instead of being copied."""

    DOLLAR = "$"
    TILDE = "~"
    STAR = "*"
    ESCAPE = "\\"


_QUOTES = frozenset(q.value for q in QuoteContext if q is not QuoteContext.NONE)
_TRIGGERS = frozenset(t.value for t in Trigger)


def classify(ch: str) -> CharClass:
    """Return the class of a single character.

    Whitespace is checked first so the mapping stays total: every
    character lands in exactly one class.
    """
    if len(ch) != 1:
        raise ValueError(f"expected a single character, got {ch!r}")
    if ch.isspace():
        return CharClass.SEPARATOR
    if ch in _QUOTES:
        return CharClass.QUOTE
    if ch in _TRIGGERS:
        return CharClass.TRIGGER
    return CharClass.ORDINARY
