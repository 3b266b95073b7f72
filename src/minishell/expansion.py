"""Resolve $VAR, ~, * and backslash escapes to their substituted text."""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from minishell.charclass import QuoteContext, Trigger

# Escaped characters that lose their backslash inside double quotes
_DOUBLE_QUOTE_ESCAPABLE = frozenset('"\\$')


class ExpansionError(ValueError):
    """An expansion that could not produce a value."""


class UndefinedVariable(ExpansionError):
    def __init__(self, name: str) -> None:
        super().__init__(f"{name}: undefined variable")
        self.name = name


class NoHomeDirectory(ExpansionError):
    def __init__(self) -> None:
        super().__init__("~: home directory is not available")


def home_directory() -> str | None:
    """Return the invoking user's home directory, or None if unknown."""
    home = os.path.expanduser("~")
    return None if home == "~" else home


@dataclass(frozen=True)
class Environment:
    """Variables and home directory that expansions read from."""

    variables: Mapping[str, str]
    home: str | None = None

    @classmethod
    def from_process(cls) -> "Environment":
        return cls(os.environ, home_directory())

    def lookup(self, name: str) -> str | None:
        return self.variables.get(name)


def is_name_start(ch: str) -> bool:
    return ch == "_" or ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def is_name_char(ch: str) -> bool:
    return is_name_start(ch) or ("0" <= ch <= "9")


def resolve(trigger: Trigger, text: str, context: QuoteContext, env: Environment) -> str:
    """Produce the substituted text for one expansion.

    ``text`` is the accumulated payload: the variable name for DOLLAR, the
    escaped character for ESCAPE (empty when the line ended on a
    backslash), unused for TILDE and STAR.

    Raises UndefinedVariable or NoHomeDirectory; the caller decides what
    to substitute.
    """
    match trigger:
        case Trigger.DOLLAR:
            if not text:
                return "$"
            value = env.lookup(text)
            if value is None:
                raise UndefinedVariable(text)
            return value
        case Trigger.TILDE:
            if env.home is None:
                raise NoHomeDirectory()
            return env.home
        case Trigger.STAR:
            return "*"
        case Trigger.ESCAPE:
            return _resolve_escape(text, context)


def _resolve_escape(ch: str, context: QuoteContext) -> str:
    if not ch:
        return "\\"
    match context:
        case QuoteContext.NONE:
            return ch
        case QuoteContext.DOUBLE if ch in _DOUBLE_QUOTE_ESCAPABLE:
            return ch
        case _:
            return "\\" + ch
