"""Parse a tokenized command line and run external commands with redirection."""

import subprocess
import sys
from dataclasses import dataclass
from typing import TextIO

REDIRECT_STDOUT = {">": False, "1>": False, ">>": True, "1>>": True}
REDIRECT_STDERR = {"2>": False, "2>>": True}
REDIRECT_OPERATORS = frozenset(REDIRECT_STDOUT) | frozenset(REDIRECT_STDERR)


@dataclass
class Command:
    """A single command with its output redirections."""

    argv: list[str]
    stdout_file: str | None = None
    stdout_append: bool = False
    stderr_file: str | None = None
    stderr_append: bool = False


def parse_redirections(tokens: list[str]) -> Command:
    """Extract redirection operators and their targets from the word list.

    Example: ['echo', 'hi', '2>>', 'err.log'] -> argv ['echo', 'hi'],
    stderr appended to err.log.

    Raises ValueError on a missing target or an empty command.
    """
    argv: list[str] = []
    cmd = Command(argv=argv)

    i = 0
    while i < len(tokens):
        token = tokens[i]

        match token:
            case op if op in REDIRECT_OPERATORS:
                if i + 1 >= len(tokens):
                    raise ValueError("syntax error near unexpected token `newline'")
                if op in REDIRECT_STDOUT:
                    cmd.stdout_file = tokens[i + 1]
                    cmd.stdout_append = REDIRECT_STDOUT[op]
                else:
                    cmd.stderr_file = tokens[i + 1]
                    cmd.stderr_append = REDIRECT_STDERR[op]
                i += 2
            case _:
                argv.append(token)
                i += 1

    if not argv:
        raise ValueError("syntax error: missing command")

    return cmd


def open_redirects(cmd: Command) -> tuple[TextIO | None, TextIO | None]:
    """Open file handles for redirections. Returns (stdout_fh, stderr_fh).

    Raises OSError if a target cannot be opened; anything already opened
    is closed first.
    """
    stdout_fh = None
    stderr_fh = None

    try:
        if cmd.stdout_file:
            stdout_fh = open(cmd.stdout_file, "a" if cmd.stdout_append else "w")  # noqa: SIM115
        if cmd.stderr_file:
            stderr_fh = open(cmd.stderr_file, "a" if cmd.stderr_append else "w")  # noqa: SIM115
    except OSError as e:
        print(f"minishell: {e.filename}: {e.strerror}", file=sys.stderr)
        if stdout_fh:
            stdout_fh.close()
        raise

    return stdout_fh, stderr_fh


def execute(cmd: Command) -> int:
    """Run an external command, returning its exit code."""
    try:
        stdout_fh, stderr_fh = open_redirects(cmd)
    except OSError:
        return 1

    try:
        result = subprocess.run(cmd.argv, stdout=stdout_fh, stderr=stderr_fh)
        return result.returncode
    except (FileNotFoundError, PermissionError):
        print(f"{cmd.argv[0]}: command not found", file=sys.stderr)
        return 127
    finally:
        if stdout_fh:
            stdout_fh.close()
        if stderr_fh:
            stderr_fh.close()
