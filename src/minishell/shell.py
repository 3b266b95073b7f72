"""Main shell loop: prompt, read, tokenize, dispatch, repeat."""

import contextlib
import os
import readline
import sys

from minishell.builtins import BUILTIN_REGISTRY, find_executable
from minishell.completion import setup_completion
from minishell.expansion import NoHomeDirectory
from minishell.pipeline import Command, execute, open_redirects, parse_redirections
from minishell.tokenizer import Tokenizer

HISTORY_FILE = os.environ.get("MINISHELL_HISTORY") or os.path.expanduser("~/.minishell_history")
HISTORY_LENGTH = 1000
PROMPT = "$ "


class Shell:
    """Shell state and main loop."""

    def __init__(self) -> None:
        self.working_dir: str = os.getcwd()
        self.last_exit_code: int = 0

    def load_history(self) -> None:
        with contextlib.suppress(FileNotFoundError, PermissionError, OSError):
            readline.read_history_file(HISTORY_FILE)

    def save_history(self) -> None:
        with contextlib.suppress(PermissionError, OSError):
            readline.write_history_file(HISTORY_FILE)

    def get_prompt(self) -> str:
        return PROMPT

    def run_command(self, line: str) -> None:
        """Full processing pipeline:

        1. Tokenize (quotes, escapes, $VAR and ~ expansion)
        2. Reject the line if ~ could not be expanded
        3. Parse redirections
        4. Dispatch to a builtin or an executable on PATH
        """
        words: list[str] = []
        for token in Tokenizer(line):
            for error in token.errors:
                if isinstance(error, NoHomeDirectory):
                    print(f"minishell: {error}", file=sys.stderr)
                    self.last_exit_code = 1
                    return
            words.append(token.text)

        if not words:
            return

        try:
            cmd = parse_redirections(words)
        except ValueError as e:
            print(f"minishell: {e}", file=sys.stderr)
            self.last_exit_code = 2
            return

        name = cmd.argv[0]
        if name in BUILTIN_REGISTRY:
            self._run_builtin(cmd)
        elif find_executable(name) is None:
            print(f"{name}: command not found", file=sys.stderr)
            self.last_exit_code = 127
        else:
            self.last_exit_code = execute(cmd)

    def _run_builtin(self, cmd: Command) -> None:
        """Run a builtin command, handling stdout/stderr redirection."""
        try:
            stdout_fh, stderr_fh = open_redirects(cmd)
        except OSError:
            self.last_exit_code = 1
            return

        old_stdout, old_stderr = sys.stdout, sys.stderr
        if stdout_fh:
            sys.stdout = stdout_fh
        if stderr_fh:
            sys.stderr = stderr_fh
        try:
            handler = BUILTIN_REGISTRY[cmd.argv[0]]
            self.last_exit_code = handler(cmd.argv[1:], self)
        finally:
            sys.stdout, sys.stderr = old_stdout, old_stderr
            if stdout_fh:
                stdout_fh.close()
            if stderr_fh:
                stderr_fh.close()

    def run(self) -> None:
        """Main shell loop."""
        self.load_history()
        readline.set_history_length(HISTORY_LENGTH)
        setup_completion()

        while True:
            try:
                line = input(self.get_prompt())
            except (EOFError, KeyboardInterrupt):
                print()
                break

            line = line.strip()
            if not line or line.startswith("#"):
                continue

            self.run_command(line)

        self.save_history()


def main() -> None:
    """Entry point."""
    shell = Shell()
    shell.run()
