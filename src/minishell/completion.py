"""Readline tab completion for command names and file paths."""

import os
import readline
from functools import lru_cache

from minishell.builtins import BUILTIN_REGISTRY

_matches: list[str] = []


class _Node:
    __slots__ = ("children", "is_end")

    def __init__(self) -> None:
        self.children: dict[str, _Node] = {}
        self.is_end = False


class PrefixTree:
    """Character trie answering "which words start with this prefix"."""

    def __init__(self, words=()) -> None:
        self._root = _Node()
        self._size = 0
        for word in words:
            self.add(word)

    def __len__(self) -> int:
        return self._size

    def __contains__(self, word: str) -> bool:
        node = self._find(word)
        return node is not None and node.is_end

    def add(self, word: str) -> None:
        node = self._root
        for ch in word:
            node = node.children.setdefault(ch, _Node())
        if not node.is_end:
            node.is_end = True
            self._size += 1

    def starts_with(self, prefix: str) -> list[str]:
        """Return every stored word beginning with ``prefix``, sorted."""
        node = self._find(prefix)
        if node is None:
            return []

        results: list[str] = []
        stack = [(node, prefix)]
        while stack:
            current, path = stack.pop()
            if current.is_end:
                results.append(path)
            for ch, child in current.children.items():
                stack.append((child, path + ch))
        return sorted(results)

    def _find(self, prefix: str) -> _Node | None:
        node = self._root
        for ch in prefix:
            node = node.children.get(ch)
            if node is None:
                return None
        return node


def setup_completion() -> None:
    """Configure readline for tab completion."""
    readline.set_completer(completer)
    readline.set_completer_delims(" \t\n><")
    readline.parse_and_bind("tab: complete")


def completer(text: str, state: int) -> str | None:
    """Readline completer function.

    On state 0, compute all matches. On subsequent states, return the next.
    """
    global _matches

    if state == 0:
        line = readline.get_line_buffer()
        begidx = readline.get_begidx()
        _matches = complete(line[:begidx], text)

    if state < len(_matches):
        return _matches[state]
    return None


def complete(before_cursor: str, text: str) -> list[str]:
    """Compute completions for ``text`` given the line before it."""
    if not before_cursor.strip():
        return _complete_command(text)
    return _complete_path(text)


def _complete_command(text: str) -> list[str]:
    """Complete a command name from builtins and PATH executables."""
    return command_tree().starts_with(text)


def _complete_path(text: str) -> list[str]:
    """Complete a file or directory path."""
    dirname = os.path.dirname(text)
    basename = os.path.basename(text)
    search_dir = dirname or "."

    matches: list[str] = []
    try:
        for entry in os.listdir(search_dir):
            if entry.startswith(basename):
                full = os.path.join(dirname, entry) if dirname else entry
                if os.path.isdir(os.path.join(search_dir, entry)):
                    full += "/"
                matches.append(full)
    except OSError:
        pass

    return sorted(matches)


@lru_cache(maxsize=1)
def command_tree() -> PrefixTree:
    """Builtin names plus every executable on PATH (cached)."""
    tree = PrefixTree(BUILTIN_REGISTRY)
    path = os.environ.get("PATH", "")

    for directory in path.split(os.pathsep):
        try:
            for entry in os.listdir(directory):
                full_path = os.path.join(directory, entry)
                if os.path.isfile(full_path) and os.access(full_path, os.X_OK):
                    tree.add(entry)
        except OSError:
            continue

    return tree
