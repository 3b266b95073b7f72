"""Built-in shell commands."""

import os
import shutil
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeAlias

from minishell.expansion import home_directory

if TYPE_CHECKING:
    from minishell.shell import Shell

BuiltinHandler: TypeAlias = Callable[[list[str], "Shell"], int]

def find_executable(name: str) -> str | None:
    """Search $PATH for an executable named ``name``."""
    return shutil.which(name)


def builtin_exit(args: list[str], shell: "Shell") -> int:
    try:
        code = int(args[0]) if args else 0
    except ValueError:
        print(f"exit: {args[0]}: numeric argument required", file=sys.stderr)
        code = 2
    shell.save_history()
    sys.exit(code)


def builtin_echo(args: list[str], shell: "Shell") -> int:
    print(" ".join(args))
    return 0


def builtin_type(args: list[str], shell: "Shell") -> int:
    ret = 0
    for name in args:
        match name:
            case n if n in BUILTIN_REGISTRY:
                print(f"{name} is a shell builtin")
            case _:
                path = find_executable(name)
                if path:
                    print(f"{name} is {path}")
                else:
                    print(f"{name}: not found", file=sys.stderr)
                    ret = 1
    return ret


def builtin_pwd(args: list[str], shell: "Shell") -> int:
    print(shell.working_dir)
    return 0


def builtin_cd(args: list[str], shell: "Shell") -> int:
    target = args[0] if args else home_directory()
    if target is None:
        print("cd: HOME not set", file=sys.stderr)
        return 1
    try:
        os.chdir(target)
    except FileNotFoundError:
        print(f"cd: {target}: No such file or directory", file=sys.stderr)
        return 1
    except NotADirectoryError:
        print(f"cd: {target}: Not a directory", file=sys.stderr)
        return 1
    except PermissionError:
        print(f"cd: {target}: Permission denied", file=sys.stderr)
        return 1
    shell.working_dir = os.getcwd()
    return 0


BUILTIN_REGISTRY: dict[str, BuiltinHandler] = {
    "exit": builtin_exit,
    "echo": builtin_echo,
    "type": builtin_type,
    "pwd": builtin_pwd,
    "cd": builtin_cd,
}
