"""Command-line entry point for the repository commands."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from .commit import CommitError
from .repository import Repository, RepositoryError

VERSION = "1.0.0"

_HEX_DIGITS = frozenset("0123456789abcdef")

_USAGE = """\
MiniGit - A minimal version control system

Usage: minigit <command> [arguments]

Basic commands:
  init                     Initialize a new repository
  add <file>               Add file contents to the index
  commit -m "<msg>"        Record changes to the repository
  log                      Show commit logs

Branching commands:
  branch <name>            Create a new branch
  checkout <branch|commit> Switch branches or restore files
  merge <branch>           Merge another branch into current

Other commands:
  diff [commit] [commit]   Show changes between commits
  help                     Show this help message
  version                  Show version information

Examples:
  minigit init
  minigit add README.md
  minigit commit -m "Initial commit"
  minigit branch new-feature
  minigit checkout new-feature
"""


class _UsageError(Exception):
    """A command was called with missing or bad arguments."""

    def __init__(self, message: str, show_usage: bool = True) -> None:
        super().__init__(message)
        self.show_usage = show_usage


def usage_text() -> str:
    """Return the help text listing every command."""
    return _USAGE


def is_valid_commit_hash(value: str) -> bool:
    """Return whether ``value`` looks like a 40-digit lowercase hex hash."""
    return len(value) == 40 and set(value) <= _HEX_DIGITS


def _run(command: str, args: list[str]) -> None:
    if command in ("help", "--help"):
        sys.stdout.write(usage_text())
        return
    if command in ("version", "--version"):
        sys.stdout.write(f"MiniGit version {VERSION}\n")
        return

    repo = Repository(out=sys.stdout)
    if command == "init":
        repo.init()
    elif command == "add":
        if not args:
            raise _UsageError("Missing filename for 'add' command")
        repo.add(args[0])
    elif command == "commit":
        if len(args) < 2 or args[0] != "-m":
            raise _UsageError('Commit requires a message (-m "message")')
        message = args[1].strip(" \t")
        if not message:
            raise _UsageError("Commit message cannot be empty", show_usage=False)
        repo.commit(message)
    elif command == "log":
        repo.log()
    elif command == "branch":
        if not args:
            raise _UsageError("Missing branch name")
        repo.branch(args[0])
    elif command == "checkout":
        if not args:
            raise _UsageError("Missing branch/commit argument")
        repo.checkout(args[0])
    elif command == "merge":
        if not args:
            raise _UsageError("Missing branch to merge")
        repo.merge(args[0])
    elif command == "diff":
        if len(args) > 2:
            raise _UsageError("Too many arguments for diff")
        first = args[0] if args else ""
        second = args[1] if len(args) > 1 else ""
        repo.diff(first, second)
    else:
        raise _UsageError(f"Unknown command '{command}'")


def main(argv: Sequence[str] | None = None) -> int:
    """Run one command and return the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        sys.stdout.write(usage_text())
        return 1

    command, rest = args[0], args[1:]
    try:
        _run(command, rest)
    except _UsageError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        if exc.show_usage:
            sys.stdout.write(usage_text())
        return 1
    except (RepositoryError, CommitError) as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    except Exception as exc:  # noqa: BLE001 - report anything else and fail
        sys.stderr.write(f"Unexpected error: {exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())