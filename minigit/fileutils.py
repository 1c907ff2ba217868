"""Small filesystem helpers for reading and writing repository files."""

from __future__ import annotations

import os
from pathlib import Path

PathLike = str | os.PathLike


def write_to_file(path: PathLike, content: str | bytes) -> None:
    """Write ``content`` to ``path``, creating missing parent directories.

    Text is written as UTF-8. Raises ``OSError`` on failure.
    """
    target = Path(path)
    if target.parent != Path("") and not target.parent.exists():
        target.parent.mkdir(parents=True, exist_ok=True)
    data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
    target.write_bytes(data)


def read_from_file(path: PathLike) -> bytes:
    """Return the whole content of the regular file at ``path``.

    Raises ``FileNotFoundError`` if it does not exist, ``IsADirectoryError``
    if it is a directory and ``OSError`` if it is any other non-regular file.
    """
    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"File does not exist: '{source}'")
    if not source.is_file():
        if source.is_dir():
            raise IsADirectoryError(f"Path is not a regular file: '{source}'")
        raise OSError(f"Path is not a regular file: '{source}'")
    return source.read_bytes()


def directory_exists(path: PathLike) -> bool:
    """Return whether ``path`` is an existing directory."""
    return Path(path).is_dir()


def create_directory(path: PathLike) -> None:
    """Create ``path`` and any missing parents; do nothing if it already exists."""
    target = Path(path)
    if target.exists():
        return
    target.mkdir(parents=True, exist_ok=True)


def file_exists(path: PathLike) -> bool:
    """Return whether ``path`` is an existing regular file."""
    return Path(path).is_file()