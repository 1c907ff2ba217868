"""Commit objects: creation, hashing and the on-disk text format."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .hashing import calculate_hash as _hash_content

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


class CommitError(ValueError):
    """Raised when serialized commit data cannot be parsed."""


def generate_timestamp() -> str:
    """Return the current local time as ``YYYY-MM-DDTHH:MM:SS``."""
    return datetime.now().strftime(TIMESTAMP_FORMAT)


@dataclass
class Commit:
    """A commit: metadata plus a snapshot mapping file names to blob hashes."""

    hash: str = ""
    parent_hashes: list[str] = field(default_factory=list)
    message: str = ""
    timestamp: str = ""
    file_blobs: dict[str, str] = field(default_factory=dict)

    @classmethod
    def create(cls, message: str, parent_hashes, file_blobs) -> Commit:
        """Build a new commit stamped with the current time and its hash."""
        commit = cls(
            parent_hashes=list(parent_hashes),
            message=message,
            timestamp=generate_timestamp(),
            file_blobs=dict(file_blobs),
        )
        commit.hash = commit.calculate_hash()
        return commit

    def _sorted_files(self) -> list[tuple[str, str]]:
        return sorted(self.file_blobs.items(), key=lambda item: item[0])

    def calculate_hash(self) -> str:
        """Hash the commit's message, timestamp, parents and sorted snapshot."""
        lines = [
            "commit",
            f"message:{self.message}",
            f"timestamp:{self.timestamp}",
            *(f"parent:{parent}" for parent in self.parent_hashes),
            "tree:",
            *(f"  {name} {blob}" for name, blob in self._sorted_files()),
        ]
        return _hash_content("".join(line + "\n" for line in lines))

    def serialize(self) -> str:
        """Return the text form stored in the object database."""
        lines = [
            "type:commit",
            f"hash:{self.hash}",
            f"message:{self.message}",
            f"timestamp:{self.timestamp}",
            *(f"parent:{parent}" for parent in self.parent_hashes),
            *(f"file:{name} {blob}" for name, blob in self._sorted_files()),
        ]
        return "".join(line + "\n" for line in lines)

    @classmethod
    def deserialize(cls, content: str | bytes) -> Commit:
        """Parse the text form produced by :meth:`serialize`.

        Unknown and empty lines are ignored. Raises :class:`CommitError`
        on a non-commit type or a malformed file entry.
        """
        if isinstance(content, (bytes, bytearray)):
            content = bytes(content).decode("utf-8")
        commit = cls()
        for line in content.split("\n"):
            if line.startswith("type:"):
                kind = line[len("type:"):]
                if kind != "commit":
                    raise CommitError(
                        f"Deserialization error: Expected type:commit, got {kind}"
                    )
            elif line.startswith("hash:"):
                commit.hash = line[len("hash:"):]
            elif line.startswith("message:"):
                commit.message = line[len("message:"):]
            elif line.startswith("timestamp:"):
                commit.timestamp = line[len("timestamp:"):]
            elif line.startswith("parent:"):
                commit.parent_hashes.append(line[len("parent:"):])
            elif line.startswith("file:"):
                name, sep, blob = line[len("file:"):].partition(" ")
                if not sep:
                    raise CommitError(
                        "Deserialization error: Invalid file entry format in commit."
                    )
                commit.file_blobs[name] = blob
        return commit