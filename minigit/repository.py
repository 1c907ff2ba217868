"""The repository: object store, refs, staging area and the user commands."""

from __future__ import annotations

import sys
from collections import deque
from pathlib import Path
from typing import Iterator, TextIO

from .commit import Commit, CommitError
from .fileutils import (
    create_directory,
    directory_exists,
    file_exists,
    read_from_file,
    write_to_file,
)
from .hashing import calculate_hash

MINIGIT_DIR = ".minigit"
DEFAULT_BRANCH = "master"


class RepositoryError(RuntimeError):
    """Raised when a repository command cannot be carried out."""


def _as_text(content: str | bytes) -> str:
    if isinstance(content, (bytes, bytearray)):
        return bytes(content).decode("utf-8", errors="replace")
    return content


def _split_lines(content: str) -> list[str]:
    if not content:
        return []
    lines = content.split("\n")
    if content.endswith("\n"):
        lines.pop()
    return lines


def format_diff(old_content: str | bytes, new_content: str | bytes, filename: str = "") -> str:
    """Return a simple line-by-line diff of two contents.

    Matching lines are prefixed with two spaces, removed lines with ``- ``
    and added lines with ``+ ``. A file header is included when
    ``filename`` is given, and the result ends with a blank line.
    """
    old_lines = _split_lines(_as_text(old_content))
    new_lines = _split_lines(_as_text(new_content))
    parts: list[str] = []
    if filename:
        parts.append(f"--- a/{filename}\n")
        parts.append(f"+++ b/{filename}\n")
    i = j = 0
    while i < len(old_lines) or j < len(new_lines):
        if i < len(old_lines) and j < len(new_lines) and old_lines[i] == new_lines[j]:
            parts.append(f"  {old_lines[i]}\n")
            i += 1
            j += 1
            continue
        if i < len(old_lines):
            parts.append(f"- {old_lines[i]}\n")
            i += 1
        if j < len(new_lines):
            parts.append(f"+ {new_lines[j]}\n")
            j += 1
    parts.append("\n")
    return "".join(parts)


class Repository:
    """A repository rooted at a working directory, reporting to a text stream."""

    def __init__(self, root=None, out: TextIO | None = None) -> None:
        self.root = Path(root) if root is not None else Path.cwd()
        self.out = out if out is not None else sys.stdout
        self._git_dir = self.root / MINIGIT_DIR
        self._objects_dir = self._git_dir / "objects"
        self._refs_dir = self._git_dir / "refs"
        self._head_file = self._refs_dir / "HEAD"
        self._heads_dir = self._refs_dir / "heads"
        self._index_file = self._git_dir / "index"
        self.staging_area: dict[str, str] = {}
        if directory_exists(self._git_dir):
            self._load_index()

    # ----------------------------------------------------------------- output

    def _say(self, text: str) -> None:
        self.out.write(text + "\n")

    # --------------------------------------------------------------- commands

    def init(self) -> None:
        """Create an empty repository unless one already exists."""
        if directory_exists(self._git_dir):
            self._say("MiniGit repository already initialized")
            return
        try:
            for directory in (self._git_dir, self._objects_dir, self._refs_dir, self._heads_dir):
                create_directory(directory)
        except OSError as exc:
            raise RepositoryError("Failed to create repository structure") from exc
        try:
            write_to_file(self._head_file, f"ref: refs/heads/{DEFAULT_BRANCH}")
            write_to_file(self._heads_dir / DEFAULT_BRANCH, "")
        except OSError as exc:
            raise RepositoryError("Failed to initialize HEAD") from exc
        self._say("Initialized empty MiniGit repository")

    def add(self, filename: str) -> None:
        """Store the file's content as a blob and stage it."""
        path = self.root / filename
        if not file_exists(path):
            raise RepositoryError(f"File not found: {filename}")
        try:
            content = read_from_file(path)
        except OSError as exc:
            raise RepositoryError(f"Failed to read file: {filename}") from exc
        blob_hash = calculate_hash(content)
        blob_path = self._objects_dir / blob_hash
        if not file_exists(blob_path):
            try:
                write_to_file(blob_path, content)
            except OSError as exc:
                raise RepositoryError("Failed to store blob") from exc
        self.staging_area[filename] = blob_hash
        self._save_index()
        self._say(f"Added {filename} to staging area")

    def commit(self, message: str) -> None:
        """Record the staged files as a new commit on the default branch."""
        if not self.staging_area:
            self._say("Nothing to commit")
            return
        parent = self.head_commit_hash()
        parents = [parent] if parent else []
        new_commit = Commit.create(message, parents, self.staging_area)
        try:
            write_to_file(self._objects_dir / new_commit.hash, new_commit.serialize())
        except OSError as exc:
            raise RepositoryError("Failed to store commit") from exc
        self._update_head(new_commit.hash, DEFAULT_BRANCH)
        self.staging_area.clear()
        self._save_index()
        self._say(f"Committed {new_commit.hash[:7]}: {message}")

    def log(self) -> None:
        """Print the history reachable through first parents from HEAD."""
        current = self.head_commit_hash()
        if not current:
            self._say("No commits yet")
            return
        while current:
            entry = self.load_commit(current)
            self._say(f"commit {entry.hash}")
            self._say(f"Date: {entry.timestamp}")
            self._say(f"\n    {entry.message}\n")
            if not entry.parent_hashes:
                break
            current = entry.parent_hashes[0]

    def branch(self, branch_name: str) -> None:
        """Create a branch pointing at the current HEAD commit."""
        current = self.head_commit_hash()
        if not current:
            raise RepositoryError("No commits exist yet")
        branch_path = self._heads_dir / branch_name
        if file_exists(branch_path):
            self._say(f"Branch already exists: {branch_name}")
            return
        try:
            write_to_file(branch_path, current)
        except OSError as exc:
            raise RepositoryError("Failed to create branch") from exc
        self._say(f"Created branch {branch_name}")

    def checkout(self, target: str) -> None:
        """Switch to a branch or commit, restoring its files."""
        branch_path = self._heads_dir / target
        is_branch = file_exists(branch_path)
        if is_branch:
            try:
                target_hash = read_from_file(branch_path).decode("utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise RepositoryError("Failed to read branch") from exc
        else:
            try:
                self.load_commit(target)
            except (RepositoryError, CommitError) as exc:
                raise RepositoryError(f"Invalid branch or commit: {target}") from exc
            target_hash = target

        snapshot = self.load_commit(target_hash)
        for name, blob_hash in snapshot.file_blobs.items():
            write_to_file(self.root / name, self.blob_content(blob_hash))

        self._update_head(target_hash, target if is_branch else None)
        self.staging_area.clear()
        where = f"branch {target}" if is_branch else f"commit {target_hash[:7]}"
        self._say(f"Switched to {where}")

    def merge(self, branch_name: str) -> None:
        """Three-way merge the named branch into the current HEAD."""
        current_hash = self.head_commit_hash()
        if not current_hash:
            raise RepositoryError("No commits to merge from")
        try:
            target_hash = read_from_file(self._heads_dir / branch_name).decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise RepositoryError(f"Branch not found: {branch_name}") from exc

        if current_hash == target_hash:
            self._say("Already up to date")
            return

        lca_hash = self.find_lca(current_hash, target_hash)
        self._say(
            f"Merging branch '{branch_name}' ({target_hash[:7]}) "
            f"into current branch ({current_hash[:7]})"
        )

        current_commit = self.load_commit(current_hash)
        target_commit = self.load_commit(target_hash)
        lca_commit = self.load_commit(lca_hash) if lca_hash else Commit()

        merged = dict(current_commit.file_blobs)
        lca_files = lca_commit.file_blobs
        target_files = target_commit.file_blobs
        conflicts = False

        for name in sorted(merged.keys() | target_files.keys() | lca_files.keys()):
            lca_blob = lca_files.get(name, "")
            current_blob = merged.get(name, "")
            target_blob = target_files.get(name, "")

            if not lca_blob and not current_blob:
                self._say(f"Taking new file from branch '{branch_name}': {name}")
                merged[name] = target_blob
                write_to_file(self.root / name, self.blob_content(target_blob))
                continue

            if lca_blob and current_blob == lca_blob and target_blob != lca_blob:
                self._say(f"Taking changes from branch '{branch_name}' for: {name}")
                merged[name] = target_blob
                write_to_file(self.root / name, self.blob_content(target_blob))
                continue

            if (
                lca_blob
                and current_blob != lca_blob
                and target_blob != lca_blob
                and current_blob != target_blob
            ):
                self._say(f"CONFLICT (content): {name} modified in both branches")
                conflict = (
                    b"<<<<<<< HEAD\n"
                    + self.blob_content(current_blob)
                    + b"=======\n"
                    + self.blob_content(target_blob)
                    + f">>>>>>> {branch_name}\n".encode("utf-8")
                )
                write_to_file(self.root / name, conflict)
                conflicts = True
                continue

            if lca_blob and current_blob and not target_blob:
                if lca_blob == current_blob:
                    self._say(f"Removing file deleted in branch '{branch_name}': {name}")
                    del merged[name]
                    (self.root / name).unlink(missing_ok=True)
                else:
                    self._say(
                        f"CONFLICT (delete/modify): {name} was deleted in branch "
                        f"'{branch_name}' but modified in current branch"
                    )
                    conflicts = True

        if conflicts:
            self._say("Merge conflicts detected. Resolve them and commit the result.")
            return

        merge_commit = Commit.create(
            f"Merge branch '{branch_name}'", [current_hash, target_hash], merged
        )
        try:
            write_to_file(self._objects_dir / merge_commit.hash, merge_commit.serialize())
        except OSError as exc:
            raise RepositoryError("Failed to create merge commit") from exc
        self._update_head(merge_commit.hash, DEFAULT_BRANCH)
        self._say(f"Merge successful. New commit: {merge_commit.hash[:7]}")

    def diff(self, commit1_hash: str = "", commit2_hash: str = "") -> None:
        """Print differences between two commits, or a commit and the working tree."""
        compare_wd = not commit2_hash
        hash1 = commit1_hash or self.head_commit_hash()
        if not hash1:
            self._say("No commits to compare")
            return

        files1 = self.load_commit(hash1).file_blobs
        if compare_wd:
            files2 = {
                name: calculate_hash(self._working_content(name))
                for name in self._working_files()
            }
            self._say(f"Comparing working directory against commit {hash1[:7]}:")
        else:
            files2 = self.load_commit(commit2_hash).file_blobs
            self._say(f"Comparing commit {hash1[:7]} with {commit2_hash[:7]}:")

        def new_content(name: str) -> bytes:
            if compare_wd:
                return self._working_content(name)
            return self.blob_content(files2[name])

        for name in sorted(files1.keys() | files2.keys()):
            in_first = name in files1
            in_second = name in files2
            if not in_first and in_second:
                self._say(f"+++ Added: {name}")
                self.out.write(format_diff("", new_content(name), name))
            elif in_first and not in_second:
                self._say(f"--- Removed: {name}")
                self.out.write(format_diff(self.blob_content(files1[name]), "", name))
            elif files1[name] != files2[name]:
                self._say(f"*** Modified: {name}")
                self.out.write(
                    format_diff(self.blob_content(files1[name]), new_content(name), name)
                )

    # ---------------------------------------------------------------- helpers

    def head_commit_hash(self) -> str:
        """Return the commit HEAD resolves to, or an empty string."""
        head = self._read_text(self._head_file)
        if head is None:
            return ""
        if head.startswith("ref: "):
            return self._read_text(self._git_dir / head[len("ref: "):]) or ""
        return head

    def load_commit(self, commit_hash: str) -> Commit:
        """Read and parse a commit object from the store."""
        try:
            data = read_from_file(self._objects_dir / commit_hash)
        except OSError:
            raise RepositoryError(f"Commit not found: {commit_hash}") from None
        try:
            return Commit.deserialize(data)
        except UnicodeDecodeError as exc:
            raise CommitError(f"Deserialization error: {commit_hash} is not text") from exc

    def blob_content(self, blob_hash: str) -> bytes:
        """Return the stored content of a blob."""
        try:
            return read_from_file(self._objects_dir / blob_hash)
        except OSError:
            raise RepositoryError(f"Blob not found: {blob_hash}") from None

    def find_lca(self, commit_hash1: str, commit_hash2: str) -> str:
        """Find a common ancestor by alternating breadth-first walks; '' if none."""
        visited = ({commit_hash1}, {commit_hash2})
        queues = (deque([commit_hash1]), deque([commit_hash2]))
        while queues[0] or queues[1]:
            for side in (0, 1):
                queue, seen, other = queues[side], visited[side], visited[1 - side]
                if not queue:
                    continue
                current = queue.popleft()
                if current in other:
                    return current
                try:
                    parents = self.load_commit(current).parent_hashes
                except (RepositoryError, CommitError):
                    continue
                for parent in parents:
                    if parent not in seen:
                        seen.add(parent)
                        queue.append(parent)
        return ""

    def _read_text(self, path: Path) -> str | None:
        try:
            return read_from_file(path).decode("utf-8")
        except (OSError, UnicodeDecodeError):
            return None

    def _update_head(self, commit_hash: str, branch_name: str | None) -> None:
        if branch_name is not None:
            try:
                write_to_file(self._heads_dir / branch_name, commit_hash)
            except OSError as exc:
                raise RepositoryError("Failed to update branch") from exc
            content = f"ref: refs/heads/{branch_name}"
        else:
            content = commit_hash
        try:
            write_to_file(self._head_file, content)
        except OSError as exc:
            raise RepositoryError("Failed to update HEAD") from exc

    def _load_index(self) -> None:
        self.staging_area.clear()
        content = self._read_text(self._index_file)
        if content is None:
            return
        for line in content.split("\n"):
            name, sep, blob_hash = line.partition(" ")
            if sep:
                self.staging_area[name] = blob_hash

    def _save_index(self) -> None:
        content = "".join(f"{name} {blob}\n" for name, blob in sorted(self.staging_area.items()))
        try:
            write_to_file(self._index_file, content)
        except OSError as exc:
            raise RepositoryError("Failed to save index") from exc

    def _working_files(self) -> Iterator[str]:
        for path in sorted(self.root.rglob("*")):
            if path.is_file():
                relative = path.relative_to(self.root).as_posix()
                if not relative.startswith(MINIGIT_DIR):
                    yield relative

    def _working_content(self, name: str) -> bytes:
        try:
            return read_from_file(self.root / name)
        except OSError:
            return b""