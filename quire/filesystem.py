"""Filesystems the content loader can read from.

Key classes:
- FileEntry: One entry produced by a walk.
- DirectoryFS: A directory on disk.
- MemoryFS: An in-memory tree, for tests and embedded content.

Both follow the ``ContentFS`` protocol: slash-separated paths relative to
the filesystem root, and walks in lexical order so loads are reproducible.
"""

from __future__ import annotations

import os
import posixpath
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

ROOT = "."


@dataclass(frozen=True)
class FileEntry:
    """An entry found while walking a filesystem.

    Attributes:
        path: Slash-separated path relative to the filesystem root.
        is_dir: Whether the entry is a directory.
    """

    path: str
    is_dir: bool

    @property
    def name(self) -> str:
        """Final path component."""
        return posixpath.basename(self.path) or self.path


def clean_path(path: str) -> str:
    """Normalize a filesystem path, rejecting paths that escape the root.

    Args:
        path: Slash-separated path.

    Returns:
        The normalized path, ``"."`` for the root.

    Raises:
        ValueError: If the path is absolute or climbs out of the root.

    Examples:
        >>> clean_path("posts/./2024/")
        'posts/2024'
    """
    if path.startswith("/"):
        raise ValueError(f"invalid path {path!r}: must be relative")
    cleaned = posixpath.normpath(path or ROOT)
    if cleaned == ".." or cleaned.startswith("../"):
        raise ValueError(f"invalid path {path!r}: escapes the filesystem root")
    return cleaned


def join_path(directory: str, name: str) -> str:
    """Join a directory and an entry name."""
    return name if directory == ROOT else f"{directory}/{name}"


class DirectoryFS:
    """Filesystem rooted at a directory on disk.

    Attributes:
        base: Directory all paths are relative to.
    """

    def __init__(self, base: Path | str):
        self.base = Path(base)

    def _resolve(self, path: str) -> Path:
        cleaned = clean_path(path)
        return self.base if cleaned == ROOT else self.base / cleaned

    def walk(self, root: str) -> Iterator[FileEntry]:
        root = clean_path(root)
        target = self._resolve(root)
        if not target.exists():
            raise FileNotFoundError(f"no such file or directory: {root}")
        is_dir = target.is_dir()
        yield FileEntry(root, is_dir)
        if is_dir:
            yield from self._walk_dir(root, target)

    def _walk_dir(self, directory: str, target: Path) -> Iterator[FileEntry]:
        with os.scandir(target) as it:
            entries = sorted(it, key=lambda e: e.name)
        for entry in entries:
            path = join_path(directory, entry.name)
            is_dir = entry.is_dir()
            yield FileEntry(path, is_dir)
            if is_dir:
                yield from self._walk_dir(path, Path(entry.path))

    def read_bytes(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"DirectoryFS({str(self.base)!r})"


class MemoryFS:
    """Filesystem held in memory.

    Directories are implied by the file paths, so ``{"posts/a.md": ...}``
    contains the directory ``posts``.

    Attributes:
        files: Mapping of file path to content.
    """

    def __init__(self, files: Mapping[str, bytes | str]):
        self.files: dict[str, bytes] = {}
        self._children: dict[str, set[str]] = {ROOT: set()}
        for path, data in files.items():
            cleaned = clean_path(path)
            if cleaned == ROOT:
                raise ValueError("a file cannot live at the filesystem root")
            self.files[cleaned] = data.encode("utf-8") if isinstance(data, str) else data
            self._add_parents(cleaned)

    def _add_parents(self, path: str) -> None:
        child = path
        parent = posixpath.dirname(child) or ROOT
        while True:
            self._children.setdefault(parent, set()).add(posixpath.basename(child))
            if parent == ROOT:
                break
            child = parent
            parent = posixpath.dirname(child) or ROOT

    def _is_dir(self, path: str) -> bool:
        return path in self._children

    def walk(self, root: str) -> Iterator[FileEntry]:
        root = clean_path(root)
        if not self._is_dir(root) and root not in self.files:
            raise FileNotFoundError(f"no such file or directory: {root}")
        is_dir = self._is_dir(root)
        yield FileEntry(root, is_dir)
        if is_dir:
            yield from self._walk_dir(root)

    def _walk_dir(self, directory: str) -> Iterator[FileEntry]:
        for name in sorted(self._children[directory]):
            path = join_path(directory, name)
            is_dir = self._is_dir(path)
            yield FileEntry(path, is_dir)
            if is_dir:
                yield from self._walk_dir(path)

    def read_bytes(self, path: str) -> bytes:
        cleaned = clean_path(path)
        if cleaned not in self.files:
            raise FileNotFoundError(f"no such file: {path}")
        return self.files[cleaned]

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"MemoryFS({len(self.files)} files)"
