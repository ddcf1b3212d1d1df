from __future__ import annotations

import os
import stat
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

from promptable.config import VCS_METADATA_DIRS, PathEntry, PathKind
from promptable.exceptions import LookupFailureError
from promptable.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterable


def absolute_path(path: Path) -> Path:
    """Make a path absolute and lexically normalized, without resolving symlinks.

    Two selections of the same file compare equal once normalized, whatever
    relative form or `..` segments they were given with.

    Args:
        path (Path): the path to normalize

    Returns:
        Path: the absolute, normalized path
    """
    return Path(os.path.normpath(os.path.abspath(path)))


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            Paths outside root get `..` segments; when no relative path exists
            at all (e.g. another drive) the absolute path is returned.
    """
    try:
        rel = os.path.relpath(absolute_path(path), absolute_path(root))
    except ValueError:
        rel = str(path)
    return rel.replace("\\", "/")


def display_path(path: Path, root: Path | None) -> str:
    """Label a file for the output document.

    Args:
        path (Path): the file path
        root (Path | None): the workspace root, if any

    Returns:
        str: the root-relative path, or the bare file name without a root
    """
    if root is None:
        return path.name
    return relpath(path, root)


def stat_kind(path: Path) -> PathKind:
    """Classify a path with a stat lookup that follows symlinks.

    Args:
        path (Path): the path to look up

    Raises:
        LookupFailureError: if the path does not exist or cannot be accessed

    Returns:
        PathKind: the kind of entry found at path
    """
    try:
        st = path.stat()
    except OSError as e:
        raise LookupFailureError(path=path, reason=e.strerror or str(e)) from e
    if stat.S_ISREG(st.st_mode):
        return PathKind.FILE
    if stat.S_ISDIR(st.st_mode):
        return PathKind.DIRECTORY
    return PathKind.OTHER


def entry_kind(entry: os.DirEntry[str]) -> PathKind:
    """Classify a directory entry, resolving symlinks.

    A symlink takes the kind of its target. Dangling links and links to
    special files are OTHER.

    Args:
        entry (os.DirEntry[str]): the entry returned by `os.scandir`

    Returns:
        PathKind: the kind of the entry
    """
    if entry.is_symlink():
        if entry.is_file():
            return PathKind.FILE
        return PathKind.DIRECTORY if entry.is_dir() else PathKind.OTHER
    if entry.is_dir(follow_symlinks=False):
        return PathKind.DIRECTORY
    if entry.is_file(follow_symlinks=False):
        return PathKind.FILE
    return PathKind.OTHER


def list_directory(path: Path) -> list[PathEntry]:
    """List the immediate children of a directory, sorted by name.

    Args:
        path (Path): the directory to list

    Raises:
        LookupFailureError: if the directory cannot be read

    Returns:
        list[PathEntry]: the children with their kinds
    """
    try:
        with os.scandir(path) as it:
            entries = [PathEntry(path=Path(e.path), kind=entry_kind(e)) for e in it]
    except OSError as e:
        raise LookupFailureError(path=path, reason=e.strerror or str(e)) from e
    return sorted(entries, key=lambda e: e.path.name)


def collect_files(path: Path, kind: PathKind | None = None) -> list[Path]:
    """Expand a selected path into every file reachable from it.

    - A file yields itself.
    - A directory yields the files of all its children, recursively, skipping
      version-control metadata directories such as `.git` at any depth.
    - Anything else yields nothing.

    Args:
        path (Path): the selected file or directory
        kind (PathKind | None, optional): the kind of path when already known;
            looked up with stat otherwise. Defaults to None.

    Returns:
        list[Path]: the files found under path
    """
    current = kind if kind is not None else stat_kind(path)
    if current is PathKind.FILE:
        return [path]
    if current is PathKind.DIRECTORY:
        files: list[Path] = []
        for entry in list_directory(path):
            if entry.path.name in VCS_METADATA_DIRS:
                logger.debug("skipping vcs metadata", path=str(entry.path))
                continue
            files.extend(collect_files(entry.path, entry.kind))
        return files
    logger.debug("dropping unsupported entry", path=str(path), kind=str(current))
    return []


def dedupe_paths(paths: Iterable[Path]) -> list[Path]:
    """Keep each distinct absolute path once.

    Paths are compared as exact, case-sensitive strings after normalization.

    Args:
        paths (Iterable[Path]): the paths, possibly with duplicates

    Returns:
        list[Path]: the normalized unique paths, in first-seen order
    """
    unique: dict[str, Path] = {}
    for p in paths:
        normalized = absolute_path(p)
        unique.setdefault(str(normalized), normalized)
    return list(unique.values())


def sort_key(path: Path, root: Path | None) -> tuple[str, str]:
    """Key ordering files by their label, then by absolute path on ties."""
    return (display_path(path, root), str(path))


def dedupe_and_sort(paths: Iterable[Path], root: Path | None) -> list[Path]:
    """Remove duplicate paths and order them deterministically.

    Files are sorted by plain lexicographic comparison of their path relative
    to root, or of their bare name when there is no root. The native directory
    enumeration order never leaks into the output.

    Args:
        paths (Iterable[Path]): the collected file paths
        root (Path | None): the workspace root, if any

    Returns:
        list[Path]: the unique, ordered, absolute file paths
    """
    return sorted(dedupe_paths(paths), key=partial(sort_key, root=root))
