"""Workspace-wide `.gitignore` handling.

Every `.gitignore` below the workspace root is read and its rules are
rewritten relative to that root, so that a single matcher can answer for
any root-relative path. A rule `build/` found in `pkg/.gitignore` becomes
`pkg/build/` and therefore only applies inside `pkg/`.

Ignore handling fails open: when rules cannot be discovered or parsed, no
matcher is built and nothing gets excluded.
"""

from __future__ import annotations

import os
import posixpath
import re
from pathlib import Path
from typing import TYPE_CHECKING

import pathspec

from promptable.config import IGNORE_FILE_NAME, VCS_METADATA_DIRS
from promptable.exceptions import IgnoreDiscoveryError
from promptable.file_manipulation import relpath
from promptable.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

_LINE_SPLIT = re.compile(r"\r?\n")


class IgnoreMatcher:
    """Answer "is this root-relative path excluded?" for a merged rule set."""

    def __init__(self, rules: Sequence[str]) -> None:
        self.rules: tuple[str, ...] = tuple(rules)
        self._spec = pathspec.GitIgnoreSpec.from_lines(self.rules)

    def excludes(self, rel: str) -> bool:
        """Check whether a root-relative POSIX path is ignored.

        Paths that escape the root (`../...`) are never excluded.
        """
        if rel == ".." or rel.startswith("../"):
            return False
        return self._spec.match_file(rel)

    def __repr__(self) -> str:
        return f"IgnoreMatcher(rules={len(self.rules)})"


def build_matcher(rules: Iterable[str], root: Path | None = None) -> IgnoreMatcher:
    """Compile gitignore rules into a matcher.

    Args:
        rules (Iterable[str]): gitignore lines, already rewritten relative to the root
        root (Path | None, optional): the root the rules were loaded from,
            reported on errors. Defaults to None.

    Raises:
        IgnoreDiscoveryError: if a rule is not a valid gitignore pattern

    Returns:
        IgnoreMatcher: the compiled matcher
    """
    try:
        return IgnoreMatcher(list(rules))
    except ValueError as e:
        raise IgnoreDiscoveryError(root=root, reason=str(e)) from e


def rewrite_rule(rule: str, rel_dir: str) -> str:
    """Rewrite one rule of a nested `.gitignore` relative to the workspace root.

    Blank lines and comments pass through untouched, as do rules of the root
    `.gitignore` itself. A negation keeps its `!` in front of the joined path.

    Args:
        rule (str): a raw line of the ignore file
        rel_dir (str): the directory holding the ignore file, relative to the root
            ("" or "." for the root)

    Returns:
        str: the rewritten rule
    """
    if not rule.strip() or rule.startswith("#"):
        return rule
    if rel_dir in {"", "."}:
        return rule
    negated = rule.startswith("!")
    body = rule[1:] if negated else rule
    joined = posixpath.join(rel_dir, body.lstrip("/"))
    return f"!{joined}" if negated else joined


def _raise_walk_error(err: OSError) -> None:
    raise err


def discover_ignore_files(root: Path) -> list[Path]:
    """Find every `.gitignore` under root, in root-relative path order.

    Args:
        root (Path): the workspace root

    Raises:
        IgnoreDiscoveryError: if any directory of the tree cannot be walked

    Returns:
        list[Path]: the ignore files found
    """
    found: list[Path] = []
    try:
        for current, dirs, files in os.walk(root, onerror=_raise_walk_error):
            dirs[:] = [d for d in dirs if d not in VCS_METADATA_DIRS]
            if IGNORE_FILE_NAME in files:
                found.append(Path(current) / IGNORE_FILE_NAME)
    except OSError as e:
        raise IgnoreDiscoveryError(root=root, reason=str(e)) from e
    return sorted(found, key=lambda p: relpath(p, root))


def load_rules(root: Path) -> list[str]:
    """Load and rewrite the rules of every `.gitignore` under root.

    Args:
        root (Path): the workspace root

    Raises:
        IgnoreDiscoveryError: if an ignore file cannot be located or read

    Returns:
        list[str]: the merged rules, relative to root
    """
    rules: list[str] = []
    for ignore_file in discover_ignore_files(root):
        rel_dir = posixpath.dirname(relpath(ignore_file, root))
        try:
            text = ignore_file.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise IgnoreDiscoveryError(root=root, reason=str(e)) from e
        rules.extend(rewrite_rule(rule, rel_dir) for rule in _LINE_SPLIT.split(text))
        logger.debug("loaded ignore file", path=str(ignore_file), directory=rel_dir or ".")
    return rules


def load_ignore_matcher(root: Path | None) -> IgnoreMatcher | None:
    """Build the ignore matcher for a workspace root, failing open.

    Args:
        root (Path | None): the workspace root, if any

    Returns:
        IgnoreMatcher | None: the matcher, or None when there is no root or the
            rules could not be loaded; None means no file is excluded
    """
    if root is None:
        return None
    try:
        return build_matcher(load_rules(root), root)
    except IgnoreDiscoveryError as e:
        logger.warning("ignore rules unavailable, not filtering", root=str(root), error=str(e))
        return None


def filter_ignored(files: Sequence[Path], root: Path | None, matcher: IgnoreMatcher | None) -> list[Path]:
    """Drop the files excluded by the matcher, keeping the input order.

    Args:
        files (Sequence[Path]): absolute file paths
        root (Path | None): the workspace root, if any
        matcher (IgnoreMatcher | None): the matcher; None keeps every file

    Returns:
        list[Path]: the files that are not ignored
    """
    if matcher is None or root is None:
        return list(files)
    return [f for f in files if not matcher.excludes(relpath(f, root))]
