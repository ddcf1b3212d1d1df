"""Selection to document pipeline.

    targets -> collect_files -> dedupe_and_sort -> filter_ignored
            -> read_file_record -> render_document

Every function takes its inputs explicitly; nothing is cached between runs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from promptable.config import FileRecord
from promptable.exceptions import ReadFailureError
from promptable.file_manipulation import collect_files, dedupe_and_sort, display_path
from promptable.ignore_rules import filter_ignored, load_ignore_matcher
from promptable.logging import logger
from promptable.output_construction import decode_text, is_binary, render_document

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


def select_files(targets: Sequence[Path], root: Path | None) -> list[Path]:
    """Expand, deduplicate, order and filter the selected paths.

    Args:
        targets (Sequence[Path]): selected files or directories
        root (Path | None): the workspace root, if any

    Raises:
        LookupFailureError: if a target does not exist or cannot be accessed

    Returns:
        list[Path]: the absolute paths of the files to export, in output order
    """
    collected: list[Path] = []
    for target in targets:
        collected.extend(collect_files(target))
    ordered = dedupe_and_sort(collected, root)
    matcher = load_ignore_matcher(root)
    selected = filter_ignored(ordered, root, matcher)
    logger.info(
        "files selected",
        targets=len(targets),
        collected=len(collected),
        unique=len(ordered),
        selected=len(selected),
    )
    return selected


def read_file_record(path: Path, root: Path | None) -> FileRecord:
    """Read a file and classify it as text or binary.

    Args:
        path (Path): the absolute file path
        root (Path | None): the workspace root, if any

    Raises:
        ReadFailureError: if the file cannot be read

    Returns:
        FileRecord: the record ready to be rendered
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ReadFailureError(path=path, reason=e.strerror or str(e)) from e
    binary = is_binary(data)
    return FileRecord(
        path=path,
        rel=display_path(path, root),
        is_binary=binary,
        content="" if binary else decode_text(data),
    )


def build_document(files: Sequence[Path], root: Path | None) -> str:
    """Read every file and render the aggregated document.

    A single unreadable file aborts the whole document.

    Args:
        files (Sequence[Path]): the files to export, in output order
        root (Path | None): the workspace root, if any

    Raises:
        ReadFailureError: if any file cannot be read

    Returns:
        str: the document, empty when files is empty
    """
    recs = [read_file_record(f, root) for f in files]
    return render_document(recs)


def aggregate(targets: Sequence[Path], root: Path | None = None) -> str:
    """Aggregate the selected paths into one prompt-ready document.

    Args:
        targets (Sequence[Path]): selected files or directories
        root (Path | None, optional): the workspace root used for relative
            labels and `.gitignore` discovery. Defaults to None.

    Raises:
        LookupFailureError: if a target does not exist or cannot be accessed
        ReadFailureError: if a selected file cannot be read

    Returns:
        str: the document, empty when no file was selected
    """
    return build_document(select_files(targets, root), root)
