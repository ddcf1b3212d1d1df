from __future__ import annotations

from typing import TYPE_CHECKING

from promptable.file_manipulation import absolute_path

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


def get_selected_paths(
    main_path: Path | None,
    all_paths: Sequence[Path] | None,
    active_path: Path | None = None,
) -> list[Path]:
    """Turn a selection context into the list of target paths.

    A non-empty multi-selection wins, then the single clicked path, then the
    active file. Nothing selected gives an empty list.

    Args:
        main_path (Path | None): the path the command was invoked on
        all_paths (Sequence[Path] | None): every selected path
        active_path (Path | None, optional): the file currently open. Defaults to None.

    Returns:
        list[Path]: the target paths
    """
    if all_paths:
        return list(all_paths)
    if main_path is not None:
        return [main_path]
    if active_path is not None:
        return [active_path]
    return []


def find_workspace_root(target: Path, workspace_folders: Sequence[Path]) -> Path | None:
    """Find the workspace folder containing a target.

    Nested workspace folders resolve to the innermost one.

    Args:
        target (Path): the first selected path
        workspace_folders (Sequence[Path]): the known workspace folders

    Returns:
        Path | None: the containing folder, or None when the target lies
            outside every workspace folder
    """
    path = absolute_path(target)
    containing = [
        folder
        for folder in (absolute_path(f) for f in workspace_folders)
        if path == folder or folder in path.parents
    ]
    if not containing:
        return None
    return max(containing, key=lambda f: len(f.parts))
