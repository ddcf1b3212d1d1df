"""
promptable: copy a selection of files as one prompt-ready document.

Overview
--------
Every selected file, and every file below each selected directory, is
rendered as a labeled block:

    --- START OF FILE: src/app.py ---
    ```py
    print("hi")
    ```
    --- END OF FILE: src/app.py ---

Labels are relative to the workspace folder holding the first target. The
`.gitignore` files of that folder are honored, `.git` directories are
skipped, binary files are replaced by a placeholder and fences always
outgrow the backtick runs found in the content.

Usage
-----
    - Print a directory to stdout:
        promptable src/
    - Copy two files to the clipboard:
        promptable README.md pyproject.toml --clipboard
    - Write to a file, labels relative to another workspace folder:
        promptable ../lib/core --workspace ../lib --output context.md
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import pyperclip

from promptable import __version__
from promptable.aggregation import build_document, select_files
from promptable.exceptions import ClipboardError, PromptableError
from promptable.logging import logger, setup_logging
from promptable.selection import find_workspace_root, get_selected_paths
from promptable.settings import Settings

if TYPE_CHECKING:
    from collections.abc import Sequence


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    p = argparse.ArgumentParser(
        prog="promptable",
        description="Aggregate files into a single prompt-ready document.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("paths", nargs="*", type=Path, help="Files or directories to export.")
    p.add_argument(
        "--active-file",
        type=Path,
        default=None,
        help="File exported when no path is given.",
    )
    p.add_argument(
        "--workspace",
        type=Path,
        action="append",
        default=None,
        help="Workspace folder (repeatable). Defaults to the current directory.",
    )
    p.add_argument(
        "--no-workspace",
        action="store_true",
        help="Label files by name only and skip .gitignore rules.",
    )
    sink = p.add_mutually_exclusive_group()
    sink.add_argument("--output", type=Path, default=None, help="Output file.")
    sink.add_argument("--clipboard", action="store_true", help="Copy to the clipboard.")
    p.add_argument("--log-file", type=str, default=None, help="Log file path.")
    args = p.parse_args(argv)
    return Settings(**{k: v for k, v in vars(args).items() if v is not None})


def copy_to_clipboard(text: str) -> None:
    """Write text to the system clipboard.

    Raises:
        ClipboardError: if no clipboard mechanism is available
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        raise ClipboardError(reason=str(e)) from e


def write_output(document: str, settings: Settings) -> None:
    """Deliver the document to the sink chosen in settings."""
    if settings.clipboard:
        copy_to_clipboard(document)
    elif settings.output is not None:
        settings.output.write_text(document, encoding="utf-8")
    else:
        sys.stdout.write(document + "\n")


def resolve_root(targets: Sequence[Path], settings: Settings) -> Path | None:
    if settings.no_workspace or not targets:
        return None
    return find_workspace_root(targets[0], settings.workspace)


def main(argv: Sequence[str] | None = None) -> int:
    settings = parse_args(argv)
    if settings.log_file:
        setup_logging(settings.log_file)

    clicked = settings.paths[0] if len(settings.paths) == 1 else None
    selected = settings.paths if len(settings.paths) > 1 else None
    targets = get_selected_paths(clicked, selected, settings.active_file)
    if not targets:
        logger.info("nothing selected")
        return 0
    root = resolve_root(targets, settings)

    try:
        files = select_files(targets, root)
        document = build_document(files, root)
        if document:
            write_output(document, settings)
    except (PromptableError, OSError) as e:
        logger.error("export failed", error=str(e))
        print(f"Promptable Error: {e}", file=sys.stderr)
        return 1

    if document:
        logger.info("export done", files=len(files), root=str(root) if root else None)
        print(f"Promptable: {len(files)} file(s) copied", file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
