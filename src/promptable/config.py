from __future__ import annotations

import os
from enum import StrEnum, auto
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field

_ = Path()

VCS_METADATA_DIRS = frozenset({".git"})
IGNORE_FILE_NAME = ".gitignore"

BINARY_SNIFF_BYTES = 8000
MIN_FENCE_LENGTH = 3
FENCE_CHAR = "`"
DEFAULT_LANGUAGE = "text"
BINARY_PLACEHOLDER = "[Binary file — content not included]"

START_MARKER = "--- START OF FILE: {rel} ---"
END_MARKER = "--- END OF FILE: {rel} ---"


class PathKind(StrEnum):
    """Kind of filesystem entry met during traversal.

    Only files and directories take part in the export; everything else
    (devices, sockets, dangling links, ...) is classified as OTHER and dropped.
    """

    FILE = auto()
    DIRECTORY = auto()
    OTHER = auto()


def fence_language(path: Path) -> str:
    """Get the code fence language tag for a file.

    The tag is the file extension without its leading dot. Files without an
    extension, dotfiles like `.gitignore` included, get `text`.

    Args:
        path (Path): the file path to inspect

    Returns:
        str: the language tag to append to the opening fence
    """
    return os.path.splitext(path.name)[1][1:] or DEFAULT_LANGUAGE


class PathEntry(BaseModel):
    """An absolute filesystem path together with its kind."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    path: Path = Field(..., description="Absolute path")
    kind: PathKind = Field(..., description="File, directory or other")


class FileRecord(BaseModel):
    """A selected file, read and ready to be rendered.

    Attributes:
        path: Absolute path to the file on disk.
        rel: Path relative to the workspace root, or the bare file name
            when no root is known.
        is_binary: Whether a zero byte was found in the sniffed window.
        content: Decoded text; empty for binary files.
        language: Code fence language tag derived from the extension.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    path: Path = Field(..., description="Absolute file path")
    rel: str = Field(..., description="File path relative to the workspace root")
    is_binary: bool = Field(default=False, description="Binary content heuristic")
    content: str = Field(default="", description="Decoded text content")

    @computed_field
    @property
    def language(self) -> str:
        """Get the code fence language based on the file extension."""
        return fence_language(self.path)
