from __future__ import annotations

import io
import re
from typing import TYPE_CHECKING

from promptable.config import (
    BINARY_PLACEHOLDER,
    BINARY_SNIFF_BYTES,
    END_MARKER,
    FENCE_CHAR,
    MIN_FENCE_LENGTH,
    START_MARKER,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from promptable.config import FileRecord

_BACKTICK_RUN = re.compile(f"{re.escape(FENCE_CHAR)}+")


def is_binary(data: bytes) -> bool:
    """Heuristic check for binary content.

    Only the first `BINARY_SNIFF_BYTES` bytes are inspected: a file is binary
    if that window holds a zero byte. Binary formats without an early zero
    byte are reported as text.

    Args:
        data (bytes): the raw file content

    Returns:
        bool: True if the content looks binary, False otherwise
    """
    return b"\x00" in data[:BINARY_SNIFF_BYTES]


def decode_text(data: bytes) -> str:
    """Decode file bytes as UTF-8, dropping a leading BOM and replacing invalid sequences."""
    return data.decode("utf-8-sig", errors="replace")


def longest_fence_run(text: str) -> int:
    """Length of the longest run of backticks in text, 0 if there is none."""
    return max((len(m) for m in _BACKTICK_RUN.findall(text)), default=0)


def create_fence(text: str) -> str:
    """Choose a code fence that cannot collide with the content.

    The fence is one backtick longer than the longest backtick run found in
    text, and never shorter than three.

    Args:
        text (str): the content to wrap

    Returns:
        str: the fence string
    """
    return FENCE_CHAR * max(MIN_FENCE_LENGTH, longest_fence_run(text) + 1)


def render_content(rec: FileRecord) -> str:
    """Render the body of a file block: the binary placeholder or a fenced text block."""
    if rec.is_binary:
        return BINARY_PLACEHOLDER
    fence = create_fence(rec.content)
    return f"{fence}{rec.language}\n{rec.content}\n{fence}"


def render_block(rec: FileRecord) -> str:
    """Render one labeled file block, trailing blank line included.

    Args:
        rec (FileRecord): the file to render

    Returns:
        str: the START marker, the rendered content and the END marker
    """
    start = START_MARKER.format(rel=rec.rel)
    end = END_MARKER.format(rel=rec.rel)
    return f"{start}\n{render_content(rec)}\n{end}\n\n"


def render_document(recs: Sequence[FileRecord]) -> str:
    """Concatenate the blocks of all records, in the given order.

    Args:
        recs (Sequence[FileRecord]): the records, already ordered

    Returns:
        str: the aggregated document stripped of surrounding whitespace,
            empty when there are no records
    """
    out = io.StringIO()
    for rec in recs:
        out.write(render_block(rec))
    return out.getvalue().strip()
