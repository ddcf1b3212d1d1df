from __future__ import annotations

import re
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from promptable.aggregation import aggregate, build_document, read_file_record, select_files
from promptable.config import BINARY_PLACEHOLDER
from promptable.exceptions import LookupFailureError, ReadFailureError


def _write(path: Path, content: str | bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


def _labels(doc: str) -> list[str]:
    return re.findall(r"^--- START OF FILE: (.+) ---$", doc, re.MULTILINE)


@pytest.mark.unit
def test_single_markdown_file(tmp_path: Path) -> None:
    file_path = _write(tmp_path / "test.md", "# Hello")

    doc = aggregate([file_path], tmp_path)

    assert "--- START OF FILE: test.md ---" in doc
    assert "```md\n# Hello\n```" in doc
    assert "--- END OF FILE: test.md ---" in doc


@pytest.mark.unit
def test_two_files_ordered(tmp_path: Path) -> None:
    b = _write(tmp_path / "b.txt", "File B")
    a = _write(tmp_path / "a.txt", "File A")

    doc = aggregate([b, a], tmp_path)

    assert "File A" in doc
    assert "File B" in doc
    assert _labels(doc) == ["a.txt", "b.txt"]
    assert doc.index("File A") < doc.index("File B")


@pytest.mark.unit
def test_directory_selection_sorted_by_relative_path(tmp_path: Path) -> None:
    _write(tmp_path / "root.txt", "root")
    _write(tmp_path / "dirA" / "a.txt", "a")
    _write(tmp_path / "dirA" / "dirB" / "b.txt", "b")

    doc = aggregate([tmp_path], tmp_path)

    assert _labels(doc) == ["dirA/a.txt", "dirA/dirB/b.txt", "root.txt"]


@pytest.mark.unit
def test_directory_equals_individual_selection(tmp_path: Path) -> None:
    files = [
        _write(tmp_path / "x" / "one.py", "1"),
        _write(tmp_path / "x" / "y" / "two.py", "2"),
    ]
    _write(tmp_path / "x" / ".git" / "HEAD", "ref")
    _write(tmp_path / "x" / "y" / ".git" / "index", "idx")

    assert aggregate([tmp_path / "x"], tmp_path) == aggregate(files, tmp_path)


@pytest.mark.unit
def test_overlapping_selection_renders_each_file_once(tmp_path: Path) -> None:
    inner = _write(tmp_path / "pkg" / "mod.py", "pass")
    _write(tmp_path / "pkg" / "other.py", "pass")

    doc = aggregate([inner, tmp_path / "pkg", inner], tmp_path)

    assert _labels(doc) == ["pkg/mod.py", "pkg/other.py"]


@pytest.mark.unit
def test_nested_backtick_runs_get_longer_fence(tmp_path: Path) -> None:
    file_path = _write(tmp_path / "notes.md", "````\nblock\n````\nlater\n`````\nmore\n`````")

    doc = aggregate([file_path], tmp_path)

    assert "``````md\n" in doc
    assert doc.rstrip().split("\n")[-2] == "``````"


@pytest.mark.unit
def test_zero_byte_renders_placeholder_regardless_of_extension(tmp_path: Path) -> None:
    file_path = _write(tmp_path / "looks_like_text.py", b"print()\x00\x01")

    doc = aggregate([file_path], tmp_path)

    assert BINARY_PLACEHOLDER in doc
    assert "print()" not in doc
    assert "```" not in doc


@pytest.mark.unit
def test_gitignore_rules_filter_selection(tmp_path: Path) -> None:
    _write(tmp_path / ".gitignore", "*.log\n")
    _write(tmp_path / "pkg" / ".gitignore", "secret.txt\n")
    _write(tmp_path / "app.log", "log")
    _write(tmp_path / "secret.txt", "top secret is kept")
    _write(tmp_path / "pkg" / "secret.txt", "nested secret")
    _write(tmp_path / "pkg" / "main.py", "print()")

    doc = aggregate([tmp_path], tmp_path)

    assert _labels(doc) == [".gitignore", "pkg/.gitignore", "pkg/main.py", "secret.txt"]


@pytest.mark.unit
def test_without_root_labels_are_names_and_nothing_is_ignored(tmp_path: Path) -> None:
    _write(tmp_path / ".gitignore", "*.log\n")
    log_file = _write(tmp_path / "sub" / "run.log", "log")

    doc = aggregate([log_file])

    assert _labels(doc) == ["run.log"]


@pytest.mark.unit
def test_everything_ignored_yields_empty_document(tmp_path: Path) -> None:
    _write(tmp_path / ".gitignore", "*\n")
    _write(tmp_path / "a.txt", "a")

    assert aggregate([tmp_path], tmp_path) == ""


@pytest.mark.unit
def test_missing_target_raises_lookup_failure(tmp_path: Path) -> None:
    _write(tmp_path / "a.txt", "a")

    with pytest.raises(LookupFailureError) as exc_info:
        aggregate([tmp_path / "a.txt", tmp_path / "missing.txt"], tmp_path)

    assert exc_info.value.path == tmp_path / "missing.txt"


@pytest.mark.unit
def test_read_failure_aborts_document(tmp_path: Path, mocker: MockerFixture) -> None:
    files = [_write(tmp_path / "a.txt", "a"), _write(tmp_path / "b.txt", "b")]
    mocker.patch.object(Path, "read_bytes", side_effect=PermissionError(13, "Permission denied"))

    with pytest.raises(ReadFailureError) as exc_info:
        build_document(files, tmp_path)

    assert exc_info.value.reason == "Permission denied"


@pytest.mark.unit
def test_read_failure_when_file_vanishes(tmp_path: Path) -> None:
    file_path = _write(tmp_path / "a.txt", "a")
    selected = select_files([file_path], tmp_path)
    file_path.unlink()

    with pytest.raises(ReadFailureError):
        build_document(selected, tmp_path)


@pytest.mark.unit
def test_read_file_record_text(tmp_path: Path) -> None:
    file_path = _write(tmp_path / "src" / "app.py", "print('ok')\n")

    rec = read_file_record(file_path, tmp_path)

    assert rec.rel == "src/app.py"
    assert rec.language == "py"
    assert not rec.is_binary
    assert rec.content == "print('ok')\n"
