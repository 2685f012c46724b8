"""Tests for result persistence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cljdoc_analysis.errors import PersistError
from cljdoc_analysis.persist import export_result, persist_result, serialize_result

RECORD = {"version": "1.0", "group-id": "foo", "pom-str": "é", "codox": {}, "artifact-id": "foo"}


def test_serialize_result_is_sorted_and_stable() -> None:
    text = serialize_result(RECORD)

    assert text == serialize_result(dict(reversed(list(RECORD.items()))))
    assert list(json.loads(text)) == sorted(RECORD)
    assert "é" in text
    assert text.endswith("\n")


def test_persist_result_creates_parents(tmp_path: Path) -> None:
    relpath = Path("foo") / "foo" / "1.0" / "cljdoc.json"

    path = persist_result(RECORD, tmp_path, relpath)

    assert path == tmp_path / relpath
    assert json.loads(path.read_text(encoding="utf-8")) == RECORD


def test_export_result_copies_into_output_tree(tmp_path: Path) -> None:
    relpath = Path("foo") / "foo" / "1.0" / "cljdoc.json"
    path = persist_result(RECORD, tmp_path / "work", relpath)

    exported = export_result(path, tmp_path / "out", relpath)

    assert exported == tmp_path / "out" / relpath
    assert exported.read_bytes() == path.read_bytes()


def test_export_result_wraps_filesystem_errors(tmp_path: Path) -> None:
    relpath = Path("foo") / "foo" / "1.0" / "cljdoc.json"
    path = persist_result(RECORD, tmp_path / "work", relpath)
    blocker = tmp_path / "out"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(PersistError) as excinfo:
        export_result(path, blocker, relpath)

    assert excinfo.value.stage == "persist"
    assert isinstance(excinfo.value.__cause__, OSError)
