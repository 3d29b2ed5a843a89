"""Tests for the shared atomic file writer."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from modpin.fileio import atomic_write_text
from modpin.store.jsonfile import read_json, write_json


class TestAtomicWriteText:
    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "out.txt"
        atomic_write_text(target, "hello\n")
        assert target.read_text(encoding="utf-8") == "hello\n"

    def test_replaces_existing_content(self, tmp_path: Path) -> None:
        target = tmp_path / "out.txt"
        target.write_text("old", encoding="utf-8")
        atomic_write_text(target, "new")
        assert target.read_text(encoding="utf-8") == "new"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["out.txt"]

    def test_failed_replace_keeps_old_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        target = tmp_path / "out.txt"
        target.write_text("old", encoding="utf-8")

        def fail(src: str, dst: object) -> None:
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", fail)
        with pytest.raises(OSError, match="disk full"):
            atomic_write_text(target, "new")
        assert target.read_text(encoding="utf-8") == "old"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["out.txt"]


class TestJsonHelpers:
    def test_write_json_shape(self, tmp_path: Path) -> None:
        target = tmp_path / "data.json"
        write_json(target, {"b": 1, "a": [2]})
        text = target.read_text(encoding="utf-8")
        assert text.endswith("}\n")
        assert json.loads(text) == {"b": 1, "a": [2]}
        assert read_json(target) == {"b": 1, "a": [2]}

    def test_read_missing(self, tmp_path: Path) -> None:
        assert read_json(tmp_path / "absent.json") is None
