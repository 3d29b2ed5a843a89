"""Tests for ProfileStore persistence and operations."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from modpin.exceptions import ProfileError
from modpin.store import ProfileStore
from modpin.store.profiles import DEFAULT_PROFILE


@pytest.fixture
def path(tmp_path: Path) -> Path:
    return tmp_path / "profiles.json"


class TestPersistence:
    def test_missing_file_yields_default(self, path: Path) -> None:
        store = ProfileStore.load(path)
        assert list(store.profiles) == [DEFAULT_PROFILE]
        assert store.selected == DEFAULT_PROFILE
        assert not path.exists()

    def test_round_trip(self, path: Path) -> None:
        store = ProfileStore.load(path)
        store.add("Modded").add_mod("SML", "^3.6.0")
        store.select("Modded")
        store.save()

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["version"] == 0
        assert data["selected_profile"] == "Modded"
        assert data["profiles"]["Modded"]["mods"] == {"SML": {"version": "^3.6.0"}}

        reloaded = ProfileStore.load(path)
        assert reloaded.get("Modded").mods == {"SML": "^3.6.0"}
        assert reloaded.selected == "Modded"

    def test_dry_run_writes_nothing(self, path: Path) -> None:
        ProfileStore.load(path).save(dry_run=True)
        assert not path.exists()

    def test_newer_format_rejected(self, path: Path) -> None:
        path.write_text(json.dumps({"version": 1, "profiles": {}}), encoding="utf-8")
        with pytest.raises(ProfileError, match="Unknown profiles version"):
            ProfileStore.load(path)

    @pytest.mark.parametrize("content", ["{broken", "[]", '{"profiles": []}'])
    def test_malformed_file(self, path: Path, content: str) -> None:
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ProfileError):
            ProfileStore.load(path)


class TestOperations:
    def test_add_duplicate(self, path: Path) -> None:
        store = ProfileStore(path)
        with pytest.raises(ProfileError, match="already exists"):
            store.add(DEFAULT_PROFILE)

    def test_get_missing(self, path: Path) -> None:
        with pytest.raises(ProfileError, match="not found"):
            ProfileStore(path).get("Nope")

    def test_delete_selected_falls_back(self, path: Path) -> None:
        store = ProfileStore(path)
        store.add("Modded")
        store.select("Modded")
        store.delete("Modded")
        assert store.selected == DEFAULT_PROFILE
        assert "Modded" not in store.profiles

    def test_rename_keeps_order_and_selection(self, path: Path) -> None:
        store = ProfileStore(path)
        store.add("Modded").add_mod("SML")
        store.add("Vanilla")
        store.select("Modded")

        renamed = store.rename("Modded", "Heavy")
        assert list(store.profiles) == [DEFAULT_PROFILE, "Heavy", "Vanilla"]
        assert renamed.name == "Heavy"
        assert store.selected == "Heavy"
        assert "SML" in store.get("Heavy").mods

    def test_rename_onto_existing(self, path: Path) -> None:
        store = ProfileStore(path)
        store.add("Modded")
        with pytest.raises(ProfileError):
            store.rename("Modded", DEFAULT_PROFILE)

    def test_select_missing(self, path: Path) -> None:
        with pytest.raises(ProfileError):
            ProfileStore(path).select("Nope")
