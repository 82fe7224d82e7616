"""Tests for pulsearcade.core.storage – key/value persistence."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from pulsearcade.core.storage import JsonFileStore, MemoryStore, default_data_dir


# ---------------------------------------------------------------------------
# MemoryStore
# ---------------------------------------------------------------------------

class TestMemoryStore:
    def test_missing_key_is_none(self):
        assert MemoryStore().load("rewards") is None

    def test_save_then_load(self):
        store = MemoryStore()
        store.save("rewards", b'{"pulseLine": 3}')
        assert store.load("rewards") == b'{"pulseLine": 3}'

    def test_initial_data(self):
        store = MemoryStore({"a": b"1"})
        assert store.keys() == ["a"]

    def test_flush_is_noop(self):
        assert MemoryStore().flush() is True


# ---------------------------------------------------------------------------
# JsonFileStore
# ---------------------------------------------------------------------------

class TestJsonFileStore:
    def test_missing_file_is_none(self, tmp_path: Path):
        store = JsonFileStore(tmp_path)
        assert store.load("statistics") is None

    def test_writes_one_file_per_key(self, tmp_path: Path):
        store = JsonFileStore(tmp_path / "data")
        store.save("statistics", b"{}")
        store.save("sessions", b"[]")
        assert (tmp_path / "data" / "statistics.json").read_bytes() == b"{}"
        assert (tmp_path / "data" / "sessions.json").read_bytes() == b"[]"

    def test_survives_new_instance(self, tmp_path: Path):
        JsonFileStore(tmp_path).save("rewards", b'{"x": 1}')
        assert JsonFileStore(tmp_path).load("rewards") == b'{"x": 1}'

    def test_no_temp_file_left_behind(self, tmp_path: Path):
        store = JsonFileStore(tmp_path)
        store.save("rewards", b"{}")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["rewards.json"]

    def test_invalid_key_rejected(self, tmp_path: Path):
        store = JsonFileStore(tmp_path)
        with pytest.raises(ValueError):
            store.save("../escape", b"{}")

    def test_failed_write_kept_pending(self, tmp_path: Path):
        blocker = tmp_path / "blocked"
        blocker.write_text("not a directory", encoding="utf-8")
        store = JsonFileStore(blocker / "data")

        store.save("rewards", b'{"x": 1}')
        assert store.pending_keys == ["rewards"]
        assert store.load("rewards") == b'{"x": 1}'
        assert store.flush() is False

    def test_flush_retries_pending_writes(self, tmp_path: Path):
        blocker = tmp_path / "blocked"
        blocker.write_text("not a directory", encoding="utf-8")
        store = JsonFileStore(blocker / "data")
        store.save("rewards", b'{"x": 1}')

        blocker.unlink()
        assert store.flush() is True
        assert store.pending_keys == []
        assert (blocker / "data" / "rewards.json").read_bytes() == b'{"x": 1}'


class TestDefaultDataDir:
    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("PULSEARCADE_HOME", str(tmp_path))
        assert default_data_dir() == tmp_path

    def test_home_fallback(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("PULSEARCADE_HOME", raising=False)
        assert default_data_dir() == Path.home() / ".pulsearcade"

    def test_store_uses_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("PULSEARCADE_HOME", os.fspath(tmp_path))
        assert JsonFileStore().root == tmp_path
