"""Tests for pulsearcade.ui.models – level tile state."""

from __future__ import annotations

from datetime import datetime

import pytest

from pulsearcade.core.ledger import ProgressLedger
from pulsearcade.core.models import Difficulty, GameKind
from pulsearcade.core.storage import MemoryStore
from pulsearcade.ui.models import LevelTile, build_level_tiles, recent_session_captions, session_caption


@pytest.fixture()
def ledger() -> ProgressLedger:
    return ProgressLedger(MemoryStore())


KIND = GameKind.PATH_PREDICTION


class TestLevelTile:
    def test_locked_caption(self):
        tile = LevelTile(KIND, Difficulty.EASY, 4, unlocked=False, completed=False)
        assert tile.caption == "🔒"

    def test_completed_caption(self):
        tile = LevelTile(KIND, Difficulty.EASY, 4, unlocked=True, completed=True, best_score=300)
        assert tile.caption == "✓ 4"

    def test_open_caption(self):
        tile = LevelTile(KIND, Difficulty.EASY, 4, unlocked=True, completed=False)
        assert tile.caption == "4"


class TestBuildLevelTiles:
    def test_fresh_ledger(self, ledger: ProgressLedger):
        tiles = build_level_tiles(ledger, KIND, Difficulty.EASY)
        assert [t.level for t in tiles] == list(range(1, 11))
        assert [t.unlocked for t in tiles] == [True] + [False] * 9
        assert [t.is_current for t in tiles] == [True] + [False] * 9

    def test_after_progress(self, ledger: ProgressLedger):
        ledger.record_outcome(KIND, Difficulty.EASY, 1, 400, True)
        ledger.record_outcome(KIND, Difficulty.EASY, 2, 300, True)
        tiles = build_level_tiles(ledger, KIND, Difficulty.EASY)
        assert tiles[0].completed is True
        assert tiles[0].best_score == 400
        assert tiles[2].unlocked is True
        assert tiles[2].is_current is True
        assert tiles[3].unlocked is False

    def test_locked_difficulty_has_no_current(self, ledger: ProgressLedger):
        tiles = build_level_tiles(ledger, KIND, Difficulty.HARD)
        assert not any(t.unlocked for t in tiles)
        assert not any(t.is_current for t in tiles)

    def test_unlock_all(self, ledger: ProgressLedger):
        tiles = build_level_tiles(ledger, KIND, Difficulty.HARD, unlock_all=True)
        assert all(t.unlocked for t in tiles)


class TestRecentSessionCaptions:
    def test_empty_history(self, ledger: ProgressLedger):
        assert recent_session_captions(ledger) == []

    def test_newest_first_and_limited(self):
        ledger = ProgressLedger(MemoryStore(), now=lambda: datetime(2026, 5, 2, 18, 45))
        ledger.record_outcome(GameKind.PULSE_TIMING, Difficulty.EASY, 1, 420, True)
        ledger.record_outcome(KIND, Difficulty.EASY, 1, 100, False)
        ledger.record_outcome(GameKind.PATTERN_MEMORY, Difficulty.EASY, 1, 60, False)

        captions = recent_session_captions(ledger, limit=2)
        assert len(captions) == 2
        assert captions[0] == "02 May 18:45  ·  Rhythm Matrix Easy 1  ·  Failed  ·  60 pts"
        assert "Signal Chase" in captions[1]

    def test_completed_caption(self):
        ledger = ProgressLedger(MemoryStore(), now=lambda: datetime(2026, 5, 2, 9, 5))
        session = ledger.record_outcome(GameKind.PULSE_TIMING, Difficulty.HARD, 3, 420, True)
        assert session_caption(session) == "02 May 09:05  ·  Neon Strike Hard 3  ·  Cleared  ·  420 pts"
