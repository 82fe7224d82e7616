"""Tests for pulsearcade.core.games.launcher – gated engine construction."""

from __future__ import annotations

import random

import pytest

from pulsearcade.core.games.base import Phase
from pulsearcade.core.games.launcher import ENGINES, LevelLockedError, create_engine
from pulsearcade.core.games.path import PathPredictionEngine
from pulsearcade.core.games.pattern import PatternMemoryEngine
from pulsearcade.core.games.pulse import PulseTimingEngine
from pulsearcade.core.ledger import ProgressLedger
from pulsearcade.core.models import Difficulty, GameKind
from pulsearcade.core.scheduler import ManualScheduler
from pulsearcade.core.storage import MemoryStore


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def ledger() -> ProgressLedger:
    return ProgressLedger(MemoryStore())


class TestCreateEngine:
    @pytest.mark.parametrize(
        "kind,engine_cls",
        [
            (GameKind.PULSE_TIMING, PulseTimingEngine),
            (GameKind.PATH_PREDICTION, PathPredictionEngine),
            (GameKind.PATTERN_MEMORY, PatternMemoryEngine),
        ],
    )
    def test_builds_engine_for_kind(self, ledger, scheduler, kind, engine_cls):
        engine = create_engine(kind, Difficulty.EASY, 1, ledger=ledger, scheduler=scheduler)
        assert isinstance(engine, engine_cls)
        assert engine.kind is kind
        assert engine.phase is Phase.READY

    def test_every_kind_registered(self):
        assert set(ENGINES) == set(GameKind)

    def test_locked_level_rejected(self, ledger, scheduler):
        with pytest.raises(LevelLockedError) as excinfo:
            create_engine(GameKind.PULSE_TIMING, Difficulty.EASY, 2, ledger=ledger, scheduler=scheduler)
        assert excinfo.value.level == 2
        assert excinfo.value.difficulty is Difficulty.EASY

    def test_locked_difficulty_rejected(self, ledger, scheduler):
        with pytest.raises(LevelLockedError):
            create_engine(GameKind.PATTERN_MEMORY, Difficulty.MEDIUM, 1, ledger=ledger, scheduler=scheduler)

    def test_locked_error_is_value_error(self, ledger, scheduler):
        with pytest.raises(ValueError, match="locked"):
            create_engine(GameKind.PATH_PREDICTION, Difficulty.HARD, 1, ledger=ledger, scheduler=scheduler)

    def test_unlock_all_skips_gate(self, ledger, scheduler):
        engine = create_engine(
            GameKind.PULSE_TIMING, Difficulty.HARD, 5, ledger=ledger, scheduler=scheduler, unlock_all=True
        )
        assert engine.level == 5

    @pytest.mark.parametrize("level", [0, 11])
    def test_invalid_level_rejected_even_when_unlocked(self, ledger, scheduler, level: int):
        with pytest.raises(LevelLockedError):
            create_engine(
                GameKind.PULSE_TIMING, Difficulty.EASY, level, ledger=ledger, scheduler=scheduler, unlock_all=True
            )

    def test_unlocks_after_completion(self, ledger, scheduler):
        ledger.record_outcome(GameKind.PULSE_TIMING, Difficulty.EASY, 1, 300, True)
        engine = create_engine(GameKind.PULSE_TIMING, Difficulty.EASY, 2, ledger=ledger, scheduler=scheduler)
        assert engine.level == 2

    def test_engine_records_into_ledger(self, ledger, scheduler):
        engine = create_engine(
            GameKind.PATTERN_MEMORY,
            Difficulty.EASY,
            1,
            ledger=ledger,
            scheduler=scheduler,
            rng=random.Random(2),
        )
        engine.start()
        scheduler.run_until_idle()
        for cell in engine.pattern:
            engine.tap(cell)
        scheduler.run_until_idle()
        engine.tap((engine.pattern[0] + 1) % engine.params.cell_count)
        scheduler.run_until_idle()

        assert engine.phase is Phase.GAME_OVER
        assert ledger.statistics.sessions_for(GameKind.PATTERN_MEMORY) == 1
        assert ledger.recent_sessions(1)[0].score == 60
