"""Tests for pulsearcade.core.games.path – Signal Chase prediction game."""

from __future__ import annotations

import random

import pytest

from pulsearcade.core.games.base import Phase
from pulsearcade.core.games.path import PathPredictionEngine, PathState
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


def _engine(ledger, scheduler, difficulty=Difficulty.EASY, level=1) -> PathPredictionEngine:
    return PathPredictionEngine(difficulty, level, recorder=ledger, scheduler=scheduler, rng=random.Random(3))


def _wrong_path(engine: PathPredictionEngine) -> int:
    return (engine.correct_path + 1) % engine.path_count


def _play_round(engine: PathPredictionEngine, scheduler: ManualScheduler, correct: bool) -> None:
    scheduler.run_until_idle()
    assert engine.phase is Phase.CHOOSING
    assert engine.select(engine.correct_path if correct else _wrong_path(engine)) is True
    scheduler.run_until_idle()


# ---------------------------------------------------------------------------
# Hint sequence
# ---------------------------------------------------------------------------

class TestPathHints:
    def test_starts_hinting(self, ledger, scheduler):
        engine = _engine(ledger, scheduler)
        engine.start()
        assert engine.phase is Phase.HINTING
        assert engine.path_count == 3
        assert engine.path_states == [PathState.NEUTRAL] * 3
        assert 0 <= engine.correct_path < 3

    def test_hint_pulses_on_correct_path(self, ledger, scheduler):
        engine = _engine(ledger, scheduler)
        engine.start()
        scheduler.advance(0.5)
        assert engine.path_states[engine.correct_path] is PathState.HINTING
        assert engine.hints_shown == 1
        scheduler.advance(0.6)
        assert engine.path_states[engine.correct_path] is PathState.NEUTRAL

    def test_choosing_after_all_hints(self, ledger, scheduler):
        engine = _engine(ledger, scheduler)
        engine.start()
        scheduler.advance(3.1)
        assert engine.phase is Phase.HINTING
        scheduler.advance(0.2)
        assert engine.phase is Phase.CHOOSING
        assert engine.hints_shown == 3
        assert engine.path_states == [PathState.NEUTRAL] * 3

    def test_hard_level_ten_single_hint(self, ledger, scheduler):
        engine = PathPredictionEngine(
            Difficulty.HARD, 10, recorder=ledger, scheduler=scheduler, rng=random.Random(3)
        )
        engine.start()
        scheduler.run_until_idle()
        assert engine.path_count == 5
        assert engine.hints_shown == 1

    def test_select_ignored_while_hinting(self, ledger, scheduler):
        engine = _engine(ledger, scheduler)
        engine.start()
        assert engine.select(engine.correct_path) is False
        assert engine.selected_path is None


# ---------------------------------------------------------------------------
# Selection and reveal
# ---------------------------------------------------------------------------

class TestPathSelection:
    def test_invalid_index_ignored(self, ledger, scheduler):
        engine = _engine(ledger, scheduler)
        engine.start()
        scheduler.run_until_idle()
        assert engine.select(-1) is False
        assert engine.select(3) is False
        assert engine.phase is Phase.CHOOSING

    def test_correct_selection(self, ledger, scheduler):
        engine = _engine(ledger, scheduler)
        engine.start()
        scheduler.run_until_idle()
        correct = engine.correct_path
        engine.select(correct)
        assert engine.phase is Phase.REVEALING
        assert engine.path_states[correct] is PathState.SELECTED
        assert engine.round_won is None
        assert engine.select(correct) is False

        scheduler.advance(0.5)
        assert engine.revealed is True
        assert engine.round_won is True
        assert engine.path_states[correct] is PathState.STABLE
        assert engine.score == 100

    def test_wrong_selection(self, ledger, scheduler):
        engine = _engine(ledger, scheduler)
        engine.start()
        scheduler.run_until_idle()
        wrong = _wrong_path(engine)
        engine.select(wrong)
        scheduler.advance(0.5)
        assert engine.round_won is False
        assert engine.path_states[wrong] is PathState.BREAKING
        assert engine.path_states[engine.correct_path] is PathState.STABLE
        assert engine.score == 0

    def test_next_round_after_result(self, ledger, scheduler):
        engine = _engine(ledger, scheduler)
        phases = []
        engine.subscribe(lambda e: phases.append(e.phase))
        engine.start()
        scheduler.run_until_idle()
        engine.select(engine.correct_path)
        scheduler.advance(1.9)
        assert engine.phase is Phase.REVEALING
        scheduler.advance(0.2)
        assert engine.phase is Phase.HINTING
        assert engine.current_round == 2
        assert engine.revealed is False
        assert Phase.ROUND_END in phases

    def test_hard_scoring(self, ledger, scheduler):
        engine = _engine(ledger, scheduler, Difficulty.HARD)
        engine.start()
        _play_round(engine, scheduler, correct=True)
        assert engine.score == 200


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------

class TestPathOutcome:
    def test_perfect_run(self, ledger, scheduler):
        engine = _engine(ledger, scheduler)
        engine.start()
        for _ in range(5):
            _play_round(engine, scheduler, correct=True)

        assert engine.phase is Phase.VICTORY
        assert engine.outcome.score == 500
        assert ledger.query_level(GameKind.PATH_PREDICTION, Difficulty.EASY, 1).completed is True
        assert ledger.rewards.value(GameKind.PATH_PREDICTION) == 50
        assert ledger.is_unlocked(GameKind.PATH_PREDICTION, Difficulty.EASY, 2) is True

    @pytest.mark.parametrize("correct,expected", [(2, Phase.GAME_OVER), (3, Phase.VICTORY)])
    def test_threshold(self, ledger, scheduler, correct: int, expected: Phase):
        engine = _engine(ledger, scheduler)
        engine.start()
        for index in range(5):
            _play_round(engine, scheduler, correct=index < correct)
        assert engine.score == 100 * correct
        assert engine.phase is expected
        assert len(ledger.sessions) == 1

    def test_close_while_hinting(self, ledger, scheduler):
        engine = _engine(ledger, scheduler)
        engine.start()
        scheduler.advance(0.6)
        assert engine.phase is Phase.HINTING
        shown = engine.hints_shown
        engine.close()
        scheduler.run_until_idle()
        assert engine.phase is Phase.HINTING
        assert engine.hints_shown == shown
        assert engine.select(engine.correct_path) is False
        assert scheduler.pending == 0
        assert ledger.sessions == []

    def test_close_mid_round(self, ledger, scheduler):
        engine = _engine(ledger, scheduler)
        engine.start()
        scheduler.run_until_idle()
        engine.select(engine.correct_path)
        engine.close()
        scheduler.run_until_idle()
        assert engine.revealed is False
        assert engine.score == 0
        assert ledger.sessions == []
