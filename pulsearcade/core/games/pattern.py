"""Rhythm Matrix: watch a sequence of grid cells light up, then repeat it."""

from __future__ import annotations

import random
from enum import Enum
from typing import List, Optional

from pulsearcade.core.games.base import GameEngine, Phase
from pulsearcade.core.models import GameKind
from pulsearcade.core.tuning import PatternParams


class CellState(Enum):
    NEUTRAL = "neutral"
    HIGHLIGHTED = "highlighted"
    CORRECT = "correct"
    WRONG = "wrong"


def generate_pattern(length: int, cell_count: int, rng: random.Random) -> List[int]:
    """Draw cells without replacement, refilling the pool whenever it runs dry.

    A pattern longer than the grid therefore reuses cells, and the same cell
    may appear twice in a row across a refill.
    """
    pattern: List[int] = []
    available: List[int] = []
    for _ in range(length):
        if not available:
            available = list(range(cell_count))
        pattern.append(available.pop(rng.randrange(len(available))))
    return pattern


class PatternMemoryEngine(GameEngine):
    """One wrong tap ends the whole game; otherwise every round is played.

    There is no score threshold: clearing every round is the victory.
    """

    kind = GameKind.PATTERN_MEMORY
    input_phases = frozenset({Phase.PLAYER_TURN})

    def _configure(self) -> None:
        self._params: PatternParams = self._tuning.pattern(self._difficulty, self._level)
        self._total_rounds = self._params.rounds
        self._cell_states: List[CellState] = [CellState.NEUTRAL] * self._params.cell_count
        self._pattern: List[int] = []
        self._inputs: List[int] = []
        self._playback_index: Optional[int] = None
        self._failed = False

    @property
    def params(self) -> PatternParams:
        return self._params

    @property
    def grid_size(self) -> int:
        return self._params.grid_size

    @property
    def cell_states(self) -> List[CellState]:
        return list(self._cell_states)

    @property
    def pattern(self) -> List[int]:
        return list(self._pattern)

    @property
    def pattern_length(self) -> int:
        return len(self._pattern)

    @property
    def input_count(self) -> int:
        return len(self._inputs)

    @property
    def playback_index(self) -> Optional[int]:
        """Position in the pattern currently lit during playback."""
        return self._playback_index

    @property
    def failed(self) -> bool:
        return self._failed

    def tap(self, cell: int) -> bool:
        if not self.accepts_input or not 0 <= cell < self._params.cell_count:
            return False
        timings = self._tuning.timings
        expected = self._pattern[len(self._inputs)]
        self._inputs.append(cell)

        if cell != expected:
            self._failed = True
            self._cell_states[cell] = CellState.WRONG
            self._cell_states[expected] = CellState.HIGHLIGHTED
            self._set_phase(Phase.ROUND_END)
            self._later(timings.pattern_fail_delay, lambda: self._finish(False))
            return True

        self._cell_states[cell] = CellState.CORRECT
        self._later(timings.pattern_flash, lambda: self._clear_flash(cell))
        if len(self._inputs) == len(self._pattern):
            self._score += round(len(self._pattern) * 20 * self._difficulty.multiplier)
            self._set_phase(Phase.ROUND_END)
            self._later(timings.pattern_next_round_delay, self._advance_round)
        else:
            self._notify()
        return True

    def _begin_round(self) -> None:
        self._cell_states = [CellState.NEUTRAL] * self._params.cell_count
        self._pattern = generate_pattern(
            self._params.pattern_length(self._current_round),
            self._params.cell_count,
            self._random,
        )
        self._inputs = []
        self._playback_index = None
        self._set_phase(Phase.SHOWING_PATTERN)
        self._later(self._tuning.timings.pattern_lead_in, lambda: self._show_step(0))

    def _show_step(self, index: int) -> None:
        if self._phase is not Phase.SHOWING_PATTERN:
            return
        if index >= len(self._pattern):
            self._playback_index = None
            self._later(self._tuning.timings.pattern_turn_delay, self._open_turn)
            return
        self._playback_index = index
        self._cell_states[self._pattern[index]] = CellState.HIGHLIGHTED
        self._notify()
        lit = self._params.beat * self._params.lit_fraction
        self._later(lit, lambda: self._clear_step(index))

    def _clear_step(self, index: int) -> None:
        if self._phase is not Phase.SHOWING_PATTERN:
            return
        self._cell_states[self._pattern[index]] = CellState.NEUTRAL
        self._notify()
        gap = self._params.beat * (1.0 - self._params.lit_fraction)
        self._later(gap, lambda: self._show_step(index + 1))

    def _open_turn(self) -> None:
        if self._phase is Phase.SHOWING_PATTERN:
            self._set_phase(Phase.PLAYER_TURN)

    def _clear_flash(self, cell: int) -> None:
        if self._cell_states[cell] is CellState.CORRECT:
            self._cell_states[cell] = CellState.NEUTRAL
            self._notify()

    def _is_victory(self) -> bool:
        return not self._failed
