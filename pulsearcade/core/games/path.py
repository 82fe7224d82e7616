"""Signal Chase: remember which path was hinted as stable and pick it."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pulsearcade.core.games.base import GameEngine, Phase
from pulsearcade.core.models import GameKind
from pulsearcade.core.tuning import PathParams


class PathState(Enum):
    NEUTRAL = "neutral"
    HINTING = "hinting"
    SELECTED = "selected"
    STABLE = "stable"
    BREAKING = "breaking"


class PathPredictionEngine(GameEngine):
    kind = GameKind.PATH_PREDICTION
    input_phases = frozenset({Phase.CHOOSING})

    def _configure(self) -> None:
        self._params: PathParams = self._tuning.path(self._difficulty, self._level)
        self._total_rounds = self._params.rounds
        self._path_states: List[PathState] = [PathState.NEUTRAL] * self._params.path_count
        self._correct_path: Optional[int] = None
        self._selected_path: Optional[int] = None
        self._revealed = False
        self._hints_shown = 0

    @property
    def params(self) -> PathParams:
        return self._params

    @property
    def path_count(self) -> int:
        return self._params.path_count

    @property
    def path_states(self) -> List[PathState]:
        return list(self._path_states)

    @property
    def correct_path(self) -> Optional[int]:
        return self._correct_path

    @property
    def selected_path(self) -> Optional[int]:
        return self._selected_path

    @property
    def revealed(self) -> bool:
        return self._revealed

    @property
    def hints_shown(self) -> int:
        """Hint pulses played so far in the current round."""
        return self._hints_shown

    @property
    def round_won(self) -> Optional[bool]:
        """Whether the revealed selection was right; None before the reveal."""
        if not self._revealed:
            return None
        return self._selected_path == self._correct_path

    @property
    def required_score(self) -> float:
        return self._total_rounds * 50 * self._difficulty.multiplier

    def select(self, index: int) -> bool:
        if not self.accepts_input or not 0 <= index < self._params.path_count:
            return False
        self._selected_path = index
        self._path_states[index] = PathState.SELECTED
        self._set_phase(Phase.REVEALING)
        self._later(self._tuning.timings.path_reveal_delay, self._reveal)
        return True

    def _begin_round(self) -> None:
        self._path_states = [PathState.NEUTRAL] * self._params.path_count
        self._correct_path = self._random.randrange(self._params.path_count)
        self._selected_path = None
        self._revealed = False
        self._hints_shown = 0
        self._set_phase(Phase.HINTING)
        self._later(self._tuning.timings.path_hint_lead_in, lambda: self._hint_on(self._params.hint_count))

    def _hint_on(self, remaining: int) -> None:
        if self._phase is not Phase.HINTING:
            return
        if remaining <= 0:
            self._set_phase(Phase.CHOOSING)
            return
        self._path_states[self._correct_path] = PathState.HINTING
        self._hints_shown += 1
        self._notify()
        self._later(self._params.hint_duration, lambda: self._hint_off(remaining))

    def _hint_off(self, remaining: int) -> None:
        if self._phase is not Phase.HINTING:
            return
        self._path_states[self._correct_path] = PathState.NEUTRAL
        self._notify()
        self._later(self._tuning.timings.path_hint_gap, lambda: self._hint_on(remaining - 1))

    def _reveal(self) -> None:
        self._revealed = True
        for index in range(self._params.path_count):
            if index == self._correct_path:
                self._path_states[index] = PathState.STABLE
            elif index == self._selected_path:
                self._path_states[index] = PathState.BREAKING
        if self._selected_path == self._correct_path:
            self._score += round(100 * self._difficulty.multiplier)
        self._notify()
        self._later(self._tuning.timings.path_result_display, self._end_round)

    def _end_round(self) -> None:
        self._set_phase(Phase.ROUND_END)
        self._advance_round()

    def _is_victory(self) -> bool:
        return self._score >= self.required_score
