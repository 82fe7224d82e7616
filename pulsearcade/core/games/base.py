from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, FrozenSet, List, Optional, Protocol

from pulsearcade.core.models import Difficulty, GameKind
from pulsearcade.core.scheduler import Callback, Scheduler, TimerGroup
from pulsearcade.core.tuning import Tuning, default_tuning

logger = logging.getLogger(__name__)


class Phase(Enum):
    READY = "ready"
    PLAYING = "playing"
    HINTING = "hinting"
    CHOOSING = "choosing"
    REVEALING = "revealing"
    SHOWING_PATTERN = "showingPattern"
    PLAYER_TURN = "playerTurn"
    ROUND_END = "roundEnd"
    GAME_OVER = "gameOver"
    VICTORY = "victory"

    @property
    def is_terminal(self) -> bool:
        return self in (Phase.GAME_OVER, Phase.VICTORY)


@dataclass(frozen=True)
class GameOutcome:
    score: int
    completed: bool


class OutcomeRecorder(Protocol):
    def record_outcome(
        self,
        kind: GameKind,
        difficulty: Difficulty,
        level: int,
        score: int,
        completed: bool,
    ) -> object:
        ...


Listener = Callable[["GameEngine"], None]


class GameEngine:
    """Round state machine shared by the three games.

    Subclasses derive their parameters in ``_configure``, open the first round
    in ``_begin_round`` and decide victory in ``_is_victory``. Everything timed
    goes through the engine's :class:`TimerGroup`, so :meth:`close` stops all
    of it at once and no callback runs afterwards.

    Listeners are called with the engine after every observable change.
    Inputs sent while the engine is not waiting for them are ignored.
    """

    kind: GameKind
    input_phases: FrozenSet[Phase] = frozenset()

    def __init__(
        self,
        difficulty: Difficulty,
        level: int,
        *,
        recorder: OutcomeRecorder,
        scheduler: Scheduler,
        tuning: Optional[Tuning] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._difficulty = difficulty
        self._level = level
        self._recorder = recorder
        self._scheduler = scheduler
        self._tuning = tuning if tuning is not None else default_tuning()
        self._random = rng if rng is not None else random.Random()
        self._timers = TimerGroup(scheduler)
        self._listeners: List[Listener] = []
        self._phase = Phase.READY
        self._score = 0
        self._current_round = 0
        self._total_rounds = 0
        self._outcome: Optional[GameOutcome] = None
        self._configure()

    @property
    def difficulty(self) -> Difficulty:
        return self._difficulty

    @property
    def level(self) -> int:
        return self._level

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def score(self) -> int:
        return self._score

    @property
    def current_round(self) -> int:
        """1-based index of the round in progress, 0 before the game starts."""
        return self._current_round

    @property
    def total_rounds(self) -> int:
        return self._total_rounds

    @property
    def outcome(self) -> Optional[GameOutcome]:
        return self._outcome

    @property
    def is_finished(self) -> bool:
        return self._phase.is_terminal

    @property
    def is_closed(self) -> bool:
        return self._timers.closed

    @property
    def accepts_input(self) -> bool:
        return not self.is_closed and self._phase in self.input_phases

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def start(self) -> bool:
        """Leave READY and play the first round."""
        if self.is_closed or self._phase is not Phase.READY:
            return False
        self._score = 0
        self._current_round = 1
        logger.info(
            "Starting %s %s level %d (%d rounds)",
            self.kind.display_name,
            self._difficulty.value,
            self._level,
            self._total_rounds,
        )
        self._begin()
        return True

    def restart(self) -> bool:
        """Return a finished game to READY with fresh parameters."""
        if self.is_closed or not self.is_finished:
            return False
        self._timers.cancel_all()
        self._score = 0
        self._current_round = 0
        self._outcome = None
        self._configure()
        self._set_phase(Phase.READY)
        return True

    def close(self) -> None:
        """Stop every pending timer. Nothing is recorded after this."""
        if self.is_closed:
            return
        self._timers.close()
        logger.debug("%s closed in phase %s", self.kind.display_name, self._phase.value)

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    def _configure(self) -> None:
        raise NotImplementedError

    def _begin(self) -> None:
        self._begin_round()

    def _begin_round(self) -> None:
        raise NotImplementedError

    def _is_victory(self) -> bool:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    def _later(self, delay: float, callback: Callback) -> None:
        self._timers.call_later(delay, callback)

    def _every(self, interval: float, callback: Callback) -> None:
        self._timers.call_every(interval, callback)

    def _set_phase(self, phase: Phase) -> None:
        if phase is not self._phase:
            logger.debug("%s: %s -> %s", self.kind.display_name, self._phase.value, phase.value)
        self._phase = phase
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _advance_round(self) -> None:
        if self.is_closed or self.is_finished:
            return
        if self._current_round >= self._total_rounds:
            self._finish(self._is_victory())
        else:
            self._current_round += 1
            self._begin_round()

    def _finish(self, victory: bool) -> None:
        if self.is_closed or self._outcome is not None:
            return
        self._timers.cancel_all()
        self._outcome = GameOutcome(score=self._score, completed=victory)
        self._phase = Phase.VICTORY if victory else Phase.GAME_OVER
        logger.info(
            "%s %s level %d finished: %s with %d points",
            self.kind.display_name,
            self._difficulty.value,
            self._level,
            self._phase.value,
            self._score,
        )
        self._recorder.record_outcome(self.kind, self._difficulty, self._level, self._score, victory)
        self._notify()
