"""Neon Strike: tap while the oscillating marker crosses the target window."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pulsearcade.core.games.base import GameEngine, Phase
from pulsearcade.core.models import GameKind
from pulsearcade.core.tuning import PulseParams

# Lowest accuracy a hit can score, so an edge hit still counts as a hit.
MIN_ACCURACY = 1e-6


class PulseFeedback(Enum):
    PERFECT = "Perfect!"
    GREAT = "Great!"
    GOOD = "Good"
    MISS = "Miss"

    @classmethod
    def for_accuracy(cls, accuracy: Optional[float]) -> "PulseFeedback":
        if accuracy is None:
            return cls.MISS
        if accuracy > 0.8:
            return cls.PERFECT
        if accuracy > 0.5:
            return cls.GREAT
        return cls.GOOD


def marker_position(elapsed: float, period: float) -> float:
    """Triangle wave over the track: 0 -> 1 in one period, back to 0 in the next."""
    cycle = elapsed % (period * 2)
    if cycle < period:
        return cycle / period
    return 1.0 - (cycle - period) / period


def is_rising(elapsed: float, period: float) -> bool:
    return elapsed % (period * 2) < period


def tap_accuracy(position: float, target: float, width: float) -> Optional[float]:
    """Accuracy in (0, 1] for a hit inside the window, None for a miss."""
    half = width / 2
    if not target - half <= position <= target + half:
        return None
    accuracy = 1.0 - abs(position - target) / half
    return min(1.0, max(MIN_ACCURACY, accuracy))


class PulseTimingEngine(GameEngine):
    """One tap per round; rounds always run to the end.

    The marker position is recomputed from the run's start timestamp on every
    tick and on every tap, never accumulated, so tick jitter cannot make it
    drift.
    """

    kind = GameKind.PULSE_TIMING
    input_phases = frozenset({Phase.PLAYING})

    def _configure(self) -> None:
        self._params: PulseParams = self._tuning.pulse(self._difficulty, self._level)
        self._total_rounds = self._params.rounds
        self._target = self._random_target()
        self._position = 0.0
        self._rising = True
        self._start_time: Optional[float] = None
        self._feedback: Optional[PulseFeedback] = None
        self._last_round_score = 0

    @property
    def params(self) -> PulseParams:
        return self._params

    @property
    def period(self) -> float:
        return self._params.period

    @property
    def target_width(self) -> float:
        return self._params.width

    @property
    def target(self) -> float:
        return self._target

    @property
    def position(self) -> float:
        return self._position

    @property
    def rising(self) -> bool:
        return self._rising

    @property
    def feedback(self) -> Optional[PulseFeedback]:
        """Feedback for the round just tapped, cleared when the next round opens."""
        return self._feedback

    @property
    def last_round_score(self) -> int:
        return self._last_round_score

    @property
    def required_score(self) -> float:
        return self._total_rounds * 50 * self._difficulty.multiplier * 0.5

    def tap(self) -> bool:
        if not self.accepts_input:
            return False
        self._update_position()
        accuracy = tap_accuracy(self._position, self._target, self._params.width)
        if accuracy is None:
            self._last_round_score = 0
        else:
            self._last_round_score = round(100 * accuracy * self._difficulty.multiplier)
        self._score += self._last_round_score
        self._feedback = PulseFeedback.for_accuracy(accuracy)
        self._set_phase(Phase.ROUND_END)
        self._later(self._tuning.timings.pulse_feedback_delay, self._after_feedback)
        return True

    def _begin(self) -> None:
        self._start_time = self._scheduler.now()
        self._position = 0.0
        self._rising = True
        self._every(self._tuning.timings.tick_interval, self._tick)
        self._begin_round()

    def _begin_round(self) -> None:
        self._feedback = None
        self._set_phase(Phase.PLAYING)

    def _after_feedback(self) -> None:
        if self._current_round < self._total_rounds:
            self._target = self._random_target()
        self._advance_round()

    def _tick(self) -> None:
        if self._phase in (Phase.PLAYING, Phase.ROUND_END):
            self._update_position()
            self._notify()

    def _update_position(self) -> None:
        if self._start_time is None:
            return
        elapsed = self._scheduler.now() - self._start_time
        self._position = marker_position(elapsed, self._params.period)
        self._rising = is_rising(elapsed, self._params.period)

    def _random_target(self) -> float:
        low, high = self._params.target_range
        return self._random.uniform(low, high)

    def _is_victory(self) -> bool:
        return self._score >= self.required_score
