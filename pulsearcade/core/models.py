"""Domain records shared by the games and the progression ledger."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional


class GameKind(Enum):
    """The three mini-games. Values are the keys used in persisted data."""

    PULSE_TIMING = "pulseLine"
    PATH_PREDICTION = "pathSplit"
    PATTERN_MEMORY = "timingGrid"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def reward_name(self) -> str:
        """Name of the currency this game pays out."""
        return _REWARD_NAMES[self]


_DISPLAY_NAMES = {
    GameKind.PULSE_TIMING: "Neon Strike",
    GameKind.PATH_PREDICTION: "Signal Chase",
    GameKind.PATTERN_MEMORY: "Rhythm Matrix",
}

_DESCRIPTIONS = {
    GameKind.PULSE_TIMING: "Tap when the pulse aligns",
    GameKind.PATH_PREDICTION: "Predict the stable path",
    GameKind.PATTERN_MEMORY: "Match the rhythm pattern",
}

_REWARD_NAMES = {
    GameKind.PULSE_TIMING: "Energy Shards",
    GameKind.PATH_PREDICTION: "Signal Fragments",
    GameKind.PATTERN_MEMORY: "Focus Marks",
}


class Difficulty(Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @property
    def level_count(self) -> int:
        return 10

    @property
    def multiplier(self) -> float:
        return _MULTIPLIERS[self]

    @property
    def previous(self) -> Optional["Difficulty"]:
        """The next easier difficulty, or None for EASY."""
        order = list(Difficulty)
        index = order.index(self)
        return order[index - 1] if index > 0 else None


_MULTIPLIERS = {
    Difficulty.EASY: 1.0,
    Difficulty.MEDIUM: 1.5,
    Difficulty.HARD: 2.0,
}


@dataclass
class LevelRecord:
    kind: GameKind
    difficulty: Difficulty
    level: int
    completed: bool = False
    best_score: int = 0
    attempts: int = 0

    @property
    def key(self) -> tuple[GameKind, Difficulty, int]:
        return (self.kind, self.difficulty, self.level)


@dataclass
class RewardBalance:
    """One counter per game currency."""

    amounts: Dict[GameKind, int] = field(default_factory=lambda: {kind: 0 for kind in GameKind})

    @property
    def total(self) -> int:
        return sum(self.amounts.values())

    def value(self, kind: GameKind) -> int:
        return self.amounts.get(kind, 0)

    def add(self, kind: GameKind, amount: int) -> None:
        self.amounts[kind] = self.value(kind) + max(0, int(amount))


@dataclass(frozen=True)
class SessionRecord:
    """One finished game run, as appended to the session history."""

    kind: GameKind
    difficulty: Difficulty
    level: int
    score: int
    completed: bool
    timestamp: datetime
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class Statistics:
    total_sessions: int = 0
    sessions_per_game: Dict[str, int] = field(default_factory=dict)
    # Persisted for compatibility; nothing accumulates it yet.
    total_play_time: float = 0.0

    def record_session(self, kind: GameKind) -> None:
        self.total_sessions += 1
        self.sessions_per_game[kind.value] = self.sessions_per_game.get(kind.value, 0) + 1

    def sessions_for(self, kind: GameKind) -> int:
        return self.sessions_per_game.get(kind.value, 0)


def all_level_keys() -> list[tuple[GameKind, Difficulty, int]]:
    """Every valid (kind, difficulty, level) triple, in display order."""
    return [
        (kind, difficulty, level)
        for kind in GameKind
        for difficulty in Difficulty
        for level in range(1, difficulty.level_count + 1)
    ]


def reward_for(score: int, difficulty: Difficulty) -> int:
    """Currency paid for a completed run: 10% of the weighted score, at least 1."""
    return max(1, int(max(0, score) * difficulty.multiplier * 0.1))
