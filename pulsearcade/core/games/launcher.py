from __future__ import annotations

import logging
import random
from typing import Dict, Optional, Type

from pulsearcade.core.games.base import GameEngine
from pulsearcade.core.games.path import PathPredictionEngine
from pulsearcade.core.games.pattern import PatternMemoryEngine
from pulsearcade.core.games.pulse import PulseTimingEngine
from pulsearcade.core.ledger import ProgressLedger
from pulsearcade.core.models import Difficulty, GameKind
from pulsearcade.core.scheduler import Scheduler
from pulsearcade.core.tuning import Tuning

logger = logging.getLogger(__name__)

ENGINES: Dict[GameKind, Type[GameEngine]] = {
    GameKind.PULSE_TIMING: PulseTimingEngine,
    GameKind.PATH_PREDICTION: PathPredictionEngine,
    GameKind.PATTERN_MEMORY: PatternMemoryEngine,
}


class LevelLockedError(ValueError):
    """Raised when a game is requested for a level the player has not unlocked."""

    def __init__(self, kind: GameKind, difficulty: Difficulty, level: int) -> None:
        super().__init__(f"{kind.display_name} {difficulty.value} level {level} is locked")
        self.kind = kind
        self.difficulty = difficulty
        self.level = level


def create_engine(
    kind: GameKind,
    difficulty: Difficulty,
    level: int,
    *,
    ledger: ProgressLedger,
    scheduler: Scheduler,
    tuning: Optional[Tuning] = None,
    rng: Optional[random.Random] = None,
    unlock_all: bool = False,
) -> GameEngine:
    """Build the engine for one level after checking the unlock gate.

    ``unlock_all`` skips the gate for valid levels (developer switch).
    """
    valid = 1 <= level <= difficulty.level_count
    if not valid or not (unlock_all or ledger.is_unlocked(kind, difficulty, level)):
        logger.warning("Refusing to start locked level: %s %s %d", kind.value, difficulty.value, level)
        raise LevelLockedError(kind, difficulty, level)
    engine_cls = ENGINES[kind]
    return engine_cls(difficulty, level, recorder=ledger, scheduler=scheduler, tuning=tuning, rng=rng)
