"""Rules deciding which levels may be played, derived from completion state."""

from __future__ import annotations

from typing import Optional, Protocol

from pulsearcade.core.models import Difficulty, GameKind, LevelRecord

# Completed levels on the easier difficulty needed to open the next one.
UNLOCK_THRESHOLD = 3


class CompletionView(Protocol):
    def query_level(self, kind: GameKind, difficulty: Difficulty, level: int) -> Optional[LevelRecord]:
        ...

    def completed_count(self, kind: GameKind, difficulty: Difficulty) -> int:
        ...


def is_difficulty_unlocked(view: CompletionView, kind: GameKind, difficulty: Difficulty) -> bool:
    previous = difficulty.previous
    if previous is None:
        return True
    return view.completed_count(kind, previous) >= UNLOCK_THRESHOLD


def is_level_unlocked(view: CompletionView, kind: GameKind, difficulty: Difficulty, level: int) -> bool:
    """Level 1 follows the difficulty gate; later levels need the one before completed."""
    if not 1 <= level <= difficulty.level_count:
        return False
    if level == 1:
        return is_difficulty_unlocked(view, kind, difficulty)
    previous = view.query_level(kind, difficulty, level - 1)
    return previous is not None and previous.completed


def next_playable_level(view: CompletionView, kind: GameKind, difficulty: Difficulty) -> Optional[int]:
    """First unlocked level that is not completed yet, or None."""
    for level in range(1, difficulty.level_count + 1):
        if not is_level_unlocked(view, kind, difficulty, level):
            return None
        record = view.query_level(kind, difficulty, level)
        if record is not None and not record.completed:
            return level
    return None
