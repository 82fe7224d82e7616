"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from pulsearcade.core.ledger import ProgressLedger
from pulsearcade.core.models import Difficulty, GameKind, SessionRecord
from pulsearcade.core.unlock import next_playable_level


@dataclass
class LevelTile:
    """UI state for a single level tile: progress, unlock status, and selection."""

    kind: GameKind
    difficulty: Difficulty
    level: int
    unlocked: bool
    completed: bool
    best_score: int = 0
    is_current: bool = False

    @property
    def caption(self) -> str:
        if not self.unlocked:
            return "🔒"
        if self.completed:
            return f"✓ {self.level}"
        return str(self.level)


def build_level_tiles(
    ledger: ProgressLedger,
    kind: GameKind,
    difficulty: Difficulty,
    unlock_all: bool = False,
) -> List[LevelTile]:
    """Compute tile state for every level of one difficulty and mark the next one to play."""
    current = next_playable_level(ledger, kind, difficulty)
    tiles: List[LevelTile] = []
    for record in ledger.levels(kind, difficulty):
        tiles.append(
            LevelTile(
                kind=kind,
                difficulty=difficulty,
                level=record.level,
                unlocked=unlock_all or ledger.is_unlocked(kind, difficulty, record.level),
                completed=record.completed,
                best_score=record.best_score,
                is_current=record.level == current,
            )
        )
    return tiles


def session_caption(session: SessionRecord) -> str:
    """One line for the hub's recent-play list."""
    result = "Cleared" if session.completed else "Failed"
    return (
        f"{session.timestamp:%d %b %H:%M}  ·  {session.kind.display_name} "
        f"{session.difficulty.value} {session.level}  ·  {result}  ·  {session.score} pts"
    )


def recent_session_captions(ledger: ProgressLedger, limit: int = 5) -> List[str]:
    """Captions for the newest sessions, newest first."""
    return [session_caption(session) for session in ledger.recent_sessions(limit)]
