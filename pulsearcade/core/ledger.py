from __future__ import annotations

import json
import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from pulsearcade.core import unlock
from pulsearcade.core.models import (
    Difficulty,
    GameKind,
    LevelRecord,
    RewardBalance,
    SessionRecord,
    Statistics,
    all_level_keys,
    reward_for,
)
from pulsearcade.core.storage import KeyValueStore

logger = logging.getLogger(__name__)

LEVELS_KEY = "level_progress"
REWARDS_KEY = "rewards"
STATISTICS_KEY = "statistics"
SESSIONS_KEY = "sessions"
ONBOARDING_KEY = "onboarding_complete"

_DECODE_ERRORS = (ValueError, KeyError, TypeError, AttributeError, OverflowError, RecursionError)

_LevelKey = Tuple[GameKind, Difficulty, int]


def _default_levels() -> Dict[_LevelKey, LevelRecord]:
    return {key: LevelRecord(*key) for key in all_level_keys()}


class ProgressLedger:
    """Level completion, rewards, statistics and session history.

    The single writer for all progression data. Every category is persisted in
    the store under its own key as UTF-8 JSON and is written back after each
    recorded outcome. Writers and aggregate readers share one lock, so a query
    never sees half of an outcome.
    """

    def __init__(self, store: KeyValueStore, now: Callable[[], datetime] = datetime.now) -> None:
        self._store = store
        self._now = now
        self._lock = threading.RLock()
        self._levels: Dict[_LevelKey, LevelRecord] = {}
        self._rewards = RewardBalance()
        self._statistics = Statistics()
        self._sessions: List[SessionRecord] = []
        self._onboarding_complete = False
        self._load()

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_outcome(
        self,
        kind: GameKind,
        difficulty: Difficulty,
        level: int,
        score: int,
        completed: bool,
    ) -> SessionRecord:
        """Apply one finished run to the level record, balances, history and statistics."""
        score = max(0, int(score))
        with self._lock:
            record = self._levels.get((kind, difficulty, level))
            if record is None:
                logger.warning("Outcome for unknown level %s/%s/%s", kind.value, difficulty.value, level)
            else:
                if completed:
                    record.completed = True
                    record.best_score = max(record.best_score, score)
                record.attempts += 1

            if completed:
                self._rewards.add(kind, reward_for(score, difficulty))

            session = SessionRecord(
                kind=kind,
                difficulty=difficulty,
                level=level,
                score=score,
                completed=completed,
                timestamp=self._now(),
            )
            self._sessions.append(session)
            self._statistics.record_session(kind)
            self._save_all()

        logger.info(
            "Recorded %s %s level %d: score=%d completed=%s",
            kind.display_name,
            difficulty.value,
            level,
            score,
            completed,
        )
        return session

    def reset_all(self) -> None:
        """Wipe progress, rewards, statistics and history. The onboarding flag is kept."""
        with self._lock:
            self._levels = _default_levels()
            self._rewards = RewardBalance()
            self._statistics = Statistics()
            self._sessions = []
            self._save_all()
        logger.info("Progress reset")

    def flush(self) -> bool:
        with self._lock:
            return self._store.flush()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def query_level(self, kind: GameKind, difficulty: Difficulty, level: int) -> Optional[LevelRecord]:
        with self._lock:
            record = self._levels.get((kind, difficulty, level))
            return replace(record) if record is not None else None

    def completed_count(self, kind: GameKind, difficulty: Difficulty) -> int:
        with self._lock:
            return sum(
                1
                for record in self._levels.values()
                if record.kind is kind and record.difficulty is difficulty and record.completed
            )

    def total_completed(self, kind: GameKind) -> int:
        with self._lock:
            return sum(self.completed_count(kind, difficulty) for difficulty in Difficulty)

    def total_levels(self, kind: GameKind) -> int:
        return sum(difficulty.level_count for difficulty in Difficulty)

    def mastery_percent(self, kind: GameKind) -> float:
        total = self.total_levels(kind)
        if total <= 0:
            return 0.0
        return 100.0 * self.total_completed(kind) / total

    def overall_mastery(self) -> float:
        """Average mastery over every game."""
        kinds = list(GameKind)
        return sum(self.mastery_percent(kind) for kind in kinds) / len(kinds)

    def is_unlocked(self, kind: GameKind, difficulty: Difficulty, level: int) -> bool:
        with self._lock:
            return unlock.is_level_unlocked(self, kind, difficulty, level)

    def is_difficulty_unlocked(self, kind: GameKind, difficulty: Difficulty) -> bool:
        with self._lock:
            return unlock.is_difficulty_unlocked(self, kind, difficulty)

    def reward_for(self, score: int, difficulty: Difficulty) -> int:
        return reward_for(score, difficulty)

    def levels(self, kind: GameKind, difficulty: Difficulty) -> List[LevelRecord]:
        with self._lock:
            return [
                replace(self._levels[(kind, difficulty, level)])
                for level in range(1, difficulty.level_count + 1)
            ]

    @property
    def level_count(self) -> int:
        """Number of level records held; 90 for a complete set."""
        with self._lock:
            return len(self._levels)

    @property
    def rewards(self) -> RewardBalance:
        with self._lock:
            return RewardBalance(amounts=dict(self._rewards.amounts))

    @property
    def statistics(self) -> Statistics:
        with self._lock:
            return replace(self._statistics, sessions_per_game=dict(self._statistics.sessions_per_game))

    @property
    def sessions(self) -> List[SessionRecord]:
        with self._lock:
            return list(self._sessions)

    def recent_sessions(self, limit: int = 10) -> List[SessionRecord]:
        """Newest first."""
        with self._lock:
            return list(reversed(self._sessions[-limit:])) if limit > 0 else []

    @property
    def onboarding_complete(self) -> bool:
        return self._onboarding_complete

    @onboarding_complete.setter
    def onboarding_complete(self, value: bool) -> None:
        with self._lock:
            self._onboarding_complete = bool(value)
            self._save(ONBOARDING_KEY, self._onboarding_complete)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> None:
        levels = self._decode(LEVELS_KEY, _decode_levels)
        if levels is None:
            self._levels = _default_levels()
            self._save(LEVELS_KEY, _encode_levels(self._levels))
        else:
            self._levels = levels

        rewards = self._decode(REWARDS_KEY, _decode_rewards)
        self._rewards = rewards if rewards is not None else RewardBalance()

        statistics = self._decode(STATISTICS_KEY, _decode_statistics)
        self._statistics = statistics if statistics is not None else Statistics()

        sessions = self._decode(SESSIONS_KEY, _decode_sessions)
        self._sessions = sessions if sessions is not None else []

        onboarding = self._decode(ONBOARDING_KEY, bool)
        self._onboarding_complete = bool(onboarding)

    def _decode(self, key: str, decoder: Callable[[Any], Any]) -> Any:
        raw = self._store.load(key)
        if raw is None:
            return None
        try:
            return decoder(json.loads(raw.decode("utf-8")))
        except _DECODE_ERRORS as e:
            logger.warning("Discarding unreadable %s data: %s", key, e)
            return None

    def _save(self, key: str, payload: Any) -> None:
        self._store.save(key, json.dumps(payload, indent=2).encode("utf-8"))

    def _save_all(self) -> None:
        self._save(LEVELS_KEY, _encode_levels(self._levels))
        self._save(REWARDS_KEY, {kind.value: amount for kind, amount in self._rewards.amounts.items()})
        self._save(
            STATISTICS_KEY,
            {
                "total_sessions": self._statistics.total_sessions,
                "total_play_time": self._statistics.total_play_time,
                "sessions_per_game": dict(self._statistics.sessions_per_game),
            },
        )
        self._save(SESSIONS_KEY, [_encode_session(session) for session in self._sessions])


def _encode_levels(levels: Dict[_LevelKey, LevelRecord]) -> List[Dict[str, Any]]:
    return [
        {
            "game": record.kind.value,
            "difficulty": record.difficulty.value,
            "level": record.level,
            "completed": record.completed,
            "best_score": record.best_score,
            "attempts": record.attempts,
        }
        for record in levels.values()
    ]


def _decode_levels(payload: Any) -> Dict[_LevelKey, LevelRecord]:
    if not isinstance(payload, list):
        raise TypeError("level progress must be a list")
    levels = _default_levels()
    for item in payload:
        key = (GameKind(item["game"]), Difficulty(item["difficulty"]), int(item["level"]))
        if key not in levels:
            continue
        levels[key] = LevelRecord(
            *key,
            completed=bool(item.get("completed", False)),
            best_score=max(0, int(item.get("best_score", 0))),
            attempts=max(0, int(item.get("attempts", 0))),
        )
    return levels


def _decode_rewards(payload: Any) -> RewardBalance:
    if not isinstance(payload, dict):
        raise TypeError("rewards must be an object")
    balance = RewardBalance()
    for kind in GameKind:
        balance.amounts[kind] = max(0, int(payload.get(kind.value, 0)))
    return balance


def _decode_statistics(payload: Any) -> Statistics:
    if not isinstance(payload, dict):
        raise TypeError("statistics must be an object")
    per_game = payload.get("sessions_per_game", {})
    if not isinstance(per_game, dict):
        raise TypeError("sessions_per_game must be an object")
    return Statistics(
        total_sessions=max(0, int(payload.get("total_sessions", 0))),
        sessions_per_game={str(k): max(0, int(v)) for k, v in per_game.items()},
        total_play_time=max(0.0, float(payload.get("total_play_time", 0.0))),
    )


def _encode_session(session: SessionRecord) -> Dict[str, Any]:
    return {
        "id": session.id,
        "game": session.kind.value,
        "difficulty": session.difficulty.value,
        "level": session.level,
        "score": session.score,
        "completed": session.completed,
        "timestamp": session.timestamp.isoformat(),
    }


def _decode_sessions(payload: Any) -> List[SessionRecord]:
    if not isinstance(payload, list):
        raise TypeError("sessions must be a list")
    return [
        SessionRecord(
            id=str(item["id"]),
            kind=GameKind(item["game"]),
            difficulty=Difficulty(item["difficulty"]),
            level=int(item["level"]),
            score=int(item["score"]),
            completed=bool(item["completed"]),
            timestamp=datetime.fromisoformat(item["timestamp"]),
        )
        for item in payload
    ]
