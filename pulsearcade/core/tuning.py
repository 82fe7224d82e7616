from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from pulsearcade.core.models import Difficulty

DEFAULT_TUNING_PATH = Path(__file__).resolve().parent.parent / "data" / "tuning.yaml"


@dataclass(frozen=True)
class Timings:
    tick_rate: int
    pulse_feedback_delay: float
    path_hint_lead_in: float
    path_hint_gap: float
    path_reveal_delay: float
    path_result_display: float
    pattern_lead_in: float
    pattern_turn_delay: float
    pattern_flash: float
    pattern_next_round_delay: float
    pattern_fail_delay: float

    @property
    def tick_interval(self) -> float:
        return 1.0 / self.tick_rate


@dataclass(frozen=True)
class PulseParams:
    rounds: int
    period: float
    width: float
    target_range: Tuple[float, float]


@dataclass(frozen=True)
class PathParams:
    rounds: int
    path_count: int
    hint_count: int
    hint_duration: float


@dataclass(frozen=True)
class PatternParams:
    rounds: int
    grid_size: int
    beat: float
    base_length: int
    lit_fraction: float

    @property
    def cell_count(self) -> int:
        return self.grid_size * self.grid_size

    def pattern_length(self, round_number: int) -> int:
        """Pattern length for a 1-based round; grows every second round."""
        return min(self.base_length + (round_number - 1) // 2, self.cell_count)


def _stepped(entry: Dict[str, Any], level: int) -> float:
    return float(entry["start"]) - float(entry.get("step", 0.0)) * (level - 1)


class Tuning:
    """Game parameters read from ``data/tuning.yaml``.

    The file holds per-difficulty tables; the ``pulse``/``path``/``pattern``
    methods resolve them for one level, applying the clamps.
    """

    def __init__(self, raw: Dict[str, Any], source: str = "tuning.yaml") -> None:
        self._source = source
        try:
            self._timings = Timings(**raw["timing"])
            self._pulse = raw["pulse"]
            self._path = raw["path"]
            self._pattern = raw["pattern"]
            for section in (self._pulse, self._path, self._pattern):
                for difficulty in Difficulty:
                    section["difficulties"][difficulty.value]
        except KeyError as e:
            raise ValueError(f"{source}: missing section {e}") from e
        except TypeError as e:
            raise ValueError(f"{source}: invalid 'timing' section: {e}") from e

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Tuning":
        path = Path(path) if path is not None else DEFAULT_TUNING_PATH
        if not path.exists():
            raise FileNotFoundError(f"Tuning file not found: {path}")
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict):
            raise ValueError(f"{path.name}: expected a YAML mapping")
        return cls(raw, source=path.name)

    @property
    def timings(self) -> Timings:
        return self._timings

    def pulse(self, difficulty: Difficulty, level: int) -> PulseParams:
        table = self._pulse["difficulties"][difficulty.value]
        low, high = self._pulse.get("target_range", (0.25, 0.75))
        return PulseParams(
            rounds=int(table["rounds"]),
            period=max(_stepped(table["period"], level), float(self._pulse["min_period"])),
            width=max(_stepped(table["width"], level), float(self._pulse["min_width"])),
            target_range=(float(low), float(high)),
        )

    def path(self, difficulty: Difficulty, level: int) -> PathParams:
        table = self._path["difficulties"][difficulty.value]
        paths = table["paths"]
        path_count = int(paths["base"])
        bonus_after = paths.get("bonus_after_level")
        if bonus_after is not None and level > int(bonus_after):
            path_count += 1

        hints = table["hints"]
        hint_count = int(hints["start"])
        drop_every = int(hints.get("drop_every", 0))
        if drop_every > 0:
            hint_count -= level // drop_every
        hint_count = max(hint_count, int(hints.get("min", 1)))

        return PathParams(
            rounds=int(table["rounds"]),
            path_count=path_count,
            hint_count=hint_count,
            hint_duration=float(table["hint_duration"]),
        )

    def pattern(self, difficulty: Difficulty, level: int) -> PatternParams:
        table = self._pattern["difficulties"][difficulty.value]
        grid = table["grid"]
        grid_size = int(grid["base"])
        large_after = grid.get("large_after_level")
        if large_after is not None and level > int(large_after):
            grid_size = int(grid["large"])

        length = table["length"]
        base_length = int(length["start"]) + (level - 1) // int(length["grow_every"])

        return PatternParams(
            rounds=int(table["rounds"]),
            grid_size=grid_size,
            beat=max(_stepped(table["beat"], level), float(self._pattern["min_beat"])),
            base_length=base_length,
            lit_fraction=float(self._pattern.get("lit_fraction", 0.7)),
        )


@lru_cache(maxsize=1)
def default_tuning() -> Tuning:
    return Tuning.load()
