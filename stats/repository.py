"""Stats repositories: per-position, per-scenario, overall stats and weak spots.

Every store is split into a timed bucket and a learning (practice) bucket.
Round composition only reads the timed bucket.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from scenarios.base import AnswerOption, QuestionType, parse_answer

logger = logging.getLogger(__name__)


@dataclass
class PositionStats:
    attempts: int = 0
    correct: int = 0
    avg_time_ms: float = 0.0
    last_asked_at: float = 0  # epoch millis, 0 = never asked


@dataclass
class ScenarioStats:
    attempts: int = 0
    correct: int = 0


@dataclass
class OverallStats:
    total_attempts: int = 0
    total_correct: int = 0
    best_streak: int = 0


@dataclass
class WeakSpot:
    role: str
    question_type: QuestionType
    intent: AnswerOption
    miss_count: int = 0

    def matches(self, role: str, question_type: QuestionType, intent: AnswerOption) -> bool:
        return self.role == role and self.question_type == question_type and self.intent == intent

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "questionType": self.question_type.value,
            "intent": self.intent.value,
            "missCount": self.miss_count,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "WeakSpot":
        return cls(
            role=d["role"],
            question_type=QuestionType(d["questionType"]),
            intent=parse_answer(d["intent"]),
            miss_count=int(d.get("missCount", 0)),
        )


def bucket_name(learning_mode: bool) -> str:
    return "learning" if learning_mode else "timed"


class StatsRepository(ABC):
    """Key-value style stats store keyed by position, scenario id, or weak-spot triple.

    Each method takes learning_mode; False (the default) is the timed bucket.
    """

    @abstractmethod
    def get_position_stats(self, position: str, learning_mode: bool = False) -> PositionStats:
        pass

    @abstractmethod
    def save_position_stats(self, position: str, stats: PositionStats, learning_mode: bool = False) -> None:
        pass

    @abstractmethod
    def all_position_stats(self, learning_mode: bool = False) -> dict[str, PositionStats]:
        pass

    @abstractmethod
    def get_scenario_stats(self, scenario_id: str, learning_mode: bool = False) -> ScenarioStats:
        pass

    @abstractmethod
    def save_scenario_stats(self, scenario_id: str, stats: ScenarioStats, learning_mode: bool = False) -> None:
        pass

    @abstractmethod
    def all_scenario_stats(self, learning_mode: bool = False) -> dict[str, ScenarioStats]:
        pass

    @abstractmethod
    def get_overall_stats(self, learning_mode: bool = False) -> OverallStats:
        pass

    @abstractmethod
    def save_overall_stats(self, stats: OverallStats, learning_mode: bool = False) -> None:
        pass

    @abstractmethod
    def get_weak_spots(self, learning_mode: bool = False) -> list[WeakSpot]:
        pass

    @abstractmethod
    def save_weak_spots(self, spots: list[WeakSpot], learning_mode: bool = False) -> None:
        pass

    @abstractmethod
    def reset(self) -> None:
        pass

    def last_asked_at(self, position: str, learning_mode: bool = False) -> float:
        return self.get_position_stats(position, learning_mode).last_asked_at

    def top_weak_spots(self, count: int = 3, learning_mode: bool = False) -> list[WeakSpot]:
        spots = sorted(self.get_weak_spots(learning_mode), key=lambda s: -s.miss_count)
        return spots[:count]


@dataclass
class _Bucket:
    positions: dict[str, PositionStats] = field(default_factory=dict)
    scenarios: dict[str, ScenarioStats] = field(default_factory=dict)
    overall: OverallStats = field(default_factory=OverallStats)
    weak_spots: list[WeakSpot] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "positions": {k: asdict(v) for k, v in self.positions.items()},
            "scenarios": {k: asdict(v) for k, v in self.scenarios.items()},
            "overall": asdict(self.overall),
            "weakSpots": [s.to_dict() for s in self.weak_spots],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "_Bucket":
        return cls(
            positions={k: PositionStats(**v) for k, v in data.get("positions", {}).items()},
            scenarios={k: ScenarioStats(**v) for k, v in data.get("scenarios", {}).items()},
            overall=OverallStats(**data.get("overall", {})),
            weak_spots=[WeakSpot.from_dict(d) for d in data.get("weakSpots", [])],
        )


class InMemoryStatsRepository(StatsRepository):
    def __init__(self):
        self._buckets: dict[bool, _Bucket] = {False: _Bucket(), True: _Bucket()}

    def get_position_stats(self, position: str, learning_mode: bool = False) -> PositionStats:
        s = self._buckets[learning_mode].positions.get(position)
        return PositionStats(**asdict(s)) if s else PositionStats()

    def save_position_stats(self, position: str, stats: PositionStats, learning_mode: bool = False) -> None:
        self._buckets[learning_mode].positions[position] = stats

    def all_position_stats(self, learning_mode: bool = False) -> dict[str, PositionStats]:
        return dict(self._buckets[learning_mode].positions)

    def get_scenario_stats(self, scenario_id: str, learning_mode: bool = False) -> ScenarioStats:
        s = self._buckets[learning_mode].scenarios.get(scenario_id)
        return ScenarioStats(**asdict(s)) if s else ScenarioStats()

    def save_scenario_stats(self, scenario_id: str, stats: ScenarioStats, learning_mode: bool = False) -> None:
        self._buckets[learning_mode].scenarios[scenario_id] = stats

    def all_scenario_stats(self, learning_mode: bool = False) -> dict[str, ScenarioStats]:
        return dict(self._buckets[learning_mode].scenarios)

    def get_overall_stats(self, learning_mode: bool = False) -> OverallStats:
        return OverallStats(**asdict(self._buckets[learning_mode].overall))

    def save_overall_stats(self, stats: OverallStats, learning_mode: bool = False) -> None:
        self._buckets[learning_mode].overall = stats

    def get_weak_spots(self, learning_mode: bool = False) -> list[WeakSpot]:
        return [WeakSpot(s.role, s.question_type, s.intent, s.miss_count) for s in self._buckets[learning_mode].weak_spots]

    def save_weak_spots(self, spots: list[WeakSpot], learning_mode: bool = False) -> None:
        self._buckets[learning_mode].weak_spots = list(spots)

    def reset(self) -> None:
        self._buckets = {False: _Bucket(), True: _Bucket()}


class JsonFileStatsRepository(InMemoryStatsRepository):
    """In-memory repository mirrored to a single JSON document after every write.

    The document holds one object per bucket ("timed", "learning"). An
    unreadable or corrupt file is logged and treated as empty rather than
    failing the session.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            self._buckets = {mode: _Bucket.from_dict(data.get(bucket_name(mode), {})) for mode in (False, True)}
        except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning("Failed to read stats from %s: %s", self.path, e)
            super().reset()

    def _flush(self) -> None:
        data = {bucket_name(mode): bucket.to_dict() for mode, bucket in self._buckets.items()}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.warning("Stats write to %s failed: %s", self.path, e)

    def save_position_stats(self, position: str, stats: PositionStats, learning_mode: bool = False) -> None:
        super().save_position_stats(position, stats, learning_mode)
        self._flush()

    def save_scenario_stats(self, scenario_id: str, stats: ScenarioStats, learning_mode: bool = False) -> None:
        super().save_scenario_stats(scenario_id, stats, learning_mode)
        self._flush()

    def save_overall_stats(self, stats: OverallStats, learning_mode: bool = False) -> None:
        super().save_overall_stats(stats, learning_mode)
        self._flush()

    def save_weak_spots(self, spots: list[WeakSpot], learning_mode: bool = False) -> None:
        super().save_weak_spots(spots, learning_mode)
        self._flush()

    def reset(self) -> None:
        super().reset()
        self._flush()


def open_repository(path: Optional[str] = None) -> StatsRepository:
    return JsonFileStatsRepository(path) if path else InMemoryStatsRepository()
