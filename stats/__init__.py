"""Player stats: repositories, the per-answer recorder and progress summaries."""

from stats.repository import (
    InMemoryStatsRepository,
    JsonFileStatsRepository,
    OverallStats,
    PositionStats,
    ScenarioStats,
    StatsRepository,
    WeakSpot,
    open_repository,
)
from stats.recorder import StatsRecorder
from stats.summary import position_stats_frame, progress_summary

__all__ = [
    "InMemoryStatsRepository",
    "JsonFileStatsRepository",
    "OverallStats",
    "PositionStats",
    "ScenarioStats",
    "StatsRepository",
    "WeakSpot",
    "open_repository",
    "StatsRecorder",
    "position_stats_frame",
    "progress_summary",
]
