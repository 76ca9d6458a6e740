"""Progress summary for the coaching view."""

from typing import Any

from scenarios.base import POSITIONS
from stats.repository import StatsRepository, bucket_name


def position_accuracy(repo: StatsRepository, position: str, learning_mode: bool = False) -> float:
    s = repo.get_position_stats(position, learning_mode)
    if s.attempts == 0:
        return 0.0
    return s.correct / s.attempts * 100


def progress_summary(repo: StatsRepository, weak_spot_count: int = 3, learning_mode: bool = False) -> dict[str, Any]:
    overall = repo.get_overall_stats(learning_mode)
    positions = repo.all_position_stats(learning_mode)
    total_attempts = sum(s.attempts for s in positions.values())
    total_time = sum(s.avg_time_ms * s.attempts for s in positions.values())
    return {
        "mode": bucket_name(learning_mode),
        "accuracy": overall.total_correct / overall.total_attempts * 100 if overall.total_attempts else 0.0,
        "avg_response_ms": total_time / total_attempts if total_attempts else 0.0,
        "total_attempts": overall.total_attempts,
        "best_streak": overall.best_streak,
        "weak_spots": [s.to_dict() for s in repo.top_weak_spots(weak_spot_count, learning_mode)],
    }


def position_stats_frame(repo: StatsRepository):
    """One row per (mode, position), positions in field order, never-asked included."""
    import pandas as pd
    rows = []
    for learning_mode in (False, True):
        for position in POSITIONS:
            s = repo.get_position_stats(position, learning_mode)
            rows.append({
                "mode": bucket_name(learning_mode),
                "position": position,
                "attempts": s.attempts,
                "correct": s.correct,
                "accuracy": position_accuracy(repo, position, learning_mode),
                "avg_time_ms": s.avg_time_ms,
                "last_asked_at": s.last_asked_at,
            })
    return pd.DataFrame(rows)
