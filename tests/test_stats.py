"""Tests for stats recording, repositories and progress summaries."""

import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from scenarios.base import POSITIONS, FielderAction, PrimaryIntent, QuestionType
from rounds.state import Prompt
from stats.recorder import MAX_WEAK_SPOTS, TIMER_DURATION_MS, StatsRecorder
from stats.repository import InMemoryStatsRepository, JsonFileStatsRepository, WeakSpot, open_repository
from stats.summary import position_accuracy, position_stats_frame, progress_summary


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        self.now += 10
        return self.now


def _prompt(role="SS", correct=PrimaryIntent.CUTOFF, qt=QuestionType.PRIMARY, scenario_id="s1") -> Prompt:
    return Prompt(
        scenario_id=scenario_id,
        role=role,
        question_type=qt,
        correct_answer=correct,
        options=[correct, PrimaryIntent.COVER, PrimaryIntent.BACKUP, PrimaryIntent.HOLD],
        correct_index=0,
    )


def test_position_stats_running_average_and_last_asked():
    repo = InMemoryStatsRepository()
    rec = StatsRecorder(repo, clock=FakeClock())
    rec.record_answer(_prompt(), True, 2000)
    rec.record_answer(_prompt(), False, 4000)
    s = repo.get_position_stats("SS")
    assert s.attempts == 2
    assert s.correct == 1
    assert s.avg_time_ms == pytest.approx(3000)
    assert s.last_asked_at == 1020
    assert repo.last_asked_at("SS") == 1020
    assert repo.last_asked_at("C") == 0
    assert position_accuracy(repo, "SS") == pytest.approx(50.0)


def test_streaks_and_overall():
    repo = InMemoryStatsRepository()
    rec = StatsRecorder(repo, clock=FakeClock())
    for correct in (True, True, True, False, True):
        rec.record_answer(_prompt(), correct, 1000)
    overall = repo.get_overall_stats()
    assert overall.total_attempts == 5
    assert overall.total_correct == 4
    assert overall.best_streak == 3
    assert rec.current_streak == 1
    assert repo.get_scenario_stats("s1").attempts == 5


def test_timeout_counts_as_miss_with_full_timer():
    repo = InMemoryStatsRepository()
    rec = StatsRecorder(repo, clock=FakeClock())
    rec.record_answer(_prompt(), True, 1000)
    rec.record_timeout(_prompt(), 0)
    s = repo.get_position_stats("SS")
    assert s.correct == 1
    assert s.avg_time_ms == pytest.approx((1000 + TIMER_DURATION_MS) / 2)
    assert rec.current_streak == 0
    assert repo.get_weak_spots()[0].miss_count == 1


def test_weak_spots_sorted_and_capped():
    repo = InMemoryStatsRepository()
    rec = StatsRecorder(repo, clock=FakeClock())
    rec.record_answer(_prompt(role="LF", correct=FielderAction.THROW_TO_BASE, qt=QuestionType.FIELDER_ACTION), False, 1000)
    rec.record_answer(_prompt(role="LF", correct=FielderAction.THROW_TO_BASE, qt=QuestionType.FIELDER_ACTION), False, 1000)
    # 18 more distinct (role, intent) pairs; only the first of them fit under the cap
    for role in POSITIONS:
        for intent in (PrimaryIntent.FIELD, PrimaryIntent.COVER):
            rec.record_answer(_prompt(role=role, correct=intent), False, 1000)
    for _ in range(3):
        rec.record_answer(_prompt(role="P", correct=PrimaryIntent.COVER), False, 1000)
    spots = repo.get_weak_spots()
    assert len(spots) == MAX_WEAK_SPOTS
    counts = [s.miss_count for s in spots]
    assert counts == sorted(counts, reverse=True)
    assert spots[0].matches("P", QuestionType.PRIMARY, PrimaryIntent.COVER)
    assert spots[0].miss_count == 4
    assert spots[1].matches("LF", QuestionType.FIELDER_ACTION, FielderAction.THROW_TO_BASE)
    assert spots[1].miss_count == 2
    assert all(s.miss_count == 1 for s in spots[2:])


def test_correct_answers_do_not_create_weak_spots():
    repo = InMemoryStatsRepository()
    StatsRecorder(repo).record_answer(_prompt(), True, 1000)
    assert repo.get_weak_spots() == []


def test_repository_returns_copies():
    repo = InMemoryStatsRepository()
    StatsRecorder(repo, clock=FakeClock()).record_answer(_prompt(), True, 1000)
    s = repo.get_position_stats("SS")
    s.attempts = 99
    assert repo.get_position_stats("SS").attempts == 1


def test_json_repository_round_trip(tmp_path):
    path = tmp_path / "stats" / "stats.json"
    repo = open_repository(str(path))
    assert isinstance(repo, JsonFileStatsRepository)
    rec = StatsRecorder(repo, clock=FakeClock())
    rec.record_answer(_prompt(), False, 1500)
    rec.record_answer(_prompt(role="LF", correct=FielderAction.HOLD_BALL, qt=QuestionType.FIELDER_ACTION), False, 2500)
    assert path.exists()

    reopened = JsonFileStatsRepository(str(path))
    assert reopened.get_position_stats("SS").avg_time_ms == pytest.approx(1500)
    assert reopened.get_overall_stats().total_attempts == 2
    spots = reopened.get_weak_spots()
    assert {(s.role, s.intent) for s in spots} == {("SS", PrimaryIntent.CUTOFF), ("LF", FielderAction.HOLD_BALL)}

    reopened.reset()
    assert JsonFileStatsRepository(str(path)).get_overall_stats().total_attempts == 0


def test_corrupt_stats_file_treated_as_empty(tmp_path, caplog):
    path = tmp_path / "stats.json"
    path.write_text("{not json")
    repo = JsonFileStatsRepository(str(path))
    assert repo.get_overall_stats().total_attempts == 0
    assert repo.all_position_stats() == {}
    assert "Failed to read stats" in caplog.text


def test_weak_spot_dict_round_trip():
    spot = WeakSpot("LF", QuestionType.FIELDER_ACTION, FielderAction.THROW_THROUGH_CUTOFF, 3)
    assert spot.to_dict() == {"role": "LF", "questionType": "fielderAction", "intent": "THROW_THROUGH_CUTOFF", "missCount": 3}
    assert WeakSpot.from_dict(json.loads(json.dumps(spot.to_dict()))) == spot


def test_top_weak_spots():
    repo = InMemoryStatsRepository()
    repo.save_weak_spots([
        WeakSpot("C", QuestionType.PRIMARY, PrimaryIntent.HOLD, 1),
        WeakSpot("SS", QuestionType.PRIMARY, PrimaryIntent.CUTOFF, 5),
        WeakSpot("2B", QuestionType.PRIMARY, PrimaryIntent.COVER, 3),
    ])
    assert [s.role for s in repo.top_weak_spots(2)] == ["SS", "2B"]


def test_progress_summary_and_frame():
    repo = InMemoryStatsRepository()
    rec = StatsRecorder(repo, clock=FakeClock())
    rec.record_answer(_prompt(role="SS"), True, 2000)
    rec.record_answer(_prompt(role="C", correct=PrimaryIntent.HOLD), False, 4000)
    summary = progress_summary(repo)
    assert summary["accuracy"] == pytest.approx(50.0)
    assert summary["avg_response_ms"] == pytest.approx(3000)
    assert summary["total_attempts"] == 2
    assert summary["best_streak"] == 1
    assert summary["weak_spots"] == [{"role": "C", "questionType": "primary", "intent": "HOLD", "missCount": 1}]

    df = position_stats_frame(repo)
    timed = df[df["mode"] == "timed"].set_index("position")
    assert list(timed.index) == POSITIONS
    assert len(df) == 2 * len(POSITIONS)
    assert timed.loc["SS", "accuracy"] == pytest.approx(100.0)
    assert timed.loc["P", "attempts"] == 0
    assert df[df["mode"] == "learning"]["attempts"].sum() == 0


def test_empty_summary():
    summary = progress_summary(InMemoryStatsRepository())
    assert summary["accuracy"] == 0.0
    assert summary["weak_spots"] == []


def test_learning_answers_go_to_their_own_bucket():
    repo = InMemoryStatsRepository()
    timed = StatsRecorder(repo, clock=FakeClock(1000))
    practice = StatsRecorder(repo, clock=FakeClock(9000), learning_mode=True)
    timed.record_answer(_prompt(role="SS"), True, 2000)
    practice.record_answer(_prompt(role="SS"), False, 5000)
    practice.record_answer(_prompt(role="C", correct=PrimaryIntent.HOLD), False, 5000)

    assert repo.last_asked_at("SS") == 1010
    assert repo.last_asked_at("SS", learning_mode=True) == 9010
    assert repo.last_asked_at("C") == 0
    assert repo.get_position_stats("SS").correct == 1
    assert repo.get_weak_spots() == []
    assert {s.role for s in repo.top_weak_spots(5, learning_mode=True)} == {"SS", "C"}
    assert repo.get_overall_stats().best_streak == 1
    assert repo.get_overall_stats(learning_mode=True).total_correct == 0
    assert progress_summary(repo)["total_attempts"] == 1
    assert progress_summary(repo, learning_mode=True)["mode"] == "learning"


def test_json_repository_keeps_buckets_apart(tmp_path):
    path = tmp_path / "stats.json"
    repo = JsonFileStatsRepository(str(path))
    StatsRecorder(repo, clock=FakeClock(), learning_mode=True).record_answer(_prompt(), False, 1000)
    data = json.loads(path.read_text())
    assert set(data) == {"timed", "learning"}
    assert data["timed"]["weakSpots"] == []

    reopened = JsonFileStatsRepository(str(path))
    assert reopened.get_overall_stats(learning_mode=True).total_attempts == 1
    assert reopened.get_overall_stats().total_attempts == 0
