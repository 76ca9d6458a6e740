"""Stats sink: update the repository after each answered prompt."""

import time
from typing import Callable, Optional

from rounds.state import Prompt
from stats.repository import StatsRepository, WeakSpot

TIMER_DURATION_MS = 10_000
MAX_WEAK_SPOTS = 10


def _now_ms() -> float:
    return time.time() * 1000


class StatsRecorder:
    """Tracks the current streak and writes position/scenario/overall/weak-spot stats.

    learning_mode selects the practice bucket; timed play (the default) feeds the
    bucket that round composition reads.
    """

    def __init__(
        self,
        repo: StatsRepository,
        clock: Optional[Callable[[], float]] = None,
        learning_mode: bool = False,
    ):
        self.repo = repo
        self.clock = clock or _now_ms
        self.learning_mode = learning_mode
        self.current_streak = 0

    def record_answer(self, prompt: Prompt, correct: bool, elapsed_ms: float) -> None:
        self._record_position(prompt.role, correct, elapsed_ms)
        self._record_scenario(prompt.scenario_id, correct)
        self._record_overall(correct)
        self._record_weak_spot(prompt, correct)

    def record_timeout(self, prompt: Prompt, elapsed_ms: float = 0) -> None:
        """Timeouts count as misses and never less than the full timer."""
        self.record_answer(prompt, False, max(TIMER_DURATION_MS, elapsed_ms))

    def _record_position(self, position: str, correct: bool, elapsed_ms: float) -> None:
        s = self.repo.get_position_stats(position, self.learning_mode)
        s.attempts += 1
        if correct:
            s.correct += 1
        s.avg_time_ms = (s.avg_time_ms * (s.attempts - 1) + elapsed_ms) / s.attempts
        s.last_asked_at = self.clock()
        self.repo.save_position_stats(position, s, self.learning_mode)

    def _record_scenario(self, scenario_id: str, correct: bool) -> None:
        s = self.repo.get_scenario_stats(scenario_id, self.learning_mode)
        s.attempts += 1
        if correct:
            s.correct += 1
        self.repo.save_scenario_stats(scenario_id, s, self.learning_mode)

    def _record_overall(self, correct: bool) -> None:
        s = self.repo.get_overall_stats(self.learning_mode)
        s.total_attempts += 1
        if correct:
            s.total_correct += 1
            self.current_streak += 1
            s.best_streak = max(s.best_streak, self.current_streak)
        else:
            self.current_streak = 0
        self.repo.save_overall_stats(s, self.learning_mode)

    def _record_weak_spot(self, prompt: Prompt, correct: bool) -> None:
        if correct:
            return
        spots = self.repo.get_weak_spots(self.learning_mode)
        spot = next((s for s in spots if s.matches(prompt.role, prompt.question_type, prompt.correct_answer)), None)
        if spot is None:
            spot = WeakSpot(role=prompt.role, question_type=prompt.question_type, intent=prompt.correct_answer)
            spots.append(spot)
        spot.miss_count += 1
        spots.sort(key=lambda s: -s.miss_count)
        self.repo.save_weak_spots(spots[:MAX_WEAK_SPOTS], self.learning_mode)
