"""SimulatedPlayer: seeded answerer with per-position skill and response times."""

import random
from typing import Optional

from rounds.state import Prompt


class SimulatedPlayer:
    """Answers correctly with probability = skill for the prompt's position.

    Misses pick a random wrong option. Response time shrinks as skill grows
    and occasionally runs past the timer.
    """

    DEFAULT_TIMEOUT_PROB = 0.05

    def __init__(
        self,
        accuracy: float = 0.7,
        position_skill: Optional[dict[str, float]] = None,
        seed: Optional[int] = 42,
        timeout_prob: float = DEFAULT_TIMEOUT_PROB,
    ):
        self.accuracy = accuracy
        self.position_skill = position_skill or {}
        self.rng = random.Random(seed)
        self.timeout_prob = timeout_prob

    def skill(self, position: str) -> float:
        return self.position_skill.get(position, self.accuracy)

    def answer(self, prompt: Prompt) -> tuple[Optional[int], float]:
        """Return (selected index or None on timeout, elapsed ms)."""
        if self.rng.random() < self.timeout_prob:
            return None, 10_000 + self.rng.uniform(0, 500)
        skill = self.skill(prompt.role)
        elapsed = self.rng.uniform(1500, 4000) + (1 - skill) * self.rng.uniform(0, 4000)
        if self.rng.random() < skill:
            return prompt.correct_index, elapsed
        wrong = [i for i in range(len(prompt.options)) if i != prompt.correct_index]
        return self.rng.choice(wrong), elapsed
