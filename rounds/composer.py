"""Round composer: pick a balanced six-prompt round from a scenario pool.

Three modes share one builder that tracks used positions and the
one-fielder-action-per-round rule:

- weak_spots: replay ranked weak spots, pad with the whole-field algorithm
- my_positions: one or two focus positions, 80/20 split
- whole_field: one prompt per ballSide/infieldCore/coverage group, an
  optional backup prompt, then least-recently-asked positions
"""

import logging
import random
from typing import Optional, Sequence, Union

from scenarios.base import POSITIONS, GameMode, QuestionType, Scenario
from rounds.state import ROUND_SIZE, Prompt
from stats.repository import StatsRepository, WeakSpot

logger = logging.getLogger(__name__)

FOCUS_PRIMARY_PROBABILITY = 0.8
FIELDER_ACTION_PROBABILITY = 0.3
BACKUP_PROBABILITY = 0.7
REQUIRED_GROUPS = ("ballSide", "infieldCore", "coverage")

Candidate = tuple[Scenario, str]


class RoundConfigError(ValueError):
    """Caller configuration error (no scenarios, no focus position, nothing eligible)."""


class _RoundBuilder:
    def __init__(self, rng: random.Random, size: int):
        self.rng = rng
        self.size = size
        self.prompts: list[Prompt] = []
        self.used_roles: set[str] = set()
        self.used_pairs: set[tuple[str, str]] = set()
        self.fielder_action_used = False

    @property
    def full(self) -> bool:
        return len(self.prompts) >= self.size

    def _question_type(self, scenario: Scenario, position: str) -> QuestionType:
        role = scenario.roles[position]
        if (
            not self.fielder_action_used
            and role.can_ask_fielder_action
            and self.rng.random() < FIELDER_ACTION_PROBABILITY
        ):
            return QuestionType.FIELDER_ACTION
        return QuestionType.PRIMARY

    def add(self, scenario: Scenario, position: str, question_type: Optional[QuestionType] = None) -> Prompt:
        role = scenario.roles[position]
        if question_type is None:
            question_type = self._question_type(scenario, position)
        if question_type == QuestionType.FIELDER_ACTION:
            self.fielder_action_used = True
        prompt = Prompt(
            scenario_id=scenario.id,
            role=position,
            question_type=question_type,
            correct_answer=role.correct_answer(question_type),
        )
        self.prompts.append(prompt)
        self.used_roles.add(position)
        self.used_pairs.add((scenario.id, position))
        return prompt


class RoundComposer:
    """Composes unresolved prompts. Timed-play stats supply last-asked times and weak spots."""

    def __init__(
        self,
        stats: Optional[StatsRepository] = None,
        rng: Optional[random.Random] = None,
        round_size: int = ROUND_SIZE,
    ):
        self.stats = stats
        self.rng = rng or random.Random()
        self.round_size = round_size

    def last_asked_at(self, position: str) -> float:
        # Practice answers never steer composition
        if self.stats is None:
            return 0
        return self.stats.last_asked_at(position, learning_mode=False)

    def compose(
        self,
        scenarios: list[Scenario],
        mode: Union[GameMode, str],
        focus: Optional[Union[str, Sequence[str]]] = None,
        weak_spots: Optional[list[WeakSpot]] = None,
    ) -> list[Prompt]:
        if not scenarios:
            raise RoundConfigError("No scenarios provided")
        mode = GameMode(mode)
        if mode == GameMode.FOCUS:
            prompts = self._focus_round(scenarios, _focus_positions(focus))
        elif mode == GameMode.WEAK_SPOTS:
            if weak_spots is None:
                weak_spots = self.stats.top_weak_spots(self.round_size, learning_mode=False) if self.stats else []
            prompts = self._weak_spot_round(scenarios, weak_spots)
        else:
            builder = _RoundBuilder(self.rng, self.round_size)
            self._fill_whole_field(builder, scenarios)
            prompts = builder.prompts
        logger.debug("Composed %s round: %s", mode.value, [(p.role, p.question_type.value) for p in prompts])
        return prompts

    def _focus_round(self, scenarios: list[Scenario], positions: list[str]) -> list[Prompt]:
        by_position = {p: [s for s in scenarios if p in s.roles] for p in positions}
        available = [p for p in positions if by_position[p]]
        if not available:
            raise RoundConfigError(f"Focus position(s) {', '.join(positions)} not available in any scenario")
        primary = positions[0]
        secondary = positions[1] if len(positions) > 1 else None

        builder = _RoundBuilder(self.rng, self.round_size)
        while not builder.full:
            if self.rng.random() < FOCUS_PRIMARY_PROBABILITY or secondary is None:
                position = primary
            else:
                position = secondary
            if not by_position[position]:
                position = available[0]
            builder.add(self.rng.choice(by_position[position]), position)
        return builder.prompts

    def _weak_spot_round(self, scenarios: list[Scenario], weak_spots: list[WeakSpot]) -> list[Prompt]:
        builder = _RoundBuilder(self.rng, self.round_size)
        for spot in weak_spots:
            if builder.full:
                break
            with_role = [s for s in scenarios if spot.role in s.roles]
            if not with_role:
                logger.debug("Weak spot %s/%s has no scenario in pool", spot.role, spot.question_type.value)
                continue
            if spot.question_type == QuestionType.FIELDER_ACTION and not builder.fielder_action_used:
                fielders = [s for s in with_role if s.roles[spot.role].can_ask_fielder_action]
                if fielders:
                    scenario = self.rng.choice(fielders)
                    builder.add(scenario, spot.role, QuestionType.FIELDER_ACTION)
                    continue
            # Prefer a scenario where the missed intent is actually the right answer
            matching = [s for s in with_role if s.roles[spot.role].primary_intent == spot.intent]
            scenario = self.rng.choice(matching or with_role)
            builder.add(scenario, spot.role, QuestionType.PRIMARY)
        if not builder.full:
            self._fill_whole_field(builder, scenarios)
        return builder.prompts

    def _fill_whole_field(self, builder: _RoundBuilder, scenarios: list[Scenario]) -> None:
        if not any(s.roles for s in scenarios):
            raise RoundConfigError("No scenario defines a role for any position")

        for group in REQUIRED_GROUPS:
            if builder.full:
                return
            eligible = self._group_candidates(scenarios, group, builder.used_roles)
            if not eligible:
                logger.warning("No eligible unused position in %s group; skipping", group)
                continue
            scenario, position = self.rng.choice(eligible)
            builder.add(scenario, position)

        if not builder.full and self.rng.random() < BACKUP_PROBABILITY:
            backups = self._group_candidates(scenarios, "backups", builder.used_roles)
            if backups:
                scenario, position = min(backups, key=lambda c: self.last_asked_at(c[1]))
                builder.add(scenario, position)

        for scenario, position in self._ranked_candidates(scenarios):
            if builder.full:
                return
            if position not in builder.used_roles:
                builder.add(scenario, position)

        if not builder.full:
            logger.warning(
                "Only %d distinct positions available; repeating positions to fill %d prompts",
                len(builder.used_roles), builder.size,
            )
        while not builder.full:
            ranked = self._ranked_candidates(scenarios)
            if not ranked:
                raise RoundConfigError("No scenario defines a role for any known position")
            fresh = [c for c in ranked if (c[0].id, c[1]) not in builder.used_pairs]
            for scenario, position in fresh or ranked:
                if builder.full:
                    break
                builder.add(scenario, position)

    def _group_candidates(self, scenarios: list[Scenario], group: str, used: set[str]) -> list[Candidate]:
        out: list[Candidate] = []
        for s in scenarios:
            for position in s.role_groups.group(group):
                if position in s.roles and position not in used:
                    out.append((s, position))
        return out

    def _ranked_candidates(self, scenarios: list[Scenario]) -> list[Candidate]:
        """Recommended roles first, then oldest last-asked; ties broken randomly."""
        candidates = [(s, p) for s in scenarios for p in POSITIONS if p in s.roles]
        self.rng.shuffle(candidates)
        candidates.sort(key=lambda c: (0 if c[0].is_recommended(c[1]) else 1, self.last_asked_at(c[1])))
        return candidates


def _focus_positions(focus: Optional[Union[str, Sequence[str]]]) -> list[str]:
    if not focus:
        raise RoundConfigError("Position required for focus mode")
    positions = [focus] if isinstance(focus, str) else [p for p in focus if p]
    if not positions:
        raise RoundConfigError("Position required for focus mode")
    return positions[:2]


def compose_round(
    scenarios: list[Scenario],
    mode: Union[GameMode, str],
    focus: Optional[Union[str, Sequence[str]]] = None,
    weak_spots: Optional[list[WeakSpot]] = None,
    stats: Optional[StatsRepository] = None,
    rng: Optional[random.Random] = None,
) -> list[Prompt]:
    return RoundComposer(stats=stats, rng=rng).compose(scenarios, mode, focus=focus, weak_spots=weak_spots)
