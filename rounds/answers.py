"""Answer synthesizer: four unique options per prompt, shuffled against short-term patterns."""

import logging
import random
from typing import Optional

from scenarios.base import (
    GLOBAL_FIELDER_ACTION_DISTRACTORS,
    GLOBAL_PRIMARY_DISTRACTORS,
    AnswerOption,
    QuestionType,
    RoleDefinition,
    Scenario,
    enumeration_for,
)
from rounds.state import Prompt, RoundState

logger = logging.getLogger(__name__)

OPTION_COUNT = 4
DISTRACTOR_COUNT = OPTION_COUNT - 1
MAX_RESHUFFLE_ATTEMPTS = 10
MAX_SAME_INDEX_COUNT = 3  # out of the last INDEX_HISTORY_SIZE correct indices

# Only three fielder actions exist, so at most two can be wrong answers.
POOL_TARGETS = {
    QuestionType.PRIMARY: 3,
    QuestionType.FIELDER_ACTION: 2,
}

GLOBAL_FALLBACKS: dict[QuestionType, list[AnswerOption]] = {
    QuestionType.PRIMARY: list(GLOBAL_PRIMARY_DISTRACTORS),
    QuestionType.FIELDER_ACTION: list(GLOBAL_FIELDER_ACTION_DISTRACTORS),
}


def _other_question_type(question_type: QuestionType) -> QuestionType:
    if question_type == QuestionType.PRIMARY:
        return QuestionType.FIELDER_ACTION
    return QuestionType.PRIMARY


def pool_distractors(role: RoleDefinition, question_type: QuestionType, correct: AnswerOption) -> list[AnswerOption]:
    """High pool first, then low, restricted to the question's enumeration."""
    enum_cls = enumeration_for(question_type)
    target = POOL_TARGETS[question_type]
    chosen: list[AnswerOption] = []
    for d in list(role.distractor_pool_high) + list(role.distractor_pool_low):
        if len(chosen) >= target:
            break
        if isinstance(d, enum_cls) and d != correct and d not in chosen:
            chosen.append(d)
    return chosen


def _top_up(chosen: list[AnswerOption], candidates: list[AnswerOption], correct: AnswerOption, rng: random.Random) -> None:
    available = [c for c in candidates if c != correct and c not in chosen]
    while len(chosen) < DISTRACTOR_COUNT and available:
        pick = rng.choice(available)
        available.remove(pick)
        chosen.append(pick)


def build_distractors(
    role: RoleDefinition,
    question_type: QuestionType,
    correct: AnswerOption,
    rng: random.Random,
) -> list[AnswerOption]:
    distractors = pool_distractors(role, question_type, correct)
    _top_up(distractors, GLOBAL_FALLBACKS[question_type], correct, rng)
    _top_up(distractors, list(enumeration_for(question_type)), correct, rng)
    if len(distractors) < DISTRACTOR_COUNT:
        other = _other_question_type(question_type)
        logger.debug("Mixing %s values into %s options; pools and enumeration exhausted", other.value, question_type.value)
        _top_up(distractors, GLOBAL_FALLBACKS[other], correct, rng)
        _top_up(distractors, list(enumeration_for(other)), correct, rng)
    return distractors[:DISTRACTOR_COUNT]


def build_option_set(
    role: RoleDefinition,
    question_type: QuestionType,
    correct: AnswerOption,
    rng: random.Random,
) -> list[AnswerOption]:
    """Correct answer first, then three unique distractors."""
    options = [correct]
    for d in build_distractors(role, question_type, correct, rng):
        if d not in options:
            options.append(d)
    return options


def option_signature(prompt: Prompt, options: list[AnswerOption]) -> str:
    sorted_ids = ",".join(sorted(o.value for o in options))
    return f"{prompt.question_type.value}:{prompt.scenario_id}:{prompt.role}:{sorted_ids}:{prompt.correct_answer.value}"


def _shuffled(options: list[AnswerOption], rng: random.Random) -> list[AnswerOption]:
    out = list(options)
    rng.shuffle(out)
    return out


def _swap_distractors(
    order: list[AnswerOption],
    correct: AnswerOption,
    previous: Optional[tuple[AnswerOption, ...]],
    rng: random.Random,
) -> list[AnswerOption]:
    """Swap two non-correct slots; the result never equals the previous ordering."""
    slots = [i for i, o in enumerate(order) if o != correct]
    pairs = [(a, b) for i, a in enumerate(slots) for b in slots[i + 1:]]
    rng.shuffle(pairs)
    for a, b in pairs:
        candidate = list(order)
        candidate[a], candidate[b] = candidate[b], candidate[a]
        if previous is None or tuple(candidate) != previous:
            return candidate
    return order


def resolve_options(
    prompt: Prompt,
    scenario: Scenario,
    round_state: RoundState,
    rng: Optional[random.Random] = None,
) -> Prompt:
    """Fill prompt.options and prompt.correct_index in place and update round_state.

    Uniqueness of the four options is guaranteed. The index and signature guards
    are best-effort: after MAX_RESHUFFLE_ATTEMPTS the last shuffle is accepted.
    """
    rng = rng or random.Random()
    role = scenario.role(prompt.role)
    if role is None:
        raise ValueError(f"Role {prompt.role} not found in scenario {scenario.id}")
    correct = prompt.correct_answer

    options = build_option_set(role, prompt.question_type, correct, rng)

    order = _shuffled(options, rng)
    for _ in range(MAX_RESHUFFLE_ATTEMPTS):
        if round_state.index_count(order.index(correct)) < MAX_SAME_INDEX_COUNT:
            break
        order = _shuffled(options, rng)

    key = prompt.signature_key
    signature = option_signature(prompt, order)
    if signature == round_state.last_signature(key):
        order = _swap_distractors(order, correct, round_state.last_order(key), rng)

    prompt.options = order
    prompt.correct_index = order.index(correct)
    round_state.record(key, prompt.correct_index, signature, order)
    return prompt


def resolve_round(
    prompts: list[Prompt],
    scenarios: list[Scenario],
    round_state: RoundState,
    rng: Optional[random.Random] = None,
) -> list[Prompt]:
    """Resolve prompts one at a time in presentation order."""
    by_id = {s.id: s for s in scenarios}
    for p in prompts:
        resolve_options(p, by_id[p.scenario_id], round_state, rng)
    return prompts


def is_cross_enumeration(prompt: Prompt) -> bool:
    """True when some option comes from the other enumeration than the question's."""
    enum_cls = enumeration_for(prompt.question_type)
    return any(not isinstance(o, enum_cls) for o in prompt.options)
