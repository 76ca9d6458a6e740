"""Prompt and per-round rolling state."""

from dataclasses import dataclass, field
from typing import Any, Optional

from scenarios.base import AnswerOption, QuestionType, answer_label

ROUND_SIZE = 6
INDEX_HISTORY_SIZE = 5

SignatureKey = tuple[str, str, str]


@dataclass
class Prompt:
    """One question. Unresolved until the answer synthesizer fills options/correct_index."""
    scenario_id: str
    role: str
    question_type: QuestionType
    correct_answer: AnswerOption
    options: list[AnswerOption] = field(default_factory=list)
    correct_index: int = 0

    @property
    def resolved(self) -> bool:
        return len(self.options) > 0

    @property
    def signature_key(self) -> SignatureKey:
        return (self.scenario_id, self.role, self.question_type.value)

    def is_correct(self, selected_index: int) -> bool:
        return self.resolved and selected_index == self.correct_index

    def to_dict(self) -> dict[str, Any]:
        return {
            "scenarioId": self.scenario_id,
            "role": self.role,
            "questionType": self.question_type.value,
            "correctAnswer": self.correct_answer.value,
            "options": [o.value for o in self.options],
            "labels": [answer_label(o) for o in self.options],
            "correctIndex": self.correct_index,
        }


@dataclass
class RoundState:
    """Rolling anti-repetition state. One instance per round, resolved strictly in order."""
    correct_index_history: list[int] = field(default_factory=list)
    option_signatures: dict[SignatureKey, str] = field(default_factory=dict)
    option_orders: dict[SignatureKey, tuple[AnswerOption, ...]] = field(default_factory=dict)
    history_size: int = INDEX_HISTORY_SIZE

    def index_count(self, index: int) -> int:
        return sum(1 for i in self.correct_index_history if i == index)

    def last_signature(self, key: SignatureKey) -> Optional[str]:
        return self.option_signatures.get(key)

    def last_order(self, key: SignatureKey) -> Optional[tuple[AnswerOption, ...]]:
        return self.option_orders.get(key)

    def record(self, key: SignatureKey, correct_index: int, signature: str, options: list[AnswerOption]) -> None:
        self.correct_index_history.append(correct_index)
        while len(self.correct_index_history) > self.history_size:
            self.correct_index_history.pop(0)
        self.option_signatures[key] = signature
        self.option_orders[key] = tuple(options)
