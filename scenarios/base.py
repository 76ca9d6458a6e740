"""Base types for softball scenarios: positions, intents, role definitions."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class PrimaryIntent(str, Enum):
    FIELD = "FIELD"
    COVER = "COVER"
    CUTOFF = "CUTOFF"
    BACKUP = "BACKUP"
    HOLD = "HOLD"


class FielderAction(str, Enum):
    """Throw decision; only asked of the position fielding the ball."""
    THROW_THROUGH_CUTOFF = "THROW_THROUGH_CUTOFF"
    THROW_TO_BASE = "THROW_TO_BASE"
    HOLD_BALL = "HOLD_BALL"


class QuestionType(str, Enum):
    PRIMARY = "primary"
    FIELDER_ACTION = "fielderAction"


class GameMode(str, Enum):
    FOCUS = "my_positions"
    WHOLE_FIELD = "whole_field"
    WEAK_SPOTS = "weak_spots"


AnswerOption = Union[PrimaryIntent, FielderAction]

POSITIONS = ["P", "C", "1B", "2B", "SS", "3B", "LF", "CF", "RF"]

CATEGORIES = ("cut_relay", "bunt", "other")

ROLE_GROUP_NAMES = ("ballSide", "infieldCore", "coverage", "backups")

# Normalized 0-1 coordinates used by the field diagram
BALL_ZONE_COORDINATES: dict[str, tuple[float, float]] = {
    "LF": (0.2, 0.7),
    "LF_LINE": (0.1, 0.8),
    "LF_GAP": (0.3, 0.65),
    "CF": (0.5, 0.6),
    "RF_GAP": (0.7, 0.65),
    "RF": (0.8, 0.7),
    "RF_LINE": (0.9, 0.8),
    "INFIELD_LEFT": (0.3, 0.5),
    "INFIELD_RIGHT": (0.7, 0.5),
}

GLOBAL_PRIMARY_DISTRACTORS = [
    PrimaryIntent.COVER,
    PrimaryIntent.CUTOFF,
    PrimaryIntent.BACKUP,
    PrimaryIntent.HOLD,
]

GLOBAL_FIELDER_ACTION_DISTRACTORS = [
    FielderAction.THROW_TO_BASE,
    FielderAction.HOLD_BALL,
]

INTENT_LABELS: dict[str, str] = {
    PrimaryIntent.FIELD.value: "Field it",
    PrimaryIntent.COVER.value: "Cover base",
    PrimaryIntent.CUTOFF.value: "Be cutoff",
    PrimaryIntent.BACKUP.value: "Back up",
    PrimaryIntent.HOLD.value: "Hold / stay home",
    FielderAction.THROW_THROUGH_CUTOFF.value: "Throw through cutoff",
    FielderAction.THROW_TO_BASE.value: "Throw to base",
    FielderAction.HOLD_BALL.value: "Hold the ball",
}


def parse_answer(value: Any) -> AnswerOption:
    """Map a stored string onto whichever enumeration owns it."""
    if isinstance(value, (PrimaryIntent, FielderAction)):
        return value
    try:
        return PrimaryIntent(value)
    except ValueError:
        return FielderAction(value)


def answer_label(value: AnswerOption) -> str:
    return INTENT_LABELS.get(value.value, value.value)


def enumeration_for(question_type: QuestionType) -> type:
    if question_type == QuestionType.FIELDER_ACTION:
        return FielderAction
    return PrimaryIntent


@dataclass
class Runners:
    on1: bool = False
    on2: bool = False
    on3: bool = False


@dataclass
class Situation:
    runners: Runners
    ball_zone: str
    goal: Optional[str] = None


@dataclass
class RoleDefinition:
    primary_intent: PrimaryIntent
    explanation: str
    distractor_pool_high: list[AnswerOption] = field(default_factory=list)
    distractor_pool_low: list[AnswerOption] = field(default_factory=list)
    fielder_action: Optional[FielderAction] = None
    target: Optional[str] = None  # feedback text only

    @property
    def can_ask_fielder_action(self) -> bool:
        return self.primary_intent == PrimaryIntent.FIELD and self.fielder_action is not None

    def correct_answer(self, question_type: QuestionType) -> AnswerOption:
        if question_type == QuestionType.FIELDER_ACTION:
            if self.fielder_action is None:
                raise ValueError("role has no fielder action")
            return self.fielder_action
        return self.primary_intent

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "RoleDefinition":
        fa = d.get("fielderAction")
        return cls(
            primary_intent=PrimaryIntent(d["primaryIntent"]),
            explanation=d.get("explanation", ""),
            distractor_pool_high=[parse_answer(v) for v in d.get("distractorPoolHigh", [])],
            distractor_pool_low=[parse_answer(v) for v in d.get("distractorPoolLow", [])],
            fielder_action=FielderAction(fa) if fa else None,
            target=d.get("target"),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "primaryIntent": self.primary_intent.value,
            "explanation": self.explanation,
            "distractorPoolHigh": [v.value for v in self.distractor_pool_high],
            "distractorPoolLow": [v.value for v in self.distractor_pool_low],
        }
        if self.fielder_action is not None:
            d["fielderAction"] = self.fielder_action.value
        if self.target:
            d["target"] = self.target
        return d


@dataclass
class RoleGroups:
    ball_side: list[str] = field(default_factory=list)
    infield_core: list[str] = field(default_factory=list)
    coverage: list[str] = field(default_factory=list)
    backups: list[str] = field(default_factory=list)

    def group(self, name: str) -> list[str]:
        return {
            "ballSide": self.ball_side,
            "infieldCore": self.infield_core,
            "coverage": self.coverage,
            "backups": self.backups,
        }[name]


@dataclass
class PromptPlan:
    recommended_roles: list[str] = field(default_factory=list)
    difficulty: Optional[int] = None  # 1 | 2 | 3


@dataclass
class Scenario:
    """A batted-ball situation with per-position correct responses. Read-only once loaded."""
    id: str
    title: str
    category: str
    situation: Situation
    roles: dict[str, RoleDefinition]
    role_groups: RoleGroups
    prompt_plan: Optional[PromptPlan] = None

    def role(self, position: str) -> Optional[RoleDefinition]:
        return self.roles.get(position)

    def is_recommended(self, position: str) -> bool:
        return self.prompt_plan is not None and position in self.prompt_plan.recommended_roles

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Scenario":
        sit = d["situation"]
        runners = sit.get("runners") or {}
        groups = d.get("roleGroups") or {}
        plan = d.get("promptPlan")
        return cls(
            id=d["id"],
            title=d["title"],
            category=d["category"],
            situation=Situation(
                runners=Runners(
                    on1=bool(runners.get("on1")),
                    on2=bool(runners.get("on2")),
                    on3=bool(runners.get("on3")),
                ),
                ball_zone=sit["ballZone"],
                goal=sit.get("goal"),
            ),
            roles={pos: RoleDefinition.from_dict(r) for pos, r in (d.get("roles") or {}).items()},
            role_groups=RoleGroups(
                ball_side=list(groups.get("ballSide", [])),
                infield_core=list(groups.get("infieldCore", [])),
                coverage=list(groups.get("coverage", [])),
                backups=list(groups.get("backups", [])),
            ),
            prompt_plan=PromptPlan(
                recommended_roles=list(plan.get("recommendedRoles") or []),
                difficulty=plan.get("difficulty"),
            ) if plan else None,
        )

    def to_dict(self) -> dict[str, Any]:
        runners = self.situation.runners
        situation: dict[str, Any] = {
            "runners": {"on1": runners.on1, "on2": runners.on2, "on3": runners.on3},
            "ballZone": self.situation.ball_zone,
        }
        if self.situation.goal:
            situation["goal"] = self.situation.goal
        d: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "situation": situation,
            "roles": {pos: r.to_dict() for pos, r in self.roles.items()},
            "roleGroups": {name: list(self.role_groups.group(name)) for name in ROLE_GROUP_NAMES},
        }
        if self.prompt_plan is not None:
            d["promptPlan"] = {
                "recommendedRoles": list(self.prompt_plan.recommended_roles),
                "difficulty": self.prompt_plan.difficulty,
            }
        return d
