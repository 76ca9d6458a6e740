"""Scenario content: types, validation and loading."""

from scenarios.base import (
    POSITIONS,
    AnswerOption,
    FielderAction,
    GameMode,
    PrimaryIntent,
    PromptPlan,
    QuestionType,
    RoleDefinition,
    RoleGroups,
    Runners,
    Scenario,
    Situation,
)
from scenarios.loader import ScenarioProvider, get_scenario, load_scenarios
from scenarios.situation import format_situation
from scenarios.validation import ScenarioValidationError, validate_scenario

__all__ = [
    "POSITIONS",
    "AnswerOption",
    "FielderAction",
    "GameMode",
    "PrimaryIntent",
    "PromptPlan",
    "QuestionType",
    "RoleDefinition",
    "RoleGroups",
    "Runners",
    "Scenario",
    "Situation",
    "ScenarioProvider",
    "get_scenario",
    "load_scenarios",
    "format_situation",
    "ScenarioValidationError",
    "validate_scenario",
]
