"""Scenario content validation.

Structural problems raise ScenarioValidationError so the loader can drop the
scenario. Sparse distractor pools are not errors: the answer synthesizer
recovers with fallback distractors, so they come back as warnings for content
authors instead.
"""

from typing import Any

from scenarios.base import (
    BALL_ZONE_COORDINATES,
    CATEGORIES,
    POSITIONS,
    ROLE_GROUP_NAMES,
    FielderAction,
    PrimaryIntent,
    parse_answer,
)


class ScenarioValidationError(ValueError):
    pass


def _fail(scenario_id: str, message: str) -> None:
    raise ScenarioValidationError(f"Scenario {scenario_id}: {message}")


def validate_scenario(raw: Any) -> list[str]:
    """Validate one raw scenario dict. Returns warnings; raises on structural errors."""
    if not isinstance(raw, dict):
        raise ScenarioValidationError("Scenario entry is not an object")
    sid = raw.get("id") or "unknown"
    if not raw.get("id") or not raw.get("title") or not raw.get("category"):
        _fail(sid, "missing id, title, or category")
    if raw["category"] not in CATEGORIES:
        _fail(sid, f"unknown category {raw['category']!r}")

    situation = raw.get("situation")
    if not isinstance(situation, dict) or not isinstance(situation.get("runners"), dict) or not situation.get("ballZone"):
        _fail(sid, "missing situation.runners or situation.ballZone")
    if situation["ballZone"] not in BALL_ZONE_COORDINATES:
        _fail(sid, f"ballZone {situation['ballZone']!r} has no field coordinates")

    groups = raw.get("roleGroups")
    if not isinstance(groups, dict) or not all(isinstance(groups.get(n), list) for n in ROLE_GROUP_NAMES):
        _fail(sid, "missing or invalid roleGroups structure")

    roles = raw.get("roles")
    if not isinstance(roles, dict):
        _fail(sid, "missing or invalid roles object")

    warnings: list[str] = []
    for position, role in roles.items():
        if position not in POSITIONS:
            _fail(sid, f"unknown position {position!r}")
        warnings.extend(_validate_role(sid, position, role))

    for name in ROLE_GROUP_NAMES:
        for position in groups[name]:
            if position not in roles:
                warnings.append(f"Scenario {sid}: roleGroups.{name} lists {position} which has no role")
    return warnings


def _validate_role(sid: str, position: str, role: Any) -> list[str]:
    if not isinstance(role, dict):
        _fail(sid, f"role {position} is not an object")
    if not role.get("primaryIntent"):
        _fail(sid, f"role {position} missing primaryIntent")
    if not role.get("explanation"):
        _fail(sid, f"role {position} missing explanation")
    if not isinstance(role.get("distractorPoolHigh"), list) or not isinstance(role.get("distractorPoolLow"), list):
        _fail(sid, f"role {position} missing distractorPoolHigh or distractorPoolLow")
    try:
        primary = PrimaryIntent(role["primaryIntent"])
        fielder_action = FielderAction(role["fielderAction"]) if role.get("fielderAction") else None
        pool = [parse_answer(v) for v in role["distractorPoolHigh"] + role["distractorPoolLow"]]
    except ValueError as e:
        raise ScenarioValidationError(f"Scenario {sid}: role {position} has an unknown value ({e})") from e

    warnings = []
    primary_distractors = {v for v in pool if isinstance(v, PrimaryIntent) and v != primary}
    if len(primary_distractors) < 3:
        warnings.append(
            f"Scenario {sid}: role {position} has only {len(primary_distractors)} primary distractors (will use fallback)"
        )
    if fielder_action is not None:
        if primary != PrimaryIntent.FIELD:
            warnings.append(f"Scenario {sid}: role {position} has fielderAction but primaryIntent {primary.value}; it will never be asked")
        else:
            fa_distractors = {v for v in pool if isinstance(v, FielderAction) and v != fielder_action}
            if len(fa_distractors) < 2:
                warnings.append(
                    f"Scenario {sid}: role {position} has only {len(fa_distractors)} fielderAction distractors (will use fallback)"
                )
            # Three fielder actions cannot fill four options on their own.
            warnings.append(
                f"Scenario {sid}: role {position} fielderAction questions mix in a primary-intent filler option"
            )
    return warnings
