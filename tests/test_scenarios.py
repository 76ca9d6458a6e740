"""Tests for scenario validation, loading and situation text."""

import copy
import json
import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from scenarios.base import FielderAction, PrimaryIntent, Scenario
from scenarios.loader import DEFAULT_SCENARIOS_PATH, ScenarioProvider, get_scenario, load_scenarios
from scenarios.situation import format_situation, runners_text
from scenarios.validation import ScenarioValidationError, validate_scenario


def _raw(**overrides):
    raw = {
        "id": "t1",
        "title": "Single to RF",
        "category": "cut_relay",
        "situation": {"runners": {"on1": True}, "ballZone": "RF"},
        "roles": {
            "RF": {
                "primaryIntent": "FIELD",
                "fielderAction": "THROW_THROUGH_CUTOFF",
                "explanation": "Field it and hit the cutoff.",
                "distractorPoolHigh": ["CUTOFF", "BACKUP", "THROW_TO_BASE", "HOLD_BALL"],
                "distractorPoolLow": ["COVER"],
            },
            "2B": {
                "primaryIntent": "CUTOFF",
                "explanation": "Be the cutoff.",
                "distractorPoolHigh": ["COVER", "FIELD"],
                "distractorPoolLow": ["BACKUP", "HOLD"],
            },
        },
        "roleGroups": {"ballSide": ["RF"], "infieldCore": ["2B"], "coverage": [], "backups": []},
    }
    raw.update(overrides)
    return raw


def test_valid_scenario_parses():
    raw = _raw()
    assert validate_scenario(raw) == [
        "Scenario t1: role RF fielderAction questions mix in a primary-intent filler option"
    ]
    s = Scenario.from_dict(raw)
    assert s.roles["RF"].fielder_action == FielderAction.THROW_THROUGH_CUTOFF
    assert s.roles["2B"].primary_intent == PrimaryIntent.CUTOFF
    assert s.situation.runners.on1 and not s.situation.runners.on2
    assert s.role_groups.group("ballSide") == ["RF"]
    assert Scenario.from_dict(s.to_dict()) == s


@pytest.mark.parametrize("key", ["id", "title", "category"])
def test_missing_top_level_field_raises(key):
    raw = _raw()
    del raw[key]
    with pytest.raises(ScenarioValidationError):
        validate_scenario(raw)


def test_unknown_ball_zone_raises():
    with pytest.raises(ScenarioValidationError, match="ballZone"):
        validate_scenario(_raw(situation={"runners": {}, "ballZone": "DEEP_SPACE"}))


def test_invalid_role_groups_raises():
    with pytest.raises(ScenarioValidationError, match="roleGroups"):
        validate_scenario(_raw(roleGroups={"ballSide": ["RF"]}))


def test_unknown_enum_value_raises():
    raw = _raw()
    raw["roles"]["2B"]["distractorPoolLow"] = ["DANCE"]
    with pytest.raises(ScenarioValidationError, match="unknown value"):
        validate_scenario(raw)


def test_unknown_position_raises():
    raw = _raw()
    raw["roles"]["DH"] = copy.deepcopy(raw["roles"]["2B"])
    with pytest.raises(ScenarioValidationError, match="position"):
        validate_scenario(raw)


def test_sparse_pool_is_a_warning():
    raw = _raw()
    raw["roles"]["2B"]["distractorPoolHigh"] = []
    raw["roles"]["2B"]["distractorPoolLow"] = ["COVER"]
    warnings = validate_scenario(raw)
    assert any("role 2B has only 1 primary distractors" in w for w in warnings)


def test_group_without_role_is_a_warning():
    raw = _raw(roleGroups={"ballSide": ["RF"], "infieldCore": ["2B"], "coverage": ["C"], "backups": []})
    warnings = validate_scenario(raw)
    assert any("roleGroups.coverage lists C" in w for w in warnings)


def test_load_scenarios_drops_invalid_entries(caplog):
    bad = _raw(id="bad", category="tee_ball")
    with caplog.at_level(logging.ERROR):
        loaded = load_scenarios([_raw(), bad, "not a scenario"])
    assert [s.id for s in loaded] == ["t1"]
    assert "bad" in caplog.text


def test_get_scenario():
    loaded = load_scenarios([_raw()])
    assert get_scenario(loaded, "t1").title == "Single to RF"
    assert get_scenario(loaded, "missing") is None


def test_bundled_scenarios_all_valid():
    with open(DEFAULT_SCENARIOS_PATH, encoding="utf-8") as f:
        raw = json.load(f)
    provider = ScenarioProvider()
    assert len(provider.load()) == len(raw) == 4
    for s in provider.load():
        assert len(s.roles) == 9


def test_provider_caches_until_invalidated(tmp_path):
    path = tmp_path / "scenarios.json"
    path.write_text(json.dumps([_raw()]))
    provider = ScenarioProvider(str(path))
    first = provider.load()
    assert provider.load() is first
    path.write_text(json.dumps([_raw(), _raw(id="t2")]))
    assert len(provider.load()) == 1
    provider.invalidate()
    assert [s.id for s in provider.load()] == ["t1", "t2"]
    assert provider.get("t2").id == "t2"


def test_format_situation():
    s = Scenario.from_dict(_raw())
    assert format_situation(s) == "Single to RF"
    long = Scenario.from_dict(_raw(title="A very long scenario title that goes on and on past fifty chars",
                                   situation={"runners": {"on1": True, "on3": True}, "ballZone": "RF_GAP"}))
    assert format_situation(long) == "Single to RF — Runners on 1st & 3rd"


def test_runners_text():
    s = Scenario.from_dict(_raw(situation={"runners": {"on1": True, "on2": True, "on3": True}, "ballZone": "CF"}))
    assert runners_text(s) == "Bases loaded"
    s = Scenario.from_dict(_raw(situation={"runners": {}, "ballZone": "CF"}))
    assert runners_text(s) == "No runners"
