"""Scenario loading: validate, drop bad entries, cache per session."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from scenarios.base import Scenario
from scenarios.validation import ScenarioValidationError, validate_scenario

logger = logging.getLogger(__name__)

DEFAULT_SCENARIOS_PATH = Path(__file__).resolve().parent / "data" / "scenarios.json"


def load_scenarios(raw_scenarios: list[Any]) -> list[Scenario]:
    """Validate raw scenario dicts. Invalid scenarios are logged and skipped, not fatal."""
    validated: list[Scenario] = []
    for raw in raw_scenarios:
        try:
            warnings = validate_scenario(raw)
        except ScenarioValidationError as e:
            logger.error("Content validation error: %s", e)
            continue
        for w in warnings:
            logger.warning(w)
        validated.append(Scenario.from_dict(raw))
    if not validated:
        logger.error("No valid scenarios found (%d entries checked)", len(raw_scenarios))
    return validated


def get_scenario(scenarios: list[Scenario], scenario_id: str) -> Optional[Scenario]:
    for s in scenarios:
        if s.id == scenario_id:
            return s
    return None


class ScenarioProvider:
    """Reads scenarios from a JSON file once and caches them until invalidated."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else DEFAULT_SCENARIOS_PATH
        self._cache: Optional[list[Scenario]] = None

    def load(self) -> list[Scenario]:
        if self._cache is None:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            self._cache = load_scenarios(data)
            logger.info("Loaded %d scenarios from %s", len(self._cache), self.path)
        return self._cache

    def invalidate(self) -> None:
        self._cache = None

    def get(self, scenario_id: str) -> Optional[Scenario]:
        return get_scenario(self.load(), scenario_id)
