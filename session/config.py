"""SessionConfig (pydantic) with stable hashing for reproducible simulated sessions."""

import hashlib
import json
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from scenarios.base import POSITIONS, GameMode

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class SessionConfig(BaseModel):
    """Same config + seed => same rounds, options and simulated answers."""

    mode: GameMode = Field(default=GameMode.WHOLE_FIELD, description="my_positions | whole_field | weak_spots")
    focus_positions: list[str] = Field(default_factory=list, max_length=2, description="Primary then optional secondary position")
    rounds: int = Field(default=5, ge=1, le=500)
    seed: Optional[int] = Field(default=42, description="Random seed for reproducibility")
    player_accuracy: float = Field(default=0.7, ge=0.0, le=1.0)
    position_skill: dict[str, float] = Field(default_factory=dict, description="Per-position accuracy overrides")
    scenarios_path: Optional[str] = Field(default=None, description="JSON scenario file; bundled content when unset")
    stats_path: Optional[str] = Field(default=None, description="JSON stats file; in-memory when unset")
    learning_mode: bool = Field(default=False, description="Practice play: no timer, stats kept in the learning bucket")
    log_level: str = Field(default="INFO", description="DEBUG | INFO | WARNING | ERROR")

    @field_validator("focus_positions")
    @classmethod
    def _known_positions(cls, v: list[str]) -> list[str]:
        unknown = [p for p in v if p not in POSITIONS]
        if unknown:
            raise ValueError(f"unknown position(s): {', '.join(unknown)}")
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


def stable_config_hash(config: Any) -> str:
    """Stable hash from config (sorted keys). Same config => same hash."""
    if hasattr(config, "model_dump"):
        d = config.model_dump(mode="json")
    else:
        d = dict(config) if hasattr(config, "items") else {}
    payload = json.dumps(d, sort_keys=True, default=str)
    return hashlib.sha256(payload.encode()).hexdigest()[:16]
