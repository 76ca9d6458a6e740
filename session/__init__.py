"""Simulated play sessions: config, logging, player model and runner."""

from session.config import SessionConfig, stable_config_hash
from session.player import SimulatedPlayer
from session.runner import AnswerRecord, SessionResult, load_result, play_round, result_to_dataframe, run_and_save, run_session, save_result

__all__ = [
    "SessionConfig",
    "stable_config_hash",
    "SimulatedPlayer",
    "AnswerRecord",
    "SessionResult",
    "load_result",
    "play_round",
    "result_to_dataframe",
    "run_and_save",
    "run_session",
    "save_result",
]
