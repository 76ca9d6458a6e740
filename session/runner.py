"""Session runner: compose, resolve and play rounds with a simulated player, feeding the stats sink."""

import json
import logging
import os
import random
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from rounds.answers import resolve_options
from rounds.composer import RoundComposer
from rounds.state import Prompt, RoundState
from scenarios.base import Scenario
from scenarios.loader import ScenarioProvider
from session.config import SessionConfig, stable_config_hash
from session.logging_utils import close_session_log, configure_root_logging, open_session_log, round_log, session_log
from session.player import SimulatedPlayer
from stats.recorder import StatsRecorder
from stats.repository import StatsRepository, open_repository

logger = logging.getLogger(__name__)


@dataclass
class AnswerRecord:
    round_index: int
    prompt_index: int
    scenario_id: str
    role: str
    question_type: str
    correct_answer: str
    options: list[str]
    correct_index: int
    selected_index: Optional[int]
    correct: bool
    elapsed_ms: float


@dataclass
class SessionResult:
    config: SessionConfig
    records: list[AnswerRecord] = field(default_factory=list)
    accuracy: float = 0.0
    best_streak: int = 0
    session_id: Optional[str] = None
    config_hash: Optional[str] = None


def _record(round_index: int, prompt_index: int, prompt: Prompt, selected: Optional[int], elapsed_ms: float) -> AnswerRecord:
    return AnswerRecord(
        round_index=round_index,
        prompt_index=prompt_index,
        scenario_id=prompt.scenario_id,
        role=prompt.role,
        question_type=prompt.question_type.value,
        correct_answer=prompt.correct_answer.value,
        options=[o.value for o in prompt.options],
        correct_index=prompt.correct_index,
        selected_index=selected,
        correct=selected is not None and prompt.is_correct(selected),
        elapsed_ms=elapsed_ms,
    )


def play_round(
    round_index: int,
    scenarios: list[Scenario],
    composer: RoundComposer,
    config: SessionConfig,
    player: SimulatedPlayer,
    recorder: StatsRecorder,
    rng: random.Random,
    session_id: Optional[str] = None,
) -> list[AnswerRecord]:
    """One round: fresh RoundState, prompts resolved strictly in presentation order."""
    by_id = {s.id: s for s in scenarios}
    state = RoundState()
    prompts = composer.compose(scenarios, config.mode, focus=config.focus_positions or None)
    records = []
    for i, prompt in enumerate(prompts):
        resolve_options(prompt, by_id[prompt.scenario_id], state, rng)
        selected, elapsed = player.answer(prompt)
        if selected is None:
            recorder.record_timeout(prompt, elapsed)
        else:
            recorder.record_answer(prompt, prompt.is_correct(selected), elapsed)
        records.append(_record(round_index, i, prompt, selected, elapsed))
    round_log(session_id, round_index, prompts, [r.correct for r in records])
    return records


def run_session(
    config: SessionConfig,
    scenarios: Optional[list[Scenario]] = None,
    stats: Optional[StatsRepository] = None,
    session_id: Optional[str] = None,
) -> SessionResult:
    if scenarios is None:
        scenarios = ScenarioProvider(config.scenarios_path).load()
    if stats is None:
        stats = open_repository(config.stats_path)
    session_id = session_id or str(uuid.uuid4())[:8]
    rng = random.Random(config.seed)
    composer = RoundComposer(stats=stats, rng=rng)
    recorder = StatsRecorder(stats, learning_mode=config.learning_mode)
    player = SimulatedPlayer(
        accuracy=config.player_accuracy,
        position_skill=config.position_skill,
        seed=config.seed,
        timeout_prob=0.0 if config.learning_mode else SimulatedPlayer.DEFAULT_TIMEOUT_PROB,
    )
    session_log(
        "session_start",
        session_id=session_id,
        mode=config.mode.value,
        learning_mode=config.learning_mode,
        rounds=config.rounds,
        n_scenarios=len(scenarios),
    )

    records: list[AnswerRecord] = []
    for r in range(config.rounds):
        records.extend(play_round(r, scenarios, composer, config, player, recorder, rng, session_id))

    overall = stats.get_overall_stats(config.learning_mode)
    result = SessionResult(
        config=config,
        records=records,
        accuracy=sum(1 for x in records if x.correct) / len(records) if records else 0.0,
        best_streak=overall.best_streak,
        session_id=session_id,
        config_hash=stable_config_hash(config),
    )
    session_log("session_complete", session_id=session_id, accuracy=result.accuracy, best_streak=result.best_streak)
    return result


def save_result(result: SessionResult, out_dir: str = "data/sessions") -> str:
    Path(out_dir).mkdir(parents=True, exist_ok=True)
    path = os.path.join(out_dir, f"session_{result.session_id}.json")
    data = {
        "session_id": result.session_id,
        "config_hash": result.config_hash,
        "config": result.config.model_dump(mode="json"),
        "accuracy": result.accuracy,
        "best_streak": result.best_streak,
        "records": [r.__dict__ for r in result.records],
    }
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    return path


def run_and_save(config: SessionConfig, out_dir: str = "data/sessions") -> tuple[SessionResult, str]:
    """Run a session with its own JSON-lines log under out_dir/<session_id>/ and save the result."""
    configure_root_logging(config.log_level)
    session_id = str(uuid.uuid4())[:8]
    open_session_log(os.path.join(out_dir, session_id, "session.log"))
    try:
        result = run_session(config, session_id=session_id)
        path = save_result(result, out_dir)
        result_to_dataframe(result).to_csv(os.path.join(out_dir, session_id, "answers.csv"), index=False)
    finally:
        close_session_log()
    logger.info("Session %s saved to %s (accuracy %.2f)", session_id, path, result.accuracy)
    return result, path


def load_result(path: str) -> SessionResult:
    """Load a SessionResult from JSON file."""
    with open(path) as f:
        data = json.load(f)
    return SessionResult(
        config=SessionConfig(**data["config"]),
        records=[AnswerRecord(**r) for r in data.get("records", [])],
        accuracy=data["accuracy"],
        best_streak=data.get("best_streak", 0),
        session_id=data.get("session_id"),
        config_hash=data.get("config_hash"),
    )


def result_to_dataframe(result: SessionResult):
    import pandas as pd
    rows = []
    for r in result.records:
        rows.append({
            "session_id": result.session_id,
            "round": r.round_index,
            "prompt": r.prompt_index,
            "scenario_id": r.scenario_id,
            "role": r.role,
            "question_type": r.question_type,
            "correct_answer": r.correct_answer,
            "correct_index": r.correct_index,
            "selected_index": r.selected_index,
            "correct": r.correct,
            "elapsed_ms": r.elapsed_ms,
        })
    return pd.DataFrame(rows)
