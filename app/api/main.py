"""FastAPI: /health, /scenarios, /round, /answer, /progress."""

import random
import sys
import uuid
from collections import OrderedDict
from pathlib import Path
from typing import Optional

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from rounds.answers import resolve_round
from rounds.composer import RoundComposer, RoundConfigError
from rounds.state import Prompt, RoundState
from scenarios.base import GameMode
from scenarios.loader import ScenarioProvider
from scenarios.situation import format_situation
from stats.recorder import StatsRecorder
from stats.repository import InMemoryStatsRepository
from stats.summary import progress_summary


app = FastAPI(title="Fastpitch IQ Trainer API", version="0.1.0")

provider = ScenarioProvider()
stats_repo = InMemoryStatsRepository()
# Timed and practice streaks are tracked separately
recorders = {mode: StatsRecorder(stats_repo, learning_mode=mode) for mode in (False, True)}

MAX_OPEN_ROUNDS = 100
_rounds: OrderedDict[str, list[Prompt]] = OrderedDict()  # oldest evicted past MAX_OPEN_ROUNDS


class RoundParams(BaseModel):
    mode: GameMode = GameMode.WHOLE_FIELD
    focus_positions: list[str] = Field(default_factory=list)
    seed: Optional[int] = None


class AnswerParams(BaseModel):
    round_id: str
    prompt_index: int = Field(ge=0)
    selected_index: Optional[int] = Field(default=None, ge=0, le=3, description="None = timed out")
    elapsed_ms: float = Field(default=0.0, ge=0.0)
    learning_mode: bool = Field(default=False, description="Practice answers go to the learning bucket")


@app.get("/health")
def health():
    return {"status": "ok", "message": "Fastpitch IQ Trainer API"}


@app.get("/scenarios")
def api_scenarios():
    return [
        {"id": s.id, "title": s.title, "category": s.category, "situation": format_situation(s), "roles": list(s.roles)}
        for s in provider.load()
    ]


@app.post("/round")
def api_round(params: RoundParams):
    scenarios = provider.load()
    rng = random.Random(params.seed)
    composer = RoundComposer(stats=stats_repo, rng=rng)
    try:
        prompts = composer.compose(scenarios, params.mode, focus=params.focus_positions or None)
    except RoundConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))
    resolve_round(prompts, scenarios, RoundState(), rng)
    round_id = str(uuid.uuid4())[:8]
    _rounds[round_id] = prompts
    while len(_rounds) > MAX_OPEN_ROUNDS:
        _rounds.popitem(last=False)
    return {"round_id": round_id, "prompts": [p.to_dict() for p in prompts]}


@app.post("/answer")
def api_answer(params: AnswerParams):
    prompts = _rounds.get(params.round_id)
    if prompts is None or params.prompt_index >= len(prompts):
        raise HTTPException(status_code=404, detail="Unknown round or prompt")
    prompt = prompts[params.prompt_index]
    recorder = recorders[params.learning_mode]
    if params.selected_index is None:
        recorder.record_timeout(prompt, params.elapsed_ms)
        correct = False
    else:
        correct = prompt.is_correct(params.selected_index)
        recorder.record_answer(prompt, correct, params.elapsed_ms)
    return {
        "correct": correct,
        "correct_index": prompt.correct_index,
        "explanation": provider.get(prompt.scenario_id).roles[prompt.role].explanation,
        "streak": recorder.current_streak,
    }


@app.get("/progress")
def api_progress(learning_mode: bool = False):
    return progress_summary(stats_repo, learning_mode=learning_mode)
