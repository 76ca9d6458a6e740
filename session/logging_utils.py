"""Session logging: root logger setup and a JSON-lines event log per simulated session.

Each session writes `session_start`, one `round` event per played round (what
was asked, where the correct option sat, how it went) and `session_complete`.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Sequence, TextIO, Union

from rounds.answers import is_cross_enumeration
from rounds.state import Prompt

events_logger = logging.getLogger("session.events")

_event_file: Optional[TextIO] = None


def configure_root_logging(level: Union[int, str] = logging.INFO) -> None:
    """Set the root level; attach a stdout handler once."""
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        root.addHandler(h)


def open_session_log(path: str) -> None:
    """Route session events to a JSON-lines file until close_session_log()."""
    global _event_file
    close_session_log()
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    _event_file = open(path, "a", encoding="utf-8")


def close_session_log() -> None:
    global _event_file
    if _event_file is not None:
        _event_file.close()
        _event_file = None


def session_log(event: str, session_id: Optional[str] = None, level: str = "info", **fields: Any) -> None:
    """One structured event: a JSON line when a session log is open, always a log record."""
    payload: dict[str, Any] = {"ts": datetime.now(tz=timezone.utc).isoformat(), "event": event}
    if session_id is not None:
        payload["session_id"] = session_id
    payload.update(fields)
    if _event_file is not None:
        _event_file.write(json.dumps(payload, default=str) + "\n")
        _event_file.flush()
    getattr(events_logger, level.lower(), events_logger.info)("%s %s", event, fields)


def round_log(
    session_id: Optional[str],
    round_index: int,
    prompts: Sequence[Prompt],
    outcomes: Optional[Sequence[bool]] = None,
) -> None:
    """Log a played round: role, question type and correct slot of every prompt."""
    entries = []
    for i, p in enumerate(prompts):
        entry = {
            "scenario_id": p.scenario_id,
            "role": p.role,
            "question_type": p.question_type.value,
            "correct_index": p.correct_index,
            "cross_enumeration": is_cross_enumeration(p),
        }
        if outcomes is not None:
            entry["correct"] = outcomes[i]
        entries.append(entry)
    mixed = [e["role"] for e in entries if e["cross_enumeration"]]
    if mixed:
        events_logger.debug("Round %d: options mixed across enumerations for %s", round_index, mixed)
    session_log(
        "round",
        session_id=session_id,
        round_index=round_index,
        correct=sum(outcomes) if outcomes is not None else None,
        prompts=entries,
    )
