"""Round composition and answer-option synthesis."""

from rounds.state import ROUND_SIZE, Prompt, RoundState
from rounds.answers import resolve_options, resolve_round
from rounds.composer import RoundComposer, RoundConfigError, compose_round

__all__ = [
    "ROUND_SIZE",
    "Prompt",
    "RoundState",
    "resolve_options",
    "resolve_round",
    "RoundComposer",
    "RoundConfigError",
    "compose_round",
]
