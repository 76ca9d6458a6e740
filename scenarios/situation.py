"""Human-readable situation banner text."""

from scenarios.base import Scenario


def runners_text(scenario: Scenario) -> str:
    r = scenario.situation.runners
    on = [name for name, flag in (("1st", r.on1), ("2nd", r.on2), ("3rd", r.on3)) if flag]
    if not on:
        return "No runners"
    if len(on) == 1:
        return f"Runner on {on[0]}"
    if len(on) == 2:
        return f"Runners on {on[0]} & {on[1]}"
    return "Bases loaded"


def play_text(scenario: Scenario) -> str:
    zone = scenario.situation.ball_zone
    if scenario.category == "bunt":
        return "Bunt"
    if scenario.category != "cut_relay":
        return "Play"
    for prefix in ("LF", "CF", "RF"):
        if zone.startswith(prefix):
            return f"Single to {prefix}"
    if "INFIELD" in zone:
        return "Infield hit"
    return "Hit"


def format_situation(scenario: Scenario) -> str:
    """Short titles are shown as-is; long ones are rebuilt from category, zone and runners."""
    if scenario.title and len(scenario.title) < 50:
        return scenario.title
    return f"{play_text(scenario)} — {runners_text(scenario)}"
