"""System and user prompt templates for the mood director LLM."""

from __future__ import annotations

import json

from director.llm.schemas import DecideRequest

DIRECTOR_STATES: tuple[str, ...] = ("idle", "surprised", "angry", "happy", "lol")

_STATES_PROMPT = ", ".join(DIRECTOR_STATES)

SYSTEM_PROMPT = (
    "You are a tiny state director for an animated face. "
    f"Choose exactly one state from: {_STATES_PROMPT}. "
    'Return ONLY strict JSON: {"state":"<state>","play":null|"hey"|"sleep"}. '
    "No extra keys."
)

_RULES = """\
Rules:
- If mouthOpen high and smile medium/high: lol
- If smile high: happy
- If browsUp high: surprised
- If browFurrow high: angry
- Otherwise: idle
"""


def format_user_prompt(req: DecideRequest, *, default_theme: str = "kawaii") -> str:
    """Render the request as the user turn; scores are already clamped."""
    scores = json.dumps(
        req.expr.to_features().to_wire(), separators=(",", ":")
    )
    return (
        f"Expression scores: {scores}\n"
        f"Current state: {req.current_state or 'idle'}\n"
        f"Theme: {req.theme or default_theme}\n\n"
        f"{_RULES}"
    )
