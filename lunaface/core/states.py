"""Face state vocabulary and the decision record shared by classifier + director."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Literal

Play = Literal["hey", "sleep"]


class FaceState(str, Enum):
    IDLE = "idle"
    BLINK = "blink"
    SLEEPY = "sleepy"
    SLEEPING = "sleeping"
    SPEAKING = "speaking"
    SURPRISED = "surprised"
    ANGRY = "angry"
    HAPPY = "happy"
    LOL = "lol"


FACE_STATES: Final[tuple[str, ...]] = tuple(s.value for s in FaceState)
PLAY_CUES: Final[tuple[str, ...]] = ("hey", "sleep")

# Moods the camera can drive; idle decisions only release these.
EXPRESSION_MOODS: Final[frozenset[FaceState]] = frozenset(
    {FaceState.HAPPY, FaceState.LOL, FaceState.SURPRISED, FaceState.ANGRY}
)


def parse_face_state(value: object) -> FaceState | None:
    """Exact match against the nine labels; anything else is None."""
    if isinstance(value, FaceState):
        return value
    if not isinstance(value, str):
        return None
    try:
        return FaceState(value)
    except ValueError:
        return None


def parse_play(value: object) -> Play | None:
    if value == "hey":
        return "hey"
    if value == "sleep":
        return "sleep"
    return None


@dataclass(frozen=True, slots=True)
class MoodDecision:
    state: FaceState = FaceState.IDLE
    play: Play | None = None

    def to_dict(self) -> dict:
        return {"state": self.state.value, "play": self.play}

    @classmethod
    def from_payload(cls, body: dict) -> MoodDecision:
        """Validate a decoded response body.

        Unknown states collapse to idle, unknown cues to None, extra keys are
        ignored. The caller decides what a missing envelope means.
        """
        state = parse_face_state(body.get("state")) or FaceState.IDLE
        return cls(state=state, play=parse_play(body.get("play")))
