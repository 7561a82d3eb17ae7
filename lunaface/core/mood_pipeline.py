"""Camera frame -> mood decision -> face state.

Frames arrive from the vision collaborator as raw records plus an optional
look direction. With a director configured, decisions come from it (rate
limited, so most frames only update the look target); otherwise the local
cascade decides every frame.

The frame loop never awaits this; frames are handled by the camera task.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from lunaface.core.face_state import FaceStateMachine
from lunaface.core.heuristics import LOCAL_POLICY, HeuristicPolicy
from lunaface.core.signals import normalize
from lunaface.core.states import EXPRESSION_MOODS, FaceState, MoodDecision, Play
from lunaface.devices.director_client import DirectorContext, MoodDirectorClient

log = logging.getLogger(__name__)


@dataclass(slots=True)
class LookTarget:
    """Normalized look direction, each axis in [-1, 1]."""

    x: float = 0.0
    y: float = 0.0

    def reset(self) -> None:
        self.x = 0.0
        self.y = 0.0


def _clamp_axis(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return max(-1.0, min(1.0, float(value)))


class MoodPipeline:
    def __init__(
        self,
        machine: FaceStateMachine,
        *,
        director: MoodDirectorClient | None = None,
        theme: Callable[[], str] | str = "minimal",
        on_play: Callable[[Play], Any] | None = None,
        local_policy: HeuristicPolicy = LOCAL_POLICY,
    ) -> None:
        self._machine = machine
        self._director = director
        self._theme = theme
        self._on_play = on_play
        self._local_policy = local_policy

        self.camera_enabled = False
        self.look = LookTarget()
        self.frames = 0
        self.decisions = 0
        self.last_decision: MoodDecision | None = None

    @property
    def uses_director(self) -> bool:
        return self._director is not None and self._director.configured

    def set_camera_enabled(self, enabled: bool) -> None:
        """Toggle camera-driven input. Disabling resets the look target.

        An in-flight director request is left to finish and apply once.
        """
        self.camera_enabled = enabled
        if not enabled:
            self.look.reset()
        log.info("camera %s", "enabled" if enabled else "disabled")

    def current_theme(self) -> str:
        return self._theme() if callable(self._theme) else self._theme

    async def on_frame(
        self,
        raw: Mapping[str, Any] | None,
        look: Mapping[str, Any] | None = None,
    ) -> MoodDecision | None:
        """Handle one camera frame; returns the decision applied, if any."""
        if not self.camera_enabled:
            return None
        self.frames += 1

        if isinstance(look, Mapping):
            self.look.x = _clamp_axis(look.get("x"))
            self.look.y = _clamp_axis(look.get("y"))

        features = normalize(raw)
        if self.uses_director:
            assert self._director is not None
            decision = await self._director.decide(
                DirectorContext(
                    current_state=self._machine.state,
                    theme=self.current_theme(),
                    features=features,
                )
            )
            if decision is None:
                return None
        else:
            decision = self._local_policy.classify(features)

        self.apply(decision)
        return decision

    def apply(self, decision: MoodDecision) -> None:
        """Apply a decision to the state machine and fire its audio cue."""
        self.decisions += 1
        self.last_decision = decision
        current = self._machine.state
        target = decision.state

        if target != current:
            if target == FaceState.IDLE and current not in EXPRESSION_MOODS:
                log.debug("idle decision leaves %s untouched", current.value)
            else:
                self._machine.set_state(target)

        if decision.play is not None and self._on_play is not None:
            self._on_play(decision.play)

    def debug_snapshot(self) -> dict:
        return {
            "camera_enabled": self.camera_enabled,
            "uses_director": self.uses_director,
            "frames": self.frames,
            "decisions": self.decisions,
            "look": {"x": round(self.look.x, 3), "y": round(self.look.y, 3)},
            "last_decision": self.last_decision.to_dict() if self.last_decision else None,
        }
