"""Per-frame animation driver.

Each frame:
1. Fire due state-machine timers (auto-revert)
2. Start a spontaneous blink when one is due
3. Sample blink amount
4. Idle eye drift + camera look target
5. Sleepiness, breath pulse, drool bubble
6. Publish a FrameParams snapshot to subscribers

Renderers and audio are consumers of FrameParams; nothing here draws.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable

from lunaface.core.face_state import FaceStateMachine
from lunaface.core.mood_pipeline import LookTarget
from lunaface.core.states import FaceState

log = logging.getLogger(__name__)

DEFAULT_FPS = 60
MAX_FRAME_DT_S = 0.050

# Drift amplitude (fraction of face radius) and angular speed (rad/s)
DRIFT_X_AMP = 0.03
DRIFT_Y_AMP = 0.015
DRIFT_X_SPEED = 1.2
DRIFT_Y_SPEED = 1.8
DRIFT_SCALE: dict[FaceState, float] = {
    FaceState.IDLE: 1.0,
    FaceState.SPEAKING: 0.45,
    FaceState.HAPPY: 0.75,
}

SLEEPINESS: dict[FaceState, float] = {
    FaceState.SLEEPY: 0.7,
    FaceState.SLEEPING: 1.0,
}


@dataclass(frozen=True, slots=True)
class FrameParams:
    """Everything a renderer needs for one frame."""

    t: float
    dt: float
    state: FaceState
    theme: str
    blink: float
    drift_x: float
    drift_y: float
    look_x: float
    look_y: float
    sleepiness: float
    breath: float
    drool: dict | None

    def to_dict(self) -> dict:
        return {
            "t": round(self.t, 4),
            "state": self.state.value,
            "theme": self.theme,
            "blink": round(self.blink, 3),
            "drift": [round(self.drift_x, 4), round(self.drift_y, 4)],
            "look": [round(self.look_x, 3), round(self.look_y, 3)],
            "sleepiness": self.sleepiness,
            "breath": round(self.breath, 3),
            "drool": self.drool,
        }


class FaceTickLoop:
    """Fixed-rate frame loop around one FaceStateMachine."""

    def __init__(
        self,
        machine: FaceStateMachine,
        *,
        fps: int = DEFAULT_FPS,
        theme: Callable[[], str] | str = "minimal",
        look: LookTarget | None = None,
        on_frame: Callable[[FrameParams], Any] | None = None,
    ) -> None:
        if fps < 1:
            raise ValueError("fps must be >= 1")
        self._machine = machine
        self._period_s = 1.0 / fps
        self._theme = theme
        self._look = look or LookTarget()
        self._subscribers: list[Callable[[FrameParams], Any]] = []
        if on_frame is not None:
            self._subscribers.append(on_frame)

        self._running = False
        self._t_prev: float | None = None
        self.frame_count = 0
        self.last_frame: FrameParams | None = None

    @property
    def running(self) -> bool:
        return self._running

    def subscribe(self, cb: Callable[[FrameParams], Any]) -> None:
        self._subscribers.append(cb)

    # ── Public API ───────────────────────────────────────────────

    async def run(self) -> None:
        """Run until stopped."""
        self._running = True
        log.info("frame loop started at %d fps", round(1.0 / self._period_s))
        try:
            while self._running:
                t0 = time.monotonic()
                self.step()
                elapsed = time.monotonic() - t0
                sleep_s = self._period_s - elapsed
                await asyncio.sleep(sleep_s if sleep_s > 0 else 0)
        except asyncio.CancelledError:
            pass
        finally:
            self._running = False
            log.info("frame loop stopped after %d frames", self.frame_count)

    def stop(self) -> None:
        self._running = False

    def step(self) -> FrameParams:
        """Advance one frame using the state machine's clock."""
        m = self._machine
        t = m.now()
        dt = 0.0 if self._t_prev is None else min(MAX_FRAME_DT_S, max(0.0, t - self._t_prev))
        self._t_prev = t

        m.update()

        if m.spontaneous_blink_due():
            m.start_blink()

        blink = m.blink_amount()
        state = m.state

        k = DRIFT_SCALE.get(state)
        if k is not None:
            drift_x = math.sin(t * DRIFT_X_SPEED) * DRIFT_X_AMP * k
            drift_y = math.sin(t * DRIFT_Y_SPEED) * DRIFT_Y_AMP * k
        else:
            drift_x = drift_y = 0.0

        breath = m.advance_sleep(dt)
        drool = m.sleep.drool.snapshot() if (
            state == FaceState.SLEEPING and m.sleep.drool is not None
        ) else None

        frame = FrameParams(
            t=t,
            dt=dt,
            state=state,
            theme=self._theme() if callable(self._theme) else self._theme,
            blink=blink,
            drift_x=drift_x,
            drift_y=drift_y,
            look_x=self._look.x,
            look_y=self._look.y,
            sleepiness=SLEEPINESS.get(state, 0.0),
            breath=breath,
            drool=drool,
        )
        self.frame_count += 1
        self.last_frame = frame
        for cb in self._subscribers:
            try:
                cb(frame)
            except Exception:
                log.exception("frame subscriber failed")
        return frame
