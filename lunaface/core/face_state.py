"""Face expression state machine.

Owns the single authoritative FaceState plus every animation timer that
hangs off it: blink repeat, blink envelope, mood auto-revert, sleep breath
and the drool bubble. Timers are wake times checked by ``update()``, which
the frame loop calls once per frame; nothing here sleeps or spawns tasks.

Any state may be entered from any state. Entry side effects are keyed by
the new state only (except the slower blink when leaving SLEEPY).

Time is read from an injectable clock (seconds) so tests can drive it.
"""

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass
from typing import Callable

from lunaface.core.states import FaceState, parse_face_state

log = logging.getLogger(__name__)

# Blink scheduling
BLINK_BASE_S = 2.8
BLINK_JITTER_S = 2.6
SLEEPY_BLINK_BASE_S = 4.5
SLEEPY_BLINK_JITTER_S = 4.5
BLINK_DURATION_S = 0.120
SLEEPY_BLINK_DURATION_S = 0.160
BLINK_RETURN_S = 0.160

# Auto-revert dwell per transient mood
REVERT_DWELL_S: dict[FaceState, float] = {
    FaceState.BLINK: BLINK_RETURN_S,
    FaceState.SURPRISED: 1.4,
    FaceState.LOL: 2.0,
    FaceState.ANGRY: 2.2,
}

SPONTANEOUS_BLINK_STATES = frozenset(
    {FaceState.IDLE, FaceState.SLEEPY, FaceState.SPEAKING, FaceState.HAPPY}
)

# Sleep
BREATH_RATE = 1.6  # rad per second of breath phase
DROOL_FIRST_MIN_S = 3.0
DROOL_FIRST_MAX_S = 8.0
DROOL_NEXT_MIN_S = 5.0
DROOL_NEXT_MAX_S = 11.0
DROOL_SPAWN_RADIUS = 2.0
DROOL_GROW_MIN = 0.35
DROOL_GROW_MAX = 0.55
DROOL_MAX_R_MIN = 0.06  # fraction of face radius
DROOL_MAX_R_MAX = 0.09
DROOL_HOLD_MIN_S = 0.9
DROOL_HOLD_MAX_S = 1.6
DROOL_ALPHA_IN_PER_S = 2.2
DROOL_GROW_SCALE = 20.0  # radius/s per unit growth rate
DROOL_ALPHA_OUT_PER_S = 1.5
DROOL_SHRINK_PER_S = 4.0
# Bubble anchor, fraction of face radius from face centre
DROOL_ANCHOR_X = 0.18
DROOL_ANCHOR_Y = 0.52


@dataclass(slots=True)
class Timer:
    """A wake time plus an armed flag."""

    at: float = 0.0
    active: bool = False

    def arm(self, at: float) -> None:
        self.at = at
        self.active = True

    def cancel(self) -> None:
        self.active = False

    def due(self, now: float) -> bool:
        return self.active and now >= self.at


@dataclass(slots=True)
class BlinkState:
    active: bool = False
    start: float = 0.0
    duration: float = BLINK_DURATION_S
    next_at: float = 0.0


@dataclass(slots=True)
class DroolBubble:
    radius: float = DROOL_SPAWN_RADIUS
    alpha: float = 0.0
    grow: float = DROOL_GROW_MIN
    max_radius: float = 0.0
    hold_s: float = DROOL_HOLD_MIN_S
    age_s: float = 0.0
    fading: bool = False

    def snapshot(self) -> dict:
        return {
            "x": DROOL_ANCHOR_X,
            "y": DROOL_ANCHOR_Y,
            "r": round(self.radius, 3),
            "a": round(self.alpha, 3),
        }


@dataclass(slots=True)
class SleepState:
    breath_phase: float = 0.0
    drool_next_at: float = 0.0
    drool: DroolBubble | None = None


class FaceStateMachine:
    """Single authoritative face state with its timers."""

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
        face_radius: float = 160.0,
    ) -> None:
        self._clock = clock
        self._rng = rng or random.Random()
        self.face_radius = face_radius

        self._state = FaceState.IDLE
        self.prev_state = FaceState.IDLE
        self.blink = BlinkState()
        self.sleep = SleepState()
        self._revert = Timer()
        self._listeners: list[Callable[[FaceState, FaceState], None]] = []

        self._schedule_blink()

    # ── Queries ──────────────────────────────────────────────────

    @property
    def state(self) -> FaceState:
        return self._state

    @property
    def revert_pending(self) -> bool:
        return self._revert.active

    @property
    def revert_at(self) -> float | None:
        return self._revert.at if self._revert.active else None

    def now(self) -> float:
        return self._clock()

    def subscribe(self, cb: Callable[[FaceState, FaceState], None]) -> None:
        """Call ``cb(prev, new)`` after every set_state."""
        self._listeners.append(cb)

    # ── Transitions ──────────────────────────────────────────────

    def set_state(self, next_state: FaceState | str) -> None:
        """Enter *next_state* unconditionally and run its entry effects.

        Labels outside the nine states are ignored with a warning.
        """
        new = parse_face_state(next_state)
        if new is None:
            log.warning("ignoring unknown face state %r", next_state)
            return
        now = self._clock()
        prev = self._state
        self.prev_state = prev
        self._state = new

        # Any transition supersedes a pending revert.
        self._revert.cancel()

        if new == FaceState.SLEEPING:
            self.sleep.breath_phase = 0.0
            self.sleep.drool = None
            self.sleep.drool_next_at = now + self._rng.uniform(
                DROOL_FIRST_MIN_S, DROOL_FIRST_MAX_S
            )
            self.blink.active = False
        else:
            self.sleep.drool = None
            self._schedule_blink()

        if new == FaceState.BLINK:
            self.start_blink(slow=prev == FaceState.SLEEPY)

        dwell = REVERT_DWELL_S.get(new)
        if dwell is not None:
            self._revert.arm(now + dwell)

        log.debug("face state %s -> %s", prev.value, new.value)
        for cb in self._listeners:
            cb(prev, new)

    def update(self) -> None:
        """Fire due timers. Called once per frame by the driver."""
        if self._revert.due(self._clock()):
            self._revert.cancel()
            log.debug("auto-revert %s -> idle", self._state.value)
            self.set_state(FaceState.IDLE)

    # ── Blink ────────────────────────────────────────────────────

    def start_blink(self, *, slow: bool | None = None) -> None:
        if slow is None:
            slow = self._state == FaceState.SLEEPY
        self.blink.active = True
        self.blink.start = self._clock()
        self.blink.duration = SLEEPY_BLINK_DURATION_S if slow else BLINK_DURATION_S

    def spontaneous_blink_due(self) -> bool:
        return (
            self._state in SPONTANEOUS_BLINK_STATES
            and not self.blink.active
            and self._clock() > self.blink.next_at
        )

    def blink_amount(self) -> float:
        """Eyelid closure in [0, 1] for the current instant."""
        if self._state == FaceState.SLEEPING:
            return 1.0
        if not self.blink.active:
            return 0.0

        t = (self._clock() - self.blink.start) / self.blink.duration
        if t >= 1.0:
            self.blink.active = False
            self._schedule_blink()
            return 0.0
        t = max(0.0, t)
        return t / 0.5 if t < 0.5 else 1.0 - (t - 0.5) / 0.5

    def _schedule_blink(self) -> None:
        if self._state == FaceState.SLEEPY:
            base, jitter = SLEEPY_BLINK_BASE_S, SLEEPY_BLINK_JITTER_S
        else:
            base, jitter = BLINK_BASE_S, BLINK_JITTER_S
        self.blink.next_at = self._clock() + base + self._rng.uniform(0.0, jitter)

    # ── Sleep ────────────────────────────────────────────────────

    def advance_sleep(self, dt: float) -> float:
        """Advance breath + drool by *dt* seconds; return breath pulse in [0, 1].

        No-op (returns 0) unless SLEEPING.
        """
        if self._state != FaceState.SLEEPING:
            return 0.0

        sleep = self.sleep
        sleep.breath_phase += dt
        now = self._clock()

        if sleep.drool is None and now > sleep.drool_next_at:
            sleep.drool = DroolBubble(
                grow=self._rng.uniform(DROOL_GROW_MIN, DROOL_GROW_MAX),
                max_radius=self.face_radius
                * self._rng.uniform(DROOL_MAX_R_MIN, DROOL_MAX_R_MAX),
                hold_s=self._rng.uniform(DROOL_HOLD_MIN_S, DROOL_HOLD_MAX_S),
            )

        d = sleep.drool
        if d is not None:
            d.age_s += dt
            if not d.fading and d.alpha < 1.0 and d.radius < d.max_radius:
                d.alpha = min(1.0, d.alpha + dt * DROOL_ALPHA_IN_PER_S)
                d.radius = min(d.max_radius, d.radius + dt * d.grow * DROOL_GROW_SCALE)
            elif d.age_s > d.hold_s:
                d.fading = True
                d.alpha = max(0.0, d.alpha - dt * DROOL_ALPHA_OUT_PER_S)
                d.radius = max(0.0, d.radius - dt * DROOL_SHRINK_PER_S)
                if d.alpha == 0.0:
                    sleep.drool = None
                    sleep.drool_next_at = now + self._rng.uniform(
                        DROOL_NEXT_MIN_S, DROOL_NEXT_MAX_S
                    )

        return (math.sin(sleep.breath_phase * BREATH_RATE) + 1.0) / 2.0

    # ── Debug ────────────────────────────────────────────────────

    def snapshot(self) -> dict:
        now = self._clock()
        return {
            "state": self._state.value,
            "prev_state": self.prev_state.value,
            "blink_active": self.blink.active,
            "next_blink_in_s": round(max(0.0, self.blink.next_at - now), 3),
            "revert_in_s": (
                round(max(0.0, self._revert.at - now), 3)
                if self._revert.active
                else None
            ),
            "breath_phase": round(self.sleep.breath_phase, 3),
            "drool": self.sleep.drool.snapshot() if self.sleep.drool else None,
        }
