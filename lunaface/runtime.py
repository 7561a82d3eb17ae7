"""Face runtime — wires state machine, director, pipeline and frame loop."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Any, AsyncIterator, Callable

from lunaface.config import THEMES, LunaConfig
from lunaface.core.face_state import FaceStateMachine
from lunaface.core.mood_pipeline import MoodPipeline
from lunaface.core.states import Play
from lunaface.core.tick_loop import FaceTickLoop, FrameParams
from lunaface.devices.director_client import MoodDirectorClient
from lunaface.inputs.feature_stream import FeatureFrame

log = logging.getLogger(__name__)


class FaceRuntime:
    """One face: the objects a front end or the CLI talks to."""

    def __init__(
        self,
        cfg: LunaConfig,
        *,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
        director: MoodDirectorClient | None = None,
    ) -> None:
        self.cfg = cfg
        self.theme = cfg.face.theme
        self._audio_sinks: list[Callable[[Play], Any]] = []

        self.machine = FaceStateMachine(
            clock=clock, rng=rng, face_radius=cfg.face.face_radius
        )
        if director is None and cfg.director.url:
            director = MoodDirectorClient(
                cfg.director.url,
                endpoint=cfg.director.endpoint,
                timeout_s=cfg.director.timeout_s,
                cooldown_s=cfg.director.cooldown_s,
                clock=clock,
            )
        self.director = director
        self.pipeline = MoodPipeline(
            self.machine,
            director=director,
            theme=lambda: self.theme,
            on_play=self.play,
        )
        self.loop = FaceTickLoop(
            self.machine,
            fps=cfg.face.fps,
            theme=lambda: self.theme,
            look=self.pipeline.look,
        )
        if cfg.camera.enabled:
            self.pipeline.set_camera_enabled(True)

    # ── Controls ─────────────────────────────────────────────────

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            log.warning("unknown theme %r ignored", theme)
            return
        self.theme = theme

    def toggle_theme(self) -> None:
        idx = THEMES.index(self.theme) if self.theme in THEMES else -1
        self.theme = THEMES[(idx + 1) % len(THEMES)]

    def set_camera_enabled(self, enabled: bool) -> None:
        self.pipeline.set_camera_enabled(enabled)

    def subscribe_audio(self, cb: Callable[[Play], Any]) -> None:
        self._audio_sinks.append(cb)

    def subscribe_frames(self, cb: Callable[[FrameParams], Any]) -> None:
        self.loop.subscribe(cb)

    def play(self, cue: Play) -> None:
        log.info("audio cue: %s", cue)
        for cb in self._audio_sinks:
            cb(cue)

    # ── Lifecycle ────────────────────────────────────────────────

    async def start(self) -> None:
        if self.director is not None:
            await self.director.start()

    async def stop(self) -> None:
        self.loop.stop()
        if self.director is not None:
            await self.director.stop()

    async def consume_frames(self, frames: AsyncIterator[FeatureFrame]) -> None:
        """Feed camera frames to the pipeline until the stream ends."""
        async for frame in frames:
            await self.pipeline.on_frame(frame.features, frame.look)

    async def run(self, frames: AsyncIterator[FeatureFrame] | None = None) -> None:
        """Run the frame loop (and camera consumer, if given) until stopped."""
        await self.start()
        tasks = [asyncio.create_task(self.loop.run(), name="face-loop")]
        if frames is not None:
            tasks.append(
                asyncio.create_task(self.consume_frames(frames), name="face-camera")
            )
        try:
            await tasks[0]
        finally:
            for t in tasks[1:]:
                t.cancel()
                try:
                    await t
                except asyncio.CancelledError:
                    pass
                except Exception:
                    log.exception("task %s failed", t.get_name())
            await self.stop()

    def debug_snapshot(self) -> dict:
        return {
            "theme": self.theme,
            "face": self.machine.snapshot(),
            "pipeline": self.pipeline.debug_snapshot(),
            "director": self.director.debug_snapshot() if self.director else None,
            "frames": self.loop.frame_count,
        }
