"""LunaFace entry point — headless face driver.

Reads expression frames as NDJSON on stdin (``--camera``) and optionally
writes one FrameParams line per frame to stdout (``--emit-frames``) for an
external renderer. Logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from lunaface.config import THEMES, LunaConfig, load_config

log = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="LunaFace face driver")
    p.add_argument("--config", default=None, help="YAML config file path")
    p.add_argument(
        "--director-url", default=None, help="Mood director base URL (empty disables)"
    )
    p.add_argument(
        "--camera", action="store_true", help="Read NDJSON expression frames from stdin"
    )
    p.add_argument("--theme", choices=THEMES, default=None, help="Initial theme")
    p.add_argument("--fps", type=int, default=None, help="Frame rate")
    p.add_argument(
        "--emit-frames", action="store_true", help="Write frame params as NDJSON to stdout"
    )
    p.add_argument("--log-level", default=None, help="Log level")
    return p.parse_args(argv)


def apply_overrides(cfg: LunaConfig, args: argparse.Namespace) -> LunaConfig:
    if args.director_url is not None:
        cfg.director.url = args.director_url
    if args.camera:
        cfg.camera.enabled = True
    if args.theme is not None:
        cfg.face.theme = args.theme
    if args.fps is not None:
        cfg.face.fps = args.fps
    if args.log_level is not None:
        cfg.logging.level = args.log_level
    cfg.validate()
    return cfg


def _emit_frame(frame) -> None:
    sys.stdout.write(json.dumps(frame.to_dict(), separators=(",", ":")) + "\n")
    sys.stdout.flush()


async def async_main(cfg: LunaConfig, *, emit_frames: bool = False) -> None:
    from lunaface.inputs.feature_stream import iter_frames, open_stdin_reader
    from lunaface.runtime import FaceRuntime

    runtime = FaceRuntime(cfg)
    if emit_frames:
        runtime.subscribe_frames(_emit_frame)

    frames = None
    if cfg.camera.enabled:
        frames = iter_frames(await open_stdin_reader())

    log.info(
        "face starting: theme=%s director=%s camera=%s",
        runtime.theme,
        cfg.director.url or "off",
        "on" if cfg.camera.enabled else "off",
    )
    await runtime.run(frames)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, (args.log_level or "INFO").upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
        stream=sys.stderr,
    )
    cfg = apply_overrides(load_config(args.config), args)
    logging.getLogger().setLevel(
        getattr(logging, cfg.logging.level.upper(), logging.INFO)
    )
    try:
        asyncio.run(async_main(cfg, emit_frames=args.emit_frames))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
