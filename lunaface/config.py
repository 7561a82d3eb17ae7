"""Face configuration with defaults, loadable from YAML."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

log = logging.getLogger(__name__)

THEMES: tuple[str, ...] = ("minimal", "kawaii")


@dataclass
class FaceConfig:
    fps: int = 60
    theme: str = "minimal"
    face_radius: float = 160.0  # px; drool bubble size scales with it


@dataclass
class DirectorConfig:
    url: str = ""  # empty: no director, local heuristic only
    endpoint: str = "/api/decide"
    timeout_s: float = 5.0
    cooldown_s: float = 1.2


@dataclass
class CameraConfig:
    enabled: bool = False
    source: str = "stdin"  # NDJSON feature frames


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class LunaConfig:
    face: FaceConfig = field(default_factory=FaceConfig)
    director: DirectorConfig = field(default_factory=DirectorConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> None:
        if self.face.fps < 1:
            raise ValueError("face.fps must be >= 1")
        if self.face.theme not in THEMES:
            raise ValueError(f"face.theme must be one of: {', '.join(THEMES)}")
        if self.face.face_radius <= 0:
            raise ValueError("face.face_radius must be > 0")
        if self.director.timeout_s <= 0:
            raise ValueError("director.timeout_s must be > 0")
        if self.director.cooldown_s < 0:
            raise ValueError("director.cooldown_s must be >= 0")
        if self.camera.source != "stdin":
            raise ValueError("camera.source must be: stdin")


_SECTIONS = ("face", "director", "camera", "logging")


def load_config(path: str | Path | None = None) -> LunaConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        return LunaConfig()

    path = Path(path)
    if not path.exists():
        log.warning("config file not found: %s, using defaults", path)
        return LunaConfig()

    try:
        import yaml

        with open(path) as f:
            raw = yaml.safe_load(f) or {}

        cfg = LunaConfig()
        for section_name in _SECTIONS:
            if section_name in raw:
                section = getattr(cfg, section_name)
                for k, v in raw[section_name].items():
                    if not hasattr(section, k):
                        log.warning("unknown config key %s.%s ignored", section_name, k)
                        continue
                    setattr(section, k, v)
        cfg.validate()

        log.info("config loaded from %s", path)
        return cfg
    except Exception as e:
        log.warning("config load error: %s, using defaults", e)
        return LunaConfig()
