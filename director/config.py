"""Director server configuration with environment variable overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv(override=False)


@dataclass(slots=True)
class Settings:
    """Mood director settings. Override any field via environment variable."""

    groq_api_key: str = os.environ.get("GROQ_API_KEY", "").strip()
    groq_url: str = os.environ.get("GROQ_URL", "https://api.groq.com/openai/v1")
    groq_model: str = os.environ.get("GROQ_MODEL", "llama-3.1-8b-instant")
    temperature: float = float(os.environ.get("DIRECTOR_TEMPERATURE", "0.2"))
    max_tokens: int = int(os.environ.get("DIRECTOR_MAX_TOKENS", "60"))
    timeout_s: float = float(os.environ.get("DIRECTOR_TIMEOUT_S", "5.0"))
    default_theme: str = os.environ.get("DIRECTOR_DEFAULT_THEME", "kawaii")
    host: str = os.environ.get("SERVER_HOST", "0.0.0.0")
    port: int = int(os.environ.get("SERVER_PORT", "8200"))

    def __post_init__(self) -> None:
        if not (0.0 <= self.temperature <= 2.0):
            raise ValueError("DIRECTOR_TEMPERATURE must be in [0.0, 2.0]")
        if self.max_tokens < 16:
            raise ValueError("DIRECTOR_MAX_TOKENS must be >= 16")
        if self.timeout_s <= 0.0:
            raise ValueError("DIRECTOR_TIMEOUT_S must be > 0")
        if not self.groq_url.strip():
            raise ValueError("GROQ_URL must not be empty")

    @property
    def llm_enabled(self) -> bool:
        return bool(self.groq_api_key)


settings = Settings()
