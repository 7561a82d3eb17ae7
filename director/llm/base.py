"""Error types for director LLM backends."""

from __future__ import annotations


class LLMError(RuntimeError):
    """Base error for LLM backend failures."""


class LLMTimeoutError(LLMError):
    """Raised when LLM generation exceeds configured timeout."""


class LLMUnavailableError(LLMError):
    """Raised when the configured backend is unavailable or unconfigured."""
