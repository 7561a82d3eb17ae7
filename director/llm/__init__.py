"""LLM backend package exports."""

from director.llm.base import LLMError, LLMTimeoutError, LLMUnavailableError
from director.llm.groq_client import GroqClient

__all__ = [
    "GroqClient",
    "LLMError",
    "LLMTimeoutError",
    "LLMUnavailableError",
]
