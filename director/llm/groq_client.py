"""Async client for an OpenAI-compatible chat completions API (Groq)."""

from __future__ import annotations

import json
import logging

import httpx

from director.config import settings
from director.llm.base import LLMError, LLMTimeoutError, LLMUnavailableError
from director.llm.prompts import DIRECTOR_STATES, SYSTEM_PROMPT, format_user_prompt
from director.llm.schemas import DecideRequest
from lunaface.core.states import FaceState, MoodDecision

log = logging.getLogger(__name__)


class GroqClient:
    """Thin async wrapper around ``POST /chat/completions``."""

    def __init__(
        self,
        api_key: str = settings.groq_api_key,
        base_url: str = settings.groq_url,
        model: str = settings.groq_model,
        timeout_s: float = settings.timeout_s,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key.strip()
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = httpx.Timeout(timeout_s, connect=5.0)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._requests = 0
        self._failures = 0

    @property
    def backend_name(self) -> str:
        return "groq"

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def generate_decision(self, req: DecideRequest) -> MoodDecision:
        """Ask the model for a decision and validate it.

        Raises:
            LLMUnavailableError: no API key, client not started, or unreachable.
            LLMTimeoutError: the API did not answer in time.
            LLMError: non-2xx status or a response that is not a decision.
        """
        if not self.configured:
            raise LLMUnavailableError("GROQ_API_KEY is not set")
        if self._client is None:
            raise LLMUnavailableError("groq client not started")

        body = {
            "model": self._model,
            "temperature": settings.temperature,
            "max_tokens": settings.max_tokens,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": format_user_prompt(
                        req, default_theme=settings.default_theme
                    ),
                },
            ],
        }

        self._requests += 1
        try:
            resp = await self._client.post(
                "/chat/completions",
                json=body,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.TimeoutException as e:
            self._failures += 1
            raise LLMTimeoutError("groq request timed out") from e
        except httpx.HTTPError as e:
            self._failures += 1
            msg = str(e).strip() or e.__class__.__name__
            raise LLMUnavailableError(f"groq request failed: {msg}") from e

        if not resp.is_success:
            self._failures += 1
            raise LLMError(f"groq returned {resp.status_code}: {resp.text[:200]}")

        try:
            data = resp.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            self._failures += 1
            raise LLMError("unexpected completion envelope") from e

        if not isinstance(content, str) or not content.strip():
            self._failures += 1
            raise LLMError("empty content in completion")

        try:
            parsed = json.loads(content)
        except ValueError as e:
            self._failures += 1
            raise LLMError(f"model returned non-JSON content: {content[:80]!r}") from e
        if not isinstance(parsed, dict):
            self._failures += 1
            raise LLMError("model returned a non-object decision")

        decision = MoodDecision.from_payload(parsed)
        if decision.state.value not in DIRECTOR_STATES:
            decision = MoodDecision(FaceState.IDLE, decision.play)
        log.info("decision: %s play=%s", decision.state.value, decision.play)
        return decision

    def debug_snapshot(self) -> dict:
        return {
            "backend": self.backend_name,
            "model": self._model,
            "configured": self.configured,
            "requests": self._requests,
            "failures": self._failures,
        }
