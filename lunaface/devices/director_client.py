"""Async client for the mood director decision endpoint.

Every call either returns a validated remote decision or the local heuristic
on the same features. Transport errors, bad status codes, unparsable bodies
and a missing endpoint all degrade to the heuristic; nothing raises.

Calls are rate limited: one initiation per cooldown window and never more
than one request in flight. A call inside the window is skipped (returns
None) rather than queued.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping

import httpx

from lunaface.core.heuristics import DIRECTOR_POLICY, HeuristicPolicy
from lunaface.core.signals import ExpressionFeatures, normalize
from lunaface.core.states import FaceState, MoodDecision

log = logging.getLogger(__name__)

DIRECTOR_COOLDOWN_S = 1.2
DEFAULT_ENDPOINT = "/api/decide"


class DecisionSource(str, Enum):
    REMOTE = "remote"
    FALLBACK = "fallback"


@dataclass(frozen=True, slots=True)
class DirectorResult:
    """Tagged decision; collapsed to ``decision`` at the public boundary."""

    decision: MoodDecision
    source: DecisionSource
    reason: str = ""


@dataclass(slots=True)
class DirectorContext:
    current_state: FaceState = FaceState.IDLE
    theme: str = "minimal"
    features: ExpressionFeatures = field(default_factory=ExpressionFeatures)

    def to_payload(self) -> dict:
        return {
            "currentState": FaceState(self.current_state).value,
            "theme": self.theme,
            "expr": normalize(self.features).to_wire(),
        }


class MoodDirectorClient:
    """Rate-limited wrapper around ``POST <endpoint>`` with heuristic fallback."""

    def __init__(
        self,
        base_url: str = "",
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout_s: float = 5.0,
        cooldown_s: float = DIRECTOR_COOLDOWN_S,
        policy: HeuristicPolicy = DIRECTOR_POLICY,
        clock: Callable[[], float] = time.monotonic,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.strip().rstrip("/")
        self._endpoint = endpoint
        self._timeout_s = timeout_s
        self._cooldown_s = cooldown_s
        self._policy = policy
        self._clock = clock
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        self._last_call_at: float | None = None
        self._inflight = False

        self.calls = 0
        self.skipped = 0
        self.remote_ok = 0
        self.fallbacks = 0
        self.last_result: DirectorResult | None = None

    @property
    def configured(self) -> bool:
        return bool(self._base_url)

    @property
    def inflight(self) -> bool:
        return self._inflight

    async def start(self) -> None:
        if self._client is None and self.configured:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout_s,
                transport=self._transport,
            )

    async def stop(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ── Public API ───────────────────────────────────────────────

    def ready(self) -> bool:
        """True if a call right now would not be skipped."""
        if self._inflight:
            return False
        if self._last_call_at is None:
            return True
        return self._clock() - self._last_call_at >= self._cooldown_s

    async def decide(
        self, context: DirectorContext | Mapping[str, Any]
    ) -> MoodDecision | None:
        """Return a decision, or None when skipped by the rate limiter."""
        result = await self.request(context)
        return result.decision if result is not None else None

    async def request(
        self, context: DirectorContext | Mapping[str, Any]
    ) -> DirectorResult | None:
        """Like ``decide`` but keeps the remote/fallback tag."""
        if not self.ready():
            self.skipped += 1
            return None

        self._last_call_at = self._clock()
        self._inflight = True
        self.calls += 1
        try:
            ctx = _coerce_context(context)
            result = await self._call(ctx)
        finally:
            self._inflight = False

        if result.source == DecisionSource.REMOTE:
            self.remote_ok += 1
        else:
            self.fallbacks += 1
        self.last_result = result
        return result

    def debug_snapshot(self) -> dict:
        last = self.last_result
        return {
            "configured": self.configured,
            "base_url": self._base_url,
            "cooldown_s": self._cooldown_s,
            "inflight": self._inflight,
            "calls": self.calls,
            "skipped": self.skipped,
            "remote_ok": self.remote_ok,
            "fallbacks": self.fallbacks,
            "last_source": last.source.value if last else None,
            "last_reason": last.reason if last else None,
            "last_decision": last.decision.to_dict() if last else None,
        }

    # ── Internals ────────────────────────────────────────────────

    async def _call(self, ctx: DirectorContext) -> DirectorResult:
        features = normalize(ctx.features)
        if not self.configured:
            return self._fallback(features, "not_configured")

        try:
            await self.start()
            client = self._require_client()
            resp = await client.post(self._endpoint, json=ctx.to_payload())
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            msg = str(e).strip() or e.__class__.__name__
            log.debug("director request failed: %s", msg)
            return self._fallback(features, "transport")
        except Exception:
            log.exception("director request raised unexpectedly")
            return self._fallback(features, "error")

        if not resp.is_success:
            log.debug("director returned %d", resp.status_code)
            return self._fallback(features, f"status_{resp.status_code}")

        try:
            body = resp.json()
        except ValueError:
            log.warning("director returned invalid JSON")
            return self._fallback(features, "invalid_json")

        if not isinstance(body, dict) or "state" not in body:
            log.warning("director response missing state envelope")
            return self._fallback(features, "bad_envelope")

        decision = MoodDecision.from_payload(body)
        return DirectorResult(decision=decision, source=DecisionSource.REMOTE)

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("director client not started")
        return self._client

    def _fallback(self, features: ExpressionFeatures, reason: str) -> DirectorResult:
        return DirectorResult(
            decision=self._policy.classify(features),
            source=DecisionSource.FALLBACK,
            reason=reason,
        )


def _coerce_context(context: DirectorContext | Mapping[str, Any]) -> DirectorContext:
    if isinstance(context, DirectorContext):
        return context
    raw_state = context.get("current_state", context.get("currentState"))
    try:
        state = FaceState(raw_state)
    except ValueError:
        state = FaceState.IDLE
    raw_features = context.get("features", context.get("expr"))
    theme = context.get("theme")
    return DirectorContext(
        current_state=state,
        theme=theme if isinstance(theme, str) and theme else "minimal",
        features=normalize(raw_features),
    )
