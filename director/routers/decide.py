"""POST /api/decide — choose the face state for one expression snapshot.

The response is always a valid decision with HTTP 200. Without an API key,
or on any LLM failure, the heuristic cascade answers instead.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from pydantic import ValidationError

from director.llm.base import LLMError, LLMTimeoutError, LLMUnavailableError
from director.llm.schemas import DecideRequest, DecideResponse
from lunaface.core.heuristics import DIRECTOR_POLICY
from lunaface.core.states import MoodDecision

log = logging.getLogger(__name__)

router = APIRouter()


def heuristic_decision(req: DecideRequest) -> MoodDecision:
    return DIRECTOR_POLICY.classify(req.expr.to_features())


async def _parse_request(request: Request) -> DecideRequest | None:
    try:
        raw = await request.json()
    except ValueError:
        return None
    if not isinstance(raw, dict):
        return DecideRequest()
    try:
        return DecideRequest.model_validate(raw)
    except ValidationError as exc:
        log.debug("decide request failed validation: %s", exc)
        return DecideRequest()


@router.post("/api/decide", response_model=DecideResponse)
@router.post("/api/groq", response_model=DecideResponse, include_in_schema=False)
async def decide(request: Request) -> DecideResponse:
    """Accept ``{currentState, theme, expr}`` and return ``{state, play}``."""
    req = await _parse_request(request)
    if req is None:
        return DecideResponse.from_decision(MoodDecision())

    llm = getattr(request.app.state, "llm", None)
    if llm is None or not llm.configured:
        return DecideResponse.from_decision(heuristic_decision(req))

    try:
        decision = await llm.generate_decision(req)
    except LLMTimeoutError:
        log.warning("LLM timed out; using heuristic")
        decision = heuristic_decision(req)
    except LLMUnavailableError as exc:
        log.warning("LLM unavailable (%s); using heuristic", exc)
        decision = heuristic_decision(req)
    except LLMError as exc:
        log.warning("LLM error (%s); using heuristic", exc)
        decision = heuristic_decision(req)
    except Exception:
        log.exception("LLM backend raised unexpectedly; using heuristic")
        decision = heuristic_decision(req)

    return DecideResponse.from_decision(decision)
