"""Tests for the decide request/response models and prompt rendering."""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from director.llm.prompts import DIRECTOR_STATES, SYSTEM_PROMPT, format_user_prompt
from director.llm.schemas import DecideRequest, DecideResponse, ExpressionScores
from lunaface.core.states import FaceState, MoodDecision


def test_expression_scores_accept_wire_names_and_clamp():
    scores = ExpressionScores.model_validate(
        {"smile": 1.7, "mouthOpen": -0.2, "browsUp": math.nan, "browFurrow": True}
    )
    assert scores.smile == 1.0
    assert scores.mouth_open == 0.0
    assert scores.brows_up == 0.0
    assert scores.brow_furrow == 0.0


def test_request_defaults():
    req = DecideRequest.model_validate({})
    assert req.current_state == "idle"
    assert req.theme == ""
    assert req.expr.to_features().to_wire() == {
        "smile": 0.0,
        "mouthOpen": 0.0,
        "browsUp": 0.0,
        "browFurrow": 0.0,
    }


def test_request_tolerates_non_object_expr():
    req = DecideRequest.model_validate({"currentState": None, "expr": "smiling"})
    assert req.current_state == ""
    assert req.expr.smile == 0.0


def test_response_rejects_unknown_state():
    with pytest.raises(ValidationError):
        DecideResponse(state="banana")
    resp = DecideResponse.from_decision(MoodDecision(FaceState.LOL, "hey"))
    assert resp.model_dump() == {"state": "lol", "play": "hey"}


def test_prompt_lists_director_states_and_scores():
    assert set(DIRECTOR_STATES) == {"idle", "surprised", "angry", "happy", "lol"}
    for state in DIRECTOR_STATES:
        assert state in SYSTEM_PROMPT

    req = DecideRequest.model_validate(
        {"currentState": "happy", "expr": {"smile": 0.75}}
    )
    prompt = format_user_prompt(req, default_theme="kawaii")
    assert '"smile":0.75' in prompt
    assert "Current state: happy" in prompt
    assert "Theme: kawaii" in prompt
