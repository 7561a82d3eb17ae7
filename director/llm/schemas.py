"""Pydantic models for the decide request/response contract."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lunaface.core.signals import ExpressionFeatures, clamp01
from lunaface.core.states import MoodDecision


class ExpressionScores(BaseModel):
    """Raw ``expr`` block; every value is clamped, never rejected."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    smile: float = 0.0
    mouth_open: float = Field(default=0.0, alias="mouthOpen")
    brows_up: float = Field(default=0.0, alias="browsUp")
    brow_furrow: float = Field(default=0.0, alias="browFurrow")

    @field_validator("smile", "mouth_open", "brows_up", "brow_furrow", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> float:
        return clamp01(value)

    def to_features(self) -> ExpressionFeatures:
        return ExpressionFeatures(
            smile=self.smile,
            mouth_open=self.mouth_open,
            brows_up=self.brows_up,
            brow_furrow=self.brow_furrow,
        )


class DecideRequest(BaseModel):
    """Body sent by the face client."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    current_state: str = Field(default="idle", alias="currentState")
    theme: str = ""
    expr: ExpressionScores = Field(default_factory=ExpressionScores)

    @field_validator("current_state", "theme", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("expr", mode="before")
    @classmethod
    def _expr_object(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}


class DecideResponse(BaseModel):
    """Decision returned to the face client; ``state`` is always valid."""

    state: Literal[
        "idle",
        "blink",
        "sleepy",
        "sleeping",
        "speaking",
        "surprised",
        "angry",
        "happy",
        "lol",
    ]
    play: Literal["hey", "sleep"] | None = None

    @classmethod
    def from_decision(cls, decision: MoodDecision) -> DecideResponse:
        return cls(state=decision.state.value, play=decision.play)
