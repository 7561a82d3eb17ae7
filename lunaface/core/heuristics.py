"""Heuristic mood classifier — ordered first-match cascades.

Two policies, with different thresholds:

  DIRECTOR_POLICY: fallback used by the mood director (client and server)
  LOCAL_POLICY:    slightly looser, used for live local frames when no
                   director is configured

Thresholds are hand-tuned policy, not fit to data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from lunaface.core.signals import ExpressionFeatures
from lunaface.core.states import FaceState, MoodDecision

Predicate = Callable[[ExpressionFeatures], bool]


@dataclass(frozen=True, slots=True)
class Rule:
    name: str
    predicate: Predicate
    outcome: FaceState


@dataclass(frozen=True, slots=True)
class HeuristicPolicy:
    name: str
    rules: tuple[Rule, ...]
    default: FaceState = FaceState.IDLE

    def classify(self, features: ExpressionFeatures) -> MoodDecision:
        for rule in self.rules:
            if rule.predicate(features):
                return MoodDecision(state=rule.outcome, play=None)
        return MoodDecision(state=self.default, play=None)

    def matching_rule(self, features: ExpressionFeatures) -> Rule | None:
        for rule in self.rules:
            if rule.predicate(features):
                return rule
        return None


def build_policy(
    name: str,
    *,
    lol_mouth_open: float,
    lol_smile: float,
    happy_smile: float,
    surprised_brows_up: float,
    angry_brow_furrow: float,
) -> HeuristicPolicy:
    """Build a cascade; all comparisons are strict ``>``."""
    return HeuristicPolicy(
        name=name,
        rules=(
            Rule(
                "lol",
                lambda f: f.mouth_open > lol_mouth_open and f.smile > lol_smile,
                FaceState.LOL,
            ),
            Rule("happy", lambda f: f.smile > happy_smile, FaceState.HAPPY),
            Rule(
                "surprised",
                lambda f: f.brows_up > surprised_brows_up,
                FaceState.SURPRISED,
            ),
            Rule(
                "angry",
                lambda f: f.brow_furrow > angry_brow_furrow,
                FaceState.ANGRY,
            ),
        ),
    )


DIRECTOR_POLICY = build_policy(
    "director",
    lol_mouth_open=0.6,
    lol_smile=0.35,
    happy_smile=0.6,
    surprised_brows_up=0.5,
    angry_brow_furrow=0.6,
)

LOCAL_POLICY = build_policy(
    "local",
    lol_mouth_open=0.55,
    lol_smile=0.35,
    happy_smile=0.55,
    surprised_brows_up=0.45,
    angry_brow_furrow=0.55,
)


def classify(
    features: ExpressionFeatures, policy: HeuristicPolicy = DIRECTOR_POLICY
) -> MoodDecision:
    return policy.classify(features)
