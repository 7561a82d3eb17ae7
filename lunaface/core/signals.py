"""Per-frame expression signal normalization.

The vision collaborator emits one raw record per processed frame. Its values
are untrusted: fields may be missing, strings, NaN, infinite, or outside
[0, 1]. ``normalize`` turns any such record into a clamped feature vector and
never raises.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

# Wire key -> attribute name. Order is the canonical field order.
FEATURE_KEYS: tuple[tuple[str, str], ...] = (
    ("smile", "smile"),
    ("mouthOpen", "mouth_open"),
    ("browsUp", "brows_up"),
    ("browFurrow", "brow_furrow"),
)


@dataclass(frozen=True, slots=True)
class ExpressionFeatures:
    smile: float = 0.0
    mouth_open: float = 0.0
    brows_up: float = 0.0
    brow_furrow: float = 0.0

    def to_wire(self) -> dict[str, float]:
        return {wire: getattr(self, attr) for wire, attr in FEATURE_KEYS}


def clamp01(value: Any) -> float:
    """Finite numbers clamp to [0, 1]; everything else is 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    x = float(value)
    if not math.isfinite(x):
        return 0.0
    return max(0.0, min(1.0, x))


def normalize(raw: Mapping[str, Any] | ExpressionFeatures | None) -> ExpressionFeatures:
    """Clamp a raw record (wire or attribute keys) into ExpressionFeatures."""
    if isinstance(raw, ExpressionFeatures):
        return ExpressionFeatures(
            **{attr: clamp01(getattr(raw, attr)) for _, attr in FEATURE_KEYS}
        )
    if not isinstance(raw, Mapping):
        return ExpressionFeatures()

    values: dict[str, float] = {}
    for wire, attr in FEATURE_KEYS:
        value = raw.get(wire)
        if value is None:
            value = raw.get(attr)
        values[attr] = clamp01(value)
    return ExpressionFeatures(**values)
