"""Tests for expression signal normalization."""

from __future__ import annotations

import math

import pytest

from lunaface.core.signals import FEATURE_KEYS, ExpressionFeatures, clamp01, normalize

_ATTRS = [attr for _, attr in FEATURE_KEYS]


def _values(f: ExpressionFeatures) -> list[float]:
    return [getattr(f, a) for a in _ATTRS]


@pytest.mark.parametrize(
    "raw",
    [
        {},
        None,
        "not a mapping",
        {"smile": -3, "mouthOpen": 7, "browsUp": "0.4", "browFurrow": math.nan},
        {"smile": math.inf, "mouthOpen": -math.inf, "browsUp": None, "browFurrow": []},
        {"smile": True, "mouthOpen": False},
        {"unrelated": 0.9},
    ],
)
def test_normalize_always_in_unit_box(raw):
    f = normalize(raw)
    assert all(0.0 <= v <= 1.0 for v in _values(f))


def test_non_numeric_values_become_zero():
    f = normalize({"smile": "0.9", "mouthOpen": math.nan, "browsUp": math.inf})
    assert _values(f) == [0.0, 0.0, 0.0, 0.0]


def test_out_of_range_values_clamp():
    f = normalize({"smile": 1.7, "mouthOpen": -0.2, "browsUp": 0.25, "browFurrow": 1})
    assert f == ExpressionFeatures(smile=1.0, mouth_open=0.0, brows_up=0.25, brow_furrow=1.0)


def test_attribute_keys_are_accepted():
    f = normalize({"mouth_open": 0.5, "brow_furrow": 0.3})
    assert f.mouth_open == 0.5
    assert f.brow_furrow == 0.3


def test_wire_order_is_canonical():
    wire = normalize({"browFurrow": 0.1, "smile": 0.2}).to_wire()
    assert list(wire) == ["smile", "mouthOpen", "browsUp", "browFurrow"]


def test_features_instance_is_reclamped():
    f = normalize(ExpressionFeatures(smile=2.0, mouth_open=math.nan))
    assert f.smile == 1.0
    assert f.mouth_open == 0.0


def test_clamp01_rejects_bool():
    assert clamp01(True) == 0.0
    assert clamp01(0.5) == 0.5
