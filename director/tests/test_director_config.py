"""Director settings validation tests."""

from __future__ import annotations

import pytest

from director.config import Settings


def test_settings_reject_small_max_tokens() -> None:
    with pytest.raises(ValueError, match="DIRECTOR_MAX_TOKENS must be >= 16"):
        Settings(max_tokens=8)


def test_settings_reject_temperature_out_of_range() -> None:
    with pytest.raises(ValueError, match="DIRECTOR_TEMPERATURE"):
        Settings(temperature=2.5)


def test_settings_reject_non_positive_timeout() -> None:
    with pytest.raises(ValueError, match="DIRECTOR_TIMEOUT_S"):
        Settings(timeout_s=0.0)


def test_settings_reject_empty_groq_url() -> None:
    with pytest.raises(ValueError, match="GROQ_URL"):
        Settings(groq_url="  ")


def test_llm_enabled_follows_api_key() -> None:
    assert not Settings(groq_api_key="").llm_enabled
    assert Settings(groq_api_key="gsk-test").llm_enabled
