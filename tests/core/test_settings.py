"""Tests for Settings: provider selection helpers and validation."""
import pytest
from pydantic import ValidationError

from app.core.config import Settings


def test_defaults_without_env():
    s = Settings(_env_file=None)
    assert s.image_provider == "openrouter"
    assert s.openrouter_timeout is None
    assert s.active_model() == "google/gemini-2.5-flash-image-preview"


def test_active_key_follows_provider():
    s = Settings(_env_file=None, image_provider=" Gemini ", gemini_api_key="g", openrouter_api_key="o")
    assert s.image_provider == "gemini"
    assert s.active_api_key() == "g"
    assert s.active_model() == "gemini-2.5-flash-image"


def test_temperature_out_of_range():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, openrouter_temperature=3.5)


def test_unknown_provider_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, image_provider="dalle")


def test_cors_origins_list():
    s = Settings(_env_file=None, cors_origins="http://a, ,http://b")
    assert s.cors_origins_list == ["http://a", "http://b"]
