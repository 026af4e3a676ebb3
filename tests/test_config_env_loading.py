"""
Test environment file loading and settings parsing.

Already-set environment variables take precedence over .env values, and
nested settings read their own prefixed variables.
"""

import os

import pytest
from pydantic import ValidationError

from medivoice.core.config import (
    CORSSettings,
    DatabaseSettings,
    NatlasSettings,
    Settings,
    _load_env_file_if_available,
    get_settings,
    reset_settings,
)


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


def test_env_file_found_in_parent_directory(monkeypatch, tmp_path):
    monkeypatch.delenv("MONGO_DB_NAME", raising=False)
    (tmp_path / ".env").write_text("MONGO_DB_NAME=from_parent_env\n")
    nested = tmp_path / "service" / "run"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)

    _load_env_file_if_available()

    assert os.environ.pop("MONGO_DB_NAME") == "from_parent_env"


def test_already_set_env_vars_take_precedence(monkeypatch, tmp_path):
    monkeypatch.setenv("MONGO_DB_NAME", "already_set")
    (tmp_path / ".env").write_text("MONGO_DB_NAME=from_env_file\n")
    monkeypatch.chdir(tmp_path)

    _load_env_file_if_available()

    assert os.getenv("MONGO_DB_NAME") == "already_set"


def test_no_env_file_no_crash(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)

    _load_env_file_if_available()


def test_nested_settings_read_prefixed_variables(monkeypatch):
    monkeypatch.setenv("NATLAS_MAX_ATTEMPTS", "4")
    monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "5")
    monkeypatch.setenv("CONSULTATION_DEFAULT_LANGUAGE", "yoruba")

    settings = get_settings()

    assert settings.natlas.max_attempts == 4
    assert settings.rate_limit.max_requests == 5
    assert settings.consultation.default_language == "yoruba"
    assert get_settings() is settings


def test_trailing_slash_is_stripped():
    assert NatlasSettings(api_url="https://natlas.example.com/").api_url == "https://natlas.example.com"


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        DatabaseSettings(uri="postgres://localhost")
    with pytest.raises(ValidationError):
        NatlasSettings(max_attempts=0)
    with pytest.raises(ValidationError):
        Settings(app_env="moon")


def test_cors_origins_from_comma_separated_string():
    cors = CORSSettings(allowed_origins="https://a.example.com, https://b.example.com")

    assert cors.allowed_origins == ["https://a.example.com", "https://b.example.com"]
