"""Tests for environment-driven settings."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from learnos.config import get_database_settings, get_settings
from learnos.utils.env import load_env_file


@pytest.fixture
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
  get_settings.cache_clear()
  get_database_settings.cache_clear()
  for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "LEARNOS_PG_DSN", "DATABASE_URL", "LEARNOS_ALLOWED_ORIGINS", "LEARNOS_GEMINI_MODEL"):
    monkeypatch.delenv(name, raising=False)
  yield monkeypatch
  get_settings.cache_clear()
  get_database_settings.cache_clear()


def test_defaults(fresh_settings: pytest.MonkeyPatch) -> None:
  fresh_settings.setenv("LEARNOS_LESSON_STORE", "memory")
  settings = get_settings()
  assert settings.gemini_api_key is None
  assert settings.gemini_model == "gemini-2.0-flash"
  assert settings.allowed_origins == ("http://localhost:3000",)
  assert (settings.generation_temperature, settings.generation_top_k, settings.generation_top_p, settings.generation_max_output_tokens) == (0.7, 40, 0.95, 2048)


def test_google_api_key_is_a_fallback(fresh_settings: pytest.MonkeyPatch) -> None:
  fresh_settings.setenv("GOOGLE_API_KEY", "legacy-key")
  assert get_settings().gemini_api_key == "legacy-key"


def test_gemini_api_key_wins_over_fallback(fresh_settings: pytest.MonkeyPatch) -> None:
  fresh_settings.setenv("GOOGLE_API_KEY", "legacy-key")
  fresh_settings.setenv("GEMINI_API_KEY", "primary-key")
  assert get_settings().gemini_api_key == "primary-key"


def test_database_url_is_a_dsn_fallback(fresh_settings: pytest.MonkeyPatch) -> None:
  fresh_settings.setenv("DATABASE_URL", "postgresql://u:p@db/learnos")
  assert get_settings().pg_dsn == "postgresql://u:p@db/learnos"


@pytest.mark.parametrize(
  ("name", "value"),
  [
    ("LEARNOS_ALLOWED_ORIGINS", "*"),
    ("LEARNOS_LESSON_STORE", "redis"),
    ("LEARNOS_GENERATION_TOP_P", "1.5"),
    ("LEARNOS_GENERATION_TIMEOUT_SECONDS", "0"),
    ("LEARNOS_GENERATION_TOP_K", "-1"),
  ],
)
def test_invalid_values_fail_at_load(fresh_settings: pytest.MonkeyPatch, name: str, value: str) -> None:
  fresh_settings.setenv(name, value)
  with pytest.raises(ValueError):
    get_settings()


def test_env_file_does_not_override_existing_values(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
  env_file = tmp_path / ".env"
  env_file.write_text('# comment\nexport LEARNOS_TEST_A="from-file"\nLEARNOS_TEST_B=from-file\n', encoding="utf-8")
  # setenv first so teardown removes whatever the loader writes.
  monkeypatch.setenv("LEARNOS_TEST_A", "placeholder")
  monkeypatch.delenv("LEARNOS_TEST_A")
  monkeypatch.setenv("LEARNOS_TEST_B", "from-env")

  applied = load_env_file(env_file)

  assert applied == {"LEARNOS_TEST_A": "from-file"}
