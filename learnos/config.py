"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from learnos.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

_LESSON_STORES = {"postgres", "memory"}


@dataclass(frozen=True)
class Settings:
  """Typed settings for the LearnOS service."""

  environment: str
  debug: bool
  allowed_origins: tuple[str, ...]
  log_max_bytes: int
  log_backup_count: int
  log_http_4xx: bool
  gemini_api_key: str | None
  gemini_model: str
  generation_temperature: float
  generation_top_k: int
  generation_top_p: float
  generation_max_output_tokens: int
  generation_timeout_seconds: float
  lesson_store: str
  pg_dsn: str | None
  pg_connect_timeout: int


@dataclass(frozen=True)
class DatabaseSettings:
  """Typed settings for database connectivity."""

  debug: bool
  pg_dsn: str | None
  pg_connect_timeout: int


def _parse_origins(raw: str | None) -> tuple[str, ...]:
  if not raw:
    return ("http://localhost:3000",)

  origins = [origin.strip() for origin in raw.split(",") if origin.strip()]

  if not origins:
    raise ValueError("LEARNOS_ALLOWED_ORIGINS must include at least one origin.")

  if "*" in origins:
    raise ValueError("LEARNOS_ALLOWED_ORIGINS must not include wildcard origins.")

  return tuple(origins)


def _parse_bool(raw: str | None) -> bool:
  """Parse a boolean-ish string from environment variables."""
  if raw is None:
    return False

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _positive_int(name: str, default: str) -> int:
  value = int(os.getenv(name, default))
  if value <= 0:
    raise ValueError(f"{name} must be a positive integer.")
  return value


def _unit_float(name: str, default: str, *, upper: float) -> float:
  value = float(os.getenv(name, default))
  if value < 0 or value > upper:
    raise ValueError(f"{name} must be between 0 and {upper}.")
  return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""
  environment = os.getenv("LEARNOS_ENV", "development").lower()
  debug = _parse_bool(os.getenv("LEARNOS_DEBUG"))

  log_max_bytes = _positive_int("LEARNOS_LOG_MAX_BYTES", "5242880")  # 5MB default
  log_backup_count = int(os.getenv("LEARNOS_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("LEARNOS_LOG_BACKUP_COUNT must be zero or a positive integer.")

  generation_timeout_seconds = float(os.getenv("LEARNOS_GENERATION_TIMEOUT_SECONDS", "60"))
  if generation_timeout_seconds <= 0:
    raise ValueError("LEARNOS_GENERATION_TIMEOUT_SECONDS must be positive.")

  lesson_store = (os.getenv("LEARNOS_LESSON_STORE") or "postgres").strip().lower()
  if lesson_store not in _LESSON_STORES:
    raise ValueError(f"LEARNOS_LESSON_STORE must be one of {sorted(_LESSON_STORES)}.")

  # GOOGLE_API_KEY is the name earlier deployments used.
  gemini_api_key = _optional_str(os.getenv("GEMINI_API_KEY")) or _optional_str(os.getenv("GOOGLE_API_KEY"))

  database = get_database_settings()

  return Settings(
    environment=environment,
    debug=debug,
    allowed_origins=_parse_origins(os.getenv("LEARNOS_ALLOWED_ORIGINS")),
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
    log_http_4xx=_parse_bool(os.getenv("LEARNOS_LOG_HTTP_4XX")),
    gemini_api_key=gemini_api_key,
    gemini_model=(os.getenv("LEARNOS_GEMINI_MODEL") or "gemini-2.0-flash").strip(),
    generation_temperature=_unit_float("LEARNOS_GENERATION_TEMPERATURE", "0.7", upper=2.0),
    generation_top_k=_positive_int("LEARNOS_GENERATION_TOP_K", "40"),
    generation_top_p=_unit_float("LEARNOS_GENERATION_TOP_P", "0.95", upper=1.0),
    generation_max_output_tokens=_positive_int("LEARNOS_GENERATION_MAX_OUTPUT_TOKENS", "2048"),
    generation_timeout_seconds=generation_timeout_seconds,
    lesson_store=lesson_store,
    pg_dsn=database.pg_dsn,
    pg_connect_timeout=database.pg_connect_timeout,
  )


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
  """Load database settings without requiring web-runtime configuration."""
  debug = _parse_bool(os.getenv("LEARNOS_DEBUG"))
  pg_connect_timeout = _positive_int("LEARNOS_PG_CONNECT_TIMEOUT", "5")
  pg_dsn = _optional_str(os.getenv("LEARNOS_PG_DSN")) or _optional_str(os.getenv("DATABASE_URL"))
  return DatabaseSettings(debug=debug, pg_dsn=pg_dsn, pg_connect_timeout=pg_connect_timeout)


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  if value == "":
    return None
  return value
