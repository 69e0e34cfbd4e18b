from __future__ import annotations

from learnos.config import Settings
from learnos.storage.lessons_repo import LessonsRepository
from learnos.storage.memory_lessons_repo import InMemoryLessonsRepository
from learnos.storage.postgres_lessons_repo import PostgresLessonsRepository

_memory_repo: InMemoryLessonsRepository | None = None


def build_lessons_repository(settings: Settings) -> LessonsRepository:
  """Return the configured lessons repository."""
  if settings.lesson_store == "memory":
    # One shared instance so the cache survives across requests.
    global _memory_repo
    if _memory_repo is None:
      _memory_repo = InMemoryLessonsRepository()
    return _memory_repo

  if not settings.pg_dsn:
    raise ValueError("LEARNOS_PG_DSN must be set to enable Postgres persistence.")

  return PostgresLessonsRepository()
