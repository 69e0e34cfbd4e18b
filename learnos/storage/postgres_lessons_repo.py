"""Postgres-backed repository for lesson persistence using SQLAlchemy."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import Insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import DBAPIError, IntegrityError

from learnos.core.database import get_session_factory
from learnos.schema.lessons import LessonPlan
from learnos.storage.lessons_repo import LessonAlreadyExistsError, LessonRecord, LessonsRepository, LessonSummaryRecord

logger = logging.getLogger(__name__)

_UNIQUE_VIOLATION = "23505"


def _extract_sqlstate(exc: Exception) -> str | None:
  """Extract the Postgres SQLSTATE from a SQLAlchemy exception."""
  if isinstance(exc, DBAPIError) and exc.orig is not None:
    for attr in ("sqlstate", "pgcode"):
      value = getattr(exc.orig, attr, None)
      if value:
        return str(value)
  return None


def build_insert_if_absent_statement(record: LessonRecord) -> Insert:
  """Build the single-statement insert that loses quietly on a duplicate topic key."""
  return (
    pg_insert(LessonPlan)
    .values(topic_key=record.topic_key, key_concepts=record.key_concepts, analogies=record.analogies, quiz=record.quiz, created_at=record.created_at)
    .on_conflict_do_nothing(index_elements=[LessonPlan.topic_key])
    .returning(LessonPlan.id)
  )


class PostgresLessonsRepository(LessonsRepository):
  """Persist lessons to Postgres using SQLAlchemy."""

  def __init__(self) -> None:
    self._session_factory = get_session_factory()
    if self._session_factory is None:
      raise RuntimeError("Database not initialized (LEARNOS_PG_DSN is missing).")

  async def get_lesson_by_key(self, topic_key: str) -> LessonRecord | None:
    """Fetch the stored lesson for a topic key."""
    async with self._session_factory() as session:
      result = await session.execute(select(LessonPlan).where(LessonPlan.topic_key == topic_key))
      lesson = result.scalar_one_or_none()
      if lesson is None:
        return None
      return self._model_to_record(lesson)

  async def insert_lesson_if_absent(self, record: LessonRecord) -> None:
    """Insert a lesson; the unique index on topic_key arbitrates concurrent writers."""
    async with self._session_factory() as session:
      try:
        result = await session.execute(build_insert_if_absent_statement(record))
        inserted_id = result.scalar_one_or_none()
        await session.commit()
      except IntegrityError as exc:
        await session.rollback()
        if _extract_sqlstate(exc) == _UNIQUE_VIOLATION:
          raise LessonAlreadyExistsError(record.topic_key) from exc
        raise

    if inserted_id is None:
      raise LessonAlreadyExistsError(record.topic_key)
    logger.debug("Inserted lesson row id=%s topic_key=%s", inserted_id, record.topic_key)

  async def list_lesson_summaries(self) -> list[LessonSummaryRecord]:
    """Return topic and creation time for every stored lesson, newest first."""
    async with self._session_factory() as session:
      stmt = select(LessonPlan.topic_key, LessonPlan.created_at).order_by(LessonPlan.created_at.desc())
      result = await session.execute(stmt)
      return [LessonSummaryRecord(topic_key=row.topic_key, created_at=row.created_at) for row in result.all()]

  def _model_to_record(self, lesson: LessonPlan) -> LessonRecord:
    """Convert a SQLAlchemy model to a domain record."""
    return LessonRecord(topic_key=lesson.topic_key, key_concepts=list(lesson.key_concepts), analogies=list(lesson.analogies), quiz=list(lesson.quiz), created_at=lesson.created_at)
