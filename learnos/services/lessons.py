"""Cache-or-generate orchestration for lesson plans."""

from __future__ import annotations

import datetime
import logging
from typing import Protocol

from learnos.ai.errors import GenerationNotConfiguredError
from learnos.schema.sanitize_lesson import sanitize_lesson
from learnos.storage.lessons_repo import LessonAlreadyExistsError, LessonRecord, LessonsRepository, LessonSummaryRecord
from learnos.utils.topic_key import normalize_topic

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
  async def generate(self, topic: str) -> str: ...


class LessonGenerationError(Exception):
  """A lesson could not be produced; the originating error is kept as the cause."""

  def __init__(self, topic_key: str, cause: Exception) -> None:
    super().__init__(f"Lesson generation failed for topic key {topic_key!r}: {type(cause).__name__}")
    self.topic_key = topic_key
    self.cause = cause

  @property
  def is_configuration_error(self) -> bool:
    return isinstance(self.cause, GenerationNotConfiguredError)


class LessonService:
  """Serve each topic's lesson from the store, generating it at most once per topic key."""

  def __init__(self, repo: LessonsRepository, generator: TextGenerator) -> None:
    self._repo = repo
    self._generator = generator

  async def get_or_create_lesson(self, raw_topic: str | None) -> LessonRecord:
    """Return the stored lesson for the topic, generating and storing it on a miss.

    Raises InvalidTopicError for blank topics and LessonGenerationError when generation,
    sanitization or the store write fails. A lost insert race returns the winner's record.
    """
    topic_key = normalize_topic(raw_topic)

    existing = await self._repo.get_lesson_by_key(topic_key)
    if existing is not None:
      logger.info("Found cached lesson topic_key=%r", topic_key)
      return existing

    logger.info("Generating new lesson topic=%r topic_key=%r", raw_topic, topic_key)
    try:
      raw_text = await self._generator.generate(raw_topic)
      document = sanitize_lesson(raw_text)
    except Exception as exc:
      logger.error("Lesson generation failed topic_key=%r error=%s", topic_key, exc)
      raise LessonGenerationError(topic_key, exc) from exc

    sections = document.to_storage()
    record = LessonRecord(topic_key=topic_key, key_concepts=sections["key_concepts"], analogies=sections["analogies"], quiz=sections["quiz"], created_at=datetime.datetime.now(datetime.UTC))

    try:
      await self._repo.insert_lesson_if_absent(record)
    except LessonAlreadyExistsError:
      stored = await self._repo.get_lesson_by_key(topic_key)
      if stored is None:
        raise LessonGenerationError(topic_key, RuntimeError("Lesson vanished after a conflicting insert.")) from None
      logger.info("Lost insert race topic_key=%r; returning stored lesson", topic_key)
      return stored
    except Exception as exc:
      logger.error("Failed to store lesson topic_key=%r", topic_key, exc_info=True)
      raise LessonGenerationError(topic_key, exc) from exc

    logger.info("Saved new lesson topic_key=%r", topic_key)
    return record

  async def list_lessons(self) -> list[LessonSummaryRecord]:
    """Return summaries of all stored lessons."""
    return await self._repo.list_lesson_summaries()
