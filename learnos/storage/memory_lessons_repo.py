"""In-process lesson repository for local development and tests."""

from __future__ import annotations

import asyncio
import copy

from learnos.storage.lessons_repo import LessonAlreadyExistsError, LessonRecord, LessonsRepository, LessonSummaryRecord


class InMemoryLessonsRepository(LessonsRepository):
  """Keep lessons in a dict; a lock makes insert-if-absent atomic per event loop."""

  def __init__(self) -> None:
    self._lessons: dict[str, LessonRecord] = {}
    self._lock = asyncio.Lock()

  async def get_lesson_by_key(self, topic_key: str) -> LessonRecord | None:
    record = self._lessons.get(topic_key)
    return copy.deepcopy(record) if record is not None else None

  async def insert_lesson_if_absent(self, record: LessonRecord) -> None:
    async with self._lock:
      if record.topic_key in self._lessons:
        raise LessonAlreadyExistsError(record.topic_key)
      # Copies on write and read keep stored lessons write-once.
      self._lessons[record.topic_key] = copy.deepcopy(record)

  async def list_lesson_summaries(self) -> list[LessonSummaryRecord]:
    records = sorted(self._lessons.values(), key=lambda record: record.created_at, reverse=True)
    return [LessonSummaryRecord(topic_key=record.topic_key, created_at=record.created_at) for record in records]
