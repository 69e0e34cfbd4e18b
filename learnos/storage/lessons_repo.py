"""Storage interfaces and records for lesson persistence."""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any, Protocol


class LessonAlreadyExistsError(Exception):
  """Raised when a lesson for the topic key has already been stored."""

  def __init__(self, topic_key: str) -> None:
    super().__init__(f"Lesson already stored for topic key {topic_key!r}.")
    self.topic_key = topic_key


@dataclass(frozen=True)
class LessonRecord:
  """Write-once lesson artifact keyed by its normalized topic."""

  topic_key: str
  key_concepts: list[dict[str, Any]]
  analogies: list[dict[str, Any]]
  quiz: list[dict[str, Any]]
  created_at: datetime.datetime


@dataclass(frozen=True)
class LessonSummaryRecord:
  """Topic and creation time of a stored lesson."""

  topic_key: str
  created_at: datetime.datetime


class LessonsRepository(Protocol):
  """Repository contract for lesson persistence.

  Lessons are immutable once stored, so the contract has no update or delete.
  """

  async def get_lesson_by_key(self, topic_key: str) -> LessonRecord | None:
    """Fetch the stored lesson for a topic key."""

  async def insert_lesson_if_absent(self, record: LessonRecord) -> None:
    """Persist a lesson unless its topic key exists; raise LessonAlreadyExistsError otherwise."""

  async def list_lesson_summaries(self) -> list[LessonSummaryRecord]:
    """Return topic and creation time for every stored lesson."""
