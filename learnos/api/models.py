from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from learnos.schema.lesson_models import Analogy, KeyConcept, QuizQuestion
from learnos.storage.lessons_repo import LessonRecord, LessonSummaryRecord


class GenerateLessonRequest(BaseModel):
  """Request payload for lesson generation."""

  topic: StrictStr | None = Field(default=None, description="Topic to learn about; matched case-insensitively.", examples=["Photosynthesis"])
  model_config = ConfigDict(extra="ignore")


class LessonPlanResponse(BaseModel):
  """A stored lesson plan."""

  topic: str
  key_concepts: list[KeyConcept] = Field(alias="keyConcepts")
  analogies: list[Analogy]
  quiz: list[QuizQuestion]
  created_at: datetime.datetime = Field(alias="createdAt")
  model_config = ConfigDict(populate_by_name=True)

  @classmethod
  def from_record(cls, record: LessonRecord) -> LessonPlanResponse:
    return cls.model_validate({"topic": record.topic_key, "keyConcepts": record.key_concepts, "analogies": record.analogies, "quiz": record.quiz, "createdAt": record.created_at})


class LessonSummaryResponse(BaseModel):
  """Topic and creation time of a stored lesson."""

  topic: str
  created_at: datetime.datetime = Field(alias="createdAt")
  model_config = ConfigDict(populate_by_name=True)

  @classmethod
  def from_record(cls, record: LessonSummaryRecord) -> LessonSummaryResponse:
    return cls(topic=record.topic_key, created_at=record.created_at)
