"""Pydantic models describing a generated lesson plan."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

QUIZ_OPTION_COUNT = 4
QUIZ_QUESTION_COUNT = 3
MIN_SECTION_ITEMS = 2
MAX_SECTION_ITEMS = 3

NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]


class KeyConcept(BaseModel):
  """A fundamental idea with a short, jargon-free explanation."""

  title: NonEmptyStr
  explanation: NonEmptyStr
  model_config = ConfigDict(extra="ignore", frozen=True)


class Analogy(BaseModel):
  """An everyday comparison for one concept."""

  concept: NonEmptyStr
  analogy: NonEmptyStr
  model_config = ConfigDict(extra="ignore", frozen=True)


class QuizQuestion(BaseModel):
  """Four-option multiple-choice question with a zero-based answer index."""

  question: NonEmptyStr
  options: list[NonEmptyStr] = Field(min_length=QUIZ_OPTION_COUNT, max_length=QUIZ_OPTION_COUNT)
  correct_answer: StrictInt = Field(alias="correctAnswer", ge=0, le=QUIZ_OPTION_COUNT - 1)
  model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class LessonPlanDocument(BaseModel):
  """Validated lesson content as produced by the generator."""

  key_concepts: list[KeyConcept] = Field(alias="keyConcepts", min_length=MIN_SECTION_ITEMS, max_length=MAX_SECTION_ITEMS)
  analogies: list[Analogy] = Field(min_length=MIN_SECTION_ITEMS, max_length=MAX_SECTION_ITEMS)
  quiz: list[QuizQuestion] = Field(min_length=QUIZ_QUESTION_COUNT, max_length=QUIZ_QUESTION_COUNT)
  model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

  def to_storage(self) -> dict[str, list[dict[str, Any]]]:
    """Return plain JSON-ready sections using the wire field names."""
    payload = self.model_dump(mode="json", by_alias=True)
    return {"key_concepts": payload["keyConcepts"], "analogies": payload["analogies"], "quiz": payload["quiz"]}
