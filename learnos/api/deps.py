from __future__ import annotations

from fastapi import Depends

from learnos.ai.generation import build_lesson_generator
from learnos.config import Settings, get_settings
from learnos.services.lessons import LessonService
from learnos.storage.factory import build_lessons_repository


def get_lesson_service(settings: Settings = Depends(get_settings)) -> LessonService:  # noqa: B008
  """Build the lesson service for the configured store and model."""
  return LessonService(build_lessons_repository(settings), build_lesson_generator(settings))
