from __future__ import annotations

from fastapi import APIRouter, Depends

from learnos.api.deps import get_lesson_service
from learnos.api.models import GenerateLessonRequest, LessonPlanResponse, LessonSummaryResponse
from learnos.services.lessons import LessonService

router = APIRouter()


@router.get("/lessons", response_model=list[LessonSummaryResponse])
async def list_lessons(service: LessonService = Depends(get_lesson_service)) -> list[LessonSummaryResponse]:  # noqa: B008
  """Return topic and creation time for every saved lesson."""
  summaries = await service.list_lessons()
  return [LessonSummaryResponse.from_record(summary) for summary in summaries]


@router.post("/generate", response_model=LessonPlanResponse)
async def generate_lesson(request: GenerateLessonRequest, service: LessonService = Depends(get_lesson_service)) -> LessonPlanResponse:  # noqa: B008
  """Return the lesson for a topic, generating it on first request.

  InvalidTopicError and LessonGenerationError are mapped to 400/500 by the app's exception handlers.
  """
  record = await service.get_or_create_lesson(request.topic)
  return LessonPlanResponse.from_record(record)
