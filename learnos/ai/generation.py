"""Lesson generation against the external model."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from learnos.ai.errors import GenerationFailedError
from learnos.ai.prompts import LESSON_RESPONSE_SCHEMA, build_lesson_prompt
from learnos.ai.providers.base import AIModel
from learnos.ai.providers.gemini import GeminiModel
from learnos.config import Settings

logger = logging.getLogger(__name__)

ModelFactory = Callable[[], AIModel]


class LessonGenerator:
  """Send the lesson prompt and schema to the model and hand back the raw reply.

  Parsing is left to the sanitizer. A failed call is reported once and never retried.
  """

  def __init__(self, model_factory: ModelFactory, *, timeout_seconds: float) -> None:
    self._model_factory = model_factory
    self._timeout_seconds = timeout_seconds

  async def generate(self, topic: str) -> str:
    # The model is built per call so a missing key fails only on a cache miss.
    model = self._model_factory()
    prompt = build_lesson_prompt(topic)
    start = time.monotonic()
    try:
      response = await asyncio.wait_for(model.generate_structured(prompt, LESSON_RESPONSE_SCHEMA), timeout=self._timeout_seconds)
    except TimeoutError as exc:
      raise GenerationFailedError("Lesson generation timed out", detail=f"no reply within {self._timeout_seconds:g}s") from exc

    latency_ms = int((time.monotonic() - start) * 1000)
    logger.info("Generated lesson text model=%s latency_ms=%s chars=%s usage=%s", model.name, latency_ms, len(response.content), response.usage)
    return response.content


def build_lesson_generator(settings: Settings) -> LessonGenerator:
  """Wire a LessonGenerator to the configured Gemini model."""

  def _model_factory() -> AIModel:
    return GeminiModel(
      settings.gemini_model,
      settings.gemini_api_key,
      temperature=settings.generation_temperature,
      top_k=settings.generation_top_k,
      top_p=settings.generation_top_p,
      max_output_tokens=settings.generation_max_output_tokens,
    )

  return LessonGenerator(_model_factory, timeout_seconds=settings.generation_timeout_seconds)
