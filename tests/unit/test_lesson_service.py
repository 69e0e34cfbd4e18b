"""Tests for cache-or-generate lesson orchestration."""

from __future__ import annotations

import asyncio
import datetime
import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from learnos.ai.errors import GenerationFailedError, GenerationNotConfiguredError
from learnos.ai.generation import LessonGenerator
from learnos.ai.providers.gemini import GeminiModel
from learnos.schema.sanitize_lesson import IncompleteStructureError, MalformedOutputError
from learnos.services.lessons import LessonGenerationError, LessonService
from learnos.storage.lessons_repo import LessonAlreadyExistsError, LessonRecord
from learnos.utils.topic_key import InvalidTopicError


def _record(topic_key: str, lesson: dict[str, Any]) -> LessonRecord:
  return LessonRecord(topic_key=topic_key, key_concepts=lesson["keyConcepts"], analogies=lesson["analogies"], quiz=lesson["quiz"], created_at=datetime.datetime(2026, 1, 1, tzinfo=datetime.UTC))


@pytest.mark.anyio
async def test_second_request_is_served_from_the_store(lesson_service: LessonService, fake_generator) -> None:
  first = await lesson_service.get_or_create_lesson("Gravity")
  second = await lesson_service.get_or_create_lesson("  gRAVITY ")

  assert fake_generator.calls == ["Gravity"]
  assert second == first
  assert first.topic_key == "gravity"
  assert first.created_at.tzinfo is not None


@pytest.mark.anyio
async def test_generator_receives_the_topic_as_typed(lesson_service: LessonService, fake_generator) -> None:
  await lesson_service.get_or_create_lesson("Black Holes")
  assert fake_generator.calls == ["Black Holes"]


@pytest.mark.anyio
async def test_invalid_topic_fails_before_any_io(fake_generator) -> None:
  repo = AsyncMock()
  service = LessonService(repo, fake_generator)

  with pytest.raises(InvalidTopicError):
    await service.get_or_create_lesson("   ")

  repo.get_lesson_by_key.assert_not_called()
  assert fake_generator.calls == []


@pytest.mark.anyio
async def test_concurrent_first_requests_store_one_lesson(memory_repo, fake_generator_cls, gravity_reply: str) -> None:
  generator = fake_generator_cls(gravity_reply, pause=0.01)
  service = LessonService(memory_repo, generator)

  results = await asyncio.gather(*(service.get_or_create_lesson(topic) for topic in ("gravity", "Gravity", " GRAVITY ")))

  summaries = await memory_repo.list_lesson_summaries()
  assert len(summaries) == 1
  stored = await memory_repo.get_lesson_by_key("gravity")
  assert all(result == stored for result in results)


@pytest.mark.anyio
@pytest.mark.parametrize(
  ("reply", "cause_type"),
  [
    ("definitely not json", MalformedOutputError),
    (json.dumps({"keyConcepts": [], "analogies": []}), IncompleteStructureError),
    (GenerationFailedError("Gemini API error", status_code=503), GenerationFailedError),
    (json.JSONDecodeError("Expecting value", "<html>gateway</html>", 0), json.JSONDecodeError),
    (RuntimeError("Dummy LESSON response is enabled but /nonexistent.md is not readable"), RuntimeError),
  ],
)
async def test_failures_are_wrapped_and_nothing_is_stored(memory_repo, fake_generator_cls, reply, cause_type) -> None:
  service = LessonService(memory_repo, fake_generator_cls(reply))

  with pytest.raises(LessonGenerationError) as excinfo:
    await service.get_or_create_lesson("gravity")

  assert isinstance(excinfo.value.cause, cause_type)
  assert excinfo.value.topic_key == "gravity"
  assert not excinfo.value.is_configuration_error
  assert await memory_repo.list_lesson_summaries() == []


@pytest.mark.anyio
async def test_missing_api_key_is_flagged_as_configuration_error(memory_repo, fake_generator_cls) -> None:
  service = LessonService(memory_repo, fake_generator_cls(GenerationNotConfiguredError("Gemini API key not configured.")))

  with pytest.raises(LessonGenerationError) as excinfo:
    await service.get_or_create_lesson("gravity")

  assert excinfo.value.is_configuration_error


@pytest.mark.anyio
async def test_lost_insert_race_returns_the_stored_lesson(fake_generator, gravity_lesson) -> None:
  winner = _record("gravity", gravity_lesson)
  repo = AsyncMock()
  repo.get_lesson_by_key.side_effect = [None, winner]
  repo.insert_lesson_if_absent.side_effect = LessonAlreadyExistsError("gravity")
  service = LessonService(repo, fake_generator)

  result = await service.get_or_create_lesson("gravity")

  assert result is winner
  assert repo.get_lesson_by_key.await_count == 2


@pytest.mark.anyio
async def test_conflict_without_a_stored_row_is_an_error(fake_generator) -> None:
  repo = AsyncMock()
  repo.get_lesson_by_key.return_value = None
  repo.insert_lesson_if_absent.side_effect = LessonAlreadyExistsError("gravity")
  service = LessonService(repo, fake_generator)

  with pytest.raises(LessonGenerationError):
    await service.get_or_create_lesson("gravity")


@pytest.mark.anyio
async def test_store_fault_is_wrapped(fake_generator) -> None:
  repo = AsyncMock()
  repo.get_lesson_by_key.return_value = None
  repo.insert_lesson_if_absent.side_effect = ConnectionError("database unavailable")
  service = LessonService(repo, fake_generator)

  with pytest.raises(LessonGenerationError) as excinfo:
    await service.get_or_create_lesson("gravity")

  assert isinstance(excinfo.value.cause, ConnectionError)


@pytest.mark.anyio
async def test_list_lessons_delegates_to_the_store(lesson_service: LessonService) -> None:
  await lesson_service.get_or_create_lesson("gravity")
  summaries = await lesson_service.list_lessons()
  assert [summary.topic_key for summary in summaries] == ["gravity"]


@pytest.mark.anyio
async def test_non_json_gemini_reply_is_a_generation_failure(memory_repo, monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.delenv("LEARNOS_USE_DUMMY_LESSON_RESPONSE", raising=False)
  model = GeminiModel("gemini-test", "test-key", temperature=0.7, top_k=40, top_p=0.95, max_output_tokens=2048)
  client = MagicMock()
  client.aio.models.generate_content = AsyncMock(side_effect=json.JSONDecodeError("Expecting value", "<html>gateway</html>", 0))
  model._client = client
  service = LessonService(memory_repo, LessonGenerator(lambda: model, timeout_seconds=5))

  with pytest.raises(LessonGenerationError) as excinfo:
    await service.get_or_create_lesson("gravity")

  assert isinstance(excinfo.value.cause, GenerationFailedError)
  assert not excinfo.value.is_configuration_error
  assert await memory_repo.list_lesson_summaries() == []


@pytest.mark.anyio
async def test_unreadable_dummy_reply_is_a_generation_failure(memory_repo, monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("LEARNOS_USE_DUMMY_LESSON_RESPONSE", "true")
  monkeypatch.setenv("LEARNOS_DUMMY_LESSON_RESPONSE_PATH", "/nonexistent.md")
  model = GeminiModel("gemini-test", None, temperature=0.7, top_k=40, top_p=0.95, max_output_tokens=2048)
  service = LessonService(memory_repo, LessonGenerator(lambda: model, timeout_seconds=5))

  with pytest.raises(LessonGenerationError) as excinfo:
    await service.get_or_create_lesson("gravity")

  assert "not readable" in str(excinfo.value.cause)
  assert await memory_repo.list_lesson_summaries() == []
