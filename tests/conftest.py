"""Shared fixtures for the LearnOS test suite."""

from __future__ import annotations

import asyncio
import json
import os

# Settings are cached on first import; pin the in-memory store before anything loads them.
os.environ["LEARNOS_LESSON_STORE"] = "memory"
os.environ.setdefault("LEARNOS_ENV", "test")

from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from learnos.api.deps import get_lesson_service  # noqa: E402
from learnos.main import app  # noqa: E402
from learnos.services.lessons import LessonService  # noqa: E402
from learnos.storage.memory_lessons_repo import InMemoryLessonsRepository  # noqa: E402


class FakeGenerator:
  """Stand-in for LessonGenerator that records topics and replays a canned reply."""

  def __init__(self, reply: str | Exception, *, pause: float = 0.0) -> None:
    self.reply = reply
    self.pause = pause
    self.calls: list[str] = []

  async def generate(self, topic: str) -> str:
    self.calls.append(topic)
    if self.pause:
      await asyncio.sleep(self.pause)
    if isinstance(self.reply, Exception):
      raise self.reply
    return self.reply


@pytest.fixture
def anyio_backend():
  return "asyncio"


@pytest.fixture
def gravity_lesson() -> dict[str, Any]:
  return {
    "keyConcepts": [
      {"title": "Mass attracts mass", "explanation": "Every object with mass pulls on every other object. The pull is stronger when objects are heavier."},
      {"title": "Distance weakens gravity", "explanation": "The farther apart two objects are, the weaker the pull between them."},
    ],
    "analogies": [
      {"concept": "Mass attracts mass", "analogy": "A bowling ball on a trampoline makes nearby marbles roll toward it."},
      {"concept": "Distance weakens gravity", "analogy": "A campfire feels less warm the farther you walk away from it."},
    ],
    "quiz": [
      {"question": "What makes gravity stronger?", "options": ["More mass", "More color", "More noise", "More light"], "correctAnswer": 0},
      {"question": "What happens to gravity as distance grows?", "options": ["It grows", "It weakens", "It stays the same", "It flips"], "correctAnswer": 1},
      {"question": "Which object pulls hardest on you?", "options": ["A pencil", "A car", "The Earth", "A cloud"], "correctAnswer": 2},
    ],
  }


@pytest.fixture
def gravity_reply(gravity_lesson: dict[str, Any]) -> str:
  """Generator reply text the way Gemini often sends it: fenced JSON."""
  return f"```json\n{json.dumps(gravity_lesson, indent=2)}\n```"


@pytest.fixture
def fake_generator_cls() -> type[FakeGenerator]:
  return FakeGenerator


@pytest.fixture
def fake_generator(gravity_reply: str) -> FakeGenerator:
  return FakeGenerator(gravity_reply)


@pytest.fixture
def memory_repo() -> InMemoryLessonsRepository:
  return InMemoryLessonsRepository()


@pytest.fixture
def lesson_service(memory_repo: InMemoryLessonsRepository, fake_generator: FakeGenerator) -> LessonService:
  return LessonService(memory_repo, fake_generator)


@pytest.fixture
async def async_client(lesson_service: LessonService):
  app.dependency_overrides[get_lesson_service] = lambda: lesson_service
  async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
    yield client
  app.dependency_overrides.clear()
