"""Tests for the terminal client against a mocked API."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from learnos.cli import GENERATION_ERROR_MESSAGE, LIST_ERROR_MESSAGE, _lessons, _study, build_parser


def _scripted(*lines: str):
  remaining = list(lines)

  async def read_line(prompt: str) -> str | None:
    return remaining.pop(0) if remaining else None

  return read_line


def _lesson_transport(lesson: dict[str, Any], *, fail_first: int = 0) -> tuple[httpx.MockTransport, list[str]]:
  topics: list[str] = []

  def handler(request: httpx.Request) -> httpx.Response:
    assert request.url.path == "/api/generate"
    topics.append(json.loads(request.content)["topic"])
    if len(topics) <= fail_first:
      return httpx.Response(500, json={"error": "Failed to generate lesson plan. Please try again."})
    return httpx.Response(200, json={"topic": topics[-1].lower(), "createdAt": "2026-01-01T00:00:00Z", **lesson})

  return httpx.MockTransport(handler), topics


@pytest.mark.anyio
async def test_study_walks_through_lesson_and_quiz(gravity_lesson: dict[str, Any]) -> None:
  transport, topics = _lesson_transport(gravity_lesson)
  output: list[str] = []
  args = build_parser().parse_args(["study", "Gravity", "--name", "Ada", "--reveal-delay", "0"])

  code = await _study(args, transport=transport, read_line=_scripted("1", "3", "3", "q"), write=output.append)

  assert code == 0
  assert topics == ["Gravity"]
  assert "Welcome to LearnOS, Ada!" in output
  assert "Generating..." in output
  assert "* Mass attracts mass" in output
  assert any(line.strip() == "✅ Correct! Well done." for line in output)
  assert any(line.strip() == "❌ Incorrect. The correct answer is option 2." for line in output)
  assert output[-1] == "You scored 2/3."


@pytest.mark.anyio
async def test_failed_generation_returns_to_topic_prompt(gravity_lesson: dict[str, Any]) -> None:
  transport, topics = _lesson_transport(gravity_lesson, fail_first=1)
  output: list[str] = []
  args = build_parser().parse_args(["study", "gravity", "--name", "Ada", "--reveal-delay", "0"])

  code = await _study(args, transport=transport, read_line=_scripted("Gravity", "q"), write=output.append)

  assert code == 0
  assert topics == ["gravity", "Gravity"]
  assert output.count(GENERATION_ERROR_MESSAGE) == 1
  assert "Key Concepts" in output


@pytest.mark.anyio
async def test_malformed_lesson_payload_is_reported(gravity_lesson: dict[str, Any]) -> None:
  broken = {key: value for key, value in gravity_lesson.items() if key != "quiz"}
  transport, _ = _lesson_transport(broken)
  output: list[str] = []
  args = build_parser().parse_args(["study", "gravity", "--name", "Ada"])

  await _study(args, transport=transport, read_line=_scripted("q"), write=output.append)

  assert GENERATION_ERROR_MESSAGE in output


@pytest.mark.anyio
async def test_name_is_required_before_studying(gravity_lesson: dict[str, Any]) -> None:
  transport, topics = _lesson_transport(gravity_lesson)
  output: list[str] = []
  args = build_parser().parse_args(["study"])

  code = await _study(args, transport=transport, read_line=_scripted("  ", "Ada", "q"), write=output.append)

  assert code == 0
  assert output[:2] == ["Please enter your name to begin!", "Welcome to LearnOS, Ada!"]
  assert topics == []


@pytest.mark.anyio
async def test_reset_and_new_topic_commands(gravity_lesson: dict[str, Any]) -> None:
  transport, topics = _lesson_transport(gravity_lesson)
  output: list[str] = []
  args = build_parser().parse_args(["study", "gravity", "--name", "Ada", "--reveal-delay", "0"])

  code = await _study(args, transport=transport, read_line=_scripted("2", "r", "1", "n", "q"), write=output.append)

  assert code == 0
  assert "Quiz reset." in output
  assert topics == ["gravity"]


@pytest.mark.anyio
async def test_lessons_lists_saved_topics() -> None:
  def handler(request: httpx.Request) -> httpx.Response:
    assert request.url.path == "/api/lessons"
    return httpx.Response(200, json=[{"topic": "gravity", "createdAt": "2026-01-02T00:00:00Z"}, {"topic": "magnetism", "createdAt": "2026-01-01T00:00:00Z"}])

  output: list[str] = []
  code = await _lessons(build_parser().parse_args(["lessons"]), transport=httpx.MockTransport(handler), write=output.append)

  assert code == 0
  assert output == ["2026-01-02T00:00:00Z  gravity", "2026-01-01T00:00:00Z  magnetism"]


@pytest.mark.anyio
async def test_lessons_reports_server_errors() -> None:
  transport = httpx.MockTransport(lambda request: httpx.Response(500, json={"error": "Something went wrong!"}))
  output: list[str] = []

  code = await _lessons(build_parser().parse_args(["lessons"]), transport=transport, write=output.append)

  assert code == 1
  assert output == [LIST_ERROR_MESSAGE]
