"""Terminal client for the LearnOS API."""

from __future__ import annotations

import argparse
import asyncio
import os
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import httpx

from learnos.quiz.reveal import DEFAULT_REVEAL_DELAY_SECONDS, QuizSession
from learnos.quiz.view import OptionMark, QuestionView, QuizView

DEFAULT_SERVER_URL = "http://localhost:3000"
GENERATION_ERROR_MESSAGE = "Sorry, there was an error generating your lesson. Please try again."
LIST_ERROR_MESSAGE = "Sorry, the saved lessons could not be loaded."
QUIZ_HELP = "Answer with 1-4, r resets the quiz, n picks a new topic, q quits."

ReadLine = Callable[[str], Awaitable[str | None]]
WriteLine = Callable[[str], None]

_MARKS = {OptionMark.NONE: "[ ]", OptionMark.SELECTED: "[*]", OptionMark.CORRECT: "[✓]", OptionMark.INCORRECT: "[✗]"}


class LearnOSClient:
  """Thin async wrapper over the two lesson endpoints."""

  def __init__(self, http: httpx.AsyncClient) -> None:
    self._http = http

  async def generate(self, topic: str) -> dict[str, Any]:
    response = await self._http.post("/api/generate", json={"topic": topic})
    response.raise_for_status()
    payload = response.json()
    if not isinstance(payload, dict):
      raise ValueError("Lesson response was not a JSON object.")
    return payload

  async def list_lessons(self) -> list[dict[str, Any]]:
    response = await self._http.get("/api/lessons")
    response.raise_for_status()
    payload = response.json()
    if not isinstance(payload, list):
      raise ValueError("Lesson list response was not a JSON array.")
    return payload


async def read_stdin(prompt: str) -> str | None:
  """Read one line without blocking the event loop; None on end of input."""
  try:
    return await asyncio.to_thread(input, prompt)
  except EOFError:
    return None


def format_question(question: QuestionView) -> list[str]:
  lines = [f"{question.number}. {question.prompt}"]
  lines.extend(f"   {_MARKS[option.mark]} {option.number}) {option.text}" for option in question.options)
  if question.feedback:
    lines.append(f"   {question.feedback}")
  return lines


def format_lesson(lesson: dict[str, Any]) -> list[str]:
  lines = ["", "Key Concepts", "------------"]
  for concept in lesson.get("keyConcepts", []):
    lines.append(f"* {concept['title']}")
    lines.append(f"  {concept['explanation']}")
  lines.extend(["", "Analogies", "---------"])
  for analogy in lesson.get("analogies", []):
    lines.append(f"* {analogy['concept']}: {analogy['analogy']}")
  lines.extend(["", "Quiz", "----"])
  return lines


def _next_unanswered(view: QuizView) -> QuestionView | None:
  for question in view.questions:
    if not question.answered:
      return question
  return None


class StudyConsole:
  """Interactive study loop: topic prompt, lesson display, then the quiz."""

  def __init__(self, client: LearnOSClient, *, read_line: ReadLine, write: WriteLine, reveal_delay_seconds: float = DEFAULT_REVEAL_DELAY_SECONDS) -> None:
    self._client = client
    self._read_line = read_line
    self._write = write
    self._session = QuizSession(reveal_delay_seconds=reveal_delay_seconds)

  async def run(self, *, name: str | None, topic: str | None = None) -> int:
    learner = await self._ask_name(name)
    if learner is None:
      return 0
    self._write(f"Welcome to LearnOS, {learner}!")

    pending_topic = topic
    while True:
      chosen = (pending_topic or "").strip() or await self._ask_topic()
      pending_topic = None
      if chosen is None:
        return 0

      self._write("Generating...")
      try:
        lesson = await self._client.generate(chosen)
        view = self._session.on_lesson_loaded(lesson["quiz"])
      except (httpx.HTTPError, ValueError, KeyError, TypeError):
        self._write(GENERATION_ERROR_MESSAGE)
        continue

      for line in format_lesson(lesson):
        self._write(line)
      if not await self._run_quiz(view):
        return 0

  async def _ask_name(self, name: str | None) -> str | None:
    while not (name or "").strip():
      name = await self._read_line("Enter your name: ")
      if name is None:
        return None
      if not name.strip():
        self._write("Please enter your name to begin!")
    return name.strip()

  async def _ask_topic(self) -> str | None:
    while True:
      raw = await self._read_line("What would you like to learn about? (q to quit) ")
      if raw is None or raw.strip().lower() == "q":
        return None
      if raw.strip():
        return raw.strip()
      self._write("Please enter a topic to learn about!")

  async def _run_quiz(self, view: QuizView) -> bool:
    """Drive the quiz; returns False when the learner quits, True for a new topic."""
    self._write(QUIZ_HELP)
    current = _next_unanswered(view)
    if current is not None:
      self._show(current)

    while True:
      prompt = f"Question {current.number} > " if current is not None else "Quiz complete. r to retry, n for a new topic, q to quit > "
      command = await self._read_line(prompt)
      if command is None:
        return False
      command = command.strip().lower()

      if command == "q":
        return False
      if command == "n":
        return True
      if command == "r":
        view = self._session.on_reset()
        self._write("Quiz reset.")
      elif command.isdigit() and current is not None:
        result = self._session.on_option_selected(current.number - 1, int(command) - 1)
        if result is None:
          self._write(QUIZ_HELP)
          continue
        view = await self._session.wait_for_reveals()
        self._show(view.questions[current.number - 1])
        if view.is_complete:
          self._write(f"You scored {view.correct_count}/{view.total}.")
      else:
        self._write(QUIZ_HELP)
        continue

      current = _next_unanswered(view)
      if current is not None:
        self._show(current)

  def _show(self, question: QuestionView) -> None:
    for line in format_question(question):
      self._write(line)


async def _study(args: argparse.Namespace, *, transport: httpx.AsyncBaseTransport | None = None, read_line: ReadLine = read_stdin, write: WriteLine = print) -> int:
  async with httpx.AsyncClient(base_url=args.server, timeout=args.timeout, transport=transport) as http:
    console = StudyConsole(LearnOSClient(http), read_line=read_line, write=write, reveal_delay_seconds=args.reveal_delay)
    return await console.run(name=args.name, topic=args.topic)


async def _lessons(args: argparse.Namespace, *, transport: httpx.AsyncBaseTransport | None = None, write: WriteLine = print) -> int:
  async with httpx.AsyncClient(base_url=args.server, timeout=args.timeout, transport=transport) as http:
    try:
      lessons = await LearnOSClient(http).list_lessons()
    except (httpx.HTTPError, ValueError):
      write(LIST_ERROR_MESSAGE)
      return 1

  if not lessons:
    write("No lessons saved yet.")
    return 0
  for lesson in lessons:
    write(f"{lesson.get('createdAt', '')}  {lesson.get('topic', '')}")
  return 0


def build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(prog="learnos", description="Study any topic with AI-generated beginner lessons.")
  parser.add_argument("--server", default=os.getenv("LEARNOS_SERVER_URL", DEFAULT_SERVER_URL), help="Base URL of the LearnOS API.")
  parser.add_argument("--timeout", type=float, default=90.0, help="Seconds to wait for the API.")
  subparsers = parser.add_subparsers(dest="command", required=True)

  study = subparsers.add_parser("study", help="Generate a lesson and take its quiz.")
  study.add_argument("topic", nargs="?", help="Topic to learn about; asked interactively when omitted.")
  study.add_argument("--name", help="Your name; asked interactively when omitted.")
  study.add_argument("--reveal-delay", type=float, default=DEFAULT_REVEAL_DELAY_SECONDS, help="Seconds before an answer's verdict is shown.")

  subparsers.add_parser("lessons", help="List saved lesson topics.")
  return parser


def main(argv: Sequence[str] | None = None) -> int:
  args = build_parser().parse_args(argv)
  if args.command == "study":
    return asyncio.run(_study(args))
  return asyncio.run(_lessons(args))
