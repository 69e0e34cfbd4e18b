"""Turn untrusted generator text into a validated lesson document."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from learnos.ai.json_parser import parse_json_with_fallback
from learnos.schema.lesson_models import LessonPlanDocument

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: tuple[str, ...] = ("keyConcepts", "analogies", "quiz")

# Opening fence with optional language tag, body, closing fence at the very end.
_FENCE_RE = re.compile(r"\A```[\w+-]*[ \t]*\r?\n?(?P<body>.*?)\r?\n?```\Z", re.DOTALL)
_LOG_PREVIEW_CHARS = 500


class LessonOutputError(Exception):
  """Base class for generator output that cannot become a lesson.

  The raw text is kept for diagnostics only and never rendered into the message.
  """

  def __init__(self, message: str, *, raw_text: str) -> None:
    super().__init__(message)
    self.raw_text = raw_text


class MalformedOutputError(LessonOutputError):
  """Generator output is not parseable JSON."""


class IncompleteStructureError(LessonOutputError):
  """Generator output parsed but does not have the lesson structure."""

  def __init__(self, message: str, *, raw_text: str, issues: list[str]) -> None:
    super().__init__(message, raw_text=raw_text)
    self.issues = issues


def strip_code_fences(raw_text: str) -> str:
  """Remove a surrounding ``` or ```json fence; other text is returned unchanged."""
  match = _FENCE_RE.match(raw_text.strip())
  if match is None:
    return raw_text
  return match.group("body").strip()


def _format_validation_issues(exc: ValidationError) -> list[str]:
  issues: list[str] = []
  for error in exc.errors():
    path = ".".join(str(part) for part in error["loc"]) or "<root>"
    issues.append(f"{path}: {error['msg']}")
  return issues


def _parse(raw_text: str) -> Any:
  cleaned = strip_code_fences(raw_text)
  try:
    return parse_json_with_fallback(cleaned)
  except json.JSONDecodeError as exc:
    logger.warning("Generator output is not valid JSON: %s; text=%r", exc, cleaned[:_LOG_PREVIEW_CHARS])
    raise MalformedOutputError("Failed to parse generator output as JSON.", raw_text=raw_text) from exc


def sanitize_lesson(raw_text: str) -> LessonPlanDocument:
  """Parse and validate generator output into a lesson document.

  Raises MalformedOutputError when the text is not JSON and IncompleteStructureError when
  a top-level section is missing or any field breaks the lesson shape (counts, types, answer range).
  """
  payload = _parse(raw_text)

  if not isinstance(payload, dict):
    raise IncompleteStructureError("Generator output is not a JSON object.", raw_text=raw_text, issues=[f"<root>: expected object, got {type(payload).__name__}"])

  missing = [name for name in REQUIRED_FIELDS if payload.get(name) is None]
  if missing:
    raise IncompleteStructureError(f"Lesson plan is missing required sections: {', '.join(missing)}.", raw_text=raw_text, issues=[f"{name}: Field required" for name in missing])

  try:
    return LessonPlanDocument.model_validate(payload)
  except ValidationError as exc:
    issues = _format_validation_issues(exc)
    logger.warning("Generator output failed lesson validation: %s", "; ".join(issues))
    raise IncompleteStructureError("Lesson plan does not match the required structure.", raw_text=raw_text, issues=issues) from exc
