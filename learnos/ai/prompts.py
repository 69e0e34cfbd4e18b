"""Prompt and response schema for lesson plan generation."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from learnos.schema.lesson_models import MAX_SECTION_ITEMS, MIN_SECTION_ITEMS, QUIZ_OPTION_COUNT, QUIZ_QUESTION_COUNT

TEMPLATES_DIR = Path(__file__).with_name("templates")
JsonDict = dict[str, Any]


def _object_schema(fields: dict[str, JsonDict]) -> JsonDict:
  return {"type": "object", "properties": fields, "required": list(fields)}


def _string() -> JsonDict:
  return {"type": "string"}


LESSON_RESPONSE_SCHEMA: JsonDict = _object_schema(
  {
    "keyConcepts": {"type": "array", "items": _object_schema({"title": _string(), "explanation": _string()}), "minItems": MIN_SECTION_ITEMS, "maxItems": MAX_SECTION_ITEMS},
    "analogies": {"type": "array", "items": _object_schema({"concept": _string(), "analogy": _string()}), "minItems": MIN_SECTION_ITEMS, "maxItems": MAX_SECTION_ITEMS},
    "quiz": {
      "type": "array",
      "items": _object_schema(
        {
          "question": _string(),
          "options": {"type": "array", "items": _string(), "minItems": QUIZ_OPTION_COUNT, "maxItems": QUIZ_OPTION_COUNT},
          "correctAnswer": {"type": "integer", "minimum": 0, "maximum": QUIZ_OPTION_COUNT - 1},
        }
      ),
      "minItems": QUIZ_QUESTION_COUNT,
      "maxItems": QUIZ_QUESTION_COUNT,
    },
  }
)

_EXAMPLE_LESSON: JsonDict = {
  "keyConcepts": [{"title": "Concept Title", "explanation": "Clear, simple explanation of the concept"}],
  "analogies": [{"concept": "Concept being explained", "analogy": "Simple analogy explanation"}],
  "quiz": [{"question": "Question text", "options": [f"Option {n}" for n in range(1, QUIZ_OPTION_COUNT + 1)], "correctAnswer": 0}],
}


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
  return (TEMPLATES_DIR / name).read_text(encoding="utf-8")


def _replace_placeholders(template: str, values: dict[str, str]) -> str:
  """Substitute {{PLACEHOLDER}} markers with their values."""
  rendered = template
  for key, value in values.items():
    rendered = rendered.replace(f"{{{{{key}}}}}", value)
  return rendered


def build_lesson_prompt(topic: str) -> str:
  """Render the lesson plan prompt for the topic exactly as the learner typed it, surrounding whitespace included."""
  values = {
    # JSON quoting keeps embedded quotes in the topic from breaking the sentence.
    "TOPIC": json.dumps(topic, ensure_ascii=False),
    "MIN_ITEMS": str(MIN_SECTION_ITEMS),
    "MAX_ITEMS": str(MAX_SECTION_ITEMS),
    "QUESTION_COUNT": str(QUIZ_QUESTION_COUNT),
    "OPTION_COUNT": str(QUIZ_OPTION_COUNT),
    "LAST_OPTION_INDEX": str(QUIZ_OPTION_COUNT - 1),
    "EXAMPLE_JSON": json.dumps(_EXAMPLE_LESSON, indent=2),
  }
  return _replace_placeholders(_load_template("lesson_plan.md"), values).strip()
