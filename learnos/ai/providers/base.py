"""Base interfaces for AI models."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from learnos.config import _parse_bool

REPO_ROOT = Path(__file__).resolve().parents[3]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelResponse:
  """Raw text returned by a model call."""

  content: str
  usage: dict[str, int] | None = None


class AIModel(ABC):
  """Abstract base class for generator models."""

  name: str

  @abstractmethod
  async def generate_structured(self, prompt: str, schema: dict[str, Any]) -> ModelResponse:
    """Ask for JSON matching the schema and return the reply text without parsing it."""

  @staticmethod
  def dummy_response_enabled(agent_key: str) -> bool:
    return _parse_bool(os.getenv(f"LEARNOS_USE_DUMMY_{agent_key}_RESPONSE"))

  @staticmethod
  def load_dummy_response(agent_key: str) -> str | None:
    """Return a canned reply when LEARNOS_USE_DUMMY_<KEY>_RESPONSE is set, else None."""
    if not AIModel.dummy_response_enabled(agent_key):
      return None

    raw_path = os.getenv(f"LEARNOS_DUMMY_{agent_key}_RESPONSE_PATH")
    path = Path(raw_path) if raw_path else REPO_ROOT / "fixtures" / f"dummy_{agent_key.lower()}_response.md"
    if not path.is_absolute():
      path = REPO_ROOT / path

    try:
      return path.read_text(encoding="utf-8")
    except OSError as exc:
      raise RuntimeError(f"Dummy {agent_key} response is enabled but {path} is not readable: {exc}") from exc
