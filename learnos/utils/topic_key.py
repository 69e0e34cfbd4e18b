"""Canonical cache keys for lesson topics."""

from __future__ import annotations

from typing import Any


class InvalidTopicError(ValueError):
  """Raised when a topic is missing or blank."""

  def __init__(self, message: str = "Topic is required") -> None:
    super().__init__(message)


def normalize_topic(raw_topic: Any) -> str:
  """Trim and case-fold a user topic into its lesson cache key.

  "Black Holes" and " black holes " map to the same key.
  """
  if not isinstance(raw_topic, str):
    raise InvalidTopicError()

  key = raw_topic.strip().casefold()
  if not key:
    raise InvalidTopicError()

  return key
