"""Errors raised at the generator boundary."""

from __future__ import annotations


class GenerationFailedError(RuntimeError):
  """The external generator call did not produce a usable reply."""

  def __init__(self, message: str, *, status_code: int | None = None, detail: str | None = None) -> None:
    super().__init__(message)
    self.status_code = status_code
    self.detail = detail

  def __str__(self) -> str:
    base = super().__str__()
    if self.status_code is not None:
      base = f"{base} (status={self.status_code})"
    if self.detail:
      base = f"{base}: {self.detail}"
    return base


class GenerationNotConfiguredError(GenerationFailedError):
  """No API key is configured for the generator."""
