"""Gemini model implementation using the google-genai SDK."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from learnos.ai.errors import GenerationFailedError, GenerationNotConfiguredError
from learnos.ai.providers.base import AIModel, ModelResponse

LESSON_AGENT_KEY = "LESSON"

logger = logging.getLogger(__name__)


class GeminiModel(AIModel):
  """Gemini client returning raw JSON-mode replies."""

  def __init__(self, name: str, api_key: str | None, *, temperature: float, top_k: int, top_p: float, max_output_tokens: int) -> None:
    self.name = name
    self._generation_params = {"temperature": temperature, "top_k": top_k, "top_p": top_p, "max_output_tokens": max_output_tokens}
    self._client: genai.Client | None = None

    if api_key:
      self._client = genai.Client(api_key=api_key)
    elif not self.dummy_response_enabled(LESSON_AGENT_KEY):
      raise GenerationNotConfiguredError("Gemini API key not configured. Please add GEMINI_API_KEY to your .env file.")

  async def generate_structured(self, prompt: str, schema: dict[str, Any]) -> ModelResponse:
    """Call generateContent in JSON mode and return the reply text."""
    dummy = self.load_dummy_response(LESSON_AGENT_KEY)
    if dummy is not None:
      logger.info("Gemini dummy lesson response used (%d chars)", len(dummy))
      return ModelResponse(content=dummy)

    if self._client is None:
      raise GenerationNotConfiguredError("Gemini API key not configured. Please add GEMINI_API_KEY to your .env file.")

    config = types.GenerateContentConfig(response_mime_type="application/json", response_schema=schema, **self._generation_params)
    try:
      response = await self._client.aio.models.generate_content(model=self.name, contents=prompt, config=config)
    except genai_errors.APIError as exc:
      raise GenerationFailedError("Gemini API error", status_code=exc.code, detail=exc.message or exc.status) from exc
    except httpx.HTTPError as exc:
      raise GenerationFailedError("Gemini request failed", detail=f"{type(exc).__name__}: {exc}") from exc
    except ValueError as exc:
      raise GenerationFailedError("Gemini returned an unreadable response", detail=f"{type(exc).__name__}: {exc}") from exc

    text = response.text
    if not text:
      finish_reason = None
      if response.candidates:
        finish_reason = response.candidates[0].finish_reason
      raise GenerationFailedError("Invalid response structure from Gemini API", detail=f"empty reply, finish_reason={finish_reason}")

    logger.debug("Gemini lesson response:\n%s", text)
    usage = None
    if response.usage_metadata:
      usage = {
        "prompt_tokens": response.usage_metadata.prompt_token_count or 0,
        "completion_tokens": response.usage_metadata.candidates_token_count or 0,
        "total_tokens": response.usage_metadata.total_token_count or 0,
      }
    return ModelResponse(content=text, usage=usage)
