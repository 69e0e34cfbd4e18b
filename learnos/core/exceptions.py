import logging
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from learnos.services.lessons import LessonGenerationError
from learnos.utils.topic_key import InvalidTopicError

GENERIC_ERROR_MESSAGE = "Something went wrong!"
ROUTE_NOT_FOUND_MESSAGE = "Route not found"
GENERATION_FAILED_MESSAGE = "Failed to generate lesson plan. Please try again."
API_KEY_MISSING_MESSAGE = "Gemini API key not configured. Please add GEMINI_API_KEY to your .env file."


def _coerce_json_safe(value: Any) -> Any:
  """Convert unsupported values into JSON-safe primitives for error responses."""
  # Keep native JSON primitives unchanged.
  if value is None or isinstance(value, bool | int | float | str):
    return value
  if isinstance(value, dict):
    return {str(key): _coerce_json_safe(item) for key, item in value.items()}
  if isinstance(value, list | tuple | set):
    return [_coerce_json_safe(item) for item in value]
  # Exceptions in pydantic ctx payloads are not serializable.
  if isinstance(value, BaseException):
    error_message = str(value)
    if error_message:
      return f"{type(value).__name__}: {error_message}"
    return type(value).__name__
  return str(value)


def _error_payload(message: str, **extra: Any) -> dict[str, Any]:
  """Build the `{"error": ...}` body every failure response uses."""
  payload: dict[str, Any] = {"error": message}
  payload.update(extra)
  return payload


def _sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
  """Return validation errors without raw input payloads."""
  sanitized: list[dict[str, Any]] = []
  for error in errors:
    scrubbed = {key: value for key, value in error.items() if key not in {"input", "url"}}
    # Remove nested input values from context payloads as well.
    if "ctx" in scrubbed and isinstance(scrubbed["ctx"], dict):
      scrubbed_ctx = dict(scrubbed["ctx"])
      scrubbed_ctx.pop("input", None)
      scrubbed["ctx"] = scrubbed_ctx

    sanitized.append(_coerce_json_safe(scrubbed))

  return sanitized


def _request_id(request: Request) -> str | None:
  return getattr(request.state, "request_id", None)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
  """Global exception handler to catch unhandled errors."""
  logger = logging.getLogger("uvicorn.error")
  logger.error("Global exception request_id=%s path=%s error_type=%s", _request_id(request), request.url.path, type(exc).__name__, exc_info=True)
  return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=_error_payload(GENERIC_ERROR_MESSAGE))


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
  """Reject malformed request bodies with a 400 and the field-level problems."""
  sanitized_errors = _sanitize_validation_errors(exc.errors())
  logger = logging.getLogger("uvicorn.error")
  logger.warning("Request validation failed request_id=%s path=%s method=%s errors=%s", _request_id(request), request.url.path, request.method, sanitized_errors)
  return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_payload("Invalid request body", details=sanitized_errors))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
  """Render HTTP errors, including unmatched routes, as `{"error": ...}` bodies."""
  from learnos.config import get_settings

  settings = get_settings()
  # Unmatched paths and methods share one catch-all answer.
  if exc.status_code in {status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED}:
    if settings.log_http_4xx:
      logging.getLogger("uvicorn.error").warning("Route not found request_id=%s method=%s path=%s", _request_id(request), request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=_error_payload(ROUTE_NOT_FOUND_MESSAGE))

  if exc.status_code >= 500:
    logger = logging.getLogger("uvicorn.error")
    logger.error("HTTPException request_id=%s path=%s status_code=%s detail=%s", _request_id(request), request.url.path, exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=_error_payload(GENERIC_ERROR_MESSAGE))

  if settings.log_http_4xx:
    logger = logging.getLogger("uvicorn.error")
    logger.warning("HTTPException request_id=%s path=%s status_code=%s detail=%s", _request_id(request), request.url.path, exc.status_code, exc.detail)

  return JSONResponse(status_code=exc.status_code, content=_error_payload(str(exc.detail)), headers=getattr(exc, "headers", None))


async def invalid_topic_exception_handler(request: Request, exc: InvalidTopicError) -> JSONResponse:
  """Reject a missing or blank topic."""
  from learnos.config import get_settings

  if get_settings().log_http_4xx:
    logging.getLogger("uvicorn.error").warning("Invalid topic request_id=%s path=%s", _request_id(request), request.url.path)
  return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_payload(str(exc)))


async def lesson_generation_exception_handler(request: Request, exc: LessonGenerationError) -> JSONResponse:
  """Return a fixed message for generation failures; model output and prompts stay in the logs."""
  logger = logging.getLogger("uvicorn.error")
  logger.error("Lesson generation failure request_id=%s path=%s topic_key=%r cause=%s", _request_id(request), request.url.path, exc.topic_key, exc.cause, exc_info=exc.cause)
  message = API_KEY_MISSING_MESSAGE if exc.is_configuration_error else GENERATION_FAILED_MESSAGE
  return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=_error_payload(message))
