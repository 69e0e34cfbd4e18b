import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from urllib.parse import urlparse

from fastapi import FastAPI

from learnos.core.database import dispose_db_engine
from learnos.core.logging import _initialize_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Set up logging after uvicorn starts and release the database pool on shutdown."""
  from learnos.config import get_settings

  settings = get_settings()
  logger = logging.getLogger("learnos.core.lifespan")

  try:
    _initialize_logging(settings)
  except RuntimeError:
    # Keep serving with uvicorn's default handlers when the log directory is unwritable.
    logger.warning("Logging setup failed; continuing with default handlers.", exc_info=True)

  logger.info("Startup complete env=%s lesson_store=%s model=%s", settings.environment, settings.lesson_store, settings.gemini_model)
  logger.info("API Key configured: %s", bool(settings.gemini_api_key))
  if settings.lesson_store == "postgres":
    logger.info("Lesson store DSN=%s", _redact_dsn(settings.pg_dsn))

  yield

  await dispose_db_engine()
  logger.info("Shutdown complete.")


def _redact_dsn(raw: str | None) -> str:
  """Redact credentials from a DSN while keeping host/db visible."""
  if not raw:
    return "<unset>"

  parsed = urlparse(raw)
  if not parsed.scheme:
    return "<invalid>"

  user = parsed.username or ""
  host = parsed.hostname or ""
  port = f":{parsed.port}" if parsed.port else ""
  netloc = f"{user}@{host}{port}" if user else f"{host}{port}"
  database = parsed.path.lstrip("/")
  path = f"/{database}" if database else ""
  return f"{parsed.scheme}://{netloc}{path}"
