from __future__ import annotations

import datetime
from typing import Any

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from learnos.api.routes import lessons
from learnos.config import get_settings
from learnos.core.exceptions import global_exception_handler, http_exception_handler, invalid_topic_exception_handler, lesson_generation_exception_handler, request_validation_exception_handler
from learnos.core.lifespan import lifespan
from learnos.core.middleware import RequestLoggingMiddleware
from learnos.services.lessons import LessonGenerationError
from learnos.utils.topic_key import InvalidTopicError

settings = get_settings()

app = FastAPI(title="LearnOS", version="0.1.0", lifespan=lifespan)

app.add_middleware(CORSMiddleware, allow_origins=list(settings.allowed_origins), allow_credentials=True, allow_methods=["GET", "POST", "OPTIONS"], allow_headers=["content-type"], expose_headers=["x-request-id"])

# Add exception handlers
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(InvalidTopicError, invalid_topic_exception_handler)
app.add_exception_handler(LessonGenerationError, lesson_generation_exception_handler)

# Add middleware
app.add_middleware(RequestLoggingMiddleware)


@app.get("/api/health", tags=["health"])
async def health_check() -> dict[str, Any]:
  """Report liveness and whether generation is configured."""
  current = get_settings()
  return {"status": "ok", "timestamp": datetime.datetime.now(datetime.UTC).isoformat(), "env": {"hasApiKey": bool(current.gemini_api_key), "lessonStore": current.lesson_store}}


app.include_router(lessons.router, prefix="/api", tags=["lessons"])
