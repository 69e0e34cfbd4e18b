"""Schema package exports."""

from .lesson_models import Analogy, KeyConcept, LessonPlanDocument, QuizQuestion
from .sanitize_lesson import IncompleteStructureError, LessonOutputError, MalformedOutputError, sanitize_lesson

__all__ = ["Analogy", "KeyConcept", "LessonPlanDocument", "QuizQuestion", "IncompleteStructureError", "LessonOutputError", "MalformedOutputError", "sanitize_lesson"]
