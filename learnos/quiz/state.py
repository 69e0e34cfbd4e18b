"""Per-question answer state for a delivered quiz."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from learnos.schema.lesson_models import QuizQuestion


@dataclass
class QuestionState:
  """One question's automaton: unanswered until an option is selected, then terminal."""

  question: QuizQuestion
  selected: int | None = None

  @property
  def answered(self) -> bool:
    return self.selected is not None

  @property
  def is_correct(self) -> bool | None:
    if self.selected is None:
      return None
    return self.selected == self.question.correct_answer


@dataclass(frozen=True)
class SelectionResult:
  question_index: int
  selected: int
  correct_answer: int

  @property
  def is_correct(self) -> bool:
    return self.selected == self.correct_answer


class QuizStateMachine:
  """Track selections for every question of one quiz.

  Questions are independent. Once answered a question ignores further selections until reset().
  """

  def __init__(self, questions: Sequence[QuizQuestion]) -> None:
    self._states = [QuestionState(question=question) for question in questions]

  @classmethod
  def from_quiz(cls, quiz: Iterable[QuizQuestion | Mapping[str, Any]]) -> QuizStateMachine:
    """Build a fresh machine from validated questions or their wire dicts."""
    questions = [item if isinstance(item, QuizQuestion) else QuizQuestion.model_validate(item) for item in quiz]
    return cls(questions)

  def __len__(self) -> int:
    return len(self._states)

  @property
  def states(self) -> tuple[QuestionState, ...]:
    return tuple(self._states)

  def state(self, question_index: int) -> QuestionState:
    return self._states[question_index]

  @property
  def answered_count(self) -> int:
    return sum(1 for state in self._states if state.answered)

  @property
  def correct_count(self) -> int:
    return sum(1 for state in self._states if state.is_correct)

  @property
  def is_complete(self) -> bool:
    return bool(self._states) and all(state.answered for state in self._states)

  def select(self, question_index: int, option_index: int) -> SelectionResult | None:
    """Record an answer; returns None when the question is already answered or an index is out of range."""
    if not 0 <= question_index < len(self._states):
      return None
    state = self._states[question_index]
    if state.answered:
      return None
    if not 0 <= option_index < len(state.question.options):
      return None

    state.selected = option_index
    return SelectionResult(question_index=question_index, selected=option_index, correct_answer=state.question.correct_answer)

  def reset(self) -> None:
    """Return every question to unanswered; questions and answer key are untouched."""
    for state in self._states:
      state.selected = None
