"""Pure projection of quiz state into something a client can draw."""

from __future__ import annotations

from collections.abc import Set
from dataclasses import dataclass
from enum import StrEnum

from learnos.quiz.state import QuestionState, QuizStateMachine

CORRECT_FEEDBACK = "✅ Correct! Well done."
INCORRECT_FEEDBACK = "❌ Incorrect. The correct answer is option {number}."


class OptionMark(StrEnum):
  NONE = "none"
  SELECTED = "selected"
  CORRECT = "correct"
  INCORRECT = "incorrect"


@dataclass(frozen=True)
class OptionView:
  number: int
  text: str
  mark: OptionMark


@dataclass(frozen=True)
class QuestionView:
  number: int
  prompt: str
  options: tuple[OptionView, ...]
  answered: bool
  feedback: str | None


@dataclass(frozen=True)
class QuizView:
  questions: tuple[QuestionView, ...]
  answered_count: int
  correct_count: int
  total: int

  @property
  def is_complete(self) -> bool:
    return self.total > 0 and self.answered_count == self.total


def feedback_message(state: QuestionState) -> str | None:
  """Return the learner-facing verdict for an answered question."""
  if state.selected is None:
    return None
  if state.is_correct:
    return CORRECT_FEEDBACK
  # Options are numbered from 1 for learners.
  return INCORRECT_FEEDBACK.format(number=state.question.correct_answer + 1)


def _option_mark(state: QuestionState, option_index: int, revealed: bool) -> OptionMark:
  if not revealed:
    return OptionMark.SELECTED if state.selected == option_index else OptionMark.NONE
  if option_index == state.question.correct_answer:
    return OptionMark.CORRECT
  if option_index == state.selected:
    return OptionMark.INCORRECT
  return OptionMark.NONE


def render_quiz(machine: QuizStateMachine, revealed: Set[int] = frozenset()) -> QuizView:
  """Project the machine into a view.

  Correctness marks and feedback appear only for answered questions whose index is in `revealed`;
  before that the chosen option is shown as merely selected. Nothing is mutated.
  """
  questions: list[QuestionView] = []
  revealed_correct = 0
  for index, state in enumerate(machine.states):
    is_revealed = state.answered and index in revealed
    options = tuple(OptionView(number=option_index + 1, text=text, mark=_option_mark(state, option_index, is_revealed)) for option_index, text in enumerate(state.question.options))
    feedback = feedback_message(state) if is_revealed else None
    if is_revealed and state.is_correct:
      revealed_correct += 1
    questions.append(QuestionView(number=index + 1, prompt=state.question.question, options=options, answered=state.answered, feedback=feedback))

  return QuizView(questions=tuple(questions), answered_count=machine.answered_count, correct_count=revealed_correct, total=len(machine))
