"""Event-driven quiz session with a deferred correctness reveal."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from learnos.quiz.state import QuizStateMachine, SelectionResult
from learnos.quiz.view import QuizView, render_quiz
from learnos.schema.lesson_models import QuizQuestion

logger = logging.getLogger(__name__)

DEFAULT_REVEAL_DELAY_SECONDS = 0.3

RevealCallback = Callable[[SelectionResult], None]
ViewListener = Callable[[QuizView], None]


class QuizRevealScheduler:
  """Run one delayed callback per selection on the running event loop."""

  def __init__(self, delay_seconds: float = DEFAULT_REVEAL_DELAY_SECONDS) -> None:
    if delay_seconds < 0:
      raise ValueError("Reveal delay must not be negative.")
    self.delay_seconds = delay_seconds
    self._tasks: set[asyncio.Task[None]] = set()

  @property
  def pending(self) -> int:
    return len(self._tasks)

  def schedule(self, result: SelectionResult, callback: RevealCallback) -> asyncio.Task[None]:
    task = asyncio.get_running_loop().create_task(self._reveal_later(result, callback))
    self._tasks.add(task)
    task.add_done_callback(self._tasks.discard)
    return task

  async def _reveal_later(self, result: SelectionResult, callback: RevealCallback) -> None:
    await asyncio.sleep(self.delay_seconds)
    callback(result)

  def cancel_all(self) -> None:
    for task in list(self._tasks):
      task.cancel()
    self._tasks.clear()

  async def wait_idle(self) -> None:
    """Wait for every scheduled reveal to run or be cancelled."""
    while True:
      waiting = [task for task in self._tasks if not task.done()]
      if not waiting:
        return
      await asyncio.gather(*waiting, return_exceptions=True)


class QuizSession:
  """Client-side quiz controller.

  The on_* handlers are the only mutators. Every change re-renders the view and hands it to the
  listener, if one is set.
  """

  def __init__(self, *, reveal_delay_seconds: float = DEFAULT_REVEAL_DELAY_SECONDS, listener: ViewListener | None = None) -> None:
    self._scheduler = QuizRevealScheduler(reveal_delay_seconds)
    self._listener = listener
    self._machine = QuizStateMachine([])
    self._revealed: set[int] = set()

  @property
  def machine(self) -> QuizStateMachine:
    return self._machine

  @property
  def scheduler(self) -> QuizRevealScheduler:
    return self._scheduler

  @property
  def view(self) -> QuizView:
    return render_quiz(self._machine, frozenset(self._revealed))

  def on_lesson_loaded(self, quiz: Iterable[QuizQuestion | Mapping[str, Any]]) -> QuizView:
    """Replace the quiz; pending reveals from the previous lesson are dropped."""
    self._scheduler.cancel_all()
    self._machine = QuizStateMachine.from_quiz(quiz)
    self._revealed.clear()
    return self._publish()

  def on_option_selected(self, question_index: int, option_index: int) -> SelectionResult | None:
    """Record a choice and schedule its reveal. Must be called from a running event loop."""
    result = self._machine.select(question_index, option_index)
    if result is None:
      logger.debug("Ignored selection question=%s option=%s", question_index, option_index)
      return None

    self._publish()
    self._scheduler.schedule(result, self._reveal)
    return result

  def on_reset(self) -> QuizView:
    """Clear every answer and cancel reveals still waiting."""
    self._scheduler.cancel_all()
    self._machine.reset()
    self._revealed.clear()
    return self._publish()

  async def wait_for_reveals(self) -> QuizView:
    await self._scheduler.wait_idle()
    return self.view

  def _reveal(self, result: SelectionResult) -> None:
    self._revealed.add(result.question_index)
    self._publish()

  def _publish(self) -> QuizView:
    current = self.view
    if self._listener is not None:
      self._listener(current)
    return current
