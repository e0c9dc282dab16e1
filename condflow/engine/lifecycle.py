"""Lifecycle listener - receives state transitions from logic tasks."""

from typing import Optional, Callable
import logging

from ..models import TaskInstance

logger = logging.getLogger(__name__)


class TaskLifecycleListener:
    """
    Applies lifecycle transitions to task instances.

    Logic tasks report transitions here; the listener updates the instance
    model and notifies an optional callback. Persisting the instance is left
    to the executor.
    """

    def __init__(self):
        self._on_transition: Optional[Callable[[TaskInstance], None]] = None

    def on_transition(self, callback: Callable[[TaskInstance], None]) -> None:
        """Register callback for every state transition."""
        self._on_transition = callback

    def on_running(self, task_instance: TaskInstance) -> None:
        """The task instance started running."""
        task_instance.mark_running()
        logger.info(f"Task instance {task_instance.id} ({task_instance.name}) is running")
        self._notify(task_instance)

    def on_success(self, task_instance: TaskInstance) -> None:
        """The task instance finished successfully."""
        task_instance.mark_success()
        logger.info(f"Task instance {task_instance.id} ({task_instance.name}) succeeded")
        self._notify(task_instance)

    def on_failed(self, task_instance: TaskInstance, error: str) -> None:
        """The task instance failed."""
        task_instance.mark_failure()
        logger.error(f"Task instance {task_instance.id} ({task_instance.name}) failed: {error}")
        self._notify(task_instance)

    def _notify(self, task_instance: TaskInstance) -> None:
        if self._on_transition:
            self._on_transition(task_instance)
