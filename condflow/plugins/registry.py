"""Logic task registry - maps task types to logic task implementations."""

from typing import Optional
import logging

from ..errors import UnknownTaskTypeError
from ..storage import TaskInstanceStore
from ..engine.context import TaskExecutionContext, WorkflowExecuteContext
from ..engine.lifecycle import TaskLifecycleListener
from .base import AbstractLogicTask
from .condition import ConditionLogicTask

logger = logging.getLogger(__name__)


class LogicTaskRegistry:
    """
    Central registry for logic task classes.

    Provides lookup by task type and builds logic tasks for task instances.
    """

    def __init__(self):
        self._logic_tasks: dict[str, type[AbstractLogicTask]] = {}

    def register(self, logic_task_cls: type[AbstractLogicTask]) -> None:
        """
        Register a logic task class under its task type.

        Raises:
            ValueError: If the class has no task type or the type is taken
        """
        if not logic_task_cls.task_type:
            raise ValueError(f"Logic task {logic_task_cls.__name__} has no task type")

        if logic_task_cls.task_type in self._logic_tasks:
            raise ValueError(f"Task type '{logic_task_cls.task_type}' is already registered")

        self._logic_tasks[logic_task_cls.task_type] = logic_task_cls
        logger.info(f"Registered logic task: {logic_task_cls.task_type}")

    def unregister(self, task_type: str) -> Optional[type[AbstractLogicTask]]:
        """Unregister a task type. Returns the removed class, if any."""
        logic_task_cls = self._logic_tasks.pop(task_type, None)
        if logic_task_cls:
            logger.info(f"Unregistered logic task: {task_type}")
        return logic_task_cls

    def get(self, task_type: str) -> Optional[type[AbstractLogicTask]]:
        """Get the logic task class for a task type."""
        return self._logic_tasks.get(task_type)

    def has(self, task_type: str) -> bool:
        """Check if a task type is registered."""
        return task_type in self._logic_tasks

    def get_task_types(self) -> list[str]:
        """Get all registered task types."""
        return list(self._logic_tasks.keys())

    def create(
        self,
        workflow_execute_context: WorkflowExecuteContext,
        task_execution_context: TaskExecutionContext,
        task_instance_store: TaskInstanceStore,
        lifecycle_listener: TaskLifecycleListener,
    ) -> AbstractLogicTask:
        """
        Build the logic task for a task execution context.

        Raises:
            UnknownTaskTypeError: If no logic task handles the task type
            TaskParameterError: If the task's parameters are malformed
        """
        logic_task_cls = self.get(task_execution_context.task_type)
        if logic_task_cls is None:
            raise UnknownTaskTypeError(
                f"No logic task registered for task type '{task_execution_context.task_type}'"
            )
        return logic_task_cls(
            workflow_execute_context,
            task_execution_context,
            task_instance_store,
            lifecycle_listener,
        )

    def __contains__(self, task_type: str) -> bool:
        return self.has(task_type)

    def __len__(self) -> int:
        return len(self._logic_tasks)


def default_registry() -> LogicTaskRegistry:
    """Build a registry holding the built-in logic tasks."""
    registry = LogicTaskRegistry()
    registry.register(ConditionLogicTask)
    return registry
