"""Logic task executor - runs engine-side tasks for task instances."""

import traceback
from typing import Optional, Callable, Awaitable, TYPE_CHECKING
import logging

from ..errors import TaskInstanceNotFoundError, LogicTaskExecuteError
from ..models import TaskInstance
from ..storage import TaskInstanceStore
from .context import TaskExecutionContext, WorkflowExecuteContext
from .lifecycle import TaskLifecycleListener

if TYPE_CHECKING:
    from ..plugins import AbstractLogicTask, LogicTaskRegistry

logger = logging.getLogger(__name__)


class LogicTaskExecutor:
    """
    Executes logic tasks for task instances.

    Handles:
    - Building the logic task for the instance's task type
    - Persisting the RUNNING transition and the final instance
    - Marking the instance failed when the logic task raises
    - Forwarding pause/kill requests to in-flight tasks
    """

    def __init__(
        self,
        task_instance_store: TaskInstanceStore,
        registry: "LogicTaskRegistry",
        lifecycle_listener: Optional[TaskLifecycleListener] = None,
    ):
        self.task_instance_store = task_instance_store
        self.registry = registry
        self.lifecycle_listener = lifecycle_listener or TaskLifecycleListener()
        self._running: dict[int, "AbstractLogicTask"] = {}

        self._on_task_finished: Optional[Callable[[TaskInstance], Awaitable[None]]] = None

    def on_task_finished(
        self,
        callback: Callable[[TaskInstance], Awaitable[None]],
    ) -> None:
        """Register callback for when a task instance reaches a final state."""
        self._on_task_finished = callback

    async def execute(self, task_instance_id: int) -> TaskInstance:
        """
        Run the logic task for a stored task instance.

        Args:
            task_instance_id: The task instance to run

        Returns:
            The task instance after the run, as persisted

        Raises:
            TaskInstanceNotFoundError: If the instance is not stored
            UnknownTaskTypeError: If no logic task handles its type
            TaskParameterError: If its parameters are malformed
            LogicTaskExecuteError: If the logic task fails while running
        """
        stored = await self.task_instance_store.get(task_instance_id)
        if stored is None:
            raise TaskInstanceNotFoundError(f"Task instance {task_instance_id} not found")

        workflow_execute_context = await WorkflowExecuteContext.load(
            self.task_instance_store,
            stored.workflow_instance_id,
            stored.test_flag,
        )
        workflow_execute_context.add_task_instance(stored)

        logic_task = self.registry.create(
            workflow_execute_context,
            TaskExecutionContext.from_task_instance(stored),
            self.task_instance_store,
            self.lifecycle_listener,
        )
        task_instance = logic_task.task_instance
        await self.task_instance_store.save(task_instance)

        self._running[task_instance_id] = logic_task
        try:
            await logic_task.start()
        except Exception as e:
            logger.error(
                f"Error executing logic task for task instance {task_instance_id}: {e}\n"
                f"{traceback.format_exc()}"
            )
            self.lifecycle_listener.on_failed(task_instance, str(e))
            await self._finish(task_instance)
            raise LogicTaskExecuteError(
                f"Logic task for task instance {task_instance_id} failed: {e}"
            ) from e
        finally:
            self._running.pop(task_instance_id, None)

        await self._finish(task_instance)

        logger.info(
            f"Logic task for task instance {task_instance_id} finished with state {task_instance.state}"
        )
        return task_instance

    async def pause(self, task_instance_id: int) -> bool:
        """
        Forward a pause request to an in-flight logic task.

        Returns:
            True if a running logic task received the request
        """
        logic_task = self._running.get(task_instance_id)
        if logic_task is None:
            logger.warning(f"No running logic task for task instance {task_instance_id}")
            return False
        await logic_task.pause()
        return True

    async def kill(self, task_instance_id: int) -> bool:
        """
        Forward a kill request to an in-flight logic task.

        Returns:
            True if a running logic task received the request
        """
        logic_task = self._running.get(task_instance_id)
        if logic_task is None:
            logger.warning(f"No running logic task for task instance {task_instance_id}")
            return False
        await logic_task.kill()
        return True

    @property
    def running_task_instance_ids(self) -> list[int]:
        """Get the ids of task instances with an in-flight logic task."""
        return list(self._running.keys())

    async def _finish(self, task_instance: TaskInstance) -> None:
        await self.task_instance_store.save(task_instance)
        if self._on_task_finished:
            await self._on_task_finished(task_instance)
