"""Base logic task class - the plugin interface for engine-side tasks."""

from abc import ABC, abstractmethod
from typing import Optional, Any, Callable
import logging

from pydantic import ValidationError

from ..errors import TaskParameterError
from ..models import TaskInstance
from ..engine.context import TaskExecutionContext
from ..engine.lifecycle import TaskLifecycleListener

logger = logging.getLogger(__name__)


class AbstractLogicTask(ABC):
    """
    Base class for logic tasks.

    A logic task runs inside the engine rather than on a worker: it reads
    the state of its workflow run and reports back through the lifecycle
    listener. One instance handles exactly one execution attempt.

    Each logic task must implement:
    - get_task_parameter_deserializer(): Parse the task's parameter blob
    - start(): Run the task to completion
    - pause(): Handle a pause request
    - kill(): Handle a kill request

    The parameters are deserialized in the constructor, so a malformed blob
    fails before any work begins.

    Example:
        class NoopLogicTask(AbstractLogicTask):
            task_type = "NOOP"

            def get_task_parameter_deserializer(self):
                return json.loads

            async def start(self) -> None:
                self.on_task_success()

            async def pause(self) -> None:
                pass

            async def kill(self) -> None:
                pass
    """

    task_type: str = ""
    """Task type handled by this logic task. Used for registry lookup."""

    def __init__(
        self,
        task_execution_context: TaskExecutionContext,
        lifecycle_listener: TaskLifecycleListener,
    ):
        """
        Initialize the logic task and deserialize its parameters.

        Args:
            task_execution_context: The task this logic task runs for
            lifecycle_listener: Receives the task's state transitions

        Raises:
            TaskParameterError: If the parameter blob is malformed
        """
        self.task_execution_context = task_execution_context
        self.lifecycle_listener = lifecycle_listener
        self.task_instance: Optional[TaskInstance] = None

        deserializer = self.get_task_parameter_deserializer()
        try:
            self.task_parameters = deserializer(task_execution_context.task_params)
        except (ValidationError, ValueError) as e:
            raise TaskParameterError(
                f"Invalid parameters for task instance "
                f"{task_execution_context.task_instance_id}: {e}"
            ) from e

    # -------------------------------------------------------------------------
    # Abstract methods (must be implemented by subclasses)
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_task_parameter_deserializer(self) -> Callable[[str], Any]:
        """Get the callable that turns the parameter JSON into parameters."""
        pass

    @abstractmethod
    async def start(self) -> None:
        """Run the task to completion."""
        pass

    @abstractmethod
    async def pause(self) -> None:
        """Handle a pause request."""
        pass

    @abstractmethod
    async def kill(self) -> None:
        """Handle a kill request."""
        pass

    # -------------------------------------------------------------------------
    # Lifecycle helpers
    # -------------------------------------------------------------------------

    def on_task_running(self) -> None:
        """Report that the task started running."""
        self.lifecycle_listener.on_running(self._require_task_instance())

    def on_task_success(self) -> None:
        """Report that the task finished successfully."""
        self.lifecycle_listener.on_success(self._require_task_instance())

    def _require_task_instance(self) -> TaskInstance:
        if self.task_instance is None:
            raise RuntimeError(f"{self!r} has no task instance")
        return self.task_instance

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} "
            f"task_instance={self.task_execution_context.task_instance_id}>"
        )
