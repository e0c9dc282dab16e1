"""Condition logic task - decides which branch of a workflow runs next."""

from typing import Callable, Optional
import logging

from ..models import TaskInstance, DependResult, ConditionsParameters
from ..storage import TaskInstanceStore
from ..engine.context import TaskExecutionContext, WorkflowExecuteContext
from ..engine.dependent import DependencyEvaluator
from ..engine.lifecycle import TaskLifecycleListener
from .base import AbstractLogicTask

logger = logging.getLogger(__name__)


class ConditionLogicTask(AbstractLogicTask):
    """
    Evaluates upstream task states and records the outcome for branching.

    The condition task itself always finishes successfully. Whether the
    condition held is written to `conditionResult.conditionSuccess` in the
    task parameters, and the engine reads that flag to choose between the
    success and failed branches.
    """

    task_type = "CONDITIONS"

    def __init__(
        self,
        workflow_execute_context: WorkflowExecuteContext,
        task_execution_context: TaskExecutionContext,
        task_instance_store: TaskInstanceStore,
        lifecycle_listener: TaskLifecycleListener,
        evaluator: Optional[DependencyEvaluator] = None,
    ):
        super().__init__(task_execution_context, lifecycle_listener)
        self.task_instance_store = task_instance_store
        self.evaluator = evaluator or DependencyEvaluator()
        self.task_instance = workflow_execute_context.resolve_task_instance(
            task_execution_context.task_instance_id
        )
        self.on_task_running()

    def get_task_parameter_deserializer(self) -> Callable[[str], ConditionsParameters]:
        return ConditionsParameters.model_validate_json

    async def start(self) -> None:
        condition_result = await self._calculate_condition_result()
        logger.info(f"The condition result is {condition_result.value}")

        self.task_parameters.condition_result.condition_success = (
            condition_result == DependResult.SUCCESS
        )
        self.task_instance.task_params = self.task_parameters.to_json()

        self.on_task_success()

    async def _calculate_condition_result(self) -> DependResult:
        task_instances = await self.task_instance_store.query_valid_task_instances(
            self.task_execution_context.workflow_instance_id,
            self.task_execution_context.test_flag,
        )
        task_instance_map = _index_by_task_code(task_instances)
        return self.evaluator.evaluate(self.task_parameters.dependence, task_instance_map)

    async def pause(self) -> None:
        logger.info("The ConditionTask does not support pause operation")

    async def kill(self) -> None:
        logger.info("The ConditionTask does not support kill operation")


def _index_by_task_code(task_instances: list[TaskInstance]) -> dict[int, TaskInstance]:
    """
    Key task instances by task code.

    If a code appears more than once, the latest attempt wins: highest
    retry count, then highest id.
    """
    task_instance_map: dict[int, TaskInstance] = {}
    for task_instance in task_instances:
        current = task_instance_map.get(task_instance.task_code)
        if current is not None:
            logger.warning(
                f"Task code {task_instance.task_code} has several valid instances "
                f"({current.id}, {task_instance.id}), keeping the latest attempt"
            )
            if (current.retry_times, current.id) > (task_instance.retry_times, task_instance.id):
                continue
        task_instance_map[task_instance.task_code] = task_instance
    return task_instance_map
