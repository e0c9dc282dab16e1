"""Dependency evaluation - combines per-task status checks into one result."""

from typing import Mapping
import logging

from ..models import (
    TaskInstance,
    DependResult,
    DependentRelation,
    ConditionDependentItem,
    DependentTaskModel,
    ConditionDependency,
)

logger = logging.getLogger(__name__)


def get_depend_result_for_relation(
    relation: DependentRelation,
    results: list[DependResult],
) -> DependResult:
    """
    Combine dependency results with a relation.

    AND fails on any FAILED, waits on any WAITING, otherwise succeeds.
    OR succeeds on any SUCCESS, waits on any WAITING, otherwise fails.

    An empty list yields FAILED for both relations. A condition with nothing
    to check must never pass by accident, so the vacuous truth of an empty
    AND is not honored here.

    Args:
        relation: AND or OR
        results: The results to combine

    Returns:
        The combined result
    """
    if not results:
        return DependResult.FAILED

    if relation == DependentRelation.AND:
        if DependResult.FAILED in results:
            return DependResult.FAILED
        if DependResult.WAITING in results:
            return DependResult.WAITING
        return DependResult.SUCCESS

    if relation == DependentRelation.OR:
        if DependResult.SUCCESS in results:
            return DependResult.SUCCESS
        if DependResult.WAITING in results:
            return DependResult.WAITING
        return DependResult.FAILED

    raise ValueError(f"Unknown dependent relation: {relation}")


class DependencyEvaluator:
    """
    Evaluates a two-level condition expression against task instance states.

    The evaluator is stateless and performs no I/O: the same expression and
    the same snapshot always produce the same result.
    """

    def evaluate(
        self,
        dependence: ConditionDependency,
        task_instances: Mapping[int, TaskInstance],
    ) -> DependResult:
        """
        Evaluate the whole expression.

        Args:
            dependence: The expression to evaluate
            task_instances: Snapshot of task instances keyed by task code

        Returns:
            SUCCESS or FAILED
        """
        group_results = [
            self.evaluate_group(group, task_instances)
            for group in dependence.depend_task_list
        ]
        return get_depend_result_for_relation(dependence.relation, group_results)

    def evaluate_group(
        self,
        group: DependentTaskModel,
        task_instances: Mapping[int, TaskInstance],
    ) -> DependResult:
        """Evaluate every item of a group and combine them with its relation."""
        item_results = [
            self.evaluate_item(item, task_instances)
            for item in group.depend_item_list
        ]
        return get_depend_result_for_relation(group.relation, item_results)

    def evaluate_item(
        self,
        item: ConditionDependentItem,
        task_instances: Mapping[int, TaskInstance],
    ) -> DependResult:
        """
        Check a single upstream task against its expected state.

        A task with no recorded instance counts as FAILED, never as pending.
        """
        task_instance = task_instances.get(item.dep_task_code)
        if task_instance is None:
            logger.info(
                f"The depend item for task {item.dep_task_code} has not completed yet, "
                f"the dependent result will be {DependResult.FAILED.value}"
            )
            return DependResult.FAILED

        result = (
            DependResult.SUCCESS
            if task_instance.state == item.status
            else DependResult.FAILED
        )
        logger.info(
            f"The depend item for task {item.dep_task_code}: expect status {item.status}, "
            f"actual status {task_instance.state}, the dependent result will be {result.value}"
        )
        return result
