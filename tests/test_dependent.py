"""Tests for dependency evaluation."""

import logging

import pytest

from condflow.engine import DependencyEvaluator, get_depend_result_for_relation
from condflow.models import (
    DependResult,
    DependentRelation,
    TaskExecutionStatus,
    ConditionDependentItem,
)

from builders import group, expression, task_instance

AND = DependentRelation.AND
OR = DependentRelation.OR
SUCCESS = TaskExecutionStatus.SUCCESS
FAILURE = TaskExecutionStatus.FAILURE


def snapshot(**states: TaskExecutionStatus) -> dict:
    """Build a task_code -> TaskInstance snapshot from t<code>=state pairs."""
    instances = {}
    for i, (name, state) in enumerate(states.items(), start=1):
        code = int(name.lstrip("t"))
        instances[code] = task_instance(id=i, task_code=code, state=state)
    return instances


class TestRelationCombination:
    """Tests for the three-valued relation combinator."""

    @pytest.mark.parametrize("results, expected", [
        ([DependResult.SUCCESS, DependResult.SUCCESS], DependResult.SUCCESS),
        ([DependResult.SUCCESS, DependResult.FAILED], DependResult.FAILED),
        ([DependResult.WAITING, DependResult.SUCCESS], DependResult.WAITING),
        ([DependResult.WAITING, DependResult.FAILED], DependResult.FAILED),
    ])
    def test_and(self, results, expected):
        """Test AND: any FAILED fails, then any WAITING waits."""
        assert get_depend_result_for_relation(AND, results) == expected

    @pytest.mark.parametrize("results, expected", [
        ([DependResult.FAILED, DependResult.FAILED], DependResult.FAILED),
        ([DependResult.FAILED, DependResult.SUCCESS], DependResult.SUCCESS),
        ([DependResult.WAITING, DependResult.FAILED], DependResult.WAITING),
        ([DependResult.WAITING, DependResult.SUCCESS], DependResult.SUCCESS),
    ])
    def test_or(self, results, expected):
        """Test OR: any SUCCESS succeeds, then any WAITING waits."""
        assert get_depend_result_for_relation(OR, results) == expected

    @pytest.mark.parametrize("relation", [AND, OR])
    def test_empty_is_failed(self, relation):
        """Test that nothing to check never passes."""
        assert get_depend_result_for_relation(relation, []) == DependResult.FAILED

    def test_accepts_plain_relation_values(self):
        """Test relations stored as plain strings."""
        assert get_depend_result_for_relation("OR", [DependResult.SUCCESS]) == DependResult.SUCCESS

    def test_unknown_relation(self):
        """Test that an unknown relation is rejected."""
        with pytest.raises(ValueError, match="Unknown dependent relation"):
            get_depend_result_for_relation("XOR", [DependResult.SUCCESS])


class TestEvaluateItem:
    """Tests for single item checks."""

    @pytest.fixture
    def evaluator(self):
        return DependencyEvaluator()

    def test_matching_state(self, evaluator):
        """Test that an equal state succeeds."""
        item = ConditionDependentItem(dep_task_code=1, status=SUCCESS)
        assert evaluator.evaluate_item(item, snapshot(t1=SUCCESS)) == DependResult.SUCCESS

    def test_different_state(self, evaluator):
        """Test that any other state fails, including similar ones."""
        item = ConditionDependentItem(dep_task_code=1, status=SUCCESS)
        assert evaluator.evaluate_item(item, snapshot(t1=FAILURE)) == DependResult.FAILED
        assert evaluator.evaluate_item(
            item, snapshot(t1=TaskExecutionStatus.FORCED_SUCCESS)
        ) == DependResult.FAILED

    @pytest.mark.parametrize("expected_state", list(TaskExecutionStatus))
    def test_missing_task_is_failed(self, evaluator, expected_state):
        """Test that an absent task fails whatever state is expected."""
        item = ConditionDependentItem(dep_task_code=99, status=expected_state)
        assert evaluator.evaluate_item(item, snapshot(t1=SUCCESS)) == DependResult.FAILED

    def test_logs_missing_task(self, evaluator, caplog):
        """Test that an absent task is reported, not raised."""
        item = ConditionDependentItem(dep_task_code=99, status=SUCCESS)
        with caplog.at_level(logging.INFO, logger="condflow.engine.dependent"):
            evaluator.evaluate_item(item, {})
        assert "has not completed yet" in caplog.text


class TestEvaluateGroup:
    """Tests for group combination."""

    @pytest.fixture
    def evaluator(self):
        return DependencyEvaluator()

    def test_and_group(self, evaluator):
        """Test that one failed leaf fails an AND group."""
        g = group(AND, (1, SUCCESS), (2, SUCCESS), (3, SUCCESS))
        assert evaluator.evaluate_group(g, snapshot(t1=SUCCESS, t2=SUCCESS, t3=SUCCESS)) == DependResult.SUCCESS
        assert evaluator.evaluate_group(g, snapshot(t1=SUCCESS, t2=FAILURE, t3=SUCCESS)) == DependResult.FAILED
        assert evaluator.evaluate_group(g, snapshot(t1=SUCCESS, t2=SUCCESS)) == DependResult.FAILED

    def test_or_group(self, evaluator):
        """Test that one successful leaf passes an OR group."""
        g = group(OR, (1, SUCCESS), (2, SUCCESS), (3, FAILURE))
        assert evaluator.evaluate_group(g, snapshot(t1=FAILURE, t2=FAILURE, t3=FAILURE)) == DependResult.SUCCESS
        assert evaluator.evaluate_group(g, snapshot(t1=FAILURE, t2=FAILURE, t3=SUCCESS)) == DependResult.FAILED
        assert evaluator.evaluate_group(g, snapshot(t2=SUCCESS)) == DependResult.SUCCESS

    def test_every_leaf_is_checked(self, evaluator, caplog):
        """Test that evaluation does not stop at the first deciding leaf."""
        g = group(OR, (1, SUCCESS), (2, SUCCESS))
        with caplog.at_level(logging.INFO, logger="condflow.engine.dependent"):
            evaluator.evaluate_group(g, snapshot(t1=SUCCESS, t2=SUCCESS))
        assert "task 1" in caplog.text
        assert "task 2" in caplog.text

    def test_empty_group_is_failed(self, evaluator):
        """Test that a group without items never passes."""
        assert evaluator.evaluate_group(group(AND), snapshot(t1=SUCCESS)) == DependResult.FAILED


class TestEvaluate:
    """Tests for whole expressions."""

    @pytest.fixture
    def evaluator(self):
        return DependencyEvaluator()

    @pytest.fixture
    def single_or_group(self):
        return expression(AND, group(OR, (1, SUCCESS), (2, SUCCESS)))

    def test_both_leaves_failed(self, evaluator, single_or_group):
        """Test task 1 failed and task 2 absent."""
        assert evaluator.evaluate(single_or_group, snapshot(t1=FAILURE)) == DependResult.FAILED

    def test_or_group_satisfied_by_first_item(self, evaluator, single_or_group):
        """Test task 1 succeeded and task 2 absent."""
        assert evaluator.evaluate(single_or_group, snapshot(t1=SUCCESS)) == DependResult.SUCCESS

    def test_top_level_or(self, evaluator):
        """Test that one passing group is enough under a top-level OR."""
        dependence = expression(
            OR,
            group(AND, (1, SUCCESS), (2, SUCCESS)),
            group(AND, (3, FAILURE)),
        )
        state = snapshot(t1=SUCCESS, t2=FAILURE, t3=FAILURE)

        assert evaluator.evaluate_group(dependence.depend_task_list[0], state) == DependResult.FAILED
        assert evaluator.evaluate_group(dependence.depend_task_list[1], state) == DependResult.SUCCESS
        assert evaluator.evaluate(dependence, state) == DependResult.SUCCESS

    def test_top_level_and(self, evaluator):
        """Test that every group must pass under a top-level AND."""
        dependence = expression(
            AND,
            group(OR, (1, SUCCESS), (2, SUCCESS)),
            group(OR, (3, FAILURE)),
        )
        assert evaluator.evaluate(dependence, snapshot(t1=SUCCESS, t3=FAILURE)) == DependResult.SUCCESS
        assert evaluator.evaluate(dependence, snapshot(t1=SUCCESS, t3=SUCCESS)) == DependResult.FAILED

    def test_empty_expression_is_failed(self, evaluator):
        """Test that an expression without groups never passes."""
        assert evaluator.evaluate(expression(AND), snapshot(t1=SUCCESS)) == DependResult.FAILED

    def test_repeatable(self, evaluator):
        """Test that the same snapshot always gives the same result."""
        dependence = expression(
            OR,
            group(AND, (1, SUCCESS), (2, FAILURE)),
            group(OR, (3, SUCCESS), (4, SUCCESS)),
        )
        for state in (
            snapshot(t1=SUCCESS, t2=FAILURE),
            snapshot(t3=FAILURE, t4=FAILURE),
            snapshot(),
        ):
            first = evaluator.evaluate(dependence, state)
            assert all(evaluator.evaluate(dependence, state) == first for _ in range(5))

    def test_never_waits(self, evaluator):
        """Test that only SUCCESS or FAILED come out of an evaluation."""
        dependence = expression(AND, group(OR, (1, TaskExecutionStatus.RUNNING_EXECUTION)))
        results = {
            evaluator.evaluate(dependence, snapshot(t1=state))
            for state in TaskExecutionStatus
        }
        assert results == {DependResult.SUCCESS, DependResult.FAILED}
