"""Condition task parameters - the dependency expression and its outcome."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import DependentRelation, TaskExecutionStatus


class _ParameterModel(BaseModel):
    """Base for parameter models, serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


class ConditionDependentItem(_ParameterModel):
    """One leaf comparison: the task with this code must be in this state."""

    dep_task_code: int
    """Code of the upstream task being checked."""

    status: TaskExecutionStatus
    """The state the upstream task is expected to be in."""


class DependentTaskModel(_ParameterModel):
    """A group of items combined by a single relation."""

    relation: DependentRelation = DependentRelation.AND
    depend_item_list: list[ConditionDependentItem] = Field(default_factory=list)


class ConditionDependency(_ParameterModel):
    """The full two-level expression: groups combined by a top-level relation."""

    relation: DependentRelation = DependentRelation.AND
    depend_task_list: list[DependentTaskModel] = Field(default_factory=list)

    def referenced_task_codes(self) -> set[int]:
        """Get every task code the expression looks at."""
        return {
            item.dep_task_code
            for group in self.depend_task_list
            for item in group.depend_item_list
        }


class ConditionResult(_ParameterModel):
    """
    The persisted outcome of a condition task.

    `condition_success` is overwritten on every execution attempt. The node
    lists name the downstream tasks for each branch.
    """

    condition_success: bool = False
    success_node: list[int] = Field(default_factory=list)
    failed_node: list[int] = Field(default_factory=list)

    def next_branch(self) -> list[int]:
        """Get the task codes of the branch selected by the outcome."""
        return self.success_node if self.condition_success else self.failed_node


class ConditionsParameters(_ParameterModel):
    """Parameters of a condition task, as stored on its task instance."""

    dependence: ConditionDependency
    condition_result: ConditionResult = Field(default_factory=ConditionResult)

    def to_json(self) -> str:
        """Serialize to the stored JSON form."""
        return self.model_dump_json(by_alias=True)
