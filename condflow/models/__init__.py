"""Core data models for condflow."""

from .enums import TaskExecutionStatus, DependResult, DependentRelation, Flag
from .task_instance import TaskInstance
from .parameters import (
    ConditionDependentItem,
    DependentTaskModel,
    ConditionDependency,
    ConditionResult,
    ConditionsParameters,
)

__all__ = [
    "TaskExecutionStatus",
    "DependResult",
    "DependentRelation",
    "Flag",
    "TaskInstance",
    "ConditionDependentItem",
    "DependentTaskModel",
    "ConditionDependency",
    "ConditionResult",
    "ConditionsParameters",
]
