"""Execution engine for condflow."""

from .context import TaskExecutionContext, WorkflowExecuteContext
from .dependent import DependencyEvaluator, get_depend_result_for_relation
from .executor import LogicTaskExecutor
from .lifecycle import TaskLifecycleListener

__all__ = [
    "TaskExecutionContext",
    "WorkflowExecuteContext",
    "DependencyEvaluator",
    "get_depend_result_for_relation",
    "LogicTaskExecutor",
    "TaskLifecycleListener",
]
