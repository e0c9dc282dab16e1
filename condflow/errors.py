"""Exceptions raised by condflow."""


class CondflowError(Exception):
    """Base class for condflow errors."""


class TaskParameterError(CondflowError, ValueError):
    """A task's parameter blob could not be deserialized."""


class TaskInstanceNotFoundError(CondflowError, LookupError):
    """A task instance id is unknown to the workflow run or the store."""


class UnknownTaskTypeError(CondflowError, LookupError):
    """No logic task is registered for a task type."""


class LogicTaskExecuteError(CondflowError, RuntimeError):
    """A logic task failed while running."""
