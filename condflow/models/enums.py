"""Enumerations for condflow."""

from enum import Enum


class TaskExecutionStatus(str, Enum):
    """Execution status of a task instance."""

    SUBMITTED_SUCCESS = "SUBMITTED_SUCCESS"
    """Task instance was submitted to the engine."""

    DISPATCH = "DISPATCH"
    """Task instance was dispatched to an executor."""

    RUNNING_EXECUTION = "RUNNING_EXECUTION"
    """Task instance is running."""

    DELAY_EXECUTION = "DELAY_EXECUTION"
    """Task instance is waiting for its configured delay."""

    PAUSE = "PAUSE"
    """Task instance was paused."""

    KILL = "KILL"
    """Task instance was killed."""

    FAILURE = "FAILURE"
    """Task instance finished with an error."""

    SUCCESS = "SUCCESS"
    """Task instance finished successfully."""

    FORCED_SUCCESS = "FORCED_SUCCESS"
    """Task instance was marked successful by an operator."""

    NEED_FAULT_TOLERANCE = "NEED_FAULT_TOLERANCE"
    """Task instance lost its executor and must be recovered."""

    @property
    def is_finished(self) -> bool:
        """Check if this status is terminal."""
        return self in (
            TaskExecutionStatus.SUCCESS,
            TaskExecutionStatus.FORCED_SUCCESS,
            TaskExecutionStatus.FAILURE,
            TaskExecutionStatus.KILL,
            TaskExecutionStatus.PAUSE,
        )


class DependResult(str, Enum):
    """Result of a dependency check."""

    SUCCESS = "SUCCESS"
    """The dependency is satisfied."""

    FAILED = "FAILED"
    """The dependency is not satisfied."""

    WAITING = "WAITING"
    """The dependency cannot be decided yet."""


class DependentRelation(str, Enum):
    """How a list of dependency results is combined."""

    AND = "AND"
    OR = "OR"


class Flag(str, Enum):
    """Validity flag of a task instance record."""

    YES = "yes"
    """The record is the current attempt for its task."""

    NO = "no"
    """The record was superseded (e.g. by a retry)."""
