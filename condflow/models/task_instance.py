"""TaskInstance model - one executed occurrence of a task in a workflow run."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from .enums import TaskExecutionStatus, Flag


class TaskInstance(BaseModel):
    """
    Represents one execution attempt of a task within a workflow run.

    Task instances are owned by the workflow engine. Logic tasks (such as the
    condition task) read the instances of their workflow run to decide what
    happens next, and update only their own instance.
    """

    id: int
    """Unique identifier for this task instance."""

    name: str = ""
    """Human-readable task name (for display)."""

    task_type: str = ""
    """Type of the task, used to pick the logic task implementation."""

    task_code: int
    """Stable identifier of the task definition (unique within a run)."""

    workflow_instance_id: int
    """The workflow run this instance belongs to."""

    state: TaskExecutionStatus = TaskExecutionStatus.SUBMITTED_SUCCESS
    """Current execution status."""

    flag: Flag = Flag.YES
    """Whether this record is the current attempt for its task."""

    test_flag: int = 0
    """1 for instances created by a test run, 0 for production runs."""

    retry_times: int = 0
    """How many times this task has been retried (0 for the first attempt)."""

    task_params: str = "{}"
    """JSON parameter blob for the task's logic."""

    # Timestamps
    submit_time: datetime = Field(default_factory=datetime.utcnow)
    """When this instance was submitted."""

    start_time: Optional[datetime] = None
    """When this instance started running."""

    end_time: Optional[datetime] = None
    """When this instance finished."""

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    # State transitions

    def mark_running(self) -> None:
        """Mark the instance as running."""
        self.state = TaskExecutionStatus.RUNNING_EXECUTION
        if self.start_time is None:
            self.start_time = datetime.utcnow()

    def mark_success(self) -> None:
        """Mark the instance as successfully finished."""
        self.state = TaskExecutionStatus.SUCCESS
        self.end_time = datetime.utcnow()

    def mark_failure(self) -> None:
        """Mark the instance as failed."""
        self.state = TaskExecutionStatus.FAILURE
        self.end_time = datetime.utcnow()

    # Computed properties

    @property
    def is_valid(self) -> bool:
        """Check if this record has not been superseded."""
        return self.flag == Flag.YES

    @property
    def is_finished(self) -> bool:
        """Check if the instance is in a terminal state."""
        return TaskExecutionStatus(self.state).is_finished

    @property
    def duration_seconds(self) -> Optional[float]:
        """Calculate how long this instance ran."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None
