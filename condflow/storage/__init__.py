"""Storage layer for condflow."""

from .database import Database
from .task_instance_store import TaskInstanceStore

__all__ = ["Database", "TaskInstanceStore"]
