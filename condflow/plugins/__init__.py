"""Logic task plugins for condflow."""

from .base import AbstractLogicTask
from .condition import ConditionLogicTask
from .registry import LogicTaskRegistry, default_registry

__all__ = ["AbstractLogicTask", "ConditionLogicTask", "LogicTaskRegistry", "default_registry"]
