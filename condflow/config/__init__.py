"""Configuration for condflow."""

from .engine_config import EngineConfig
from .config_loader import (
    load_config_from_yaml,
    save_config_to_yaml,
    setup_logging,
    write_example_config,
)

__all__ = [
    "EngineConfig",
    "load_config_from_yaml",
    "save_config_to_yaml",
    "setup_logging",
    "write_example_config",
]
