"""Load engine configuration from YAML files."""

import logging
import os
from pathlib import Path
from typing import Optional
import yaml

from .engine_config import EngineConfig

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def load_config_from_yaml(config_path: Optional[Path] = None) -> EngineConfig:
    """
    Load the engine configuration from a YAML file.

    Expected format:

    ```yaml
    engine:
      db_path: data/condflow.db
      log_level: info
    api:
      host: 127.0.0.1
      port: 8000
    ```

    Missing keys keep their defaults. `CONDFLOW_DB_PATH` and
    `CONDFLOW_LOG_LEVEL` override the file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        The loaded EngineConfig
    """
    data = {}
    if config_path is not None:
        if not config_path.exists():
            logger.warning(f"Engine config file not found: {config_path}, using defaults")
        else:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

    config = _parse_engine_config(data)

    if "CONDFLOW_DB_PATH" in os.environ:
        config.db_path = Path(os.environ["CONDFLOW_DB_PATH"])
    if "CONDFLOW_LOG_LEVEL" in os.environ:
        config.log_level = os.environ["CONDFLOW_LOG_LEVEL"]

    return config


def _parse_engine_config(data: dict) -> EngineConfig:
    """Parse an engine configuration from dict."""
    engine = data.get("engine") or {}
    api = data.get("api") or {}
    defaults = EngineConfig()

    db_path = Path(os.path.expandvars(str(engine.get("db_path", defaults.db_path)))).expanduser()

    return EngineConfig(
        db_path=db_path,
        log_level=str(engine.get("log_level", defaults.log_level)),
        host=str(api.get("host", defaults.host)),
        port=int(api.get("port", defaults.port)),
    )


def save_config_to_yaml(config: EngineConfig, config_path: Path) -> None:
    """
    Save an engine configuration to a YAML file.

    Args:
        config: The configuration to write
        config_path: Path to write the YAML file
    """
    data = {
        "engine": {
            "db_path": str(config.db_path),
            "log_level": config.log_level,
        },
        "api": {
            "host": config.host,
            "port": config.port,
        },
    }

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True)

    logger.info(f"Saved engine configuration to {config_path}")


def setup_logging(level: str = "info") -> None:
    """Configure root logging for the engine."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=LOG_FORMAT,
    )


# Example configuration template
EXAMPLE_CONFIG = """# condflow engine configuration

engine:
  # SQLite database holding task instances
  db_path: data/condflow.db
  # debug, info, warning, error
  log_level: info

api:
  host: 127.0.0.1
  port: 8000
"""


def write_example_config(config_path: Path) -> None:
    """Write an example configuration file."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        f.write(EXAMPLE_CONFIG)
    logger.info(f"Wrote example engine configuration to {config_path}")
