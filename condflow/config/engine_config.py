"""Engine configuration."""

from dataclasses import dataclass
from pathlib import Path


@dataclass
class EngineConfig:
    """Configuration for the condflow engine and its API server.

    Attributes:
        db_path: SQLite database holding task instances
        log_level: Root log level name (e.g. "info", "debug")
        host: Host the API server binds to
        port: Port the API server binds to
    """
    db_path: Path = Path("data/condflow.db")
    log_level: str = "info"
    host: str = "127.0.0.1"
    port: int = 8000
