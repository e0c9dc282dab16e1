"""condflow - condition task evaluation for workflow engines."""

__version__ = "1.0.0"
