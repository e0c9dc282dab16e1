"""Shared fixtures for condflow tests."""

import tempfile
from pathlib import Path

import pytest

from condflow.storage import Database, TaskInstanceStore


@pytest.fixture
async def temp_db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        db = Database(db_path)
        await db.connect()
        yield db
        await db.close()


@pytest.fixture
async def store(temp_db):
    """Create a task instance store."""
    return TaskInstanceStore(temp_db)
