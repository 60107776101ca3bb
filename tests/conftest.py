"""
Pytest configuration and shared fixtures

Fun fact: The name "conftest" comes from pytest's configuration testing
framework. Files named conftest.py are automatically discovered and their
fixtures are available to all tests in the same directory and subdirectories!
"""

import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

import pytest

from moneytracker.kernel.ids import SequentialIdFactory
from moneytracker.kernel.kv_store import InMemoryKeyValueStore, SQLiteKeyValueStore
from moneytracker.kernel.policy import TrackerPolicy
from moneytracker.kernel.time import TestTimeProvider
from moneytracker.tracker import MoneyTracker


@pytest.fixture
def temp_db() -> Iterator[Path]:
    """Provide a temporary database file that's cleaned up after test"""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    # Cleanup
    if db_path.exists():
        db_path.unlink()


@pytest.fixture
def sqlite_store(temp_db: Path) -> SQLiteKeyValueStore:
    """Provide a fresh on-disk key-value store for each test"""
    return SQLiteKeyValueStore(temp_db)


@pytest.fixture
def backend() -> InMemoryKeyValueStore:
    """Provide an empty in-memory key-value store"""
    return InMemoryKeyValueStore()


@pytest.fixture
def test_time() -> TestTimeProvider:
    """
    Provide a controllable time provider for deterministic tests

    Default time: 2025-01-15 12:00:00 UTC (a Wednesday in the middle of the
    month, so week, 30-day and calendar-month windows all differ).
    Day and month boundaries are computed in UTC.
    """
    return TestTimeProvider(datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def policy() -> TrackerPolicy:
    """Provide the default tracker policy"""
    return TrackerPolicy()


@pytest.fixture
def id_factory() -> SequentialIdFactory:
    """Readable, deterministic ids: id-0001, id-0002, ..."""
    return SequentialIdFactory("id")


@pytest.fixture
def tracker(
    backend: InMemoryKeyValueStore,
    policy: TrackerPolicy,
    test_time: TestTimeProvider,
    id_factory: SequentialIdFactory,
) -> MoneyTracker:
    """
    Provide a freshly opened tracker

    After opening there is one list ("General", active) and the five seed
    categories.
    """
    return MoneyTracker(backend, policy=policy, time_provider=test_time, id_factory=id_factory)


@pytest.fixture
def general_id(tracker: MoneyTracker) -> str:
    """Id of the default list"""
    return tracker.lists.active_list_id()
