"""
Kernel - shared infrastructure for the ledger modules

Ids, time, errors, policy, logging, metrics and the key-value backend that
every domain package builds on.
"""

from moneytracker.kernel.errors import (
    InvariantViolation,
    MoneytrackerError,
    SnapshotError,
    ValidationRejected,
)
from moneytracker.kernel.ids import IdFactory, SequentialIdFactory, generate_id
from moneytracker.kernel.kv_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SQLiteKeyValueStore,
)
from moneytracker.kernel.policy import TrackerPolicy
from moneytracker.kernel.time import RealTimeProvider, TestTimeProvider, TimeProvider

__all__ = [
    # IDs
    "IdFactory",
    "SequentialIdFactory",
    "generate_id",
    # Time
    "TimeProvider",
    "RealTimeProvider",
    "TestTimeProvider",
    # Storage
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SQLiteKeyValueStore",
    # Policy
    "TrackerPolicy",
    # Errors
    "MoneytrackerError",
    "ValidationRejected",
    "InvariantViolation",
    "SnapshotError",
]
