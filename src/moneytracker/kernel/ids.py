"""
Identifier generation for ledger entities

Lists, categories, cards, budgets and expenses are keyed by opaque string ids
that stay stable for the entity's lifetime. New ids are UUIDv7-shaped so
they sort roughly by creation time; ids read from older snapshots are kept
exactly as stored.
"""

import secrets
import time
import uuid
from typing import Protocol


class IdFactory(Protocol):
    """Protocol for ID generation strategies"""

    def generate(self) -> str:
        """Generate a new unique ID"""
        ...


def generate_id() -> str:
    """
    Generate a UUIDv7-like identifier (time-ordered UUID)

    First 48 bits: Unix timestamp in milliseconds, then the version nibble,
    variant bits and 74 random bits.

    Returns:
        UUID string (e.g., "01908e9a-3b87-7000-8000-123456789abc")
    """
    timestamp_48 = int(time.time() * 1000) & 0xFFFFFFFFFFFF
    rand_12 = secrets.randbits(12)
    rand_62 = secrets.randbits(62)

    value = (timestamp_48 << 80) | (0x7 << 76) | (rand_12 << 64) | (0b10 << 62) | rand_62
    return str(uuid.UUID(int=value))


def is_uuid(value: str) -> bool:
    """Check whether a string parses as a UUID (any case, with hyphens)"""
    try:
        uuid.UUID(value)
    except (ValueError, AttributeError, TypeError):
        return False
    return True


class DefaultIdFactory:
    """Default ID factory using UUIDv7-like generation"""

    def generate(self) -> str:
        return generate_id()


class SequentialIdFactory:
    """
    Deterministic ID factory for tests and reproducible fixtures

    Produces "<prefix>-0001", "<prefix>-0002", ...
    """

    def __init__(self, prefix: str = "id") -> None:
        self.prefix = prefix
        self._counter = 0

    def generate(self) -> str:
        self._counter += 1
        return f"{self.prefix}-{self._counter:04d}"


# Global default factory
default_id_factory = DefaultIdFactory()
