"""
Migration - load-time upgrade of persisted data
"""

from moneytracker.migration.chain import MigrationReport, run_migrations
from moneytracker.migration.legacy import LegacyExpense, resolve_category_reference

__all__ = [
    "MigrationReport",
    "run_migrations",
    "LegacyExpense",
    "resolve_category_reference",
]
