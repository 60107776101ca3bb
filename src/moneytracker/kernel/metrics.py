"""
Prometheus metrics for Moneytracker.

Counts what the ledger does (expenses recorded, insertions refused, cards
archived, migrations applied) so a long-running process embedding the
tracker can expose them with prometheus_client. Nothing here influences ledger behavior.
"""

import time
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from prometheus_client import Counter, Histogram

# ============================================================================
# Ledger Metrics
# ============================================================================

expenses_recorded_total = Counter(
    "moneytracker_expenses_recorded_total",
    "Total number of expenses inserted into the ledger",
    ["with_card"],  # "yes" / "no"
)

expenses_removed_total = Counter(
    "moneytracker_expenses_removed_total",
    "Total number of expenses deleted",
)

rejections_total = Counter(
    "moneytracker_rejections_total",
    "Operations refused by validation or invariant guards",
    ["operation", "reason"],
)

card_transitions_total = Counter(
    "moneytracker_card_transitions_total",
    "Card state transitions",
    ["transition", "trigger"],  # transition: break/restore, trigger: auto/manual/reconcile
)

categories_removed_total = Counter(
    "moneytracker_categories_removed_total",
    "Categories removed, including cascaded subcategories",
)

# ============================================================================
# Snapshot Metrics
# ============================================================================

migration_changes_total = Counter(
    "moneytracker_migration_changes_total",
    "Records rewritten by the migration chain",
    ["step"],
)

snapshot_writes_total = Counter(
    "moneytracker_snapshot_writes_total",
    "Collections written to the key-value backend",
    ["key"],
)

snapshot_decode_failures_total = Counter(
    "moneytracker_snapshot_decode_failures_total",
    "Persisted blobs that matched no known shape and were reset to empty",
    ["key"],
)

operation_duration_seconds = Histogram(
    "moneytracker_operation_duration_seconds",
    "Duration of tracker operations in seconds",
    ["operation"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

# ============================================================================
# Helper Functions
# ============================================================================

P = ParamSpec("P")
R = TypeVar("R")


def track_operation_duration(operation: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorator to track how long a tracker operation takes.

    Args:
        operation: Operation label (e.g. "open", "widget_entry")
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                operation_duration_seconds.labels(operation=operation).observe(
                    time.perf_counter() - start
                )

        return wrapper

    return decorator


def record_rejection(operation: str, reason: str) -> None:
    """Count a refused operation"""
    rejections_total.labels(operation=operation, reason=reason).inc()

