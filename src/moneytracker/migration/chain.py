"""
Migration Chain - upgrade persisted data to the current shape at load time

Steps run in a fixed order and each is a no-op on already-migrated data:

1. decode expenses in the current shape, else the legacy shape, else empty
2. resolve every expense's category through the legacy field fallbacks
3. move expenses on a list that no longer exists to the default list
4. move expenses on an unknown category to "other"
5. move cards on a list that no longer exists to the default list
6. drop budgets whose list or category no longer exists

Whatever changed is written back, so the next load takes the fast path.
"""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from moneytracker.categories.models import OTHER_ID
from moneytracker.expenses.models import Expense
from moneytracker.kernel.errors import SnapshotDecodeError
from moneytracker.kernel.logging import get_logger
from moneytracker.kernel.metrics import migration_changes_total, snapshot_decode_failures_total
from moneytracker.lists.registry import ListRegistry
from moneytracker.migration.legacy import LEGACY_CATEGORY_FIELDS, LegacyExpense, resolve_category_reference
from moneytracker.snapshot import BUDGETS_KEY, CARDS_KEY, EXPENSES_KEY, SharedSnapshot

logger = get_logger(__name__)

_expenses_adapter = TypeAdapter(list[Expense])
_legacy_adapter = TypeAdapter(list[LegacyExpense])


class MigrationReport(BaseModel):
    """
    What one run of the chain changed

    A discarded blob is reported but not a change: nothing is written back
    until the user records something.
    """

    used_legacy_shape: bool = False
    discarded_blob: bool = False
    categories_resolved: int = 0
    expenses_relisted: int = 0
    expenses_recategorized: int = 0
    cards_relisted: int = 0
    budgets_dropped: int = 0

    @property
    def changed(self) -> bool:
        return any(
            (
                self.used_legacy_shape,
                self.categories_resolved,
                self.expenses_relisted,
                self.expenses_recategorized,
                self.cards_relisted,
                self.budgets_dropped,
            )
        )


def decode_current_shape(
    raw: Any, known_category_ids: set[str]
) -> tuple[list[Expense], int] | None:
    """
    Decode raw records in the current shape

    Returns:
        (expenses, number of records whose category needed a fallback),
        or None if the records are not in the current shape
    """
    if not isinstance(raw, list) or not all(isinstance(r, dict) for r in raw):
        return None

    resolved = 0
    normalized = []
    for record in raw:
        category_id = resolve_category_reference(record, known_category_ids)
        if category_id != record.get("categoryId"):
            resolved += 1
        cleaned = {k: v for k, v in record.items() if k not in LEGACY_CATEGORY_FIELDS}
        cleaned["categoryId"] = category_id
        normalized.append(cleaned)

    try:
        return _expenses_adapter.validate_python(normalized), resolved
    except ValidationError:
        return None


def decode_legacy_shape(raw: Any, default_list_id: Callable[[], str]) -> list[Expense] | None:
    """
    Decode records in the oldest {id, amount, category, note, date} shape

    Args:
        raw: Parsed blob
        default_list_id: Called (once) only if the blob is legacy, so the
            default list is created only when something needs it
    """
    try:
        legacy = _legacy_adapter.validate_python(raw)
    except ValidationError:
        return None
    list_id = default_list_id()
    return [record.upgrade(list_id) for record in legacy]


def load_expenses(snapshot: SharedSnapshot, lists: ListRegistry, report: MigrationReport) -> None:
    """Steps 1 and 2: fill snapshot.expenses from whatever shape is stored"""
    try:
        raw = snapshot.read_json(EXPENSES_KEY)
    except SnapshotDecodeError as e:
        logger.warning("Expense blob is not valid JSON", error=str(e))
        raw = None
        report.discarded_blob = True
        snapshot_decode_failures_total.labels(key=EXPENSES_KEY).inc()

    if raw is None:
        snapshot.expenses = []
        return

    current = decode_current_shape(raw, snapshot.category_ids())
    if current is not None:
        snapshot.expenses, report.categories_resolved = current
        return

    legacy = decode_legacy_shape(raw, lambda: lists.ensure_default_list().id)
    if legacy is not None:
        snapshot.expenses = legacy
        report.used_legacy_shape = True
        logger.info("Legacy expenses upgraded", count=len(legacy))
        return

    snapshot.expenses = []
    report.discarded_blob = True
    snapshot_decode_failures_total.labels(key=EXPENSES_KEY).inc()
    logger.warning("Expense blob matched no known shape, starting empty")


def reconcile_references(
    snapshot: SharedSnapshot, lists: ListRegistry, report: MigrationReport
) -> None:
    """Steps 3 to 6: repoint or drop records whose references dangle"""
    if not snapshot.lists:
        return

    list_ids = snapshot.list_ids()
    category_ids = snapshot.category_ids()
    default_id = lists.ensure_default_list().id

    for expense in snapshot.expenses:
        if expense.list_id not in list_ids:
            expense.list_id = default_id
            report.expenses_relisted += 1
        if category_ids and expense.category_id not in category_ids:
            expense.category_id = OTHER_ID
            report.expenses_recategorized += 1

    for card in snapshot.cards:
        if card.list_id not in list_ids:
            card.list_id = default_id
            report.cards_relisted += 1

    kept = [
        b
        for b in snapshot.budgets
        if b.list_id in list_ids and (b.category_id is None or b.category_id in category_ids)
    ]
    report.budgets_dropped = len(snapshot.budgets) - len(kept)
    snapshot.budgets = kept


def run_migrations(snapshot: SharedSnapshot, lists: ListRegistry) -> MigrationReport:
    """
    Run the whole chain against a loaded snapshot

    Expects the other collections to be loaded and the seed categories to be
    present already.

    Returns:
        MigrationReport describing every change
    """
    report = MigrationReport()

    load_expenses(snapshot, lists, report)
    lists.ensure_default_list()
    reconcile_references(snapshot, lists, report)

    changed_keys = []
    if (
        report.used_legacy_shape
        or report.categories_resolved
        or report.expenses_relisted
        or report.expenses_recategorized
    ):
        changed_keys.append(EXPENSES_KEY)
    if report.cards_relisted:
        changed_keys.append(CARDS_KEY)
    if report.budgets_dropped:
        changed_keys.append(BUDGETS_KEY)

    if changed_keys:
        snapshot.persist(*changed_keys)
        for step, count in (
            ("legacy_shape", len(snapshot.expenses) if report.used_legacy_shape else 0),
            ("category_fallback", report.categories_resolved),
            ("expense_list", report.expenses_relisted),
            ("expense_category", report.expenses_recategorized),
            ("card_list", report.cards_relisted),
            ("budget_drop", report.budgets_dropped),
        ):
            if count:
                migration_changes_total.labels(step=step).inc(count)
        logger.info("Migration chain applied", **report.model_dump())

    return report
