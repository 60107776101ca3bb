"""
Shared Snapshot - the one persisted state both surfaces read

All entities live in one snapshot made of independent blobs, one per key.
The main application (here: the CLI / MoneyTracker facade) is the only
writer; the widget opens the same backend read-only. Each collection is
rewritten whole on every change, so the last write wins per key.
"""

import json
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from moneytracker.budgets.models import Budget
from moneytracker.cards.models import Card
from moneytracker.categories.models import Category
from moneytracker.expenses.models import Expense
from moneytracker.kernel.errors import ReadOnlySnapshotError, SnapshotDecodeError
from moneytracker.kernel.kv_store import KeyValueStore
from moneytracker.kernel.logging import get_logger
from moneytracker.kernel.metrics import snapshot_decode_failures_total, snapshot_writes_total
from moneytracker.lists.models import ExpenseList

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

LISTS_KEY = "lists_v1"
SELECTED_LIST_KEY = "selected_list_v1"
CATEGORIES_KEY = "categories_v1"
CARDS_KEY = "cards_v1"
BUDGETS_KEY = "budgets_v1"
EXPENSES_KEY = "expenses_v1"

ALL_KEYS = (
    LISTS_KEY,
    SELECTED_LIST_KEY,
    CATEGORIES_KEY,
    CARDS_KEY,
    BUDGETS_KEY,
    EXPENSES_KEY,
)

_COLLECTION_ATTRS = {
    LISTS_KEY: "lists",
    CATEGORIES_KEY: "categories",
    CARDS_KEY: "cards",
    BUDGETS_KEY: "budgets",
    EXPENSES_KEY: "expenses",
}


class SharedSnapshot:
    """
    In-memory view of the persisted state plus the backend it came from

    Collections are plain ordered lists; order is meaningful (expenses are
    newest-inserted first, the default list is first).
    """

    def __init__(self, backend: KeyValueStore, *, read_only: bool = False) -> None:
        """
        Args:
            backend: Key-value store holding the blobs
            read_only: Refuse all writes (widget / report consumers)
        """
        self.backend = backend
        self.read_only = read_only

        self.lists: list[ExpenseList] = []
        self.selected_list_id: str | None = None
        self.categories: list[Category] = []
        self.cards: list[Card] = []
        self.budgets: list[Budget] = []
        self.expenses: list[Expense] = []

    # Reading

    def read_json(self, key: str) -> Any | None:
        """
        Parse the blob under key

        Returns:
            Parsed JSON, or None when the key is absent

        Raises:
            SnapshotDecodeError: If the blob is not valid JSON
        """
        blob = self.backend.get(key)
        if blob is None:
            return None
        try:
            return json.loads(blob)
        except json.JSONDecodeError as e:
            raise SnapshotDecodeError(key, str(e)) from e

    def decode_collection(self, key: str, model: type[M]) -> list[M] | None:
        """
        Decode a whole collection in its current shape

        A blob that does not decode is treated as missing: the caller gets
        None and starts from an empty collection rather than failing.
        """
        try:
            raw = self.read_json(key)
            if raw is None:
                return None
            return TypeAdapter(list[model]).validate_python(raw)
        except (SnapshotDecodeError, ValidationError) as e:
            snapshot_decode_failures_total.labels(key=key).inc()
            logger.warning("Discarding undecodable collection", key=key, error=str(e))
            return None

    def decode_selected_list(self) -> str | None:
        try:
            raw = self.read_json(SELECTED_LIST_KEY)
        except SnapshotDecodeError:
            return None
        return raw if isinstance(raw, str) and raw else None

    def load(self) -> None:
        """
        Load every collection except expenses

        Expenses may be in a legacy shape and are decoded by the migration
        chain instead.
        """
        self.lists = self.decode_collection(LISTS_KEY, ExpenseList) or []
        self.selected_list_id = self.decode_selected_list()
        self.categories = self.decode_collection(CATEGORIES_KEY, Category) or []
        self.cards = self.decode_collection(CARDS_KEY, Card) or []
        self.budgets = self.decode_collection(BUDGETS_KEY, Budget) or []

    # Writing

    def persist(self, *keys: str) -> None:
        """
        Write the named collections back to the backend

        Raises:
            ReadOnlySnapshotError: If this snapshot was opened read-only
        """
        for key in keys:
            if self.read_only:
                raise ReadOnlySnapshotError(key)

            if key == SELECTED_LIST_KEY:
                if self.selected_list_id is None:
                    self.backend.delete(key)
                else:
                    self.backend.set(key, json.dumps(self.selected_list_id))
            else:
                records = getattr(self, _COLLECTION_ATTRS[key])
                self.backend.set(key, json.dumps([r.to_stored() for r in records]))

            snapshot_writes_total.labels(key=key).inc()
            logger.debug("Snapshot collection written", key=key)

    # Lookups shared by the ledgers

    def list_ids(self) -> set[str]:
        return {lst.id for lst in self.lists}

    def category_ids(self) -> set[str]:
        return {c.id for c in self.categories}
