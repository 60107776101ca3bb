"""
Expense Ledger - the ordered collection of recorded expenses

New expenses go to the head of the collection, so the stored order is
"most recently inserted first". That order is NOT re-sorted by date: a
backdated expense still shows up first.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime

from moneytracker.cards.ledger import CardLedger
from moneytracker.expenses.models import Expense
from moneytracker.kernel.errors import ValidationRejected
from moneytracker.kernel.ids import IdFactory, default_id_factory
from moneytracker.kernel.logging import get_logger
from moneytracker.kernel.metrics import (
    expenses_recorded_total,
    expenses_removed_total,
    record_rejection,
)
from moneytracker.kernel.time import TimeProvider, default_time_provider, ensure_aware, start_of_month
from moneytracker.kernel.validation import require_positive
from moneytracker.lists.registry import ListRegistry
from moneytracker.snapshot import EXPENSES_KEY, SharedSnapshot

logger = get_logger(__name__)


class ExpenseLedger:
    """
    Owns the expenses collection

    Query methods: all, get, filtered_by, total, spend_by_category,
                   total_for_current_calendar_month
    """

    def __init__(
        self,
        snapshot: SharedSnapshot,
        lists: ListRegistry,
        cards: CardLedger,
        time_provider: TimeProvider = default_time_provider,
        id_factory: IdFactory = default_id_factory,
    ) -> None:
        self.snapshot = snapshot
        self.lists = lists
        self.cards = cards
        self.time_provider = time_provider
        self.id_factory = id_factory

    # Commands

    def add(
        self,
        amount: float,
        category_id: str,
        note: str,
        date: datetime,
        card_id: str | None = None,
    ) -> Expense | None:
        """
        Record an expense on the active list

        When a card is given, the card guard runs first and a refusal aborts
        the whole insertion. A card left empty by this expense is archived.

        Returns:
            The new expense, or None if nothing was recorded
        """
        try:
            require_positive(amount, "Expense amount")
        except ValidationRejected as e:
            record_rejection("add_expense", type(e).__name__)
            logger.info("Expense not recorded", reason=str(e))
            return None

        list_id = self.lists.active_list_id()
        if list_id is None:
            record_rejection("add_expense", "NoActiveList")
            logger.info("Expense not recorded", reason="no list")
            return None

        if card_id is not None and not self.cards.record_expense_against_card(card_id, amount):
            return None

        expense = Expense(
            id=self.id_factory.generate(),
            amount=amount,
            category_id=category_id,
            note=note,
            date=ensure_aware(date),
            list_id=list_id,
            card_id=card_id,
        )
        self.snapshot.expenses.insert(0, expense)
        self.snapshot.persist(EXPENSES_KEY)
        expenses_recorded_total.labels(with_card="yes" if card_id else "no").inc()
        logger.info(
            "Expense recorded",
            expense_id=expense.id,
            list_id=list_id,
            category_id=category_id,
            card_id=card_id,
        )

        if card_id is not None:
            self.cards.break_if_exhausted(card_id)

        return expense

    def remove(self, ids: Iterable[str]) -> int:
        """
        Delete every expense whose id is in ids

        Returns:
            Number of expenses removed
        """
        doomed = set(ids)
        before = len(self.snapshot.expenses)
        self.snapshot.expenses = [e for e in self.snapshot.expenses if e.id not in doomed]
        removed = before - len(self.snapshot.expenses)

        if removed:
            self.snapshot.persist(EXPENSES_KEY)
            expenses_removed_total.inc(removed)
            logger.info("Expenses removed", count=removed)
        return removed

    # Queries

    def all(self) -> list[Expense]:
        return list(self.snapshot.expenses)

    def get(self, expense_id: str) -> Expense | None:
        return next((e for e in self.snapshot.expenses if e.id == expense_id), None)

    def filtered_by(
        self, list_id: str | None = None, since: datetime | None = None
    ) -> list[Expense]:
        """Expenses on list_id (any list if None) dated at or after since"""
        if since is not None:
            since = ensure_aware(since)
        return [
            e
            for e in self.snapshot.expenses
            if (list_id is None or e.list_id == list_id)
            and (since is None or e.date >= since)
        ]

    def total(self, list_id: str | None = None, since: datetime | None = None) -> float:
        return sum(e.amount for e in self.filtered_by(list_id, since))

    def spend_by_category(
        self, list_id: str | None = None, since: datetime | None = None
    ) -> dict[str, float]:
        totals: dict[str, float] = defaultdict(float)
        for e in self.filtered_by(list_id, since):
            totals[e.category_id] += e.amount
        return dict(totals)

    def total_for_current_calendar_month(self) -> float:
        """All lists, dated on or after the first of the current month"""
        return self.total(since=start_of_month(self.time_provider.now()))
