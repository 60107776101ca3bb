"""
Budget Resolver - budget targets and spend-vs-target aggregation

Spend is never stored; it is summed from the expenses on demand, filtered by
list, optionally by category, optionally by a lower date bound.
"""

from datetime import datetime

from moneytracker.budgets.models import Budget, BudgetProgress, BudgetScope
from moneytracker.categories.registry import CategoryRegistry
from moneytracker.kernel.errors import CategoryNotFound, ListNotFound, ValidationRejected
from moneytracker.kernel.ids import IdFactory, default_id_factory
from moneytracker.kernel.logging import get_logger
from moneytracker.kernel.metrics import record_rejection
from moneytracker.kernel.policy import TrackerPolicy, default_policy
from moneytracker.kernel.time import ensure_aware
from moneytracker.kernel.validation import require_finite
from moneytracker.snapshot import BUDGETS_KEY, SharedSnapshot

logger = get_logger(__name__)


class BudgetResolver:
    """
    Owns the budgets collection

    Query methods: budget_for, budgets_in, spending, progress_for,
                   list_snapshot, category_snapshots
    """

    def __init__(
        self,
        snapshot: SharedSnapshot,
        categories: CategoryRegistry,
        policy: TrackerPolicy = default_policy,
        id_factory: IdFactory = default_id_factory,
    ) -> None:
        self.snapshot = snapshot
        self.categories = categories
        self.policy = policy
        self.id_factory = id_factory

    # Queries

    def budget_for(self, list_id: str, category_id: str | None = None) -> Budget | None:
        """The budget keyed by (list_id, category_id); None category = list budget"""
        return next(
            (
                b
                for b in self.snapshot.budgets
                if b.list_id == list_id and b.category_id == category_id
            ),
            None,
        )

    def budgets_in(self, list_id: str, scope: BudgetScope | None = None) -> list[Budget]:
        return [
            b
            for b in self.snapshot.budgets
            if b.list_id == list_id and (scope is None or b.scope == scope)
        ]

    def spending(
        self,
        list_id: str,
        category_id: str | None = None,
        since: datetime | None = None,
    ) -> float:
        """
        Sum of expenses on list_id

        Args:
            list_id: List to sum
            category_id: Only this category (None = all categories)
            since: Only expenses dated at or after this (None = all time)
        """
        if since is not None:
            since = ensure_aware(since)
        return sum(
            e.amount
            for e in self.snapshot.expenses
            if e.list_id == list_id
            and (category_id is None or e.category_id == category_id)
            and (since is None or e.date >= since)
        )

    def progress_for(self, budget: Budget, since: datetime | None = None) -> BudgetProgress:
        category = self.categories.get(budget.category_id)
        return BudgetProgress(
            budget_id=budget.id,
            title=category.name if category else "List Budget",
            spent=self.spending(budget.list_id, budget.category_id, since),
            limit=budget.amount,
            category_id=budget.category_id,
            icon_name=category.icon_name if category else None,
            color_hex=category.color_hex if category else None,
        )

    def list_snapshot(self, list_id: str, since: datetime | None = None) -> BudgetProgress | None:
        """Progress of the list budget, None when unset or budgets are disabled"""
        if not self.policy.budgets_enabled:
            return None
        budget = self.budget_for(list_id)
        if budget is None or not budget.is_set:
            return None
        return self.progress_for(budget, since)

    def category_snapshots(
        self, list_id: str, since: datetime | None = None
    ) -> list[BudgetProgress]:
        """
        Progress of every set category budget on the list

        Budgets with amount 0 or pointing at an unknown category are skipped.
        Empty when budgets or categories are disabled.
        """
        if not (self.policy.budgets_enabled and self.policy.categories_enabled):
            return []
        return [
            self.progress_for(budget, since)
            for budget in self.budgets_in(list_id, BudgetScope.CATEGORY)
            if budget.is_set and self.categories.get(budget.category_id) is not None
        ]

    # Commands

    def set_budget(
        self,
        list_id: str,
        category_id: str | None,
        amount: float,
        scope: BudgetScope,
    ) -> Budget | None:
        """
        Upsert the budget for (list_id, category_id)

        The amount is clamped to >= 0. An existing budget keeps its id and
        gets the new amount and scope.

        Returns:
            The stored budget, or None if the amount is not a finite number
            or the list or category is unknown
        """
        try:
            require_finite(amount, "Budget amount")
            self._require_targets(list_id, category_id)
        except (ValidationRejected, ListNotFound, CategoryNotFound) as e:
            record_rejection("set_budget", type(e).__name__)
            logger.info("Budget not set", reason=str(e))
            return None

        cleaned = max(amount, 0.0)
        existing = self.budget_for(list_id, category_id)
        if existing is not None:
            existing.amount = cleaned
            existing.scope = scope
            budget = existing
        else:
            budget = Budget(
                id=self.id_factory.generate(),
                list_id=list_id,
                category_id=category_id,
                amount=cleaned,
                scope=scope,
            )
            self.snapshot.budgets.append(budget)

        self.snapshot.persist(BUDGETS_KEY)
        logger.info(
            "Budget set",
            budget_id=budget.id,
            list_id=list_id,
            category_id=category_id,
            scope=scope.value,
        )
        return budget

    def remove_budget(self, list_id: str, category_id: str | None = None) -> bool:
        """Delete the budget for (list_id, category_id), if any"""
        before = len(self.snapshot.budgets)
        self.snapshot.budgets = [
            b
            for b in self.snapshot.budgets
            if not (b.list_id == list_id and b.category_id == category_id)
        ]
        if len(self.snapshot.budgets) == before:
            return False

        self.snapshot.persist(BUDGETS_KEY)
        logger.info("Budget removed", list_id=list_id, category_id=category_id)
        return True

    # Internals

    def _require_targets(self, list_id: str, category_id: str | None) -> None:
        if list_id not in self.snapshot.list_ids():
            raise ListNotFound(list_id)
        if category_id is not None and self.categories.get(category_id) is None:
            raise CategoryNotFound(category_id)
