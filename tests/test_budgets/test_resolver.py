"""
Tests for Budget Resolver - upserts, spend aggregation, and progress views
"""

from datetime import datetime, timezone

import pytest

from moneytracker.budgets.models import Budget, BudgetProgress, BudgetScope, Period
from moneytracker.budgets.resolver import BudgetResolver
from moneytracker.categories.models import FOOD_ID, FUN_ID, TRANSPORT_ID, default_categories
from moneytracker.categories.registry import CategoryRegistry
from moneytracker.kernel.kv_store import InMemoryKeyValueStore
from moneytracker.kernel.policy import TrackerPolicy
from moneytracker.lists.models import ExpenseList
from moneytracker.snapshot import SharedSnapshot
from tests.helpers import utc


def add(tracker, amount, category_id=FOOD_ID, date=None):
    return tracker.expenses.add(amount, category_id, "", date or tracker.now())


# =============================================================================
# Upsert / Remove
# =============================================================================


def test_set_list_budget(tracker, general_id):
    budget = tracker.budgets.set_budget(general_id, None, 500, BudgetScope.LIST)

    assert budget.amount == 500
    assert budget.scope == BudgetScope.LIST
    assert tracker.budgets.budget_for(general_id) == budget


def test_set_budget_is_an_upsert(tracker, general_id):
    first = tracker.budgets.set_budget(general_id, FOOD_ID, 100, BudgetScope.CATEGORY)
    second = tracker.budgets.set_budget(general_id, FOOD_ID, 150, BudgetScope.CATEGORY)

    assert second.id == first.id
    assert tracker.budgets.budget_for(general_id, FOOD_ID).amount == 150
    assert len(tracker.budgets.budgets_in(general_id)) == 1


def test_negative_amount_clamped_to_zero(tracker, general_id):
    budget = tracker.budgets.set_budget(general_id, None, -20, BudgetScope.LIST)
    assert budget.amount == 0
    assert budget.is_set is False


@pytest.mark.parametrize("amount", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_amount_rejected(tracker, general_id, amount):
    """Test a NaN or infinite amount is refused without raising, on insert and on upsert"""
    assert tracker.budgets.set_budget(general_id, None, amount, BudgetScope.LIST) is None
    assert tracker.budgets.budgets_in(general_id) == []

    tracker.budgets.set_budget(general_id, FOOD_ID, 80, BudgetScope.CATEGORY)
    assert tracker.budgets.set_budget(general_id, FOOD_ID, amount, BudgetScope.CATEGORY) is None
    assert tracker.budgets.budget_for(general_id, FOOD_ID).amount == 80


def test_budget_for_unknown_list_rejected(tracker):
    assert tracker.budgets.set_budget("nope", None, 100, BudgetScope.LIST) is None
    assert tracker.budgets.budgets_in("nope") == []


def test_budget_for_unknown_category_rejected(tracker, general_id):
    assert tracker.budgets.set_budget(general_id, "nope", 100, BudgetScope.CATEGORY) is None
    assert tracker.budgets.budgets_in(general_id) == []


def test_list_and_category_budgets_are_separate(tracker, general_id):
    tracker.budgets.set_budget(general_id, None, 1000, BudgetScope.LIST)
    tracker.budgets.set_budget(general_id, FOOD_ID, 200, BudgetScope.CATEGORY)

    assert len(tracker.budgets.budgets_in(general_id)) == 2
    assert len(tracker.budgets.budgets_in(general_id, BudgetScope.CATEGORY)) == 1


def test_remove_budget(tracker, general_id):
    tracker.budgets.set_budget(general_id, FOOD_ID, 200, BudgetScope.CATEGORY)

    assert tracker.budgets.remove_budget(general_id, FOOD_ID) is True
    assert tracker.budgets.budget_for(general_id, FOOD_ID) is None
    assert tracker.budgets.remove_budget(general_id, FOOD_ID) is False


# =============================================================================
# Spending
# =============================================================================


def test_spending_filters_list_category_and_date(tracker, general_id):
    add(tracker, 10, FOOD_ID, utc(2025, 1, 14))
    add(tracker, 20, TRANSPORT_ID, utc(2025, 1, 14))
    add(tracker, 40, FOOD_ID, utc(2024, 11, 1))

    trip = tracker.lists.add_list("Trip")
    add(tracker, 1000, FOOD_ID, utc(2025, 1, 14))

    since = utc(2025, 1, 1, hour=0)
    assert tracker.budgets.spending(general_id) == 70
    assert tracker.budgets.spending(general_id, FOOD_ID) == 50
    assert tracker.budgets.spending(general_id, since=since) == 30
    assert tracker.budgets.spending(general_id, FOOD_ID, since) == 10
    assert tracker.budgets.spending(trip.id) == 1000


def test_spending_accepts_naive_since(tracker, general_id):
    """Test a naive lower bound is taken as local time, like naive expense dates"""
    add(tracker, 10, date=utc(2025, 1, 14))

    assert tracker.budgets.spending(general_id, since=datetime(2025, 1, 1)) == 10
    assert tracker.budgets.spending(general_id, since=datetime(2025, 2, 1)) == 0


def test_list_snapshot_progress(tracker, general_id):
    tracker.budgets.set_budget(general_id, None, 200, BudgetScope.LIST)
    add(tracker, 150)

    snapshot = tracker.budgets.list_snapshot(general_id)

    assert snapshot.spent == 150
    assert snapshot.limit == 200
    assert snapshot.progress == pytest.approx(0.75)
    assert snapshot.remaining == 50


def test_list_snapshot_none_when_unset_or_zero(tracker, general_id):
    assert tracker.budgets.list_snapshot(general_id) is None

    tracker.budgets.set_budget(general_id, None, 0, BudgetScope.LIST)
    assert tracker.budgets.list_snapshot(general_id) is None


def test_list_snapshot_respects_period(tracker, general_id):
    tracker.budgets.set_budget(general_id, None, 100, BudgetScope.LIST)
    add(tracker, 30, date=utc(2025, 1, 14))
    add(tracker, 60, date=utc(2025, 1, 2))

    week = Period.WEEK.start_date(tracker.now())
    assert tracker.budgets.list_snapshot(general_id, week).spent == 30
    assert tracker.budgets.list_snapshot(general_id).spent == 90


def test_category_snapshots_skip_unset_budgets(tracker, general_id):
    tracker.budgets.set_budget(general_id, FOOD_ID, 100, BudgetScope.CATEGORY)
    tracker.budgets.set_budget(general_id, FUN_ID, 0, BudgetScope.CATEGORY)
    add(tracker, 25, FOOD_ID)

    snapshots = tracker.budgets.category_snapshots(general_id)

    assert len(snapshots) == 1
    assert snapshots[0].title == "Food"
    assert snapshots[0].spent == 25
    assert snapshots[0].color_hex == "FF6B81"


def test_category_snapshots_skip_unknown_category():
    """Test a budget pointing at a vanished category is not shown"""
    snapshot = SharedSnapshot(InMemoryKeyValueStore())
    snapshot.lists = [ExpenseList(id="l1", name="General")]
    snapshot.categories = default_categories()
    snapshot.budgets = [
        Budget(id="b1", list_id="l1", category_id="ghost", amount=50, scope=BudgetScope.CATEGORY),
        Budget(id="b2", list_id="l1", category_id=FOOD_ID, amount=50, scope=BudgetScope.CATEGORY),
    ]
    resolver = BudgetResolver(snapshot, CategoryRegistry(snapshot))

    assert [s.budget_id for s in resolver.category_snapshots("l1")] == ["b2"]


# =============================================================================
# Feature Toggles
# =============================================================================


def test_budgets_disabled_hides_snapshots(tracker, general_id):
    tracker.budgets.set_budget(general_id, None, 100, BudgetScope.LIST)
    tracker.budgets.set_budget(general_id, FOOD_ID, 100, BudgetScope.CATEGORY)

    tracker.budgets.policy = TrackerPolicy(budgets_enabled=False)

    assert tracker.budgets.list_snapshot(general_id) is None
    assert tracker.budgets.category_snapshots(general_id) == []
    # Data is kept
    assert len(tracker.budgets.budgets_in(general_id)) == 2


def test_categories_disabled_hides_category_budgets_only(tracker, general_id):
    tracker.budgets.set_budget(general_id, None, 100, BudgetScope.LIST)
    tracker.budgets.set_budget(general_id, FOOD_ID, 100, BudgetScope.CATEGORY)

    tracker.budgets.policy = TrackerPolicy(categories_enabled=False)

    assert tracker.budgets.list_snapshot(general_id) is not None
    assert tracker.budgets.category_snapshots(general_id) == []


# =============================================================================
# Views and Periods
# =============================================================================


def test_progress_zero_when_limit_zero():
    view = BudgetProgress(budget_id="b", title="t", spent=50, limit=0)
    assert view.progress == 0
    assert view.remaining == 0


def test_remaining_clamped_when_over():
    view = BudgetProgress(budget_id="b", title="t", spent=150, limit=100)
    assert view.progress == pytest.approx(1.5)
    assert view.remaining == 0


def test_period_start_dates():
    now = datetime(2025, 1, 15, 12, tzinfo=timezone.utc)

    assert Period.WEEK.start_date(now) == datetime(2025, 1, 9, tzinfo=timezone.utc)
    assert Period.MONTH.start_date(now) == datetime(2024, 12, 17, tzinfo=timezone.utc)
    assert Period.ALL.start_date(now) is None


def test_period_titles():
    assert Period.WEEK.title == "Last 7 Days"
    assert Period.MONTH.title == "Last 30 Days"
    assert Period.ALL.title == "All Time"
