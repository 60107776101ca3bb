"""
Dashboard - per-list summary for a period

Read model over the ledgers: period total, spend by category, budget
progress, card balances and the alerts that apply right now.
"""

from datetime import datetime

from pydantic import BaseModel

from moneytracker.budgets.models import Alert, BudgetProgress, Period
from moneytracker.budgets.resolver import BudgetResolver
from moneytracker.budgets.triggers import evaluate_alerts
from moneytracker.cards.ledger import CardLedger
from moneytracker.cards.models import CardBalance
from moneytracker.categories.registry import CategoryRegistry
from moneytracker.expenses.ledger import ExpenseLedger
from moneytracker.kernel.policy import TrackerPolicy
from moneytracker.lists.registry import ListRegistry


class CategorySpend(BaseModel):
    """Spend on one category within the period"""

    category_id: str
    name: str
    amount: float


class DashboardSummary(BaseModel):
    """Everything the main screen shows for the active list"""

    list_id: str
    list_name: str
    period: Period
    since: datetime | None
    total: float
    by_category: list[CategorySpend]
    list_budget: BudgetProgress | None
    category_budgets: list[BudgetProgress]
    active_cards: list[CardBalance]
    broken_cards: list[CardBalance]
    alerts: list[Alert]


def spend_breakdown(
    expenses: ExpenseLedger,
    categories: CategoryRegistry,
    list_id: str,
    since: datetime | None,
) -> list[CategorySpend]:
    """Spend per category, largest first; unknown categories shown as 'Unknown'"""
    breakdown = []
    for category_id, amount in expenses.spend_by_category(list_id, since).items():
        category = categories.get(category_id)
        name = categories.display_name(category) if category else "Unknown"
        breakdown.append(CategorySpend(category_id=category_id, name=name, amount=amount))
    breakdown.sort(key=lambda item: item.amount, reverse=True)
    return breakdown


def build_dashboard(
    lists: ListRegistry,
    categories: CategoryRegistry,
    cards: CardLedger,
    budgets: BudgetResolver,
    expenses: ExpenseLedger,
    policy: TrackerPolicy,
    now: datetime,
    period: Period = Period.MONTH,
) -> DashboardSummary | None:
    """
    Summarize the active list over a period

    Returns:
        DashboardSummary, or None when there is no list
    """
    active = lists.active_list()
    if active is None:
        return None

    since = period.start_date(now)
    list_budget = budgets.list_snapshot(active.id, since)
    category_budgets = budgets.category_snapshots(active.id, since)
    active_cards = [cards.balance(c.id) for c in cards.active_cards(active.id)]
    broken_cards = [cards.balance(c.id) for c in cards.broken_cards(active.id)]

    return DashboardSummary(
        list_id=active.id,
        list_name=active.name,
        period=period,
        since=since,
        total=expenses.total(active.id, since),
        by_category=spend_breakdown(expenses, categories, active.id, since),
        list_budget=list_budget,
        category_budgets=category_budgets,
        active_cards=active_cards,
        broken_cards=broken_cards,
        alerts=evaluate_alerts(list_budget, category_budgets, active_cards, policy),
    )
