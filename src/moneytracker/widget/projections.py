"""
Widget Projections - derive a WidgetEntry from the shared snapshot

The widget is a separate reader: it opens the backend read-only, decodes
what it can and never migrates or writes anything back. Aggregation goes
through the same resolver and card ledger the main application uses, so both
surfaces agree on the numbers.

Fun fact: the widget may lag the app by up to one refresh interval, and
that's fine - nobody needs their coffee budget to the second!
"""

from datetime import timedelta

from moneytracker.budgets.resolver import BudgetResolver
from moneytracker.cards.ledger import CardLedger
from moneytracker.categories.registry import CategoryRegistry
from moneytracker.expenses.models import Expense
from moneytracker.kernel.kv_store import KeyValueStore
from moneytracker.kernel.logging import get_logger
from moneytracker.kernel.policy import TrackerPolicy, default_policy
from moneytracker.kernel.time import TimeProvider, days_back, default_time_provider
from moneytracker.lists.registry import ListRegistry
from moneytracker.snapshot import EXPENSES_KEY, SharedSnapshot
from moneytracker.widget.models import CardSnapshot, CategorySnapshot, WidgetEntry

logger = get_logger(__name__)


def open_read_only(backend: KeyValueStore) -> SharedSnapshot:
    """Load every collection, expenses only if already in the current shape"""
    snapshot = SharedSnapshot(backend, read_only=True)
    snapshot.load()
    snapshot.expenses = snapshot.decode_collection(EXPENSES_KEY, Expense) or []
    return snapshot


def build_widget_entry(
    backend: KeyValueStore,
    policy: TrackerPolicy = default_policy,
    time_provider: TimeProvider = default_time_provider,
) -> WidgetEntry | None:
    """
    Build the widget entry for the selected list

    Args:
        backend: Shared key-value store (never written)
        policy: Window, category limit, refresh cadence
        time_provider: Clock

    Returns:
        WidgetEntry, or None when there are no lists to show
    """
    snapshot = open_read_only(backend)
    lists = ListRegistry(snapshot, policy)
    list_id = lists.active_list_id()
    if list_id is None:
        logger.debug("Widget has nothing to show", reason="no lists")
        return None

    categories = CategoryRegistry(snapshot)
    cards = CardLedger(snapshot, lists, policy)
    budgets = BudgetResolver(snapshot, categories, policy)

    now = time_provider.now()
    since = days_back(now, policy.widget_window_days - 1)

    list_budget = budgets.budget_for(list_id)

    category_budgets = [
        CategorySnapshot(
            budget_id=progress.budget_id,
            category_id=progress.category_id,
            name=progress.title,
            color_hex=progress.color_hex,
            spent=progress.spent,
            limit=progress.limit,
        )
        for progress in budgets.category_snapshots(list_id, since)
    ]
    category_budgets.sort(key=lambda snap: snap.progress, reverse=True)

    card_snapshots = []
    for card in cards.active_cards(list_id):
        balance = cards.balance(card.id)
        card_snapshots.append(
            CardSnapshot(
                card_id=card.id,
                name=balance.name,
                remaining=balance.remaining,
                limit=balance.limit,
            )
        )
    card_snapshots.sort(key=lambda snap: snap.remaining)

    return WidgetEntry(
        date=now,
        next_refresh=now + timedelta(minutes=policy.widget_refresh_minutes),
        list_id=list_id,
        list_name=lists.get(list_id).name,
        spent=budgets.spending(list_id, since=since),
        limit=list_budget.amount if list_budget is not None else 0.0,
        category_budgets=category_budgets[: policy.widget_category_limit],
        cards=card_snapshots,
    )
