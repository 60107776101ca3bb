"""
MoneyTracker - Main façade class

The primary interface to the ledger. It opens the shared snapshot, runs the
startup sequence (seed categories, migrate, archive exhausted cards, fix the
active selection) and wires the registries and ledgers together.

Example:
    >>> from moneytracker import MoneyTracker
    >>> tracker = MoneyTracker("money.db")
    >>> card = tracker.cards.add("Groceries", 200)
    >>> tracker.expenses.add(45.5, FOOD_ID, "market", tracker.now(), card_id=card.id)
    >>> tracker.budgets.set_budget(tracker.lists.active_list_id(), None, 800, BudgetScope.LIST)
    >>> summary = tracker.summary(Period.MONTH)
"""

from datetime import datetime
from pathlib import Path

from moneytracker.budgets.models import Alert, Period
from moneytracker.budgets.resolver import BudgetResolver
from moneytracker.cards.ledger import CardLedger
from moneytracker.categories.registry import CategoryRegistry
from moneytracker.dashboard import DashboardSummary, build_dashboard
from moneytracker.expenses.ledger import ExpenseLedger
from moneytracker.kernel.ids import IdFactory, default_id_factory
from moneytracker.kernel.kv_store import KeyValueStore, SQLiteKeyValueStore
from moneytracker.kernel.logging import LogOperation, get_logger
from moneytracker.kernel.metrics import track_operation_duration
from moneytracker.kernel.policy import TrackerPolicy
from moneytracker.kernel.time import RealTimeProvider, TimeProvider
from moneytracker.lists.registry import ListRegistry
from moneytracker.migration.chain import MigrationReport, run_migrations
from moneytracker.snapshot import SharedSnapshot
from moneytracker.widget.models import WidgetEntry
from moneytracker.widget.projections import build_widget_entry

logger = get_logger(__name__)


class MoneyTracker:
    """
    Moneytracker main façade

    Components (use them directly for anything beyond the shortcuts here):
    - lists: ListRegistry
    - categories: CategoryRegistry
    - cards: CardLedger
    - expenses: ExpenseLedger
    - budgets: BudgetResolver
    """

    def __init__(
        self,
        store: str | Path | KeyValueStore,
        policy: TrackerPolicy | None = None,
        time_provider: TimeProvider | None = None,
        id_factory: IdFactory | None = None,
    ) -> None:
        """
        Open (and if needed migrate) a tracker

        Args:
            store: Path to a SQLite file, or any KeyValueStore
            policy: Thresholds and defaults (uses defaults if None)
            time_provider: Clock (uses real time if None)
            id_factory: Id generator (uses UUIDv7-like ids if None)
        """
        if isinstance(store, (str, Path)):
            self.backend: KeyValueStore = SQLiteKeyValueStore(store)
        else:
            self.backend = store
        self.policy = policy or TrackerPolicy()
        self.time_provider = time_provider or RealTimeProvider()
        self.id_factory = id_factory or default_id_factory

        self.snapshot = SharedSnapshot(self.backend)
        self.lists = ListRegistry(self.snapshot, self.policy, self.id_factory)
        self.categories = CategoryRegistry(self.snapshot, self.id_factory)
        self.cards = CardLedger(self.snapshot, self.lists, self.policy, self.id_factory)
        self.expenses = ExpenseLedger(
            self.snapshot, self.lists, self.cards, self.time_provider, self.id_factory
        )
        self.budgets = BudgetResolver(
            self.snapshot, self.categories, self.policy, self.id_factory
        )

        self.migration_report = self._open()

    @track_operation_duration("open")
    def _open(self) -> MigrationReport:
        """
        Startup sequence

        Order matters: categories must be seeded before expense categories
        are resolved, and cards can only be judged exhausted once expenses
        are loaded.
        """
        with LogOperation(logger, "open_tracker"):
            self.snapshot.load()
            self.categories.seed_defaults()
            report = run_migrations(self.snapshot, self.lists)
            self.cards.auto_break_exhausted_cards()
            self.lists.reconcile_selection()
        return report

    def now(self) -> datetime:
        return self.time_provider.now()

    # Read models

    @track_operation_duration("summary")
    def summary(self, period: Period = Period.MONTH) -> DashboardSummary | None:
        """Dashboard summary of the active list over period"""
        return build_dashboard(
            self.lists,
            self.categories,
            self.cards,
            self.budgets,
            self.expenses,
            self.policy,
            self.now(),
            period,
        )

    def alerts(self, period: Period = Period.MONTH) -> list[Alert]:
        """Budget and card alerts for the active list"""
        summary = self.summary(period)
        return summary.alerts if summary else []

    @track_operation_duration("widget_entry")
    def widget_entry(self) -> WidgetEntry | None:
        """What the widget would show right now (read-only)"""
        return build_widget_entry(self.backend, self.policy, self.time_provider)
