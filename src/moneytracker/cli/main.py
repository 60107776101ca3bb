"""
Moneytracker CLI

Command-line interface for the expense ledger.
Provides commands for lists, categories, cards, expenses, budgets, and the
dashboard / widget read models.

Usage:
    moneytracker init --db money.db
    moneytracker list add "Holiday"
    moneytracker card add "Groceries" --limit 200
    moneytracker expense add 45.50 --category food --note "market" --card <card_id>
    moneytracker budget set 800
    moneytracker summary --period week
    moneytracker widget
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from moneytracker.budgets.models import BudgetScope, Period
from moneytracker.categories.models import LEGACY_CATEGORY_KEYS
from moneytracker.kernel.errors import CardNotFound
from moneytracker.kernel.kv_store import SQLiteKeyValueStore
from moneytracker.kernel.logging import configure_logging
from moneytracker.tracker import MoneyTracker
from moneytracker.widget.projections import build_widget_entry

# Configure logging to stderr (avoids polluting stdout for JSON output)
configure_logging(json_output=False, log_level="WARNING")

app = typer.Typer(
    name="moneytracker",
    help="Moneytracker - personal expenses, cards and budgets",
    add_completion=False,
)

# Sub-apps
list_app = typer.Typer(help="Expense list commands")
category_app = typer.Typer(help="Category commands")
card_app = typer.Typer(help="Prepaid card commands")
expense_app = typer.Typer(help="Expense commands")
budget_app = typer.Typer(help="Budget commands")

app.add_typer(list_app, name="list")
app.add_typer(category_app, name="category")
app.add_typer(card_app, name="card")
app.add_typer(expense_app, name="expense")
app.add_typer(budget_app, name="budget")

# Global state
DEFAULT_DB = Path(".moneytracker.db")

DbOption = Annotated[
    Optional[Path],
    typer.Option("--db", envvar="MONEYTRACKER_DB", help="Database path"),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]


def get_tracker(db_path: Optional[Path] = None) -> MoneyTracker:
    """Get MoneyTracker instance"""
    db = db_path or DEFAULT_DB
    if not db.exists():
        typer.echo(f"Error: Database not found: {db}", err=True)
        typer.echo(f"Run 'moneytracker init --db {db}' to initialize", err=True)
        raise typer.Exit(1)
    return MoneyTracker(db)


def resolve_category(tracker: MoneyTracker, value: str) -> str:
    """Accept a category id or a seed key such as 'food'"""
    if tracker.categories.get(value) is not None:
        return value
    key = value.lower()
    if key in LEGACY_CATEGORY_KEYS:
        return LEGACY_CATEGORY_KEYS[key]
    typer.echo(f"Error: Category not found: {value}", err=True)
    raise typer.Exit(1)


def echo_json(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


# Initialization command


@app.command()
def init(db: DbOption = None) -> None:
    """Initialize a new Moneytracker database"""
    db = db or DEFAULT_DB
    if db.exists():
        typer.echo(f"Error: Database already exists: {db}", err=True)
        raise typer.Exit(1)

    tracker = MoneyTracker(db)
    active = tracker.lists.active_list()
    typer.echo(f"✓ Initialized Moneytracker database: {db}")
    typer.echo(f"  Active list: {active.name}")


# List commands


@list_app.command("add")
def list_add(
    name: Annotated[str, typer.Argument(help="List name")],
    db: DbOption = None,
) -> None:
    """Create a list and make it active"""
    tracker = get_tracker(db)
    created = tracker.lists.add_list(name)
    if created is None:
        typer.echo("Error: List name cannot be blank", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ Created list: {created.id}")
    typer.echo(f"  Name: {created.name}")


@list_app.command("ls")
def list_ls(db: DbOption = None, json_output: JsonOption = False) -> None:
    """Show all lists"""
    tracker = get_tracker(db)
    active_id = tracker.lists.active_list_id()
    lists = tracker.lists.all()

    if json_output:
        echo_json([dict(lst.model_dump(), active=lst.id == active_id) for lst in lists])
        return

    typer.echo(f"Lists ({len(lists)}):")
    for lst in lists:
        marker = "*" if lst.id == active_id else " "
        typer.echo(f" {marker} {lst.id}: {lst.name}")


@list_app.command("select")
def list_select(
    list_id: Annotated[str, typer.Argument(help="List ID")],
    db: DbOption = None,
) -> None:
    """Make a list active"""
    tracker = get_tracker(db)
    if not tracker.lists.select(list_id):
        typer.echo(f"Error: List not found: {list_id}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ Active list: {tracker.lists.active_list().name}")


# Category commands


@category_app.command("add")
def category_add(
    name: Annotated[str, typer.Argument(help="Category name")],
    icon: Annotated[str, typer.Option("--icon", help="Icon name")] = "tag",
    color: Annotated[str, typer.Option("--color", help="Color as hex, e.g. FF6B81")] = "94A3B8",
    parent: Annotated[
        Optional[str],
        typer.Option("--parent", help="Parent category ID or seed key"),
    ] = None,
    db: DbOption = None,
) -> None:
    """Create a category (optionally as a subcategory)"""
    tracker = get_tracker(db)
    parent_id = resolve_category(tracker, parent) if parent else None
    category = tracker.categories.add(name, icon, color, parent_id)
    if category is None:
        typer.echo(
            "Error: Category not created (blank name, or parent is not a top-level category)",
            err=True,
        )
        raise typer.Exit(1)
    typer.echo(f"✓ Created category: {category.id}")
    typer.echo(f"  Name: {tracker.categories.display_name(category)}")


@category_app.command("ls")
def category_ls(db: DbOption = None, json_output: JsonOption = False) -> None:
    """Show the category tree"""
    tracker = get_tracker(db)

    if json_output:
        echo_json([c.model_dump() for c in tracker.categories.all()])
        return

    for top in tracker.categories.top_level():
        typer.echo(f"  {top.id}: {top.name}")
        for child in tracker.categories.children_of(top.id):
            typer.echo(f"      {child.id}: {child.name}")


@category_app.command("rm")
def category_rm(
    category_id: Annotated[str, typer.Argument(help="Category ID")],
    db: DbOption = None,
) -> None:
    """Delete a category, its subcategories, and their budgets"""
    tracker = get_tracker(db)
    if not tracker.categories.remove(category_id):
        typer.echo(
            f"Error: Category cannot be removed: {category_id} "
            "(unknown, built-in, or the last one)",
            err=True,
        )
        raise typer.Exit(1)
    typer.echo(f"✓ Removed category: {category_id}")


# Card commands


@card_app.command("add")
def card_add(
    name: Annotated[str, typer.Argument(help="Card name (blank for default)")],
    limit: Annotated[float, typer.Option("--limit", help="Card limit")],
    db: DbOption = None,
) -> None:
    """Create a prepaid card on the active list"""
    tracker = get_tracker(db)
    card = tracker.cards.add(name, limit)
    if card is None:
        typer.echo("Error: Card limit must be positive", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ Created card: {card.id}")
    typer.echo(f"  Name: {card.display_name}")
    typer.echo(f"  Limit: {card.limit:.2f}")


@card_app.command("ls")
def card_ls(db: DbOption = None, json_output: JsonOption = False) -> None:
    """Show the cards of the active list"""
    tracker = get_tracker(db)
    list_id = tracker.lists.active_list_id()
    balances = [tracker.cards.balance(c.id) for c in tracker.cards.cards_in(list_id)]

    if json_output:
        echo_json([b.model_dump(mode="json") for b in balances])
        return

    if not balances:
        typer.echo("No cards")
        return

    typer.echo(f"Cards ({len(balances)}):")
    for b in balances:
        typer.echo(
            f"  {b.card_id}: {b.name} [{b.status.value}] "
            f"{b.remaining:.2f} left of {b.limit:.2f}"
        )


def _set_card_state(card_id: str, broken: bool, db: Optional[Path]) -> None:
    tracker = get_tracker(db)
    changed = tracker.cards.break_card(card_id) if broken else tracker.cards.restore(card_id)
    if not changed:
        typer.echo(f"Error: Card not found: {card_id}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ Card {'archived' if broken else 'restored'}: {card_id}")


@card_app.command("break")
def card_break(
    card_id: Annotated[str, typer.Argument(help="Card ID")],
    db: DbOption = None,
) -> None:
    """Archive a card"""
    _set_card_state(card_id, True, db)


@card_app.command("restore")
def card_restore(
    card_id: Annotated[str, typer.Argument(help="Card ID")],
    db: DbOption = None,
) -> None:
    """Bring an archived card back"""
    _set_card_state(card_id, False, db)


@card_app.command("rm")
def card_rm(
    card_id: Annotated[str, typer.Argument(help="Card ID")],
    db: DbOption = None,
) -> None:
    """Delete a card (its expenses are kept)"""
    tracker = get_tracker(db)
    if not tracker.cards.remove(card_id):
        typer.echo(f"Error: Card not found: {card_id}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ Removed card: {card_id}")


# Expense commands


@expense_app.command("add")
def expense_add(
    amount: Annotated[float, typer.Argument(help="Amount spent")],
    category: Annotated[
        str,
        typer.Option("--category", help="Category ID or seed key (food, transport, ...)"),
    ] = "other",
    note: Annotated[str, typer.Option("--note", help="Free-text note")] = "",
    date: Annotated[
        Optional[datetime],
        typer.Option("--date", help="When the money was spent (default: now)"),
    ] = None,
    card: Annotated[Optional[str], typer.Option("--card", help="Card ID")] = None,
    db: DbOption = None,
) -> None:
    """Record an expense on the active list"""
    tracker = get_tracker(db)
    category_id = resolve_category(tracker, category)

    expense = tracker.expenses.add(amount, category_id, note, date or tracker.now(), card)
    if expense is None:
        reason = "Amount must be positive"
        if card is not None and amount > 0:
            try:
                rejection = tracker.cards.spend_rejection(card, amount)
            except CardNotFound as e:
                rejection = e
            if rejection is not None:
                reason = str(rejection)
        typer.echo(f"Error: Expense not recorded: {reason}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ Recorded expense: {expense.id}")
    typer.echo(f"  Amount: {expense.amount:.2f}")
    if card is not None:
        card_state = tracker.cards.get(card)
        typer.echo(f"  Card remaining: {tracker.cards.remaining(card):.2f}")
        if card_state.is_broken:
            typer.echo("  ⚠️  Card is now empty and was archived")


@expense_app.command("ls")
def expense_ls(
    period: Annotated[Period, typer.Option("--period", help="Time window")] = Period.ALL,
    db: DbOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show the expenses of the active list, newest entry first"""
    tracker = get_tracker(db)
    list_id = tracker.lists.active_list_id()
    expenses = tracker.expenses.filtered_by(list_id, period.start_date(tracker.now()))

    if json_output:
        echo_json([e.model_dump(mode="json") for e in expenses])
        return

    if not expenses:
        typer.echo("No expenses")
        return

    typer.echo(f"Expenses - {period.title} ({len(expenses)}):")
    for e in expenses:
        category = tracker.categories.get(e.category_id)
        name = tracker.categories.display_name(category) if category else "Unknown"
        line = f"  {e.id}: {e.date:%Y-%m-%d} {e.amount:>10.2f}  {name}"
        if e.note:
            line += f" - {e.note}"
        typer.echo(line)


@expense_app.command("rm")
def expense_rm(
    expense_ids: Annotated[list[str], typer.Argument(help="Expense IDs")],
    db: DbOption = None,
) -> None:
    """Delete expenses"""
    tracker = get_tracker(db)
    removed = tracker.expenses.remove(expense_ids)
    typer.echo(f"✓ Removed {removed} expense(s)")


@expense_app.command("total")
def expense_total(db: DbOption = None) -> None:
    """Total spent this calendar month, across all lists"""
    tracker = get_tracker(db)
    typer.echo(f"{tracker.expenses.total_for_current_calendar_month():.2f}")


# Budget commands


@budget_app.command("set")
def budget_set(
    amount: Annotated[float, typer.Argument(help="Budget amount (0 clears it for display)")],
    category: Annotated[
        Optional[str],
        typer.Option("--category", help="Category ID or seed key (omit for the list budget)"),
    ] = None,
    db: DbOption = None,
) -> None:
    """Set the list budget or a category budget on the active list"""
    tracker = get_tracker(db)
    list_id = tracker.lists.active_list_id()
    category_id = resolve_category(tracker, category) if category else None
    scope = BudgetScope.CATEGORY if category_id else BudgetScope.LIST

    budget = tracker.budgets.set_budget(list_id, category_id, amount, scope)
    if budget is None:
        typer.echo(
            "Error: Budget not set (non-finite amount, or unknown list or category)",
            err=True,
        )
        raise typer.Exit(1)
    typer.echo(f"✓ Budget set: {budget.id}")
    typer.echo(f"  Scope: {budget.scope.value}")
    typer.echo(f"  Amount: {budget.amount:.2f}")


@budget_app.command("rm")
def budget_rm(
    category: Annotated[
        Optional[str],
        typer.Option("--category", help="Category ID or seed key (omit for the list budget)"),
    ] = None,
    db: DbOption = None,
) -> None:
    """Remove a budget from the active list"""
    tracker = get_tracker(db)
    list_id = tracker.lists.active_list_id()
    category_id = resolve_category(tracker, category) if category else None
    if not tracker.budgets.remove_budget(list_id, category_id):
        typer.echo("Error: No such budget", err=True)
        raise typer.Exit(1)
    typer.echo("✓ Budget removed")


@budget_app.command("ls")
def budget_ls(
    period: Annotated[Period, typer.Option("--period", help="Time window")] = Period.MONTH,
    db: DbOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show budget progress on the active list"""
    tracker = get_tracker(db)
    list_id = tracker.lists.active_list_id()
    since = period.start_date(tracker.now())
    progress = [tracker.budgets.progress_for(b, since) for b in tracker.budgets.budgets_in(list_id)]

    if json_output:
        echo_json([p.model_dump() | {"progress": p.progress} for p in progress])
        return

    if not progress:
        typer.echo("No budgets")
        return

    typer.echo(f"Budgets - {period.title}:")
    for p in progress:
        typer.echo(f"  {p.title}: {p.spent:.2f} / {p.limit:.2f} ({p.progress:.0%})")


# Read models


@app.command()
def summary(
    period: Annotated[Period, typer.Option("--period", help="Time window")] = Period.MONTH,
    db: DbOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show the dashboard for the active list"""
    tracker = get_tracker(db)
    dashboard = tracker.summary(period)

    if json_output:
        echo_json(dashboard.model_dump(mode="json"))
        return

    typer.echo(f"\n{dashboard.list_name} - {period.title}")
    typer.echo(f"  Total: {dashboard.total:.2f}")

    if dashboard.list_budget is not None:
        lb = dashboard.list_budget
        typer.echo(f"  Budget: {lb.spent:.2f} / {lb.limit:.2f} ({lb.progress:.0%})")

    if dashboard.by_category:
        typer.echo("\nBy Category:")
        for item in dashboard.by_category:
            typer.echo(f"  {item.name}: {item.amount:.2f}")

    if dashboard.category_budgets:
        typer.echo("\nCategory Budgets:")
        for cb in dashboard.category_budgets:
            typer.echo(f"  {cb.title}: {cb.spent:.2f} / {cb.limit:.2f} ({cb.progress:.0%})")

    if dashboard.active_cards:
        typer.echo("\nCards:")
        for b in dashboard.active_cards:
            typer.echo(f"  {b.name}: {b.remaining:.2f} left of {b.limit:.2f}")

    if dashboard.alerts:
        typer.echo("\nAlerts:")
        for alert in dashboard.alerts:
            typer.echo(f"  ⚠️  {alert.message}")


@app.command()
def alerts(
    period: Annotated[Period, typer.Option("--period", help="Time window")] = Period.MONTH,
    db: DbOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show budget and card alerts for the active list"""
    tracker = get_tracker(db)
    found = tracker.alerts(period)

    if json_output:
        echo_json([a.model_dump(mode="json") for a in found])
        return

    if not found:
        typer.echo("✓ No alerts")
        return

    for alert in found:
        typer.echo(f"⚠️  [{alert.kind.value}] {alert.message}")


@app.command()
def widget(db: DbOption = None) -> None:
    """Print the widget entry as JSON (reads without writing)"""
    db = db or DEFAULT_DB
    if not db.exists():
        typer.echo(f"Error: Database not found: {db}", err=True)
        raise typer.Exit(1)

    # No MoneyTracker here: opening one would migrate and write
    entry = build_widget_entry(SQLiteKeyValueStore(db, read_only=True))
    if entry is None:
        typer.echo("Error: Nothing to show (no lists)", err=True)
        raise typer.Exit(1)
    echo_json(entry.model_dump(mode="json"))


if __name__ == "__main__":
    app()
