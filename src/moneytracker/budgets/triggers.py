"""
Budget Module Triggers - alerts for budgets and cards

Pure evaluation over read-only views. A budget is "near" from 90% progress
and "over" from 100%; a card is "near empty" when what is left drops under
max(10% of the limit, min(25% of the limit, 10)) and "empty" at zero.
"""

from moneytracker.budgets.models import Alert, AlertKind, BudgetProgress
from moneytracker.cards.models import CardBalance
from moneytracker.kernel.policy import TrackerPolicy


def evaluate_list_budget_trigger(
    snapshot: BudgetProgress | None,
    policy: TrackerPolicy,
) -> list[Alert]:
    """
    Args:
        snapshot: List budget progress (None when no list budget is set)
        policy: Thresholds

    Returns:
        At most one alert
    """
    if snapshot is None:
        return []

    progress = snapshot.progress
    if progress >= policy.budget_over_ratio:
        return [
            Alert(
                kind=AlertKind.LIST_BUDGET_OVER,
                subject_id=snapshot.budget_id,
                title=snapshot.title,
                message="You've exceeded the list budget.",
                progress=progress,
            )
        ]
    if progress >= policy.budget_near_ratio:
        return [
            Alert(
                kind=AlertKind.LIST_BUDGET_NEAR,
                subject_id=snapshot.budget_id,
                title=snapshot.title,
                message=f"You're closing in on the list budget ({int(progress * 100)}%).",
                progress=progress,
            )
        ]
    return []


def evaluate_category_budget_trigger(
    snapshots: list[BudgetProgress],
    policy: TrackerPolicy,
) -> list[Alert]:
    """One alert per category budget that is near or over"""
    alerts: list[Alert] = []

    for snapshot in snapshots:
        progress = snapshot.progress
        if progress >= policy.budget_over_ratio:
            alerts.append(
                Alert(
                    kind=AlertKind.CATEGORY_BUDGET_OVER,
                    subject_id=snapshot.budget_id,
                    title=snapshot.title,
                    message=f"Category {snapshot.title} is over budget.",
                    progress=progress,
                )
            )
        elif progress >= policy.budget_near_ratio:
            alerts.append(
                Alert(
                    kind=AlertKind.CATEGORY_BUDGET_NEAR,
                    subject_id=snapshot.budget_id,
                    title=snapshot.title,
                    message=f"Category {snapshot.title} budget nearly used ({int(progress * 100)}%).",
                    progress=progress,
                )
            )

    return alerts


def evaluate_card_balance_trigger(
    balances: list[CardBalance],
    policy: TrackerPolicy,
) -> list[Alert]:
    """
    Alerts for active cards running low

    Args:
        balances: Balances of the ACTIVE cards of a list
        policy: Thresholds
    """
    alerts: list[Alert] = []

    for balance in balances:
        if balance.remaining > policy.card_near_empty_threshold(balance.limit):
            continue

        if balance.remaining <= 0:
            alerts.append(
                Alert(
                    kind=AlertKind.CARD_EMPTY,
                    subject_id=balance.card_id,
                    title=balance.name,
                    message=f"Card {balance.name} is maxed out.",
                    remaining=balance.remaining,
                )
            )
        else:
            alerts.append(
                Alert(
                    kind=AlertKind.CARD_NEAR_EMPTY,
                    subject_id=balance.card_id,
                    title=balance.name,
                    message=f"Card {balance.name} has only {balance.remaining:.2f} left.",
                    remaining=balance.remaining,
                )
            )

    return alerts


def evaluate_alerts(
    list_snapshot: BudgetProgress | None,
    category_snapshots: list[BudgetProgress],
    card_balances: list[CardBalance],
    policy: TrackerPolicy,
) -> list[Alert]:
    """
    All alerts for one list: list budget, then category budgets, then cards

    Budget snapshots are expected to be empty already when the budget or
    category toggles are off; card alerts do not depend on them.
    """
    return (
        evaluate_list_budget_trigger(list_snapshot, policy)
        + evaluate_category_budget_trigger(category_snapshots, policy)
        + evaluate_card_balance_trigger(card_balances, policy)
    )
