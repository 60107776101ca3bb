"""
Budgets Module - spend targets, progress views and alerts

A list can carry one overall budget plus one budget per category. Spend is
always derived from the expenses, never stored.
"""

from moneytracker.budgets.models import (
    Alert,
    AlertKind,
    Budget,
    BudgetProgress,
    BudgetScope,
    Period,
)

__all__ = [
    "Budget",
    "BudgetScope",
    "BudgetProgress",
    "Period",
    "Alert",
    "AlertKind",
]
