"""
Expenses Module - the ordered expense ledger
"""

from moneytracker.expenses.models import Expense

__all__ = ["Expense"]
