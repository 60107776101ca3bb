"""
Lists Module - named expense lists and the active selection
"""

from moneytracker.lists.models import ExpenseList

__all__ = ["ExpenseList"]
