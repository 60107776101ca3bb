"""
List Models - named expense lists

Every expense belongs to exactly one list ("General", "Holiday", ...). The
active list decides where new expenses and cards go.
"""

from moneytracker.kernel.records import Record


class ExpenseList(Record):
    """A named list of expenses"""

    id: str
    name: str
