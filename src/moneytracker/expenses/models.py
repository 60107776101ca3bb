"""
Expense Models - the ledger's records

An expense is immutable once recorded, with one exception: when a category
is deleted, its expenses are moved to "Other".
"""

from moneytracker.kernel.records import Record, StoredDatetime


class Expense(Record):
    """
    A single recorded expense

    Attributes:
        id: Stable identifier
        amount: Positive for expenses created through the ledger; migrated
            data is not re-validated
        category_id: Category (resolved to an existing one after migration)
        note: Free text, may be empty
        date: When the money was spent (user-chosen, may be backdated)
        list_id: Owning list
        card_id: Card the expense was drawn from, if any
    """

    id: str
    amount: float
    category_id: str
    note: str = ""
    date: StoredDatetime
    list_id: str
    card_id: str | None = None
