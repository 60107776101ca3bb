"""
Legacy expense shapes

Two older shapes show up in persisted expense blobs:

- the very first one, {id, amount, category, note, date}, where category is
  a string key such as "food" and there is no list or card;
- current-shape records whose category is stored under a legacy field
  ("legacyCategory" or "category") or as a key string in "categoryId".

Fun fact: "Other" is the catch-all for every key nobody remembers!
"""

from collections.abc import Collection
from typing import Any

from moneytracker.categories.models import OTHER_ID, category_id_for_legacy_key
from moneytracker.expenses.models import Expense
from moneytracker.kernel.ids import is_uuid
from moneytracker.kernel.records import Record, StoredDatetime

LEGACY_CATEGORY_FIELDS = ("legacyCategory", "category")


class LegacyExpense(Record):
    """The first expense shape, before lists and cards existed"""

    id: str
    amount: float
    category: str
    note: str
    date: StoredDatetime

    def upgrade(self, list_id: str) -> Expense:
        return Expense(
            id=self.id,
            amount=self.amount,
            category_id=category_id_for_legacy_key(self.category),
            note=self.note,
            date=self.date,
            list_id=list_id,
        )


def resolve_category_reference(
    record: dict[str, Any],
    known_category_ids: Collection[str] = (),
) -> str:
    """
    Work out the category id of one raw expense record

    Tried in order: categoryId when it is a UUID (or an id we know),
    legacyCategory, category, categoryId read as a legacy key, "other".

    Args:
        record: Raw expense dict as found in the blob
        known_category_ids: Ids of the categories currently defined

    Returns:
        A category id (not necessarily an existing one)
    """
    raw_id = record.get("categoryId")
    if isinstance(raw_id, str) and (is_uuid(raw_id) or raw_id in known_category_ids):
        return raw_id

    for field in LEGACY_CATEGORY_FIELDS:
        legacy = record.get(field)
        if isinstance(legacy, str):
            return category_id_for_legacy_key(legacy)

    if isinstance(raw_id, str):
        return category_id_for_legacy_key(raw_id)

    return OTHER_ID
