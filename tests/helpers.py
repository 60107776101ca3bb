"""
Test Helper Functions - Builders and Assertions

Builders for raw persisted records (the camelCase JSON shapes found in the
backend) and for seeding a backend before a tracker opens it.

Fun fact: The Builder pattern was formalized by the Gang of Four in 1994,
but test data builders were popularized by the growing programmer test
movement in the 2000s - we use them to keep tests readable and maintainable!
"""

import json
from datetime import datetime, timezone
from typing import Any

from moneytracker.kernel.kv_store import KeyValueStore

FIXED_DATE = "2025-01-10T09:30:00+00:00"


def expense_record(
    expense_id: str,
    amount: float,
    category_id: str,
    list_id: str,
    note: str = "",
    date: Any = FIXED_DATE,
    card_id: str | None = None,
) -> dict[str, Any]:
    """
    Builder for a current-shape expense record

    Returns:
        Dict as it appears in the expenses_v1 blob
    """
    record = {
        "id": expense_id,
        "amount": amount,
        "categoryId": category_id,
        "note": note,
        "date": date,
        "listId": list_id,
    }
    if card_id is not None:
        record["cardId"] = card_id
    return record


def legacy_expense_record(
    expense_id: str,
    amount: float,
    category: str,
    note: str = "",
    date: Any = FIXED_DATE,
) -> dict[str, Any]:
    """Builder for the oldest {id, amount, category, note, date} shape"""
    return {
        "id": expense_id,
        "amount": amount,
        "category": category,
        "note": note,
        "date": date,
    }


def list_record(list_id: str, name: str) -> dict[str, Any]:
    return {"id": list_id, "name": name}


def card_record(
    card_id: str,
    name: str,
    limit: float,
    list_id: str,
    is_broken: bool | None = None,
) -> dict[str, Any]:
    """Builder for a card record; is_broken=None leaves the key out"""
    record = {"id": card_id, "name": name, "limit": limit, "listId": list_id}
    if is_broken is not None:
        record["isBroken"] = is_broken
    return record


def budget_record(
    budget_id: str,
    list_id: str,
    amount: float,
    category_id: str | None = None,
) -> dict[str, Any]:
    record = {
        "id": budget_id,
        "listId": list_id,
        "amount": amount,
        "scope": "category" if category_id else "list",
    }
    if category_id is not None:
        record["categoryId"] = category_id
    return record


def seed_backend(backend: KeyValueStore, **blobs: Any) -> None:
    """
    Write raw blobs before a tracker opens the backend

    Example:
        >>> seed_backend(store, lists_v1=[list_record("l1", "Trip")], selected_list_v1="l1")
    """
    for key, value in blobs.items():
        backend.set(key, json.dumps(value))


def read_blob(backend: KeyValueStore, key: str) -> Any:
    raw = backend.get(key)
    return None if raw is None else json.loads(raw)


def utc(year: int, month: int, day: int, hour: int = 12) -> datetime:
    return datetime(year, month, day, hour, 0, 0, tzinfo=timezone.utc)
