"""
Category Module Invariants

Nesting and deletion rules, and the descendant walk used by cascade deletes.
"""

from collections.abc import Iterable

from moneytracker.categories.models import DEFAULT_CATEGORY_IDS, Category
from moneytracker.kernel.errors import (
    CategoryNotFound,
    CategoryProtected,
    LastCategory,
    ParentNotTopLevel,
)


def validate_category_removable(category_id: str, category_count: int) -> None:
    """
    Raises:
        CategoryProtected: If category_id is a seed category
        LastCategory: If it is the only category left
    """
    if category_count <= 1:
        raise LastCategory(category_id)

    if category_id in DEFAULT_CATEGORY_IDS:
        raise CategoryProtected(category_id)


def validate_parent(parent_id: str, categories: Iterable[Category]) -> None:
    """
    The hierarchy is two levels deep: a parent must be an existing top-level category

    Raises:
        CategoryNotFound: If parent_id does not exist
        ParentNotTopLevel: If parent_id is itself a subcategory
    """
    parent = next((c for c in categories if c.id == parent_id), None)
    if parent is None:
        raise CategoryNotFound(parent_id)
    if not parent.is_top_level:
        raise ParentNotTopLevel(parent_id)


def collect_descendant_ids(root_id: str, categories: Iterable[Category]) -> list[str]:
    """
    All categories below root_id, found with an explicit worklist

    Children are indexed by parent once; each id is visited at most once so a
    malformed parent cycle cannot loop.

    Returns:
        Descendant ids in breadth-first order (root excluded)
    """
    children: dict[str, list[str]] = {}
    for category in categories:
        if category.parent_id is not None:
            children.setdefault(category.parent_id, []).append(category.id)

    found: list[str] = []
    seen = {root_id}
    worklist = [root_id]
    while worklist:
        current = worklist.pop(0)
        for child_id in children.get(current, []):
            if child_id not in seen:
                seen.add(child_id)
                found.append(child_id)
                worklist.append(child_id)
    return found
