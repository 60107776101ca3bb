"""
Category Registry - category hierarchy, seeds, and cascade deletes

Removing a category removes its whole subtree, moves affected expenses to
"Other" and drops budgets that targeted any removed category.
"""

from moneytracker.categories.invariants import (
    collect_descendant_ids,
    validate_category_removable,
    validate_parent,
)
from moneytracker.categories.models import OTHER_ID, Category, default_categories
from moneytracker.kernel.errors import CategoryNotFound, InvariantViolation, ValidationRejected
from moneytracker.kernel.ids import IdFactory, default_id_factory
from moneytracker.kernel.logging import get_logger
from moneytracker.kernel.metrics import categories_removed_total, record_rejection
from moneytracker.kernel.validation import require_name
from moneytracker.snapshot import BUDGETS_KEY, CATEGORIES_KEY, EXPENSES_KEY, SharedSnapshot

logger = get_logger(__name__)


def _sort_key(category: Category) -> str:
    return category.name.casefold()


class CategoryRegistry:
    """
    Owns the categories collection

    Query methods: all, get, top_level, children_of, descendant_ids, display_name
    """

    def __init__(
        self,
        snapshot: SharedSnapshot,
        id_factory: IdFactory = default_id_factory,
    ) -> None:
        self.snapshot = snapshot
        self.id_factory = id_factory

    # Queries

    def all(self) -> list[Category]:
        return list(self.snapshot.categories)

    def get(self, category_id: str | None) -> Category | None:
        if category_id is None:
            return None
        return next((c for c in self.snapshot.categories if c.id == category_id), None)

    def top_level(self) -> list[Category]:
        """Categories without a parent, case-insensitive alphabetical"""
        return sorted((c for c in self.snapshot.categories if c.is_top_level), key=_sort_key)

    def children_of(self, parent_id: str) -> list[Category]:
        """Direct children of parent_id, case-insensitive alphabetical"""
        return sorted(
            (c for c in self.snapshot.categories if c.parent_id == parent_id), key=_sort_key
        )

    def descendant_ids(self, category_id: str) -> list[str]:
        return collect_descendant_ids(category_id, self.snapshot.categories)

    def display_name(self, category: Category) -> str:
        """'Parent › Child' for subcategories, plain name otherwise"""
        parent = self.get(category.parent_id)
        if parent is None:
            return category.name
        return f"{parent.name} › {category.name}"

    # Commands

    def seed_defaults(self) -> list[str]:
        """
        Make sure the five seed categories exist

        Additive only: missing seeds are appended, existing ones (even if
        renamed or recolored by the user) are left alone.

        Returns:
            Ids of the seeds that were inserted
        """
        present = self.snapshot.category_ids()
        missing = [c for c in default_categories() if c.id not in present]
        if not missing:
            return []

        self.snapshot.categories.extend(missing)
        self.snapshot.persist(CATEGORIES_KEY)
        inserted = [c.id for c in missing]
        logger.info("Seed categories inserted", category_ids=inserted)
        return inserted

    def add(
        self,
        name: str,
        icon_name: str,
        color_hex: str,
        parent_id: str | None = None,
    ) -> Category | None:
        """
        Create a category (optionally under a parent)

        Returns:
            The new category, or None if the name was blank or the parent
            is unknown or not top-level
        """
        try:
            trimmed = require_name(name, "Category")
            if parent_id is not None:
                validate_parent(parent_id, self.snapshot.categories)
        except (ValidationRejected, InvariantViolation, CategoryNotFound) as e:
            record_rejection("add_category", type(e).__name__)
            logger.info("Category not added", reason=str(e))
            return None

        category = Category(
            id=self.id_factory.generate(),
            name=trimmed,
            icon_name=icon_name,
            color_hex=color_hex,
            parent_id=parent_id,
        )
        self.snapshot.categories.append(category)
        self.snapshot.persist(CATEGORIES_KEY)

        logger.info("Category added", category_id=category.id, parent_id=parent_id)
        return category

    def update(self, category: Category) -> bool:
        """Replace the category with the same id; unknown ids are ignored"""
        for index, existing in enumerate(self.snapshot.categories):
            if existing.id == category.id:
                self.snapshot.categories[index] = category
                self.snapshot.persist(CATEGORIES_KEY)
                logger.info("Category updated", category_id=category.id)
                return True
        record_rejection("update_category", "CategoryNotFound")
        return False

    def remove(self, category_id: str) -> bool:
        """
        Delete a category and its subtree

        Seed categories and the last remaining category cannot be deleted.
        Expenses of removed categories move to "Other"; budgets of removed
        categories are deleted.

        Returns:
            True if anything was removed
        """
        if self.get(category_id) is None:
            record_rejection("remove_category", "CategoryNotFound")
            return False

        try:
            validate_category_removable(category_id, len(self.snapshot.categories))
        except InvariantViolation as e:
            record_rejection("remove_category", type(e).__name__)
            logger.info("Category not removed", category_id=category_id, reason=str(e))
            return False

        removed_ids = {category_id, *self.descendant_ids(category_id)}
        self.snapshot.categories = [
            c for c in self.snapshot.categories if c.id not in removed_ids
        ]

        moved = 0
        for expense in self.snapshot.expenses:
            if expense.category_id in removed_ids and expense.category_id != OTHER_ID:
                expense.category_id = OTHER_ID
                moved += 1

        budgets_before = len(self.snapshot.budgets)
        self.snapshot.budgets = [
            b for b in self.snapshot.budgets
            if b.category_id is None or b.category_id not in removed_ids
        ]
        dropped = budgets_before - len(self.snapshot.budgets)

        changed = [CATEGORIES_KEY]
        if moved:
            changed.append(EXPENSES_KEY)
        if dropped:
            changed.append(BUDGETS_KEY)
        self.snapshot.persist(*changed)

        categories_removed_total.inc(len(removed_ids))
        logger.info(
            "Category removed",
            category_id=category_id,
            removed=len(removed_ids),
            expenses_reassigned=moved,
            budgets_dropped=dropped,
        )
        return True
