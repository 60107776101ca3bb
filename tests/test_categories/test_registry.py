"""
Tests for Category Registry - seeds, hierarchy, and cascade deletes
"""

from moneytracker.budgets.models import BudgetScope
from moneytracker.categories.models import (
    DEFAULT_CATEGORY_IDS,
    FOOD_ID,
    FUN_ID,
    OTHER_ID,
    Category,
)
from moneytracker.snapshot import BUDGETS_KEY, CATEGORIES_KEY, EXPENSES_KEY
from moneytracker.tracker import MoneyTracker
from tests.helpers import read_blob, seed_backend


# =============================================================================
# Seeds
# =============================================================================


def test_seed_categories_installed_on_open(tracker):
    """Test a fresh tracker has exactly the five seeds with their fixed ids"""
    ids = [c.id for c in tracker.categories.all()]
    assert set(ids) == DEFAULT_CATEGORY_IDS
    assert {c["id"] for c in read_blob(tracker.backend, CATEGORIES_KEY)} == DEFAULT_CATEGORY_IDS


def test_seed_defaults_is_additive(backend, test_time):
    """Test existing (even renamed) seeds are kept and only missing ones appended"""
    seed_backend(
        backend,
        categories_v1=[
            {"id": FOOD_ID, "name": "Groceries", "iconName": "cart", "colorHex": "000000"},
            {"id": "custom", "name": "Pets", "iconName": "pawprint", "colorHex": "ABCDEF"},
        ],
    )

    tracker = MoneyTracker(backend, time_provider=test_time)

    assert tracker.categories.get(FOOD_ID).name == "Groceries"
    assert tracker.categories.get("custom") is not None
    assert len(tracker.categories.all()) == 6
    assert {c.id for c in tracker.categories.all()} >= DEFAULT_CATEGORY_IDS


def test_seed_defaults_second_run_inserts_nothing(tracker):
    assert tracker.categories.seed_defaults() == []


# =============================================================================
# Add / Update
# =============================================================================


def test_add_trims_name(tracker):
    category = tracker.categories.add("  Pets ", "pawprint", "ABCDEF")

    assert category is not None
    assert category.name == "Pets"
    assert tracker.categories.get(category.id) == category


def test_add_blank_name_changes_nothing(tracker):
    before = tracker.categories.all()

    assert tracker.categories.add("   ", "tag", "000000") is None
    assert tracker.categories.all() == before


def test_update_replaces_by_id(tracker):
    food = tracker.categories.get(FOOD_ID)
    renamed = food.model_copy(update={"name": "Eating Out"})

    assert tracker.categories.update(renamed) is True
    assert tracker.categories.get(FOOD_ID).name == "Eating Out"


def test_update_unknown_id_is_noop(tracker):
    ghost = Category(id="ghost", name="Ghost", icon_name="x", color_hex="000000")
    assert tracker.categories.update(ghost) is False
    assert tracker.categories.get("ghost") is None


# =============================================================================
# Hierarchy
# =============================================================================


def test_top_level_sorted_case_insensitively(tracker):
    tracker.categories.add("apples", "leaf", "00FF00")
    child = tracker.categories.add("Zebra", "tag", "000000", parent_id=FOOD_ID)

    names = [c.name for c in tracker.categories.top_level()]

    assert names == sorted(names, key=str.casefold)
    assert names[0] == "apples"
    assert child.name not in names


def test_children_of(tracker):
    tracker.categories.add("snacks", "tag", "000000", parent_id=FOOD_ID)
    tracker.categories.add("Coffee", "cup", "000000", parent_id=FOOD_ID)
    tracker.categories.add("Movies", "film", "000000", parent_id=FUN_ID)

    assert [c.name for c in tracker.categories.children_of(FOOD_ID)] == ["Coffee", "snacks"]


def test_display_name_for_subcategory(tracker):
    child = tracker.categories.add("Coffee", "cup", "000000", parent_id=FOOD_ID)

    assert tracker.categories.display_name(child) == "Food › Coffee"
    assert tracker.categories.display_name(tracker.categories.get(FOOD_ID)) == "Food"


def test_add_with_unknown_parent_changes_nothing(tracker):
    before = tracker.categories.all()

    assert tracker.categories.add("Ghost", "tag", "000000", parent_id="does-not-exist") is None
    assert tracker.categories.all() == before
    assert len(read_blob(tracker.backend, CATEGORIES_KEY)) == len(before)


def test_add_under_subcategory_changes_nothing(tracker):
    """Test the hierarchy stays two levels deep"""
    coffee = tracker.categories.add("Coffee", "cup", "000000", parent_id=FOOD_ID)

    assert tracker.categories.add("Espresso", "cup", "000000", parent_id=coffee.id) is None
    assert [c.name for c in tracker.categories.children_of(coffee.id)] == []
    assert [c.name for c in tracker.categories.children_of(FOOD_ID)] == ["Coffee"]


# =============================================================================
# Remove
# =============================================================================


def test_seed_categories_cannot_be_removed(tracker):
    for seed_id in DEFAULT_CATEGORY_IDS:
        assert tracker.categories.remove(seed_id) is False
    assert {c.id for c in tracker.categories.all()} == DEFAULT_CATEGORY_IDS


def test_remove_unknown_category_is_noop(tracker):
    assert tracker.categories.remove("nope") is False


def test_remove_cascades_to_children_expenses_and_budgets(tracker, general_id):
    """
    Deleting a parent removes its subtree, moves their expenses to Other and
    drops their category budgets; unrelated budgets survive.
    """
    parent = tracker.categories.add("Home", "house", "111111")
    child = tracker.categories.add("Rent", "key", "222222", parent_id=parent.id)

    on_parent = tracker.expenses.add(30, parent.id, "", tracker.now())
    on_child = tracker.expenses.add(700, child.id, "", tracker.now())
    on_food = tracker.expenses.add(12, FOOD_ID, "", tracker.now())

    tracker.budgets.set_budget(general_id, child.id, 800, BudgetScope.CATEGORY)
    tracker.budgets.set_budget(general_id, FOOD_ID, 200, BudgetScope.CATEGORY)
    tracker.budgets.set_budget(general_id, None, 1500, BudgetScope.LIST)

    assert tracker.categories.remove(parent.id) is True

    remaining_ids = {c.id for c in tracker.categories.all()}
    assert parent.id not in remaining_ids
    assert child.id not in remaining_ids

    assert tracker.expenses.get(on_parent.id).category_id == OTHER_ID
    assert tracker.expenses.get(on_child.id).category_id == OTHER_ID
    assert tracker.expenses.get(on_food.id).category_id == FOOD_ID

    assert tracker.budgets.budget_for(general_id, child.id) is None
    assert tracker.budgets.budget_for(general_id, FOOD_ID) is not None
    assert tracker.budgets.budget_for(general_id) is not None

    # Persisted, not just in memory
    stored_expenses = read_blob(tracker.backend, EXPENSES_KEY)
    assert {e["categoryId"] for e in stored_expenses} == {OTHER_ID, FOOD_ID}
    assert len(read_blob(tracker.backend, BUDGETS_KEY)) == 2


def test_remove_child_keeps_parent(tracker):
    child = tracker.categories.add("Coffee", "cup", "000000", parent_id=FOOD_ID)

    assert tracker.categories.remove(child.id) is True
    assert tracker.categories.get(FOOD_ID) is not None
    assert tracker.categories.children_of(FOOD_ID) == []
