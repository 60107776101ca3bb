"""
Category Models - the category hierarchy and its seed data

Categories form a shallow tree: a category either has no parent (top level)
or points at a top-level parent. Five seed categories ship with fixed ids so
that data written by any install - and legacy data that only carried a
string key like "food" - resolves to the same category.
"""

from moneytracker.kernel.records import Record


class Category(Record):
    """
    Expense category

    Attributes:
        id: Stable identifier
        name: Display name (trimmed, never blank)
        icon_name: Icon reference for the presentation layer
        color_hex: Color reference, hex string without '#'
        parent_id: Top-level parent for subcategories, None for top level
    """

    id: str
    name: str
    icon_name: str
    color_hex: str
    parent_id: str | None = None

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None


FOOD_ID = "11111111-1111-1111-1111-111111111111"
TRANSPORT_ID = "22222222-2222-2222-2222-222222222222"
SHOPPING_ID = "33333333-3333-3333-3333-333333333333"
FUN_ID = "44444444-4444-4444-4444-444444444444"
OTHER_ID = "55555555-5555-5555-5555-555555555555"

# Legacy string keys -> seed ids
LEGACY_CATEGORY_KEYS: dict[str, str] = {
    "food": FOOD_ID,
    "transport": TRANSPORT_ID,
    "shopping": SHOPPING_ID,
    "fun": FUN_ID,
    "other": OTHER_ID,
}

DEFAULT_CATEGORY_IDS: frozenset[str] = frozenset(LEGACY_CATEGORY_KEYS.values())


def default_categories() -> list[Category]:
    """Fresh copies of the five seed categories, in display order"""
    return [
        Category(id=FOOD_ID, name="Food", icon_name="fork.knife", color_hex="FF6B81"),
        Category(id=TRANSPORT_ID, name="Transport", icon_name="tram.fill", color_hex="2DD4BF"),
        Category(id=SHOPPING_ID, name="Shopping", icon_name="bag.fill", color_hex="F97316"),
        Category(id=FUN_ID, name="Fun", icon_name="sparkles", color_hex="6366F1"),
        Category(id=OTHER_ID, name="Other", icon_name="circle.grid.2x2.fill", color_hex="34D399"),
    ]


def category_id_for_legacy_key(key: str) -> str:
    """
    Map a legacy category key to its seed id

    Lookup is case-insensitive; unknown keys land in "Other".
    """
    return LEGACY_CATEGORY_KEYS.get(key.lower(), OTHER_ID)
