"""
Categories Module - two-level category hierarchy with protected seeds

Five seed categories (Food, Transport, Shopping, Fun, Other) always exist
and can never be deleted; everything else can be nested one level deep and
removed with its subtree.
"""

from moneytracker.categories.models import DEFAULT_CATEGORY_IDS, OTHER_ID, Category

__all__ = ["Category", "DEFAULT_CATEGORY_IDS", "OTHER_ID"]
