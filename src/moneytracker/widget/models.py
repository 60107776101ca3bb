"""
Widget Models - what the home-screen widget renders

Plain read-only values. progress/remaining are serialized too so the widget
renderer does no arithmetic of its own.
"""

from datetime import datetime

from pydantic import BaseModel, computed_field


class CategorySnapshot(BaseModel):
    """One category budget as shown on the widget"""

    budget_id: str
    category_id: str
    name: str
    color_hex: str
    spent: float
    limit: float

    @computed_field
    @property
    def progress(self) -> float:
        if self.limit <= 0:
            return 0.0
        return self.spent / self.limit

    @computed_field
    @property
    def remaining(self) -> float:
        return max(self.limit - self.spent, 0.0)


class CardSnapshot(BaseModel):
    """One active card as shown on the widget"""

    card_id: str
    name: str
    remaining: float
    limit: float

    @computed_field
    @property
    def used(self) -> float:
        return max(self.limit - self.remaining, 0.0)

    @computed_field
    @property
    def progress(self) -> float:
        if self.limit <= 0:
            return 0.0
        return self.used / self.limit


class WidgetEntry(BaseModel):
    """
    One widget timeline entry

    Attributes:
        date: When the entry was built
        next_refresh: When the widget should read the snapshot again
        list_id: List the entry describes (selected, or first)
        list_name: Its name
        spent: Spend on the list over the widget window
        limit: List budget amount, 0 when none is set
        category_budgets: Highest-progress category budgets first
        cards: Active cards, emptiest first
    """

    date: datetime
    next_refresh: datetime
    list_id: str
    list_name: str
    spent: float
    limit: float
    category_budgets: list[CategorySnapshot]
    cards: list[CardSnapshot]

    @computed_field
    @property
    def progress(self) -> float:
        if self.limit <= 0:
            return 0.0
        return self.spent / self.limit

    @computed_field
    @property
    def remaining(self) -> float:
        return max(self.limit - self.spent, 0.0)
