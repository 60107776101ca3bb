"""
Budget Models - spend targets and their read-only progress views

A budget targets either a whole list (category_id is None) or one category
inside a list. There is at most one budget per (list_id, category_id) pair.
An amount of zero means "no budget set" for display purposes.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from moneytracker.kernel.records import Record
from moneytracker.kernel.time import days_back


class BudgetScope(str, Enum):
    """What a budget applies to"""

    LIST = "list"
    CATEGORY = "category"


class Budget(Record):
    """
    Spend target for a list or a category within a list

    Attributes:
        id: Stable identifier
        list_id: Owning list
        category_id: Target category, None for the list-level budget
        amount: Target amount, clamped to >= 0 on write
        scope: list or category
    """

    id: str
    list_id: str
    category_id: str | None = None
    amount: float = Field(ge=0)
    scope: BudgetScope

    @property
    def is_set(self) -> bool:
        return self.amount > 0


class Period(str, Enum):
    """
    Time windows used by summaries and the widget

    WEEK and MONTH are rolling windows that start at midnight: today plus
    the previous 6 (or 29) days.
    """

    WEEK = "week"
    MONTH = "month"
    ALL = "all"

    @property
    def title(self) -> str:
        return {
            Period.WEEK: "Last 7 Days",
            Period.MONTH: "Last 30 Days",
            Period.ALL: "All Time",
        }[self]

    def start_date(self, now: datetime) -> datetime | None:
        """Lower bound of the window, None for unbounded"""
        if self is Period.WEEK:
            return days_back(now, 6)
        if self is Period.MONTH:
            return days_back(now, 29)
        return None


class BudgetProgress(BaseModel):
    """
    Spend-vs-target view of one budget

    progress = spent / limit (0 when limit is 0)
    remaining = max(limit - spent, 0)
    """

    budget_id: str
    title: str
    spent: float
    limit: float
    category_id: str | None = None
    icon_name: str | None = None
    color_hex: str | None = None

    @property
    def progress(self) -> float:
        if self.limit <= 0:
            return 0.0
        return self.spent / self.limit

    @property
    def remaining(self) -> float:
        return max(self.limit - self.spent, 0.0)


class AlertKind(str, Enum):
    """Actionable conditions surfaced to the user"""

    LIST_BUDGET_OVER = "list_budget_over"
    LIST_BUDGET_NEAR = "list_budget_near"
    CATEGORY_BUDGET_OVER = "category_budget_over"
    CATEGORY_BUDGET_NEAR = "category_budget_near"
    CARD_EMPTY = "card_empty"
    CARD_NEAR_EMPTY = "card_near_empty"


class Alert(BaseModel):
    """
    One alert produced by trigger evaluation

    Attributes:
        kind: Condition that fired
        subject_id: Budget or card id
        title: Budget title or card name
        message: Human-readable explanation
        progress: Budget progress (budget alerts only)
        remaining: Card remaining balance (card alerts only)
    """

    kind: AlertKind
    subject_id: str
    title: str
    message: str
    progress: float | None = None
    remaining: float | None = None
