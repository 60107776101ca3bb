"""
Tracker Policy - tunable thresholds and defaults for the ledger

Everything that is a number or a default name rather than a rule lives here:
the exhausted-card tolerance, the alert thresholds, the default list and card
names, what the widget shows, and the two feature toggles.
"""

from pydantic import BaseModel, Field


class TrackerPolicy(BaseModel):
    """
    Ledger configuration

    The defaults reproduce the behavior users of the app are used to.
    """

    # Card exhaustion
    zero_epsilon: float = Field(
        default=1e-4,
        gt=0.0,
        description="Remaining balance at or below this counts as empty (absorbs float noise)",
    )

    # Budget alerts
    budget_near_ratio: float = Field(
        default=0.9,
        ge=0.0,
        description="Progress at or above which a budget is 'near'",
    )
    budget_over_ratio: float = Field(
        default=1.0,
        ge=0.0,
        description="Progress at or above which a budget is 'over'",
    )

    # Card alerts: near empty when remaining <= max(ratio*limit, min(floor_ratio*limit, floor_cap))
    card_near_empty_ratio: float = Field(default=0.1, ge=0.0, le=1.0)
    card_near_empty_floor_ratio: float = Field(default=0.25, ge=0.0, le=1.0)
    card_near_empty_floor_cap: float = Field(default=10.0, ge=0.0)

    # Defaults
    default_list_name: str = Field(default="General", min_length=1)
    default_card_name: str = Field(default="Card", min_length=1)

    # Widget
    widget_window_days: int = Field(
        default=30,
        ge=1,
        description="Spend window of the widget (today plus the previous N-1 days)",
    )
    widget_category_limit: int = Field(default=3, ge=0)
    widget_refresh_minutes: int = Field(default=30, ge=1)

    # Feature toggles (hide budget/category read models, data is kept)
    budgets_enabled: bool = True
    categories_enabled: bool = True

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "description": "Thresholds and defaults governing the expense ledger"
        },
    }

    def card_near_empty_threshold(self, limit: float) -> float:
        """Remaining balance at or below which a card is 'near empty'"""
        percent = limit * self.card_near_empty_ratio
        floor = min(limit * self.card_near_empty_floor_ratio, self.card_near_empty_floor_cap)
        return max(percent, floor)


# Default global policy instance
default_policy = TrackerPolicy()
