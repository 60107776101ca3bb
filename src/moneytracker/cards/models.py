"""
Card Models - prepaid spending sub-allocations

A card carves a fixed limit out of a list. Expenses recorded against the
card draw it down; when nothing is left the card is archived ("broken").

State machine:
    ACTIVE --(exhausted | break)--> BROKEN --(restore)--> ACTIVE
"""

from enum import Enum

from pydantic import BaseModel, Field

from moneytracker.kernel.records import Record


class CardStatus(str, Enum):
    """Card lifecycle states"""

    ACTIVE = "active"  # Accepts expenses while balance remains
    BROKEN = "broken"  # Archived, refuses expenses until restored


class Card(Record):
    """
    Prepaid card attached to a list

    Attributes:
        id: Stable identifier
        name: Display name ("Card" when created blank)
        limit: Total amount the card may absorb
        list_id: Owning list
        is_broken: Archived flag (missing in older blobs -> False)
    """

    id: str
    name: str
    limit: float
    list_id: str
    is_broken: bool = False

    @property
    def status(self) -> CardStatus:
        return CardStatus.BROKEN if self.is_broken else CardStatus.ACTIVE

    @property
    def display_name(self) -> str:
        trimmed = self.name.strip()
        return trimmed if trimmed else "Card"


class CardBalance(BaseModel):
    """Read-only view of a card's spend against its limit"""

    card_id: str
    name: str
    limit: float
    spent: float
    remaining: float = Field(ge=0)
    status: CardStatus

    @property
    def progress(self) -> float:
        """Share of the limit used, clamped to [0, 1]"""
        if self.limit <= 0:
            return 0.0
        return min(max(self.spent / self.limit, 0.0), 1.0)
