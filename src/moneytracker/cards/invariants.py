"""
Card Module Invariants - spend guards for prepaid cards

Pure functions. A card refuses an expense when it is archived, when it is
already (essentially) empty, or when the expense is larger than what is left.
"""

from moneytracker.cards.models import Card
from moneytracker.kernel.errors import CardBroken, CardExhausted, CardLimitExceeded


def remaining_balance(limit: float, spent: float) -> float:
    """max(limit - spent, 0)"""
    return max(limit - spent, 0.0)


def is_exhausted(remaining: float, epsilon: float) -> bool:
    """Remaining balance at or below epsilon counts as empty"""
    return remaining <= epsilon


def validate_card_spend(card: Card, amount: float, remaining: float, epsilon: float) -> None:
    """
    Check an expense against a card before it is recorded

    Args:
        card: Card to draw from
        amount: Expense amount
        remaining: Card's current remaining balance
        epsilon: Exhaustion tolerance

    Raises:
        CardBroken: If the card is archived
        CardExhausted: If remaining <= epsilon
        CardLimitExceeded: If amount > remaining
    """
    if card.is_broken:
        raise CardBroken(card.id)

    if is_exhausted(remaining, epsilon):
        raise CardExhausted(card.id, remaining)

    if amount > remaining:
        raise CardLimitExceeded(card.id, amount, remaining)
