"""
Cards Module - prepaid sub-budgets with an active/broken state machine

Fun fact: a card "breaks" the moment its last cent is spent, just like the
paper envelopes people used to budget with!
"""

from moneytracker.cards.models import Card, CardBalance, CardStatus

__all__ = ["Card", "CardBalance", "CardStatus"]
