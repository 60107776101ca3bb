"""
Card Ledger - prepaid card balances and their archive state machine

Balances are never stored: spent(card) is always the sum of the expenses
that reference the card, so deleting an expense gives the money back.
"""

from moneytracker.cards.invariants import is_exhausted, remaining_balance, validate_card_spend
from moneytracker.cards.models import Card, CardBalance
from moneytracker.kernel.errors import CardNotFound, CardSpendRejected, ValidationRejected
from moneytracker.kernel.ids import IdFactory, default_id_factory
from moneytracker.kernel.logging import get_logger
from moneytracker.kernel.metrics import card_transitions_total, record_rejection
from moneytracker.kernel.policy import TrackerPolicy, default_policy
from moneytracker.kernel.validation import require_positive
from moneytracker.lists.registry import ListRegistry
from moneytracker.snapshot import CARDS_KEY, SharedSnapshot

logger = get_logger(__name__)


class CardLedger:
    """
    Owns the cards collection

    Query methods: get, all, cards_in, active_cards, broken_cards,
                   spent, remaining, balance, is_near_empty
    """

    def __init__(
        self,
        snapshot: SharedSnapshot,
        lists: ListRegistry,
        policy: TrackerPolicy = default_policy,
        id_factory: IdFactory = default_id_factory,
    ) -> None:
        self.snapshot = snapshot
        self.lists = lists
        self.policy = policy
        self.id_factory = id_factory

    # Queries

    def get(self, card_id: str) -> Card | None:
        return next((c for c in self.snapshot.cards if c.id == card_id), None)

    def all(self) -> list[Card]:
        return list(self.snapshot.cards)

    def cards_in(self, list_id: str | None) -> list[Card]:
        if list_id is None:
            return []
        return [c for c in self.snapshot.cards if c.list_id == list_id]

    def active_cards(self, list_id: str | None) -> list[Card]:
        return [c for c in self.cards_in(list_id) if not c.is_broken]

    def broken_cards(self, list_id: str | None) -> list[Card]:
        return [c for c in self.cards_in(list_id) if c.is_broken]

    def spent(self, card_id: str) -> float:
        """Sum of every expense drawn from the card"""
        return sum(e.amount for e in self.snapshot.expenses if e.card_id == card_id)

    def remaining(self, card_id: str) -> float:
        card = self._require(card_id)
        return remaining_balance(card.limit, self.spent(card_id))

    def balance(self, card_id: str) -> CardBalance:
        card = self._require(card_id)
        spent = self.spent(card_id)
        return CardBalance(
            card_id=card.id,
            name=card.display_name,
            limit=card.limit,
            spent=spent,
            remaining=remaining_balance(card.limit, spent),
            status=card.status,
        )

    def is_near_empty(self, card_id: str) -> bool:
        card = self._require(card_id)
        return self.remaining(card_id) <= self.policy.card_near_empty_threshold(card.limit)

    def spend_rejection(self, card_id: str, amount: float) -> CardSpendRejected | None:
        """
        Why an expense against the card would be refused

        Returns:
            The rejection, or None if the expense would be accepted

        Raises:
            CardNotFound: If the card does not exist
        """
        card = self._require(card_id)
        try:
            validate_card_spend(card, amount, self.remaining(card_id), self.policy.zero_epsilon)
        except CardSpendRejected as e:
            return e
        return None

    # Commands

    def add(self, name: str, limit: float) -> Card | None:
        """
        Create a card on the active list

        Blank names become the default card name.

        Returns:
            The new card, or None if the limit is not positive
        """
        list_id = self.lists.active_list_id()
        try:
            require_positive(limit, "Card limit")
        except ValidationRejected as e:
            record_rejection("add_card", type(e).__name__)
            logger.info("Card not added", reason=str(e))
            return None
        if list_id is None:
            record_rejection("add_card", "NoActiveList")
            logger.info("Card not added", reason="no active list")
            return None

        card = Card(
            id=self.id_factory.generate(),
            name=name.strip() or self.policy.default_card_name,
            limit=limit,
            list_id=list_id,
        )
        self.snapshot.cards.append(card)
        self.snapshot.persist(CARDS_KEY)

        logger.info("Card added", card_id=card.id, list_id=list_id)
        return card

    def record_expense_against_card(self, card_id: str, amount: float) -> bool:
        """
        Guard run by the expense ledger before inserting a card expense

        Returns:
            True if the expense may be recorded
        """
        try:
            rejection = self.spend_rejection(card_id, amount)
        except CardNotFound as e:
            rejection = e
        if rejection is None:
            return True

        record_rejection("record_expense", type(rejection).__name__)
        logger.info("Card refused expense", card_id=card_id, reason=str(rejection))
        return False

    def break_if_exhausted(self, card_id: str) -> bool:
        """
        Archive the card if nothing is left on it

        Returns:
            True if the card transitioned to broken
        """
        card = self.get(card_id)
        if card is None or card.is_broken:
            return False
        if not is_exhausted(self.remaining(card_id), self.policy.zero_epsilon):
            return False

        card.is_broken = True
        self.snapshot.persist(CARDS_KEY)
        card_transitions_total.labels(transition="break", trigger="auto").inc()
        logger.info("Card exhausted and archived", card_id=card_id)
        return True

    def break_card(self, card_id: str) -> bool:
        """Archive a card manually, regardless of balance"""
        return self._set_broken(card_id, True)

    def restore(self, card_id: str) -> bool:
        """Bring an archived card back, regardless of balance"""
        return self._set_broken(card_id, False)

    def remove(self, card_id: str) -> bool:
        """Hard delete; expenses keep their card reference"""
        before = len(self.snapshot.cards)
        self.snapshot.cards = [c for c in self.snapshot.cards if c.id != card_id]
        if len(self.snapshot.cards) == before:
            return False
        self.snapshot.persist(CARDS_KEY)
        logger.info("Card removed", card_id=card_id)
        return True

    def auto_break_exhausted_cards(self) -> list[str]:
        """
        Startup reconciliation: archive active cards that are already empty

        Returns:
            Ids of the cards that were archived
        """
        broken: list[str] = []
        for card in self.snapshot.cards:
            if card.is_broken:
                continue
            if is_exhausted(remaining_balance(card.limit, self.spent(card.id)), self.policy.zero_epsilon):
                card.is_broken = True
                broken.append(card.id)

        if broken:
            self.snapshot.persist(CARDS_KEY)
            card_transitions_total.labels(transition="break", trigger="reconcile").inc(len(broken))
            logger.info("Exhausted cards archived at startup", card_ids=broken)
        return broken

    # Internals

    def _require(self, card_id: str) -> Card:
        card = self.get(card_id)
        if card is None:
            raise CardNotFound(card_id)
        return card

    def _set_broken(self, card_id: str, broken: bool) -> bool:
        card = self.get(card_id)
        if card is None:
            record_rejection("break_card" if broken else "restore_card", "CardNotFound")
            return False

        card.is_broken = broken
        self.snapshot.persist(CARDS_KEY)
        transition = "break" if broken else "restore"
        card_transitions_total.labels(transition=transition, trigger="manual").inc()
        logger.info(f"Card {transition} requested", card_id=card_id)
        return True
