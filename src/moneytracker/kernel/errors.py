"""
Custom exceptions for Moneytracker

A small, explicit error hierarchy. Public ledger and registry operations
catch these at their boundary and turn them into "nothing changed" results;
invariant functions raise them so callers can ask *why* something was refused.

Fun fact: The word "budget" comes from the Old French "bougette", a small
leather purse. Our purses just happen to raise exceptions.
"""


class MoneytrackerError(Exception):
    """Base exception for all Moneytracker errors"""

    pass


# Validation rejections (blank names, non-positive amounts)


class ValidationRejected(MoneytrackerError):
    """Base class for user input that is simply not applied"""

    pass


class BlankName(ValidationRejected):
    """Raised when a name is empty after trimming whitespace"""

    def __init__(self, entity: str) -> None:
        self.entity = entity
        super().__init__(f"{entity} name must not be blank")


class NonPositiveAmount(ValidationRejected):
    """Raised when an amount or card limit is zero or negative"""

    def __init__(self, field: str, value: float) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field} must be greater than zero, got {value}")


class NonFiniteAmount(ValidationRejected):
    """Raised when an amount is NaN or infinite"""

    def __init__(self, field: str, value: float) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field} must be a finite number, got {value}")


# Invariant guards


class InvariantViolation(MoneytrackerError):
    """
    Raised when a ledger invariant would be violated

    These are the consistency rules between expenses, cards, categories
    and budgets. The operation is refused and the state stays untouched.
    """

    pass


class CardSpendRejected(InvariantViolation):
    """Base class for refusing an expense against a card"""

    def __init__(self, card_id: str, message: str) -> None:
        self.card_id = card_id
        super().__init__(message)


class CardBroken(CardSpendRejected):
    """Raised when spending against an archived (broken) card"""

    def __init__(self, card_id: str) -> None:
        super().__init__(card_id, f"Card {card_id} is archived and cannot take expenses")


class CardExhausted(CardSpendRejected):
    """Raised when the card's remaining balance is essentially zero"""

    def __init__(self, card_id: str, remaining: float) -> None:
        self.remaining = remaining
        super().__init__(card_id, f"Card {card_id} has no remaining balance ({remaining})")


class CardLimitExceeded(CardSpendRejected):
    """Raised when an expense is larger than what is left on the card"""

    def __init__(self, card_id: str, amount: float, remaining: float) -> None:
        self.amount = amount
        self.remaining = remaining
        super().__init__(
            card_id,
            f"Expense {amount} exceeds remaining balance {remaining} on card {card_id}",
        )


class CategoryProtected(InvariantViolation):
    """Raised when deleting a seed category"""

    def __init__(self, category_id: str) -> None:
        self.category_id = category_id
        super().__init__(f"Category {category_id} is a default category and cannot be deleted")


class LastCategory(InvariantViolation):
    """Raised when deleting the only remaining category"""

    def __init__(self, category_id: str) -> None:
        self.category_id = category_id
        super().__init__(f"Category {category_id} is the last category and cannot be deleted")


class ParentNotTopLevel(InvariantViolation):
    """Raised when a subcategory would be nested under another subcategory"""

    def __init__(self, parent_id: str) -> None:
        self.parent_id = parent_id
        super().__init__(f"Category {parent_id} is a subcategory and cannot have children")


# Lookups


class CategoryNotFound(MoneytrackerError):
    """Raised when a category does not exist"""

    def __init__(self, category_id: str) -> None:
        self.category_id = category_id
        super().__init__(f"Category {category_id} not found")


class CardNotFound(MoneytrackerError):
    """Raised when a card does not exist"""

    def __init__(self, card_id: str) -> None:
        self.card_id = card_id
        super().__init__(f"Card {card_id} not found")


class ListNotFound(MoneytrackerError):
    """Raised when an expense list does not exist"""

    def __init__(self, list_id: str) -> None:
        self.list_id = list_id
        super().__init__(f"List {list_id} not found")


# Snapshot / persistence


class SnapshotError(MoneytrackerError):
    """Base class for shared snapshot errors"""

    pass


class SnapshotDecodeError(SnapshotError):
    """Raised when a persisted blob matches none of the known shapes"""

    def __init__(self, key: str, reason: str = "") -> None:
        self.key = key
        super().__init__(f"Could not decode '{key}'" + (f": {reason}" if reason else ""))


class ReadOnlySnapshotError(SnapshotError):
    """Raised when a read-only consumer (the widget) attempts a write"""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Snapshot is read-only, refusing to write '{key}'")
