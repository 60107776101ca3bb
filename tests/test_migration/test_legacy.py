"""
Tests for legacy decoding helpers
"""

from moneytracker.categories.models import FOOD_ID, FUN_ID, OTHER_ID, TRANSPORT_ID
from moneytracker.migration.chain import decode_current_shape, decode_legacy_shape
from moneytracker.migration.legacy import LegacyExpense, resolve_category_reference
from tests.helpers import expense_record, legacy_expense_record


def test_uuid_category_id_wins():
    record = {"categoryId": FUN_ID, "legacyCategory": "food", "category": "transport"}
    assert resolve_category_reference(record) == FUN_ID


def test_legacy_category_before_category():
    record = {"legacyCategory": "food", "category": "transport"}
    assert resolve_category_reference(record) == FOOD_ID


def test_category_field():
    assert resolve_category_reference({"category": "Transport"}) == TRANSPORT_ID


def test_key_string_in_category_id_field():
    assert resolve_category_reference({"categoryId": "food"}) == FOOD_ID


def test_known_non_uuid_id_kept():
    assert resolve_category_reference({"categoryId": "pets"}, {"pets"}) == "pets"


def test_nothing_usable_falls_back_to_other():
    assert resolve_category_reference({}) == OTHER_ID
    assert resolve_category_reference({"categoryId": 42}) == OTHER_ID


def test_legacy_expense_upgrade():
    legacy = LegacyExpense.model_validate(legacy_expense_record("e1", 9, "fun", "cinema"))
    upgraded = legacy.upgrade("l1")

    assert upgraded.category_id == FUN_ID
    assert upgraded.list_id == "l1"
    assert upgraded.note == "cinema"
    assert upgraded.card_id is None


def test_current_decoder_rejects_legacy_shape():
    assert decode_current_shape([legacy_expense_record("e1", 1, "food")], set()) is None


def test_current_decoder_rejects_non_lists():
    assert decode_current_shape({"id": "e1"}, set()) is None
    assert decode_current_shape(["e1"], set()) is None


def test_current_decoder_counts_fallbacks():
    decoded = decode_current_shape(
        [expense_record("e1", 1, FOOD_ID, "l1"), expense_record("e2", 1, "fun", "l1")],
        set(),
    )

    expenses, resolved = decoded
    assert [e.category_id for e in expenses] == [FOOD_ID, FUN_ID]
    assert resolved == 1


def test_legacy_decoder_asks_for_default_list_only_on_success():
    calls = []

    def default_list_id() -> str:
        calls.append(1)
        return "general"

    assert decode_legacy_shape([{"nope": 1}], default_list_id) is None
    assert calls == []

    upgraded = decode_legacy_shape([legacy_expense_record("e1", 1, "food")], default_list_id)
    assert [e.list_id for e in upgraded] == ["general"]
    assert calls == [1]
