"""Rule store registration, overwrite and custom-rule replacement."""
from typing import Mapping

import pytest

from checkout_pricing.engine import CustomPrice, RuleStore, TierTable
from checkout_pricing.engine.callbacks import check_total_modifier
from checkout_pricing.exceptions import InvalidRuleError


def test_tier_rules_accumulate_per_sku():
    """Thresholds for one SKU share a table; lookups use the normalized SKU."""
    store = RuleStore().add_tier_rule("a", 1, 10).add_tier_rule(" A ", 3, 20)

    rule = store.get("A")
    assert isinstance(rule, TierTable)
    assert rule.tiers == {1: 10, 3: 20}
    assert store.has("A")
    assert "A" in store
    assert len(store) == 1


def test_last_write_wins_for_same_threshold():
    """Re-registering a (sku, quantity) pair silently replaces the earlier price."""
    store = RuleStore().add_tier_rule("A", 1, 10).add_tier_rule("A", 1, 8)
    assert store.get("A").tiers == {1: 8}


def test_descending_order():
    store = RuleStore()
    for qty in (3, 10, 1, 5):
        store.add_tier_rule("A", qty, qty * 10)
    assert [q for q, _ in store.get("A").descending()] == [10, 5, 3, 1]


def test_zero_price_is_a_free_item():
    """Direct registration allows price 0, unlike parsed text rules."""
    store = RuleStore().add_tier_rule("GIFT", 1, 0)
    assert store.get("GIFT").tiers == {1: 0}


@pytest.mark.parametrize("sku,qty,price", [
    ("A", 0, 10),
    ("A", -1, 10),
    ("A", 1, -1),
    ("", 1, 10),
    ("   ", 1, 10),
    ("A", 1, 9.5),
    ("A", True, 10),
    ("A", 1, "10"),
])
def test_invalid_tier_rules(sku, qty, price):
    """Blank SKUs, non-positive quantities, negative prices and non-int values are rejected."""
    with pytest.raises(InvalidRuleError):
        RuleStore().add_tier_rule(sku, qty, price)


def test_tier_rule_discards_custom_function():
    """A tier rule on a custom-priced SKU starts a fresh table with only that threshold."""
    store = RuleStore().add_custom_rule("A", lambda qty: qty * 2)
    store.add_tier_rule("A", 3, 10)

    rule = store.get("A")
    assert isinstance(rule, TierTable)
    assert rule.tiers == {3: 10}


def test_custom_rule_discards_tier_table():
    """A custom rule replaces the whole tier table of the SKU."""
    def flat(qty: int) -> int:
        return 99

    store = RuleStore().add_tier_rule("A", 1, 10).add_custom_rule("a", flat)

    rule = store.get("A")
    assert isinstance(rule, CustomPrice)
    assert rule.fn is flat
    assert rule.name == "flat"


def test_custom_rule_signature_checks():
    """Callbacks with the wrong arity or int annotations never reach the store."""
    store = RuleStore()

    def no_params() -> int:
        return 1

    def two_params(qty: int, extra: int) -> int:
        return qty

    def str_param(qty: str) -> int:
        return 1

    def float_return(qty: int) -> float:
        return 1.0

    def var_args(*args) -> int:
        return 1

    for bad in (no_params, two_params, str_param, float_return, var_args, "not callable"):
        with pytest.raises(InvalidRuleError):
            store.add_custom_rule("A", bad)

    assert not store.has("A")


def test_custom_rule_without_annotations_is_accepted():
    store = RuleStore().add_custom_rule("A", lambda qty: qty * 5)
    assert store.get("A").fn(3) == 15


def test_total_modifier_signature_checks():
    """Modifiers need (int, Mapping) -> int; unannotated lambdas are accepted."""
    def good(total: int, items: Mapping[str, int]) -> int:
        return total

    def good_dict(total: int, items: dict) -> int:
        return total

    assert check_total_modifier(good) is good
    assert check_total_modifier(good_dict) is good_dict
    assert check_total_modifier(lambda total, items: total)

    def one_param(total: int) -> int:
        return total

    def list_items(total: int, items: list) -> int:
        return total

    def no_int_return(total: int, items: dict) -> str:
        return ""

    for bad in (one_param, list_items, no_int_return, 42):
        with pytest.raises(InvalidRuleError):
            check_total_modifier(bad)
