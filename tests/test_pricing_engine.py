"""
Pricing engine tests: greedy tier decomposition, custom price rules and
cart-wide total modifiers.
"""
import pytest

from checkout_pricing.engine import PricingEngine, RuleStore, TierTable, decompose
from checkout_pricing.exceptions import (
    IncompleteRuleCoverageError,
    InvalidItemError,
    InvalidRuleError,
    NoRulesConfiguredError,
)


@pytest.fixture
def store():
    """Tier tables for A, B and C as used throughout the checkout tests."""
    rules = RuleStore()
    for sku, qty, price in [
        ("A", 1, 10), ("A", 3, 20), ("A", 5, 40), ("A", 10, 80), ("A", 20, 150),
        ("B", 1, 5), ("B", 2, 7), ("B", 4, 15),
        ("C", 1, 10), ("C", 3, 20),
    ]:
        rules.add_tier_rule(sku, qty, price)
    return rules


@pytest.fixture
def engine(store):
    return PricingEngine(store)


def test_decompose_largest_threshold_first():
    table = TierTable(tiers={1: 10, 3: 20, 5: 40, 10: 80, 20: 150})
    applied, remaining = decompose(37, table)

    assert remaining == 0
    assert [(t.threshold, t.clusters) for t in applied] == [(20, 1), (10, 1), (5, 1), (1, 2)]
    assert sum(t.amount for t in applied) == 150 + 80 + 40 + 20


@pytest.mark.parametrize("qty", [1, 2, 7, 19, 43, 100])
def test_decompose_accounts_for_every_unit(qty):
    """Units consumed by clusters plus the leftover always equal the request."""
    table = TierTable(tiers={3: 20, 5: 40, 10: 80})
    applied, remaining = decompose(qty, table)

    assert sum(t.units for t in applied) + remaining == qty


def test_decompose_reports_residual_without_unit_price():
    """Without a unit threshold the leftover unit is reported, not dropped."""
    applied, remaining = decompose(4, TierTable(tiers={3: 20}))

    assert [(t.threshold, t.clusters) for t in applied] == [(3, 1)]
    assert remaining == 1


def test_reference_cart_total(engine):
    result = engine.calculate({"A": 5, "B": 3, "C": 1})

    assert result.total == 62
    lines = {line.sku: line for line in result.lines}
    assert lines["A"].subtotal == 40
    assert lines["B"].subtotal == 12
    assert [(t.threshold, t.clusters) for t in lines["B"].tiers_applied] == [(2, 1), (1, 1)]
    assert lines["C"].subtotal == 10


def test_total_is_repeatable(engine):
    items = {"A": 37, "B": 9}
    assert engine.total(items) == engine.total(items)


def test_no_rules_fails_even_for_empty_cart():
    """The no-rules check runs before the empty-cart short-circuit."""
    with pytest.raises(NoRulesConfiguredError):
        PricingEngine(RuleStore()).total({})


def test_empty_cart_totals_zero(engine):
    result = engine.calculate({})
    assert result.total == 0
    assert result.lines == []


def test_zero_quantity_lines_are_ignored(engine):
    assert engine.total({"A": 0, "C": 1}) == 10


def test_missing_unit_price_is_fatal():
    """Leftover units raise instead of being silently under-charged."""
    rules = RuleStore().add_tier_rule("B", 2, 7).add_tier_rule("B", 4, 15)
    engine = PricingEngine(rules)

    assert engine.total({"B": 6}) == 22

    with pytest.raises(IncompleteRuleCoverageError) as exc:
        engine.total({"B": 3})
    assert exc.value.sku == "B"
    assert exc.value.remaining == 1
    assert "B" in str(exc.value)


def test_unknown_sku_in_direct_engine_use(engine):
    with pytest.raises(InvalidItemError):
        engine.total({"Z": 1})


def test_custom_rule_replaces_decomposition(store):
    def bulk(qty: int) -> int:
        return qty * 3 if qty >= 50 else qty * 10

    store.add_custom_rule("A", bulk)
    result = PricingEngine(store).calculate({"A": 55})

    assert result.total == 165
    assert result.lines[0].source == "custom"
    assert result.lines[0].tiers_applied == []


def test_custom_rule_must_return_int(store):
    store.add_custom_rule("A", lambda qty: qty * 1.5)

    with pytest.raises(InvalidRuleError):
        PricingEngine(store).total({"A": 2})


def test_modifiers_apply_in_registration_order(engine):
    """Each modifier receives the previous modifier's output."""
    engine.add_modifier(lambda total, items: total * 2)
    engine.add_modifier(lambda total, items: total + 1)

    # raw total 10 -> g(f(10)) = 21, not f(g(10)) = 22
    result = engine.calculate({"C": 1})
    assert result.subtotal == 10
    assert result.total == 21
    assert len(result.trace) == 3


def test_modifier_sees_read_only_cart(engine):
    seen = {}

    def inspect_items(total, items):
        seen.update(items)
        with pytest.raises(TypeError):
            items["A"] = 100
        return total

    engine.add_modifier(inspect_items)
    engine.total({"A": 2, "C": 1})

    assert seen == {"A": 2, "C": 1}


def test_modifier_must_return_int(engine):
    engine.add_modifier(lambda total, items: str(total))

    with pytest.raises(InvalidRuleError):
        engine.total({"C": 1})
