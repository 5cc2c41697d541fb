"""
Pricing Engine - computes checkout totals with traceability.

Resolution order:
1. Refuse to price anything when no rules are registered
2. Short-circuit an empty cart to a total of 0
3. For each SKU: call its custom price function, or greedily decompose the
   quantity over its tier table (largest threshold first)
4. Fold cart-wide total modifiers over the summed subtotal, in registration order
"""
import logging
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from ..exceptions import IncompleteRuleCoverageError, InvalidItemError, NoRulesConfiguredError
from .callbacks import ensure_int
from .models import AppliedTier, CustomPrice, LineItem, Result, TierTable, TotalModifier
from .rule_store import RuleStore

logger = logging.getLogger(__name__)


def decompose(quantity: int, table: TierTable) -> tuple[list[AppliedTier], int]:
    """
    Greedily split ``quantity`` over the thresholds of ``table``.

    Returns (applied tiers, remaining units). Remaining is non-zero only when
    the table has no threshold able to absorb the last units (typically a
    missing unit price).
    """
    applied = []
    remaining = quantity

    for threshold, price in table.descending():
        if remaining == 0:
            break
        if remaining < threshold:
            continue

        clusters, remaining = divmod(remaining, threshold)
        applied.append(AppliedTier(threshold=threshold, price=price, clusters=clusters))

    return applied, remaining


class PricingEngine:
    """
    Core pricing engine that turns a cart into a total.

    The engine is stateless apart from the RuleStore it reads and the ordered
    list of total modifiers it folds at the end.
    """

    def __init__(self, rules: RuleStore, modifiers: Optional[Sequence[TotalModifier]] = None):
        self.rules = rules
        self.modifiers: list[TotalModifier] = list(modifiers or [])

    def add_modifier(self, modifier: TotalModifier) -> None:
        self.modifiers.append(modifier)

    def total(self, items: Mapping[str, int]) -> int:
        """Total price of ``items`` (SKU → quantity)."""
        return self.calculate(items).total

    def calculate(self, items: Mapping[str, int]) -> Result:
        """
        Calculate the cart with full traceability.

        Args:
            items: Mapping of normalized SKU → quantity

        Returns:
            Result dataclass with per-SKU lines and the modifier trace
        """
        if len(self.rules) < 1:
            raise NoRulesConfiguredError("No pricing rules are set.")

        result = Result(subtotal=0, total=0)
        if not items:
            result.add_trace("Empty Cart", "No items to price", "0")
            return result

        for sku, qty in items.items():
            if qty <= 0:
                continue
            line = self._calculate_line(sku, qty)
            result.lines.append(line)
            result.subtotal += line.subtotal

        result.add_trace("Subtotal", f"{len(result.lines)} line(s) priced", str(result.subtotal))

        snapshot = MappingProxyType(dict(items))
        running = result.subtotal
        for position, modifier in enumerate(self.modifiers, start=1):
            name = getattr(modifier, "__name__", "modifier")
            updated = ensure_int(modifier(running, snapshot), f"Total modifier {name}")
            result.add_trace(f"Modifier {position}", f"{name}: {running} → {updated}", str(updated))
            running = updated

        result.total = running
        logger.debug("Checkout total %d (subtotal %d, %d modifier(s))",
                     result.total, result.subtotal, len(self.modifiers))
        return result

    def _calculate_line(self, sku: str, qty: int) -> LineItem:
        """Price a single SKU line."""
        rule = self.rules.get(sku)
        line = LineItem(sku=sku, quantity=qty)

        if isinstance(rule, CustomPrice):
            line.source = "custom"
            line.subtotal = ensure_int(rule.fn(qty), f"Price rule for {sku}")
            line.add_trace("Custom Rule", f"{rule.name}({qty})", str(line.subtotal))
            return line

        if not isinstance(rule, TierTable):
            raise InvalidItemError(f"Item with code '{sku}' is unknown.", sku=sku)

        line.source = "tier"
        applied, remaining = decompose(qty, rule)
        if remaining > 0:
            raise IncompleteRuleCoverageError(sku, remaining)

        for tier in applied:
            line.tiers_applied.append(tier)
            line.subtotal += tier.amount
            line.add_trace(
                "Tier",
                f"{tier.clusters} × {tier.threshold} unit(s) @ {tier.price}",
                str(tier.amount),
            )

        logger.debug("%s x%d priced at %d over %d tier(s)", sku, qty, line.subtotal, len(applied))
        return line
