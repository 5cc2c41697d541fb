"""
Rule Store - per-SKU pricing rules.

Each SKU holds exactly one PriceRule: either a TierTable of
quantity → price thresholds, or a CustomPrice function. Registering one kind
replaces the other.
"""
import logging
from typing import Iterator, Optional

from ..exceptions import InvalidRuleError
from .callbacks import check_price_function
from .models import CustomPrice, PriceFunction, PriceRule, TierTable

logger = logging.getLogger(__name__)


def normalize_sku(sku: str) -> str:
    """Trim and upper-case an item code."""
    return str(sku).strip().upper()


def _is_int(value) -> bool:
    # bool is an int subclass but never a valid quantity or price
    return isinstance(value, int) and not isinstance(value, bool)


class RuleStore:
    """
    Holds the pricing rule of every known SKU.

    SKUs are stored upper-cased; lookups expect already normalized codes.
    """

    def __init__(self):
        self._rules: dict[str, PriceRule] = {}

    def add_tier_rule(self, sku: str, quantity: int, price: int) -> "RuleStore":
        """
        Register ``quantity`` units of ``sku`` at ``price``.

        A SKU without a tier table (unknown, or priced by a custom function)
        starts a fresh table holding only this threshold. Otherwise the
        threshold is inserted, replacing any earlier price for the same
        quantity.
        """
        sku = normalize_sku(sku)
        if not (_is_int(quantity) and _is_int(price)):
            raise InvalidRuleError(
                f"Checkout rule quantity and price must be integers, got "
                f"{type(quantity).__name__} and {type(price).__name__}",
                rule=f"{sku}|{price!r}|{quantity!r}",
            )
        if not sku or quantity < 1 or price < 0:
            raise InvalidRuleError(
                "Checkout rules need a valid SKU, a quantity of at least 1 and a non-negative price",
                rule=f"{sku}|{price}|{quantity}",
            )

        current = self._rules.get(sku)
        if not isinstance(current, TierTable):
            if current is not None:
                logger.debug("Replacing custom price rule for %s with tier table", sku)
            current = self._rules[sku] = TierTable()
        elif quantity in current.tiers:
            logger.debug(
                "Overwriting %s x%d: %d -> %d", sku, quantity, current.tiers[quantity], price
            )

        current.tiers[quantity] = price
        return self

    def add_custom_rule(self, sku: str, fn: PriceFunction) -> "RuleStore":
        """Price ``sku`` with ``fn(quantity)``, discarding any existing rule."""
        check_price_function(fn)
        sku = normalize_sku(sku)
        if not sku:
            raise InvalidRuleError("Custom price rules need a valid SKU")

        self._rules[sku] = CustomPrice(fn=fn)
        logger.debug("Registered custom price rule %s for %s", self._rules[sku].name, sku)
        return self

    def has(self, sku: str) -> bool:
        return sku in self._rules

    def get(self, sku: str) -> Optional[PriceRule]:
        return self._rules.get(sku)

    def skus(self) -> list[str]:
        return list(self._rules)

    def __contains__(self, sku: str) -> bool:
        return self.has(sku)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)
