"""
Checkout - the public entry point.

Owns one RuleStore, one Cart and one PricingEngine. Rules passed to the
constructor are parsed once, on ``build()``; every other public method builds
first, so rules registered directly always land after the parsed ones.

    checkout = Checkout("A|10; A|20|3; B|5")
    checkout.add("a", 4).add("B")
    checkout.total()  # 35
"""
import logging
from enum import Enum
from typing import Callable, Iterable, Mapping, Optional

from .config.settings import Settings, get_settings
from .engine.callbacks import check_total_modifier
from .engine.cart import Cart, CartEntry
from .engine.models import PriceFunction, Result
from .engine.pricing_engine import PricingEngine
from .engine.rule_store import RuleStore
from .exceptions import InvalidConfigError
from .rules.rule_parser import DEFAULT_FIELD_DELIMITER, DEFAULT_RULE_DELIMITER, RawRules, RuleParser
from .rules.rule_table import read_rule_table

logger = logging.getLogger(__name__)


class BuildState(Enum):
    UNBUILT = "unbuilt"
    BUILT = "built"


class Checkout:
    """
    A single checkout: pricing rules plus the items scanned so far.

    Args:
        rules: Delimited rule string, or a sequence of rule strings / records
        rule_delimiter: Separates rules inside a single string
        field_delimiter: Separates sku, price and quantity inside a rule
        strict: Fail on malformed rules instead of skipping them
    """

    def __init__(
        self,
        rules: RawRules = None,
        rule_delimiter: str = DEFAULT_RULE_DELIMITER,
        field_delimiter: str = DEFAULT_FIELD_DELIMITER,
        strict: bool = False,
    ):
        self.parser = RuleParser(rule_delimiter, field_delimiter, strict=strict)
        self.rules = RuleStore()
        self.cart = Cart(self.rules)
        self.engine = PricingEngine(self.rules)

        self._pending = self.parser.split(rules)
        self.state = BuildState.UNBUILT

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, rules: RawRules = None) -> "Checkout":
        """Build a checkout from Settings, reading its rule table when no rules are given."""
        settings = settings or get_settings()
        if rules is None and settings.rules_file is not None:
            rules = read_rule_table(settings.rules_file)
        return cls(
            rules,
            rule_delimiter=settings.rule_delimiter,
            field_delimiter=settings.field_delimiter,
            strict=settings.strict,
        )

    @property
    def strict(self) -> bool:
        return self.parser.strict

    @property
    def built(self) -> bool:
        return self.state is BuildState.BUILT

    def with_validation(self) -> "Checkout":
        """Switch rule parsing to strict mode. Must be called before the rules are built."""
        if self.built:
            raise InvalidConfigError("Rule validation must be enabled before the rules are built")
        self.parser.strict = True
        return self

    def build(self) -> "Checkout":
        """Parse the rules given at construction time. Safe to call more than once."""
        if self.built:
            return self

        count = self.parser.load(self._pending, self.rules)
        self._pending = []
        self.state = BuildState.BUILT
        logger.info("Checkout rules built: %d rule(s), %d SKU(s)", count, len(self.rules))
        return self

    def add(self, sku: str, quantity: int = 1) -> "Checkout":
        """Add ``quantity`` units of ``sku`` to the cart."""
        self.build()
        self.cart.add(sku, quantity)
        return self

    def add_multiple(self, items: Iterable[CartEntry]) -> "Checkout":
        """Add bare SKUs and/or ``[sku, qty]`` pairs to the cart."""
        self.build()
        self.cart.add_multiple(items)
        return self

    def add_rule(self, sku: str, price: int, quantity: int = 1) -> "Checkout":
        """Register a tier threshold: ``quantity`` units of ``sku`` cost ``price``."""
        self.build()
        self.rules.add_tier_rule(sku, quantity, price)
        return self

    def add_custom_rule(self, sku: str, price_fn: PriceFunction) -> "Checkout":
        """Price ``sku`` with ``price_fn(quantity) -> int`` instead of tiers."""
        self.build()
        self.rules.add_custom_rule(sku, price_fn)
        return self

    def add_total_modifier(self, modifier: Callable[[int, Mapping[str, int]], int]) -> "Checkout":
        """Register ``modifier(current_total, items) -> int``, applied after all earlier ones."""
        check_total_modifier(modifier)
        self.build()
        self.engine.add_modifier(modifier)
        return self

    @property
    def items(self) -> Mapping[str, int]:
        return self.cart.items

    def calculate(self) -> Result:
        """Price the cart, returning per-line detail and the modifier trace."""
        self.build()
        return self.engine.calculate(self.cart.items)

    def total(self) -> int:
        """Total price of the cart."""
        return self.calculate().total
