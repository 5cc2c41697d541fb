"""Cart - accumulated item quantities for one checkout."""
import logging
from collections.abc import Sequence
from types import MappingProxyType
from typing import Iterable, Mapping, Union

from ..exceptions import InvalidItemError
from .rule_store import RuleStore, normalize_sku

logger = logging.getLogger(__name__)

CartEntry = Union[str, Sequence]


class Cart:
    """
    Maps SKU → quantity. Quantities only ever grow.

    Items are validated against the RuleStore when added, so every SKU in
    the cart is guaranteed to have a pricing rule.
    """

    def __init__(self, rules: RuleStore):
        self.rules = rules
        self._items: dict[str, int] = {}

    def add(self, sku: str, quantity: int = 1) -> "Cart":
        """Add ``quantity`` (at least 1) units of ``sku``."""
        try:
            quantity = max(int(quantity), 1)
        except (TypeError, ValueError):
            raise InvalidItemError(f"Invalid quantity {quantity!r} for item '{sku}'.", sku=sku) from None

        if not str(sku).strip():
            raise InvalidItemError("Could not parse item code.", sku=sku)

        sku = normalize_sku(sku)
        if not self.rules.has(sku):
            raise InvalidItemError(f"Item with code '{sku}' is unknown.", sku=sku)

        self._items[sku] = self._items.get(sku, 0) + quantity
        logger.debug("Added %d x %s (now %d)", quantity, sku, self._items[sku])
        return self

    def add_multiple(self, items: Iterable[CartEntry]) -> "Cart":
        """
        Add several items at once.

        Each entry is either a bare SKU string or a ``[sku]`` / ``[sku, qty]``
        sequence. Empty sequences are ignored.
        """
        for item in items:
            if isinstance(item, str):
                self.add(item)
            elif not isinstance(item, Sequence):
                raise InvalidItemError(f"Could not parse cart entry {item!r}.")
            elif len(item) > 0:
                self.add(item[0], item[1] if len(item) > 1 else 1)
        return self

    @property
    def items(self) -> Mapping[str, int]:
        """Read-only view of the cart contents."""
        return MappingProxyType(self._items)

    def quantity(self, sku: str) -> int:
        return self._items.get(normalize_sku(sku), 0)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)
