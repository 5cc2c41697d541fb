"""
Checkout exceptions.

Every error raised by the checkout is a CheckoutError, so callers embedding
the checkout in a larger order flow can catch the whole family at once.
"""
from typing import Optional


class CheckoutError(Exception):
    """Base class for all checkout errors."""


class InvalidConfigError(CheckoutError):
    """The checkout was configured with unusable settings (e.g. empty delimiters)."""


class InvalidRuleError(CheckoutError):
    """A pricing rule, rule record or custom callback is malformed."""

    def __init__(self, message: str, rule: Optional[str] = None):
        super().__init__(message)
        self.rule = rule


class InvalidItemError(CheckoutError):
    """An item code is blank or has no pricing rule."""

    def __init__(self, message: str, sku: Optional[str] = None):
        super().__init__(message)
        self.sku = sku


class NoRulesConfiguredError(InvalidConfigError):
    """A total was requested but no pricing rules are registered."""


class IncompleteRuleCoverageError(InvalidConfigError):
    """The tier table for a SKU cannot price the whole requested quantity."""

    def __init__(self, sku: str, remaining: int):
        super().__init__(
            f"Cannot fully calculate total for item {sku} "
            f"({remaining} unit(s) left unpriced), please review checkout rules."
        )
        self.sku = sku
        self.remaining = remaining
