"""
Checkout Pricing Package

Computes cart totals from per-SKU tiered pricing rules, custom per-SKU price
functions and cart-wide total modifiers.
"""
from .checkout import Checkout
from .exceptions import (
    CheckoutError,
    IncompleteRuleCoverageError,
    InvalidConfigError,
    InvalidItemError,
    InvalidRuleError,
    NoRulesConfiguredError,
)

__version__ = "1.0.0"

__all__ = [
    'Checkout',
    'CheckoutError',
    'IncompleteRuleCoverageError',
    'InvalidConfigError',
    'InvalidItemError',
    'InvalidRuleError',
    'NoRulesConfiguredError',
]
