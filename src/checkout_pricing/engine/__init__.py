"""Engine subpackage - rule storage, cart and total calculation."""
from .pricing_engine import PricingEngine, decompose
from .rule_store import RuleStore
from .cart import Cart
from .models import TierTable, CustomPrice, Result, LineItem

__all__ = ['PricingEngine', 'decompose', 'RuleStore', 'Cart', 'TierTable', 'CustomPrice', 'Result', 'LineItem']
