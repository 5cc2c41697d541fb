#!/usr/bin/env python
"""
Price a cart from the command line.

Usage:
    python scripts/price_cart.py RULES.csv A A:3 B:2 C
    python scripts/price_cart.py --rules "A|10;A|20|3;B|5" A:4 B --strict
"""
import argparse
import logging
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from checkout_pricing import Checkout, CheckoutError
from checkout_pricing.config.settings import get_settings
from checkout_pricing.rules.rule_table import read_rule_table


def parse_item(arg: str) -> list:
    """``SKU`` or ``SKU:QTY`` → ``[sku, qty]``."""
    sku, _, qty = arg.partition(':')
    # Quantity is converted (and rejected) by Checkout.add
    return [sku, qty or 1]


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Compute a checkout total")
    parser.add_argument('table', nargs='?', help="CSV rule table (sku, price, quantity)")
    parser.add_argument('items', nargs='*', help="Items as SKU or SKU:QTY")
    parser.add_argument('--rules', help="Rules as a delimited string instead of a table")
    parser.add_argument('--strict', action=argparse.BooleanOptionalAction, default=settings.strict,
                        help="Fail on malformed rules (default from CHECKOUT_STRICT)")
    parser.add_argument('--trace', action='store_true', help="Print the pricing trace")
    parser.add_argument('-v', '--verbose', action='store_true')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    items = list(args.items)
    if args.rules is not None:
        # No table given: the first positional is an item
        if args.table:
            items.insert(0, args.table)
        rules = args.rules
    elif args.table:
        rules = read_rule_table(args.table)
    elif settings.rules_file:
        rules = read_rule_table(settings.rules_file)
    else:
        parser.error("a rule table, --rules or CHECKOUT_RULES_FILE is required")

    try:
        checkout = Checkout(
            rules,
            rule_delimiter=settings.rule_delimiter,
            field_delimiter=settings.field_delimiter,
            strict=args.strict,
        )
        checkout.add_multiple(parse_item(i) for i in items)
        result = checkout.calculate()
    except CheckoutError as e:
        print(f"❌ {type(e).__name__}: {e}")
        sys.exit(1)

    for line in result.lines:
        print(f"{line.sku:<12} x{line.quantity:<6} {line.subtotal:>10}")
        if args.trace:
            print(line.get_trace_text())
    if args.trace:
        print(result.get_trace_text())
    print(f"{'TOTAL':<20} {result.total:>10}")


if __name__ == "__main__":
    main()
