"""
Shape checks for user supplied pricing callbacks.

Custom SKU rules must look like ``(int) -> int`` and cart-wide total
modifiers like ``(int, Mapping[str, int]) -> int``. Arity is always checked;
annotations are checked when present. Return values are checked each time a
callback runs, since unannotated callables (lambdas) cannot be verified
up-front.
"""
import inspect
from collections.abc import Mapping
from typing import Any, Callable, get_origin

from ..exceptions import InvalidRuleError

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
_EMPTY = inspect.Parameter.empty


def _signature(fn: Callable, kind: str) -> inspect.Signature:
    if not callable(fn):
        raise InvalidRuleError(f"{kind} callbacks must be callable, got {type(fn).__name__}")
    try:
        return inspect.signature(fn, eval_str=True)
    except (TypeError, ValueError, NameError) as e:
        raise InvalidRuleError(f"Cannot inspect {kind} callback: {e}") from e


def _is_int(annotation: Any) -> bool:
    return annotation is _EMPTY or annotation is int


def _is_mapping(annotation: Any) -> bool:
    if annotation is _EMPTY:
        return True
    origin = get_origin(annotation) or annotation
    return isinstance(origin, type) and issubclass(origin, Mapping)


def _positional_params(sig: inspect.Signature, count: int, kind: str, usage: str) -> list[inspect.Parameter]:
    params = list(sig.parameters.values())
    if len(params) != count or any(p.kind not in _POSITIONAL for p in params):
        raise InvalidRuleError(f"{kind} callbacks must accept {usage}")
    return params


def check_price_function(fn: Callable) -> Callable[[int], int]:
    """Verify ``fn`` can serve as a per-SKU price rule ``(quantity: int) -> int``."""
    sig = _signature(fn, "Price rule")
    (qty,) = _positional_params(sig, 1, "Price rule", "a single integer parameter")
    if not _is_int(qty.annotation):
        raise InvalidRuleError("Price rule callbacks must accept a single integer parameter")
    if not _is_int(sig.return_annotation):
        raise InvalidRuleError("Price rule callbacks must return an integer value")
    return fn


def check_total_modifier(fn: Callable) -> Callable:
    """Verify ``fn`` can serve as a cart-wide modifier ``(total: int, items: Mapping) -> int``."""
    sig = _signature(fn, "Checkout total")
    usage = "two parameters: int current_total, Mapping items"
    total, items = _positional_params(sig, 2, "Checkout total", usage)
    if not _is_int(total.annotation) or not _is_mapping(items.annotation):
        raise InvalidRuleError(f"Checkout total callbacks must accept {usage}")
    if not _is_int(sig.return_annotation):
        raise InvalidRuleError("Checkout total callbacks must return the updated total as an integer value")
    return fn


def ensure_int(value: Any, source: str) -> int:
    """Reject non-integer callback results (bool included)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRuleError(
            f"{source} returned {type(value).__name__} ({value!r}), expected an integer"
        )
    return value
