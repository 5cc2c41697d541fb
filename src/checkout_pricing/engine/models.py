"""
Data models for the checkout engine.

Uses dataclasses for structured, type-safe data representation.
"""
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Union


PriceFunction = Callable[[int], int]
TotalModifier = Callable[[int, Mapping[str, int]], int]


@dataclass
class TierTable:
    """Quantity threshold → price table for one SKU."""
    tiers: dict[int, int] = field(default_factory=dict)

    def descending(self) -> list[tuple[int, int]]:
        """Thresholds ordered from the largest quantity down."""
        return sorted(self.tiers.items(), key=lambda item: item[0], reverse=True)


@dataclass
class CustomPrice:
    """A custom pricing function replacing the tier table of a SKU."""
    fn: PriceFunction

    @property
    def name(self) -> str:
        return getattr(self.fn, "__name__", repr(self.fn))


PriceRule = Union[TierTable, CustomPrice]


@dataclass
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class AppliedTier:
    """A tier threshold consumed during greedy decomposition."""
    threshold: int
    price: int
    clusters: int

    @property
    def units(self) -> int:
        return self.threshold * self.clusters

    @property
    def amount(self) -> int:
        return self.price * self.clusters


@dataclass
class LineItem:
    """A single SKU line in a checkout result."""
    sku: str
    quantity: int
    subtotal: int = 0
    source: str = ""  # "tier" or "custom"
    tiers_applied: list[AppliedTier] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace for this line item."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)


@dataclass
class Result:
    """Complete result of a checkout calculation."""
    subtotal: int
    total: int
    lines: list[LineItem] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the result-level trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable result trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Plain dict form, as returned by the HTTP API."""
        return {
            "subtotal": self.subtotal,
            "total": self.total,
            "lines": [
                {
                    "sku": line.sku,
                    "quantity": line.quantity,
                    "subtotal": line.subtotal,
                    "source": line.source,
                    "tiers": [
                        {"quantity": t.threshold, "price": t.price, "clusters": t.clusters}
                        for t in line.tiers_applied
                    ],
                }
                for line in self.lines
            ],
        }
