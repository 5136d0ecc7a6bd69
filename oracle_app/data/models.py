"""
Canonical data models for the price feed engine.

All models are immutable. Prices, bounds, quantities and cash amounts are
fixed-point ints scaled by 10**18 (see utils.fixed_point).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from ..utils.fixed_point import format_display_price


class BoundKind(str, Enum):
    """Which alert bound a price crossed."""
    UPPER = "upper"
    LOWER = "lower"


class TradeSide(str, Enum):
    """Direction of a ledger trade."""
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class Instrument:
    """A quotable asset pair as registered at startup."""
    instrument_id: str
    label: str
    bucket: str


@dataclass(frozen=True)
class FeedDescriptor:
    """Registry entry binding an instrument to its source address."""
    instrument: Instrument
    address: str

    @property
    def instrument_id(self) -> str:
        return self.instrument.instrument_id


@dataclass(frozen=True)
class PricePoint:
    """One observed price for an instrument."""
    instrument_id: str
    value: int                 # Fixed point, 18 decimals
    observed_at: datetime      # UTC observation time

    @property
    def display_value(self) -> str:
        """Formatted price for presentation."""
        return format_display_price(self.value)


@dataclass(frozen=True)
class AlertThreshold:
    """Upper/lower alert bounds for one instrument; either may be absent."""
    instrument_id: str
    upper_bound: Optional[int] = None
    lower_bound: Optional[int] = None

    def breached_by(self, value: int) -> Optional[BoundKind]:
        """Return the crossed bound, upper taking priority, or None."""
        if self.upper_bound is not None and value >= self.upper_bound:
            return BoundKind.UPPER
        if self.lower_bound is not None and value <= self.lower_bound:
            return BoundKind.LOWER
        return None

    def bound_for(self, kind: BoundKind) -> Optional[int]:
        return self.upper_bound if kind is BoundKind.UPPER else self.lower_bound


@dataclass(frozen=True)
class AlertEvent:
    """A fired price alert."""
    instrument_id: str
    triggering_price: int
    bound_kind: BoundKind
    bound: int
    fired_at: datetime


@dataclass(frozen=True)
class Trade:
    """An executed ledger trade."""
    side: TradeSide
    instrument_id: str
    quantity: int
    price: int
    notional: int              # quantity x price
    executed_at: datetime


@dataclass(frozen=True)
class Portfolio:
    """Cash plus per-instrument holdings. Replaced wholesale on every trade."""
    cash: int
    holdings: Mapping[str, int] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        """Freeze the holdings mapping."""
        object.__setattr__(self, "holdings", MappingProxyType(dict(self.holdings)))

    def holding(self, instrument_id: str) -> int:
        return self.holdings.get(instrument_id, 0)

    def with_trade(self, side: TradeSide, instrument_id: str,
                   quantity: int, notional: int) -> "Portfolio":
        """Create the portfolio that results from applying a validated trade."""
        holdings = dict(self.holdings)
        if side is TradeSide.BUY:
            cash = self.cash - notional
            holdings[instrument_id] = self.holding(instrument_id) + quantity
        else:
            cash = self.cash + notional
            holdings[instrument_id] = self.holding(instrument_id) - quantity

        return Portfolio(cash=cash, holdings=holdings)


@dataclass(frozen=True)
class TickResult:
    """Outcome of one poll cycle."""
    tick: int
    started_at: datetime
    updated: tuple[str, ...] = ()                       # Instruments with a new point
    skipped: tuple[str, ...] = ()                       # Fetched but non-positive
    failures: Mapping[str, str] = field(default_factory=dict, hash=False)
    alerts: tuple[AlertEvent, ...] = ()
    discarded: bool = False                             # Results dropped by stop()

    @property
    def success(self) -> bool:
        """True when every instrument fetched cleanly."""
        return not self.failures and not self.discarded
