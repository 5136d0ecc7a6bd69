"""
Portfolio ledger.

Holds cash and per-instrument holdings and applies buy/sell trades priced
from the poll scheduler's last snapshot. Trades never trigger a fetch.
Every trade validates against the current portfolio and then swaps in a new
immutable Portfolio in one step, so a rejected trade leaves nothing behind.
"""

from collections import deque
from datetime import datetime
from typing import Callable, Optional, Protocol

from ..data.models import Portfolio, PricePoint, Trade, TradeSide
from ..errors import (
    InsufficientFunds,
    InsufficientHoldings,
    InvalidTradeQuantity,
    NoPriceAvailable,
    TradeRejected,
)
from ..logging.config import get_ledger_logger, log_trade
from ..utils.fixed_point import fixed_mul, fixed_mul_ceil, format_fixed
from ..utils.time import get_market_time

logger = get_ledger_logger(__name__)


class PriceSnapshots(Protocol):
    """Anything that can report the last fetched price of an instrument."""

    def last_snapshot(self, instrument_id: str) -> Optional[PricePoint]:
        ...


class PortfolioLedger:
    """State machine over a single simulated Portfolio."""

    def __init__(
        self,
        prices: PriceSnapshots,
        initial_cash: int,
        trade_log_size: int = 100,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if initial_cash < 0:
            raise ValueError("initial_cash must be non-negative")
        self._prices = prices
        self._initial_cash = initial_cash
        self._clock = clock or get_market_time
        self._portfolio = Portfolio(cash=initial_cash)
        self._trades: deque = deque(maxlen=trade_log_size)  # deque[Trade]

    def portfolio(self) -> Portfolio:
        """Current portfolio snapshot."""
        return self._portfolio

    @property
    def cash(self) -> int:
        return self._portfolio.cash

    def holding(self, instrument_id: str) -> int:
        return self._portfolio.holding(instrument_id)

    def quote(self, instrument_id: str) -> int:
        """
        Latest fetched price for an instrument.

        Raises:
            UnknownInstrument: If the identifier is not registered
            NoPriceAvailable: If no fetch has succeeded for it yet
        """
        point = self._prices.last_snapshot(instrument_id)
        if point is None:
            raise NoPriceAvailable(instrument_id)
        return point.value

    def buy(self, instrument_id: str, quantity: int) -> Trade:
        """Debit cash and credit the holding at the current quote."""
        return self._execute(TradeSide.BUY, instrument_id, quantity)

    def sell(self, instrument_id: str, quantity: int) -> Trade:
        """Debit the holding and credit cash at the current quote."""
        return self._execute(TradeSide.SELL, instrument_id, quantity)

    def holding_value(self, instrument_id: str) -> int:
        """Quantity x quote, 0 when the holding is empty or unpriced."""
        quantity = self.holding(instrument_id)
        if quantity == 0:
            return 0
        point = self._prices.last_snapshot(instrument_id)
        if point is None:
            return 0
        return fixed_mul(quantity, point.value)

    def valuation(self) -> int:
        """Cash plus the best-effort value of every holding."""
        portfolio = self._portfolio
        return portfolio.cash + sum(
            self.holding_value(instrument_id) for instrument_id in portfolio.holdings
        )

    def trades(self) -> list[Trade]:
        """Executed trades, oldest first."""
        return list(self._trades)

    def reset(self) -> None:
        """Return to the starting cash with no holdings."""
        self._portfolio = Portfolio(cash=self._initial_cash)
        self._trades.clear()
        logger.info("Portfolio reset", cash=format_fixed(self._initial_cash))

    def _execute(self, side: TradeSide, instrument_id: str, quantity: int) -> Trade:
        try:
            trade = self._apply(side, instrument_id, quantity)
        except (TradeRejected, InvalidTradeQuantity) as e:
            log_trade(logger, side.value, instrument_id, self._display(quantity),
                      price="n/a", accepted=False, reason=str(e))
            raise

        log_trade(logger, side.value, instrument_id, format_fixed(trade.quantity),
                  price=format_fixed(trade.price), accepted=True)
        return trade

    def _apply(self, side: TradeSide, instrument_id: str, quantity: int) -> Trade:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidTradeQuantity(quantity, context={"instrument_id": instrument_id})

        portfolio = self._portfolio
        # Resolves the identifier before any balance check
        point = self._prices.last_snapshot(instrument_id)

        if side is TradeSide.SELL:
            held = portfolio.holding(instrument_id)
            if quantity > held:
                raise InsufficientHoldings(instrument_id, requested=quantity, held=held)

        if point is None:
            raise NoPriceAvailable(instrument_id)
        price = point.value
        # Buys pay any sub-unit remainder, sells forfeit it
        if side is TradeSide.BUY:
            notional = fixed_mul_ceil(quantity, price)
        else:
            notional = fixed_mul(quantity, price)

        if side is TradeSide.BUY and notional > portfolio.cash:
            raise InsufficientFunds(instrument_id, required=notional, available=portfolio.cash)

        self._portfolio = portfolio.with_trade(side, instrument_id, quantity, notional)

        trade = Trade(
            side=side,
            instrument_id=instrument_id,
            quantity=quantity,
            price=price,
            notional=notional,
            executed_at=self._clock(),
        )
        self._trades.append(trade)
        return trade

    @staticmethod
    def _display(quantity: int) -> str:
        if isinstance(quantity, int) and not isinstance(quantity, bool):
            return format_fixed(quantity)
        return repr(quantity)
