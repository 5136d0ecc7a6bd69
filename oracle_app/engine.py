"""
Main price feed engine coordinator.

Builds every component from configuration and exposes the surface the
presentation layer consumes: read-only snapshots plus the alert and trade
entry points.

Price Source → PollScheduler → HistoryStore / AlertEngine → read models
                                  ↘ last snapshot → PortfolioLedger
"""

from pathlib import Path
from typing import Any, Callable, Optional, Union

import structlog

from .alerts.engine import AlertCallback, AlertEngine
from .config.defaults import DefaultConfig, get_default_config
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .data.history import HistoryStore
from .data.models import AlertEvent, AlertThreshold, PricePoint, Trade
from .data.registry import FeedRegistry
from .errors import ConfigurationError
from .feeds.base import PriceSource
from .ledger.portfolio import PortfolioLedger
from .metrics.stats import StatsEngine
from .scheduler.poller import PollScheduler, TickListener
from .utils.fixed_point import format_display_price, format_fixed, to_fixed
from .utils.time import format_market_time, get_market_time, time_elapsed_seconds

logger = structlog.get_logger(__name__)


class MarketDataEngine:
    """
    Composition root for the price feed core.

    One instance owns one registry, history, alert engine, scheduler and
    ledger. Everything runs on the caller's asyncio event loop.
    """

    def __init__(
        self,
        source: PriceSource,
        config: Optional[DefaultConfig] = None,
        clock: Optional[Callable] = None,
    ) -> None:
        """Initialize the engine from an already validated configuration."""
        self.config = config or get_default_config()
        self._clock = clock or get_market_time

        self.registry = FeedRegistry(self.config.instruments)
        self.history = HistoryStore(self.registry, window_size=self.config.history.window_size)
        self.stats = StatsEngine(self.history)
        self.alerts = AlertEngine(self.registry, log_size=self.config.alerts.log_size)
        self.scheduler = PollScheduler(
            registry=self.registry,
            source=source,
            history=self.history,
            alerts=self.alerts,
            interval_seconds=self.config.poll.interval_seconds,
            fetch_timeout_seconds=self.config.poll.fetch_timeout_seconds,
            batch_fetch=self.config.poll.batch_fetch,
            clock=clock,
        )
        self.ledger = PortfolioLedger(
            prices=self.scheduler,
            initial_cash=to_fixed(self.config.ledger.initial_cash),
            trade_log_size=self.config.ledger.trade_log_size,
            clock=clock,
        )

        logger.info(
            "Market data engine initialized",
            instruments=self.registry.ids(),
            interval_seconds=self.config.poll.interval_seconds,
            window_size=self.config.history.window_size
        )

    @classmethod
    def from_config_dir(
        cls,
        source: PriceSource,
        config_dir: Optional[Union[str, Path]] = None,
        overrides: Optional[dict[str, Any]] = None,
        clock: Optional[Callable] = None,
    ) -> "MarketDataEngine":
        """
        Load, merge and validate configuration, then build the engine.

        Raises:
            ConfigurationError: If the merged configuration is invalid
        """
        loader = ConfigLoader.create(Path(config_dir) if config_dir is not None else None)
        merged = loader.merge_config(overrides)

        errors = ConfigValidator.validate_config(merged)
        if errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in errors]
            logger.error("Configuration validation failed", errors=error_msgs)
            raise ConfigurationError("Invalid engine configuration", errors=errors)

        return cls(source, loader.build_config(merged), clock=clock)

    # Lifecycle

    async def start(self) -> None:
        await self.scheduler.start()

    async def stop(self) -> None:
        await self.scheduler.stop()

    async def __aenter__(self) -> "MarketDataEngine":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    # Read-only accessors

    def snapshot(self, instrument_id: str) -> list[PricePoint]:
        return self.history.snapshot(instrument_id)

    def average(self, instrument_id: str) -> int:
        return self.stats.average(instrument_id)

    def volatility(self, instrument_id: str) -> int:
        return self.stats.volatility(instrument_id)

    def recent_alerts(self) -> list[AlertEvent]:
        return self.alerts.recent_alerts()

    def valuation(self) -> int:
        return self.ledger.valuation()

    # Mutating entry points

    def set_threshold(
        self,
        instrument_id: str,
        upper_bound: Optional[int] = None,
        lower_bound: Optional[int] = None
    ) -> Optional[AlertThreshold]:
        return self.alerts.set_threshold(instrument_id, upper_bound, lower_bound)

    def buy(self, instrument_id: str, quantity: int) -> Trade:
        return self.ledger.buy(instrument_id, quantity)

    def sell(self, instrument_id: str, quantity: int) -> Trade:
        return self.ledger.sell(instrument_id, quantity)

    # Observers

    def on_tick(self, listener: TickListener) -> None:
        """Subscribe to applied poll results."""
        self.scheduler.add_listener(listener)

    def on_alert(self, callback: AlertCallback) -> None:
        """Subscribe to fired alerts."""
        self.alerts.register_callback(callback)

    def dashboard(self) -> dict[str, Any]:
        """
        Plain-data read model of the whole engine state.

        Prices are rendered with display precision; raw fixed-point values
        are included alongside for consumers that need exact numbers.
        """
        now = self._clock()
        instruments = []
        for instrument in self.registry.instruments():
            instrument_id = instrument.instrument_id
            last = self.scheduler.last_snapshot(instrument_id)
            average = self.stats.average(instrument_id)
            volatility = self.stats.volatility(instrument_id)

            instruments.append({
                "instrument_id": instrument_id,
                "label": instrument.label,
                "bucket": instrument.bucket,
                "price": last.value if last else None,
                "display_price": format_display_price(last.value if last else None),
                "last_update": format_market_time(last.observed_at) if last else None,
                "age_seconds": time_elapsed_seconds(last.observed_at, now) if last else None,
                "history": [
                    {
                        "value": point.display_value,
                        "observed_at": format_market_time(point.observed_at),
                    }
                    for point in self.history.snapshot(instrument_id)
                ],
                "average": format_display_price(average),
                "volatility": format_display_price(volatility),
                "holding": format_fixed(self.ledger.holding(instrument_id)),
                "holding_value": format_display_price(self.ledger.holding_value(instrument_id)),
            })

        portfolio = self.ledger.portfolio()
        return {
            "instruments": instruments,
            "alerts": [
                {
                    "instrument_id": event.instrument_id,
                    "bound_kind": event.bound_kind.value,
                    "price": format_display_price(event.triggering_price),
                    "fired_at": format_market_time(event.fired_at),
                }
                for event in self.alerts.recent_alerts()
            ],
            "portfolio": {
                "cash": format_display_price(portfolio.cash),
                "valuation": format_display_price(self.ledger.valuation()),
                "valuation_raw": self.ledger.valuation(),
            },
            "running": self.scheduler.is_running,
        }
