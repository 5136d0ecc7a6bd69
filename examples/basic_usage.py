#!/usr/bin/env python3
"""
Basic Usage Example - Oracle Price Feed Engine

This script drives the engine with a scripted price source. It shows how to:
- Build the engine from configuration
- Set alert thresholds and subscribe to alerts
- Run poll ticks and read history, statistics and alerts
- Trade against the simulated portfolio

Run: python examples/basic_usage.py
"""

import asyncio

from oracle_app.engine import MarketDataEngine
from oracle_app.errors import TradeRejected
from oracle_app.feeds.memory import ScriptedPriceSource
from oracle_app.logging.config import configure_logging
from oracle_app.utils.fixed_point import format_display_price, to_fixed

BTC = "BTC_USD_FEED"
ETH = "ETH_USD_FEED"
EUR = "EUR_USD_FEED"

# One dict of whole-unit prices per tick
PRICE_SEQUENCE = [
    {BTC: "20000", ETH: "1500", EUR: "1.0812"},
    {BTC: "20150", ETH: "1480", EUR: "1.0809"},
    {BTC: "20420", ETH: "1455", EUR: "1.0821"},
    {BTC: "20990", ETH: "1390", EUR: "1.0830"},
    {BTC: "21310", ETH: "1405", EUR: "1.0818"},
]


def print_dashboard(engine: MarketDataEngine) -> None:
    """Print the engine read model."""
    dashboard = engine.dashboard()
    for entry in dashboard["instruments"]:
        print(f"  {entry['label']:<22} price {entry['display_price']:>8}  "
              f"avg {entry['average']:>8}  vol {entry['volatility']:>8}  "
              f"points {len(entry['history'])}")
    portfolio = dashboard["portfolio"]
    print(f"  Cash {portfolio['cash']}  Valuation {portfolio['valuation']}")


async def run_demo() -> None:
    source = ScriptedPriceSource()
    engine = MarketDataEngine.from_config_dir(source)

    engine.set_threshold(BTC, upper_bound=to_fixed("20900"))
    engine.set_threshold(ETH, upper_bound=to_fixed("1600"), lower_bound=to_fixed("1400"))
    engine.on_alert(lambda event: print(
        f"  ALERT {event.instrument_id} crossed {event.bound_kind.value} bound "
        f"at {format_display_price(event.triggering_price)}"
    ))

    for i, prices in enumerate(PRICE_SEQUENCE, 1):
        for instrument_id, value in prices.items():
            source.set_price(instrument_id, to_fixed(value))

        result = await engine.scheduler.tick()
        print(f"Tick {i}: updated {len(result.updated)}, failed {len(result.failures)}")

        if i == 2:
            trade = engine.buy(BTC, to_fixed("0.2"))
            print(f"  Bought 0.2 BTC for {format_display_price(trade.notional)}")
        if i == 4:
            try:
                engine.sell(ETH, to_fixed("1"))
            except TradeRejected as e:
                print(f"  Sell rejected: {e}")

        print_dashboard(engine)
        print()

    print(f"Recent alerts: {len(engine.recent_alerts())}")


def main() -> None:
    """Main demonstration function."""
    configure_logging(level="WARNING")
    asyncio.run(run_demo())


if __name__ == "__main__":
    main()
