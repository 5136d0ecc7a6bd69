"""
Integration tests for the complete price feed pipeline.

Scripted prices flow through the scheduler into history, statistics, alerts
and the portfolio ledger, exactly as a live source would drive them.
"""

import asyncio

import pytest

from oracle_app.data.models import BoundKind, TradeSide
from oracle_app.engine import MarketDataEngine
from oracle_app.errors import InsufficientHoldings, NoPriceAvailable
from oracle_app.feeds.memory import ScriptedPriceSource
from oracle_app.utils.fixed_point import to_fixed

BTC = "BTC_USD_FEED"
ETH = "ETH_USD_FEED"
EUR = "EUR_USD_FEED"


def run_ticks(engine, source, script):
    """Apply one tick per step, setting scripted prices before each."""
    async def run():
        results = []
        for step in script:
            for instrument_id, value in step.items():
                if value is None:
                    source.fail(instrument_id)
                else:
                    source.set_price(instrument_id, to_fixed(value))
            results.append(await engine.scheduler.tick())
        return results

    return asyncio.run(run())


class TestFullPipeline:
    """Test the full flow from fetch to read models."""

    @pytest.fixture
    def engine(self, source, clock):
        return MarketDataEngine(source, clock=clock)

    def test_history_window_rolls_over(self, engine, source):
        script = [{BTC: str(20000 + i * 100)} for i in range(12)]

        run_ticks(engine, source, script)

        values = [point.value for point in engine.snapshot(BTC)]
        assert len(values) == 10
        assert values[0] == to_fixed("20200")
        assert values[-1] == to_fixed("21100")
        times = [point.observed_at for point in engine.snapshot(BTC)]
        assert times == sorted(times)
        assert engine.average(BTC) == to_fixed("20650")

    def test_volatility_of_known_series(self, engine, source):
        run_ticks(engine, source, [{ETH: "1"}, {ETH: "2"}, {ETH: "3"}])

        assert engine.average(ETH) == to_fixed("2")
        assert engine.volatility(ETH) == to_fixed("1")

    def test_alert_log_keeps_last_five(self, engine, source):
        engine.set_threshold(BTC, upper_bound=to_fixed("20000"))
        script = [{BTC: str(20000 + i)} for i in range(7)]

        run_ticks(engine, source, script)

        alerts = engine.recent_alerts()
        assert len(alerts) == 5
        assert [event.triggering_price for event in alerts] == [
            to_fixed(str(20000 + i)) for i in range(2, 7)
        ]
        assert all(event.bound_kind is BoundKind.UPPER for event in alerts)

    def test_outage_then_recovery(self, engine, source):
        results = run_ticks(engine, source, [{}, {ETH: None}, {ETH: "1600"}])

        assert results[1].failures == {ETH: "feed unavailable"}
        assert set(results[1].updated) == {BTC, EUR}
        assert [point.value for point in engine.snapshot(ETH)] == [
            to_fixed("1500"), to_fixed("1600")
        ]
        assert len(engine.snapshot(BTC)) == 3

    def test_trading_follows_latest_tick(self, engine, source):
        run_ticks(engine, source, [{}])
        engine.buy(BTC, to_fixed("0.1"))

        run_ticks(engine, source, [{BTC: "30000"}])

        assert engine.valuation() == to_fixed("11000")
        with pytest.raises(InsufficientHoldings):
            engine.sell(BTC, to_fixed("0.2"))
        trade = engine.sell(BTC, to_fixed("0.1"))

        assert trade.side is TradeSide.SELL
        assert trade.notional == to_fixed("3000")
        assert engine.ledger.cash == to_fixed("11000")
        assert engine.ledger.trades()[0].price == to_fixed("20000")

    def test_no_trading_before_first_price(self, clock):
        source = ScriptedPriceSource()
        engine = MarketDataEngine(source, clock=clock)

        results = run_ticks(engine, source, [{}])

        assert len(results[0].failures) == 3
        with pytest.raises(NoPriceAvailable):
            engine.buy(BTC, to_fixed("0.1"))
        assert engine.valuation() == to_fixed("10000")

    def test_running_engine_polls(self, source):
        engine = MarketDataEngine.from_config_dir(
            source, overrides={"poll": {"interval_seconds": 0.01}}
        )

        async def run():
            done = asyncio.Event()

            def listener(result):
                if result.tick >= 2:
                    done.set()

            engine.on_tick(listener)
            async with engine:
                await asyncio.wait_for(done.wait(), timeout=2.0)

        asyncio.run(run())

        assert len(engine.snapshot(BTC)) >= 2
        assert not engine.scheduler.is_running
