"""Default configuration parameters for the price feed engine."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class InstrumentParams:
    """Static registration entry for one price feed."""
    instrument_id: str                 # Logical key, e.g. BTC_USD_FEED
    address: str                       # Source specific feed address
    bucket: str = "crypto"             # Display bucket (crypto, forex, ...)
    label: str = ""                    # Human readable name


DEFAULT_INSTRUMENTS: tuple[InstrumentParams, ...] = (
    InstrumentParams("BTC_USD_FEED", "0x8000001f", "crypto", "Bitcoin (BTC/USD)"),
    InstrumentParams("ETH_USD_FEED", "0x8000002f", "crypto", "Ethereum (ETH/USD)"),
    InstrumentParams("EUR_USD_FEED", "0x800000fd", "forex", "Euro (EUR/USD)"),
)


@dataclass(frozen=True)
class PollParams:
    """Poll scheduler parameters."""
    interval_seconds: float = 30.0     # Delay between ticks
    fetch_timeout_seconds: float = 10.0  # Per fetch, 0 disables the timeout
    batch_fetch: bool = False          # Use fetch_all_prices instead of per instrument


@dataclass(frozen=True)
class HistoryParams:
    """Rolling history parameters."""
    window_size: int = 10              # Points kept per instrument


@dataclass(frozen=True)
class AlertParams:
    """Alert log parameters."""
    log_size: int = 5                  # Most recent events retained


@dataclass(frozen=True)
class LedgerParams:
    """Simulated portfolio parameters."""
    initial_cash: str = "10000"        # Whole units, converted to fixed point
    trade_log_size: int = 100          # Executed trades retained


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    poll: PollParams
    history: HistoryParams
    alerts: AlertParams
    ledger: LedgerParams
    instruments: tuple[InstrumentParams, ...] = field(default=DEFAULT_INSTRUMENTS)


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        poll=PollParams(),
        history=HistoryParams(),
        alerts=AlertParams(),
        ledger=LedgerParams(),
        instruments=DEFAULT_INSTRUMENTS,
    )
