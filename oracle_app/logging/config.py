"""
Centralized logging configuration for the price feed engine.

This module provides standardized logging configuration using structlog
for all components. Poller, alert and ledger subsystems get bound loggers so
their records can be filtered by the `subsystem` key.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                       structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_poller_logger(name: str) -> FilteringBoundLogger:
    """Logger bound to the poll scheduler subsystem."""
    return get_logger(name).bind(subsystem="poller")


def get_alert_logger(name: str) -> FilteringBoundLogger:
    """Logger bound to the alert subsystem."""
    return get_logger(name).bind(subsystem="alerts")


def get_ledger_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger specifically configured for ledger activity.

    Trades are part of the audit trail, so the binding carries that flag.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for ledger mutations
    """
    return get_logger(name).bind(
        subsystem="ledger",
        audit_trail=True
    )


def log_alert_event(
    logger: FilteringBoundLogger,
    instrument_id: str,
    bound_kind: str,
    price: str,
    bound: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a fired price alert with standardized format.

    Args:
        logger: Structlog logger instance
        instrument_id: Instrument the alert fired for
        bound_kind: "upper" or "lower"
        price: Display form of the triggering price
        bound: Display form of the crossed bound
        context: Additional context data
    """
    bound_logger = logger.bind(
        instrument_id=instrument_id,
        bound_kind=bound_kind,
        price=price,
        bound=bound,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.warning("Price alert fired")


def log_trade(
    logger: FilteringBoundLogger,
    side: str,
    instrument_id: str,
    quantity: str,
    price: str,
    accepted: bool,
    reason: Optional[str] = None
) -> None:
    """
    Log a trade decision with standardized format.

    Args:
        logger: Structlog logger instance
        side: "buy" or "sell"
        instrument_id: Traded instrument
        quantity: Display form of the traded quantity
        price: Display form of the quote used
        accepted: Whether the trade was applied
        reason: Rejection reason when not accepted
    """
    bound_logger = logger.bind(
        side=side,
        instrument_id=instrument_id,
        quantity=quantity,
        price=price,
        trade_result="ACCEPTED" if accepted else "REJECTED",
    )

    if accepted:
        bound_logger.info("Trade executed")
    else:
        bound_logger.warning("Trade rejected", reason=reason)
