"""Configuration validation utilities."""

from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation
from typing import Any

from .defaults import AlertParams, HistoryParams, InstrumentParams, LedgerParams, PollParams

VALID_BUCKETS = ("crypto", "forex", "commodity", "equity")

_SECTIONS = {
    "poll": PollParams,
    "history": HistoryParams,
    "alerts": AlertParams,
    "ledger": LedgerParams,
}


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_poll_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate poll scheduler parameters."""
        errors = []

        if "interval_seconds" in params:
            value = params["interval_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="interval_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "fetch_timeout_seconds" in params:
            value = params["fetch_timeout_seconds"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="fetch_timeout_seconds",
                    message="Must be a non-negative number",
                    value=value
                ))

        if "batch_fetch" in params:
            value = params["batch_fetch"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="batch_fetch",
                    message="Must be a boolean",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_history_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate rolling history parameters."""
        errors = []

        if "window_size" in params and not _is_positive_int(params["window_size"]):
            errors.append(ValidationError(
                field="window_size",
                message="Must be a positive integer",
                value=params["window_size"]
            ))

        return errors

    @staticmethod
    def validate_alert_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate alert log parameters."""
        errors = []

        if "log_size" in params and not _is_positive_int(params["log_size"]):
            errors.append(ValidationError(
                field="log_size",
                message="Must be a positive integer",
                value=params["log_size"]
            ))

        return errors

    @staticmethod
    def validate_ledger_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate simulated portfolio parameters."""
        errors = []

        if "initial_cash" in params:
            value = params["initial_cash"]
            try:
                amount = Decimal(str(value))
                valid = not isinstance(value, bool) and amount.is_finite() and amount >= 0
            except InvalidOperation:
                valid = False
            if not valid:
                errors.append(ValidationError(
                    field="initial_cash",
                    message="Must be a non-negative decimal amount",
                    value=value
                ))

        if "trade_log_size" in params and not _is_positive_int(params["trade_log_size"]):
            errors.append(ValidationError(
                field="trade_log_size",
                message="Must be a positive integer",
                value=params["trade_log_size"]
            ))

        return errors

    @staticmethod
    def validate_instruments(entries: list[Any]) -> list[ValidationError]:
        """Validate the static instrument table."""
        errors = []
        known = {f.name for f in fields(InstrumentParams)}
        seen: set[str] = set()

        if not entries:
            errors.append(ValidationError(
                field="instruments",
                message="At least one instrument must be configured",
                value=entries
            ))
            return errors

        for index, entry in enumerate(entries):
            prefix = f"instruments[{index}]"

            if not isinstance(entry, dict):
                errors.append(ValidationError(
                    field=prefix,
                    message="Must be a mapping",
                    value=entry
                ))
                continue

            unknown = sorted(set(entry) - known)
            if unknown:
                errors.append(ValidationError(
                    field=prefix,
                    message=f"Unknown keys: {', '.join(unknown)}",
                    value=entry
                ))

            instrument_id = entry.get("instrument_id")
            if not isinstance(instrument_id, str) or not instrument_id:
                errors.append(ValidationError(
                    field=f"{prefix}.instrument_id",
                    message="Must be a non-empty string",
                    value=instrument_id
                ))
            elif instrument_id in seen:
                errors.append(ValidationError(
                    field=f"{prefix}.instrument_id",
                    message="Duplicate instrument identifier",
                    value=instrument_id
                ))
            else:
                seen.add(instrument_id)

            address = entry.get("address")
            if not isinstance(address, str) or not address:
                errors.append(ValidationError(
                    field=f"{prefix}.address",
                    message="Must be a non-empty string",
                    value=address
                ))

            bucket = entry.get("bucket", "crypto")
            if bucket not in VALID_BUCKETS:
                errors.append(ValidationError(
                    field=f"{prefix}.bucket",
                    message=f"Must be one of: {', '.join(VALID_BUCKETS)}",
                    value=bucket
                ))

        return errors

    @classmethod
    def validate_config(cls, config: dict[str, Any]) -> list[ValidationError]:
        """Validate a complete merged configuration dict."""
        errors = []

        for section, params_cls in _SECTIONS.items():
            params = config.get(section, {})
            if not isinstance(params, dict):
                errors.append(ValidationError(
                    field=section,
                    message="Must be a mapping",
                    value=params
                ))
                continue

            known = {f.name for f in fields(params_cls)}
            for key in sorted(set(params) - known):
                errors.append(ValidationError(
                    field=f"{section}.{key}",
                    message="Unknown parameter",
                    value=params[key]
                ))

        validators = {
            "poll": cls.validate_poll_params,
            "history": cls.validate_history_params,
            "alerts": cls.validate_alert_params,
            "ledger": cls.validate_ledger_params,
        }
        for section, validator in validators.items():
            params = config.get(section, {})
            if isinstance(params, dict):
                errors.extend(validator(params))

        errors.extend(cls.validate_instruments(config.get("instruments", [])))

        return errors
