"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import (
    AlertParams,
    DefaultConfig,
    HistoryParams,
    InstrumentParams,
    LedgerParams,
    PollParams,
    get_default_config,
)


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_settings(self) -> dict[str, Any]:
        """Load engine setting overrides from settings.yaml."""
        return self._read_yaml("settings.yaml")

    def load_instrument_table(self) -> Optional[list[dict[str, Any]]]:
        """
        Load the instrument table from instruments.yaml.

        Returns:
            List of instrument entries, or None when the file is absent and
            the built-in table applies
        """
        document = self._read_yaml("instruments.yaml")
        if not document:
            return None

        entries = document.get("instruments", [])
        if not isinstance(entries, list):
            raise ConfigurationError(
                "instruments.yaml: `instruments` must be a list",
                context={"file": str(self.config_dir / "instruments.yaml")}
            )
        return list(entries)

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides passed by the caller (highest priority)
        2. settings.yaml / instruments.yaml in the config directory
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_settings())

        instruments = self.load_instrument_table()
        if instruments is not None:
            config["instruments"] = instruments

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    @staticmethod
    def build_config(merged: dict[str, Any]) -> DefaultConfig:
        """Turn a merged (and validated) config dict back into dataclasses."""
        return DefaultConfig(
            poll=PollParams(**merged.get("poll", {})),
            history=HistoryParams(**merged.get("history", {})),
            alerts=AlertParams(**merged.get("alerts", {})),
            ledger=LedgerParams(**merged.get("ledger", {})),
            instruments=tuple(
                InstrumentParams(**entry) for entry in merged.get("instruments", [])
            ),
        )

    def _read_yaml(self, filename: str) -> dict[str, Any]:
        path = self.config_dir / filename

        if not path.exists():
            return {}

        with open(path) as f:
            try:
                document = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"{filename} is not valid YAML: {e}", context={"file": str(path)}
                ) from e

        if document is None:
            return {}
        if not isinstance(document, dict):
            raise ConfigurationError(
                f"{filename} must contain a mapping, got {type(document).__name__}",
                context={"file": str(path)}
            )
        return document

    def _dataclass_to_dict(self, obj: Any) -> Any:
        """Convert nested dataclasses (and tuples of them) to plain data."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                result[field_name] = self._dataclass_to_dict(getattr(obj, field_name))
            return result
        if isinstance(obj, tuple):
            return [self._dataclass_to_dict(item) for item in obj]
        return obj

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
