"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass, fields, is_dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .defaults import (
    BridgeParams,
    ComplexityParams,
    DefaultConfig,
    GeneratorParams,
    OrchestratorParams,
    SequenceParams,
    get_default_config,
)

CONFIG_FILENAME = "chartpilot.yaml"

_SECTION_TYPES = {
    "bridge": BridgeParams,
    "sequence": SequenceParams,
    "complexity": ComplexityParams,
    "generator": GeneratorParams,
    "orchestrator": OrchestratorParams,
}


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

    def load_file_config(self) -> dict[str, Any]:
        """Load deployment overrides from the YAML config file."""
        config_file = self.config_dir / CONFIG_FILENAME

        if not config_file.exists():
            return {}

        with open(config_file) as f:
            file_config = yaml.safe_load(f)

        return file_config or {}

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Call-site overrides (highest priority)
        2. YAML file overrides
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)
        config = self._deep_merge(config, self.load_file_config())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load_config(self, overrides: Optional[dict[str, Any]] = None) -> DefaultConfig:
        """Merge all tiers and build the typed configuration."""
        merged = self.merge_config(overrides)
        sections = {}
        for name, section_type in _SECTION_TYPES.items():
            values = merged.get(name, {})
            known = {f.name: f for f in fields(section_type)}
            kwargs = {}
            for key, value in values.items():
                if key not in known:
                    continue
                # YAML has no tuples; keep frozen sections hashable
                if isinstance(value, list):
                    value = tuple(value)
                kwargs[key] = value
            sections[name] = section_type(**kwargs)
        return DefaultConfig(**sections)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if is_dataclass(obj):
            result = {}
            for f in fields(obj):
                value = getattr(obj, f.name)
                if is_dataclass(value):
                    result[f.name] = self._dataclass_to_dict(value)
                elif isinstance(value, dict):
                    result[f.name] = dict(value)
                else:
                    result[f.name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def load_config(overrides: Optional[dict[str, Any]] = None,
                config_dir: Optional[Path] = None) -> DefaultConfig:
    """Load the typed configuration from defaults, file and overrides."""
    return ConfigLoader.create(config_dir).load_config(overrides)
