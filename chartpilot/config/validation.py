"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_bridge_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate bridge readiness parameters."""
        errors = []

        for name in ("wait_timeout_ms", "poll_interval_ms"):
            if name in params:
                value = params[name]
                if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive integer",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_sequence_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate sequence pacing parameters."""
        errors = []

        if "per_step_delay_ms" in params:
            value = params["per_step_delay_ms"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="per_step_delay_ms",
                    message="Must be a non-negative number",
                    value=value
                ))

        for name in ("narrate", "cancellable", "wait_for_bridge"):
            if name in params and not isinstance(params[name], bool):
                errors.append(ValidationError(
                    field=name,
                    message="Must be a boolean",
                    value=params[name]
                ))

        return errors

    @staticmethod
    def validate_complexity_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate trade-plan complexity parameters."""
        errors = []

        if "extended_stop_multiplier" in params:
            value = params["extended_stop_multiplier"]
            if not _is_number(value) or value <= 1:
                errors.append(ValidationError(
                    field="extended_stop_multiplier",
                    message="Must be a number greater than 1",
                    value=value
                ))

        for name in ("secondary_entry_risk_fraction", "fallback_risk_pct"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value <= 0 or value >= 1:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive number between 0 and 1",
                        value=value
                    ))

        for name in ("simple_target_r", "partial_target_r", "advanced_target_r"):
            if name in params:
                value = params[name]
                if (not isinstance(value, (list, tuple)) or not value
                        or not all(_is_number(v) and v > 0 for v in value)
                        or list(value) != sorted(value)):
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-empty ascending list of positive numbers",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_generator_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate rule-based generator parameters."""
        errors = []

        if "atr_period" in params:
            value = params["atr_period"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 2:
                errors.append(ValidationError(
                    field="atr_period",
                    message="Must be an integer of at least 2",
                    value=value
                ))

        for name in ("risk_multipliers", "swing_stop_multipliers"):
            if name in params:
                value = params[name]
                if (not isinstance(value, dict)
                        or not all(_is_number(v) and v > 0 for v in value.values())):
                    errors.append(ValidationError(
                        field=name,
                        message="Must map risk tolerance names to positive numbers",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_orchestrator_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate orchestrator parameters."""
        errors = []

        if "sequence_threshold" in params:
            value = params["sequence_threshold"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field="sequence_threshold",
                    message="Must be a non-negative integer",
                    value=value
                ))

        if "sequence_step_delay_ms" in params:
            value = params["sequence_step_delay_ms"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="sequence_step_delay_ms",
                    message="Must be a non-negative number",
                    value=value
                ))

        if "decline_phrases" in params:
            value = params["decline_phrases"]
            if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
                errors.append(ValidationError(
                    field="decline_phrases",
                    message="Must be a list of strings",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "bridge" in config:
            errors.extend(ConfigValidator.validate_bridge_params(config["bridge"]))

        if "sequence" in config:
            errors.extend(ConfigValidator.validate_sequence_params(config["sequence"]))

        if "complexity" in config:
            errors.extend(ConfigValidator.validate_complexity_params(config["complexity"]))

        if "generator" in config:
            errors.extend(ConfigValidator.validate_generator_params(config["generator"]))

        if "orchestrator" in config:
            errors.extend(ConfigValidator.validate_orchestrator_params(config["orchestrator"]))

        return errors
