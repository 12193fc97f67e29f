"""Default configuration parameters for chart control and trade-plan derivation."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class BridgeParams:
    """Chart bridge readiness parameters."""
    wait_timeout_ms: int = 3000        # Hard limit for the readiness poll
    poll_interval_ms: int = 50         # Sleep between readiness checks


@dataclass(frozen=True)
class SequenceParams:
    """Sequence engine pacing parameters."""
    narrate: bool = True               # Surface step messages on the overlay
    cancellable: bool = True           # Subscribe to overlay cancel requests
    per_step_delay_ms: int = 0         # Pause before each step's actions
    wait_for_bridge: bool = True       # Poll for the bridge before the first step


@dataclass(frozen=True)
class ComplexityParams:
    """Trade-plan complexity derivation parameters."""
    extended_stop_multiplier: float = 1.3            # Extended stop vs primary risk distance
    secondary_entry_risk_fraction: float = 0.2       # Secondary entry offset vs risk distance
    fallback_risk_pct: float = 0.02                  # Stop distance when no stop is supplied
    simple_target_r: tuple[float, ...] = (2.0,)
    partial_target_r: tuple[float, ...] = (1.5, 2.5)
    advanced_target_r: tuple[float, ...] = (1.5, 2.5, 3.5)


@dataclass(frozen=True)
class GeneratorParams:
    """Rule-based plan generator parameters."""
    atr_period: int = 14
    atr_fallback_pct: float = 0.02                   # Used when fewer closes than atr_period
    day_min_separation_pct: float = 0.0025
    swing_min_separation_pct: float = 0.006
    entry_spacing_atr: float = 0.3                   # Advanced secondary entry offset in ATRs
    risk_multipliers: dict[str, float] = field(default_factory=lambda: {
        "conservative": 1.0,
        "moderate": 1.5,
        "aggressive": 2.0,
    })
    swing_stop_multipliers: dict[str, float] = field(default_factory=lambda: {
        "conservative": 3.2,
        "moderate": 2.8,
        "aggressive": 2.4,
    })


@dataclass(frozen=True)
class OrchestratorParams:
    """Strategy orchestrator parameters."""
    sequence_threshold: int = 1                      # More chart actions than this are sequenced
    sequence_step_delay_ms: int = 400                # Pacing for orchestrated sequences
    decline_phrases: tuple[str, ...] = (
        "no", "nope", "nah", "no thanks", "no thank you", "cancel",
        "stop", "never mind", "nevermind", "not now", "skip",
    )


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    bridge: BridgeParams
    sequence: SequenceParams
    complexity: ComplexityParams
    generator: GeneratorParams
    orchestrator: OrchestratorParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        bridge=BridgeParams(),
        sequence=SequenceParams(),
        complexity=ComplexityParams(),
        generator=GeneratorParams(),
        orchestrator=OrchestratorParams(),
    )
