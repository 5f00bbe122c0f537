"""Configuration for the attribution engine."""

from __future__ import annotations

import json
import os

from pydantic import BaseModel, Field, field_validator

# Equal weighting of the six certainty factors
DEFAULT_FACTOR_WEIGHTS: dict[str, float] = {
    "data_completeness": 1.0,
    "channel_diversity": 1.0,
    "timeline_clarity": 1.0,
    "touchpoint_signal": 1.0,
    "cross_platform_confirmation": 1.0,
    "base_certainty": 1.0,
}


class AttributionConfig(BaseModel):
    """Tunable constants of the attribution engine."""

    materiality_threshold: float = 0.1  # Minimum weight of a significant touchpoint
    certainty_cap: float = 0.98
    high_certainty_threshold: float = 0.9

    default_sample_size: int = 100
    max_sample_size: int = 10_000
    batch_size: int = 10  # Concurrent contact store calls in async bulk runs

    stats_timeout_seconds: float = 60.0
    stats_cache_ttl_seconds: int = 900  # 15 minutes

    factor_weights: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_FACTOR_WEIGHTS)
    )

    @field_validator("factor_weights")
    @classmethod
    def _check_factor_weights(cls, value: dict[str, float]) -> dict[str, float]:
        """Validate weights and fill omitted factors with their default weight."""
        unknown = set(value) - set(DEFAULT_FACTOR_WEIGHTS)
        if unknown:
            raise ValueError(f"Unknown certainty factors: {sorted(unknown)}")
        weights = {**DEFAULT_FACTOR_WEIGHTS, **value}
        if any(w < 0 for w in weights.values()):
            raise ValueError("Certainty factor weights must be non-negative")
        if sum(weights.values()) <= 0:
            raise ValueError("Certainty factor weights must sum to a positive value")
        return weights

    @field_validator("certainty_cap", "materiality_threshold", "high_certainty_threshold")
    @classmethod
    def _check_unit_interval(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Expected a value between 0 and 1, got {value}")
        return value

    @field_validator("default_sample_size", "max_sample_size", "batch_size")
    @classmethod
    def _check_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"Expected a positive integer, got {value}")
        return value

    @classmethod
    def from_env(cls) -> AttributionConfig:
        """Load configuration from environment variables.

        LEADPATH_FACTOR_WEIGHTS takes a JSON object, e.g.
        ``{"base_certainty": 2.0}``; factors it omits keep weight 1.0.
        """
        values: dict = {}
        env_map = {
            "materiality_threshold": "LEADPATH_MATERIALITY_THRESHOLD",
            "certainty_cap": "LEADPATH_CERTAINTY_CAP",
            "high_certainty_threshold": "LEADPATH_HIGH_CERTAINTY_THRESHOLD",
            "default_sample_size": "LEADPATH_SAMPLE_SIZE",
            "max_sample_size": "LEADPATH_MAX_SAMPLE_SIZE",
            "batch_size": "LEADPATH_BATCH_SIZE",
            "stats_timeout_seconds": "LEADPATH_STATS_TIMEOUT",
            "stats_cache_ttl_seconds": "LEADPATH_STATS_CACHE_TTL",
        }
        for name, env_var in env_map.items():
            raw = os.getenv(env_var)
            if raw:
                values[name] = raw

        raw_weights = os.getenv("LEADPATH_FACTOR_WEIGHTS")
        if raw_weights:
            try:
                overrides = json.loads(raw_weights)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid LEADPATH_FACTOR_WEIGHTS: {raw_weights}") from e
            values["factor_weights"] = overrides

        return cls(**values)
