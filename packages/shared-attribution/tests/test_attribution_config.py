"""Tests for attribution configuration."""

import pytest
from leadpath.attribution.config import DEFAULT_FACTOR_WEIGHTS, AttributionConfig
from pydantic import ValidationError


class TestAttributionConfig:
    """Test AttributionConfig model."""

    def test_defaults(self):
        """Test default values."""
        config = AttributionConfig()

        assert config.materiality_threshold == 0.1
        assert config.certainty_cap == 0.98
        assert config.high_certainty_threshold == 0.9
        assert config.default_sample_size == 100
        assert config.max_sample_size == 10_000
        assert config.batch_size == 10
        assert config.stats_timeout_seconds == 60.0
        assert config.stats_cache_ttl_seconds == 900
        assert config.factor_weights == DEFAULT_FACTOR_WEIGHTS

    def test_factor_weights_not_shared(self):
        """Test each config gets its own weights dict."""
        first = AttributionConfig()
        first.factor_weights["base_certainty"] = 5.0

        assert AttributionConfig().factor_weights["base_certainty"] == 1.0

    def test_unknown_factor(self):
        """Test unknown factor names are rejected."""
        with pytest.raises(ValidationError, match="Unknown certainty factors"):
            AttributionConfig(factor_weights={"luck": 1.0})

    def test_negative_weight(self):
        """Test negative weights are rejected."""
        with pytest.raises(ValidationError, match="non-negative"):
            AttributionConfig(factor_weights={**DEFAULT_FACTOR_WEIGHTS, "base_certainty": -1.0})

    def test_zero_weights(self):
        """Test all-zero weights are rejected."""
        with pytest.raises(ValidationError, match="positive value"):
            AttributionConfig(factor_weights={name: 0.0 for name in DEFAULT_FACTOR_WEIGHTS})

    def test_partial_factor_weights_keep_defaults(self):
        """Test factors omitted from a partial dict keep their default weight."""
        config = AttributionConfig(factor_weights={"base_certainty": 2.0})

        assert config.factor_weights == {**DEFAULT_FACTOR_WEIGHTS, "base_certainty": 2.0}

    def test_single_zero_weight_allowed(self):
        """Test one factor can be switched off while the others keep weight."""
        config = AttributionConfig(factor_weights={"base_certainty": 0.0})

        assert config.factor_weights["base_certainty"] == 0.0
        assert sum(config.factor_weights.values()) == 5.0

    @pytest.mark.parametrize("field", ["certainty_cap", "materiality_threshold"])
    def test_unit_interval(self, field):
        """Test fractions must lie in [0, 1]."""
        with pytest.raises(ValidationError, match="between 0 and 1"):
            AttributionConfig(**{field: 1.5})

    @pytest.mark.parametrize("field", ["default_sample_size", "max_sample_size", "batch_size"])
    def test_positive_integers(self, field):
        """Test sizes must be positive."""
        with pytest.raises(ValidationError, match="positive integer"):
            AttributionConfig(**{field: 0})


class TestFromEnv:
    """Test AttributionConfig.from_env."""

    def test_no_env(self, monkeypatch):
        """Test defaults when no variables are set."""
        for name in (
            "LEADPATH_MATERIALITY_THRESHOLD",
            "LEADPATH_CERTAINTY_CAP",
            "LEADPATH_HIGH_CERTAINTY_THRESHOLD",
            "LEADPATH_SAMPLE_SIZE",
            "LEADPATH_MAX_SAMPLE_SIZE",
            "LEADPATH_BATCH_SIZE",
            "LEADPATH_STATS_TIMEOUT",
            "LEADPATH_STATS_CACHE_TTL",
            "LEADPATH_FACTOR_WEIGHTS",
        ):
            monkeypatch.delenv(name, raising=False)

        assert AttributionConfig.from_env() == AttributionConfig()

    def test_reads_env(self, monkeypatch):
        """Test values are read and coerced."""
        monkeypatch.setenv("LEADPATH_MATERIALITY_THRESHOLD", "0.2")
        monkeypatch.setenv("LEADPATH_SAMPLE_SIZE", "250")
        monkeypatch.setenv("LEADPATH_STATS_TIMEOUT", "5.5")
        monkeypatch.setenv("LEADPATH_STATS_CACHE_TTL", "60")

        config = AttributionConfig.from_env()

        assert config.materiality_threshold == 0.2
        assert config.default_sample_size == 250
        assert config.stats_timeout_seconds == 5.5
        assert config.stats_cache_ttl_seconds == 60

    def test_factor_weights_merge_over_defaults(self, monkeypatch):
        """Test partial weight overrides keep the other factors."""
        monkeypatch.setenv("LEADPATH_FACTOR_WEIGHTS", '{"base_certainty": 2.0}')

        config = AttributionConfig.from_env()

        assert config.factor_weights["base_certainty"] == 2.0
        assert config.factor_weights["channel_diversity"] == 1.0
        assert config == AttributionConfig(factor_weights={"base_certainty": 2.0})

    def test_invalid_factor_weights_json(self, monkeypatch):
        """Test malformed JSON is reported."""
        monkeypatch.setenv("LEADPATH_FACTOR_WEIGHTS", "{not json")

        with pytest.raises(ValueError, match="Invalid LEADPATH_FACTOR_WEIGHTS"):
            AttributionConfig.from_env()

    def test_invalid_value(self, monkeypatch):
        """Test out-of-range values fail validation."""
        monkeypatch.setenv("LEADPATH_CERTAINTY_CAP", "2")

        with pytest.raises(ValidationError):
            AttributionConfig.from_env()
