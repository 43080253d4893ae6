"""Tests for bridge configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from graph_bridge.config import BridgeConfig


class TestBridgeConfig:
    """Tests for BridgeConfig."""

    def test_defaults(self) -> None:
        """Test default values."""
        config = BridgeConfig()
        assert config.language == "en"
        assert config.classify_cache_ttl == 30.0
        assert config.log_level == "INFO"
        assert config.ignore_indicators == ["UNREACH_STICKY"]
        assert config.excluded_types == ["info"]

    def test_log_level_is_normalized(self) -> None:
        """Test that the log level is upper-cased."""
        assert BridgeConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self) -> None:
        """Test that unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            BridgeConfig(log_level="chatty")

    def test_negative_ttl_rejected(self) -> None:
        """Test that a negative cache TTL is rejected."""
        with pytest.raises(ValidationError):
            BridgeConfig(classify_cache_ttl=-1)

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test loading values from environment variables."""
        monkeypatch.setenv("BRIDGE_LANGUAGE", "de")
        monkeypatch.setenv("BRIDGE_CLASSIFY_CACHE_TTL", "5")
        monkeypatch.setenv("BRIDGE_LOG_LEVEL", "warning")
        monkeypatch.setenv("BRIDGE_IGNORE_INDICATORS", "UNREACH_STICKY, LOWBAT,")
        monkeypatch.setenv("BRIDGE_EXCLUDED_TYPES", "")

        config = BridgeConfig.from_env()

        assert config.language == "de"
        assert config.classify_cache_ttl == 5.0
        assert config.log_level == "WARNING"
        assert config.ignore_indicators == ["UNREACH_STICKY", "LOWBAT"]
        assert config.excluded_types == []

    def test_from_env_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that missing environment variables fall back to defaults."""
        for name in (
            "BRIDGE_LANGUAGE",
            "BRIDGE_CLASSIFY_CACHE_TTL",
            "BRIDGE_LOG_LEVEL",
            "BRIDGE_IGNORE_INDICATORS",
            "BRIDGE_EXCLUDED_TYPES",
        ):
            monkeypatch.delenv(name, raising=False)

        assert BridgeConfig.from_env() == BridgeConfig()
