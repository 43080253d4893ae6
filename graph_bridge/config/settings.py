"""Bridge configuration.

All settings are read from environment variables through `from_env()`;
the language is additionally overridden at readiness by the system
language stored in the object graph.
"""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


def _split_list(raw: str) -> list[str]:
    """Split a comma-separated environment value, dropping blanks."""
    return [item.strip() for item in raw.split(",") if item.strip()]


class BridgeConfig(BaseModel):
    """Bridge settings."""

    language: str = Field(
        default="en",
        description="Display language for names (replaced by the system language when ready)",
    )

    classify_cache_ttl: float = Field(
        default=30.0,
        ge=0,
        description="Seconds a classification result is reused",
    )

    log_level: str = Field(
        default="INFO",
        description="Python log level of the bridge process",
    )

    ignore_indicators: list[str] = Field(
        default_factory=lambda: ["UNREACH_STICKY"],
        description="Indicator slots never bound by structural detection",
    )

    excluded_types: list[str] = Field(
        default_factory=lambda: ["info"],
        description="Device types structural detection never produces",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls) -> BridgeConfig:
        """Load configuration from environment variables.

        Returns:
            BridgeConfig instance with values from environment
        """
        config = cls(
            language=os.getenv("BRIDGE_LANGUAGE", "en"),
            classify_cache_ttl=float(os.getenv("BRIDGE_CLASSIFY_CACHE_TTL", "30")),
            log_level=os.getenv("BRIDGE_LOG_LEVEL", "INFO"),
            ignore_indicators=_split_list(os.getenv("BRIDGE_IGNORE_INDICATORS", "UNREACH_STICKY")),
            excluded_types=_split_list(os.getenv("BRIDGE_EXCLUDED_TYPES", "info")),
        )
        logger.debug(f"Loaded bridge config: {config.model_dump()}")
        return config
