"""Log record models.

Log records are streamed by the gateway once log streaming is required
and can also be read back from the latest log file.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LogLevel(str, Enum):
    """Ordered five-level severity scale (lowest first)."""

    SILLY = "silly"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        """Position of the level on the severity scale."""
        return _LEVEL_ORDER.index(self)

    def at_least(self, threshold: LogLevel) -> bool:
        """Check if this level is equal to or more severe than `threshold`."""
        return self.rank >= threshold.rank


_LEVEL_ORDER = list(LogLevel)


class LogRecord(BaseModel):
    """A single log message.

    Attributes:
        message: Log text without the source prefix
        ts: Timestamp in epoch milliseconds
        severity: Log level of the message
        source: Emitting instance (e.g. 'hm-rpc.0'), `from` on the wire
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str
    ts: int
    severity: LogLevel
    source: str = Field(default="", alias="from")
