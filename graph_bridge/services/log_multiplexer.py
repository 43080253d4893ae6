"""Log stream multiplexer.

Fans the gateway's single log stream out to log listeners, each with an
optional minimum severity and an optional source-instance filter. The
upstream stream is only required while at least one listener exists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, ClassVar

from graph_bridge.core.interfaces.gateway import ObjectGraphGateway
from graph_bridge.core.models.graph import ChangeKind
from graph_bridge.core.models.log import LogLevel, LogRecord
from graph_bridge.services.patterns import IdPattern, compile_or_never

logger = logging.getLogger(__name__)


@dataclass
class LogListener:
    """Listener for log records.

    Attributes:
        listener_id: Unique listener id
        callback: Called with each delivered LogRecord
        level: Minimum severity (None delivers everything)
        instance: Source instance, exact or with `*` (None or "" for any)
    """

    listener_id: str
    callback: Callable[[LogRecord], Any]
    level: LogLevel | None = None
    instance: str | None = None

    kind: ClassVar[ChangeKind] = ChangeKind.LOG

    def __post_init__(self) -> None:
        if self.level is not None and not isinstance(self.level, LogLevel):
            self.level = LogLevel(self.level)


@dataclass
class _LogRegistration:
    listener: LogListener
    source_matcher: IdPattern | None

    def accepts(self, record: LogRecord) -> bool:
        if self.source_matcher is not None and not self.source_matcher(record.source):
            return False
        threshold = self.listener.level
        return threshold is None or record.severity.at_least(threshold)


class LogMultiplexer:
    """Delivers log records to matching listeners."""

    def __init__(self, gateway: ObjectGraphGateway):
        """Initialize the multiplexer.

        Args:
            gateway: Gateway whose log stream is switched on and off
        """
        self.gateway = gateway
        self._listeners: dict[str, _LogRegistration] = {}
        self._active = False
        self._log_required = False

    def __contains__(self, listener_id: str) -> bool:
        return listener_id in self._listeners

    def __len__(self) -> int:
        return len(self._listeners)

    @property
    def log_required(self) -> bool:
        """Check if the upstream log stream is currently required."""
        return self._log_required

    def add(self, listener: LogListener) -> None:
        """Add a listener, replacing any listener with the same id."""
        matcher = None
        if listener.instance:
            matcher = compile_or_never(listener.instance, listener.listener_id)
        self._listeners[listener.listener_id] = _LogRegistration(listener, matcher)
        logger.info(
            f"Log listener {listener.listener_id} registered "
            f"(level={listener.level.value if listener.level else 'any'}, "
            f"instance={listener.instance or 'any'})"
        )
        self._sync()

    def remove(self, listener_id: str) -> bool:
        """Remove a listener.

        Returns:
            True if the listener existed
        """
        if self._listeners.pop(listener_id, None) is None:
            return False
        logger.info(f"Log listener {listener_id} removed")
        self._sync()
        return True

    def activate(self) -> None:
        """Start talking to the gateway (called once on readiness)."""
        self._active = True
        self._sync()

    def dispatch(self, record: LogRecord) -> int:
        """Deliver a log record to every matching listener.

        Returns:
            Number of listeners the record was delivered to
        """
        delivered = 0
        for listener_id in list(self._listeners):
            registration = self._listeners.get(listener_id)
            if registration is None or not registration.accepts(record):
                continue
            delivered += 1
            try:
                registration.listener.callback(record)
            except Exception:
                logger.exception(f"Log listener {listener_id} failed")
        return delivered

    def _sync(self) -> None:
        """Require or release the log stream when the listener set flips."""
        wanted = bool(self._listeners)
        if not self._active or wanted == self._log_required:
            return
        try:
            self.gateway.require_log(wanted)
        except Exception as e:
            logger.error(f"Failed to {'require' if wanted else 'release'} log stream: {e}")
            return
        self._log_required = wanted
        logger.info(f"Log stream {'required' if wanted else 'released'}")
