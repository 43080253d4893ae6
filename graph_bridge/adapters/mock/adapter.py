"""Mock object graph gateway implementation.

Provides a fully-functional in-memory gateway for testing and
development without a running home-automation host.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import random
import time
from typing import Any

from graph_bridge.core.interfaces.gateway import ChangeCallback, ReadyCallback
from graph_bridge.core.models.graph import (
    ChangeKind,
    FileContent,
    GraphObject,
    State,
    StateValue,
    ViewRow,
)
from graph_bridge.core.models.log import LogLevel, LogRecord
from graph_bridge.services.patterns import compile_pattern

from .fixtures import DEFAULT_LOG_TEXT
from .object_store import ObjectStore

logger = logging.getLogger(__name__)


async def _settle(result: Any) -> None:
    """Await a callback result if it is awaitable."""
    if inspect.isawaitable(result):
        await result


class MockGateway:
    """Mock object graph gateway for testing.

    Simulates the host platform with configurable behavior:
    - Latency simulation
    - Failure simulation (random, or for specific ids)
    - Pre-defined object graph, state values, files and log file

    Change events are only delivered for patterns the bridge subscribed
    upstream, and log records only while the log stream is required.

    Configuration:
        latency_ms: Simulated latency in milliseconds (default: 0)
        failure_rate: Probability of a one-shot call failing (0.0-1.0, default: 0.0)
        failing_ids: Ids whose one-shot calls always fail
        objects: Optional custom object list
        states: Optional custom state values
        files: Optional custom files
        log_text: Optional custom log file text (None for no log file)

    Example:
        >>> gateway = MockGateway({"latency_ms": 10})
        >>> bridge = GraphBridge(gateway)
        >>> bridge.start()
        >>> await gateway.start()
    """

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        """Initialize mock gateway.

        Args:
            config: Configuration dictionary
        """
        self.config = config or {}
        self.latency_ms = self.config.get("latency_ms", 0)
        self.failure_rate = self.config.get("failure_rate", 0.0)
        self.failing_ids: set[str] = set(self.config.get("failing_ids", ()))
        self.store = ObjectStore(
            objects=self.config.get("objects"),
            states=self.config.get("states"),
            files=self.config.get("files"),
        )
        self.log_text: str | None = self.config.get("log_text", DEFAULT_LOG_TEXT)

        self.subscribe_calls: list[tuple[ChangeKind, Any]] = []
        self.unsubscribe_calls: list[tuple[ChangeKind, Any]] = []
        self.require_log_calls: list[bool] = []
        self.log_required = False
        self._subscribed: dict[ChangeKind, list[Any]] = {
            ChangeKind.STATE: [],
            ChangeKind.OBJECT: [],
            ChangeKind.FILE: [],
        }
        self._callbacks: dict[ChangeKind, ChangeCallback] = {}
        self._ready_callbacks: list[ReadyCallback] = []
        self._ready = False

        logger.info(
            f"MockGateway initialized: latency={self.latency_ms}ms, "
            f"failure_rate={self.failure_rate}, objects={len(self.store.objects)}"
        )

    @property
    def ready(self) -> bool:
        """Check if readiness has been signalled."""
        return self._ready

    def subscribed(self, kind: ChangeKind) -> list[Any]:
        """Upstream subscriptions currently open for a kind."""
        return list(self._subscribed[kind])

    async def start(self) -> None:
        """Signal readiness to every installed callback (once)."""
        if self._ready:
            return
        await self._simulate_latency()
        self._ready = True
        logger.info("MockGateway ready")
        for callback in list(self._ready_callbacks):
            await _settle(callback())

    # ------------------------------------------------------------------
    # One-shot operations
    # ------------------------------------------------------------------

    async def get_object(self, object_id: str) -> GraphObject | None:
        await self._simulate_call(object_id)
        return self.store.get_object(object_id)

    async def set_object(self, object_id: str, obj: GraphObject) -> None:
        await self._simulate_call(object_id)
        self.store.set_object(obj)
        await self._notify(ChangeKind.OBJECT, object_id, object_id, self.store.get_object(object_id))

    async def get_state(self, state_id: str) -> State | None:
        await self._simulate_call(state_id)
        return self.store.get_state(state_id)

    async def set_state(self, state_id: str, value: StateValue, ack: bool = False) -> None:
        await self._simulate_call(state_id)
        state = self.store.set_state(state_id, value, ack)
        await self._notify(ChangeKind.STATE, state_id, state_id, state)

    async def read_file(self, meta_id: str, path: str) -> FileContent:
        await self._simulate_call(meta_id)
        return self.store.read_file(meta_id, path)

    async def write_file(self, meta_id: str, path: str, data: bytes | str) -> None:
        await self._simulate_call(meta_id)
        size = self.store.write_file(meta_id, path, data)
        await self._notify_file(meta_id, path, size)

    async def query_view(self, category: str, start_key: str, end_key: str) -> list[ViewRow]:
        await self._simulate_call(f"view:{category}")
        return self.store.query(category, start_key, end_key)

    async def read_log_text(self) -> str | None:
        await self._simulate_call("log")
        return self.log_text

    # ------------------------------------------------------------------
    # Subscription control
    # ------------------------------------------------------------------

    def subscribe(self, kind: ChangeKind, pattern: str) -> None:
        self.subscribe_calls.append((kind, pattern))
        self._subscribed[kind].append(pattern)
        logger.debug(f"MockGateway subscribed {kind.value} '{pattern}'")

    def unsubscribe(self, kind: ChangeKind, pattern: str) -> None:
        self.unsubscribe_calls.append((kind, pattern))
        if pattern in self._subscribed[kind]:
            self._subscribed[kind].remove(pattern)
        logger.debug(f"MockGateway unsubscribed {kind.value} '{pattern}'")

    def subscribe_files(self, id_pattern: str, file_pattern: str) -> None:
        self.subscribe(ChangeKind.FILE, (id_pattern, file_pattern))

    def unsubscribe_files(self, id_pattern: str, file_pattern: str) -> None:
        self.unsubscribe(ChangeKind.FILE, (id_pattern, file_pattern))

    def require_log(self, enabled: bool) -> None:
        self.require_log_calls.append(enabled)
        self.log_required = enabled

    def on_change(self, kind: ChangeKind, callback: ChangeCallback) -> None:
        self._callbacks[kind] = callback

    def on_ready(self, callback: ReadyCallback) -> None:
        self._ready_callbacks.append(callback)

    # ------------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------------

    async def emit_state(self, state_id: str, value: StateValue, ack: bool = True) -> State:
        """Change a state value as if a device reported it."""
        state = self.store.set_state(state_id, value, ack)
        await self._notify(ChangeKind.STATE, state_id, state_id, state)
        return state

    async def emit_object(self, obj: GraphObject) -> None:
        """Create or change an object as if another client wrote it."""
        self.store.set_object(obj)
        await self._notify(ChangeKind.OBJECT, obj.id, obj.id, self.store.get_object(obj.id))

    async def delete_object(self, object_id: str) -> None:
        """Delete an object and report the deletion."""
        self.store.delete_object(object_id)
        await self._notify(ChangeKind.OBJECT, object_id, object_id, None)

    async def delete_file(self, meta_id: str, path: str) -> None:
        """Delete a file and report the deletion."""
        self.store.delete_file(meta_id, path)
        await self._notify_file(meta_id, path, None)

    async def emit_log(
        self,
        message: str,
        severity: LogLevel | str = LogLevel.INFO,
        source: str = "host.raspberrypi",
    ) -> LogRecord | None:
        """Emit a log record if the log stream is required.

        Returns:
            The emitted record, or None if nobody required the stream
        """
        if not self.log_required:
            return None
        record = LogRecord(message=message, ts=int(time.time() * 1000), severity=severity, source=source)
        callback = self._callbacks.get(ChangeKind.LOG)
        if callback is not None:
            await _settle(callback(record))
        return record

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _is_subscribed(self, kind: ChangeKind, object_id: str, file_name: str | None = None) -> bool:
        for key in self._subscribed[kind]:
            if kind == ChangeKind.FILE:
                id_pattern, file_pattern = key
                if compile_pattern(id_pattern).matches(object_id) and compile_pattern(
                    file_pattern or "*"
                ).matches(file_name or ""):
                    return True
            elif compile_pattern(key).matches(object_id):
                return True
        return False

    async def _notify(self, kind: ChangeKind, object_id: str, *payload: Any) -> None:
        callback = self._callbacks.get(kind)
        if callback is None or not self._is_subscribed(kind, object_id):
            return
        await _settle(callback(*payload))

    async def _notify_file(self, meta_id: str, path: str, size: int | None) -> None:
        callback = self._callbacks.get(ChangeKind.FILE)
        if callback is None or not self._is_subscribed(ChangeKind.FILE, meta_id, path):
            return
        await _settle(callback(meta_id, path, size))

    async def _simulate_latency(self) -> None:
        """Simulate host latency."""
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000)

    async def _simulate_call(self, target: str) -> None:
        """Apply latency and simulated failures to a one-shot call.

        Raises:
            ConnectionError: If the call is configured to fail
        """
        await self._simulate_latency()
        if target in self.failing_ids:
            logger.warning(f"Simulated failure for {target}")
            raise ConnectionError(f"Simulated failure for {target}")
        if self.failure_rate > 0 and random.random() < self.failure_rate:
            logger.warning(f"Simulated random failure for {target}")
            raise ConnectionError(f"Simulated failure for {target}")
