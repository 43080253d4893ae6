"""Graph bridge service.

Single entry point for workflow consumers: registers listeners, runs
one-shot reads and writes against the object graph, and serves the
classified control view. Everything issued before the gateway signals
readiness is queued and settled in arrival order once it does.
"""

from __future__ import annotations

import base64 as b64
import logging
import time
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Iterator

from pydantic import ValidationError

from graph_bridge.config.settings import BridgeConfig
from graph_bridge.core.interfaces.gateway import (
    BridgeError,
    BridgeNotReadyError,
    GatewayRequestError,
    ObjectGraphGateway,
)
from graph_bridge.core.models.graph import (
    ChangeKind,
    FileContent,
    GraphObject,
    State,
    StateValue,
)
from graph_bridge.core.models.log import LogLevel, LogRecord
from graph_bridge.core.models.projection import (
    EnumItem,
    EnumResponse,
    InstanceInfo,
    RoomRecord,
)
from graph_bridge.services.classifier import VIEW_END_KEY, ControlClassifier
from graph_bridge.services.detector import StructuralDetector
from graph_bridge.services.log_multiplexer import LogListener
from graph_bridge.services.log_reader import parse_log_text
from graph_bridge.services.projector import project
from graph_bridge.services.request_queue import RequestKind, RequestQueues
from graph_bridge.services.smart_names import display_name, translate
from graph_bridge.services.subscriptions import (
    FileEvent,
    FileListener,
    ObjectListener,
    StateListener,
    SubscriptionRegistry,
)

logger = logging.getLogger(__name__)

SYSTEM_CONFIG_ID = "system.config"
INSTANCE_PREFIX = "system.adapter."
ANY_INSTANCE = InstanceInfo(value="", name="Any instance")

_PYTHON_LEVELS = {
    LogLevel.SILLY: logging.DEBUG,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


@contextmanager
def _gateway_errors(operation: str, target: str) -> Iterator[None]:
    """Turn gateway failures into GatewayRequestError."""
    try:
        yield
    except BridgeError:
        raise
    except Exception as e:
        logger.error(f"{operation} failed for {target}: {e}")
        raise GatewayRequestError(operation, target, str(e)) from e


class GraphBridge:
    """Bridge between an object graph gateway and workflow consumers.

    One-shot operations (`read_state`, `write_object`, `classify`, ...)
    are plain methods returning an awaitable. Before readiness the
    operation is parked in its queue at call time, so queued operations
    settle in the order they were issued, not the order they are awaited.

    Example:
        >>> bridge = GraphBridge(gateway, BridgeConfig.from_env())
        >>> bridge.start()
        >>> bridge.register_state_listener("n1", "hm-rpc.0.*", on_state)
        >>> state = await bridge.read_state("hm-rpc.0.LEQ001.1.LEVEL")
    """

    def __init__(
        self,
        gateway: ObjectGraphGateway,
        config: BridgeConfig | None = None,
        classifier: ControlClassifier | None = None,
    ):
        """Initialize bridge.

        Args:
            gateway: Object graph gateway
            config: Bridge configuration (defaults if None)
            classifier: Control classifier (built from config if None)
        """
        self.gateway = gateway
        self.config = config or BridgeConfig()
        self.language = self.config.language
        self.registry = SubscriptionRegistry(gateway)
        self.queues = RequestQueues()
        self.classifier = classifier or ControlClassifier(
            gateway,
            StructuralDetector(
                ignore_indicators=self.config.ignore_indicators,
                excluded_types=self.config.excluded_types,
            ),
        )
        self._ready = False
        self._started = False
        self._classify_cache: dict[tuple[str, bool], tuple[float, list[RoomRecord]]] = {}

    @property
    def ready(self) -> bool:
        """Check if the gateway has signalled readiness."""
        return self._ready

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Install the change feed and readiness callbacks on the gateway."""
        if self._started:
            return
        self._started = True
        self.gateway.on_change(ChangeKind.STATE, self.registry.dispatch_state)
        self.gateway.on_change(ChangeKind.OBJECT, self.registry.dispatch_object)
        self.gateway.on_change(ChangeKind.FILE, self.registry.dispatch_file)
        self.gateway.on_change(ChangeKind.LOG, self._on_log)
        self.gateway.on_ready(self.on_ready)
        logger.info("Graph bridge started, waiting for gateway readiness")

    async def on_ready(self) -> None:
        """Handle the readiness transition.

        Reads the system language, subscribes every registered pattern
        and drains the request queues. A second signal is ignored.
        """
        if self._ready:
            logger.warning("Gateway signalled readiness again, ignoring")
            return
        self._ready = True

        try:
            system_config = await self.gateway.get_object(SYSTEM_CONFIG_ID)
        except Exception as e:
            logger.warning(f"Cannot read system language, keeping '{self.language}': {e}")
        else:
            if system_config is not None and system_config.common.language:
                self.language = system_config.common.language
        logger.info(f"Gateway ready (language={self.language})")

        self.registry.activate()
        drained = await self.queues.drain_all()
        logger.info(f"Drained {drained} queued request(s)")

    def _on_log(self, record: LogRecord | dict[str, Any]) -> None:
        if not isinstance(record, LogRecord):
            try:
                record = LogRecord.model_validate(record)
            except ValidationError as e:
                logger.warning(f"Dropped malformed log record: {e}")
                return
        self.registry.dispatch_log(record)

    # ------------------------------------------------------------------
    # Listener registration
    # ------------------------------------------------------------------

    def register_state_listener(
        self, listener_id: str, pattern: str, callback: Callable[[str, State | None], Any]
    ) -> None:
        """Register (or update) a state change listener."""
        self.registry.register(StateListener(listener_id, pattern, callback))

    def register_object_listener(
        self, listener_id: str, pattern: str, callback: Callable[[str, GraphObject | None], Any]
    ) -> None:
        """Register (or update) an object change listener."""
        self.registry.register(ObjectListener(listener_id, pattern, callback))

    def register_file_listener(
        self,
        listener_id: str,
        pattern: str,
        callback: Callable[[FileEvent], Any],
        file_name: str = "*",
        with_content: bool = False,
    ) -> None:
        """Register (or update) a file change listener.

        Args:
            listener_id: Unique listener id
            pattern: Meta object id pattern
            callback: Called with each matching FileEvent
            file_name: File name pattern
            with_content: Deliver the file content with each event
        """
        self.registry.register(FileListener(listener_id, pattern, callback, file_name, with_content))

    def register_log_listener(
        self,
        listener_id: str,
        callback: Callable[[LogRecord], Any],
        level: LogLevel | str | None = None,
        instance: str | None = None,
    ) -> None:
        """Register (or update) a log listener.

        Args:
            listener_id: Unique listener id
            callback: Called with each delivered LogRecord
            level: Minimum severity
            instance: Source instance, exact or with `*`
        """
        self.registry.register(LogListener(listener_id, callback, level, instance))

    def unregister(self, listener_id: str) -> bool:
        """Remove a listener of any kind."""
        return self.registry.unregister(listener_id)

    # ------------------------------------------------------------------
    # One-shot operations
    # ------------------------------------------------------------------

    def _call(self, kind: RequestKind, operation: Callable[..., Awaitable[Any]], *args: Any) -> Awaitable[Any]:
        """Run an operation now if ready, otherwise park it in its queue."""
        if self._ready:
            return operation(*args)
        try:
            return self.queues[kind].submit(operation, *args)
        except RuntimeError as e:
            raise BridgeNotReadyError(
                f"Cannot queue {kind.value} before readiness outside an event loop"
            ) from e

    def read_state(self, state_id: str) -> Awaitable[State | None]:
        """Read the live value of a state."""
        return self._call(RequestKind.READ_STATE, self._read_state, state_id)

    def write_state(self, state_id: str, value: StateValue, ack: bool = False) -> Awaitable[None]:
        """Write a state value (a command unless `ack` is set)."""
        return self._call(RequestKind.WRITE_STATE, self._write_state, state_id, value, ack)

    def read_object(self, object_id: str) -> Awaitable[GraphObject | None]:
        """Read an object."""
        return self._call(RequestKind.READ_OBJECT, self._read_object, object_id)

    def write_object(self, object_id: str, partial: GraphObject | dict[str, Any]) -> Awaitable[GraphObject]:
        """Write an object.

        When the object exists, `common` and `native` of `partial` are
        merged key by key into the stored ones (one level deep). Otherwise
        `partial` is written as a new object and must carry a `type`.
        """
        return self._call(RequestKind.WRITE_OBJECT, self._write_object, object_id, partial)

    def read_file(self, meta_id: str, path: str, base64: bool = False) -> Awaitable[FileContent]:
        """Read a file; with `base64` the data is returned base64-encoded."""
        return self._call(RequestKind.READ_FILE, self._read_file, meta_id, path, base64)

    def write_file(self, meta_id: str, path: str, content: bytes | str, base64: bool = False) -> Awaitable[None]:
        """Write a file; with `base64` the content is decoded first."""
        return self._call(RequestKind.WRITE_FILE, self._write_file, meta_id, path, content, base64)

    def read_logs(
        self,
        level: LogLevel | str | None = None,
        instance: str | None = None,
        count: int | None = None,
    ) -> Awaitable[list[LogRecord]]:
        """Read records from the latest log file, newest first.

        Args:
            level: Only records of exactly this severity
            instance: Only records from exactly this source
            count: Maximum number of records
        """
        return self._call(RequestKind.READ_LOGS, self._read_logs, level, instance, count)

    def write_log(self, message: str, level: LogLevel | str = LogLevel.INFO) -> Awaitable[None]:
        """Write a message into the bridge log."""
        return self._call(RequestKind.WRITE_LOG, self._write_log, message, level)

    def list_instances(self) -> Awaitable[list[InstanceInfo]]:
        """List adapter instances, led by the "Any instance" choice."""
        return self._call(RequestKind.LIST_INSTANCES, self._list_instances)

    def read_enums(
        self, enum_type: str, language: str | None = None, with_icons: bool = False
    ) -> Awaitable[list[EnumResponse]]:
        """List the enums of a type ('rooms', 'functions', ...) with their members."""
        return self._call(RequestKind.READ_ENUMS, self._read_enums, enum_type, language, with_icons)

    def classify(self, language: str | None = None, with_icons: bool = False) -> Awaitable[list[RoomRecord]]:
        """Classify the object graph into rooms of devices and controls.

        Results are cached per (language, with_icons) for
        `classify_cache_ttl` seconds.
        """
        return self._call(RequestKind.CLASSIFY, self._classify, language, with_icons)

    def invalidate_classification(self) -> None:
        """Drop cached classification results."""
        self._classify_cache.clear()

    # ------------------------------------------------------------------
    # Operation bodies
    # ------------------------------------------------------------------

    async def _read_state(self, state_id: str) -> State | None:
        with _gateway_errors("read_state", state_id):
            return await self.gateway.get_state(state_id)

    async def _write_state(self, state_id: str, value: StateValue, ack: bool) -> None:
        with _gateway_errors("write_state", state_id):
            await self.gateway.set_state(state_id, value, ack)

    async def _read_object(self, object_id: str) -> GraphObject | None:
        with _gateway_errors("read_object", object_id):
            return await self.gateway.get_object(object_id)

    async def _write_object(self, object_id: str, partial: GraphObject | dict[str, Any]) -> GraphObject:
        update = partial.to_dict() if isinstance(partial, GraphObject) else dict(partial)
        try:
            existing = await self.gateway.get_object(object_id)
        except Exception as e:
            logger.debug(f"Cannot read {object_id} before write, writing as new: {e}")
            existing = None

        with _gateway_errors("write_object", object_id):
            if existing is not None:
                merged = existing.to_dict()
                merged["common"] = {**merged.get("common", {}), **(update.get("common") or {})}
                merged["native"] = {**merged.get("native", {}), **(update.get("native") or {})}
            else:
                merged = update
            merged["id"] = object_id
            obj = GraphObject.model_validate(merged)
            await self.gateway.set_object(object_id, obj)
        self.invalidate_classification()
        return obj

    async def _read_file(self, meta_id: str, path: str, base64: bool) -> FileContent:
        with _gateway_errors("read_file", f"{meta_id}/{path}"):
            content = await self.gateway.read_file(meta_id, path)
        if base64:
            raw = content.data.encode("utf-8") if isinstance(content.data, str) else content.data
            return FileContent(data=b64.b64encode(raw).decode("ascii"), mime_type=content.mime_type)
        return content

    async def _write_file(self, meta_id: str, path: str, content: bytes | str, base64: bool) -> None:
        with _gateway_errors("write_file", f"{meta_id}/{path}"):
            data = b64.b64decode(content) if base64 else content
            await self.gateway.write_file(meta_id, path, data)

    async def _read_logs(
        self, level: LogLevel | str | None, instance: str | None, count: int | None
    ) -> list[LogRecord]:
        with _gateway_errors("read_logs", instance or "*"):
            text = await self.gateway.read_log_text()
            if not text:
                return []
            return parse_log_text(text, level=level, instance=instance, count=count)

    async def _write_log(self, message: str, level: LogLevel | str) -> None:
        try:
            severity = level if isinstance(level, LogLevel) else LogLevel(level)
        except ValueError:
            logger.warning(f"Unknown log level '{level}', using info")
            severity = LogLevel.INFO
        logger.log(_PYTHON_LEVELS[severity], message)

    async def _list_instances(self) -> list[InstanceInfo]:
        with _gateway_errors("list_instances", INSTANCE_PREFIX + "*"):
            rows = await self.gateway.query_view("instance", INSTANCE_PREFIX, INSTANCE_PREFIX + VIEW_END_KEY)

        instances = [ANY_INSTANCE]
        for row in rows:
            namespace = row.id.removeprefix(INSTANCE_PREFIX)
            common = row.value.common
            name = translate(common.title_lang or common.title, "en") or namespace
            adapter_name, _, instance = namespace.partition(".")
            if name == adapter_name:
                name = namespace
            elif instance not in name:
                name = f"{name} [{namespace}]"
            instances.append(InstanceInfo(value=namespace, name=name))
        return instances

    async def _read_enums(self, enum_type: str, language: str | None, with_icons: bool) -> list[EnumResponse]:
        language = language or self.language
        prefix = f"enum.{enum_type}."
        with _gateway_errors("read_enums", prefix + "*"):
            rows = await self.gateway.query_view("enum", prefix, prefix + VIEW_END_KEY)

        members: dict[str, GraphObject | None] = {}
        result: list[EnumResponse] = []
        for row in rows:
            enum_obj = row.value
            response = EnumResponse(
                id=enum_obj.id,
                name=display_name(enum_obj.common.name, language, enum_obj.id),
                color=enum_obj.common.color,
                icon=enum_obj.common.icon if with_icons else None,
            )
            for member_id in enum_obj.common.members or []:
                if member_id not in members:
                    try:
                        members[member_id] = await self.gateway.get_object(member_id)
                    except Exception as e:
                        logger.debug(f"Cannot read enum member {member_id}: {e}")
                        members[member_id] = None
                obj = members[member_id]
                if obj is None:
                    continue
                response.items.append(
                    EnumItem(
                        id=member_id,
                        type=obj.type,
                        name=display_name(obj.common.name, language, member_id),
                        color=obj.common.color,
                        icon=obj.common.icon if with_icons else None,
                        state_type=obj.common.type,
                        min=obj.common.min,
                        max=obj.common.max,
                        unit=obj.common.unit,
                        role=obj.common.role,
                        step=obj.common.step,
                    )
                )
            result.append(response)
        return result

    async def _classify(self, language: str | None, with_icons: bool) -> list[RoomRecord]:
        language = language or self.language
        key = (language, with_icons)
        cached = self._classify_cache.get(key)
        if cached is not None and time.monotonic() - cached[0] < self.config.classify_cache_ttl:
            logger.debug(f"Using cached classification for {key}")
            return [room.model_copy(deep=True) for room in cached[1]]

        with _gateway_errors("classify", language):
            controls = await self.classifier.classify(language)
        rooms = project(controls, language, with_icons)
        self._classify_cache[key] = (time.monotonic(), [room.model_copy(deep=True) for room in rooms])
        return rooms
