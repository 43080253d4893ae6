"""Object graph gateway protocol definition.

Defines the interface the bridge expects from the host platform that
owns the object graph: one-shot object, state and file access, view
queries, upstream subscription control and the change feeds.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Callable, Protocol, runtime_checkable

from graph_bridge.core.models.graph import (
    ChangeKind,
    FileContent,
    GraphObject,
    State,
    StateValue,
    ViewRow,
)

# Change feed callbacks by kind:
#   state:  (id, State | None)
#   object: (id, GraphObject | None)
#   file:   (id, file_name, size | None)   size None means deleted
#   log:    (LogRecord,)
# A callback may return an awaitable, which the gateway must await.
ChangeCallback = Callable[..., Any]
ReadyCallback = Callable[[], Any]


@runtime_checkable
class ObjectGraphGateway(Protocol):
    """Protocol for object graph gateways.

    The gateway is the only component that talks to the host platform.
    Subscription control methods are fire-and-forget: they register
    interest upstream and return immediately, events then arrive through
    the callbacks installed with `on_change`.

    Lifecycle:
        1. Create the gateway and hand it to the bridge
        2. The bridge installs its callbacks with on_change() / on_ready()
        3. The gateway signals readiness once, the bridge drains its queues
        4. Change events flow until the process stops
    """

    @abstractmethod
    async def get_object(self, object_id: str) -> GraphObject | None:
        """Read an object.

        Args:
            object_id: Object id

        Returns:
            GraphObject if it exists, None otherwise
        """
        ...

    @abstractmethod
    async def set_object(self, object_id: str, obj: GraphObject) -> None:
        """Create or replace an object."""
        ...

    @abstractmethod
    async def get_state(self, state_id: str) -> State | None:
        """Read the live value of a state.

        Returns:
            State if a value exists, None otherwise
        """
        ...

    @abstractmethod
    async def set_state(self, state_id: str, value: StateValue, ack: bool = False) -> None:
        """Write a state value.

        Args:
            state_id: State id
            value: New value
            ack: True for confirmed values, False for commands
        """
        ...

    @abstractmethod
    async def read_file(self, meta_id: str, path: str) -> FileContent:
        """Read a file from the file storage of `meta_id`."""
        ...

    @abstractmethod
    async def write_file(self, meta_id: str, path: str, data: bytes | str) -> None:
        """Write a file into the file storage of `meta_id`."""
        ...

    @abstractmethod
    async def query_view(self, category: str, start_key: str, end_key: str) -> list[ViewRow]:
        """Query objects of a category by id range.

        Args:
            category: Object type to list (state, channel, device, enum, instance)
            start_key: First id of the range (inclusive)
            end_key: Last id of the range (inclusive)

        Returns:
            Rows ordered by id
        """
        ...

    @abstractmethod
    def subscribe(self, kind: ChangeKind, pattern: str) -> None:
        """Subscribe upstream to state or object changes matching `pattern`."""
        ...

    @abstractmethod
    def unsubscribe(self, kind: ChangeKind, pattern: str) -> None:
        """Close an upstream subscription opened with `subscribe`."""
        ...

    @abstractmethod
    def subscribe_files(self, id_pattern: str, file_pattern: str) -> None:
        """Subscribe upstream to file changes."""
        ...

    @abstractmethod
    def unsubscribe_files(self, id_pattern: str, file_pattern: str) -> None:
        """Close an upstream file subscription."""
        ...

    @abstractmethod
    def require_log(self, enabled: bool) -> None:
        """Switch the log stream on or off."""
        ...

    @abstractmethod
    async def read_log_text(self) -> str | None:
        """Read the text of the most recent log file.

        Returns:
            Log file text, or None if no log file is available
        """
        ...

    @abstractmethod
    def on_change(self, kind: ChangeKind, callback: ChangeCallback) -> None:
        """Install the callback for one change feed."""
        ...

    @abstractmethod
    def on_ready(self, callback: ReadyCallback) -> None:
        """Install the readiness callback (signalled at most once)."""
        ...


class BridgeError(Exception):
    """Base exception for bridge errors."""

    pass


class GatewayRequestError(BridgeError):
    """Raised when the gateway rejects a one-shot operation."""

    def __init__(self, operation: str, target: str, reason: str | None = None) -> None:
        """Initialize gateway request error.

        Args:
            operation: Operation that failed (e.g. 'read_state')
            target: Id (or other key) the operation was applied to
            reason: Failure description (optional)
        """
        self.operation = operation
        self.target = target
        message = f"{operation} failed for {target}"
        super().__init__(f"{message}: {reason}" if reason else message)


class PatternError(BridgeError):
    """Raised when an id pattern cannot be compiled."""

    def __init__(self, pattern: Any, reason: str) -> None:
        self.pattern = pattern
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")


class BridgeNotReadyError(BridgeError):
    """Raised when an operation requires a ready gateway."""

    pass


class QueueDrainedError(BridgeError):
    """Raised when a request is submitted to an already drained queue."""

    def __init__(self, queue: str) -> None:
        self.queue = queue
        super().__init__(f"Request queue '{queue}' has already been drained")
