"""Subscription registry.

Tracks which listener wants which changes and keeps the upstream
subscriptions in step: one upstream subscription per distinct pattern,
opened when the first listener for it appears and closed when the last
one leaves. Before readiness only the bookkeeping is updated; every
pattern is subscribed once when the registry is activated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Hashable, Union

from graph_bridge.core.interfaces.gateway import ObjectGraphGateway
from graph_bridge.core.models.graph import ChangeKind, FileContent, GraphObject, State
from graph_bridge.core.models.log import LogRecord
from graph_bridge.services.log_multiplexer import LogListener, LogMultiplexer
from graph_bridge.services.patterns import IdPattern, compile_or_never

logger = logging.getLogger(__name__)


@dataclass
class StateListener:
    """Listener for state changes.

    The callback receives the state id and the new State (None when the
    state was deleted).
    """

    listener_id: str
    pattern: str
    callback: Callable[[str, State | None], Any]

    kind: ClassVar[ChangeKind] = ChangeKind.STATE


@dataclass
class ObjectListener:
    """Listener for object changes.

    The callback receives the object id and the new GraphObject (None
    when the object was deleted).
    """

    listener_id: str
    pattern: str
    callback: Callable[[str, GraphObject | None], Any]

    kind: ClassVar[ChangeKind] = ChangeKind.OBJECT


@dataclass
class FileEvent:
    """A file change delivered to file listeners.

    Attributes:
        id: Meta object id owning the file storage
        file_name: Path of the file inside the storage
        size: New size in bytes, None if the file was deleted
        content: File content, only for listeners that asked for it
    """

    id: str
    file_name: str
    size: int | None
    content: FileContent | None = None

    @property
    def deleted(self) -> bool:
        """Check if the event reports a deletion."""
        return self.size is None


@dataclass
class FileListener:
    """Listener for file changes.

    Attributes:
        listener_id: Unique listener id
        pattern: Meta object id pattern
        callback: Called with each matching FileEvent
        file_name: File name pattern inside the storage
        with_content: Fetch the file content before delivery
    """

    listener_id: str
    pattern: str
    callback: Callable[[FileEvent], Any]
    file_name: str = "*"
    with_content: bool = False

    kind: ClassVar[ChangeKind] = ChangeKind.FILE


Listener = Union[StateListener, ObjectListener, FileListener, LogListener]


@dataclass
class _Registration:
    listener: StateListener | ObjectListener | FileListener
    id_matcher: IdPattern
    name_matcher: IdPattern | None = None

    @property
    def key(self) -> Hashable:
        return _subscription_key(self.listener)


def _subscription_key(listener: StateListener | ObjectListener | FileListener) -> Hashable:
    """Upstream subscription key of a listener."""
    if isinstance(listener, FileListener):
        return (listener.pattern, listener.file_name or "*")
    return listener.pattern


class SubscriptionRegistry:
    """Listener bookkeeping and upstream subscription control.

    Every listener id is registered for exactly one kind at a time.
    """

    def __init__(self, gateway: ObjectGraphGateway):
        """Initialize the registry.

        Args:
            gateway: Gateway receiving subscribe/unsubscribe calls
        """
        self.gateway = gateway
        self.logs = LogMultiplexer(gateway)
        self._registrations: dict[str, _Registration] = {}
        self._subscriptions: dict[ChangeKind, dict[Hashable, list[str]]] = {
            ChangeKind.STATE: {},
            ChangeKind.OBJECT: {},
            ChangeKind.FILE: {},
        }
        self._active = False

    @property
    def active(self) -> bool:
        """Check if upstream calls are enabled."""
        return self._active

    def kind_of(self, listener_id: str) -> ChangeKind | None:
        """Kind the listener is currently registered for, if any."""
        if listener_id in self.logs:
            return ChangeKind.LOG
        registration = self._registrations.get(listener_id)
        return registration.listener.kind if registration else None

    def subscriptions(self, kind: ChangeKind) -> dict[Hashable, list[str]]:
        """Snapshot of the subscription entries of one kind."""
        return {key: list(ids) for key, ids in self._subscriptions[kind].items()}

    def register(self, listener: Listener) -> None:
        """Register or update a listener.

        An empty pattern removes the listener. A listener re-registered
        with an identical pattern only has its callback and options
        replaced; a changed pattern migrates it between subscriptions; a
        changed kind tears the previous registration down first.

        Args:
            listener: Listener to register
        """
        listener_id = listener.listener_id

        if isinstance(listener, LogListener):
            self._remove_registration(listener_id)
            self.logs.add(listener)
            return

        self.logs.remove(listener_id)

        if not listener.pattern:
            self._remove_registration(listener_id)
            return

        current = self._registrations.get(listener_id)
        if current is not None and current.listener.kind != listener.kind:
            self._remove_registration(listener_id)
            current = None

        new_key = _subscription_key(listener)
        if current is not None and current.key == new_key:
            current.listener = listener
            logger.debug(f"Listener {listener_id} updated in place")
            return

        self._acquire(listener.kind, new_key, listener_id)
        if current is not None:
            self._release(listener.kind, current.key, listener_id)

        name_matcher = None
        if isinstance(listener, FileListener):
            name_matcher = compile_or_never(listener.file_name or "*", listener_id)
        registration = _Registration(
            listener=listener,
            id_matcher=compile_or_never(listener.pattern, listener_id),
            name_matcher=name_matcher,
        )
        self._registrations[listener_id] = registration
        logger.info(f"Listener {listener_id} registered for {listener.kind.value} '{listener.pattern}'")

    def unregister(self, listener_id: str) -> bool:
        """Remove a listener of any kind.

        Returns:
            True if the listener existed
        """
        if self.logs.remove(listener_id):
            return True
        return self._remove_registration(listener_id)

    def activate(self) -> None:
        """Subscribe every registered pattern upstream (once, on readiness)."""
        if self._active:
            return
        self._active = True
        count = 0
        for kind, entries in self._subscriptions.items():
            for key in entries:
                self._subscribe_upstream(kind, key)
                count += 1
        logger.info(f"Subscription registry active ({count} upstream subscription(s))")
        self.logs.activate()

    def dispatch_state(self, state_id: str, state: State | None) -> int:
        """Deliver a state change to matching state listeners.

        Returns:
            Number of listeners the change was delivered to
        """
        return self._dispatch(ChangeKind.STATE, state_id, state)

    def dispatch_object(self, object_id: str, obj: GraphObject | None) -> int:
        """Deliver an object change to matching object listeners.

        Returns:
            Number of listeners the change was delivered to
        """
        return self._dispatch(ChangeKind.OBJECT, object_id, obj)

    async def dispatch_file(self, meta_id: str, file_name: str, size: int | None) -> int:
        """Deliver a file change to matching file listeners.

        The content is read at most once per event, and only if a matching
        listener asked for it and the file was not deleted.

        Returns:
            Number of listeners the change was delivered to
        """
        matching = [
            listener_id
            for listener_id, registration in list(self._registrations.items())
            if registration.listener.kind == ChangeKind.FILE
            and registration.id_matcher(meta_id)
            and registration.name_matcher is not None
            and registration.name_matcher(file_name)
        ]
        if not matching:
            return 0

        content = None
        wants_content = any(
            self._registrations[listener_id].listener.with_content for listener_id in matching
        )
        if wants_content and size is not None:
            try:
                content = await self.gateway.read_file(meta_id, file_name)
            except Exception as e:
                logger.error(f"Failed to read {meta_id}/{file_name} for file listeners: {e}")

        delivered = 0
        for listener_id in matching:
            registration = self._registrations.get(listener_id)
            if registration is None or registration.listener.kind != ChangeKind.FILE:
                continue
            event = FileEvent(
                id=meta_id,
                file_name=file_name,
                size=size,
                content=content if registration.listener.with_content else None,
            )
            delivered += 1
            self._invoke(registration, event)
        return delivered

    def dispatch_log(self, record: LogRecord) -> int:
        """Deliver a log record to matching log listeners."""
        return self.logs.dispatch(record)

    def _dispatch(self, kind: ChangeKind, target_id: str, payload: Any) -> int:
        delivered = 0
        for listener_id in list(self._registrations):
            registration = self._registrations.get(listener_id)
            if registration is None or registration.listener.kind != kind:
                continue
            if not registration.id_matcher(target_id):
                continue
            delivered += 1
            self._invoke(registration, target_id, payload)
        logger.debug(f"Dispatched {kind.value} change of {target_id} to {delivered} listener(s)")
        return delivered

    def _invoke(self, registration: _Registration, *args: Any) -> None:
        try:
            registration.listener.callback(*args)
        except Exception:
            logger.exception(f"Listener {registration.listener.listener_id} failed")

    def _remove_registration(self, listener_id: str) -> bool:
        registration = self._registrations.pop(listener_id, None)
        if registration is None:
            return False
        self._release(registration.listener.kind, registration.key, listener_id)
        logger.info(f"Listener {listener_id} removed from {registration.listener.kind.value}")
        return True

    def _acquire(self, kind: ChangeKind, key: Hashable, listener_id: str) -> None:
        entries = self._subscriptions[kind]
        first = key not in entries
        entries.setdefault(key, []).append(listener_id)
        if first and self._active:
            self._subscribe_upstream(kind, key)

    def _release(self, kind: ChangeKind, key: Hashable, listener_id: str) -> None:
        entries = self._subscriptions[kind]
        ids = entries.get(key)
        if not ids or listener_id not in ids:
            return
        ids.remove(listener_id)
        if not ids:
            del entries[key]
            if self._active:
                self._unsubscribe_upstream(kind, key)

    def _subscribe_upstream(self, kind: ChangeKind, key: Hashable) -> None:
        try:
            if kind == ChangeKind.FILE:
                id_pattern, file_pattern = key
                self.gateway.subscribe_files(id_pattern, file_pattern)
            else:
                self.gateway.subscribe(kind, key)
        except Exception as e:
            logger.error(f"Failed to subscribe {kind.value} '{key}': {e}")

    def _unsubscribe_upstream(self, kind: ChangeKind, key: Hashable) -> None:
        try:
            if kind == ChangeKind.FILE:
                id_pattern, file_pattern = key
                self.gateway.unsubscribe_files(id_pattern, file_pattern)
            else:
                self.gateway.unsubscribe(kind, key)
        except Exception as e:
            logger.error(f"Failed to unsubscribe {kind.value} '{key}': {e}")
