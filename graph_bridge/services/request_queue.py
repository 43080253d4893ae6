"""Deferred request queue.

Operations issued before the gateway is ready are parked here and
settled in arrival order once readiness is signalled. A queue drains at
most once; afterwards operations run directly and never reach it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

from graph_bridge.core.interfaces.gateway import QueueDrainedError

logger = logging.getLogger(__name__)


class RequestKind(str, Enum):
    """One queue per kind of deferred operation."""

    READ_STATE = "read_state"
    WRITE_STATE = "write_state"
    READ_OBJECT = "read_object"
    WRITE_OBJECT = "write_object"
    READ_FILE = "read_file"
    WRITE_FILE = "write_file"
    READ_LOGS = "read_logs"
    WRITE_LOG = "write_log"
    LIST_INSTANCES = "list_instances"
    READ_ENUMS = "read_enums"
    CLASSIFY = "classify"


@dataclass
class QueuedRequest:
    """A parked operation and the future its caller awaits."""

    operation: Callable[..., Awaitable[Any]]
    args: tuple[Any, ...]
    future: asyncio.Future[Any]


@dataclass
class DeferredRequestQueue:
    """FIFO of operations waiting for readiness.

    Attributes:
        name: Queue name used in logs and errors
    """

    name: str
    _requests: list[QueuedRequest] = field(default_factory=list)
    _drained: bool = False

    @property
    def drained(self) -> bool:
        """Check if the queue has been drained."""
        return self._drained

    def __len__(self) -> int:
        return len(self._requests)

    def submit(self, operation: Callable[..., Awaitable[Any]], *args: Any) -> asyncio.Future[Any]:
        """Park an operation until the queue drains.

        Must be called from a running event loop.

        Args:
            operation: Coroutine function to run on drain
            *args: Arguments for the operation

        Returns:
            Future settled with the operation's result or exception

        Raises:
            QueueDrainedError: If the queue has already drained
        """
        if self._drained:
            raise QueueDrainedError(self.name)
        future = asyncio.get_running_loop().create_future()
        self._requests.append(QueuedRequest(operation=operation, args=args, future=future))
        logger.debug(f"Queued {self.name} request ({len(self._requests)} pending)")
        return future

    async def drain(self) -> int:
        """Run every parked operation in arrival order.

        Each operation settles only its own future; a failure does not
        stop the remaining operations. Calling drain a second time is a
        no-op.

        Returns:
            Number of operations that were run
        """
        if self._drained:
            return 0
        self._drained = True
        requests, self._requests = self._requests, []
        if requests:
            logger.info(f"Draining {len(requests)} queued {self.name} request(s)")

        for request in requests:
            try:
                result = await request.operation(*request.args)
            except Exception as e:
                logger.warning(f"Queued {self.name} request failed: {e}")
                if not request.future.done():
                    request.future.set_exception(e)
            else:
                if not request.future.done():
                    request.future.set_result(result)
        return len(requests)


class RequestQueues:
    """The set of per-kind queues owned by the bridge."""

    def __init__(self) -> None:
        self._queues = {kind: DeferredRequestQueue(kind.value) for kind in RequestKind}

    def __getitem__(self, kind: RequestKind) -> DeferredRequestQueue:
        return self._queues[kind]

    @property
    def pending(self) -> int:
        """Total number of parked operations."""
        return sum(len(queue) for queue in self._queues.values())

    async def drain_all(self) -> int:
        """Drain all queues concurrently (each one sequentially).

        Returns:
            Total number of operations that were run
        """
        counts = await asyncio.gather(*(queue.drain() for queue in self._queues.values()))
        return sum(counts)
