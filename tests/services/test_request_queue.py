"""Tests for the deferred request queue."""

import asyncio

import pytest

from graph_bridge.core.interfaces import QueueDrainedError
from graph_bridge.services.request_queue import DeferredRequestQueue, RequestKind, RequestQueues


class TestDeferredRequestQueue:
    """Test suite for DeferredRequestQueue."""

    @pytest.mark.asyncio
    async def test_operations_run_in_arrival_order(self):
        """Test queued operations run in the order they were submitted."""
        queue = DeferredRequestQueue("read_state")
        calls = []

        async def operation(value):
            calls.append(value)
            return value * 2

        futures = [queue.submit(operation, value) for value in (1, 2, 3)]
        assert len(queue) == 3
        assert calls == []

        ran = await queue.drain()

        assert ran == 3
        assert calls == [1, 2, 3]
        assert [future.result() for future in futures] == [2, 4, 6]

    @pytest.mark.asyncio
    async def test_failure_settles_only_its_own_future(self):
        """Test a failing operation does not affect the others."""
        queue = DeferredRequestQueue("write_state")

        async def fail():
            raise ConnectionError("gateway down")

        async def succeed():
            return "ok"

        first = queue.submit(fail)
        second = queue.submit(succeed)
        await queue.drain()

        with pytest.raises(ConnectionError):
            await first
        assert await second == "ok"

    @pytest.mark.asyncio
    async def test_each_operation_runs_exactly_once(self):
        """Test a second drain does not run anything again."""
        queue = DeferredRequestQueue("classify")
        calls = []

        async def operation():
            calls.append(1)

        queue.submit(operation)
        assert await queue.drain() == 1
        assert await queue.drain() == 0
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_submit_after_drain_raises(self):
        """Test a drained queue refuses new operations."""
        queue = DeferredRequestQueue("read_object")
        await queue.drain()

        async def operation():
            return None

        assert queue.drained
        with pytest.raises(QueueDrainedError):
            queue.submit(operation)

    @pytest.mark.asyncio
    async def test_cancelled_future_is_left_alone(self):
        """Test a caller that gave up does not break draining."""
        queue = DeferredRequestQueue("read_file")

        async def operation():
            return 1

        future = queue.submit(operation)
        future.cancel()

        assert await queue.drain() == 1
        assert future.cancelled()

    def test_submit_outside_event_loop_raises(self):
        """Test submitting requires a running event loop."""
        queue = DeferredRequestQueue("read_logs")

        async def operation():
            return None

        with pytest.raises(RuntimeError):
            queue.submit(operation)


class TestRequestQueues:
    """Test suite for RequestQueues."""

    @pytest.mark.asyncio
    async def test_one_queue_per_kind(self):
        """Test every request kind has its own queue."""
        queues = RequestQueues()

        for kind in RequestKind:
            assert queues[kind].name == kind.value

    @pytest.mark.asyncio
    async def test_drain_all(self):
        """Test drain_all settles every queue."""
        queues = RequestQueues()

        async def operation(value):
            await asyncio.sleep(0)
            return value

        a = queues[RequestKind.READ_STATE].submit(operation, "a")
        b = queues[RequestKind.CLASSIFY].submit(operation, "b")
        assert queues.pending == 2

        assert await queues.drain_all() == 2
        assert queues.pending == 0
        assert (await a, await b) == ("a", "b")
