"""Tests for the mock gateway."""

import pytest
from unittest.mock import MagicMock

from graph_bridge.adapters.mock import MockGateway, ObjectStore
from graph_bridge.core.interfaces import ObjectGraphGateway
from graph_bridge.core.models import ChangeKind, GraphObject
from graph_bridge.services.classifier import VIEW_END_KEY


class TestMockGateway:
    """Test suite for MockGateway."""

    def test_implements_protocol(self, gateway):
        """Test the mock satisfies the gateway protocol."""
        assert isinstance(gateway, ObjectGraphGateway)

    @pytest.mark.asyncio
    async def test_ready_signalled_once(self, gateway):
        """Test readiness callbacks run once."""
        callback = MagicMock()
        gateway.on_ready(callback)

        await gateway.start()
        await gateway.start()

        callback.assert_called_once()
        assert gateway.ready

    @pytest.mark.asyncio
    async def test_events_only_for_subscribed_patterns(self, gateway):
        """Test changes are only reported for subscribed patterns."""
        callback = MagicMock()
        gateway.on_change(ChangeKind.STATE, callback)

        await gateway.emit_state("zigbee.0.plug_1.state", True)
        callback.assert_not_called()

        gateway.subscribe(ChangeKind.STATE, "zigbee.0.*")
        await gateway.emit_state("zigbee.0.plug_1.state", True)
        callback.assert_called_once()

        gateway.unsubscribe(ChangeKind.STATE, "zigbee.0.*")
        await gateway.emit_state("zigbee.0.plug_1.state", False)
        callback.assert_called_once()

    @pytest.mark.asyncio
    async def test_async_callbacks_are_awaited(self, gateway):
        """Test awaitable callback results are awaited."""
        seen = []

        async def callback(object_id, obj):
            seen.append((object_id, obj))

        gateway.on_change(ChangeKind.OBJECT, callback)
        gateway.subscribe(ChangeKind.OBJECT, "*")

        await gateway.delete_object("zigbee.0.plug_1")

        assert seen == [("zigbee.0.plug_1", None)]

    @pytest.mark.asyncio
    async def test_failing_ids(self):
        """Test configured ids fail with ConnectionError."""
        gateway = MockGateway({"failing_ids": ["hm-rpc.0.LEQ001.1.LEVEL"]})

        with pytest.raises(ConnectionError):
            await gateway.get_state("hm-rpc.0.LEQ001.1.LEVEL")
        assert (await gateway.get_state("hm-rpc.0.LEQ001.1.ON")).val is True

    @pytest.mark.asyncio
    async def test_failure_rate(self):
        """Test a failure rate of one fails every call."""
        gateway = MockGateway({"failure_rate": 1.0})

        with pytest.raises(ConnectionError):
            await gateway.get_object("system.config")


class TestObjectStore:
    """Test suite for ObjectStore."""

    def test_returned_objects_are_copies(self):
        """Test callers cannot modify stored objects."""
        store = ObjectStore()
        obj = store.get_object("hm-rpc.0.LEQ001.1")
        obj.common.name = "changed"

        assert store.get_object("hm-rpc.0.LEQ001.1").common.name != "changed"

    def test_query_by_category_and_range(self):
        """Test view queries filter by type and id range."""
        store = ObjectStore()

        rows = store.query("channel", "hm-rpc.0.", f"hm-rpc.0.{VIEW_END_KEY}")

        assert [row.id for row in rows] == [
            "hm-rpc.0.HEQ002.4",
            "hm-rpc.0.KEQ003.1",
            "hm-rpc.0.LEQ001.1",
            "hm-rpc.0.SEQ004.1",
        ]

    def test_reset(self):
        """Test reset restores the initial graph."""
        store = ObjectStore(objects=[GraphObject(id="a.0.x", type="state")], states={}, files={})
        store.delete_object("a.0.x")
        store.write_file("a.0", "f.txt", "x")

        store.reset()

        assert store.get_object("a.0.x") is not None
        assert store.files == {}
