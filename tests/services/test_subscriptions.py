"""Tests for the subscription registry."""

import pytest
from unittest.mock import AsyncMock, MagicMock, call

from graph_bridge.core.models import ChangeKind, FileContent, State
from graph_bridge.services.log_multiplexer import LogListener
from graph_bridge.services.subscriptions import (
    FileListener,
    ObjectListener,
    StateListener,
    SubscriptionRegistry,
)


@pytest.fixture
def registry(recording_gateway):
    """Fixture providing an active SubscriptionRegistry."""
    registry = SubscriptionRegistry(recording_gateway)
    registry.activate()
    return registry


def noop(*args):
    return None


class TestRegistration:
    """Test suite for listener registration."""

    def test_shared_pattern_subscribes_once(self, registry, recording_gateway):
        """Test two listeners on one pattern share one upstream subscription."""
        registry.register(StateListener("n1", "zone.*", noop))
        registry.register(StateListener("n2", "zone.*", noop))

        recording_gateway.subscribe.assert_called_once_with(ChangeKind.STATE, "zone.*")
        assert registry.subscriptions(ChangeKind.STATE) == {"zone.*": ["n1", "n2"]}

    def test_last_listener_leaving_unsubscribes(self, registry, recording_gateway):
        """Test the upstream subscription closes with the last listener."""
        registry.register(StateListener("n1", "zone.*", noop))
        registry.register(StateListener("n2", "zone.*", noop))

        assert registry.unregister("n1")
        recording_gateway.unsubscribe.assert_not_called()

        assert registry.unregister("n2")
        recording_gateway.unsubscribe.assert_called_once_with(ChangeKind.STATE, "zone.*")
        assert registry.subscriptions(ChangeKind.STATE) == {}

    def test_unregister_unknown_listener(self, registry):
        """Test unregistering an unknown id reports False."""
        assert registry.unregister("missing") is False

    def test_pattern_change_migrates_listener(self, registry, recording_gateway):
        """Test a changed pattern moves the listener between subscriptions."""
        registry.register(StateListener("n1", "zone.1.*", noop))
        registry.register(StateListener("n1", "zone.2.*", noop))

        assert recording_gateway.subscribe.call_args_list == [
            call(ChangeKind.STATE, "zone.1.*"),
            call(ChangeKind.STATE, "zone.2.*"),
        ]
        recording_gateway.unsubscribe.assert_called_once_with(ChangeKind.STATE, "zone.1.*")
        assert registry.subscriptions(ChangeKind.STATE) == {"zone.2.*": ["n1"]}

    def test_same_pattern_replaces_callback(self, registry, recording_gateway):
        """Test re-registering with the same pattern only swaps the callback."""
        first = MagicMock()
        second = MagicMock()
        registry.register(StateListener("n1", "zone.*", first))
        registry.register(StateListener("n1", "zone.*", second))

        registry.dispatch_state("zone.1", State(val=1))

        recording_gateway.subscribe.assert_called_once()
        recording_gateway.unsubscribe.assert_not_called()
        first.assert_not_called()
        second.assert_called_once()

    def test_kind_change_tears_down_previous_registration(self, registry, recording_gateway):
        """Test moving a listener from states to objects releases the state pattern."""
        registry.register(StateListener("n1", "zone.*", noop))
        registry.register(ObjectListener("n1", "zone.*", noop))

        recording_gateway.unsubscribe.assert_called_once_with(ChangeKind.STATE, "zone.*")
        recording_gateway.subscribe.assert_called_with(ChangeKind.OBJECT, "zone.*")
        assert registry.kind_of("n1") == ChangeKind.OBJECT

    def test_switch_to_log_listener(self, registry, recording_gateway):
        """Test a listener re-registered for logs leaves its subscription."""
        registry.register(StateListener("n1", "zone.*", noop))
        registry.register(LogListener("n1", noop))

        recording_gateway.unsubscribe.assert_called_once_with(ChangeKind.STATE, "zone.*")
        recording_gateway.require_log.assert_called_once_with(True)
        assert registry.kind_of("n1") == ChangeKind.LOG

        registry.register(StateListener("n1", "zone.*", noop))
        recording_gateway.require_log.assert_called_with(False)
        assert registry.kind_of("n1") == ChangeKind.STATE

    def test_empty_pattern_removes_listener(self, registry, recording_gateway):
        """Test registering an empty pattern removes the listener."""
        registry.register(StateListener("n1", "zone.*", noop))
        registry.register(StateListener("n1", "", noop))

        recording_gateway.unsubscribe.assert_called_once_with(ChangeKind.STATE, "zone.*")
        assert registry.kind_of("n1") is None

    def test_registration_before_activation_is_deferred(self, recording_gateway):
        """Test nothing is subscribed upstream until activation."""
        registry = SubscriptionRegistry(recording_gateway)
        registry.register(StateListener("n1", "zone.*", noop))
        registry.register(StateListener("n2", "zone.*", noop))
        registry.register(ObjectListener("n3", "enum.rooms.*", noop))
        registry.register(StateListener("n4", "temp.*", noop))
        registry.unregister("n4")

        recording_gateway.subscribe.assert_not_called()
        recording_gateway.unsubscribe.assert_not_called()

        registry.activate()
        registry.activate()

        assert sorted(recording_gateway.subscribe.call_args_list, key=str) == sorted(
            [call(ChangeKind.STATE, "zone.*"), call(ChangeKind.OBJECT, "enum.rooms.*")], key=str
        )

    def test_file_subscription_key_includes_file_name(self, registry, recording_gateway):
        """Test file listeners share subscriptions per id and file pattern."""
        registry.register(FileListener("f1", "vis.0", noop, "*.json"))
        registry.register(FileListener("f2", "vis.0", noop, "*.json"))
        registry.register(FileListener("f3", "vis.0", noop))

        assert recording_gateway.subscribe_files.call_args_list == [
            call("vis.0", "*.json"),
            call("vis.0", "*"),
        ]

    def test_subscribe_failure_is_logged(self, registry, recording_gateway, caplog):
        """Test an upstream failure does not break registration."""
        recording_gateway.subscribe.side_effect = ConnectionError("down")

        registry.register(StateListener("n1", "zone.*", noop))

        assert registry.kind_of("n1") == ChangeKind.STATE
        assert "Failed to subscribe" in caplog.text


class TestDispatch:
    """Test suite for change dispatch."""

    def test_state_change_reaches_matching_listeners(self, registry):
        """Test a change of zone.3.switch reaches the zone.* listener only."""
        zone = MagicMock()
        other = MagicMock()
        registry.register(StateListener("n1", "zone.*", zone))
        registry.register(StateListener("n2", "temp.*", other))
        state = State(val=True, ack=True)

        delivered = registry.dispatch_state("zone.3.switch", state)

        assert delivered == 1
        zone.assert_called_once_with("zone.3.switch", state)
        other.assert_not_called()

    def test_state_listener_does_not_get_object_changes(self, registry):
        """Test dispatch respects the listener kind."""
        callback = MagicMock()
        registry.register(StateListener("n1", "zone.*", callback))

        assert registry.dispatch_object("zone.1", None) == 0
        callback.assert_not_called()

    def test_deletion_is_delivered_as_none(self, registry):
        """Test deleted objects are delivered with None."""
        callback = MagicMock()
        registry.register(ObjectListener("n1", "zone.*", callback))

        registry.dispatch_object("zone.1", None)

        callback.assert_called_once_with("zone.1", None)

    def test_failing_callback_does_not_stop_others(self, registry):
        """Test one failing listener does not affect the next."""
        failing = MagicMock(side_effect=ValueError("boom"))
        working = MagicMock()
        registry.register(StateListener("n1", "zone.*", failing))
        registry.register(StateListener("n2", "zone.*", working))

        assert registry.dispatch_state("zone.1", State(val=1)) == 2
        working.assert_called_once()

    def test_invalid_pattern_never_matches(self, registry):
        """Test a listener with an invalid pattern receives nothing."""
        callback = MagicMock()
        registry.register(StateListener("n1", 42, callback))

        assert registry.dispatch_state("42", State(val=1)) == 0
        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_file_content_read_once(self, recording_gateway):
        """Test the content is read once and only sent to listeners that want it."""
        content = FileContent(data=b"{}", mime_type="application/json")
        recording_gateway.read_file = AsyncMock(return_value=content)
        registry = SubscriptionRegistry(recording_gateway)
        registry.activate()
        with_content = [MagicMock(), MagicMock()]
        without_content = MagicMock()
        registry.register(FileListener("f1", "vis.0", with_content[0], "*.json", with_content=True))
        registry.register(FileListener("f2", "vis.*", with_content[1], with_content=True))
        registry.register(FileListener("f3", "vis.0", without_content))

        delivered = await registry.dispatch_file("vis.0", "main/views.json", 2)

        assert delivered == 3
        recording_gateway.read_file.assert_awaited_once_with("vis.0", "main/views.json")
        for callback in with_content:
            assert callback.call_args.args[0].content == content
        event = without_content.call_args.args[0]
        assert event.content is None
        assert event.size == 2

    @pytest.mark.asyncio
    async def test_file_name_filter(self, recording_gateway):
        """Test file listeners filter by file name pattern."""
        recording_gateway.read_file = AsyncMock()
        registry = SubscriptionRegistry(recording_gateway)
        callback = MagicMock()
        registry.register(FileListener("f1", "vis.0", callback, "*.json"))

        assert await registry.dispatch_file("vis.0", "img/logo.png", 10) == 0
        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_file_deletion_skips_content(self, recording_gateway):
        """Test a deleted file is reported without reading it."""
        recording_gateway.read_file = AsyncMock()
        registry = SubscriptionRegistry(recording_gateway)
        callback = MagicMock()
        registry.register(FileListener("f1", "vis.0", callback, with_content=True))

        await registry.dispatch_file("vis.0", "main/views.json", None)

        recording_gateway.read_file.assert_not_awaited()
        event = callback.call_args.args[0]
        assert event.deleted
        assert event.content is None

    @pytest.mark.asyncio
    async def test_file_read_failure_still_delivers(self, recording_gateway, caplog):
        """Test a failing content read still delivers the event."""
        recording_gateway.read_file = AsyncMock(side_effect=FileNotFoundError("gone"))
        registry = SubscriptionRegistry(recording_gateway)
        callback = MagicMock()
        registry.register(FileListener("f1", "vis.0", callback, with_content=True))

        assert await registry.dispatch_file("vis.0", "a.json", 5) == 1
        assert callback.call_args.args[0].content is None
        assert "Failed to read" in caplog.text
