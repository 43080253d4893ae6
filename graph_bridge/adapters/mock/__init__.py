"""Mock gateway for development and testing."""

from graph_bridge.adapters.mock.adapter import MockGateway
from graph_bridge.adapters.mock.fixtures import DEFAULT_LOG_TEXT, DEFAULT_OBJECTS, DEFAULT_STATES
from graph_bridge.adapters.mock.object_store import ObjectStore

__all__ = [
    "MockGateway",
    "ObjectStore",
    "DEFAULT_LOG_TEXT",
    "DEFAULT_OBJECTS",
    "DEFAULT_STATES",
]
