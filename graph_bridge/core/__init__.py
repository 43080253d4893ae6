"""Core abstractions for the graph bridge.

This package contains the gateway Protocol, the exception hierarchy and
the models shared by every service.

Modules:
    interfaces: Protocol definition for object graph gateways
    models: Graph, control, log and projection models
"""

from graph_bridge.core.interfaces import BridgeError, ObjectGraphGateway
from graph_bridge.core.models import (
    Control,
    GraphObject,
    LogRecord,
    RoomRecord,
    State,
)

__all__ = [
    "ObjectGraphGateway",
    "BridgeError",
    "Control",
    "GraphObject",
    "LogRecord",
    "RoomRecord",
    "State",
]
