"""Protocol definitions for the object graph gateway.

The bridge depends only on this Protocol, so any host platform (or the
in-memory mock) can be plugged in without inheritance.
"""

from graph_bridge.core.interfaces.gateway import (
    BridgeError,
    BridgeNotReadyError,
    GatewayRequestError,
    ObjectGraphGateway,
    PatternError,
    QueueDrainedError,
)

__all__ = [
    "ObjectGraphGateway",
    "BridgeError",
    "BridgeNotReadyError",
    "GatewayRequestError",
    "PatternError",
    "QueueDrainedError",
]
