"""Bridge services.

Modules:
    patterns: Wildcard id pattern compilation
    request_queue: Deferred request queues drained on readiness
    subscriptions: Listener registry with shared upstream subscriptions
    log_multiplexer: Log stream fan-out with level and instance filters
    log_reader: Log file parsing
    detector: Structural control detection
    classifier: Object graph to control classification
    projector: AI-friendly room/device/control projection
    bridge: GraphBridge, the entry point tying everything together
"""

from graph_bridge.services.bridge import GraphBridge
from graph_bridge.services.classifier import ControlClassifier
from graph_bridge.services.log_multiplexer import LogListener, LogMultiplexer
from graph_bridge.services.patterns import IdPattern, compile_pattern
from graph_bridge.services.projector import project
from graph_bridge.services.request_queue import DeferredRequestQueue, RequestKind, RequestQueues
from graph_bridge.services.subscriptions import (
    FileEvent,
    FileListener,
    ObjectListener,
    StateListener,
    SubscriptionRegistry,
)

__all__ = [
    "GraphBridge",
    "ControlClassifier",
    "LogListener",
    "LogMultiplexer",
    "IdPattern",
    "compile_pattern",
    "project",
    "DeferredRequestQueue",
    "RequestKind",
    "RequestQueues",
    "FileEvent",
    "FileListener",
    "ObjectListener",
    "StateListener",
    "SubscriptionRegistry",
]
