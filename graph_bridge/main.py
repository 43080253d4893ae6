"""Graph bridge entry point.

Runs the bridge against the in-memory mock gateway and prints the
classified room/device/control view as JSON. Useful for inspecting how
an object graph is classified without a running host.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys

from pythonjsonlogger import jsonlogger

from graph_bridge.adapters.mock import MockGateway
from graph_bridge.config import BridgeConfig
from graph_bridge.core.interfaces import ObjectGraphGateway
from graph_bridge.services.bridge import GraphBridge


def setup_logging(log_level: str = "INFO") -> None:
    """Configure structured JSON logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    formatter = jsonlogger.JsonFormatter(  # type: ignore[attr-defined]
        "%(asctime)s %(name)s %(levelname)s %(message)s",
        rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
    )

    # Logs go to stderr, stdout carries the JSON result
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())


def create_bridge(gateway: ObjectGraphGateway, config: BridgeConfig | None = None) -> GraphBridge:
    """Create a bridge and install its callbacks on the gateway.

    Args:
        gateway: Object graph gateway
        config: Bridge configuration (from environment if None)

    Returns:
        Started GraphBridge, waiting for gateway readiness
    """
    bridge = GraphBridge(gateway, config or BridgeConfig.from_env())
    bridge.start()
    return bridge


async def run(config: BridgeConfig) -> list[dict]:
    """Classify the mock object graph.

    The classification is requested before the gateway is ready, so it
    goes through the deferred queue like any early request would.
    """
    logger = logging.getLogger(__name__)

    gateway = MockGateway()
    bridge = create_bridge(gateway, config)
    pending = bridge.classify(with_icons=True)

    await gateway.start()
    rooms = await pending
    logger.info(f"Classified {sum(len(room.devices_in_room) for room in rooms)} device(s) in {len(rooms)} room(s)")
    return [room.model_dump(exclude_none=True) for room in rooms]


def main() -> None:
    """Run the classification demo and print the result."""
    config = BridgeConfig.from_env()
    setup_logging(config.log_level)
    rooms = asyncio.run(run(config))
    print(json.dumps(rooms, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
