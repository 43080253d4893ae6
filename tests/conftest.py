"""Pytest configuration and shared fixtures for graph bridge tests."""

from __future__ import annotations

import pytest
from unittest.mock import MagicMock

from graph_bridge.adapters.mock import DEFAULT_OBJECTS, MockGateway
from graph_bridge.config import BridgeConfig
from graph_bridge.services.bridge import GraphBridge
from graph_bridge.services.detector import ObjectSnapshot


@pytest.fixture
def mock_config() -> BridgeConfig:
    """Fixture providing bridge configuration.

    Returns:
        BridgeConfig with test values
    """
    return BridgeConfig(language="en", classify_cache_ttl=30.0, log_level="DEBUG")


@pytest.fixture
def gateway() -> MockGateway:
    """Fixture providing a mock gateway with the default object graph.

    Returns:
        MockGateway that has not signalled readiness yet
    """
    return MockGateway()


@pytest.fixture
def bridge(gateway: MockGateway, mock_config: BridgeConfig) -> GraphBridge:
    """Fixture providing a started bridge waiting for readiness.

    Call `await gateway.start()` in the test to make it ready.
    """
    bridge = GraphBridge(gateway, mock_config)
    bridge.start()
    return bridge


@pytest.fixture
def recording_gateway() -> MagicMock:
    """Fixture providing a gateway mock that only records control calls."""
    return MagicMock()


@pytest.fixture
def snapshot() -> ObjectSnapshot:
    """Fixture providing a snapshot of the default object graph."""
    return ObjectSnapshot.from_objects(DEFAULT_OBJECTS)
