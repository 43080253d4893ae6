"""Configuration for the graph bridge."""

from graph_bridge.config.settings import BridgeConfig

__all__ = ["BridgeConfig"]
