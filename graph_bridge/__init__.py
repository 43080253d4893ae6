"""Bridge between a home-automation object graph and workflow consumers."""

__version__ = "0.1.0"
