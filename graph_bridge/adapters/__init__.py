"""Gateway adapters.

Concrete implementations of ObjectGraphGateway.
"""
