"""Structural control detection: pattern table and detector."""

from graph_bridge.services.detector.detector import (
    CONTROL_OWNER_TYPES,
    DetectionMatch,
    ObjectSnapshot,
    StructuralDetector,
)
from graph_bridge.services.detector.patterns import (
    INDICATORS,
    PATTERNS,
    ControlPattern,
    SlotSpec,
    find_pattern,
    find_template,
)

__all__ = [
    "CONTROL_OWNER_TYPES",
    "DetectionMatch",
    "ObjectSnapshot",
    "StructuralDetector",
    "INDICATORS",
    "PATTERNS",
    "ControlPattern",
    "SlotSpec",
    "find_pattern",
    "find_template",
]
