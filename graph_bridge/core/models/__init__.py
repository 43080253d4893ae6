"""Models exchanged between the bridge, its gateway and its consumers.

Graph objects and states mirror the object graph, control models are the
classifier's output, and projection models are the reshaped views handed
to external consumers.
"""

from graph_bridge.core.models.control import (
    Control,
    ControlObject,
    ControlType,
    DetectedState,
    DeviceType,
    EnumRef,
    SmartName,
    StateMeta,
)
from graph_bridge.core.models.graph import (
    ChangeKind,
    FileContent,
    GraphObject,
    ObjectCommon,
    State,
    StateValue,
    TranslatedText,
    ViewRow,
    last_segment,
    parent_of,
)
from graph_bridge.core.models.log import LogLevel, LogRecord
from graph_bridge.core.models.projection import (
    ControlBinding,
    DeviceRecord,
    EnumItem,
    EnumResponse,
    InstanceInfo,
    RoomRecord,
)

__all__ = [
    "ChangeKind",
    "FileContent",
    "GraphObject",
    "ObjectCommon",
    "State",
    "StateValue",
    "TranslatedText",
    "ViewRow",
    "last_segment",
    "parent_of",
    "LogLevel",
    "LogRecord",
    "Control",
    "ControlObject",
    "ControlType",
    "DetectedState",
    "DeviceType",
    "EnumRef",
    "SmartName",
    "StateMeta",
    "ControlBinding",
    "DeviceRecord",
    "EnumItem",
    "EnumResponse",
    "InstanceInfo",
    "RoomRecord",
]
