"""Object graph models.

Defines the objects, states and view rows exchanged with the object
graph gateway. Objects form an implicit tree through their dot-segmented
ids: a state's channel is its id without the last segment, and the
channel's device is one level further up.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

# Display text, either a plain string or a mapping of language -> text
TranslatedText = Union[str, dict[str, str]]

StateValue = Union[bool, int, float, str, None]


class ChangeKind(str, Enum):
    """Kinds of change feeds emitted by the gateway."""

    STATE = "state"
    OBJECT = "object"
    FILE = "file"
    LOG = "log"


def parent_of(object_id: str) -> str:
    """Return the id of the parent object (last segment removed)."""
    parts = (object_id or "").split(".")
    parts.pop()
    return ".".join(parts)


def last_segment(object_id: str) -> str:
    """Return the last dot-separated segment of an id."""
    return (object_id or "").split(".")[-1]


class ObjectCommon(BaseModel):
    """The `common` block of a graph object.

    Only the fields the bridge reads are declared; everything else the
    gateway sends is kept as extra data so writes round-trip untouched.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: TranslatedText | None = None
    type: str | None = Field(default=None, description="Value type of a state")
    role: str | None = None
    unit: str | None = None
    min: float | None = None
    max: float | None = None
    step: float | None = None
    states: Any = Field(default=None, description="Value labels")
    read: bool | None = None
    write: bool | None = None
    icon: str | None = None
    color: str | None = None
    smart_name: Any = Field(default=None, alias="smartName")
    members: list[str] | None = Field(default=None, description="Enum member ids")
    title: TranslatedText | None = None
    title_lang: TranslatedText | None = Field(default=None, alias="titleLang")
    language: str | None = None


class GraphObject(BaseModel):
    """An entry of the object graph (state, channel, device, enum, ...).

    Examples:
        >>> GraphObject(
        ...     id="hm-rpc.0.LEQ001.1.LEVEL",
        ...     type="state",
        ...     common={"name": "Level", "type": "number", "role": "level.dimmer"},
        ... )
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Dot-segmented object id")
    type: str = Field(..., description="state, channel, device, enum, instance, ...")
    common: ObjectCommon = Field(default_factory=ObjectCommon)
    native: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_state(self) -> bool:
        """Check if object is a state."""
        return self.type == "state"

    @property
    def is_channel(self) -> bool:
        """Check if object is a channel."""
        return self.type == "channel"

    @property
    def is_device(self) -> bool:
        """Check if object is a device."""
        return self.type == "device"

    @property
    def is_enum(self) -> bool:
        """Check if object is an enum."""
        return self.type == "enum"

    @property
    def is_room(self) -> bool:
        """Check if object is a room enum."""
        return self.is_enum and self.id.startswith("enum.rooms.")

    @property
    def is_functionality(self) -> bool:
        """Check if object is a function enum."""
        return self.is_enum and self.id.startswith("enum.functions.")

    def to_dict(self) -> dict[str, Any]:
        """Dump the object in gateway shape (aliases, no empty fields)."""
        return self.model_dump(by_alias=True, exclude_none=True)


def _now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class State(BaseModel):
    """Live value of a state object.

    Attributes:
        val: Current value (null, boolean, number or string)
        ts: Timestamp of the last update in epoch milliseconds
        ack: Whether the value was confirmed by the device
    """

    val: StateValue = None
    ts: int = Field(default_factory=_now_ms)
    ack: bool = False


class ViewRow(BaseModel):
    """One row returned by a gateway view query."""

    id: str
    value: GraphObject


class FileContent(BaseModel):
    """File payload read from the gateway file storage."""

    data: bytes | str
    mime_type: str | None = None
