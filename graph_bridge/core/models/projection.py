"""AI-friendly projection and catalog models.

The projection is the nested room -> device -> controls view handed to
language-model consumers. The catalog models describe enum listings and
adapter instances.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ControlBinding(BaseModel):
    """One normalized control of a device.

    Attributes:
        state_id: State to read or write
        control_type: Normalized control type (power, dimmer, ...)
        value_type: Value type of the state (boolean, number, string, ...)
        writable: Whether the state accepts writes
        readable: Whether the state can be read
        min: Lower bound for numeric values
        max: Upper bound for numeric values
        unit: Unit of the value
        states: Value labels, if the state declares any
        role: Role of the state
    """

    state_id: str
    control_type: str
    value_type: str = "boolean"
    writable: bool = True
    readable: bool = True
    min: float | None = None
    max: float | None = None
    unit: str | None = None
    states: Any = None
    role: str | None = None


class DeviceRecord(BaseModel):
    """A classified control reshaped for AI consumers."""

    device_name: str
    device_type: str
    friendly_device_names: list[str] = Field(default_factory=list)
    room: str | None = None
    functionality: str | None = None
    icon: str | None = None
    controls: dict[str, ControlBinding] = Field(default_factory=dict)


class RoomRecord(BaseModel):
    """Devices grouped under one room name."""

    room_name: str
    devices_in_room: list[DeviceRecord] = Field(default_factory=list)


class EnumItem(BaseModel):
    """A member object of an enum with its resolved metadata."""

    id: str
    type: str
    name: str
    color: str | None = None
    icon: str | None = None
    state_type: str | None = None
    min: float | None = None
    max: float | None = None
    unit: str | None = None
    role: str | None = None
    step: float | None = None


class EnumResponse(BaseModel):
    """A room or function enum with its resolved members."""

    id: str
    name: str
    color: str | None = None
    icon: str | None = None
    items: list[EnumItem] = Field(default_factory=list)


class InstanceInfo(BaseModel):
    """Adapter instance choice.

    Attributes:
        value: Instance namespace ("" selects any instance)
        name: Display name
    """

    value: str
    name: str
