"""AI-friendly projection of classified controls.

Reshapes controls into rooms of devices, each device exposing its states
under normalized control types (power, dimmer, targetTemperature, ...)
so that a language model can pick the state to read or write without
knowing the underlying device shapes.
"""

from __future__ import annotations

import logging

from graph_bridge.core.models.control import Control, ControlType, DetectedState, DeviceType
from graph_bridge.core.models.projection import ControlBinding, DeviceRecord, RoomRecord
from graph_bridge.services.smart_names import display_name

logger = logging.getLogger(__name__)

NO_ROOM = "No room"

_CONTROL_TYPES = {control_type.value for control_type in ControlType}

# Shared by all light patterns
_LIGHT_SLOTS = {
    "DIMMER": ControlType.DIMMER,
    "BRIGHTNESS": ControlType.DIMMER,
    "TEMPERATURE": ControlType.COLOR_TEMPERATURE,
    "ON": ControlType.POWER,
}

SLOT_CONTROL_TYPES: dict[DeviceType, dict[str, ControlType]] = {
    DeviceType.AIR_CONDITION: {
        "SET": ControlType.TARGET_TEMPERATURE,
        "ACTUAL": ControlType.ACTUAL_TEMPERATURE,
        "SPEED": ControlType.FAN_SPEED,
        "POWER": ControlType.POWER,
        "HUMIDITY": ControlType.HUMIDITY,
        "BOOST": ControlType.BOOST_MODE,
    },
    DeviceType.BLIND: {
        "SET": ControlType.BLIND_POSITION,
        "STOP": ControlType.STOP,
        "OPEN": ControlType.OPEN,
        "CLOSE": ControlType.CLOSE,
    },
    DeviceType.CIE: {"CIE": ControlType.COLOR, **_LIGHT_SLOTS},
    DeviceType.CT: dict(_LIGHT_SLOTS),
    DeviceType.DIMMER: {"SET": ControlType.DIMMER, "ON": ControlType.POWER},
    DeviceType.DOOR: {"ACTUAL": ControlType.OPENED_CLOSED},
    DeviceType.FIRE_ALARM: {"ACTUAL": ControlType.ALARM},
    DeviceType.FLOOD_ALARM: {"ACTUAL": ControlType.ALARM},
    DeviceType.GATE: {"SET": ControlType.OPEN_CLOSE, "STOP": ControlType.STOP},
    DeviceType.HUE: {"HUE": ControlType.COLOR, "SATURATION": ControlType.SATURATION, **_LIGHT_SLOTS},
    DeviceType.HUMIDITY: {"ACTUAL": ControlType.HUMIDITY},
    DeviceType.ILLUMINANCE: {"ACTUAL": ControlType.ILLUMINANCE},
    DeviceType.SLIDER: {"SET": ControlType.LEVEL},
    DeviceType.LIGHT: {"SET": ControlType.POWER},
    DeviceType.LOCK: {"SET": ControlType.LOCK, "OPEN": ControlType.OPEN},
    DeviceType.MOTION: {"ACTUAL": ControlType.ALARM},
    DeviceType.RGB: {
        "RED": ControlType.COLOR_RED,
        "GREEN": ControlType.COLOR_GREEN,
        "BLUE": ControlType.COLOR_BLUE,
        "WHITE": ControlType.COLOR_WHITE,
        **_LIGHT_SLOTS,
    },
    DeviceType.RGB_SINGLE: {"RGB": ControlType.COLOR, **_LIGHT_SLOTS},
    DeviceType.RGBW_SINGLE: {"RGBW": ControlType.COLOR, **_LIGHT_SLOTS},
    DeviceType.SOCKET: {"SET": ControlType.POWER},
    DeviceType.TEMPERATURE: {"ACTUAL": ControlType.ACTUAL_TEMPERATURE},
    DeviceType.THERMOSTAT: {
        "ACTUAL": ControlType.ACTUAL_TEMPERATURE,
        "SET": ControlType.TARGET_TEMPERATURE,
        "HUMIDITY": ControlType.HUMIDITY,
        "BOOST": ControlType.BOOST_MODE,
        "POWER": ControlType.POWER,
    },
    DeviceType.VACUUM_CLEANER: {"POWER": ControlType.POWER},
    DeviceType.VOLUME: {"SET": ControlType.VOLUME},
    DeviceType.VOLUME_GROUP: {"SET": ControlType.VOLUME},
    DeviceType.WINDOW: {"ACTUAL": ControlType.OPENED_CLOSED},
    DeviceType.WINDOW_TILT: {"ACTUAL": ControlType.OPENED_CLOSED},
}


def control_type_for(device_type: DeviceType, state: DetectedState) -> str:
    """Normalized control type of a bound state.

    An explicit smart type on the state wins when it names a known
    control type; otherwise the type is derived from the device type and
    the slot name, falling back to the slot name itself.

    Args:
        device_type: Type of the control the state belongs to
        state: Bound state

    Returns:
        Control type string
    """
    smart_type = state.smart_name.smart_type
    if smart_type in _CONTROL_TYPES:
        return smart_type

    if device_type == DeviceType.AIR_CONDITION and state.name == "SWING":
        if state.common.type == "boolean":
            return ControlType.SWING_ON_OFF.value
        if state.common.type == "number":
            return ControlType.SWING_POSITION.value
        return state.name

    mapped = SLOT_CONTROL_TYPES.get(device_type, {}).get(state.name)
    return mapped.value if mapped else state.name


def _bounded(value: float | None) -> float | None:
    return value if isinstance(value, (int, float)) and not isinstance(value, bool) else None


def control_binding(control_type: str, state: DetectedState) -> ControlBinding:
    """Describe one bound state for consumers."""
    return ControlBinding(
        state_id=state.id,
        control_type=control_type,
        value_type=state.common.type or "boolean",
        writable=state.write is not False,
        readable=state.read is not False,
        min=_bounded(state.common.min),
        max=_bounded(state.common.max),
        unit=state.common.unit or state.default_unit,
        states=state.common.states,
        role=state.common.role or state.default_role,
    )


def device_record(control: Control, language: str, with_icons: bool = False) -> DeviceRecord:
    """Reshape one control into a device record."""
    room = (
        display_name(control.room.name, language, control.room.id) if control.room else NO_ROOM
    )
    functionality = (
        display_name(control.functionality.name, language, control.functionality.id)
        if control.functionality
        else None
    )

    controls: dict[str, ControlBinding] = {}
    for state in control.states:
        control_type = control_type_for(control.type, state)
        controls[control_type] = control_binding(control_type, state)

    return DeviceRecord(
        device_name=display_name(control.object.common.name, language, control.object.id),
        device_type=control.type.value,
        friendly_device_names=list(control.group_names),
        room=room,
        functionality=functionality,
        icon=control.object.common.icon if with_icons else None,
        controls=controls,
    )


def project(controls: list[Control], language: str, with_icons: bool = False) -> list[RoomRecord]:
    """Group controls into rooms for AI consumers.

    Rooms keep the order in which they are first seen; controls without
    a room are collected under "No room".

    Args:
        controls: Classified controls
        language: Language for display names
        with_icons: Include device icons

    Returns:
        Rooms with their devices
    """
    rooms: dict[str, RoomRecord] = {}
    for control in controls:
        device = device_record(control, language, with_icons)
        room = rooms.get(device.room)
        if room is None:
            room = rooms[device.room] = RoomRecord(room_name=device.room)
        room.devices_in_room.append(device)

    logger.debug(f"Projected {len(controls)} control(s) into {len(rooms)} room(s)")
    return list(rooms.values())
