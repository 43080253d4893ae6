"""Control classification models.

A control is one controllable physical function (a dimmer, a lock, a
thermostat, ...) reconstructed from one or more states of the object
graph. These models are the classifier's output and the input of the
AI-friendly projection.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from graph_bridge.core.models.graph import TranslatedText


class DeviceType(str, Enum):
    """Closed vocabulary of device shapes the classifier recognizes."""

    AIR_CONDITION = "airCondition"
    BLIND = "blind"
    BUTTON = "button"
    CIE = "cie"
    CT = "ct"
    DIMMER = "dimmer"
    DOOR = "door"
    FIRE_ALARM = "fireAlarm"
    FLOOD_ALARM = "floodAlarm"
    GATE = "gate"
    HUE = "hue"
    HUMIDITY = "humidity"
    ILLUMINANCE = "illuminance"
    INFO = "info"
    LIGHT = "light"
    LOCK = "lock"
    MOTION = "motion"
    RGB = "rgb"
    RGB_SINGLE = "rgbSingle"
    RGBW_SINGLE = "rgbwSingle"
    SLIDER = "slider"
    SOCKET = "socket"
    TEMPERATURE = "temperature"
    THERMOSTAT = "thermostat"
    VACUUM_CLEANER = "vacuumCleaner"
    VOLUME = "volume"
    VOLUME_GROUP = "volumeGroup"
    WINDOW = "window"
    WINDOW_TILT = "windowTilt"


class ControlType(str, Enum):
    """Normalized control vocabulary exposed in the projection."""

    POWER = "power"
    DIMMER = "dimmer"
    BLIND_POSITION = "blindPosition"
    STOP = "stop"
    OPENED_CLOSED = "openedClosed"
    ALARM = "alarm"
    COLOR = "color"
    COLOR_RED = "colorRed"
    COLOR_GREEN = "colorGreen"
    COLOR_BLUE = "colorBlue"
    COLOR_WHITE = "colorWhite"
    COLOR_TEMPERATURE = "colorTemperature"
    OPEN_CLOSE = "openClose"
    OPEN = "open"
    CLOSE = "close"
    FAN_SPEED = "fanSpeed"
    BOOST_MODE = "boostMode"
    SWING_POSITION = "swingPosition"
    SATURATION = "saturation"
    SWING_ON_OFF = "swingOnOff"
    ACTUAL_TEMPERATURE = "actualTemperature"
    HUMIDITY = "humidity"
    ILLUMINANCE = "illuminance"
    LEVEL = "level"
    VOLUME = "volume"
    TARGET_TEMPERATURE = "targetTemperature"
    LOCK = "lock"
    VALVE = "valve"


class SmartName(BaseModel, frozen=True):
    """Per-object smart-name annotation, resolved once at ingestion.

    The raw annotation comes in several shapes (missing, `false`, the
    string "ignore", a plain string, or a per-language mapping with
    optional `smartType`, `byON` and `toggle` keys). `from_raw` folds all
    of them into one tagged value so downstream code only checks `kind`.

    Attributes:
        kind: missing, ignored, plain or detailed
        names: Display string per language (plain strings land under 'en')
        smart_type: Explicit control type tag, if given
        by_on: Value to write when switching on, if given
        toggle: Whether the control should toggle instead of set
    """

    kind: Literal["missing", "ignored", "plain", "detailed"] = "missing"
    names: dict[str, str] = Field(default_factory=dict)
    smart_type: str | None = None
    by_on: str | None = None
    toggle: bool | None = None

    @classmethod
    def from_raw(cls, raw: Any) -> SmartName:
        """Resolve a raw smart-name annotation.

        Args:
            raw: Value of `common.smartName` as stored in the graph

        Returns:
            Resolved SmartName
        """
        if raw is None:
            return cls()
        if raw is False or raw == "ignore":
            return cls(kind="ignored")
        if isinstance(raw, str):
            return cls(kind="plain", names={"en": raw})
        if isinstance(raw, dict):
            names = {
                key: value
                for key, value in raw.items()
                if key not in ("smartType", "byON", "toggle") and isinstance(value, str)
            }
            by_on = raw.get("byON")
            return cls(
                kind="detailed",
                names=names,
                smart_type=raw.get("smartType") or None,
                by_on=str(by_on) if by_on is not None else None,
                toggle=raw.get("toggle"),
            )
        return cls()

    @property
    def is_ignored(self) -> bool:
        """Check if the object is excluded from classification."""
        return self.kind == "ignored"

    def display_name(self, language: str) -> str | None:
        """Smart name in `language`, falling back to English then German."""
        name = self.names.get(language) or self.names.get("en") or self.names.get("de")
        if name in (None, "", "ignore"):
            return None
        return name

    def is_valid(self, language: str) -> bool:
        """Check if the smart name makes its object an explicit control."""
        if self.kind in ("missing", "ignored"):
            return False
        return self.display_name(language) is not None


class StateMeta(BaseModel):
    """Live metadata copied from a bound state's `common` block."""

    name: TranslatedText | None = None
    type: str | None = None
    role: str | None = None
    unit: str | None = None
    min: float | None = None
    max: float | None = None
    states: Any = None
    icon: str | None = None
    color: str | None = None


class DetectedState(BaseModel):
    """A state bound into one slot of a control.

    Attributes:
        name: Slot name inside the control (SET, ACTUAL, ON, ...)
        id: Bound state id
        default_role: Role the slot expects
        default_unit: Unit used when the state declares none
        required: Whether the slot must be filled for the control to exist
        write: Whether the slot is written to (None if unspecified)
        read: Whether the slot is read from
        indicator: Whether the slot is a maintenance indicator
        common: Live metadata of the bound state
        smart_name: Smart name of the bound state
    """

    name: str
    id: str
    default_role: str | None = None
    default_unit: str | None = None
    required: bool = False
    write: bool | None = None
    read: bool = True
    indicator: bool = False
    common: StateMeta = Field(default_factory=StateMeta)
    smart_name: SmartName = Field(default_factory=SmartName)


class ControlObject(BaseModel):
    """The graph object that owns a control."""

    id: str
    type: str
    common: StateMeta = Field(default_factory=StateMeta)
    smart_name: SmartName = Field(default_factory=SmartName)
    auto_detected: bool = False
    toggle: bool | None = None


class EnumRef(BaseModel):
    """A room or function enum a control is assigned to."""

    id: str
    name: TranslatedText | None = None
    icon: str | None = None
    color: str | None = None


class Control(BaseModel):
    """A classifier-produced controllable unit.

    Attributes:
        type: Device shape from the closed DeviceType vocabulary
        smart_type: Smart type tag that selected the template (explicit controls)
        states: Bound states, one per filled slot
        object: Owning graph object
        room: Room enum the control belongs to, if any
        functionality: Function enum the control belongs to, if any
        group_names: Display names of the control
    """

    type: DeviceType
    smart_type: str | None = None
    states: list[DetectedState] = Field(default_factory=list)
    object: ControlObject
    room: EnumRef | None = None
    functionality: EnumRef | None = None
    group_names: list[str] = Field(default_factory=list)

    @property
    def primary_state_id(self) -> str | None:
        """Id of the first required state, or the first bound state."""
        for state in self.states:
            if state.required:
                return state.id
        return self.states[0].id if self.states else None

    @property
    def state_ids(self) -> list[str]:
        """Ids of all bound states."""
        return [state.id for state in self.states]
