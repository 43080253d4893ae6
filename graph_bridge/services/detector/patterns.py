"""Structural control patterns.

Each pattern describes one device shape as a list of slots. A slot is
filled by a state whose role, value type and write flag fit; required
slots must all be filled for the pattern to match. Indicator slots are
maintenance signals (unreachable, low battery, ...) that can also be
recognized by the last segment of the state id.

The table is ordered: detection tries patterns top to bottom and the
first match wins, so more specific shapes come first.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from graph_bridge.core.models.control import DeviceType
from graph_bridge.core.models.graph import GraphObject, last_segment


@dataclass(frozen=True)
class SlotSpec:
    """One slot of a control pattern.

    Attributes:
        name: Slot name (SET, ACTUAL, ON, UNREACH, ...)
        role: Regular expression the state role must match (None for any)
        required: Whether the pattern needs this slot filled
        value_type: Expected value type (None for any)
        write: True requires a writable state, False a read-only one
        read: Whether the slot is read from
        indicator: Whether the slot is a maintenance indicator
        default_role: Role reported when the state has none
        default_unit: Unit reported when the state has none
        suffix: Last id segment that identifies an indicator
    """

    name: str
    role: str | None = None
    required: bool = False
    value_type: str | None = None
    write: bool | None = None
    read: bool = True
    indicator: bool = False
    default_role: str | None = None
    default_unit: str | None = None
    suffix: str | None = None
    _role_re: re.Pattern[str] | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.role is not None:
            object.__setattr__(self, "_role_re", re.compile(self.role))

    def role_matches(self, role: str | None) -> bool:
        """Check the role expression against a state role."""
        if self._role_re is None:
            return True
        return bool(role) and self._role_re.search(role) is not None

    def suffix_matches(self, state_id: str) -> bool:
        """Check the indicator naming convention against a state id."""
        return self.indicator and last_segment(state_id) == (self.suffix or self.name)

    def accepts(self, obj: GraphObject) -> bool:
        """Check if a state object can fill this slot.

        Args:
            obj: Candidate object

        Returns:
            True if type, role, value type and write flag all agree
        """
        if not obj.is_state:
            return False
        common = obj.common
        if not self.role_matches(common.role) and not self.suffix_matches(obj.id):
            return False
        if self.value_type and common.type not in (None, "mixed", self.value_type):
            return False
        if self.write is True and common.write is False:
            return False
        if self.write is False and common.write is True:
            return False
        return True


@dataclass(frozen=True)
class ControlPattern:
    """A device shape: its type and its ordered slots."""

    type: DeviceType
    slots: tuple[SlotSpec, ...]

    @property
    def required_slots(self) -> list[SlotSpec]:
        """Slots that must be filled."""
        return [slot for slot in self.slots if slot.required]

    @property
    def optional_slots(self) -> list[SlotSpec]:
        """Non-indicator slots that may be filled."""
        return [slot for slot in self.slots if not slot.required and not slot.indicator]

    @property
    def indicator_slots(self) -> list[SlotSpec]:
        """Maintenance indicator slots."""
        return [slot for slot in self.slots if slot.indicator]


def _slot(name: str, role: str | None, **kwargs) -> SlotSpec:
    return SlotSpec(name=name, role=role, **kwargs)


def _indicator(name: str, role: str, default_role: str, suffix: str | None = None) -> SlotSpec:
    return SlotSpec(
        name=name,
        role=role,
        value_type="boolean",
        indicator=True,
        default_role=default_role,
        suffix=suffix,
    )


INDICATORS: tuple[SlotSpec, ...] = (
    _indicator("WORKING", r"^indicator\.working$", "indicator.working"),
    _indicator("UNREACH", r"^indicator\.(maintenance\.)?unreach$", "indicator.maintenance.unreach"),
    _indicator(
        "UNREACH_STICKY",
        r"^indicator\.(maintenance\.)?unreach\.sticky$",
        "indicator.maintenance.unreach.sticky",
        suffix="STICKY_UNREACH",
    ),
    _indicator("LOWBAT", r"^indicator\.(maintenance\.)?lowbat$", "indicator.maintenance.lowbat"),
    _indicator("MAINTAIN", r"^indicator\.maintenance$", "indicator.maintenance"),
    _indicator("ERROR", r"^indicator\.error$", "indicator.error"),
    _indicator("DIRECTION", r"^indicator\.direction$", "indicator.direction"),
)

# Light attribute slots shared by the color patterns
_DIMMER = _slot("DIMMER", r"^level\.dimmer$", value_type="number", write=True, default_role="level.dimmer", default_unit="%")
_BRIGHTNESS = _slot("BRIGHTNESS", r"^level\.brightness$", value_type="number", write=True, default_role="level.brightness")
_SATURATION = _slot("SATURATION", r"^level\.color\.saturation$", value_type="number", write=True, default_role="level.color.saturation")
_COLOR_TEMPERATURE = _slot("TEMPERATURE", r"^level\.color\.temperature$", value_type="number", write=True, default_role="level.color.temperature", default_unit="K")
_LIGHT_ON = _slot("ON", r"^switch\.light$", value_type="boolean", write=True, default_role="switch.light")


def _pattern(device_type: DeviceType, *slots: SlotSpec, indicators: bool = True) -> ControlPattern:
    return ControlPattern(type=device_type, slots=slots + (INDICATORS if indicators else ()))


PATTERNS: tuple[ControlPattern, ...] = (
    _pattern(
        DeviceType.AIR_CONDITION,
        _slot("SET", r"^level\.temperature(\..*)?$", required=True, value_type="number", write=True, default_role="level.temperature", default_unit="°C"),
        _slot("MODE", r"^level\.mode\.airconditioner$", required=True, write=True, default_role="level.mode.airconditioner"),
        _slot("ACTUAL", r"^value\.temperature(\..*)?$", value_type="number", write=False, default_role="value.temperature", default_unit="°C"),
        _slot("SPEED", r"^level\.mode\.fan$", write=True, default_role="level.mode.fan"),
        _slot("POWER", r"^switch\.power$", value_type="boolean", write=True, default_role="switch.power"),
        _slot("HUMIDITY", r"^value\.humidity$", value_type="number", write=False, default_role="value.humidity", default_unit="%"),
        _slot("BOOST", r"^switch\.boost(\..*)?$", value_type="boolean", write=True, default_role="switch.boost"),
        _slot("SWING", r"^(level|switch)\.mode\.swing$", write=True, default_role="level.mode.swing"),
    ),
    _pattern(
        DeviceType.THERMOSTAT,
        _slot("SET", r"^level\.temperature(\..*)?$", required=True, value_type="number", write=True, default_role="level.temperature", default_unit="°C"),
        _slot("ACTUAL", r"^value\.temperature(\..*)?$", value_type="number", write=False, default_role="value.temperature", default_unit="°C"),
        _slot("HUMIDITY", r"^value\.humidity$", value_type="number", write=False, default_role="value.humidity", default_unit="%"),
        _slot("BOOST", r"^switch\.boost(\..*)?$", value_type="boolean", write=True, default_role="switch.boost"),
        _slot("POWER", r"^switch\.power$", value_type="boolean", write=True, default_role="switch.power"),
    ),
    _pattern(
        DeviceType.BLIND,
        _slot("SET", r"^level(\.open)?\.blind$", required=True, value_type="number", write=True, default_role="level.blind", default_unit="%"),
        _slot("ACTUAL", r"^value(\.open)?\.blind$", value_type="number", write=False, default_role="value.blind", default_unit="%"),
        _slot("STOP", r"^button\.stop(\.blind)?$|^action\.stop$", value_type="boolean", write=True, default_role="button.stop.blind"),
        _slot("OPEN", r"^button\.open\.blind$", value_type="boolean", write=True, default_role="button.open.blind"),
        _slot("CLOSE", r"^button\.close\.blind$", value_type="boolean", write=True, default_role="button.close.blind"),
    ),
    _pattern(
        DeviceType.GATE,
        _slot("SET", r"^switch\.gate$", required=True, value_type="boolean", write=True, default_role="switch.gate"),
        _slot("ACTUAL", r"^value\.(position|gate)$", value_type="number", write=False, default_role="value.position"),
        _slot("STOP", r"^button\.stop$", value_type="boolean", write=True, default_role="button.stop"),
    ),
    _pattern(
        DeviceType.LOCK,
        _slot("SET", r"^switch\.lock$", required=True, value_type="boolean", write=True, default_role="switch.lock"),
        _slot("ACTUAL", r"^state$", value_type="boolean", write=False, default_role="state"),
        _slot("OPEN", r"^button(\.open)?(\.door)?$", value_type="boolean", write=True, default_role="button"),
    ),
    _pattern(
        DeviceType.RGBW_SINGLE,
        _slot("RGBW", r"^level\.color\.rgbw$", required=True, value_type="string", write=True, default_role="level.color.rgbw"),
        _DIMMER,
        _BRIGHTNESS,
        _COLOR_TEMPERATURE,
        _LIGHT_ON,
    ),
    _pattern(
        DeviceType.RGB_SINGLE,
        _slot("RGB", r"^level\.color\.rgb$", required=True, value_type="string", write=True, default_role="level.color.rgb"),
        _DIMMER,
        _BRIGHTNESS,
        _COLOR_TEMPERATURE,
        _LIGHT_ON,
    ),
    _pattern(
        DeviceType.RGB,
        _slot("RED", r"^level\.color\.red$", required=True, value_type="number", write=True, default_role="level.color.red"),
        _slot("GREEN", r"^level\.color\.green$", required=True, value_type="number", write=True, default_role="level.color.green"),
        _slot("BLUE", r"^level\.color\.blue$", required=True, value_type="number", write=True, default_role="level.color.blue"),
        _slot("WHITE", r"^level\.color\.white$", value_type="number", write=True, default_role="level.color.white"),
        _DIMMER,
        _BRIGHTNESS,
        _COLOR_TEMPERATURE,
        _LIGHT_ON,
    ),
    _pattern(
        DeviceType.HUE,
        _slot("HUE", r"^level\.color\.hue$", required=True, value_type="number", write=True, default_role="level.color.hue", default_unit="°"),
        _DIMMER,
        _BRIGHTNESS,
        _SATURATION,
        _COLOR_TEMPERATURE,
        _LIGHT_ON,
    ),
    _pattern(
        DeviceType.CIE,
        _slot("CIE", r"^level\.color\.cie$", required=True, value_type="string", write=True, default_role="level.color.cie"),
        _DIMMER,
        _BRIGHTNESS,
        _COLOR_TEMPERATURE,
        _LIGHT_ON,
    ),
    _pattern(
        DeviceType.CT,
        _slot("TEMPERATURE", r"^level\.color\.temperature$", required=True, value_type="number", write=True, default_role="level.color.temperature", default_unit="K"),
        _DIMMER,
        _BRIGHTNESS,
        _LIGHT_ON,
    ),
    _pattern(
        DeviceType.DIMMER,
        _slot("SET", r"^level\.(dimmer|brightness)$", required=True, value_type="number", write=True, default_role="level.dimmer", default_unit="%"),
        _slot("ACTUAL", r"^value\.dimmer$", value_type="number", write=False, default_role="value.dimmer", default_unit="%"),
        _slot("ON", r"^switch(\.light)?$", value_type="boolean", write=True, default_role="switch.light"),
    ),
    _pattern(
        DeviceType.VOLUME_GROUP,
        _slot("SET", r"^level\.volume\.group$", required=True, value_type="number", write=True, default_role="level.volume.group", default_unit="%"),
        _slot("ACTUAL", r"^value\.volume\.group$", value_type="number", write=False, default_role="value.volume.group", default_unit="%"),
        _slot("MUTE", r"^media\.mute\.group$", value_type="boolean", write=True, default_role="media.mute.group"),
    ),
    _pattern(
        DeviceType.VOLUME,
        _slot("SET", r"^level\.volume$", required=True, value_type="number", write=True, default_role="level.volume", default_unit="%"),
        _slot("ACTUAL", r"^value\.volume$", value_type="number", write=False, default_role="value.volume", default_unit="%"),
        _slot("MUTE", r"^media\.mute$", value_type="boolean", write=True, default_role="media.mute"),
    ),
    _pattern(
        DeviceType.SLIDER,
        _slot("SET", r"^level(\..*)?$", required=True, value_type="number", write=True, default_role="level"),
        _slot("ACTUAL", r"^value(\..*)?$", value_type="number", write=False, default_role="value"),
    ),
    _pattern(
        DeviceType.LIGHT,
        _slot("SET", r"^switch\.light$", required=True, value_type="boolean", write=True, default_role="switch.light"),
        _slot("ACTUAL", r"^sensor\.light$", value_type="boolean", write=False, default_role="sensor.light"),
    ),
    _pattern(
        DeviceType.VACUUM_CLEANER,
        _slot("POWER", r"^switch\.power$", required=True, value_type="boolean", write=True, default_role="switch.power"),
        _slot("PAUSE", r"^switch\.pause$", required=True, value_type="boolean", write=True, default_role="switch.pause"),
        _slot("BATTERY", r"^value\.battery$", value_type="number", write=False, default_role="value.battery", default_unit="%"),
        _slot("STATE", r"^value\.state$", write=False, default_role="value.state"),
    ),
    _pattern(
        DeviceType.SOCKET,
        _slot("SET", r"^switch(\.[a-z]+)*$|^state$", required=True, value_type="boolean", write=True, default_role="switch"),
        _slot("ACTUAL", r"^sensor\.switch$", value_type="boolean", write=False, default_role="sensor.switch"),
    ),
    _pattern(
        DeviceType.BUTTON,
        _slot("SET", r"^button(\.[a-z]+)*$|^action(\.[a-z]+)*$", required=True, value_type="boolean", write=True, default_role="button"),
    ),
    _pattern(
        DeviceType.WINDOW_TILT,
        _slot("ACTUAL", r"^value\.window$", required=True, write=False, default_role="value.window"),
    ),
    _pattern(
        DeviceType.WINDOW,
        _slot("ACTUAL", r"^sensor\.window$", required=True, value_type="boolean", write=False, default_role="sensor.window"),
    ),
    _pattern(
        DeviceType.DOOR,
        _slot("ACTUAL", r"^sensor\.door$", required=True, value_type="boolean", write=False, default_role="sensor.door"),
    ),
    _pattern(
        DeviceType.FIRE_ALARM,
        _slot("ACTUAL", r"^sensor\.alarm\.fire$", required=True, value_type="boolean", write=False, default_role="sensor.alarm.fire"),
    ),
    _pattern(
        DeviceType.FLOOD_ALARM,
        _slot("ACTUAL", r"^sensor\.alarm\.flood$", required=True, value_type="boolean", write=False, default_role="sensor.alarm.flood"),
    ),
    _pattern(
        DeviceType.MOTION,
        _slot("ACTUAL", r"^sensor\.motion$", required=True, value_type="boolean", write=False, default_role="sensor.motion"),
        _slot("SECOND", r"^value\.brightness$", value_type="number", write=False, default_role="value.brightness", default_unit="lux"),
    ),
    _pattern(
        DeviceType.TEMPERATURE,
        _slot("ACTUAL", r"^value\.temperature$", required=True, value_type="number", write=False, default_role="value.temperature", default_unit="°C"),
        _slot("SECOND", r"^value\.humidity$", value_type="number", write=False, default_role="value.humidity", default_unit="%"),
    ),
    _pattern(
        DeviceType.HUMIDITY,
        _slot("ACTUAL", r"^value\.humidity$", required=True, value_type="number", write=False, default_role="value.humidity", default_unit="%"),
    ),
    _pattern(
        DeviceType.ILLUMINANCE,
        _slot("ACTUAL", r"^value\.brightness$", required=True, value_type="number", write=False, default_role="value.brightness", default_unit="lux"),
    ),
    _pattern(
        DeviceType.INFO,
        _slot("ACTUAL", None, required=True, default_role="state"),
        indicators=False,
    ),
)

# Smart types naming a template directly, besides the DeviceType values
_TEMPLATE_ALIASES = {"power": DeviceType.SOCKET}


def find_pattern(device_type: DeviceType, patterns: tuple[ControlPattern, ...] = PATTERNS) -> ControlPattern | None:
    """Look up the pattern of a device type."""
    for pattern in patterns:
        if pattern.type == device_type:
            return pattern
    return None


def find_template(smart_type: str | None, patterns: tuple[ControlPattern, ...] = PATTERNS) -> ControlPattern | None:
    """Select the template for an explicit smart type.

    Matching is case-insensitive on the device type values, so 'LIGHT'
    and 'light' select the same template.

    Args:
        smart_type: Smart type tag (e.g. 'socket', 'dimmer', 'power')

    Returns:
        ControlPattern, or None if no template has this name
    """
    if not smart_type:
        return None
    key = smart_type.strip().lower()
    if key in _TEMPLATE_ALIASES:
        return find_pattern(_TEMPLATE_ALIASES[key], patterns)
    for device_type in DeviceType:
        if device_type.value.lower() == key:
            return find_pattern(device_type, patterns)
    return None
