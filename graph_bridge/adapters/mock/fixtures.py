"""Default fixtures for the mock gateway.

Provides a small but realistic object graph (devices, channels, states,
rooms, functions and adapter instances) for development and tests.
"""

from __future__ import annotations

from graph_bridge.core.models.graph import GraphObject, State


def _state(object_id: str, name: str, value_type: str, role: str, write: bool = True, **common) -> GraphObject:
    return GraphObject(
        id=object_id,
        type="state",
        common={"name": name, "type": value_type, "role": role, "read": True, "write": write, **common},
    )


def _folder(object_id: str, object_type: str, name, **common) -> GraphObject:
    return GraphObject(id=object_id, type=object_type, common={"name": name, **common})


def _enum(object_id: str, name, members: list[str], **common) -> GraphObject:
    return GraphObject(id=object_id, type="enum", common={"name": name, "members": members, **common})


def _instance(namespace: str, **common) -> GraphObject:
    return GraphObject(
        id=f"system.adapter.{namespace}",
        type="instance",
        common={"enabled": True, "host": "raspberrypi", **common},
    )


# =============================================================================
# SYSTEM
# =============================================================================

SYSTEM_OBJECTS: list[GraphObject] = [
    GraphObject(id="system.config", type="config", common={"name": "System configuration", "language": "en"}),
    _instance("hm-rpc.0", title="HomeMatic RPC", titleLang={"en": "HomeMatic RPC", "de": "HomeMatic RPC"}),
    _instance("admin.0", title="Admin"),
    _instance("javascript.0", titleLang={"en": "javascript", "de": "javascript"}),
]

# =============================================================================
# DEVICES
# =============================================================================

DEVICE_OBJECTS: list[GraphObject] = [
    # Dimmer (device > channel > states)
    _folder("hm-rpc.0.LEQ001", "device", "HM-LC-Dim1T-FM LEQ001"),
    _folder("hm-rpc.0.LEQ001.1", "channel", {"en": "Ceiling light", "de": "Deckenlicht"}, icon="light.svg"),
    _state("hm-rpc.0.LEQ001.1.LEVEL", "Level", "number", "level.dimmer", min=0, max=100, unit="%"),
    _state("hm-rpc.0.LEQ001.1.ON", "On", "boolean", "switch.light"),
    _state("hm-rpc.0.LEQ001.1.UNREACH", "Unreachable", "boolean", "indicator.unreach", write=False),
    # Thermostat
    _folder("hm-rpc.0.HEQ002", "device", "HM-CC-RT-DN HEQ002"),
    _folder("hm-rpc.0.HEQ002.4", "channel", {"en": "Radiator", "de": "Heizkörper"}),
    _state("hm-rpc.0.HEQ002.4.SET_TEMPERATURE", "Set temperature", "number", "level.temperature", min=5, max=30, unit="°C"),
    _state("hm-rpc.0.HEQ002.4.ACTUAL_TEMPERATURE", "Actual temperature", "number", "value.temperature", write=False, unit="°C"),
    _state("hm-rpc.0.HEQ002.4.HUMIDITY", "Humidity", "number", "value.humidity", write=False, unit="%"),
    # Door lock
    _folder("hm-rpc.0.KEQ003", "device", "HM-Sec-Key KEQ003"),
    _folder("hm-rpc.0.KEQ003.1", "channel", "Front door lock"),
    _state("hm-rpc.0.KEQ003.1.STATE", "Locked", "boolean", "switch.lock"),
    _state("hm-rpc.0.KEQ003.1.OPEN", "Open", "boolean", "button.open.door", read=False),
    # Window contact
    _folder("hm-rpc.0.SEQ004", "device", "HM-Sec-SC SEQ004"),
    _folder("hm-rpc.0.SEQ004.1", "channel", "Window contact"),
    _state(
        "hm-rpc.0.SEQ004.1.STATE",
        "Hall window",
        "boolean",
        "sensor.window",
        write=False,
        states={"false": "closed", "true": "open"},
    ),
    # Plug (device > state)
    _folder("zigbee.0.plug_1", "device", "Coffee machine plug"),
    _state("zigbee.0.plug_1.state", "Switch", "boolean", "switch"),
    # Plug excluded from voice and AI control
    _folder("zigbee.0.plug_2", "device", "Server plug", smartName=False),
    _state("zigbee.0.plug_2.state", "Switch", "boolean", "switch"),
    # Hue bulb (channel > states), color temperature excluded
    _folder("hue.0.bulb_1", "channel", "Sofa bulb", icon="bulb.svg"),
    _state("hue.0.bulb_1.on", "On", "boolean", "switch.light"),
    _state("hue.0.bulb_1.bri", "Brightness", "number", "level.dimmer", min=0, max=100, unit="%"),
    _state("hue.0.bulb_1.hue", "Hue", "number", "level.color.hue", min=0, max=360),
    _state("hue.0.bulb_1.sat", "Saturation", "number", "level.color.saturation", min=0, max=100),
    _state("hue.0.bulb_1.ct", "Color temperature", "number", "level.color.temperature", smartName="ignore"),
    # Climate sensor (device > states)
    _folder("zigbee.0.sensor_1", "device", {"en": "Climate sensor", "de": "Klimasensor"}),
    _state("zigbee.0.sensor_1.temperature", "Temperature", "number", "value.temperature", write=False, unit="°C"),
    _state("zigbee.0.sensor_1.humidity", "Humidity", "number", "value.humidity", write=False, unit="%"),
    # Script-created lamp with an explicit smart name
    _state("javascript.0.virtual.lamp", "Lamp", "boolean", "switch", smartName="Garden lamp"),
]

# =============================================================================
# ENUMS
# =============================================================================

ENUM_OBJECTS: list[GraphObject] = [
    _enum("enum.rooms.basement", "Basement", ["zigbee.0.plug_1"], smartName=False),
    _enum("enum.rooms.attic", "Attic", []),
    _enum("enum.rooms.garden", {"en": "Garden", "de": "Garten"}, ["javascript.0.virtual.lamp"], icon="garden.svg"),
    _enum("enum.rooms.hall", {"en": "Hall", "de": "Flur"}, ["hm-rpc.0.KEQ003.1", "hm-rpc.0.SEQ004.1.STATE"]),
    _enum(
        "enum.rooms.kitchen",
        {"en": "Kitchen", "de": "Küche"},
        ["hm-rpc.0.HEQ002.4", "zigbee.0.sensor_1", "zigbee.0.plug_2"],
        color="#ffcc00",
    ),
    _enum(
        "enum.rooms.living_room",
        {"en": "Living Room", "de": "Wohnzimmer"},
        ["hm-rpc.0.LEQ001", "hue.0.bulb_1", "zigbee.0.plug_1"],
    ),
    _enum("enum.functions.heating", {"en": "Heating", "de": "Heizung"}, ["hm-rpc.0.HEQ002.4"]),
    _enum(
        "enum.functions.light",
        {"en": "Light", "de": "Licht"},
        ["hm-rpc.0.LEQ001.1", "hue.0.bulb_1", "javascript.0.virtual.lamp"],
    ),
    _enum(
        "enum.functions.security",
        {"en": "Security", "de": "Sicherheit"},
        ["hm-rpc.0.KEQ003.1", "hm-rpc.0.SEQ004.1.STATE"],
    ),
]

DEFAULT_OBJECTS: list[GraphObject] = SYSTEM_OBJECTS + DEVICE_OBJECTS + ENUM_OBJECTS

# =============================================================================
# STATES
# =============================================================================

DEFAULT_STATES: dict[str, State] = {
    "hm-rpc.0.LEQ001.1.LEVEL": State(val=40, ack=True),
    "hm-rpc.0.LEQ001.1.ON": State(val=True, ack=True),
    "hm-rpc.0.LEQ001.1.UNREACH": State(val=False, ack=True),
    "hm-rpc.0.HEQ002.4.SET_TEMPERATURE": State(val=21.5, ack=True),
    "hm-rpc.0.HEQ002.4.ACTUAL_TEMPERATURE": State(val=20.8, ack=True),
    "hm-rpc.0.HEQ002.4.HUMIDITY": State(val=48, ack=True),
    "hm-rpc.0.KEQ003.1.STATE": State(val=True, ack=True),
    "hm-rpc.0.SEQ004.1.STATE": State(val=False, ack=True),
    "zigbee.0.plug_1.state": State(val=False, ack=True),
    "zigbee.0.plug_2.state": State(val=True, ack=True),
    "hue.0.bulb_1.on": State(val=False, ack=True),
    "hue.0.bulb_1.bri": State(val=80, ack=True),
    "hue.0.bulb_1.hue": State(val=120, ack=True),
    "hue.0.bulb_1.sat": State(val=60, ack=True),
    "hue.0.bulb_1.ct": State(val=2700, ack=True),
    "zigbee.0.sensor_1.temperature": State(val=22.4, ack=True),
    "zigbee.0.sensor_1.humidity": State(val=51, ack=True),
    "javascript.0.virtual.lamp": State(val=False, ack=True),
}

# =============================================================================
# FILES AND LOGS
# =============================================================================

DEFAULT_FILES: dict[tuple[str, str], bytes] = {
    ("vis.0", "main/vis-views.json"): b'{"views": {}}',
    ("javascript.0", "scripts/garden.js"): b"setState('javascript.0.virtual.lamp', true);",
}

DEFAULT_LOG_TEXT = "\n".join(
    [
        "2025-08-23 23:37:50.101 - info: host.raspberrypi (512) instance system.adapter.hm-rpc.0 started",
        "2025-08-23 23:37:51.220 - debug: hm-rpc.0 (1781) Connected to CCU",
        "2025-08-23 23:37:52.004 - warn: zigbee.0 (1802) Device plug_2 did not answer",
        "2025-08-23 23:37:53.529 - error: nmea.0 (1781) NGT1: Error: No such file or directory, cannot open /dev/ttyUSB0",
        "2025-08-23 23:37:54.610 - info: javascript.0 (1850) script.js.garden: Lamp switched",
        "",
    ]
)
