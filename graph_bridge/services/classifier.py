"""Control classification.

Reconstructs controllable units from the object graph in two phases:

1. Explicit controls: every state, channel or device carrying a smart
   name valid in the requested language becomes a control whose template
   is selected by its smart type (inferred from the value type when
   absent).
2. Structural detection: members of function and room enums that were
   not claimed by an explicit control are matched against the ordered
   pattern table.

Objects whose smart name is set to ignore never show up in the output,
and no state is bound into more than one control.
"""

from __future__ import annotations

import logging
from typing import Iterable

from graph_bridge.core.interfaces.gateway import ObjectGraphGateway
from graph_bridge.core.models.control import (
    Control,
    ControlObject,
    DetectedState,
    EnumRef,
    StateMeta,
)
from graph_bridge.core.models.graph import GraphObject
from graph_bridge.services.detector import (
    CONTROL_OWNER_TYPES,
    DetectionMatch,
    ObjectSnapshot,
    SlotSpec,
    StructuralDetector,
    find_template,
)
from graph_bridge.services.smart_names import (
    display_name,
    group_names,
    infer_smart_type,
    smart_name_of,
)

logger = logging.getLogger(__name__)

SNAPSHOT_CATEGORIES = ("state", "channel", "device", "enum")
VIEW_END_KEY = "\u9999"


def state_meta(obj: GraphObject | None) -> StateMeta:
    """Copy the live metadata of an object's `common` block."""
    if obj is None:
        return StateMeta()
    common = obj.common
    return StateMeta(
        name=common.name,
        type=common.type,
        role=common.role,
        unit=common.unit,
        min=common.min,
        max=common.max,
        states=common.states,
        icon=common.icon,
        color=common.color,
    )


def enum_ref(obj: GraphObject) -> EnumRef:
    """Reference to a room or function enum."""
    return EnumRef(id=obj.id, name=obj.common.name, icon=obj.common.icon, color=obj.common.color)


class ControlClassifier:
    """Builds the list of controls from an object graph snapshot."""

    def __init__(self, gateway: ObjectGraphGateway, detector: StructuralDetector | None = None):
        """Initialize classifier.

        Args:
            gateway: Gateway used to load the snapshot
            detector: Structural detector (default pattern table if None)
        """
        self.gateway = gateway
        self.detector = detector or StructuralDetector()

    async def load_snapshot(self) -> ObjectSnapshot:
        """Read all states, channels, devices and enums."""
        objects: dict[str, GraphObject] = {}
        for category in SNAPSHOT_CATEGORIES:
            rows = await self.gateway.query_view(category, "", VIEW_END_KEY)
            for row in rows:
                objects[row.id] = row.value
        logger.debug(f"Loaded snapshot with {len(objects)} objects")
        return ObjectSnapshot(objects)

    async def classify(self, language: str) -> list[Control]:
        """Load a fresh snapshot and classify it.

        Args:
            language: Language for smart names and display names

        Returns:
            Explicit controls followed by detected controls
        """
        snapshot = await self.load_snapshot()
        return self.classify_snapshot(snapshot, language)

    def classify_snapshot(self, snapshot: ObjectSnapshot, language: str) -> list[Control]:
        """Classify a snapshot (pure: the snapshot is not modified)."""
        functions, rooms = self._functions_and_rooms(snapshot)
        pool = self._candidate_pool(snapshot, functions, rooms)

        # Ignored objects are never bound into a control
        used: set[str] = {
            object_id
            for object_id in snapshot.ids()
            if smart_name_of(snapshot.get(object_id)).is_ignored
        }
        controls: list[Control] = []

        for object_id in self._annotated_ids(snapshot, language):
            control = self._explicit_control(object_id, snapshot, language, functions, rooms)
            if control is None:
                continue
            controls.append(control)
            used.update(control.state_ids)
            # States below an explicit channel or device belong to it
            used.update(self.detector.candidates(object_id, snapshot))
            for claimed in (object_id, snapshot.channel_of(object_id)):
                if claimed in pool:
                    pool.remove(claimed)

        explicit = len(controls)
        for object_id in pool:
            for match in self.detector.detect(object_id, snapshot, used):
                controls.append(self._detected_control(match, snapshot, language, functions, rooms))

        logger.info(
            f"Classified {len(controls)} control(s): {explicit} explicit, "
            f"{len(controls) - explicit} detected"
        )
        return controls

    def _functions_and_rooms(self, snapshot: ObjectSnapshot) -> tuple[list[GraphObject], list[GraphObject]]:
        """Non-empty, non-ignored function and room enums."""
        usable = [
            obj
            for obj in snapshot.enums()
            if not smart_name_of(obj).is_ignored and obj.common.members
        ]
        functions = [obj for obj in usable if obj.is_functionality]
        rooms = [obj for obj in usable if obj.is_room]
        return functions, rooms

    def _is_poolable(self, snapshot: ObjectSnapshot, object_id: str, pool: list[str]) -> bool:
        obj = snapshot.get(object_id)
        return (
            obj is not None
            and obj.type in CONTROL_OWNER_TYPES
            and object_id not in pool
            and not smart_name_of(obj).is_ignored
        )

    def _candidate_pool(
        self, snapshot: ObjectSnapshot, functions: list[GraphObject], rooms: list[GraphObject]
    ) -> list[str]:
        """Ids to run structural detection on, in discovery order.

        Function members come first. A room member is only added when
        neither its channel nor that channel's device is pooled already.
        """
        pool: list[str] = []
        for function in functions:
            for member in function.common.members or []:
                if self._is_poolable(snapshot, member, pool):
                    pool.append(member)

        for room in rooms:
            for member in room.common.members or []:
                if not self._is_poolable(snapshot, member, pool):
                    continue
                channel_id = snapshot.channel_of(member)
                if channel_id is None:
                    pool.append(member)
                    continue
                if channel_id in pool:
                    continue
                device_id = snapshot.device_of(member)
                if device_id is None or device_id not in pool:
                    pool.append(member)
        return pool

    def _annotated_ids(self, snapshot: ObjectSnapshot, language: str) -> list[str]:
        """Sorted ids of control owners with a smart name valid in `language`."""
        return [
            object_id
            for object_id in snapshot.ids()
            if snapshot.objects[object_id].type in CONTROL_OWNER_TYPES
            and smart_name_of(snapshot.objects[object_id]).is_valid(language)
        ]

    def _membership(self, object_id: str, snapshot: ObjectSnapshot, enums: Iterable[GraphObject]) -> EnumRef | None:
        """First enum listing the object, its channel or its device."""
        enums = list(enums)
        for candidate in (object_id, snapshot.channel_of(object_id), snapshot.device_of(object_id)):
            if candidate is None:
                continue
            for obj in enums:
                if candidate in (obj.common.members or []):
                    return enum_ref(obj)
        return None

    def _bind(self, slot: SlotSpec, state_id: str, snapshot: ObjectSnapshot) -> DetectedState:
        obj = snapshot.get(state_id)
        return DetectedState(
            name=slot.name,
            id=state_id,
            default_role=slot.default_role,
            default_unit=slot.default_unit,
            required=slot.required,
            write=slot.write,
            read=slot.read,
            indicator=slot.indicator,
            common=state_meta(obj),
            smart_name=smart_name_of(obj),
        )

    def _explicit_control(
        self,
        object_id: str,
        snapshot: ObjectSnapshot,
        language: str,
        functions: list[GraphObject],
        rooms: list[GraphObject],
    ) -> Control | None:
        obj = snapshot.objects[object_id]
        smart_name = smart_name_of(obj)
        smart_type = smart_name.smart_type or infer_smart_type(obj.common.type)

        template = find_template(smart_type, self.detector.patterns)
        if template is None:
            logger.debug(f"Skipped {object_id}: no template for smart type '{smart_type}'")
            return None
        slot = next(iter(template.required_slots), None)
        if slot is None:
            logger.debug(f"Skipped {object_id}: template {template.type.value} has no required slot")
            return None

        logger.debug(f"Added {object_id} with smart name as '{smart_type}'")
        return Control(
            type=template.type,
            smart_type=smart_type,
            states=[self._bind(slot, object_id, snapshot)],
            object=ControlObject(
                id=object_id,
                type=obj.type,
                common=state_meta(obj),
                smart_name=smart_name,
                auto_detected=False,
                toggle=smart_name.toggle,
            ),
            room=self._membership(object_id, snapshot, rooms),
            functionality=self._membership(object_id, snapshot, functions),
            group_names=group_names(smart_name, language),
        )

    def _detected_control(
        self,
        match: DetectionMatch,
        snapshot: ObjectSnapshot,
        language: str,
        functions: list[GraphObject],
        rooms: list[GraphObject],
    ) -> Control:
        owner = snapshot.objects[match.owner_id]
        smart_name = smart_name_of(owner)
        names = group_names(smart_name, language) or [
            display_name(owner.common.name, language, owner.id)
        ]
        return Control(
            type=match.pattern.type,
            states=[self._bind(slot, state_id, snapshot) for slot, state_id in match.bindings],
            object=ControlObject(
                id=owner.id,
                type=owner.type,
                common=state_meta(owner),
                smart_name=smart_name,
                auto_detected=True,
                toggle=smart_name.toggle,
            ),
            room=self._membership(owner.id, snapshot, rooms),
            functionality=self._membership(owner.id, snapshot, functions),
            group_names=names,
        )
