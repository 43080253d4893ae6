"""Structural control detection.

Finds device shapes in the object graph from roles, value types and the
parent/child structure of ids, without any explicit annotation.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable

from graph_bridge.core.models.graph import GraphObject, parent_of
from graph_bridge.services.detector.patterns import PATTERNS, ControlPattern, SlotSpec

logger = logging.getLogger(__name__)

CONTROL_OWNER_TYPES = ("state", "channel", "device")


class ObjectSnapshot:
    """Point-in-time view of states, channels, devices and enums.

    Args:
        objects: Objects keyed by id
    """

    def __init__(self, objects: dict[str, GraphObject]):
        self.objects = objects
        self._children: dict[str, list[str]] = defaultdict(list)
        for object_id in sorted(objects):
            self._children[parent_of(object_id)].append(object_id)

    @classmethod
    def from_objects(cls, objects: Iterable[GraphObject]) -> ObjectSnapshot:
        """Build a snapshot from a sequence of objects."""
        return cls({obj.id: obj for obj in objects})

    def __contains__(self, object_id: str) -> bool:
        return object_id in self.objects

    def __len__(self) -> int:
        return len(self.objects)

    def get(self, object_id: str) -> GraphObject | None:
        """Look up an object by id."""
        return self.objects.get(object_id)

    def ids(self) -> list[str]:
        """All ids in sorted order."""
        return sorted(self.objects)

    def enums(self) -> list[GraphObject]:
        """All enum objects in id order."""
        return [self.objects[i] for i in self.ids() if self.objects[i].is_enum]

    def children(self, parent_id: str) -> list[str]:
        """Direct children of an object, in id order."""
        return list(self._children.get(parent_id, ()))

    def child_states(self, parent_id: str) -> list[str]:
        """Direct children of an object that are states."""
        return [i for i in self.children(parent_id) if self.objects[i].is_state]

    def channel_of(self, object_id: str) -> str | None:
        """Channel owning an object (the object itself if it is a channel)."""
        obj = self.objects.get(object_id)
        if obj is None:
            return None
        if obj.is_channel:
            return object_id
        if obj.is_state:
            channel = self.objects.get(parent_of(object_id))
            if channel is not None and channel.is_channel:
                return channel.id
        return None

    def device_of(self, object_id: str) -> str | None:
        """Device (or parent channel) above the channel of an object."""
        channel_id = self.channel_of(object_id)
        if channel_id is None:
            return None
        parent = self.objects.get(parent_of(channel_id))
        if parent is not None and (parent.is_device or parent.is_channel):
            return parent.id
        return None


@dataclass
class DetectionMatch:
    """A pattern matched against the states below one object.

    Attributes:
        pattern: Pattern that matched
        owner_id: Object the detection ran for
        bindings: Filled slots and their state ids, in slot order
    """

    pattern: ControlPattern
    owner_id: str
    bindings: list[tuple[SlotSpec, str]] = field(default_factory=list)

    @property
    def state_ids(self) -> list[str]:
        """Ids bound by this match."""
        return [state_id for _, state_id in self.bindings]


class StructuralDetector:
    """Matches the ordered pattern table against the object graph."""

    def __init__(
        self,
        patterns: tuple[ControlPattern, ...] = PATTERNS,
        ignore_indicators: Iterable[str] = ("UNREACH_STICKY",),
        excluded_types: Iterable[str] = ("info",),
    ):
        """Initialize detector.

        Args:
            patterns: Ordered pattern table (tried in order)
            ignore_indicators: Indicator slot names never bound
            excluded_types: Device type values never produced
        """
        self.patterns = patterns
        self.ignore_indicators = set(ignore_indicators)
        self.excluded_types = set(excluded_types)

    def candidates(self, object_id: str, snapshot: ObjectSnapshot) -> list[str]:
        """State ids that may fill slots when detecting on `object_id`.

        A state is its own only candidate, a channel offers its child
        states, and a device offers its own child states followed by the
        child states of each of its channels.
        """
        obj = snapshot.get(object_id)
        if obj is None:
            return []
        if obj.is_state:
            return [object_id]
        if obj.is_channel:
            return snapshot.child_states(object_id)
        if obj.is_device:
            result = snapshot.child_states(object_id)
            for child_id in snapshot.children(object_id):
                child = snapshot.get(child_id)
                if child is not None and child.is_channel:
                    result.extend(snapshot.child_states(child_id))
            return result
        return []

    def detect(self, object_id: str, snapshot: ObjectSnapshot, used: set[str]) -> list[DetectionMatch]:
        """Find every shape formed by the states below an object.

        Patterns are tried in table order over the unused candidates. After
        each match the search restarts on what is left, until no pattern
        matches. Bound ids are added to `used`, so a state is bound into at
        most one control across calls that share the set.

        Args:
            object_id: State, channel or device id
            snapshot: Object snapshot
            used: Ids already bound to a control

        Returns:
            Matches in detection order (empty if nothing matched)
        """
        matches: list[DetectionMatch] = []
        while True:
            candidates = [i for i in self.candidates(object_id, snapshot) if i not in used]
            if not candidates:
                break
            match = self._first_match(object_id, candidates, snapshot)
            if match is None:
                break
            used.update(match.state_ids)
            matches.append(match)
            logger.debug(f"Detected {match.pattern.type.value} at {object_id} ({len(match.bindings)} state(s))")

        if not matches:
            logger.debug(f"No pattern matched below {object_id}")
        return matches

    def _first_match(
        self, object_id: str, candidates: list[str], snapshot: ObjectSnapshot
    ) -> DetectionMatch | None:
        for pattern in self.patterns:
            if pattern.type.value in self.excluded_types:
                continue
            bindings = self._match(pattern, candidates, snapshot)
            if bindings:
                return DetectionMatch(pattern=pattern, owner_id=object_id, bindings=bindings)
        return None

    def _match(
        self, pattern: ControlPattern, candidates: list[str], snapshot: ObjectSnapshot
    ) -> list[tuple[SlotSpec, str]] | None:
        taken: dict[SlotSpec, str] = {}
        claimed: set[str] = set()

        def fill(slot: SlotSpec) -> bool:
            for state_id in candidates:
                if state_id in claimed:
                    continue
                obj = snapshot.get(state_id)
                if obj is not None and slot.accepts(obj):
                    taken[slot] = state_id
                    claimed.add(state_id)
                    return True
            return False

        for slot in pattern.required_slots:
            if not fill(slot):
                return None
        for slot in pattern.optional_slots:
            fill(slot)
        for slot in pattern.indicator_slots:
            if slot.name not in self.ignore_indicators:
                fill(slot)

        return [(slot, taken[slot]) for slot in pattern.slots if slot in taken]
