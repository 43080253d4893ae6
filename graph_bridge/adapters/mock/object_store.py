"""In-memory object graph storage for the mock gateway.

Holds objects, state values and files, and answers range queries the
way the real view queries do.
"""

from __future__ import annotations

import copy
import logging

from graph_bridge.core.models.graph import FileContent, GraphObject, State, StateValue, ViewRow

from .fixtures import DEFAULT_FILES, DEFAULT_OBJECTS, DEFAULT_STATES

logger = logging.getLogger(__name__)

_MIME_TYPES = {
    ".json": "application/json",
    ".js": "application/javascript",
    ".txt": "text/plain",
    ".png": "image/png",
    ".svg": "image/svg+xml",
}


class ObjectStore:
    """In-memory object graph.

    Attributes:
        objects: Dict mapping id to GraphObject
        states: Dict mapping state id to State
        files: Dict mapping (meta id, path) to file bytes
    """

    def __init__(
        self,
        objects: list[GraphObject] | None = None,
        states: dict[str, State] | None = None,
        files: dict[tuple[str, str], bytes] | None = None,
    ) -> None:
        """Initialize object store.

        Args:
            objects: Initial objects (default: DEFAULT_OBJECTS)
            states: Initial state values (default: DEFAULT_STATES)
            files: Initial files (default: DEFAULT_FILES)
        """
        self._initial = (
            objects if objects is not None else DEFAULT_OBJECTS,
            states if states is not None else DEFAULT_STATES,
            files if files is not None else DEFAULT_FILES,
        )
        self.reset()

    def reset(self) -> None:
        """Restore the initial objects, states and files."""
        objects, states, files = self._initial
        self.objects: dict[str, GraphObject] = {obj.id: obj.model_copy(deep=True) for obj in objects}
        self.states: dict[str, State] = copy.deepcopy(states)
        self.files: dict[tuple[str, str], bytes] = dict(files)

    def get_object(self, object_id: str) -> GraphObject | None:
        """Get a copy of an object."""
        obj = self.objects.get(object_id)
        return obj.model_copy(deep=True) if obj is not None else None

    def set_object(self, obj: GraphObject) -> GraphObject:
        """Store an object (replacing any previous one)."""
        self.objects[obj.id] = obj.model_copy(deep=True)
        return obj

    def delete_object(self, object_id: str) -> bool:
        """Delete an object and its state value."""
        self.states.pop(object_id, None)
        return self.objects.pop(object_id, None) is not None

    def get_state(self, state_id: str) -> State | None:
        """Get the value of a state."""
        state = self.states.get(state_id)
        return state.model_copy() if state is not None else None

    def set_state(self, state_id: str, value: StateValue, ack: bool = False) -> State:
        """Set the value of a state.

        Returns:
            The new State
        """
        if state_id not in self.objects:
            logger.debug(f"Writing value of unknown state {state_id}")
        state = State(val=value, ack=ack)
        self.states[state_id] = state
        return state.model_copy()

    def query(self, category: str, start_key: str, end_key: str) -> list[ViewRow]:
        """Objects of a type within an id range, ordered by id."""
        return [
            ViewRow(id=object_id, value=self.objects[object_id].model_copy(deep=True))
            for object_id in sorted(self.objects)
            if self.objects[object_id].type == category and start_key <= object_id <= end_key
        ]

    def read_file(self, meta_id: str, path: str) -> FileContent:
        """Read a file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        data = self.files.get((meta_id, path))
        if data is None:
            raise FileNotFoundError(f"{meta_id}/{path}")
        suffix = path[path.rfind("."):] if "." in path else ""
        return FileContent(data=data, mime_type=_MIME_TYPES.get(suffix.lower()))

    def write_file(self, meta_id: str, path: str, data: bytes | str) -> int:
        """Write a file.

        Returns:
            Size of the stored file in bytes
        """
        raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        self.files[(meta_id, path)] = raw
        return len(raw)

    def delete_file(self, meta_id: str, path: str) -> bool:
        """Delete a file."""
        return self.files.pop((meta_id, path), None) is not None
