"""
Scene graph collaborator.

The extraction pipeline never talks to a viewer directly.  It consumes a
:class:`SceneGraph`, the small set of queries a host viewer answers
about a loaded model: which elements are leaves, what properties they
carry, which fragments render them and what each fragment's render
proxy looks like.

:class:`InMemorySceneGraph` answers those queries from a
:class:`~qto.api.models.SceneSnapshot` posted by the host.  Any error a
scene graph raises is wrapped in :class:`CollaboratorFailure` by the
extraction layer; it is the only failure that reaches callers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Protocol

from ..api.models import ElementPayload, FragmentPayload, SceneSnapshot

logger = logging.getLogger(__name__)


class CollaboratorFailure(RuntimeError):
    """The scene graph could not answer a query."""


class Property(NamedTuple):
    display_name: str
    display_value: Any


@dataclass
class PropertyRecord:
    """Properties of one element as returned by the scene graph."""

    db_id: int
    name: str = ""
    properties: List[Property] = field(default_factory=list)

    def value_of(self, display_name: str) -> Any:
        """Return the value of the first property called ``display_name``."""
        for prop in self.properties:
            if prop.display_name == display_name:
                return prop.display_value
        return None


class SceneGraph(Protocol):
    def list_leaf_elements(self) -> List[int]: ...

    def get_bulk_properties(self, ids: Iterable[int], property_names: Iterable[str]) -> List[PropertyRecord]: ...

    def get_properties(self, element_id: int) -> PropertyRecord: ...

    def get_fragments_for_element(self, element_id: int) -> List[int]: ...

    def get_render_proxy(self, fragment_id: int) -> Optional[FragmentPayload]: ...


def _record_from_element(element: ElementPayload, names: Optional[set] = None) -> PropertyRecord:
    props = [
        Property(p.displayName, p.displayValue)
        for p in element.properties
        if names is None or p.displayName in names
    ]
    return PropertyRecord(db_id=element.dbId, name=element.name, properties=props)


class InMemorySceneGraph:
    """Scene graph backed by a snapshot held in memory."""

    def __init__(self, snapshot: SceneSnapshot) -> None:
        self.snapshot = snapshot
        self._elements: Dict[int, ElementPayload] = {e.dbId: e for e in snapshot.elements}
        self._fragments: Dict[int, FragmentPayload] = {f.fragId: f for f in snapshot.fragments}

    def list_leaf_elements(self) -> List[int]:
        """Return childless elements reachable from the root, depth first.

        The root itself is included when it has no children.  Without a
        root id every childless element qualifies, in snapshot order.
        """
        root_id = self.snapshot.rootId
        if root_id is None:
            return [e.dbId for e in self.snapshot.elements if not e.children]
        if root_id not in self._elements:
            raise KeyError(f"root element {root_id} is not part of the scene")
        leaves: List[int] = []
        seen: set[int] = set()
        stack = [root_id]
        while stack:
            db_id = stack.pop()
            if db_id in seen:
                continue
            seen.add(db_id)
            element = self._elements.get(db_id)
            if element is None:
                logger.warning("Element %s is referenced as a child but missing from the scene", db_id)
                continue
            if not element.children:
                leaves.append(db_id)
                continue
            # Reverse so children are visited in their declared order.
            stack.extend(reversed(element.children))
        return leaves

    def get_bulk_properties(self, ids: Iterable[int], property_names: Iterable[str]) -> List[PropertyRecord]:
        names = set(property_names)
        records: List[PropertyRecord] = []
        for db_id in ids:
            element = self._elements.get(db_id)
            if element is not None:
                records.append(_record_from_element(element, names))
        return records

    def get_properties(self, element_id: int) -> PropertyRecord:
        element = self._elements.get(element_id)
        if element is None:
            raise KeyError(f"element {element_id} is not part of the scene")
        return _record_from_element(element)

    def get_fragments_for_element(self, element_id: int) -> List[int]:
        element = self._elements.get(element_id)
        if element is None:
            raise KeyError(f"element {element_id} is not part of the scene")
        return list(element.fragments)

    def get_render_proxy(self, fragment_id: int) -> Optional[FragmentPayload]:
        return self._fragments.get(fragment_id)
