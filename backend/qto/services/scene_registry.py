"""
In-memory registry of scene snapshots.

Hosts register a snapshot once and then run any number of takeoffs and
metadata queries against it.  Snapshots are kept in an ``OrderedDict``
with least-recently-used eviction once ``MAX_SCENES`` is exceeded, and
a reentrant lock protects the dictionary so concurrent requests are
safe.  Only the host's data is stored here; extraction results are
always recomputed.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from threading import RLock
from typing import List, Optional, Tuple

from .. import config
from ..api.models import SceneSnapshot
from .scene_graph import InMemorySceneGraph

logger = logging.getLogger(__name__)


class SceneNotFound(KeyError):
    """No scene is registered under the requested identifier."""


_scenes: "OrderedDict[str, InMemorySceneGraph]" = OrderedDict()
_lock = RLock()


def register_scene(snapshot: SceneSnapshot, max_scenes: Optional[int] = None) -> Tuple[str, InMemorySceneGraph]:
    """Store a snapshot and return its new identifier and scene graph."""
    limit = max_scenes if max_scenes is not None else config.MAX_SCENES
    scene_id = uuid.uuid4().hex
    scene = InMemorySceneGraph(snapshot)
    with _lock:
        _scenes[scene_id] = scene
        _scenes.move_to_end(scene_id)
        while len(_scenes) > limit:
            evicted, _ = _scenes.popitem(last=False)
            logger.info("Scene registry full; evicted scene %s", evicted)
    logger.info(
        "Registered scene %s (%r): %d elements, %d fragments",
        scene_id,
        snapshot.name,
        len(snapshot.elements),
        len(snapshot.fragments),
    )
    return scene_id, scene


def get_scene(scene_id: str) -> InMemorySceneGraph:
    """Return the scene graph for ``scene_id``.

    Raises:
        SceneNotFound: If the scene is unknown or has been evicted.
    """
    with _lock:
        scene = _scenes.get(scene_id)
        if scene is None:
            raise SceneNotFound(scene_id)
        _scenes.move_to_end(scene_id)
        return scene


def list_scenes() -> List[Tuple[str, InMemorySceneGraph]]:
    with _lock:
        return list(_scenes.items())


def delete_scene(scene_id: str) -> bool:
    """Remove a scene; returns False when it was not registered."""
    with _lock:
        return _scenes.pop(scene_id, None) is not None


def clear_scenes() -> None:
    with _lock:
        _scenes.clear()
