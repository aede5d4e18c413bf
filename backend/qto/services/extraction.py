"""
Extraction pipelines over a scene graph.

Two read-only pipelines are exposed:

- :func:`extract_quantities` enumerates the leaf elements, queries their
  family, type and measure properties in batches and folds the results
  into family/type buckets.
- :func:`extract_element_metadata` gathers one element's properties and
  rebuilds every triangle of its fragments in world space, each labelled
  with its resolved material.

Per-fragment problems (no render proxy, no geometry, malformed buffers)
are logged and skipped.  Only a failing scene graph query aborts an
extraction, as :class:`CollaboratorFailure`.  Nothing is cached between
calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, TypeVar

from ..config import QuantitySettings, extract_debug_enabled, load_quantity_settings
from .buffers import MalformedBuffer, NoGeometry, decode_geometry
from .faces import Face, FragmentBuffer, reconstruct_faces
from .materials import resolve_material
from .quantities import AggregationBucket, aggregate, merge_buckets
from .scene_graph import CollaboratorFailure, Property, SceneGraph
from .transforms import as_matrix

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ElementMetadata:
    db_id: int
    name: str
    properties: List[Property] = field(default_factory=list)
    total_faces: int = 0
    faces: List[Face] = field(default_factory=list)


def _query(description: str, call: Callable[[], T]) -> T:
    """Run a scene graph query, wrapping any failure."""
    try:
        return call()
    except CollaboratorFailure:
        raise
    except Exception as exc:
        raise CollaboratorFailure(f"{description} failed: {exc}") from exc


def extract_quantities(
    scene: SceneGraph,
    settings: Optional[QuantitySettings] = None,
) -> Dict[str, AggregationBucket]:
    """Aggregate the scene's leaf elements into family/type buckets.

    Args:
        scene: Scene graph to query.
        settings: Aggregation parameters; the configured defaults when
            omitted.

    Returns:
        Buckets keyed ``"family|type"`` in order of first occurrence.

    Raises:
        CollaboratorFailure: If the scene graph cannot be queried.
    """
    settings = settings or load_quantity_settings()
    leaves = _query("leaf element enumeration", scene.list_leaf_elements)
    names = settings.property_names
    batch_size = max(1, settings.bulk_batch_size)

    partials: List[Dict[str, AggregationBucket]] = []
    for start in range(0, len(leaves), batch_size):
        batch = leaves[start : start + batch_size]
        records = _query(
            f"bulk property query for {len(batch)} elements",
            lambda: scene.get_bulk_properties(batch, names),
        )
        partials.append(
            aggregate(records, settings.family_keys, settings.type_keys, settings.measure_key)
        )
    buckets = merge_buckets(*partials)
    logger.info(
        "Quantity takeoff: %d leaf elements in %d buckets (%d queries)",
        len(leaves),
        len(buckets),
        len(partials),
    )
    return buckets


def _fragment_buffer(scene: SceneGraph, fragment_id: int, properties: List[Property]) -> Optional[FragmentBuffer]:
    proxy = _query(f"render proxy lookup for fragment {fragment_id}", lambda: scene.get_render_proxy(fragment_id))
    if proxy is None:
        logger.warning("Fragment %s has no render proxy; skipping", fragment_id)
        return None

    material = resolve_material(proxy.material, properties)
    try:
        decoded = decode_geometry(proxy.geometry)
        # Reject a bad world matrix here so one fragment cannot fail the whole element.
        as_matrix(proxy.matrixWorld)
    except NoGeometry as exc:
        logger.warning("Fragment %s: %s; skipping", fragment_id, exc)
        return None
    except (MalformedBuffer, ValueError) as exc:
        logger.warning("Fragment %s: malformed buffer (%s); skipping", fragment_id, exc)
        return None

    if extract_debug_enabled():
        logger.debug(
            "Fragment %s: stride=%d vertices=%d indexed=%s material=%r",
            fragment_id,
            decoded.stride,
            decoded.vertex_count,
            decoded.indices is not None,
            material,
        )
    return FragmentBuffer(
        buffer=decoded,
        transform=proxy.matrixWorld,
        material=material,
        fragment_id=fragment_id,
    )


def extract_element_metadata(scene: SceneGraph, element_id: int) -> ElementMetadata:
    """Collect the properties and world-space faces of one element.

    Raises:
        CollaboratorFailure: If the scene graph cannot be queried.
    """
    record = _query(f"property query for element {element_id}", lambda: scene.get_properties(element_id))
    fragment_ids = _query(
        f"fragment enumeration for element {element_id}",
        lambda: scene.get_fragments_for_element(element_id),
    )
    logger.debug("Element %s: %d fragments", element_id, len(fragment_ids))

    buffers: List[FragmentBuffer] = []
    for fragment_id in fragment_ids:
        entry = _fragment_buffer(scene, fragment_id, record.properties)
        if entry is not None:
            buffers.append(entry)

    faces, total = reconstruct_faces(buffers, start_index=1)
    logger.info(
        "Metadata for element %s (%s): %d properties, %d faces from %d/%d fragments",
        element_id,
        record.name,
        len(record.properties),
        total,
        len(buffers),
        len(fragment_ids),
    )
    return ElementMetadata(
        db_id=element_id,
        name=record.name,
        properties=list(record.properties),
        total_faces=total,
        faces=faces,
    )
