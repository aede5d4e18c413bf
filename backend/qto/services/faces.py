"""
Triangle reconstruction from decoded fragment buffers.

Each decoded buffer is walked either through its index array (three
indices per triangle) or, when it has none, as a plain triangle list of
consecutive vertex records.  Every corner is transformed into world
space before it is stored.  Faces are numbered with a single counter
shared by all buffers of one extraction, so the numbering stays
contiguous whichever traversal produced a face and whichever fragments
were skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .buffers import DecodedBuffer
from .transforms import Vertex, apply_transform_array

logger = logging.getLogger(__name__)


@dataclass
class Face:
    """One world-space triangle of an element."""

    index: int
    vertices: Tuple[Vertex, Vertex, Vertex]
    material: str


@dataclass
class FragmentBuffer:
    """A decoded buffer together with what is needed to emit its faces.

    ``buffer`` is ``None`` for a fragment whose geometry could not be
    decoded; such entries contribute no faces.
    """

    buffer: Optional[DecodedBuffer]
    transform: Optional[Sequence[float]] = None
    material: str = ""
    fragment_id: Optional[int] = field(default=None, compare=False)


def _triangle_corners(buf: DecodedBuffer, fragment_id: Optional[int]) -> np.ndarray:
    """Return an ``(T, 3)`` array of vertex numbers, one row per triangle."""
    vertex_count = buf.vertex_count
    if buf.indices is None:
        triangles = vertex_count // 3
        if vertex_count % 3:
            logger.warning(
                "Fragment %s: %d vertices do not form whole triangles; ignoring the last %d",
                fragment_id,
                vertex_count,
                vertex_count % 3,
            )
        return np.arange(triangles * 3, dtype=np.int64).reshape(triangles, 3)

    indices = buf.indices
    remainder = indices.size % 3
    if remainder:
        logger.warning(
            "Fragment %s: index buffer of length %d is not a multiple of 3; dropping %d trailing indices",
            fragment_id,
            indices.size,
            remainder,
        )
        indices = indices[: indices.size - remainder]
    corners = indices.reshape(-1, 3)
    in_range = np.all((corners >= 0) & (corners < vertex_count), axis=1)
    if not np.all(in_range):
        logger.warning(
            "Fragment %s: %d triangles reference vertices outside the %d available; skipping them",
            fragment_id,
            int(np.count_nonzero(~in_range)),
            vertex_count,
        )
        corners = corners[in_range]
    return corners


def reconstruct_faces(
    buffers: Sequence[FragmentBuffer],
    start_index: int = 1,
) -> Tuple[List[Face], int]:
    """Rebuild ordered world-space faces from decoded fragment buffers.

    Args:
        buffers: Decoded buffers in fragment order.
        start_index: Index assigned to the first emitted face.

    Returns:
        A tuple ``(faces, total_face_count)`` where ``faces`` are numbered
        ``start_index .. start_index + total_face_count - 1``.
    """
    faces: List[Face] = []
    next_index = start_index
    for entry in buffers:
        buf = entry.buffer
        if buf is None:
            continue
        corners = _triangle_corners(buf, entry.fragment_id)
        if corners.size == 0:
            continue
        world = apply_transform_array(buf.vertices(), entry.transform)
        triangles = world[corners]
        for tri in triangles:
            a, b, c = (tuple(float(v) for v in corner) for corner in tri)
            faces.append(Face(index=next_index, vertices=(a, b, c), material=entry.material))
            next_index += 1
    return faces, next_index - start_index
