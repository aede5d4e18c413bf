"""
Render buffer decoding.

Host viewers hand out fragment geometry in one of two layouts:

- *attribute form*: a flat ``position`` array of ``x, y, z`` triples and
  an optional flat ``index`` array;
- *packed form*: a flat ``vb`` array of interleaved vertex records whose
  width is ``vbstride`` (the first three fields are the position, the
  rest are normals, UVs and so on) and an optional flat ``ib`` array.

``decode_geometry`` normalises either layout into a single
:class:`DecodedBuffer` so that nothing downstream needs to know which
layout a fragment used.  The input object is never modified; numpy
arrays are created as copies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

logger = logging.getLogger(__name__)

# Number of position components at the start of every vertex record.
POSITION_COMPONENTS = 3


class NoGeometry(Exception):
    """Raised when a fragment carries no decodable vertex buffer."""


class MalformedBuffer(ValueError):
    """Raised when a buffer cannot be interpreted even after truncation."""


@dataclass
class DecodedBuffer:
    """Canonical representation of one fragment's geometry.

    Attributes:
        positions: Flat float array of vertex records, ``stride`` values
            per vertex, truncated to whole vertices.
        stride: Number of values per vertex record (always >= 3).
        indices: Flat integer array of triangle corners, or ``None`` for
            a non-indexed triangle list.
    """

    positions: np.ndarray
    stride: int
    indices: Optional[np.ndarray]

    @property
    def vertex_count(self) -> int:
        return int(self.positions.size // self.stride)

    def vertices(self) -> np.ndarray:
        """Return the position components as an ``(N, 3)`` array."""
        n = self.vertex_count
        return self.positions[: n * self.stride].reshape(n, self.stride)[:, :POSITION_COMPONENTS]


def _present(value: Any) -> bool:
    return value is not None and len(value) > 0


def decode_geometry(geometry: Any) -> DecodedBuffer:
    """Normalise a fragment geometry object into a :class:`DecodedBuffer`.

    The attribute-form ``position`` array takes precedence over the
    packed ``vb`` buffer.  Index resolution is independent of the
    vertex layout: ``index`` is preferred, then ``ib``, otherwise the
    geometry is treated as a non-indexed triangle list.

    Args:
        geometry: Any object exposing some of the attributes
            ``position``, ``index``, ``vb``, ``vbstride`` and ``ib``.

    Returns:
        DecodedBuffer: Positions, stride and optional indices.

    Raises:
        NoGeometry: If neither a position array nor a packed vertex
            buffer is present.
        MalformedBuffer: If the declared stride is smaller than three.
    """
    if geometry is None:
        raise NoGeometry("fragment has no geometry object")

    position = getattr(geometry, "position", None)
    packed = getattr(geometry, "vb", None)
    if _present(position):
        raw = position
        stride = POSITION_COMPONENTS
    elif _present(packed):
        raw = packed
        stride = getattr(geometry, "vbstride", None) or POSITION_COMPONENTS
    else:
        raise NoGeometry("geometry has neither a position attribute nor a packed vertex buffer")

    stride = int(stride)
    if stride < POSITION_COMPONENTS:
        raise MalformedBuffer(f"vertex stride {stride} is smaller than {POSITION_COMPONENTS}")

    positions = np.array(raw, dtype=np.float64).reshape(-1)
    remainder = positions.size % stride
    if remainder:
        logger.warning(
            "Vertex buffer of %d values is not a multiple of stride %d; dropping %d trailing values",
            positions.size,
            stride,
            remainder,
        )
        positions = positions[: positions.size - remainder]

    # An empty index array still marks the geometry as indexed.
    index = getattr(geometry, "index", None)
    if index is None:
        index = getattr(geometry, "ib", None)
    indices = np.array(index, dtype=np.int64).reshape(-1) if index is not None else None

    return DecodedBuffer(positions=positions, stride=stride, indices=indices)
