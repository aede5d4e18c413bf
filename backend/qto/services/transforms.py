"""
World transform application.

Fragment transforms arrive as 16 numbers in column-major order, the
layout used by WebGL viewers: elements 0-3 are the first column and the
translation sits in elements 12-14.  A local vertex ``v`` is mapped to
world space as a row vector times the matrix::

    x' = v.x*m[0] + v.y*m[4] + v.z*m[8]  + m[12]
    y' = v.x*m[1] + v.y*m[5] + v.z*m[9]  + m[13]
    z' = v.x*m[2] + v.y*m[6] + v.z*m[10] + m[14]

Reshaping the flat array to ``(4, 4)`` in C order gives a matrix whose
rows are the columns above, so the whole mapping is a single
``homogeneous @ M`` product.  The projective row is ignored.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

Vertex = Tuple[float, float, float]

IDENTITY: Tuple[float, ...] = (
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
)


def as_matrix(elements: Optional[Sequence[float]]) -> np.ndarray:
    """Return a ``(4, 4)`` array for a flat 16-element transform.

    ``None`` yields the identity.

    Raises:
        ValueError: If ``elements`` does not hold exactly 16 numbers.
    """
    if elements is None:
        elements = IDENTITY
    matrix = np.array(elements, dtype=np.float64).reshape(-1)
    if matrix.size != 16:
        raise ValueError(f"transform must have 16 elements, got {matrix.size}")
    return matrix.reshape(4, 4)


def apply_transform(vertex: Sequence[float], matrix: Optional[Sequence[float]]) -> Vertex:
    """Map a single local vertex into world space."""
    m = as_matrix(matrix)
    x, y, z = float(vertex[0]), float(vertex[1]), float(vertex[2])
    return (
        x * m[0, 0] + y * m[1, 0] + z * m[2, 0] + m[3, 0],
        x * m[0, 1] + y * m[1, 1] + z * m[2, 1] + m[3, 1],
        x * m[0, 2] + y * m[1, 2] + z * m[2, 2] + m[3, 2],
    )


def apply_transform_array(vertices: np.ndarray, matrix: Optional[Sequence[float]]) -> np.ndarray:
    """Map an ``(N, 3)`` array of local vertices into world space.

    A new array is returned; ``vertices`` is left untouched.
    """
    m = as_matrix(matrix)
    pts = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
    homogeneous = np.hstack([pts, np.ones((pts.shape[0], 1), dtype=np.float64)])
    return (homogeneous @ m)[:, :3]
