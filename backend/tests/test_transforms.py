"""Tests for world transform application."""

from __future__ import annotations

import math
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from qto.services.transforms import IDENTITY, apply_transform, apply_transform_array  # type: ignore

# Rotation of 90 degrees about z followed by a translation of (10, 20, 30),
# stored column by column.
ROTATE_Z_TRANSLATE = [
    0.0, 1.0, 0.0, 0.0,
    -1.0, 0.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    10.0, 20.0, 30.0, 1.0,
]


def test_identity_leaves_vertex_unchanged() -> None:
    vertex = (1.25, -3.5, 7.0)
    result = apply_transform(vertex, IDENTITY)
    for a, b in zip(result, vertex):
        assert math.isclose(a, b, abs_tol=1e-12)


def test_missing_matrix_is_identity() -> None:
    assert apply_transform((1.0, 2.0, 3.0), None) == (1.0, 2.0, 3.0)


def test_translation_is_read_from_elements_12_to_14() -> None:
    matrix = list(IDENTITY)
    matrix[12:15] = [5.0, -1.0, 2.0]
    assert apply_transform((1.0, 1.0, 1.0), matrix) == (6.0, 0.0, 3.0)


def test_column_major_rotation() -> None:
    x, y, z = apply_transform((1.0, 0.0, 0.0), ROTATE_Z_TRANSLATE)
    assert math.isclose(x, 10.0)
    assert math.isclose(y, 21.0)
    assert math.isclose(z, 30.0)


def test_array_form_matches_single_vertex_form() -> None:
    vertices = np.array([[1.0, 0.0, 0.0], [0.0, 2.0, 0.0], [1.0, 1.0, 1.0]])
    original = vertices.copy()
    world = apply_transform_array(vertices, ROTATE_Z_TRANSLATE)
    for local, transformed in zip(vertices, world):
        expected = apply_transform(local, ROTATE_Z_TRANSLATE)
        assert np.allclose(transformed, expected)
    assert np.array_equal(vertices, original)


def test_wrong_matrix_size_is_rejected() -> None:
    with pytest.raises(ValueError):
        apply_transform((0.0, 0.0, 0.0), [1.0] * 12)
