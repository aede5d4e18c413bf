"""
Tests for world-space face reconstruction.

These tests build small buffers by hand and check face counts, the
contiguous global numbering across fragments, transform application
and the handling of truncated or inconsistent buffers.
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from qto.api.models import GeometryPayload  # type: ignore
from qto.services.buffers import decode_geometry  # type: ignore
from qto.services.faces import FragmentBuffer, reconstruct_faces  # type: ignore
from qto.services.transforms import IDENTITY  # type: ignore


def _quad_buffer(material: str = "M", transform=None) -> FragmentBuffer:
    """Unit square in the xy plane made of two indexed triangles."""
    geometry = GeometryPayload(
        position=[0, 0, 0, 1, 0, 0, 1, 1, 0, 0, 1, 0],
        index=[0, 1, 2, 0, 2, 3],
    )
    return FragmentBuffer(buffer=decode_geometry(geometry), transform=transform, material=material)


def test_indexed_buffer_emits_one_face_per_triple() -> None:
    faces, total = reconstruct_faces([_quad_buffer()], start_index=5)
    assert total == 2
    assert [f.index for f in faces] == [5, 6]
    assert faces[0].vertices == ((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0))
    assert faces[1].vertices[2] == (0.0, 1.0, 0.0)
    assert all(f.material == "M" for f in faces)


def test_packed_indexed_buffer_reads_only_position_fields() -> None:
    vb = [
        0.0, 0.0, 0.0, 9.0, 9.0, 9.0,
        1.0, 0.0, 0.0, 9.0, 9.0, 9.0,
        0.0, 1.0, 0.0, 9.0, 9.0, 9.0,
        0.0, 0.0, 1.0, 9.0, 9.0, 9.0,
    ]
    buf = decode_geometry(GeometryPayload(vb=vb, vbstride=6, ib=[0, 1, 3]))
    faces, total = reconstruct_faces([FragmentBuffer(buffer=buf)])
    assert total == 1
    assert faces[0].vertices == ((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 1.0))


def test_non_indexed_buffer_walks_stride_times_three() -> None:
    # Seven vertices of stride 4: two whole triangles and one leftover vertex.
    vb = []
    for i in range(7):
        vb.extend([float(i), 0.0, 0.0, -1.0])
    buf = decode_geometry(GeometryPayload(vb=vb, vbstride=4))
    faces, total = reconstruct_faces([FragmentBuffer(buffer=buf)])
    assert total == len(vb) // (4 * 3) == 2
    assert faces[1].vertices == ((3.0, 0.0, 0.0), (4.0, 0.0, 0.0), (5.0, 0.0, 0.0))


def test_transform_is_applied_to_every_vertex() -> None:
    matrix = list(IDENTITY)
    matrix[12:15] = [10.0, 20.0, 30.0]
    faces, _ = reconstruct_faces([_quad_buffer(transform=matrix)])
    assert faces[0].vertices[0] == (10.0, 20.0, 30.0)
    assert faces[1].vertices[2] == (10.0, 21.0, 30.0)


def test_numbering_is_contiguous_across_buffers_and_skipped_entries() -> None:
    buffers = [
        _quad_buffer("A"),
        FragmentBuffer(buffer=None, material="skipped"),
        _quad_buffer("B"),
    ]
    faces, total = reconstruct_faces(buffers)
    assert total == 4
    assert [f.index for f in faces] == [1, 2, 3, 4]
    assert [f.material for f in faces] == ["A", "A", "B", "B"]


def test_trailing_partial_triple_is_dropped() -> None:
    geometry = GeometryPayload(position=[0, 0, 0, 1, 0, 0, 0, 1, 0], index=[0, 1, 2, 0, 1])
    faces, total = reconstruct_faces([FragmentBuffer(buffer=decode_geometry(geometry))])
    assert total == 1
    assert len(faces) == 1


def test_out_of_range_triangles_are_skipped() -> None:
    geometry = GeometryPayload(position=[0, 0, 0, 1, 0, 0, 0, 1, 0], index=[0, 1, 2, 0, 1, 7])
    faces, total = reconstruct_faces([FragmentBuffer(buffer=decode_geometry(geometry))])
    assert total == 1
    assert faces[0].index == 1


def test_no_buffers_yield_no_faces() -> None:
    assert reconstruct_faces([]) == ([], 0)


def test_empty_index_array_emits_no_faces() -> None:
    geometry = GeometryPayload(position=[0, 0, 0, 1, 0, 0, 0, 1, 0], index=[])
    faces, total = reconstruct_faces([FragmentBuffer(buffer=decode_geometry(geometry))])
    assert total == 0
    assert faces == []


def test_packed_stride_six_selects_leading_fields_of_each_block() -> None:
    """Only the first three floats of each indexed stride-6 block are used."""
    x = 9.0
    vb = [0, 0, 0, 1, 1, 1, x, x, x, 2, 0, 0, 0, 2, 0, x, x, x, 0, 0, 2, x, x, x, x, x, x]
    buf = decode_geometry(GeometryPayload(vb=vb, vbstride=6, ib=[0, 1, 3]))
    assert buf.vertex_count == 4
    faces, total = reconstruct_faces([FragmentBuffer(buffer=buf)])
    assert total == 1
    assert faces[0].vertices == ((0.0, 0.0, 0.0), (x, x, x), (0.0, 0.0, 2.0))
