"""Tests for the in-memory scene graph collaborator."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from qto.api.models import SceneSnapshot  # type: ignore
from qto.services.scene_graph import InMemorySceneGraph  # type: ignore


def _snapshot(root_id=1) -> SceneSnapshot:
    return SceneSnapshot.model_validate(
        {
            "name": "tree",
            "rootId": root_id,
            "elements": [
                {"dbId": 1, "children": [2, 3, 6]},
                {"dbId": 2, "properties": [{"displayName": "Family", "displayValue": "Wall"}]},
                {"dbId": 3, "children": [4, 5]},
                {"dbId": 4},
                {
                    "dbId": 5,
                    "name": "Door [5]",
                    "fragments": [50, 51],
                    "properties": [
                        {"displayName": "Family", "displayValue": "Door"},
                        {"displayName": "Mark", "displayValue": "D1"},
                        {"displayName": "Volume", "displayValue": 0.4},
                    ],
                },
                {"dbId": 6},
                {"dbId": 7},
            ],
            "fragments": [{"fragId": 50}],
        }
    )


def test_leaves_are_enumerated_depth_first_from_the_root() -> None:
    scene = InMemorySceneGraph(_snapshot())
    # Element 7 is not reachable from the root.
    assert scene.list_leaf_elements() == [2, 4, 5, 6]


def test_without_root_every_childless_element_is_a_leaf() -> None:
    scene = InMemorySceneGraph(_snapshot(root_id=None))
    assert scene.list_leaf_elements() == [2, 4, 5, 6, 7]


def test_childless_root_is_its_own_leaf() -> None:
    scene = InMemorySceneGraph(_snapshot(root_id=4))
    assert scene.list_leaf_elements() == [4]


def test_unknown_root_is_an_error() -> None:
    with pytest.raises(KeyError):
        InMemorySceneGraph(_snapshot(root_id=99)).list_leaf_elements()


def test_bulk_properties_are_filtered_by_name_and_skip_unknown_ids() -> None:
    scene = InMemorySceneGraph(_snapshot())
    records = scene.get_bulk_properties([5, 99, 2], ["Family", "Volume"])
    assert [r.db_id for r in records] == [5, 2]
    assert [p.display_name for p in records[0].properties] == ["Family", "Volume"]
    assert records[0].value_of("Volume") == 0.4
    assert records[0].value_of("Mark") is None


def test_single_element_queries() -> None:
    scene = InMemorySceneGraph(_snapshot())
    record = scene.get_properties(5)
    assert record.name == "Door [5]"
    assert len(record.properties) == 3
    assert scene.get_fragments_for_element(5) == [50, 51]
    with pytest.raises(KeyError):
        scene.get_properties(99)


def test_render_proxy_may_be_absent() -> None:
    scene = InMemorySceneGraph(_snapshot())
    assert scene.get_render_proxy(50).fragId == 50
    assert scene.get_render_proxy(51) is None
