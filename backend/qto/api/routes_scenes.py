"""
Routes for registering and managing scene snapshots.

A host viewer posts a snapshot of the loaded model once and receives a
``sceneId``; takeoff and metadata requests then refer to that id.
Scenes live in memory only and may be evicted when the registry is
full, in which case clients simply register the snapshot again.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from .models import SceneInfo, SceneSnapshot
from ..services.scene_graph import InMemorySceneGraph
from ..services.scene_registry import (
    delete_scene as delete_scene_entry,
    list_scenes as list_scene_entries,
    register_scene,
)


router = APIRouter()


def _scene_info(scene_id: str, scene: InMemorySceneGraph) -> SceneInfo:
    snapshot = scene.snapshot
    return SceneInfo(
        sceneId=scene_id,
        name=snapshot.name,
        elementCount=len(snapshot.elements),
        fragmentCount=len(snapshot.fragments),
    )


@router.post("/scenes", response_model=SceneInfo, status_code=201)
async def create_scene(snapshot: SceneSnapshot) -> SceneInfo:
    """Register a scene snapshot for later extraction requests."""
    scene_id, scene = register_scene(snapshot)
    return _scene_info(scene_id, scene)


@router.get("/scenes", response_model=list[SceneInfo])
async def list_scenes() -> list[SceneInfo]:
    """Return every registered scene, least recently used first."""
    return [_scene_info(scene_id, scene) for scene_id, scene in list_scene_entries()]


@router.delete("/scenes/{scene_id}", status_code=204)
async def delete_scene(scene_id: str) -> None:
    """Drop a registered scene.

    Raises:
        HTTPException: If the scene does not exist.
    """
    if not delete_scene_entry(scene_id):
        raise HTTPException(status_code=404, detail="Scene not found")
    return None
