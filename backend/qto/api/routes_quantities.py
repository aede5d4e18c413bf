"""
Routes for quantity takeoff and element metadata.

The takeoff endpoint groups a scene's leaf elements by family and type
and returns both the raw buckets and the formatted table rows.  The
metadata endpoint returns one element's properties together with its
world-space triangles.  A scene graph failure is reported as 502 so the
client can retry; nothing from a failed extraction is kept.
"""

from __future__ import annotations

import logging
from typing import Dict

from fastapi import APIRouter, HTTPException

from .models import (
    ElementMetadataResponse,
    FaceModel,
    PropertyPayload,
    QuantityBucket,
    QuantityRow,
    QuantityTakeoffResponse,
    SceneSnapshot,
    VertexModel,
)
from ..config import QuantitySettings, load_quantity_settings
from ..services.extraction import ElementMetadata, extract_element_metadata, extract_quantities
from ..services.quantities import AggregationBucket, format_quantity_rows
from ..services.scene_graph import CollaboratorFailure, InMemorySceneGraph, SceneGraph
from ..services.scene_registry import SceneNotFound, get_scene

logger = logging.getLogger(__name__)

router = APIRouter()


def _lookup_scene(scene_id: str) -> InMemorySceneGraph:
    try:
        return get_scene(scene_id)
    except SceneNotFound:
        raise HTTPException(status_code=404, detail="Scene not found")


def _takeoff_response(
    buckets: Dict[str, AggregationBucket],
    settings: QuantitySettings,
) -> QuantityTakeoffResponse:
    return QuantityTakeoffResponse(
        measureKey=settings.measure_key,
        unit=settings.measure_unit,
        buckets={
            key: QuantityBucket(elementIds=list(b.element_ids), totalMeasure=b.total_measure)
            for key, b in buckets.items()
        },
        rows=[QuantityRow(**row) for row in format_quantity_rows(buckets, settings.measure_unit)],
    )


def _run_takeoff(scene: SceneGraph, label: str) -> QuantityTakeoffResponse:
    settings = load_quantity_settings()
    try:
        buckets = extract_quantities(scene, settings)
    except CollaboratorFailure as exc:
        logger.exception("quantity takeoff failed for %s: %s", label, exc)
        raise HTTPException(status_code=502, detail=f"Quantity takeoff failed: {exc}")
    return _takeoff_response(buckets, settings)


def _metadata_response(metadata: ElementMetadata) -> ElementMetadataResponse:
    return ElementMetadataResponse(
        dbId=metadata.db_id,
        name=metadata.name,
        properties=[
            PropertyPayload(displayName=p.display_name, displayValue=p.display_value)
            for p in metadata.properties
        ],
        totalFaces=metadata.total_faces,
        faces=[
            FaceModel(
                faceIndex=face.index,
                vertices=[VertexModel(x=v[0], y=v[1], z=v[2]) for v in face.vertices],
                material=face.material,
            )
            for face in metadata.faces
        ],
    )


@router.get("/scenes/{scene_id}/quantities", response_model=QuantityTakeoffResponse)
async def get_quantities(scene_id: str) -> QuantityTakeoffResponse:
    """Run a quantity takeoff over a registered scene."""
    scene = _lookup_scene(scene_id)
    return _run_takeoff(scene, f"scene {scene_id}")


@router.post("/quantities", response_model=QuantityTakeoffResponse)
async def post_quantities(snapshot: SceneSnapshot) -> QuantityTakeoffResponse:
    """Run a quantity takeoff over a snapshot sent in the request body."""
    return _run_takeoff(InMemorySceneGraph(snapshot), f"inline snapshot {snapshot.name!r}")


@router.get(
    "/scenes/{scene_id}/elements/{element_id}/metadata",
    response_model=ElementMetadataResponse,
)
async def get_element_metadata(scene_id: str, element_id: int) -> ElementMetadataResponse:
    """Return properties and world-space faces of one element.

    Raises:
        HTTPException: 404 for an unknown scene, 502 when the scene
            graph cannot answer (including unknown elements).
    """
    scene = _lookup_scene(scene_id)
    try:
        metadata = extract_element_metadata(scene, element_id)
    except CollaboratorFailure as exc:
        logger.exception(
            "metadata extraction failed for scene_id=%s element_id=%s: %s", scene_id, element_id, exc
        )
        raise HTTPException(status_code=502, detail=f"Metadata extraction failed: {exc}")
    return _metadata_response(metadata)
