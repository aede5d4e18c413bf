"""
Pydantic data models for the quantity takeoff API.

Request models mirror what a host viewer can export from a loaded
model: the element hierarchy with its properties and, per fragment, the
render geometry in whichever buffer layout the viewer uses.  Response
models describe the takeoff table and the per-element metadata.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class PropertyPayload(BaseModel):
    """A single displayed property of an element."""

    displayName: str = Field(..., description="Property name as shown by the viewer")
    displayValue: Any = Field(default=None, description="Property value as shown by the viewer")


class ElementPayload(BaseModel):
    """One node of the model hierarchy."""

    dbId: int = Field(..., description="Element identifier within the model")
    name: str = Field(default="", description="Display name of the element")
    children: List[int] = Field(default_factory=list, description="Identifiers of child elements")
    properties: List[PropertyPayload] = Field(default_factory=list)
    fragments: List[int] = Field(
        default_factory=list, description="Identifiers of the fragments rendering this element"
    )


class MaterialPayload(BaseModel):
    """Live render material of a fragment."""

    name: Optional[str] = None
    id: Optional[Union[int, str]] = None
    color: Optional[Union[int, str, List[float]]] = Field(
        default=None,
        description="Colour as 0xRRGGBB, a hex string or an RGB triple in [0, 1]",
    )


class GeometryPayload(BaseModel):
    """Render geometry in attribute form or packed form.

    Attribute form uses ``position`` (x, y, z per vertex) and ``index``.
    Packed form uses ``vb`` with ``vbstride`` values per vertex and
    ``ib``.  When both are present the attribute form wins.
    """

    position: Optional[List[float]] = None
    index: Optional[List[int]] = None
    vb: Optional[List[float]] = None
    vbstride: Optional[int] = None
    ib: Optional[List[int]] = None


class FragmentPayload(BaseModel):
    """Render proxy of one fragment."""

    fragId: int = Field(..., description="Fragment identifier")
    geometry: Optional[GeometryPayload] = None
    material: Optional[MaterialPayload] = None
    matrixWorld: Optional[List[float]] = Field(
        default=None,
        description="Column-major 4x4 world transform (16 values, translation in 12-14)",
    )


class SceneSnapshot(BaseModel):
    """Everything the takeoff needs from a loaded model."""

    name: str = Field(default="", description="Human readable name of the model")
    rootId: Optional[int] = Field(default=None, description="Identifier of the hierarchy root")
    elements: List[ElementPayload] = Field(default_factory=list)
    fragments: List[FragmentPayload] = Field(default_factory=list)


class SceneInfo(BaseModel):
    """Summary of a registered scene."""

    sceneId: str = Field(..., description="Identifier assigned when the scene was registered")
    name: str
    elementCount: int
    fragmentCount: int


class QuantityBucket(BaseModel):
    """Elements sharing a family and type, with their summed measure."""

    elementIds: List[int]
    totalMeasure: float


class QuantityRow(BaseModel):
    """One formatted line of the takeoff table."""

    family: str
    type: str
    count: int
    measure: str = Field(..., description="Measure to two decimals with unit, or '-'")
    elementIds: List[int]


class QuantityTakeoffResponse(BaseModel):
    """Result of a quantity takeoff."""

    measureKey: str
    unit: str
    buckets: Dict[str, QuantityBucket] = Field(
        ..., description="Buckets keyed by 'family|type' in first-occurrence order"
    )
    rows: List[QuantityRow]


class VertexModel(BaseModel):
    x: float
    y: float
    z: float


class FaceModel(BaseModel):
    faceIndex: int
    vertices: List[VertexModel]
    material: str


class ElementMetadataResponse(BaseModel):
    """Properties and world-space faces of a single element."""

    dbId: int
    name: str
    properties: List[PropertyPayload]
    totalFaces: int
    faces: List[FaceModel]
