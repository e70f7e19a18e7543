"""World-space bounding boxes for glTF meshes.

Local mesh bounds come from the ``min``/``max`` of each primitive's
POSITION accessor, which glTF requires to be present. The eight corners
of the local box are pushed through the mesh's transform chain, so the
result is exact for translation and axis-aligned scale and conservative
under rotation.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Mapping, Sequence

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, Field

from .graph import DEFAULT_MAX_DEPTH, MeshId, Scene, build_mesh_transforms
from .transform import transform_points

logger = logging.getLogger(__name__)


class BoundingBox(BaseModel):
    """Axis-aligned bounding box."""

    min: tuple[float, float, float] = Field(description="Minimum XYZ corner")
    max: tuple[float, float, float] = Field(description="Maximum XYZ corner")

    @classmethod
    def from_points(cls, points: NDArray[np.float64]) -> BoundingBox:
        """Create the box enclosing an Nx3 array of points."""
        lo = points.min(axis=0)
        hi = points.max(axis=0)
        return cls(
            min=(float(lo[0]), float(lo[1]), float(lo[2])),
            max=(float(hi[0]), float(hi[1]), float(hi[2])),
        )

    @property
    def size(self) -> tuple[float, float, float]:
        """Return box dimensions (x, y, z)."""
        return (
            self.max[0] - self.min[0],
            self.max[1] - self.min[1],
            self.max[2] - self.min[2],
        )

    @property
    def center(self) -> tuple[float, float, float]:
        """Return box center point."""
        return (
            (self.min[0] + self.max[0]) / 2,
            (self.min[1] + self.max[1]) / 2,
            (self.min[2] + self.max[2]) / 2,
        )

    def corners(self) -> NDArray[np.float64]:
        """Return the 8 box corners as an 8x3 array."""
        return np.array(
            list(itertools.product(*zip(self.min, self.max))),
            dtype=np.float64,
        )

    def union(self, other: BoundingBox) -> BoundingBox:
        """Return the smallest box containing both boxes."""
        return BoundingBox.from_points(np.array([self.min, self.max, other.min, other.max]))


def mesh_local_bounds(gltf: Mapping[str, Any], mesh_index: int) -> BoundingBox | None:
    """Local-space bounds of a glTF mesh from its POSITION accessors.

    Args:
        gltf: Parsed glTF JSON
        mesh_index: Index into the ``meshes`` array

    Returns:
        BoundingBox, or None if no primitive has POSITION min/max
    """
    meshes = gltf.get("meshes") or []
    accessors = gltf.get("accessors") or []
    if not 0 <= mesh_index < len(meshes):
        logger.debug(f"Mesh {mesh_index} not present in document")
        return None

    box: BoundingBox | None = None
    for primitive in meshes[mesh_index].get("primitives", []):
        accessor_index = primitive.get("attributes", {}).get("POSITION")
        if accessor_index is None or not 0 <= accessor_index < len(accessors):
            continue
        accessor = accessors[accessor_index]
        if "min" not in accessor or "max" not in accessor:
            logger.debug(f"Accessor {accessor_index} has no min/max, skipping")
            continue
        prim_box = BoundingBox(min=tuple(accessor["min"][:3]), max=tuple(accessor["max"][:3]))
        box = prim_box if box is None else box.union(prim_box)

    return box


def mesh_world_bounds(
    gltf: Mapping[str, Any],
    strict: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
    scene_index: int | None = None,
) -> dict[MeshId, BoundingBox]:
    """World-space bounds of every placed mesh in a glTF document.

    Meshes not referenced from the scene graph are omitted.

    Returns:
        Dict of mesh index -> world BoundingBox
    """
    scene = Scene.from_gltf(gltf, scene_index=scene_index)
    chains = build_mesh_transforms(scene, strict=strict, max_depth=max_depth)

    bounds: dict[MeshId, BoundingBox] = {}
    for mesh_id, chain in chains.items():
        if not isinstance(mesh_id, int):
            continue
        local = mesh_local_bounds(gltf, mesh_id)
        if local is None:
            continue
        bounds[mesh_id] = BoundingBox.from_points(transform_points(local.corners(), chain))

    return bounds


def scene_world_bounds(
    gltf: Mapping[str, Any],
    strict: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
    scene_index: int | None = None,
) -> BoundingBox | None:
    """World-space bounds of the whole scene, or None if nothing is placed."""
    boxes: Sequence[BoundingBox] = list(
        mesh_world_bounds(gltf, strict=strict, max_depth=max_depth, scene_index=scene_index).values()
    )
    if not boxes:
        return None

    result = boxes[0]
    for box in boxes[1:]:
        result = result.union(box)
    return result
