"""Scene graph transform resolution.

This module provides the node/scene data structures, the point transform
primitives and the traversal that maps every mesh to its root-to-leaf
transform chain.
"""

from .transform import (
    NodeTransform,
    apply_node_transform,
    apply_quaternion,
    apply_transform_chain,
    chain_to_matrix,
    transform_points,
)
from .graph import (
    Scene,
    SceneGraphCycleError,
    SceneGraphDepthError,
    SceneGraphError,
    SceneNode,
    UnresolvedNodeError,
    build_mesh_transforms,
    walk_scene,
)
from .assembly import build_circuit_scene
from .bounds import BoundingBox, scene_world_bounds
from .loader import load_gltf

__all__ = [
    "NodeTransform",
    "apply_node_transform",
    "apply_quaternion",
    "apply_transform_chain",
    "chain_to_matrix",
    "transform_points",
    "Scene",
    "SceneNode",
    "SceneGraphError",
    "SceneGraphCycleError",
    "SceneGraphDepthError",
    "UnresolvedNodeError",
    "build_mesh_transforms",
    "walk_scene",
    "build_circuit_scene",
    "BoundingBox",
    "scene_world_bounds",
    "load_gltf",
]
