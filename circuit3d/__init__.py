"""circuit3d - Scene graph and camera framing core for 3D circuit export.

Resolves the transforms that place each mesh of an exported circuit board
scene in world space, and derives a default camera framing for the board.
"""

__version__ = "0.1.0"

from .camera import CameraFraming, best_camera_position
from .core.config import Circuit3DConfig
from .scene import (
    NodeTransform,
    Scene,
    SceneNode,
    apply_node_transform,
    apply_quaternion,
    build_circuit_scene,
    build_mesh_transforms,
)

__all__ = [
    "CameraFraming",
    "best_camera_position",
    "Circuit3DConfig",
    "NodeTransform",
    "Scene",
    "SceneNode",
    "apply_node_transform",
    "apply_quaternion",
    "build_circuit_scene",
    "build_mesh_transforms",
]
