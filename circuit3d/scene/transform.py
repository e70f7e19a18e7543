"""Point transformation primitives for scene-graph nodes.

Provides NodeTransform for representing an optional scale, rotation and
translation, plus helpers that apply a single transform or a whole
root-to-leaf chain to points.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, Field
from scipy.spatial.transform import Rotation

Point3 = Tuple[float, float, float]
Quaternion = Tuple[float, float, float, float]  # (x, y, z, w)

IDENTITY_QUATERNION: Quaternion = (0.0, 0.0, 0.0, 1.0)


class NodeTransform(BaseModel):
    """Local transform of a scene node.

    Every field is optional. ``None`` means the operation is absent and is
    skipped when the transform is applied; an identity value is kept as-is
    so a node's authored fields survive a round trip.

    Attributes:
        scale: Per-axis multiplicative factor
        rotation: Quaternion (x, y, z, w)
        translation: Additive offset
    """

    scale: tuple[float, float, float] | None = Field(
        default=None,
        description="Per-axis scale factor"
    )
    rotation: tuple[float, float, float, float] | None = Field(
        default=None,
        description="Rotation quaternion (x, y, z, w)"
    )
    translation: tuple[float, float, float] | None = Field(
        default=None,
        description="Translation offset"
    )

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        """True when no field is present."""
        return self.scale is None and self.rotation is None and self.translation is None

    def apply(self, point: Sequence[float]) -> Point3:
        """Apply this transform to a single point."""
        return apply_node_transform(point, self)

    def to_matrix(self) -> NDArray[np.float64]:
        """Convert to a 4x4 homogeneous matrix (T @ R @ S)."""
        return node_transform_matrix(self)

    def __repr__(self) -> str:
        fields = []
        if self.scale is not None:
            fields.append(f"scale={self.scale}")
        if self.rotation is not None:
            fields.append(f"rot={self.rotation}")
        if self.translation is not None:
            fields.append(f"pos={self.translation}")
        return f"NodeTransform({', '.join(fields)})"


MeshTransformChain = Tuple[NodeTransform, ...]


def apply_quaternion(point: Sequence[float], q: Sequence[float]) -> Point3:
    """Rotate a point by a quaternion (p' = q * p * q^-1).

    The quaternion is used as given; a non-unit quaternion scales the
    result by its squared norm. Components may be numpy arrays, in which
    case the rotation is evaluated element-wise.

    Args:
        point: (x, y, z)
        q: Quaternion as (x, y, z, w)

    Returns:
        Rotated point
    """
    qx, qy, qz, qw = q
    x, y, z = point

    ix = qw * x + qy * z - qz * y
    iy = qw * y + qz * x - qx * z
    iz = qw * z + qx * y - qy * x
    iw = -qx * x - qy * y - qz * z

    return (
        ix * qw + iw * -qx + iy * -qz - iz * -qy,
        iy * qw + iw * -qy + iz * -qx - ix * -qz,
        iz * qw + iw * -qz + ix * -qy - iy * -qx,
    )


def apply_node_transform(point: Sequence[float], transform: NodeTransform) -> Point3:
    """Apply a node transform to a point.

    Order is fixed: scale -> rotate -> translate, so non-uniform scale is
    expressed in the node's own frame. Absent fields are skipped.

    Args:
        point: (x, y, z)
        transform: Node transform to apply

    Returns:
        Transformed point
    """
    x, y, z = point

    if transform.scale is not None:
        sx, sy, sz = transform.scale
        x, y, z = x * sx, y * sy, z * sz

    if transform.rotation is not None:
        x, y, z = apply_quaternion((x, y, z), transform.rotation)

    if transform.translation is not None:
        tx, ty, tz = transform.translation
        x, y, z = x + tx, y + ty, z + tz

    return (x, y, z)


def apply_transform_chain(
    point: Sequence[float],
    chain: Sequence[NodeTransform],
) -> Point3:
    """Apply a root-first transform chain to a point.

    Entries are applied in chain order, root (first) to leaf (last),
    mapping a mesh-local point to world space.
    """
    result: Point3 = (point[0], point[1], point[2])
    for transform in chain:
        result = apply_node_transform(result, transform)
    return result


def transform_points(
    points: NDArray[np.float64],
    chain: Sequence[NodeTransform],
) -> NDArray[np.float64]:
    """Apply a transform chain to an Nx3 array of points.

    Args:
        points: Nx3 array of XYZ coordinates
        chain: Root-first transform chain

    Returns:
        Transformed Nx3 array of points
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    x, y, z = pts[:, 0], pts[:, 1], pts[:, 2]

    for transform in chain:
        x, y, z = apply_node_transform((x, y, z), transform)

    return np.column_stack([x, y, z])


def node_transform_matrix(transform: NodeTransform) -> NDArray[np.float64]:
    """Convert a node transform to a 4x4 homogeneous matrix.

    The rotation block is built by rotating the basis vectors with
    apply_quaternion, so the matrix agrees with point application even for
    non-unit quaternions.

    Returns:
        4x4 transformation matrix (T @ R @ S)
    """
    # Scale matrix
    s = np.eye(4, dtype=np.float64)
    if transform.scale is not None:
        s[0, 0], s[1, 1], s[2, 2] = transform.scale

    # Rotation matrix, columns are the rotated basis vectors
    r = np.eye(4, dtype=np.float64)
    if transform.rotation is not None:
        for col, axis in enumerate(np.eye(3)):
            r[:3, col] = apply_quaternion(axis, transform.rotation)

    # Translation matrix
    t = np.eye(4, dtype=np.float64)
    if transform.translation is not None:
        t[:3, 3] = transform.translation

    return t @ r @ s


def chain_to_matrix(chain: Sequence[NodeTransform]) -> NDArray[np.float64]:
    """Collapse a root-first chain into a single matrix.

    The result equals apply_transform_chain: the root entry acts on the
    point first, so the product is built as M_leaf @ ... @ M_root.
    """
    matrix = np.eye(4, dtype=np.float64)
    for transform in chain:
        matrix = node_transform_matrix(transform) @ matrix
    return matrix


def matrix_to_node_transform(matrix: NDArray[np.float64]) -> NodeTransform:
    """Decompose a 4x4 matrix into scale, rotation and translation.

    Shear is not representable and is discarded. A reflection is folded
    into a negative X scale so the rotation part stays proper.

    Args:
        matrix: 4x4 homogeneous transformation matrix

    Returns:
        NodeTransform with all three fields present

    Raises:
        ValueError: If the matrix is not 4x4 or has a zero-scale axis
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.shape != (4, 4):
        raise ValueError(f"Expected a 4x4 matrix, got shape {matrix.shape}")

    rot_part = matrix[:3, :3].copy()
    scales = np.array([np.linalg.norm(rot_part[:, i]) for i in range(3)])

    if np.any(scales < 1e-10):
        raise ValueError(
            f"Matrix contains zero or near-zero scale: {scales}. "
            "Cannot extract a rotation."
        )

    if np.linalg.det(rot_part) < 0:
        scales[0] = -scales[0]

    rot = Rotation.from_matrix(rot_part / scales)
    qx, qy, qz, qw = (float(v) for v in rot.as_quat())

    return NodeTransform(
        scale=(float(scales[0]), float(scales[1]), float(scales[2])),
        rotation=(qx, qy, qz, qw),
        translation=(float(matrix[0, 3]), float(matrix[1, 3]), float(matrix[2, 3])),
    )


def quaternion_from_euler(
    seq: str,
    angles: float | Sequence[float],
    degrees: bool = True,
) -> Quaternion:
    """Build an (x, y, z, w) quaternion from Euler angles.

    Args:
        seq: Axis sequence, e.g. "z" or "xz" (lowercase = extrinsic)
        angles: Angle or angles matching seq
        degrees: Whether angles are in degrees

    Returns:
        Unit quaternion as (x, y, z, w)
    """
    qx, qy, qz, qw = Rotation.from_euler(seq, angles, degrees=degrees).as_quat()
    return (float(qx), float(qy), float(qz), float(qw))
