"""Scene graph data structures and transform resolution.

A Scene is an arena of immutable SceneNode records addressed by id, plus an
ordered list of root ids. Children are id references into the node table,
so a scene built from a loosely typed glTF document never keeps pointers
into the source structure.

Traversal is depth-first pre-order: roots in listed order, children in
listed order. Mesh bindings resolve last-visited-wins under that order.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Mapping, Union

import numpy as np
from pydantic import BaseModel, Field, field_serializer, field_validator

from .transform import MeshTransformChain, NodeTransform, matrix_to_node_transform

logger = logging.getLogger(__name__)

NodeId = Union[int, str]
MeshId = Union[int, str]

DEFAULT_MAX_DEPTH = 256


class SceneGraphError(ValueError):
    """Structural problem in a scene graph."""


class UnresolvedNodeError(SceneGraphError):
    """A node id referenced as a root or child is not in the node table."""

    def __init__(self, node_id: NodeId, parent_id: NodeId | None = None):
        self.node_id = node_id
        self.parent_id = parent_id
        if parent_id is None:
            msg = f"Root node {node_id!r} not found in node table"
        else:
            msg = f"Child {node_id!r} of node {parent_id!r} not found in node table"
        super().__init__(msg)


class SceneGraphCycleError(SceneGraphError):
    """A node is its own ancestor."""

    def __init__(self, path: list[NodeId]):
        self.path = path
        cycle = " -> ".join(repr(p) for p in path)
        super().__init__(f"Cycle detected in scene graph: {cycle}")


class SceneGraphDepthError(SceneGraphError):
    """Traversal exceeded the configured maximum depth."""

    def __init__(self, node_id: NodeId, max_depth: int):
        self.node_id = node_id
        self.max_depth = max_depth
        super().__init__(
            f"Scene graph deeper than {max_depth} levels at node {node_id!r}"
        )


class SceneNode(BaseModel):
    """A node in the scene hierarchy.

    Stores the node's local transform, an optional mesh reference and the
    ids of its children in authored order.
    """

    id: NodeId = Field(description="Identifier within the scene node table")
    name: str | None = Field(default=None, description="Display name")
    transform: NodeTransform = Field(
        default_factory=NodeTransform,
        description="Local scale, rotation and translation"
    )
    mesh: MeshId | None = Field(default=None, description="Referenced mesh id")
    children: tuple[NodeId, ...] = Field(
        default=(),
        description="Child node ids in traversal order"
    )

    model_config = {"frozen": True}

    @classmethod
    def from_gltf(cls, index: int, data: Mapping[str, Any]) -> SceneNode:
        """Create a node from a glTF node dictionary.

        TRS fields are copied only when present. A node that carries a
        ``matrix`` and no TRS fields has the matrix decomposed into TRS
        (glTF matrices are column-major).

        Args:
            index: Position of the node in the glTF ``nodes`` array
            data: glTF node dictionary

        Returns:
            SceneNode with id equal to index
        """
        has_trs = any(key in data for key in ("translation", "rotation", "scale"))
        matrix = data.get("matrix")

        if not has_trs and matrix is not None:
            transform = matrix_to_node_transform(
                np.array(matrix, dtype=np.float64).reshape(4, 4).T
            )
        else:
            transform = NodeTransform(
                scale=data.get("scale"),
                rotation=data.get("rotation"),
                translation=data.get("translation"),
            )

        return cls(
            id=index,
            name=data.get("name"),
            transform=transform,
            mesh=data.get("mesh"),
            children=tuple(data.get("children", ())),
        )


@dataclass(frozen=True)
class NodeVisit:
    """A node reached during traversal, with its accumulated chain."""

    node: SceneNode
    chain: MeshTransformChain
    depth: int


class Scene(BaseModel):
    """A scene graph: ordered root ids plus a node table.

    The node table is serialized as a list of nodes so integer ids survive
    a JSON round trip.
    """

    name: str = Field(default="Untitled Scene", description="Scene name")
    roots: tuple[NodeId, ...] = Field(default=(), description="Root node ids in order")
    nodes: dict[NodeId, SceneNode] = Field(
        default_factory=dict,
        description="Node table keyed by node id"
    )

    model_config = {"frozen": True}

    @field_validator("nodes", mode="before")
    @classmethod
    def index_nodes(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            indexed: dict[Any, Any] = {}
            for node in value:
                node_id = node.id if isinstance(node, SceneNode) else node["id"]
                indexed[node_id] = node
            return indexed
        return value

    @field_serializer("nodes")
    def serialize_nodes(self, nodes: dict[NodeId, SceneNode]) -> list[dict[str, Any]]:
        return [node.model_dump(mode="json") for node in nodes.values()]

    @classmethod
    def from_gltf(
        cls,
        gltf: Mapping[str, Any],
        scene_index: int | None = None,
    ) -> Scene:
        """Build a scene from a glTF JSON document.

        Args:
            gltf: Parsed glTF JSON
            scene_index: Scene to use; defaults to the document's ``scene``
                property, then to 0

        Returns:
            Scene with node ids equal to glTF node indices
        """
        nodes = {
            i: SceneNode.from_gltf(i, data)
            for i, data in enumerate(gltf.get("nodes") or [])
        }

        if scene_index is None:
            scene_index = gltf.get("scene", 0)

        scenes = gltf.get("scenes") or []
        roots: tuple[NodeId, ...] = ()
        name = "Untitled Scene"
        if 0 <= scene_index < len(scenes):
            scene_data = scenes[scene_index]
            roots = tuple(scene_data.get("nodes", ()))
            name = scene_data.get("name", name)
        elif scenes:
            logger.warning(
                f"Scene index {scene_index} out of range ({len(scenes)} scenes)"
            )

        return cls(name=name, roots=roots, nodes=nodes)

    def get_node(self, node_id: NodeId) -> SceneNode | None:
        """Get a node by id, or None if it is not in the table."""
        return self.nodes.get(node_id)

    def validate_structure(
        self,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> tuple[bool, list[str]]:
        """Check the graph for unresolved references, cycles and depth.

        Only nodes reachable from the roots are checked, so a scene is valid
        exactly when ``walk_scene(strict=True)`` completes. Unlike traversal,
        this never raises; each unresolved reference is reported once, and a
        cycle or depth overflow ends the check early.

        Returns:
            Tuple of (is_valid, list of issue messages)
        """
        issues: list[str] = []
        if not self.nodes:
            return True, issues

        for root_id in self.roots:
            if root_id not in self.nodes:
                issues.append(str(UnresolvedNodeError(root_id)))

        checked: set[NodeId] = set()
        try:
            for visit in walk_scene(self, max_depth=max_depth):
                node = visit.node
                if node.id in checked:
                    continue
                checked.add(node.id)
                for child_id in node.children:
                    if child_id not in self.nodes:
                        issues.append(str(UnresolvedNodeError(child_id, node.id)))
        except (SceneGraphCycleError, SceneGraphDepthError) as e:
            issues.append(str(e))

        return len(issues) == 0, issues

    def save(self, path: str | Path) -> None:
        """Save scene to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)

    @classmethod
    def load(cls, path: str | Path) -> Scene:
        """Load scene from a JSON file."""
        path = Path(path)
        with open(path) as f:
            data = json.load(f)
        return cls.model_validate(data)

    def __repr__(self) -> str:
        return f"Scene({self.name!r}, {len(self.roots)} roots, {len(self.nodes)} nodes)"


def walk_scene(
    scene: Scene,
    strict: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Iterator[NodeVisit]:
    """Traverse a scene depth-first, yielding each node with its chain.

    Each visited node's chain is the inherited chain plus, when the node
    carries any transform field, a NodeTransform holding exactly those
    fields. Chains are tuples, so sibling subtrees never share appended
    entries.

    Args:
        scene: Scene to traverse
        strict: Raise on unresolved references instead of skipping them
        max_depth: Maximum root-to-node depth (roots are depth 0)

    Yields:
        NodeVisit for every resolved node, in pre-order

    Raises:
        UnresolvedNodeError: Unresolved reference in strict mode
        SceneGraphCycleError: A node is reached again along its own path
        SceneGraphDepthError: Depth exceeds max_depth
    """
    if not scene.nodes:
        return

    def visit(
        node_id: NodeId,
        parent_id: NodeId | None,
        inherited: MeshTransformChain,
        path: list[NodeId],
    ) -> Iterator[NodeVisit]:
        node = scene.nodes.get(node_id)
        if node is None:
            if strict:
                raise UnresolvedNodeError(node_id, parent_id)
            logger.debug(f"Skipping unresolved node {node_id!r} (parent {parent_id!r})")
            return

        if node_id in path:
            raise SceneGraphCycleError(path + [node_id])

        depth = len(path)
        if depth > max_depth:
            raise SceneGraphDepthError(node_id, max_depth)

        chain = inherited
        if not node.transform.is_empty:
            chain = inherited + (node.transform,)

        yield NodeVisit(node=node, chain=chain, depth=depth)

        path.append(node_id)
        try:
            for child_id in node.children:
                yield from visit(child_id, node_id, chain, path)
        finally:
            path.pop()

    for root_id in scene.roots:
        yield from visit(root_id, None, (), [])


def build_mesh_transforms(
    scene: Scene | Mapping[str, Any],
    strict: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> dict[MeshId, MeshTransformChain]:
    """Map each mesh id to the root-first transform chain that places it.

    When several nodes reference the same mesh, the chain of the node
    visited last (depth-first, roots and children in listed order) wins.

    Args:
        scene: Scene, or a glTF JSON document to build one from
        strict: Raise on unresolved references instead of skipping them
        max_depth: Maximum traversal depth

    Returns:
        Dict of mesh id -> transform chain
    """
    if not isinstance(scene, Scene):
        scene = Scene.from_gltf(scene)

    mesh_transforms: dict[MeshId, MeshTransformChain] = {}
    for visit in walk_scene(scene, strict=strict, max_depth=max_depth):
        mesh_id = visit.node.mesh
        if mesh_id is None:
            continue
        if mesh_id in mesh_transforms:
            logger.debug(f"Mesh {mesh_id!r} rebound by node {visit.node.id!r}")
        mesh_transforms[mesh_id] = visit.chain

    return mesh_transforms
