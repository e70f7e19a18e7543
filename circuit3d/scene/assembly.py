"""Scene graph assembly from circuit JSON.

The scene has a single untransformed group root. The board and every
component hang directly below it with absolute placements, so each mesh
chain has exactly one entry and world positions do not depend on the
order in which chain entries are applied. Mesh ids match the entity ids
so the export layer can bind generated geometry to nodes.

Coordinates are board coordinates: the board lies in the XY plane with
its mid-plane at Z = 0 and the top face towards +Z.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from ..core.circuit import BoardGeometry, ComponentPlacement, find_board, iter_components
from ..core.config import AssemblyParams
from .graph import NodeId, Scene, SceneNode
from .transform import NodeTransform, quaternion_from_euler

logger = logging.getLogger(__name__)


def board_position(board: BoardGeometry, params: AssemblyParams) -> tuple[float, float, float]:
    """World position of the board center, including any pcbX/pcbY offset."""
    x, y = board.center.x, board.center.y
    if params.apply_board_offset:
        x += board.pcb_x or 0.0
        y += board.pcb_y or 0.0
    return (x, y, 0.0)


def component_transform(component: ComponentPlacement, thickness: float) -> NodeTransform:
    """World transform of a component footprint.

    Top-layer parts sit on +Z and rotate about Z. Bottom-layer parts are
    flipped 180 degrees about X, then rotated about Z, and sit on -Z.

    Args:
        component: Component placement from circuit JSON
        thickness: Board thickness in mm

    Returns:
        NodeTransform with translation and, when needed, rotation
    """
    on_bottom = component.layer == "bottom"
    z = -thickness / 2 if on_bottom else thickness / 2

    if on_bottom:
        rotation = quaternion_from_euler("xz", [180.0, component.rotation])
    elif component.rotation:
        rotation = quaternion_from_euler("z", component.rotation)
    else:
        rotation = None

    return NodeTransform(
        rotation=rotation,
        translation=(component.center.x, component.center.y, z),
    )


def build_circuit_scene(
    entities: Iterable[Mapping[str, Any]],
    params: AssemblyParams | None = None,
    name: str = "Circuit",
) -> Scene:
    """Build a scene graph for a circuit.

    Args:
        entities: Circuit JSON entity list
        params: Assembly parameters (defaults used when None)
        name: Scene name

    Returns:
        Scene whose group root holds the board node (when the circuit has
        a usable board) followed by one node per component
    """
    params = params or AssemblyParams()
    entities = list(entities)

    board = find_board(entities)
    nodes: dict[NodeId, SceneNode] = {}
    children: list[NodeId] = []

    if board is not None:
        thickness = board.thickness or params.default_thickness
        nodes[params.board_node_id] = SceneNode(
            id=params.board_node_id,
            name=params.board_node_id,
            transform=NodeTransform(translation=board_position(board, params)),
            mesh=params.board_mesh_id,
        )
        children.append(params.board_node_id)
    else:
        logger.info("No usable board found, placing components only")
        thickness = params.default_thickness

    for component in iter_components(entities):
        node_id = component.pcb_component_id
        if node_id in nodes or node_id == params.root_node_id:
            logger.warning(f"Duplicate node id {node_id!r}, keeping the first")
            continue
        nodes[node_id] = SceneNode(
            id=node_id,
            name=node_id,
            transform=component_transform(component, thickness),
            mesh=node_id,
        )
        children.append(node_id)

    nodes[params.root_node_id] = SceneNode(
        id=params.root_node_id,
        name=name,
        children=tuple(children),
    )
    logger.debug(f"Assembled scene with {len(children)} placed node(s)")

    return Scene(name=name, roots=(params.root_node_id,), nodes=nodes)
