"""Tests for circuit scene assembly."""

import numpy as np

from circuit3d.core.circuit import BoardGeometry, ComponentPlacement
from circuit3d.core.config import AssemblyParams
from circuit3d.scene.assembly import board_position, build_circuit_scene, component_transform
from circuit3d.scene.graph import build_mesh_transforms
from circuit3d.scene.transform import apply_transform_chain


def circuit(board=True, **board_overrides):
    entities = []
    if board:
        b = {
            "type": "pcb_board",
            "center": {"x": 0, "y": 0},
            "width": 30,
            "height": 20,
            "thickness": 1.6,
        }
        b.update(board_overrides)
        entities.append(b)
    entities += [
        {
            "type": "pcb_component",
            "pcb_component_id": "comp1",
            "center": {"x": -10, "y": -5},
            "layer": "top",
            "rotation": 0,
        },
        {
            "type": "pcb_component",
            "pcb_component_id": "comp2",
            "center": {"x": 10, "y": 5},
            "layer": "top",
            "rotation": 90,
        },
        {
            "type": "pcb_component",
            "pcb_component_id": "comp3",
            "center": {"x": 0, "y": 0},
            "layer": "bottom",
            "rotation": 0,
        },
    ]
    return entities


class TestBuildCircuitScene:
    """Test scene graph construction from circuit JSON."""

    def test_structure(self):
        """Test the group root holds the board then components in order."""
        scene = build_circuit_scene(circuit())

        assert scene.roots == ("circuit",)
        root = scene.nodes["circuit"]
        assert root.transform.is_empty
        assert root.children == ("board", "comp1", "comp2", "comp3")

    def test_meshes_bound(self):
        """Test every entity gets a mesh binding."""
        chains = build_mesh_transforms(build_circuit_scene(circuit()))
        assert set(chains) == {"board", "comp1", "comp2", "comp3"}
        assert all(len(chain) == 1 for chain in chains.values())

    def test_component_world_positions(self):
        """Test component origins land on their centers on the top face."""
        chains = build_mesh_transforms(build_circuit_scene(circuit()))

        np.testing.assert_array_almost_equal(
            apply_transform_chain((0.0, 0.0, 0.0), chains["comp1"]), [-10.0, -5.0, 0.8]
        )
        np.testing.assert_array_almost_equal(
            apply_transform_chain((0.0, 0.0, 0.0), chains["comp2"]), [10.0, 5.0, 0.8]
        )

    def test_unrotated_component_has_no_rotation(self):
        """Test zero rotation on the top layer is left absent."""
        scene = build_circuit_scene(circuit())
        assert scene.nodes["comp1"].transform.rotation is None

    def test_rotated_component(self):
        """Test component rotation turns local X towards Y."""
        chains = build_mesh_transforms(build_circuit_scene(circuit()))
        np.testing.assert_array_almost_equal(
            apply_transform_chain((1.0, 0.0, 0.0), chains["comp2"]), [10.0, 6.0, 0.8]
        )

    def test_bottom_component_flipped(self):
        """Test bottom components sit below the board facing down."""
        chains = build_mesh_transforms(build_circuit_scene(circuit()))

        origin = apply_transform_chain((0.0, 0.0, 0.0), chains["comp3"])
        up = apply_transform_chain((0.0, 0.0, 1.0), chains["comp3"])

        np.testing.assert_array_almost_equal(origin, [0.0, 0.0, -0.8])
        np.testing.assert_array_almost_equal(up, [0.0, 0.0, -1.8])

    def test_board_offset(self):
        """Test pcbX/pcbY move the board but not the components."""
        chains = build_mesh_transforms(build_circuit_scene(circuit(pcbX=5, pcbY=-3)))

        np.testing.assert_array_almost_equal(
            apply_transform_chain((0.0, 0.0, 0.0), chains["board"]), [5.0, -3.0, 0.0]
        )
        np.testing.assert_array_almost_equal(
            apply_transform_chain((0.0, 0.0, 0.0), chains["comp1"]), [-10.0, -5.0, 0.8]
        )

    def test_board_offset_disabled(self):
        """Test the board offset can be ignored."""
        params = AssemblyParams(apply_board_offset=False)
        scene = build_circuit_scene(circuit(pcbX=5, pcbY=-3), params)
        assert scene.nodes["board"].transform.translation == (0.0, 0.0, 0.0)

    def test_default_thickness(self):
        """Test a board without thickness uses the configured default."""
        entities = circuit()
        del entities[0]["thickness"]
        params = AssemblyParams(default_thickness=2.0)
        scene = build_circuit_scene(entities, params)
        assert scene.nodes["comp1"].transform.translation == (-10.0, -5.0, 1.0)

    def test_no_board(self):
        """Test components are still placed without a board."""
        scene = build_circuit_scene(circuit(board=False))

        assert "board" not in scene.nodes
        assert scene.nodes["circuit"].children == ("comp1", "comp2", "comp3")

    def test_duplicate_component_ids(self):
        """Test a repeated component id keeps the first placement."""
        entities = circuit()
        entities.append(dict(entities[1], center={"x": 99, "y": 99}))
        scene = build_circuit_scene(entities)

        assert scene.nodes["circuit"].children.count("comp1") == 1
        assert scene.nodes["comp1"].transform.translation[0] == -10.0

    def test_malformed_component_skipped(self):
        """Test components without a center are skipped."""
        entities = circuit() + [{"type": "pcb_component", "pcb_component_id": "bad"}]
        scene = build_circuit_scene(entities)
        assert "bad" not in scene.nodes

    def test_structure_is_valid(self):
        """Test assembled scenes pass structural validation."""
        ok, issues = build_circuit_scene(circuit()).validate_structure()
        assert ok, issues


class TestPlacementHelpers:
    """Test board and component placement helpers."""

    def test_board_position_with_offset(self):
        """Test pcbX/pcbY shift the board center."""
        board = BoardGeometry(center={"x": 1, "y": 2}, width=10, height=5, pcbX=3, pcbY=-4)
        assert board_position(board, AssemblyParams()) == (4.0, -2.0, 0.0)

    def test_board_position_offset_disabled(self):
        """Test the offset can be ignored."""
        board = BoardGeometry(center={"x": 1, "y": 2}, width=10, height=5, pcbX=3, pcbY=-4)
        params = AssemblyParams(apply_board_offset=False)
        assert board_position(board, params) == (1.0, 2.0, 0.0)

    def test_top_component_transform(self):
        """Test a top-layer part sits on the top face."""
        component = ComponentPlacement(pcb_component_id="U1", center={"x": 2, "y": 3})
        transform = component_transform(component, 2.0)

        assert transform.rotation is None
        assert transform.translation == (2.0, 3.0, 1.0)

    def test_bottom_component_transform(self):
        """Test a bottom-layer part is flipped onto the bottom face."""
        component = ComponentPlacement(
            pcb_component_id="U2", center={"x": 0, "y": 0}, layer="bottom"
        )
        transform = component_transform(component, 2.0)

        assert transform.translation == (0.0, 0.0, -1.0)
        np.testing.assert_array_almost_equal(
            apply_transform_chain((0.0, 0.0, 1.0), (transform,)),
            [0.0, 0.0, -2.0],
        )
