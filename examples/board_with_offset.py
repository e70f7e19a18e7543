#!/usr/bin/env python3
"""Example: Place a small board with an offset and frame it.

This script demonstrates the basic workflow for circuit3d:
1. Describe a board and components as circuit JSON
2. Assemble the scene graph and resolve mesh transforms
3. Compute the default camera framing

Run with: python examples/board_with_offset.py
"""

from circuit3d import (
    Circuit3DConfig,
    best_camera_position,
    build_circuit_scene,
    build_mesh_transforms,
)
from circuit3d.scene import apply_transform_chain


def make_circuit(pcb_x: float = 0.0, pcb_y: float = 0.0) -> list[dict]:
    """Create a 30x20 mm board with three components."""
    board = {
        "type": "pcb_board",
        "pcb_board_id": "board1",
        "center": {"x": 0, "y": 0},
        "width": 30,
        "height": 20,
        "thickness": 1.6,
        "pcbX": pcb_x,
        "pcbY": pcb_y,
    }
    components = [
        {"type": "pcb_component", "pcb_component_id": "comp1",
         "center": {"x": -10, "y": -5}, "width": 5, "height": 3, "layer": "top", "rotation": 0},
        {"type": "pcb_component", "pcb_component_id": "comp2",
         "center": {"x": 10, "y": 5}, "width": 4, "height": 4, "layer": "top", "rotation": 45},
        {"type": "pcb_component", "pcb_component_id": "comp3",
         "center": {"x": 0, "y": 0}, "width": 6, "height": 2, "layer": "bottom", "rotation": 0},
    ]
    return [board, *components]


def main():
    config = Circuit3DConfig.default()

    print("circuit3d - Board Offset Example")
    print("=" * 40)

    for label, offset in [("with offset", (10.0, -5.0)), ("without offset", (0.0, 0.0))]:
        circuit = make_circuit(*offset)

        print(f"\nBoard {label} {offset}:")
        scene = build_circuit_scene(circuit, config.assembly)
        chains = build_mesh_transforms(scene)

        for mesh_id, chain in chains.items():
            x, y, z = apply_transform_chain((0.0, 0.0, 0.0), chain)
            print(f"   {mesh_id:<8} origin at ({x:6.2f}, {y:6.2f}, {z:5.2f})")

        framing = best_camera_position(circuit, config.camera)
        print(f"   Camera: {framing.cam_pos} -> {framing.look_at}")


if __name__ == "__main__":
    main()
