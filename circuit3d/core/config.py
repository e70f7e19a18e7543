"""Configuration management for circuit3d.

This module defines all configuration models using Pydantic for validation.
Configuration can be loaded from JSON files or constructed programmatically.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, model_validator


class CameraParams(BaseModel):
    """Default camera framing parameters.

    The camera sits on an oblique, elevated viewpoint so both the board
    face and its edge thickness are visible. Offsets are multiples of the
    base distance, which itself scales with the larger board dimension.
    """

    distance_factor: float = Field(
        default=0.8,
        description="Base distance as a fraction of the larger board dimension"
    )
    offset_factors: tuple[float, float, float] = Field(
        default=(0.7, 1.2, 0.8),
        description="Camera XYZ as multiples of the base distance"
    )
    fallback_cam_pos: tuple[float, float, float] = Field(
        default=(30.0, 30.0, 25.0),
        description="Camera position when no usable board is found"
    )
    fallback_look_at: tuple[float, float, float] = Field(
        default=(0.0, 0.0, 0.0),
        description="Look-at target when no usable board is found"
    )
    round_digits: int | None = Field(
        default=2,
        ge=0,
        description="Decimal places for output rounding, ties towards +inf (None = no rounding)"
    )


class TraversalParams(BaseModel):
    """Scene graph traversal parameters."""

    strict: bool = Field(
        default=False,
        description="Raise on unresolved node references instead of skipping"
    )
    # Traversal recurses once per level, keep well below the interpreter limit
    max_depth: int = Field(
        default=256,
        ge=1,
        le=900,
        description="Maximum root-to-node depth"
    )
    scene_index: int | None = Field(
        default=None,
        ge=0,
        description="glTF scene to traverse (None = document default)"
    )


class AssemblyParams(BaseModel):
    """Parameters for building a scene graph from circuit JSON."""

    default_thickness: float = Field(
        default=1.6,
        gt=0,
        description="Board thickness in mm when the board omits it"
    )
    root_node_id: str = Field(default="circuit", description="Node id of the group root")
    board_node_id: str = Field(default="board", description="Node id of the board node")
    board_mesh_id: str = Field(default="board", description="Mesh id bound to the board node")
    apply_board_offset: bool = Field(
        default=True,
        description="Add pcbX/pcbY to the board position when present"
    )

    @model_validator(mode="after")
    def check_node_ids(self) -> AssemblyParams:
        if self.board_node_id == self.root_node_id:
            raise ValueError(
                f"board_node_id and root_node_id must differ (both {self.root_node_id!r})"
            )
        return self


class Circuit3DConfig(BaseModel):
    """Main configuration container."""

    camera: CameraParams = Field(default_factory=CameraParams)
    traversal: TraversalParams = Field(default_factory=TraversalParams)
    assembly: AssemblyParams = Field(default_factory=AssemblyParams)

    @classmethod
    def from_file(cls, path: Path | str) -> Circuit3DConfig:
        """Load configuration from a JSON file."""
        path = Path(path)
        with open(path) as f:
            data = json.load(f)
        return cls.model_validate(data)

    def to_file(self, path: Path | str) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)

    @classmethod
    def default(cls) -> Circuit3DConfig:
        """Create a default configuration."""
        return cls()
