"""Typed views over circuit JSON entities.

Circuit JSON is a flat list of dictionaries, each tagged with a ``type``.
Only the fields the 3D core reads are modelled here; everything else is
ignored.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

import numpy as np
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

BOARD_TYPE = "pcb_board"
COMPONENT_TYPE = "pcb_component"


class Point2(BaseModel):
    """2D point in board coordinates (mm)."""

    x: float
    y: float


class BoardGeometry(BaseModel):
    """Primary board outline used for camera framing and scene assembly."""

    center: Point2 = Field(description="Board center in mm")
    width: float = Field(description="Board extent along X in mm")
    height: float = Field(description="Board extent along Y in mm")
    thickness: float | None = Field(default=None, description="Board thickness in mm")
    pcb_x: float | None = Field(default=None, alias="pcbX", description="X offset in mm")
    pcb_y: float | None = Field(default=None, alias="pcbY", description="Y offset in mm")

    model_config = {"populate_by_name": True}

    @property
    def max_dimension(self) -> float:
        """Larger of width and height (NaN if either is NaN)."""
        return float(np.maximum(self.width, self.height))


class ComponentPlacement(BaseModel):
    """A component footprint placed on the board."""

    pcb_component_id: str
    center: Point2
    width: float | None = None
    height: float | None = None
    layer: str = "top"
    rotation: float = 0.0


def find_board(entities: Iterable[Mapping[str, Any]]) -> BoardGeometry | None:
    """Return the first board entity as BoardGeometry.

    A missing board, or one without a usable width, height or center,
    returns None. Zero width or height counts as missing.

    Args:
        entities: Circuit JSON entity list

    Returns:
        BoardGeometry, or None when no usable board exists
    """
    board = next(
        (e for e in entities if isinstance(e, Mapping) and e.get("type") == BOARD_TYPE),
        None,
    )
    if board is None:
        return None

    if not board.get("width") or not board.get("height") or not board.get("center"):
        logger.debug("Board entity missing width, height or center")
        return None

    try:
        return BoardGeometry.model_validate(board)
    except ValidationError as e:
        logger.debug(f"Malformed board entity: {e}")
        return None


def iter_components(entities: Iterable[Mapping[str, Any]]) -> Iterable[ComponentPlacement]:
    """Yield each well-formed pcb_component, skipping malformed ones."""
    for entity in entities:
        if not isinstance(entity, Mapping) or entity.get("type") != COMPONENT_TYPE:
            continue
        try:
            yield ComponentPlacement.model_validate(entity)
        except ValidationError as e:
            logger.warning(
                f"Skipping component {entity.get('pcb_component_id', '?')}: "
                f"{e.error_count()} invalid field(s)"
            )


def load_circuit_json(path: str | Path) -> list[dict[str, Any]]:
    """Load a circuit JSON entity list from a file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the top level is not a list
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Circuit file not found: {path}")

    with open(path) as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(
            f"Expected a list of circuit entities, got {type(data).__name__}"
        )
    return data
