"""Default camera framing for a rendered board.

Derives a camera position and look-at target from the primary board's
dimensions and center. The viewpoint is oblique and elevated rather than
truly isometric, so the board face and its edge are both in view.
"""

from __future__ import annotations

import logging
from decimal import ROUND_FLOOR, Decimal
from typing import Any, Iterable, Mapping

from pydantic import BaseModel

from .core.circuit import find_board
from .core.config import CameraParams

logger = logging.getLogger(__name__)


class CameraFraming(BaseModel):
    """Camera position and look-at target in world space."""

    cam_pos: tuple[float, float, float]
    look_at: tuple[float, float, float]

    model_config = {"frozen": True}

    def to_dict(self) -> dict[str, list[float]]:
        """Return the framing with ``camPos`` / ``lookAt`` keys."""
        return {"camPos": list(self.cam_pos), "lookAt": list(self.look_at)}


def _round(value: float, digits: int | None) -> float:
    """Round to ``digits`` places with ties going towards +infinity."""
    if digits is None:
        return value
    scaled = Decimal(str(value)).scaleb(digits) + Decimal("0.5")
    return float(scaled.to_integral_value(rounding=ROUND_FLOOR).scaleb(-digits))


def best_camera_position(
    entities: Iterable[Mapping[str, Any]],
    params: CameraParams | None = None,
) -> CameraFraming:
    """Compute a default camera framing for a circuit.

    Uses the first ``pcb_board`` entity. Without a usable board (missing,
    or lacking width, height or center) the fixed fallback framing from
    params is returned; this never raises.

    Args:
        entities: Circuit JSON entity list
        params: Camera parameters (defaults used when None)

    Returns:
        CameraFraming with cam_pos and look_at
    """
    params = params or CameraParams()

    board = find_board(entities)
    if board is None:
        logger.debug("No usable board found, using fallback camera framing")
        return CameraFraming(
            cam_pos=params.fallback_cam_pos,
            look_at=params.fallback_look_at,
        )

    base_distance = board.max_dimension * params.distance_factor
    fx, fy, fz = params.offset_factors
    digits = params.round_digits

    cam_pos = (
        _round(base_distance * fx, digits),
        _round(base_distance * fy, digits),
        _round(base_distance * fz, digits),
    )
    look_at = (
        _round(board.center.x, digits),
        _round(board.center.y, digits),
        0.0,
    )

    logger.debug(f"Camera framing for {board.width}x{board.height} board: {cam_pos} -> {look_at}")
    return CameraFraming(cam_pos=cam_pos, look_at=look_at)
