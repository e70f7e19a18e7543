"""Core modules for circuit3d."""

from .circuit import BoardGeometry, find_board, load_circuit_json
from .config import Circuit3DConfig

__all__ = ["BoardGeometry", "Circuit3DConfig", "find_board", "load_circuit_json"]
