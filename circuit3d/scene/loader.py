"""glTF document loading.

Reads the JSON part of a ``.gltf`` or ``.glb`` file. Binary buffers are not
read; scene-graph resolution and accessor bounds only need the JSON.
"""

from __future__ import annotations

import json
import logging
import struct
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

GLB_MAGIC = b"glTF"
GLB_HEADER_SIZE = 12
GLB_CHUNK_HEADER_SIZE = 8
CHUNK_TYPE_JSON = 0x4E4F534A  # "JSON" little-endian

SUPPORTED_FORMATS = {".gltf", ".glb"}


def read_glb_json(data: bytes) -> dict[str, Any]:
    """Extract the JSON chunk from GLB container bytes.

    Args:
        data: Complete GLB file contents

    Returns:
        Parsed glTF JSON

    Raises:
        ValueError: If the header or first chunk is not valid GLB 2.0
    """
    if len(data) < GLB_HEADER_SIZE + GLB_CHUNK_HEADER_SIZE:
        raise ValueError(f"GLB data too short ({len(data)} bytes)")

    magic, version, length = struct.unpack("<4sII", data[:GLB_HEADER_SIZE])
    if magic != GLB_MAGIC:
        raise ValueError(f"Not a GLB file (magic={magic!r})")
    if version != 2:
        raise ValueError(f"Unsupported GLB version {version}, expected 2")
    if length > len(data):
        logger.warning(f"GLB header length {length} exceeds data size {len(data)}")

    chunk_length, chunk_type = struct.unpack(
        "<II", data[GLB_HEADER_SIZE:GLB_HEADER_SIZE + GLB_CHUNK_HEADER_SIZE]
    )
    if chunk_type != CHUNK_TYPE_JSON:
        raise ValueError(f"First GLB chunk is not JSON (type=0x{chunk_type:08X})")

    start = GLB_HEADER_SIZE + GLB_CHUNK_HEADER_SIZE
    chunk = data[start:start + chunk_length]
    if len(chunk) < chunk_length:
        raise ValueError(
            f"GLB JSON chunk truncated: expected {chunk_length} bytes, got {len(chunk)}"
        )

    # The JSON chunk is padded with trailing spaces
    return json.loads(chunk.decode("utf-8"))


def load_gltf(path: str | Path) -> dict[str, Any]:
    """Load the glTF JSON document from a .gltf or .glb file.

    Args:
        path: Path to the glTF file

    Returns:
        Parsed glTF JSON

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the format is unsupported or the file is malformed
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"glTF file not found: {path}")

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_FORMATS:
        raise ValueError(
            f"Unsupported format: {path.suffix}. "
            f"Supported: {SUPPORTED_FORMATS}"
        )

    if suffix == ".glb":
        gltf = read_glb_json(path.read_bytes())
    else:
        with open(path) as f:
            gltf = json.load(f)

    if not isinstance(gltf, dict):
        raise ValueError(f"glTF root must be an object, got {type(gltf).__name__}")

    logger.debug(
        f"Loaded {path.name}: {len(gltf.get('nodes') or [])} nodes, "
        f"{len(gltf.get('meshes') or [])} meshes"
    )
    return gltf
