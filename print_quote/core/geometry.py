# core/geometry.py

import os
import math
import struct
import logging
from typing import Callable, List, Optional, Tuple

import numpy as np

from .common_types import BoundingBox, Geometry, SourceFormat, Vec3
from .exceptions import MeshParseError

logger = logging.getLogger(__name__)

ASCII_KEYWORD = "solid"
BINARY_HEADER_BYTES = 80
BINARY_PREAMBLE_BYTES = BINARY_HEADER_BYTES + 4  # header + uint32 triangle count

# 12 bytes normal + 3 x 12 bytes vertices + 2 bytes attribute = 50 bytes
BINARY_RECORD_DTYPE = np.dtype([
    ("normal", "<f4", (3,)),
    ("vertices", "<f4", (3, 3)),
    ("attribute", "<u2"),
])

# A parser takes the raw buffer and returns an (N, 3, 3) float64 array of
# triangle vertices, or None when the buffer isn't usable in that encoding.
TriangleParser = Callable[[bytes], Optional[np.ndarray]]
ParseStrategy = Tuple[SourceFormat, TriangleParser]


def parse_ascii(buffer: bytes) -> Optional[np.ndarray]:
    """
    Collects 'vertex x y z' records from an ASCII STL.

    Malformed or non-finite vertex lines are skipped. Every three consecutive
    vertices form one triangle. Returns None when no vertex records are found,
    so another encoding can be tried.

    Raises:
        MeshParseError: If vertex records are present but their count is not a
            multiple of three. The buffer is not retried as binary.
    """
    text = buffer.decode("utf-8", errors="replace")
    vertices = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped.lower().startswith("vertex"):
            continue
        parts = stripped.split()
        if len(parts) < 4:
            continue
        try:
            x, y, z = float(parts[1]), float(parts[2]), float(parts[3])
        except ValueError:
            continue
        if math.isfinite(x) and math.isfinite(y) and math.isfinite(z):
            vertices.append((x, y, z))

    if not vertices:
        return None
    if len(vertices) % 3:
        raise MeshParseError(f"ASCII STL has {len(vertices)} vertex records, not a multiple of 3.")
    return np.asarray(vertices, dtype=np.float64).reshape(-1, 3, 3)


def parse_binary(buffer: bytes) -> Optional[np.ndarray]:
    """
    Reads triangles from a binary STL.

    If the buffer is shorter than the declared triangle count requires, the
    complete records that are present are used and the rest is ignored.
    Normals and attribute bytes are discarded.
    """
    if len(buffer) < BINARY_PREAMBLE_BYTES:
        return None

    declared = struct.unpack_from("<I", buffer, BINARY_HEADER_BYTES)[0]
    available = (len(buffer) - BINARY_PREAMBLE_BYTES) // BINARY_RECORD_DTYPE.itemsize
    count = min(declared, available)
    if count < declared:
        logger.warning(f"Binary STL declares {declared} triangles but only {available} full records are present. Truncating.")
    if count == 0:
        return None

    records = np.frombuffer(buffer, dtype=BINARY_RECORD_DTYPE, count=count, offset=BINARY_PREAMBLE_BYTES)
    return records["vertices"].astype(np.float64)


def looks_like_ascii(buffer: bytes) -> bool:
    header = buffer[:BINARY_HEADER_BYTES].decode("utf-8", errors="ignore")
    return header.strip().lower().startswith(ASCII_KEYWORD)


def parse_strategies(buffer: bytes) -> List[ParseStrategy]:
    """
    Orders the parsers for a buffer based on its header.

    Both encodings are always tried since some exporters write binary files
    whose header starts with 'solid'.
    """
    ascii_first = looks_like_ascii(buffer)
    strategies: List[ParseStrategy] = [
        (SourceFormat.ASCII, parse_ascii),
        (SourceFormat.BINARY, parse_binary),
    ]
    return strategies if ascii_first else strategies[::-1]


def compute_metrics(triangles: np.ndarray) -> Tuple[float, float, BoundingBox]:
    """
    Returns (volume_mm3, area_mm2, bounding_box) for an (N, 3, 3) triangle array.

    Volume is the absolute sum of signed origin tetrahedra, which is only
    meaningful for closed, consistently wound meshes. No watertightness check
    is made.
    """
    v0, v1, v2 = triangles[:, 0], triangles[:, 1], triangles[:, 2]

    area = 0.5 * np.linalg.norm(np.cross(v1 - v0, v2 - v0), axis=1).sum()
    signed_volume = np.einsum("ij,ij->i", v0, np.cross(v1, v2)).sum() / 6.0

    points = triangles.reshape(-1, 3)
    lo = points.min(axis=0)
    hi = points.max(axis=0)
    size = hi - lo

    bbox = BoundingBox(
        min=Vec3(x=lo[0], y=lo[1], z=lo[2]),
        max=Vec3(x=hi[0], y=hi[1], z=hi[2]),
        size=Vec3(x=size[0], y=size[1], z=size[2]),
    )
    return float(abs(signed_volume)), float(area), bbox


def analyze(buffer: bytes) -> Geometry:
    """
    Parses an STL buffer (ASCII or binary) into aggregate geometry.

    Args:
        buffer: Raw bytes of the model file.

    Returns:
        A Geometry record with triangle count, volume, area and bounding box.

    Raises:
        MeshParseError: If neither encoding yields at least one triangle.
    """
    if not buffer:
        raise MeshParseError("Model buffer is empty.")
    buffer = bytes(buffer)

    for source_format, parser in parse_strategies(buffer):
        triangles = parser(buffer)
        if triangles is not None and len(triangles) > 0:
            break
        logger.debug(f"{source_format.value} STL parse produced no triangles, trying next strategy.")
    else:
        raise MeshParseError(f"Could not parse {len(buffer)} bytes as ASCII or binary STL.")

    volume, area, bbox = compute_metrics(triangles)
    logger.info(f"Parsed {source_format.value} STL: {len(triangles)} triangles, volume={volume:.3f}mm³, area={area:.3f}mm²")

    return Geometry(
        triangle_count=len(triangles),
        volume_mm3=volume,
        area_mm2=area,
        bounding_box=bbox,
        source_format=source_format,
    )


def analyze_file(file_path: str) -> Geometry:
    """Reads a model file from disk and analyzes it."""
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Input file not found: {file_path}")
    logger.info(f"Loading mesh from: {os.path.basename(file_path)}")
    with open(file_path, "rb") as f:
        return analyze(f.read())
