# testing/generate_test_models.py

import struct
from typing import Optional

import numpy as np
import trimesh

from print_quote.core.common_types import BoundingBox, Geometry, SourceFormat, Vec3

# Unit tetrahedron A(0,0,0) B(1,0,0) C(0,1,0) D(0,0,1), as (4, 3, 3) triangles
TETRAHEDRON = np.array([
    [[0, 0, 0], [1, 0, 0], [0, 1, 0]],
    [[0, 0, 0], [1, 0, 0], [0, 0, 1]],
    [[0, 0, 0], [0, 1, 0], [0, 0, 1]],
    [[1, 0, 0], [0, 1, 0], [0, 0, 1]],
], dtype=np.float64)


def binary_stl(triangles, header: bytes = b"binary test model", declared_count: Optional[int] = None) -> bytes:
    """Serializes (N, 3, 3) triangles as binary STL with zero normals."""
    triangles = np.asarray(triangles, dtype=np.float64)
    count = len(triangles) if declared_count is None else declared_count
    parts = [header.ljust(80, b"\0")[:80], struct.pack("<I", count)]
    for tri in triangles:
        parts.append(struct.pack("<12fH", 0.0, 0.0, 0.0, *tri.reshape(-1), 0))
    return b"".join(parts)


def ascii_stl(triangles, name: str = "part") -> bytes:
    """Serializes (N, 3, 3) triangles as ASCII STL."""
    lines = [f"solid {name}"]
    for tri in np.asarray(triangles, dtype=np.float64):
        lines.append("facet normal 0 0 0")
        lines.append("  outer loop")
        for v in tri:
            lines.append("    vertex " + " ".join(repr(float(c)) for c in v))
        lines.append("  endloop")
        lines.append("endfacet")
    lines.append(f"endsolid {name}")
    return ("\n".join(lines) + "\n").encode("utf-8")


def create_simple_cube(size=10.0) -> trimesh.Trimesh:
    """Creates a simple, watertight cube centred on the origin."""
    return trimesh.creation.box(extents=[size, size, size])


def create_sphere(radius=10.0, subdivisions=2) -> trimesh.Trimesh:
    return trimesh.creation.icosphere(subdivisions=subdivisions, radius=radius)


def export_binary(mesh: trimesh.Trimesh) -> bytes:
    return mesh.export(file_type="stl")


def export_ascii(mesh: trimesh.Trimesh) -> bytes:
    data = mesh.export(file_type="stl_ascii")
    return data.encode("utf-8") if isinstance(data, str) else data


def make_geometry(volume_mm3: float, area_mm2: float, size=(0.0, 0.0, 0.0)) -> Geometry:
    """Geometry record with the bounding box anchored at the origin."""
    x, y, z = size
    return Geometry(
        triangle_count=12,
        volume_mm3=volume_mm3,
        area_mm2=area_mm2,
        bounding_box=BoundingBox(min=Vec3(x=0, y=0, z=0), max=Vec3(x=x, y=y, z=z), size=Vec3(x=x, y=y, z=z)),
        source_format=SourceFormat.BINARY,
    )
