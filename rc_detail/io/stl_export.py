"""
STL export of a single GeometryBuffer for inspection in external viewers.

This is a debugging aid: one buffer in, one STL file out. Scene
persistence (materials, hierarchy, labels) is not represented.
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np
from stl import Mode, mesh

from rc_detail.geometry.buffer import GeometryBuffer

logger = logging.getLogger(__name__)


class STLExportError(Exception):
    """Failure while writing an STL file."""


def to_stl_mesh(buffer: GeometryBuffer, name: str = "rc_detail") -> mesh.Mesh:
    """Convert a buffer to an in-memory numpy-stl Mesh (float32 triangles).

    Facet normals are recomputed by numpy-stl from the triangle winding.
    """
    data = np.zeros(buffer.triangle_count, dtype=mesh.Mesh.dtype)
    stl_mesh = mesh.Mesh(data, name=name)
    if buffer.triangle_count:
        stl_mesh.vectors[:] = buffer.vertices[buffer.faces]
        stl_mesh.update_normals()
    return stl_mesh


def save_stl(
    buffer: GeometryBuffer,
    path: Union[str, Path],
    ascii: bool = False,
    name: str = "rc_detail",
) -> Path:
    """Write `buffer` to `path` as binary (default) or ASCII STL.

    Raises:
        STLExportError: if the file cannot be written
    """
    path = Path(path)
    stl_mesh = to_stl_mesh(buffer, name=name)
    try:
        stl_mesh.save(str(path), mode=Mode.ASCII if ascii else Mode.BINARY)
    except OSError as exc:
        raise STLExportError(f"Could not write STL file {str(path)!r}: {exc}") from exc

    logger.info("STL written: %s (%d triangles)", path, buffer.triangle_count)
    return path
