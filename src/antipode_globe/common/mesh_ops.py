"""
Mesh operation utilities.

Primitive construction for the globe scene (open tube, sphere shell) and
mesh statistics for export metadata.
"""

import numpy as np
from typing import Dict, Any, Optional, Sequence
import logging

import trimesh

logger = logging.getLogger(__name__)


def compute_mesh_stats(mesh: trimesh.Trimesh) -> Dict[str, Any]:
    """
    Summarize a scene mesh for the export sidecar.

    Distances are measured from the scene origin, which is the globe center,
    so for a placed tunnel min_radius/max_radius show how deep it runs and
    how far its ends stick out of the globe.

    Args:
        mesh: Mesh in scene coordinates

    Returns:
        Dictionary of mesh statistics
    """
    if len(mesh.vertices) == 0:
        return {"n_vertices": 0, "n_faces": 0, "is_watertight": False}

    radii = np.linalg.norm(mesh.vertices, axis=1)

    return {
        "n_vertices": len(mesh.vertices),
        "n_faces": len(mesh.faces),
        "extents": mesh.extents.tolist(),
        "surface_area": float(mesh.area),
        "min_radius": float(radii.min()),
        "max_radius": float(radii.max()),
        # The tunnel is an open tube, so this is False for it
        "is_watertight": bool(mesh.is_watertight)
    }


def create_tube_mesh(
    radius: float,
    height: float,
    segments: int = 32,
    color: Optional[Sequence[int]] = None
) -> trimesh.Trimesh:
    """
    Create an open-ended tube along +Y, centered at the origin.

    The tube has one ring of vertices at each end and no caps, so it reads as
    a see-through tunnel rather than a solid rod.

    Args:
        radius: Tube radius
        height: Tube length along Y
        segments: Number of segments around tube
        color: Optional RGBA face color (0-255)

    Returns:
        Tube mesh
    """
    if segments < 3:
        raise ValueError(f"segments must be >= 3, got {segments}")
    if radius <= 0 or height <= 0:
        raise ValueError(f"radius and height must be > 0, got {radius}, {height}")

    half = height / 2.0
    angles = np.linspace(0, 2 * np.pi, segments, endpoint=False)

    # Ring in the XZ plane; wound so normals face outward
    ring = np.column_stack([
        radius * np.sin(angles),
        np.zeros(segments),
        radius * np.cos(angles)
    ])

    bottom = ring + np.array([0.0, -half, 0.0])
    top = ring + np.array([0.0, half, 0.0])
    vertices = np.vstack([bottom, top])

    faces = []
    for j in range(segments):
        v0 = j
        v1 = (j + 1) % segments
        v2 = segments + j
        v3 = segments + (j + 1) % segments

        faces.append([v0, v1, v2])
        faces.append([v1, v3, v2])

    tube = trimesh.Trimesh(vertices=vertices, faces=np.array(faces), process=False)

    if color is not None:
        tube.visual.face_colors = np.tile(np.asarray(color, dtype=np.uint8), (len(tube.faces), 1))

    return tube


def create_shell_mesh(
    radius: float,
    segments: int = 64,
    color: Optional[Sequence[int]] = None
) -> trimesh.Trimesh:
    """
    Create a UV sphere shell centered at the origin.

    Args:
        radius: Shell radius
        segments: Latitude and longitude subdivisions
        color: Optional RGBA face color (0-255)

    Returns:
        Sphere mesh
    """
    shell = trimesh.creation.uv_sphere(radius=radius, count=[segments, segments])

    if color is not None:
        shell.visual.face_colors = np.tile(np.asarray(color, dtype=np.uint8), (len(shell.faces), 1))

    logger.debug(f"Shell r={radius:.3f}: {len(shell.vertices)} verts, {len(shell.faces)} faces")

    return shell
