"""
Globe scene backed by trimesh.

Plays the render collaborator: it reports the globe radius and exposes the
add/remove/get_object_by_name scene graph the tunnel builder mutates. It also
carries the two decorative shells around the globe (clouds just outside the
surface, night lights just inside) and exports the whole scene as GLB.
"""

import numpy as np
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
import logging

import trimesh

from ..common.config import Config, DEFAULT_CONFIG
from ..common.coords import CartesianPoint, to_cartesian
from ..common.exceptions import SceneNotReady
from ..common.mesh_ops import create_shell_mesh
from .tunnel import TunnelManager

logger = logging.getLogger(__name__)

CLOUDS_NAME = "clouds"
NIGHT_NAME = "night"

# White shells at 0.85 / 0.95 opacity
CLOUDS_COLOR = (255, 255, 255, 217)
NIGHT_COLOR = (255, 255, 255, 242)


@dataclass(eq=False)
class SceneObject:
    """Named mesh placed in the scene with a 4x4 transform."""
    name: str
    mesh: trimesh.Trimesh
    transform: np.ndarray = field(default_factory=lambda: np.eye(4))


@dataclass(frozen=True)
class CameraView:
    """
    Camera looking down at a coordinate.

    altitude is measured in globe radii above the surface.
    """
    lat: float
    lng: float
    altitude: float
    transition_ms: int = 0

    def position(self, globe_radius: float) -> CartesianPoint:
        """Camera position in scene space, using the shared globe convention."""
        return to_cartesian(self.lat, self.lng, globe_radius * (1.0 + self.altitude))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lat": self.lat,
            "lng": self.lng,
            "altitude": self.altitude,
            "transition_ms": self.transition_ms
        }


class GlobeScene:
    """
    Scene holding the globe shells and at most one tunnel.

    Usage:
        globe = GlobeScene().initialize()
        build_tunnel(origin, antipode, globe)
        globe.export(Path("outputs/scene.glb"))
        globe.teardown()
    """

    def __init__(self, config: Config = DEFAULT_CONFIG):
        self.config = config
        self._scene: Optional[trimesh.Scene] = None
        self._objects: Dict[str, Any] = {}
        self.tunnels = TunnelManager(self, config)

    @property
    def ready(self) -> bool:
        return self._scene is not None

    def initialize(self) -> "GlobeScene":
        """Create the scene and add the globe shells. Safe to call twice."""
        if self.ready:
            return self

        self._scene = trimesh.Scene()

        radius = self.config.globe_radius
        segments = self.config.shell_segments

        self.add(SceneObject(
            CLOUDS_NAME,
            create_shell_mesh(radius * self.config.cloud_shell_factor, segments, CLOUDS_COLOR)
        ))
        self.add(SceneObject(
            NIGHT_NAME,
            create_shell_mesh(radius * self.config.night_shell_factor, segments, NIGHT_COLOR)
        ))

        logger.info(f"Globe scene initialized: R={radius}, objects={self.object_names()}")
        return self

    def teardown(self) -> None:
        """Remove the tunnel and the shells; the scene is no longer ready."""
        if not self.ready:
            return

        self.tunnels.clear()
        for name in (CLOUDS_NAME, NIGHT_NAME):
            obj = self.get_object_by_name(name)
            if obj is not None:
                self.remove(obj)

        self._scene = None
        logger.info("Globe scene torn down")

    # ------------------------------------------------------------------
    # Render collaborator interface
    # ------------------------------------------------------------------

    def get_globe_radius(self) -> float:
        self._require_ready()
        return self.config.globe_radius

    def scene(self) -> "GlobeScene":
        """Return the scene graph (this object) once initialized."""
        self._require_ready()
        return self

    def add(self, obj: Any) -> None:
        """Insert a named object (anything with name, mesh and transform)."""
        self._require_ready()
        if obj.name in self._objects:
            raise ValueError(f"An object named {obj.name!r} is already in the scene")

        self._scene.add_geometry(
            obj.mesh,
            node_name=obj.name,
            geom_name=obj.name,
            transform=obj.transform
        )
        self._objects[obj.name] = obj
        logger.debug(f"Added {obj.name!r} to scene")

    def remove(self, obj: Any) -> None:
        """Remove an object; objects not in the scene are ignored."""
        self._require_ready()
        if self._objects.get(obj.name) is not obj:
            logger.debug(f"{obj.name!r} not in scene, nothing to remove")
            return

        self._scene.delete_geometry(obj.name)
        del self._objects[obj.name]
        logger.debug(f"Removed {obj.name!r} from scene")

    def get_object_by_name(self, name: str) -> Optional[Any]:
        self._require_ready()
        return self._objects.get(name)

    # ------------------------------------------------------------------

    def object_names(self) -> List[str]:
        return list(self._objects)

    def geometry_names(self) -> List[str]:
        """Names of the geometries held by the underlying trimesh scene."""
        self._require_ready()
        return list(self._scene.geometry)

    def export(self, path: Path) -> Path:
        """
        Export the scene to a mesh file (GLB by default).

        Args:
            path: Output file path

        Returns:
            Path to exported file
        """
        self._require_ready()
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        file_type = path.suffix.lstrip(".") or "glb"
        self._scene.export(file_obj=str(path), file_type=file_type)
        logger.info(f"Exported scene: {path} ({len(self._objects)} objects)")
        return path

    def _require_ready(self) -> None:
        if self._scene is None:
            raise SceneNotReady("Globe scene has not been initialized")
