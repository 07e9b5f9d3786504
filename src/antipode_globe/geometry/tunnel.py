"""
Tunnel geometry: an open tube through the globe from a place to its antipode.

Algorithm:
T1. Project both endpoints onto the render sphere (coords.to_cartesian)
T2. Chord length = distance between the endpoints
T3. Open tube of radius 0.06 R and length chord + 0.1 R, built along +Y
T4. Rotate +Y onto the chord direction (axis-angle)
T5. Translate to the chord midpoint
T6. Swap it into the scene, removing the previous tunnel

Exactly one tunnel exists per scene. TunnelManager owns it: it holds the
current solid and replaces it under a lock, and the most recently requested
build always wins.
"""

import numpy as np
from typing import Optional, Protocol, Dict, Any
from dataclasses import dataclass, field
import logging
import threading
import weakref

import trimesh

from ..common.config import Config, DEFAULT_CONFIG
from ..common.coords import GeoCoordinate, CartesianPoint, to_cartesian
from ..common.exceptions import SceneNotReady
from ..common.mesh_ops import create_tube_mesh

logger = logging.getLogger(__name__)

TUNNEL_NAME = "tunnel"

# Default principal axis of the tube
UP_AXIS = np.array([0.0, 1.0, 0.0])

# Below this the direction is treated as collinear with UP_AXIS
COLLINEAR_EPS = 1e-9


class SceneGraph(Protocol):
    """The part of a render scene the tunnel builder mutates."""

    def add(self, solid: Any) -> None: ...

    def remove(self, solid: Any) -> None: ...

    def get_object_by_name(self, name: str) -> Optional[Any]: ...


class SceneHandle(Protocol):
    """Render collaborator: exposes the globe radius and its scene graph."""

    def get_globe_radius(self) -> float: ...

    def scene(self) -> SceneGraph: ...


@dataclass(frozen=True, eq=False)
class Orientation:
    """Axis-angle rotation taking UP_AXIS onto a direction."""
    axis: np.ndarray
    angle: float
    degenerate: bool = False

    @classmethod
    def identity(cls, degenerate: bool = False) -> "Orientation":
        return cls(axis=UP_AXIS.copy(), angle=0.0, degenerate=degenerate)

    @property
    def matrix(self) -> np.ndarray:
        """3x3 rotation matrix."""
        if self.angle == 0.0:
            return np.eye(3)
        return trimesh.transformations.rotation_matrix(self.angle, self.axis)[:3, :3]


def orient_along(direction: np.ndarray) -> Orientation:
    """
    Compute the rotation that aligns UP_AXIS with a direction.

    axis = normalize(UP x direction), angle = acos(UP . direction).

    When the direction is parallel or antiparallel to UP_AXIS (a pole to pole
    tunnel) the cross product vanishes and its normalization would be NaN.
    That case, and a zero-length direction, return the identity rotation; a
    tube is symmetric about its axis and end-to-end, so identity already
    lies along the chord.

    Args:
        direction: Vector of shape (3,), need not be unit length

    Returns:
        Orientation
    """
    direction = np.asarray(direction, dtype=np.float64)
    norm = np.linalg.norm(direction)
    if norm < COLLINEAR_EPS:
        logger.debug("Zero-length tunnel direction, using identity rotation")
        return Orientation.identity(degenerate=True)

    direction = direction / norm
    cross = np.cross(UP_AXIS, direction)
    cross_norm = np.linalg.norm(cross)

    if cross_norm < COLLINEAR_EPS:
        logger.debug(f"Tunnel direction {direction.round(6).tolist()} is collinear with +Y, using identity rotation")
        return Orientation.identity(degenerate=True)

    angle = float(np.arccos(np.clip(np.dot(UP_AXIS, direction), -1.0, 1.0)))
    return Orientation(axis=cross / cross_norm, angle=angle)


@dataclass(eq=False)
class TunnelSolid:
    """
    Oriented, positioned tube connecting two points on the globe.

    mesh is kept in its local frame (axis +Y, centered at the origin);
    transform places it in the scene, the same way a renderer applies a
    node's position and quaternion.
    """
    mesh: trimesh.Trimesh
    position: CartesianPoint
    orientation: Orientation
    radius: float
    length: float
    start: CartesianPoint
    end: CartesianPoint
    name: str = TUNNEL_NAME
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def chord_length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def transform(self) -> np.ndarray:
        """4x4 homogeneous transform (rotate, then translate)."""
        matrix = np.eye(4)
        matrix[:3, :3] = self.orientation.matrix
        matrix[:3, 3] = self.position.as_array()
        return matrix

    @property
    def principal_axis(self) -> np.ndarray:
        """Unit vector the tube runs along in scene space."""
        return self.orientation.matrix @ UP_AXIS

    def world_mesh(self) -> trimesh.Trimesh:
        """Copy of the mesh with the transform applied."""
        placed = self.mesh.copy()
        placed.apply_transform(self.transform)
        return placed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "position": self.position.as_array().tolist(),
            "axis": self.orientation.axis.tolist(),
            "angle": self.orientation.angle,
            "degenerate_orientation": self.orientation.degenerate,
            "radius": self.radius,
            "length": self.length,
            "chord_length": self.chord_length
        }


def build_tunnel_solid(
    start: CartesianPoint,
    end: CartesianPoint,
    globe_radius: float,
    config: Config = DEFAULT_CONFIG
) -> TunnelSolid:
    """
    Construct the tube between two Cartesian points.

    Pure geometry; nothing is added to a scene.

    Args:
        start: First endpoint (scene units)
        end: Second endpoint (scene units)
        globe_radius: Radius R of the render sphere
        config: Tube proportions

    Returns:
        TunnelSolid
    """
    chord = start.distance_to(end)
    radius = globe_radius * config.tunnel_radius_factor
    length = chord + globe_radius * config.tunnel_overshoot_factor

    mesh = create_tube_mesh(
        radius=radius,
        height=length,
        segments=config.tunnel_segments,
        color=config.tunnel_color
    )

    orientation = orient_along(end - start)

    solid = TunnelSolid(
        mesh=mesh,
        position=start.midpoint(end),
        orientation=orientation,
        radius=radius,
        length=length,
        start=start,
        end=end
    )

    logger.debug(f"Tunnel: chord={chord:.3f}, radius={radius:.3f}, angle={orientation.angle:.4f} rad")
    return solid


class TunnelManager:
    """
    Owner of the single tunnel in a scene.

    Every call takes a ticket on entry. Geometry is built outside the lock;
    the scene swap happens inside it, and a build holding a ticket older than
    the last committed one is dropped. Rapid repeated searches therefore end
    with the tunnel of the last search, never two tunnels.
    """

    def __init__(self, handle: SceneHandle, config: Config = DEFAULT_CONFIG):
        self._handle = handle
        self.config = config
        self._lock = threading.Lock()
        self._ticket_lock = threading.Lock()
        self._next_ticket = 0
        self._committed_ticket = -1
        self._current: Optional[TunnelSolid] = None

    @property
    def current(self) -> Optional[TunnelSolid]:
        return self._current

    def _take_ticket(self) -> int:
        with self._ticket_lock:
            ticket = self._next_ticket
            self._next_ticket += 1
        return ticket

    def build(self, origin: GeoCoordinate, antipode: GeoCoordinate) -> Optional[TunnelSolid]:
        """
        Build the tunnel between two coordinates and swap it into the scene.

        Returns:
            The new TunnelSolid, or None if a newer build already committed

        Raises:
            SceneNotReady: If the scene has not been initialized
        """
        ticket = self._take_ticket()

        radius = self._handle.get_globe_radius()
        start = to_cartesian(origin.lat, origin.lng, radius)
        end = to_cartesian(antipode.lat, antipode.lng, radius)

        solid = build_tunnel_solid(start, end, radius, self.config)
        solid.metadata.update({"origin": origin.to_dict(), "antipode": antipode.to_dict()})

        return self._commit(ticket, solid)

    def replace(self, new_solid: TunnelSolid) -> Optional[TunnelSolid]:
        """Swap new_solid into the scene, removing the previous tunnel."""
        return self._commit(self._take_ticket(), new_solid)

    def clear(self) -> None:
        """Remove the current tunnel, if any."""
        with self._lock:
            if self._current is None:
                return
            try:
                graph = self._handle.scene()
            except SceneNotReady:
                # Scene already torn down, nothing left to remove from
                self._current = None
                return
            self._remove_locked(graph)

    def _commit(self, ticket: int, solid: TunnelSolid) -> Optional[TunnelSolid]:
        with self._lock:
            if ticket < self._committed_ticket:
                logger.debug(f"Dropping stale tunnel build #{ticket} (#{self._committed_ticket} already committed)")
                return None

            graph = self._handle.scene()
            self._remove_locked(graph)
            graph.add(solid)

            self._current = solid
            self._committed_ticket = ticket

        logger.info(f"Tunnel #{ticket} placed: length={solid.length:.2f}, radius={solid.radius:.2f}")
        return solid

    def _remove_locked(self, graph: SceneGraph) -> None:
        if self._current is not None:
            graph.remove(self._current)
            self._current = None

        # A same-named object someone else inserted would break the one-tunnel rule
        stray = graph.get_object_by_name(TUNNEL_NAME)
        if stray is not None:
            graph.remove(stray)


# Managers for handles that do not carry their own, keyed by handle
_managers: "weakref.WeakKeyDictionary[Any, TunnelManager]" = weakref.WeakKeyDictionary()
_managers_lock = threading.Lock()


def manager_for(scene_handle: SceneHandle) -> TunnelManager:
    """
    Return the TunnelManager owning the tunnel of a scene handle.

    A handle may carry its own manager as a `tunnels` attribute (GlobeScene
    does). Any other handle gets one manager, created on first use and kept
    for as long as the handle lives.
    """
    manager = getattr(scene_handle, "tunnels", None)
    if manager is not None:
        return manager

    with _managers_lock:
        manager = _managers.get(scene_handle)
        if manager is None:
            # The manager must not keep its own registry key alive
            manager = TunnelManager(weakref.proxy(scene_handle))
            _managers[scene_handle] = manager
    return manager


def build_tunnel(
    origin: GeoCoordinate,
    antipode: GeoCoordinate,
    scene_handle: Optional[SceneHandle]
) -> Optional[TunnelSolid]:
    """
    Build the tunnel between origin and antipode in the handle's scene.

    Only get_globe_radius() and scene().add/remove/get_object_by_name are
    used on the handle. A missing or uninitialized scene makes this a no-op:
    callers invoke it after the scene is ready, and an early call is not an
    error.

    Args:
        origin: Origin coordinate
        antipode: Antipode coordinate
        scene_handle: Render collaborator owning the scene

    Returns:
        The placed TunnelSolid, or None if skipped
    """
    if scene_handle is None:
        logger.debug("No scene handle, skipping tunnel")
        return None

    try:
        return manager_for(scene_handle).build(origin, antipode)
    except SceneNotReady:
        logger.debug("Scene not ready, skipping tunnel")
        return None
