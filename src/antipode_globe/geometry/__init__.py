"""
3D geometry for the globe scene: the tunnel, the surface arc and the scene itself.
"""

from .tunnel import TunnelSolid, TunnelManager, build_tunnel, build_tunnel_solid, orient_along, manager_for
from .arcs import ArcDescriptor, make_arc
from .globe_scene import GlobeScene, CameraView, SceneObject

__all__ = [
    "TunnelSolid",
    "TunnelManager",
    "build_tunnel",
    "build_tunnel_solid",
    "orient_along",
    "manager_for",
    "ArcDescriptor",
    "make_arc",
    "GlobeScene",
    "CameraView",
    "SceneObject"
]
