"""
Common modules for antipode search and tunnel construction.

Coordinate Model:
- lat in [-90, 90], lng canonical in (-180, 180] (the antimeridian is +180)
- Cartesian space is right-handed, Y-up, scaled by the globe radius R
"""

from .config import Config, SceneMetadata, DEFAULT_CONFIG
from .coords import (
    GeoCoordinate, CartesianPoint,
    normalize_longitude, compute_antipode, to_cartesian, lonlat_to_cartesian,
)
from .exceptions import (
    AntipodeGlobeError, InvalidCoordinate, SceneNotReady,
    GeocodingError, NoResultsError, ConfigError,
)
from .io import PlaceQuery, load_places, save_scene, save_summary
from .mesh_ops import create_tube_mesh, create_shell_mesh, compute_mesh_stats

__all__ = [
    'Config', 'SceneMetadata', 'DEFAULT_CONFIG',
    'GeoCoordinate', 'CartesianPoint',
    'normalize_longitude', 'compute_antipode', 'to_cartesian', 'lonlat_to_cartesian',
    'AntipodeGlobeError', 'InvalidCoordinate', 'SceneNotReady',
    'GeocodingError', 'NoResultsError', 'ConfigError',
    'PlaceQuery', 'load_places', 'save_scene', 'save_summary',
    'create_tube_mesh', 'create_shell_mesh', 'compute_mesh_stats',
]
