"""
Coordinate utilities.

Unit Flow (NON-NEGOTIABLE):
Geographic (lat/lng, degrees) → canonical longitude → antipode → Cartesian (scene units)

This is the ONLY place where the spherical-to-Cartesian convention lives.
The tunnel builder, the globe shells and the camera placement all go through
to_cartesian()/lonlat_to_cartesian() so they agree with the renderer's globe.
"""

import math
import numpy as np
from typing import Optional, Dict, Union
from dataclasses import dataclass
import logging

from .exceptions import InvalidCoordinate

logger = logging.getLogger(__name__)

DEFAULT_PRECISION = 6

Number = Union[int, float]


def _require_finite(name: str, value: Number) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidCoordinate(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(value):
        raise InvalidCoordinate(f"{name} must be finite, got {value!r}")
    return value


def _validate_latitude(lat: Number) -> float:
    lat = _require_finite("lat", lat)
    if not -90.0 <= lat <= 90.0:
        raise InvalidCoordinate(f"lat must be within [-90, 90], got {lat!r}")
    return lat


def normalize_longitude(lng: Number, precision: Optional[int] = DEFAULT_PRECISION) -> float:
    """
    Map a longitude onto the canonical range (-180, 180].

    The antimeridian is always reported as +180, never -180, and negative
    zero is reported as 0.0.

    Args:
        lng: Longitude in degrees (any finite value)
        precision: Decimal places to round to; None keeps the unrounded value

    Returns:
        Canonical longitude in degrees

    Raises:
        InvalidCoordinate: If lng is NaN or infinite
    """
    lng = _require_finite("lng", lng)

    if precision is None and -180.0 < lng <= 180.0:
        # Already canonical; skip the modulo so the value comes back bit-exact
        v = lng
    else:
        v = ((lng + 180.0) % 360.0 + 360.0) % 360.0 - 180.0

    if precision is not None:
        v = round(v, precision)

    # Checked after rounding: -179.9999999 rounds onto the antimeridian too
    if v == -180.0:
        v = 180.0

    return v + 0.0


@dataclass(frozen=True)
class GeoCoordinate:
    """
    Immutable geographic coordinate in degrees.

    lat is validated to [-90, 90]; lng is stored canonically in (-180, 180].
    """
    lat: float
    lng: float
    label: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "lat", _validate_latitude(self.lat) + 0.0)
        object.__setattr__(self, "lng", normalize_longitude(self.lng, precision=None))

    def antipode(self, precision: Optional[int] = DEFAULT_PRECISION) -> "GeoCoordinate":
        """Return the diametrically opposite coordinate."""
        return compute_antipode(self.lat, self.lng, precision=precision)

    def rounded(self, precision: int = DEFAULT_PRECISION) -> "GeoCoordinate":
        """Return a copy rounded for display."""
        return GeoCoordinate(
            lat=round(self.lat, precision),
            lng=normalize_longitude(self.lng, precision),
            label=self.label
        )

    def to_dict(self) -> Dict[str, object]:
        data = {"lat": self.lat, "lng": self.lng}
        if self.label is not None:
            data["label"] = self.label
        return data


def compute_antipode(
    lat: Number,
    lng: Number,
    precision: Optional[int] = DEFAULT_PRECISION
) -> GeoCoordinate:
    """
    Compute the antipode of a coordinate.

    antipode lat = -lat, antipode lng = normalize(lng + 180).
    Poles map to the opposite pole; their longitude is still computed so the
    function stays total.

    Args:
        lat: Latitude in degrees, within [-90, 90]
        lng: Longitude in degrees (any finite value)
        precision: Decimal places to round to; None keeps the unrounded values

    Returns:
        GeoCoordinate of the antipode

    Raises:
        InvalidCoordinate: If lat is out of range or either value is non-finite
    """
    lat = _validate_latitude(lat)
    lng = _require_finite("lng", lng)

    ant_lat = -lat
    if precision is not None:
        ant_lat = round(ant_lat, precision)
    ant_lng = normalize_longitude(lng + 180.0, precision)

    # + 0.0 turns the -0.0 produced by negating the equator into 0.0
    return GeoCoordinate(lat=ant_lat + 0.0, lng=ant_lng)


@dataclass(frozen=True)
class CartesianPoint:
    """Point in scene space (right-handed, Y-up)."""
    x: float
    y: float
    z: float

    @classmethod
    def from_array(cls, values: np.ndarray) -> "CartesianPoint":
        x, y, z = (float(v) for v in values)
        return cls(x, y, z)

    def as_array(self) -> np.ndarray:
        """Return the point as a float64 array of shape (3,)."""
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def distance_to(self, other: "CartesianPoint") -> float:
        """Euclidean distance to another point."""
        return float(np.linalg.norm(self.as_array() - other.as_array()))

    def midpoint(self, other: "CartesianPoint") -> "CartesianPoint":
        return CartesianPoint.from_array((self.as_array() + other.as_array()) / 2.0)

    def __sub__(self, other: "CartesianPoint") -> np.ndarray:
        return self.as_array() - other.as_array()


def to_cartesian(lat: Number, lng: Number, radius: Number) -> CartesianPoint:
    """
    Project a geographic coordinate onto a sphere of the given radius.

    Convention (matches three-globe's globe orientation):
        phi   = (90 - lat) in radians, polar angle from +Y
        theta = (lng + 180) in radians, azimuthal angle
        x = -R sin(phi) cos(theta)
        y =  R cos(phi)
        z =  R sin(phi) sin(theta)

    So (0, 0) lands on +X, the north pole on +Y and (0, 90) on -Z.

    Args:
        lat: Latitude in degrees
        lng: Longitude in degrees
        radius: Sphere radius in scene units

    Returns:
        CartesianPoint on the sphere
    """
    xyz = lonlat_to_cartesian(np.asarray([lat]), np.asarray([lng]), radius)[0]
    return CartesianPoint.from_array(xyz)


def lonlat_to_cartesian(
    lat: np.ndarray,
    lng: np.ndarray,
    radius: Union[Number, np.ndarray]
) -> np.ndarray:
    """
    Vectorised form of to_cartesian().

    Args:
        lat: Latitude array (degrees)
        lng: Longitude array (degrees)
        radius: Sphere radius, scalar or per-point

    Returns:
        (N, 3) array of XYZ coordinates
    """
    lat = np.asarray(lat, dtype=np.float64)
    lng = np.asarray(lng, dtype=np.float64)

    phi = np.deg2rad(90.0 - lat)
    theta = np.deg2rad(lng + 180.0)

    x = -radius * np.sin(phi) * np.cos(theta)
    y = radius * np.cos(phi)
    z = radius * np.sin(phi) * np.sin(theta)

    return np.column_stack([x, y, z])
