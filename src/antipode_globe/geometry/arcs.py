"""
Arc descriptors for the surface connector between a place and its antipode.

The renderer draws the great-circle path; this module only produces the
record it consumes.
"""

from dataclasses import dataclass
from typing import Dict, Any, Tuple

from ..common.config import DEFAULT_ARC_COLORS
from ..common.coords import GeoCoordinate


@dataclass(frozen=True)
class ArcDescriptor:
    """Start/end of an arc plus its (start, end) color pair."""
    start_lat: float
    start_lng: float
    end_lat: float
    end_lng: float
    color: Tuple[str, str] = DEFAULT_ARC_COLORS

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the render layer's camelCase keys."""
        return {
            "startLat": self.start_lat,
            "startLng": self.start_lng,
            "endLat": self.end_lat,
            "endLng": self.end_lng,
            "color": list(self.color)
        }


def make_arc(
    origin: GeoCoordinate,
    antipode: GeoCoordinate,
    colors: Tuple[str, str] = DEFAULT_ARC_COLORS
) -> ArcDescriptor:
    """Describe the arc from origin to antipode."""
    return ArcDescriptor(
        start_lat=origin.lat,
        start_lng=origin.lng,
        end_lat=antipode.lat,
        end_lng=antipode.lng,
        color=tuple(colors)
    )
