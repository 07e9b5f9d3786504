"""
Configuration and constants for the antipode globe.

Scale Model:
- Every length is expressed relative to the render sphere radius R
- The tunnel and the globe shells are sized as fractions of R
- Geographic coordinates stay in degrees until they reach the mapper in coords.py
"""

from dataclasses import dataclass, field, fields
from typing import Dict, Any, Optional, Tuple
import json
from pathlib import Path

from .exceptions import ConfigError


# three-globe renders its sphere with a radius of 100 scene units
DEFAULT_GLOBE_RADIUS = 100.0

DEFAULT_ARC_COLORS = ("rgba(0,200,255,0.9)", "rgba(255,0,128,0.9)")

NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"


@dataclass
class SceneMetadata:
    """
    Metadata written next to every exported scene.

    Records the inputs that produced the geometry so an exported GLB can be
    traced back to its search.
    """
    place: str
    origin: Dict[str, float]
    antipode: Dict[str, float]
    globe_radius: float
    tunnel_length: float
    tunnel_radius: float
    object_names: list = field(default_factory=list)
    generation_params: Dict[str, Any] = field(default_factory=dict)
    tunnel_mesh: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "place": self.place,
            "origin": self.origin,
            "antipode": self.antipode,
            "globe_radius": self.globe_radius,
            "tunnel_length": self.tunnel_length,
            "tunnel_radius": self.tunnel_radius,
            "object_names": self.object_names,
            "generation_params": self.generation_params,
            "tunnel_mesh": self.tunnel_mesh
        }

    def save(self, path: Path) -> None:
        """Save metadata to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SceneMetadata":
        return cls(**data)


@dataclass
class Config:
    """
    Global configuration for antipode search and tunnel construction.

    Scale Model:
    - tunnel radius = tunnel_radius_factor * R
    - tunnel length = chord length + tunnel_overshoot_factor * R
    - shells sit just outside (clouds) and just inside (night) the globe
    """

    # Render sphere
    globe_radius: float = DEFAULT_GLOBE_RADIUS

    # Tunnel geometry
    tunnel_radius_factor: float = 0.06
    tunnel_overshoot_factor: float = 0.1  # tube pokes through the shell at both ends
    tunnel_segments: int = 32
    tunnel_color: Tuple[int, int, int, int] = (0, 255, 255, 46)  # 0x00ffff at 0.18 opacity

    # Globe shells
    cloud_shell_factor: float = 1.005
    night_shell_factor: float = 0.999
    shell_segments: int = 64

    # Display
    coordinate_precision: int = 6
    arc_colors: Tuple[str, str] = DEFAULT_ARC_COLORS
    camera_altitude: float = 2.2
    camera_transition_ms: int = 2000

    # Geocoding
    geocoder_url: str = NOMINATIM_SEARCH_URL
    user_agent: str = "Antipode-Globe-App - example@example.com"
    request_timeout_s: float = 10.0

    # Paths (relative to project root)
    output_dir: Path = field(default_factory=lambda: Path("outputs"))

    def __post_init__(self):
        self.tunnel_color = tuple(self.tunnel_color)
        self.arc_colors = tuple(self.arc_colors)
        self.output_dir = Path(self.output_dir)

    @property
    def tunnel_radius(self) -> float:
        """Tube radius for the configured globe radius."""
        return self.globe_radius * self.tunnel_radius_factor

    def validate(self) -> "Config":
        """
        Check value ranges.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigError: If a value is out of its valid range
        """
        positive = {
            "globe_radius": self.globe_radius,
            "tunnel_radius_factor": self.tunnel_radius_factor,
            "cloud_shell_factor": self.cloud_shell_factor,
            "night_shell_factor": self.night_shell_factor,
            "request_timeout_s": self.request_timeout_s,
        }
        for key, value in positive.items():
            if value <= 0:
                raise ConfigError(key, value, "must be > 0")

        if self.tunnel_overshoot_factor < 0:
            raise ConfigError("tunnel_overshoot_factor", self.tunnel_overshoot_factor, "must be >= 0")

        for key in ("tunnel_segments", "shell_segments"):
            if getattr(self, key) < 3:
                raise ConfigError(key, getattr(self, key), "must be >= 3")

        if self.coordinate_precision < 0:
            raise ConfigError("coordinate_precision", self.coordinate_precision, "must be >= 0")

        if len(self.tunnel_color) != 4 or not all(0 <= c <= 255 for c in self.tunnel_color):
            raise ConfigError("tunnel_color", self.tunnel_color, "must be four values in 0-255")

        if len(self.arc_colors) != 2:
            raise ConfigError("arc_colors", self.arc_colors, "must be a (start, end) pair")

        if not self.geocoder_url:
            raise ConfigError("geocoder_url", self.geocoder_url, "must not be empty")

        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "globe_radius": self.globe_radius,
            "tunnel_radius_factor": self.tunnel_radius_factor,
            "tunnel_overshoot_factor": self.tunnel_overshoot_factor,
            "tunnel_segments": self.tunnel_segments,
            "tunnel_color": list(self.tunnel_color),
            "cloud_shell_factor": self.cloud_shell_factor,
            "night_shell_factor": self.night_shell_factor,
            "shell_segments": self.shell_segments,
            "coordinate_precision": self.coordinate_precision,
            "arc_colors": list(self.arc_colors),
            "camera_altitude": self.camera_altitude,
            "camera_transition_ms": self.camera_transition_ms,
            "geocoder_url": self.geocoder_url,
            "user_agent": self.user_agent,
            "request_timeout_s": self.request_timeout_s,
            "output_dir": str(self.output_dir)
        }

    @classmethod
    def from_json(cls, path: Path) -> "Config":
        """
        Load config from JSON file and validate it.

        Raises:
            ConfigError: On an unknown key or an out-of-range value
        """
        with open(path) as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ConfigError(str(path), type(data).__name__, "must contain a JSON object")

        known = {fld.name for fld in fields(cls)}
        for key, value in data.items():
            if key not in known:
                raise ConfigError(key, value, "unknown option")

        return cls(**data).validate()

    def save(self, path: Path) -> None:
        """Save config to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


# Global default config
DEFAULT_CONFIG = Config()
