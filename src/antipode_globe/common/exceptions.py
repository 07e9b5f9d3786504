"""
Exception hierarchy for the antipode globe.

Every domain exception inherits from ``AntipodeGlobeError`` and carries a
machine-readable ``code`` so the CLI summary can report failures uniformly.

- ``InvalidCoordinate``  non-finite input or latitude outside [-90, 90]
- ``SceneNotReady``      scene used before it was initialized
- ``GeocodingError``     the geocoding service could not be reached or failed
- ``NoResultsError``     the geocoding service returned nothing for a place
- ``ConfigError``        configuration value out of range
"""

from typing import Any, Dict


class AntipodeGlobeError(Exception):
    """Base exception for all antipode globe errors."""

    default_code: str = "ANTIPODE_GLOBE_ERROR"

    def __init__(self, message: str = "", code: str = ""):
        self.message = message
        self.code = code or self.default_code
        super().__init__(message)

    def to_error_dict(self) -> Dict[str, Any]:
        """Return a structured error payload with stable keys."""
        return {
            "type": type(self).__name__,
            "code": self.code,
            "message": self.message,
        }


class InvalidCoordinate(AntipodeGlobeError, ValueError):
    """Latitude/longitude is non-finite or out of range."""

    default_code = "INVALID_COORDINATE"


class SceneNotReady(AntipodeGlobeError, RuntimeError):
    """The render scene has not been initialized yet."""

    default_code = "SCENE_NOT_READY"


class GeocodingError(AntipodeGlobeError):
    """The geocoding lookup failed."""

    default_code = "GEOCODING_FAILED"


class NoResultsError(GeocodingError):
    """The geocoding lookup returned zero results."""

    default_code = "NO_RESULTS"

    def __init__(self, place: str):
        self.place = place
        super().__init__(f"No results found for {place!r}")


class ConfigError(AntipodeGlobeError, ValueError):
    """A configuration key is unknown or its value is out of range."""

    default_code = "CONFIG_INVALID"

    def __init__(self, key: str, value: Any, reason: str):
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {reason}")
