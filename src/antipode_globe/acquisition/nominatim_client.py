"""
Nominatim Geocoding Module

Resolves free-text place names to coordinates using the OpenStreetMap
Nominatim search API.
https://nominatim.org/release-docs/latest/api/Search/
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Dict, Any

import requests

from ..common.config import Config, DEFAULT_CONFIG
from ..common.coords import GeoCoordinate
from ..common.exceptions import GeocodingError, NoResultsError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodeResult:
    """One match returned by the geocoder."""
    lat: float
    lng: float
    display_name: str

    def to_coordinate(self) -> GeoCoordinate:
        return GeoCoordinate(lat=self.lat, lng=self.lng, label=self.display_name)

    @classmethod
    def from_nominatim(cls, record: Dict[str, Any]) -> "GeocodeResult":
        """Build from a Nominatim JSON record (lat/lon arrive as strings)."""
        return cls(
            lat=float(record["lat"]),
            lng=float(record["lon"]),
            display_name=record.get("display_name", "")
        )


class NominatimClient:
    """Client for the Nominatim search endpoint."""

    def __init__(
        self,
        base_url: str = DEFAULT_CONFIG.geocoder_url,
        user_agent: str = DEFAULT_CONFIG.user_agent,
        timeout: float = DEFAULT_CONFIG.request_timeout_s,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize Nominatim client.

        Args:
            base_url: Search endpoint URL
            user_agent: User-Agent header (Nominatim's usage policy requires one)
            timeout: Request timeout in seconds
            session: Optional pre-configured session
        """
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    @classmethod
    def from_config(cls, config: Config, session: Optional[requests.Session] = None) -> "NominatimClient":
        return cls(
            base_url=config.geocoder_url,
            user_agent=config.user_agent,
            timeout=config.request_timeout_s,
            session=session
        )

    def search(self, place: str) -> List[GeocodeResult]:
        """
        Look up a place name.

        Args:
            place: Free-text place name

        Returns:
            Matches in the geocoder's ranking order (possibly empty)

        Raises:
            ValueError: If place is blank
            GeocodingError: If the request fails or the response is malformed
        """
        if not place or not place.strip():
            raise ValueError("place must not be empty")

        params = {
            "format": "json",
            "q": place.strip()
        }

        logger.info(f"Geocoding {place!r}...")
        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            records = response.json()
        except requests.RequestException as e:
            raise GeocodingError(f"Geocoding failed for {place!r}: {e}") from e
        except ValueError as e:
            raise GeocodingError(f"Geocoding returned invalid JSON for {place!r}: {e}") from e

        if not isinstance(records, list):
            raise GeocodingError(f"Unexpected geocoding response for {place!r}: {type(records).__name__}")

        try:
            results = [GeocodeResult.from_nominatim(r) for r in records]
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodingError(f"Malformed geocoding record for {place!r}: {e}") from e

        logger.info(f"Found {len(results)} results for {place!r}")
        return results

    def geocode_top(self, place: str) -> GeocodeResult:
        """
        Return the best match for a place name.

        Raises:
            NoResultsError: If the geocoder has no match
        """
        results = self.search(place)
        if not results:
            raise NoResultsError(place)
        top = results[0]
        logger.debug(f"Top result: {top.display_name} ({top.lat}, {top.lng})")
        return top
