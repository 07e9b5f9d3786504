"""
Place lookup against external geocoding services.
"""

from .nominatim_client import NominatimClient, GeocodeResult

__all__ = [
    "NominatimClient",
    "GeocodeResult"
]
