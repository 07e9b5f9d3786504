"""
Antipode Globe - find the point on the other side of the Earth.

Pipeline:
- geocode a place name (or take a coordinate directly)
- compute its antipode
- describe the surface arc between them
- build a tube through the globe from one to the other

Usage:
    python -m antipode_globe.run_search "London" --export-scene
"""

__version__ = "1.0.0"
