#!/usr/bin/env python3
"""
Antipode Globe - Orchestrator

Look up places, compute their antipodes and build the tunnel scene.

Usage:
    python -m antipode_globe.run_search "London" "Wellington"
    python -m antipode_globe.run_search --lat 51.5074 --lng -0.1278 --export-scene
    python -m antipode_globe.run_search --places-file data/places.csv --output outputs
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Dict, Any
from dataclasses import dataclass
from datetime import datetime

from .common.config import Config, SceneMetadata
from .common.coords import GeoCoordinate, compute_antipode
from .common.exceptions import AntipodeGlobeError, ConfigError
from .common.io import PlaceQuery, load_places, save_scene, save_summary
from .common.mesh_ops import compute_mesh_stats
from .acquisition.nominatim_client import NominatimClient
from .geometry.arcs import ArcDescriptor, make_arc
from .geometry.globe_scene import CameraView, GlobeScene
from .geometry.tunnel import TunnelSolid, build_tunnel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Marker:
    """Labelled point shown on the globe."""
    lat: float
    lng: float
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {"lat": self.lat, "lng": self.lng, "label": self.label}


@dataclass
class SearchResult:
    """Everything one search produces for the renderer."""
    origin: GeoCoordinate
    antipode: GeoCoordinate
    markers: List[Marker]
    arcs: List[ArcDescriptor]
    camera: CameraView
    tunnel: Optional[TunnelSolid] = None
    display_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "display_name": self.display_name,
            "origin": self.origin.to_dict(),
            "antipode": self.antipode.to_dict(),
            "markers": [m.to_dict() for m in self.markers],
            "arcs": [a.to_dict() for a in self.arcs],
            "camera": self.camera.to_dict(),
            "tunnel": self.tunnel.to_dict() if self.tunnel is not None else None
        }


class AntipodeSearch:
    """
    Search handler: geocode, compute the antipode, and update the scene.

    Each search supersedes the previous one; the scene keeps only the
    newest tunnel.
    """

    def __init__(self, geocoder: NominatimClient, globe: GlobeScene, config: Config):
        self.geocoder = geocoder
        self.globe = globe
        self.config = config

    def search(self, place: str) -> SearchResult:
        """
        Look up a place name and locate its antipode.

        Raises:
            ValueError: If place is blank
            GeocodingError: If the lookup fails or finds nothing
        """
        top = self.geocoder.geocode_top(place)
        return self.locate(top.to_coordinate(), display_name=top.display_name)

    def locate(self, origin: GeoCoordinate, display_name: str = "") -> SearchResult:
        """Locate the antipode of a known coordinate (e.g. a map click)."""
        precision = self.config.coordinate_precision
        antipode = compute_antipode(origin.lat, origin.lng, precision=precision)

        markers = [
            Marker(origin.lat, origin.lng, "Origin"),
            Marker(antipode.lat, antipode.lng, "Antipode"),
        ]
        arcs = [make_arc(origin, antipode, self.config.arc_colors)]
        tunnel = build_tunnel(origin, antipode, self.globe)
        camera = CameraView(
            lat=origin.lat,
            lng=origin.lng,
            altitude=self.config.camera_altitude,
            transition_ms=self.config.camera_transition_ms
        )

        shown = origin.rounded(precision)
        logger.info(f"Origin ({shown.lat}, {shown.lng}) -> antipode ({antipode.lat}, {antipode.lng})")

        return SearchResult(
            origin=origin,
            antipode=antipode,
            markers=markers,
            arcs=arcs,
            camera=camera,
            tunnel=tunnel,
            display_name=display_name or origin.label or ""
        )

    def run(self, query: PlaceQuery) -> SearchResult:
        if query.is_coordinate:
            return self.locate(GeoCoordinate(lat=query.lat, lng=query.lng))
        return self.search(query.place)


def _scene_metadata(result: SearchResult, globe: GlobeScene, config: Config, label: str) -> SceneMetadata:
    return SceneMetadata(
        place=label,
        origin=result.origin.to_dict(),
        antipode=result.antipode.to_dict(),
        globe_radius=globe.get_globe_radius(),
        tunnel_length=result.tunnel.length if result.tunnel else 0.0,
        tunnel_radius=result.tunnel.radius if result.tunnel else 0.0,
        object_names=globe.object_names(),
        generation_params=config.to_dict(),
        tunnel_mesh=compute_mesh_stats(result.tunnel.world_mesh()) if result.tunnel else None
    )


def _slug(label: str) -> str:
    cleaned = "".join(c if c.isalnum() else "_" for c in label.lower())
    return "_".join(part for part in cleaned.split("_") if part) or "place"


def run_search(
    queries: List[PlaceQuery],
    searcher: AntipodeSearch,
    output_dir: Path,
    export_scene: bool = False
) -> dict:
    """
    Run every query in order.

    Args:
        queries: Place names and/or direct coordinates
        searcher: Configured search handler
        output_dir: Output directory for exported scenes
        export_scene: Whether to write a GLB per query

    Returns:
        Summary dictionary
    """
    summary = {
        "timestamp": datetime.now().isoformat(),
        "config": searcher.config.to_dict(),
        "results": [],
        "errors": []
    }

    for query in queries:
        label = query.label
        logger.info(f"--- {label} ---")

        try:
            result = searcher.run(query)
        except (AntipodeGlobeError, ValueError) as e:
            logger.error(f"Search failed for {label!r}: {e}")
            error = e.to_error_dict() if isinstance(e, AntipodeGlobeError) else {
                "type": type(e).__name__, "code": "INVALID_INPUT", "message": str(e)
            }
            summary["errors"].append({"query": label, **error})
            continue

        entry = {"query": label, "status": "success", **result.to_dict()}

        if export_scene and searcher.globe.ready:
            scene_path = output_dir / "scenes" / f"{_slug(label)}.glb"
            save_scene(
                searcher.globe,
                scene_path,
                _scene_metadata(result, searcher.globe, searcher.config, label)
            )
            entry["scene_path"] = str(scene_path)

        summary["results"].append(entry)

    return summary


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Antipode Globe - find the antipode of a place and tunnel to it"
    )
    parser.add_argument(
        "places",
        nargs="*",
        help="Place names to look up"
    )
    parser.add_argument(
        "--lat",
        type=float,
        help="Latitude of a direct coordinate (use with --lng)"
    )
    parser.add_argument(
        "--lng",
        type=float,
        help="Longitude of a direct coordinate (use with --lat)"
    )
    parser.add_argument(
        "--places-file", "-f",
        type=Path,
        help="CSV/parquet file with a place column or lat/lng columns"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON config file"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Output directory"
    )
    parser.add_argument(
        "--export-scene", "-e",
        action="store_true",
        help="Export a GLB scene per query"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )

    args = parser.parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    if (args.lat is None) != (args.lng is None):
        parser.error("--lat and --lng must be given together")

    # Build config
    try:
        config = Config.from_json(args.config) if args.config else Config().validate()
    except ConfigError as e:
        parser.error(str(e))
    if args.output is not None:
        config.output_dir = args.output

    # Collect queries
    queries = [PlaceQuery(place=p) for p in args.places]
    if args.lat is not None:
        queries.append(PlaceQuery(lat=args.lat, lng=args.lng))
    if args.places_file:
        queries.extend(load_places(args.places_file))

    if not queries:
        logger.error("No places given!")
        sys.exit(1)

    globe = GlobeScene(config).initialize()
    searcher = AntipodeSearch(NominatimClient.from_config(config), globe, config)

    logger.info(f"Processing {len(queries)} queries")
    logger.info(f"Output: {config.output_dir}")

    try:
        summary = run_search(
            queries=queries,
            searcher=searcher,
            output_dir=config.output_dir,
            export_scene=args.export_scene
        )
    finally:
        globe.teardown()

    save_summary(summary, config.output_dir / "search_summary.json")

    for entry in summary["results"]:
        antipode = entry["antipode"]
        print(f"{entry['query']}: antipode at ({antipode['lat']}, {antipode['lng']})")

    n_success = len(summary["results"])
    n_errors = len(summary["errors"])
    logger.info(f"COMPLETE: {n_success} successful, {n_errors} errors")

    if n_errors > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
