"""
Data I/O utilities.

Handles loading batches of places to look up and saving scenes with
proper metadata.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Dict, Any
from dataclasses import dataclass

import pandas as pd

from .config import SceneMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaceQuery:
    """
    One lookup request: either a place name or a direct coordinate.

    A direct coordinate stands in for clicking on the map.
    """
    place: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None

    @property
    def is_coordinate(self) -> bool:
        return self.lat is not None and self.lng is not None

    @property
    def label(self) -> str:
        if self.place:
            return self.place
        return f"{self.lat},{self.lng}"


def load_places(path: Path) -> List[PlaceQuery]:
    """
    Load place queries from CSV or parquet file.

    Expected columns (any one naming per group):
    - place or query or name or location
    - lat or latitude, together with lng or lon or longitude

    A row with a name is geocoded; a row with only coordinates is used as is.

    Args:
        path: Path to data file

    Returns:
        List of PlaceQuery in file order
    """
    path = Path(path)

    if path.suffix == '.parquet':
        df = pd.read_parquet(path)
    else:
        df = pd.read_csv(path)

    logger.info(f"Loaded {len(df)} rows from {path}")

    def find_col(candidates: List[str]) -> Optional[str]:
        for c in candidates:
            if c in df.columns:
                return c
        return None

    place_col = find_col(['place', 'query', 'name', 'location'])
    lat_col = find_col(['lat', 'latitude'])
    lng_col = find_col(['lng', 'lon', 'longitude'])

    if not place_col and not (lat_col and lng_col):
        raise ValueError(f"Could not find place or lat/lng columns in {df.columns.tolist()}")

    queries = []
    for row in df.itertuples(index=False):
        record = row._asdict()
        place = record.get(place_col) if place_col else None
        if place is not None and pd.isna(place):
            place = None

        lat = record.get(lat_col) if lat_col else None
        lng = record.get(lng_col) if lng_col else None
        if place is None and (pd.isna(lat) or pd.isna(lng)):
            logger.warning(f"Skipping row without place or coordinates: {record}")
            continue

        if place is not None:
            queries.append(PlaceQuery(place=str(place)))
        else:
            queries.append(PlaceQuery(lat=float(lat), lng=float(lng)))

    logger.info(f"Parsed {len(queries)} place queries")
    return queries


def save_scene(globe_scene, path: Path, metadata: SceneMetadata) -> None:
    """
    Save scene to GLB file with metadata sidecar.

    Args:
        globe_scene: Initialized GlobeScene
        path: Output path (should end in .glb)
        metadata: SceneMetadata object (will be saved as .json sidecar)
    """
    path = Path(path)
    globe_scene.export(path)

    meta_path = path.with_suffix('.json')
    metadata.save(meta_path)
    logger.info(f"Saved metadata: {meta_path}")


def save_summary(summary: Dict[str, Any], path: Path) -> Path:
    """Write a run summary as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(summary, f, indent=2)
    logger.info(f"Summary saved to: {path}")
    return path
