"""GPX 1.1 export of the ordered trek."""

from datetime import date
from pathlib import Path
from typing import Iterable, Optional

import gpxpy
import gpxpy.gpx

from ..core.stats import order_waypoints
from ..models import TrekPhoto

CREATOR = "TrekTrack"
TRACK_NAME = "Digital Trail"


def _compact(value: Optional[float]) -> Optional[float | int]:
    """Integral floats are written without a trailing ``.0``."""
    if value is not None and float(value).is_integer():
        return int(value)
    return value


def default_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"trek_route_{day.isoformat()}.gpx"


def build_gpx(photos: Iterable[TrekPhoto], day: Optional[date] = None) -> Optional[gpxpy.gpx.GPX]:
    """Build a GPX track with one point per geotagged photo, in trek order.

    Returns None when no photo is geotagged; there is no empty document.
    """
    waypoints = order_waypoints(photos)
    if not waypoints:
        return None

    gpx = gpxpy.gpx.GPX()
    gpx.creator = CREATOR
    gpx.name = f"Expedition Export {(day or date.today()).isoformat()}"

    track = gpxpy.gpx.GPXTrack(name=TRACK_NAME)
    segment = gpxpy.gpx.GPXTrackSegment()
    track.segments.append(segment)
    gpx.tracks.append(track)

    for photo in waypoints:
        loc = photo.location
        segment.points.append(gpxpy.gpx.GPXTrackPoint(
            latitude=loc.lat,
            longitude=loc.lng,
            elevation=_compact(loc.alt),
            time=loc.timestamp,
            name=photo.name,
        ))
    return gpx


def to_track_document(photos: Iterable[TrekPhoto], day: Optional[date] = None) -> Optional[str]:
    gpx = build_gpx(photos, day=day)
    if gpx is None:
        return None
    return gpx.to_xml(version="1.1")


def export_gpx(photos: Iterable[TrekPhoto], output_path: str | Path) -> Optional[Path]:
    """Write the trek to ``output_path``. Returns None (and writes nothing) without waypoints."""
    document = to_track_document(photos)
    if document is None:
        return None
    path = Path(output_path)
    with open(path, "w", encoding="utf-8") as f:
        f.write(document)
    return path
