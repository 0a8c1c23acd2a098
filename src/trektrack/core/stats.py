"""Trek ordering and statistics.

The canonical order is a stable ascending sort on the photo's GPS timestamp;
photos without one sort as the epoch, i.e. first. Statistics need at least two
geotagged waypoints and are None otherwise.
"""

import math
from typing import Iterable, Optional, Sequence

import numpy as np

from trektrack.models import ElevationProfile, ElevationSample, TrekPhoto, TrekStatistics

EARTH_RADIUS_KM = 6371.0


def _sort_key(photo: TrekPhoto) -> float:
    loc = photo.location
    if loc is None or loc.timestamp is None:
        return 0.0
    return loc.timestamp.timestamp()


def order_photos(photos: Iterable[TrekPhoto]) -> tuple[TrekPhoto, ...]:
    """Every photo, geotagged or not, in trek order."""
    return tuple(sorted(photos, key=_sort_key))


def order_waypoints(photos: Iterable[TrekPhoto]) -> tuple[TrekPhoto, ...]:
    """The geotagged photos in trek order. Index + 1 is the waypoint number."""
    return tuple(p for p in order_photos(photos) if p.location is not None)


def haversine_km(lat1, lng1, lat2, lng2):
    """Great-circle distance in km. Accepts scalars or equal-length arrays."""
    lat1, lng1, lat2, lng2 = (
        np.radians(np.asarray(v, dtype=np.float64)) for v in (lat1, lng1, lat2, lng2)
    )
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlng / 2) ** 2
    a = np.clip(a, 0.0, 1.0)
    return EARTH_RADIUS_KM * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))


def compute_statistics(waypoints: Sequence[TrekPhoto]) -> Optional[TrekStatistics]:
    """Aggregate an already-ordered waypoint sequence."""
    if len(waypoints) < 2:
        return None

    lats = np.array([p.location.lat for p in waypoints], dtype=np.float64)
    lngs = np.array([p.location.lng for p in waypoints], dtype=np.float64)
    segments = haversine_km(lats[:-1], lngs[:-1], lats[1:], lngs[1:])

    alts = [p.location.alt for p in waypoints if p.location.alt is not None]

    duration = None
    start = waypoints[0].location.timestamp
    end = waypoints[-1].location.timestamp
    if start is not None and end is not None:
        # round half up
        duration = math.floor((end - start).total_seconds() / 60.0 + 0.5)

    return TrekStatistics(
        total_distance_km=float(np.sum(segments)),
        peak_elevation_m=max(alts) if alts else None,
        duration_minutes=duration,
    )


def recompute(photos: Iterable[TrekPhoto]) -> tuple[tuple[TrekPhoto, ...], Optional[TrekStatistics]]:
    """Derive the time-ordered trek and its statistics from a photo collection."""
    waypoints = order_waypoints(photos)
    return waypoints, compute_statistics(waypoints)


def elevation_profile(photos: Iterable[TrekPhoto]) -> Optional[ElevationProfile]:
    """Altitude samples along the trek, normalized for charting.

    Only waypoints with an altitude take part; fewer than two gives None.
    """
    points = [p for p in order_waypoints(photos) if p.location.alt is not None]
    if len(points) < 2:
        return None

    alts = np.array([p.location.alt for p in points], dtype=np.float64)
    lo, hi = float(alts.min()), float(alts.max())
    span = (hi - lo) or 1.0
    last = len(points) - 1

    return ElevationProfile(
        min_m=lo,
        max_m=hi,
        samples=[
            ElevationSample(
                id=p.id,
                alt=float(alt),
                position=i / last,
                height=(float(alt) - lo) / span,
            )
            for i, (p, alt) in enumerate(zip(points, alts))
        ],
    )
