"""EXIF metadata extraction: GPS fix and camera details.

Both extractors read the file with Pillow in a worker thread and never raise:
an unreadable file yields no location and an empty CameraMetadata.
"""

import asyncio
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from PIL import ExifTags, Image
from pydantic import ValidationError

from trektrack.models import CameraMetadata, GPSLocation, RawFile

logger = logging.getLogger(__name__)


def _read_tags(path: Path) -> tuple[dict, dict, dict]:
    """Return (base IFD, Exif IFD, GPS IFD) tag dicts for an image file."""
    with Image.open(path) as img:
        exif = img.getexif()
        base = dict(exif)
        details = dict(exif.get_ifd(ExifTags.IFD.Exif))
        gps = dict(exif.get_ifd(ExifTags.IFD.GPSInfo))
    return base, details, gps


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8", "ignore")
    text = str(value).strip("\x00 ").strip()
    return text or None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, (tuple, list)):
        value = value[0] if value else None
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    return number if math.isfinite(number) else None


def _to_degrees(value: Any, ref: Any) -> Optional[float]:
    """Convert an EXIF (deg, min, sec) triple or plain number to signed decimal degrees."""
    if value is None:
        return None
    try:
        if isinstance(value, (tuple, list)):
            parts = [float(v) for v in value][:3]
            parts += [0.0] * (3 - len(parts))
            degrees = parts[0] + parts[1] / 60.0 + parts[2] / 3600.0
        else:
            degrees = float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    if not math.isfinite(degrees):
        return None
    ref_text = _as_text(ref)
    if ref_text and ref_text.upper() in ("S", "W"):
        degrees = -degrees
    return degrees


def _altitude(value: Any, ref: Any) -> Optional[float]:
    alt = _as_float(value)
    if alt is None:
        return None
    if isinstance(ref, bytes):
        ref = ref[:1] == b"\x01"
    elif ref is not None:
        ref = str(ref).strip() == "1"
    return -alt if ref else alt


def _parse_offset(offset: Any):
    text = _as_text(offset)
    if not text:
        return None
    try:
        return datetime.strptime(text, "%z").tzinfo
    except ValueError:
        return None


def parse_exif_datetime(value: Any, offset: Any = None) -> Optional[datetime]:
    """Parse an EXIF ``YYYY:MM:DD HH:MM:SS`` date-time.

    The first two colons become hyphens and the result is read as an ISO
    date-time. Malformed input returns None. Without an explicit offset the
    time is taken as UTC.
    """
    text = _as_text(value)
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace(":", "-", 2))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=_parse_offset(offset) or timezone.utc)
    return parsed


def location_from_tags(gps: dict, details: dict) -> Optional[GPSLocation]:
    """Build a GPSLocation from GPS and Exif IFD dicts, or None without a full fix."""
    lat = _to_degrees(gps.get(ExifTags.GPS.GPSLatitude), gps.get(ExifTags.GPS.GPSLatitudeRef))
    lng = _to_degrees(gps.get(ExifTags.GPS.GPSLongitude), gps.get(ExifTags.GPS.GPSLongitudeRef))
    if lat is None or lng is None:
        return None

    try:
        return GPSLocation(
            lat=lat,
            lng=lng,
            alt=_altitude(gps.get(ExifTags.GPS.GPSAltitude), gps.get(ExifTags.GPS.GPSAltitudeRef)),
            timestamp=parse_exif_datetime(
                details.get(ExifTags.Base.DateTimeOriginal),
                details.get(ExifTags.Base.OffsetTimeOriginal),
            ),
        )
    except ValidationError as e:
        logger.debug("Discarding out-of-range GPS fix (%s, %s): %s", lat, lng, e)
        return None


def _format_exposure(value: Any) -> Optional[str]:
    seconds = _as_float(value)
    if seconds is None or seconds <= 0:
        return None
    if seconds < 1:
        return f"1/{round(1 / seconds)}"
    return f"{seconds:g}"


def _format_f_number(value: Any) -> Optional[str]:
    f = _as_float(value)
    return f"f/{f:g}" if f is not None else None


def _format_focal_length(value: Any) -> Optional[str]:
    mm = _as_float(value)
    return f"{mm:g} mm" if mm is not None else None


def _format_iso(value: Any) -> Optional[str]:
    iso = _as_float(value)
    return str(int(iso)) if iso is not None else None


def camera_from_tags(base: dict, details: dict) -> CameraMetadata:
    return CameraMetadata(
        make=_as_text(base.get(ExifTags.Base.Make)),
        model=_as_text(base.get(ExifTags.Base.Model)),
        exposure_time=_format_exposure(details.get(ExifTags.Base.ExposureTime)),
        f_number=_format_f_number(details.get(ExifTags.Base.FNumber)),
        iso=_format_iso(details.get(ExifTags.Base.ISOSpeedRatings)),
        focal_length=_format_focal_length(details.get(ExifTags.Base.FocalLength)),
        lens=_as_text(details.get(ExifTags.Base.LensModel)),
    )


async def extract_location(file: RawFile) -> Optional[GPSLocation]:
    try:
        _, details, gps = await asyncio.to_thread(_read_tags, file.path)
    except Exception as e:
        logger.warning("Error reading GPS data from %s: %s", file.name, e)
        return None
    return location_from_tags(gps, details)


async def extract_camera(file: RawFile) -> CameraMetadata:
    try:
        base, details, _ = await asyncio.to_thread(_read_tags, file.path)
    except Exception as e:
        logger.warning("Error reading camera EXIF from %s: %s", file.name, e)
        return CameraMetadata()
    return camera_from_tags(base, details)
