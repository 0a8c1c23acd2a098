"""Pydantic domain models for trek photos, waypoints and published views."""

import mimetypes
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from trektrack.core.handles import DisplayHandle


class RawFile(BaseModel):
    """An image file as handed to the ingestion pipeline."""
    model_config = ConfigDict(frozen=True)

    path: Path
    name: str
    mime_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: str | Path) -> "RawFile":
        p = Path(path)
        mime_type, _ = mimetypes.guess_type(p.name)
        return cls(path=p, name=p.name, mime_type=mime_type or "application/octet-stream")


class GPSLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    alt: Optional[float] = None
    timestamp: Optional[datetime] = None

    @field_validator("timestamp")
    @classmethod
    def assume_utc_when_naive(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class CameraMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    make: Optional[str] = None
    model: Optional[str] = None
    exposure_time: Optional[str] = None
    f_number: Optional[str] = None
    iso: Optional[str] = None
    focal_length: Optional[str] = None
    lens: Optional[str] = None


class NormalizedAsset(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    display_handle: DisplayHandle
    inline_encoding: str
    mime_type: str


class TrekPhoto(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str = Field(min_length=1)
    name: str
    display_handle: DisplayHandle
    inline_encoding: str
    location: Optional[GPSLocation] = None
    camera: Optional[CameraMetadata] = None
    mime_type: str

    @property
    def is_geotagged(self) -> bool:
        return self.location is not None


class TrekStatistics(BaseModel):
    total_distance_km: float = Field(ge=0)
    peak_elevation_m: Optional[float] = None
    duration_minutes: Optional[int] = None


class Bounds(BaseModel):
    north: float = Field(ge=-90, le=90)
    south: float = Field(ge=-90, le=90)
    east: float = Field(ge=-180, le=180)
    west: float = Field(ge=-180, le=180)

    @model_validator(mode="after")
    def check_north_ge_south(self) -> "Bounds":
        if self.north < self.south:
            raise ValueError(f"north ({self.north}) must not be less than south ({self.south})")
        return self

    @model_validator(mode="after")
    def check_east_ge_west(self) -> "Bounds":
        if self.east < self.west:
            raise ValueError(f"east ({self.east}) must not be less than west ({self.west})")
        return self

    @classmethod
    def around(cls, locations: list[GPSLocation]) -> "Bounds":
        if not locations:
            raise ValueError("Cannot frame an empty set of locations")
        return cls(
            north=max(loc.lat for loc in locations),
            south=min(loc.lat for loc in locations),
            east=max(loc.lng for loc in locations),
            west=min(loc.lng for loc in locations),
        )

    @property
    def lat_range(self) -> float:
        return self.north - self.south

    @property
    def lon_range(self) -> float:
        return self.east - self.west

    @property
    def center_lat(self) -> float:
        return (self.north + self.south) / 2

    @property
    def center_lon(self) -> float:
        return (self.east + self.west) / 2


class SelectionState(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    selected: Optional[str] = None
    mode: Literal["idle", "playing"] = "idle"


class GalleryState(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    is_open: bool = False
    index: int = Field(default=0, ge=0)


class WaypointView(BaseModel):
    """One geotagged photo as the map and elevation chart see it."""
    sequence: int = Field(ge=1)
    id: str
    name: str
    lat: float
    lng: float
    alt: Optional[float] = None
    timestamp: Optional[datetime] = None
    handle: str


class PhotoView(BaseModel):
    """One entry of the flat, time-ordered photo list the gallery browses."""
    id: str
    name: str
    mime_type: str
    handle: str
    geotagged: bool
    timestamp: Optional[datetime] = None


class TrekView(BaseModel):
    """Snapshot published to every collaborator after a trek or selection change."""
    waypoints: list[WaypointView] = Field(default_factory=list)
    photos: list[PhotoView] = Field(default_factory=list)
    statistics: Optional[TrekStatistics] = None
    active_id: Optional[str] = None
    playing: bool = False
    busy: bool = False
    gallery: GalleryState = Field(default_factory=GalleryState)

    @computed_field
    @property
    def active_index(self) -> Optional[int]:
        for wp in self.waypoints:
            if wp.id == self.active_id:
                return wp.sequence - 1
        return None


class ElevationSample(BaseModel):
    id: str
    alt: float
    position: float = Field(ge=0, le=1)
    height: float = Field(ge=0, le=1)


class ElevationProfile(BaseModel):
    min_m: float
    max_m: float
    samples: list[ElevationSample] = Field(min_length=2)
