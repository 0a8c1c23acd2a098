"""Session state for the TrekTrack MCP server.

Holds all data for the current trek: the photo collection with its derived
views, the selection controller, tunable parameters and preview status.
Nothing here outlives the process.
"""

import tempfile
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from trektrack.core.collection import TrekCollection
from trektrack.core.ingest import ingest_files
from trektrack.core.selection import SelectionController
from trektrack.models import RawFile, TrekPhoto, TrekStatistics


class TrekParams(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    dwell_seconds: float = Field(default=3.0, gt=0, le=600)
    heic_quality: float = Field(default=0.6, gt=0, le=1)
    handle_dir: Optional[str] = None


def statistics_summary(stats: Optional[TrekStatistics]) -> dict:
    """Display form of the trek statistics; absent values read "no data", never 0."""
    if stats is None:
        return {"available": False, "distance": "no data", "peak_elevation": "no data", "duration": "no data"}
    return {
        "available": True,
        "distance": f"{stats.total_distance_km:.2f} km",
        "peak_elevation": (
            f"{round(stats.peak_elevation_m)} m" if stats.peak_elevation_m is not None else "no data"
        ),
        "duration": (
            f"{stats.duration_minutes} min" if stats.duration_minutes is not None else "no data"
        ),
    }


class SessionState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    params: TrekParams = Field(default_factory=TrekParams)
    trek: TrekCollection = Field(default_factory=TrekCollection)
    preview_port: int = Field(default=3535, gt=0, le=65534)
    preview_running: bool = False

    _controller: Optional[SelectionController] = PrivateAttr(default=None)
    _handle_dir: Optional[Path] = PrivateAttr(default=None)

    @property
    def controller(self) -> SelectionController:
        if self._controller is None:
            self._controller = SelectionController(
                self.trek, dwell_seconds=lambda: self.params.dwell_seconds,
            )
        return self._controller

    def handle_directory(self) -> Path:
        """Where display-handle bytes live; a fresh temp dir unless configured."""
        if self.params.handle_dir:
            return Path(self.params.handle_dir)
        if self._handle_dir is None:
            self._handle_dir = Path(tempfile.mkdtemp(prefix="trektrack-"))
        return self._handle_dir

    async def ingest(self, files: Iterable[RawFile | str | Path]) -> list[TrekPhoto]:
        controller = self.controller
        return await ingest_files(
            files,
            self.trek,
            handle_dir=self.handle_directory(),
            quality=self.params.heic_quality,
            on_busy=controller.set_busy,
        )

    def summary(self) -> dict:
        controller = self.controller
        photos = self.trek.photos
        return {
            "trek": {
                "photos": len(photos),
                "waypoints": len(self.trek.waypoints),
                "without_location": sum(1 for p in photos if p.location is None),
                "busy": controller.busy,
            },
            "statistics": statistics_summary(self.trek.statistics),
            "selection": {
                "selected": controller.selection.selected,
                "mode": controller.selection.mode,
            },
            "gallery": {
                "open": controller.gallery.is_open,
                "index": controller.gallery.index,
            },
            "params": {
                "dwell_seconds": self.params.dwell_seconds,
                "heic_quality": self.params.heic_quality,
            },
            "preview": {
                "running": self.preview_running,
                "port": self.preview_port,
            },
        }


# Global session state, one per MCP server process
state = SessionState()
