"""Selection and playback: the one active waypoint every surface agrees on.

The controller is the only writer of SelectionState. Map marker clicks,
gallery navigation, elevation-chart hovers and autonomous playback all go
through ``select()``, and every change is published to every observer as the
same TrekView.
"""

import asyncio
import logging
from typing import Callable, Optional, Protocol

from trektrack.core.collection import TrekCollection
from trektrack.models import Bounds, GalleryState, PhotoView, SelectionState, TrekView, WaypointView

logger = logging.getLogger(__name__)

DEFAULT_DWELL_SECONDS = 3.0

Observer = Callable[[TrekView], None]


class MapSurface(Protocol):
    """What the controller needs from a map: draw a view, frame some bounds."""

    def render(self, view: TrekView) -> None: ...

    def fit_bounds(self, bounds: Bounds) -> None: ...


class CancellationToken:
    """Cooperative stop flag for one playback run."""

    def __init__(self):
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self, timeout: float) -> bool:
        """Sleep for up to ``timeout`` seconds. Returns True if cancelled meanwhile."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True


class SelectionController:
    def __init__(
        self,
        trek: TrekCollection,
        *,
        dwell_seconds: float | Callable[[], float] = DEFAULT_DWELL_SECONDS,
        map_surface: Optional[MapSurface] = None,
    ):
        self.trek = trek
        self.selection = SelectionState()
        self.gallery = GalleryState()
        self.map_surface = map_surface
        self._dwell_seconds = dwell_seconds
        self._observers: list[Observer] = []
        self._busy_batches = 0
        self._token: Optional[CancellationToken] = None
        self._playback_task: Optional[asyncio.Task] = None
        trek.subscribe(self._on_trek_changed)

    # -- publication -------------------------------------------------------

    def attach(self, observer: Observer) -> Callable[[], None]:
        """Register a surface callback. Returns a detach function."""
        self._observers.append(observer)

        def detach() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return detach

    @property
    def is_playing(self) -> bool:
        return self.selection.mode == "playing"

    @property
    def busy(self) -> bool:
        return self._busy_batches > 0

    def view(self) -> TrekView:
        waypoints = [
            WaypointView(
                sequence=i,
                id=p.id,
                name=p.name,
                lat=p.location.lat,
                lng=p.location.lng,
                alt=p.location.alt,
                timestamp=p.location.timestamp,
                handle=p.display_handle.token,
            )
            for i, p in enumerate(self.trek.waypoints, 1)
        ]
        photos = [
            PhotoView(
                id=p.id,
                name=p.name,
                mime_type=p.mime_type,
                handle=p.display_handle.token,
                geotagged=p.location is not None,
                timestamp=p.location.timestamp if p.location else None,
            )
            for p in self.trek.ordered_photos
        ]
        return TrekView(
            waypoints=waypoints,
            photos=photos,
            statistics=self.trek.statistics,
            active_id=self.selection.selected,
            playing=self.is_playing,
            busy=self.busy,
            gallery=self.gallery.model_copy(),
        )

    def publish(self) -> TrekView:
        view = self.view()
        targets = list(self._observers)
        if self.map_surface is not None:
            targets.insert(0, self.map_surface.render)
        for observer in targets:
            try:
                observer(view)
            except Exception:
                logger.warning("Surface %r failed to render trek view", observer, exc_info=True)
        return view

    def set_busy(self, busy: bool) -> None:
        was_busy = self.busy
        self._busy_batches = self._busy_batches + 1 if busy else max(0, self._busy_batches - 1)
        if self.busy != was_busy:
            self.publish()

    # -- selection ---------------------------------------------------------

    def select(self, photo_id: Optional[str]) -> bool:
        """Make ``photo_id`` the active photo, or clear the selection with None.

        Unknown ids are ignored. Works the same while idle or playing.
        """
        if photo_id is not None and photo_id not in self.trek:
            logger.debug("Ignoring selection of unknown photo %s", photo_id)
            return False
        self.selection.selected = photo_id
        self.publish()
        return True

    def fit_all(self) -> Optional[Bounds]:
        """Ask the map to frame every waypoint. Returns the bounds requested."""
        waypoints = self.trek.waypoints
        if not waypoints:
            return None
        bounds = Bounds.around([p.location for p in waypoints])
        if self.map_surface is not None:
            self.map_surface.fit_bounds(bounds)
        return bounds

    # -- playback ----------------------------------------------------------

    def _dwell(self) -> float:
        value = self._dwell_seconds
        return float(value() if callable(value) else value)

    def start_playback(self) -> bool:
        """Walk the waypoints in trek order, one dwell each. No-op unless idle."""
        if self.is_playing:
            return False
        ids = [p.id for p in self.trek.waypoints]
        if not ids:
            return False
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Playback needs a running event loop; not starting")
            return False

        token = CancellationToken()
        self._token = token
        self.selection.mode = "playing"
        self.publish()
        self._playback_task = loop.create_task(self._walk(ids, token))
        return True

    def stop_playback(self) -> bool:
        """Cancel the running walk, keeping the current selection. No-op unless playing."""
        if not self.is_playing:
            return False
        if self._token is not None:
            self._token.cancel()
            self._token = None
        self.selection.mode = "idle"
        self.publish()
        return True

    async def wait_for_playback(self) -> None:
        task = self._playback_task
        if task is not None:
            await task

    async def _walk(self, ids: list[str], token: CancellationToken) -> None:
        try:
            for photo_id in ids:
                if token.cancelled:
                    break
                self.select(photo_id)
                if await token.wait(self._dwell()):
                    break
        finally:
            if self._token is token:
                self._token = None
                self._playback_task = None
                self.selection.mode = "idle"
                self.publish()

    # -- gallery -----------------------------------------------------------

    def open_gallery(self, index: Optional[int] = None, photo_id: Optional[str] = None) -> bool:
        """Open the gallery at an index or a photo, and make that photo active.

        Without either, opens at the active photo, else where it was last left.
        """
        photos = self.trek.ordered_photos
        if not photos:
            return False
        ids = [p.id for p in photos]

        if photo_id is not None:
            if photo_id not in ids:
                return False
            index = ids.index(photo_id)
        elif index is None:
            if self.selection.selected in ids:
                index = ids.index(self.selection.selected)
            else:
                index = min(self.gallery.index, len(ids) - 1)
        elif not 0 <= index < len(ids):
            return False

        self.gallery.index = index
        self.gallery.is_open = True
        return self.select(ids[index])

    def gallery_next(self) -> bool:
        return self._step_gallery(1)

    def gallery_previous(self) -> bool:
        return self._step_gallery(-1)

    def _step_gallery(self, step: int) -> bool:
        photos = self.trek.ordered_photos
        if not self.gallery.is_open or not photos:
            return False
        self.gallery.index = (self.gallery.index + step) % len(photos)
        return self.select(photos[self.gallery.index].id)

    def close_gallery(self) -> bool:
        if not self.gallery.is_open:
            return False
        self.gallery.is_open = False
        self.publish()
        return True

    # -- collection --------------------------------------------------------

    def remove_photo(self, photo_id: str) -> bool:
        return self.trek.remove(photo_id)

    def clear_trek(self) -> int:
        """Empty the trek, release every handle, and reset selection and gallery."""
        if self._token is not None:
            self._token.cancel()
            self._token = None
        self.selection.mode = "idle"
        self.selection.selected = None
        self.gallery = GalleryState()
        return self.trek.clear()

    def _on_trek_changed(self, trek: TrekCollection) -> None:
        if self.selection.selected is not None and self.selection.selected not in trek:
            self.selection.selected = None
        count = len(trek.ordered_photos)
        if count == 0:
            self.gallery = GalleryState()
        elif self.gallery.index >= count:
            self.gallery.index = count - 1
        self.publish()
