"""The trek collection: session-owned photos plus their derived trek views."""

import logging
from typing import Callable, Iterable, Iterator, Optional

from trektrack.core.stats import compute_statistics, order_photos
from trektrack.models import TrekPhoto, TrekStatistics

logger = logging.getLogger(__name__)

Listener = Callable[["TrekCollection"], None]


class TrekCollection:
    """Insertion-ordered photos, owning each photo's display handle.

    Every mutation recomputes the ordered views and statistics before any
    listener runs, so readers never see a photo list without its derived
    state. Removing or clearing releases the affected display handles.
    """

    def __init__(self, photos: Iterable[TrekPhoto] = ()):
        self._photos: list[TrekPhoto] = []
        self._listeners: list[Listener] = []
        self._ordered: tuple[TrekPhoto, ...] = ()
        self._waypoints: tuple[TrekPhoto, ...] = ()
        self._statistics: Optional[TrekStatistics] = None
        self._append(list(photos))
        self._recompute()

    def __len__(self) -> int:
        return len(self._photos)

    def __iter__(self) -> Iterator[TrekPhoto]:
        return iter(tuple(self._photos))

    def __contains__(self, photo_id: object) -> bool:
        return any(p.id == photo_id for p in self._photos)

    def get(self, photo_id: str) -> Optional[TrekPhoto]:
        for p in self._photos:
            if p.id == photo_id:
                return p
        return None

    @property
    def photos(self) -> tuple[TrekPhoto, ...]:
        """All photos in insertion order."""
        return tuple(self._photos)

    @property
    def ordered_photos(self) -> tuple[TrekPhoto, ...]:
        """All photos in trek order, geotagged or not."""
        return self._ordered

    @property
    def waypoints(self) -> tuple[TrekPhoto, ...]:
        """Geotagged photos in trek order."""
        return self._waypoints

    @property
    def statistics(self) -> Optional[TrekStatistics]:
        return self._statistics

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(collection)`` after every mutation. Returns an unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def add(self, photo: TrekPhoto) -> None:
        self.extend([photo])

    def extend(self, photos: Iterable[TrekPhoto]) -> None:
        """Append a batch as one transition: one recompute, one notification."""
        self._append(list(photos))
        self._changed()

    def remove(self, photo_id: str) -> bool:
        photo = self.get(photo_id)
        if photo is None:
            return False
        self._photos.remove(photo)
        photo.display_handle.release()
        self._changed()
        return True

    def clear(self) -> int:
        """Drop every photo and release every display handle."""
        removed, self._photos = self._photos, []
        for photo in removed:
            photo.display_handle.release()
        self._changed()
        return len(removed)

    def _append(self, batch: list[TrekPhoto]) -> None:
        seen = {p.id for p in self._photos}
        for photo in batch:
            if photo.id in seen:
                raise ValueError(f"Photo id {photo.id!r} is already in the trek")
            seen.add(photo.id)
        self._photos.extend(batch)

    def _recompute(self) -> None:
        self._ordered = order_photos(self._photos)
        self._waypoints = tuple(p for p in self._ordered if p.location is not None)
        self._statistics = compute_statistics(self._waypoints)

    def _changed(self) -> None:
        self._recompute()
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.warning("Trek listener %r failed", listener, exc_info=True)
