"""Ingestion pipeline: raw image files in, TrekPhoto records appended as one batch."""

import asyncio
import logging
import uuid
from pathlib import Path
from typing import Callable, Iterable, Optional

from trektrack.core.assets import DEFAULT_QUALITY, normalize
from trektrack.core.collection import TrekCollection
from trektrack.core.exif import extract_camera, extract_location
from trektrack.models import CameraMetadata, GPSLocation, NormalizedAsset, RawFile, TrekPhoto

logger = logging.getLogger(__name__)

Outcome = tuple[Optional[GPSLocation], CameraMetadata, NormalizedAsset]


def _new_id(taken: set[str]) -> str:
    while True:
        candidate = uuid.uuid4().hex[:9]
        if candidate not in taken:
            taken.add(candidate)
            return candidate


async def _process_file(file: RawFile, handle_dir: Path, quality: float) -> Optional[Outcome]:
    """Extract and normalize one file. Returns None if any step failed."""
    results = await asyncio.gather(
        extract_location(file),
        extract_camera(file),
        normalize(file, handle_dir, quality),
        return_exceptions=True,
    )
    location, camera, asset = results
    failures = [r for r in results if isinstance(r, BaseException)]
    if failures:
        # a sibling step failed after normalize produced a handle
        if isinstance(asset, NormalizedAsset):
            asset.display_handle.release()
        logger.warning("Failed to process asset %s: %s", file.name, failures[0])
        return None
    return location, camera, asset


async def ingest_files(
    files: Iterable[RawFile | str | Path],
    trek: TrekCollection,
    *,
    handle_dir: Path,
    quality: float = DEFAULT_QUALITY,
    on_busy: Optional[Callable[[bool], None]] = None,
) -> list[TrekPhoto]:
    """Process every file concurrently and append the successes to ``trek``.

    A file that fails is dropped without affecting its siblings. The
    collection changes exactly once per call, after every file has finished.
    ``on_busy`` brackets the whole batch.

    Returns the photos that were added.
    """
    batch = [f if isinstance(f, RawFile) else RawFile.from_path(f) for f in files]
    if not batch:
        return []

    if on_busy:
        on_busy(True)
    try:
        outcomes = await asyncio.gather(
            *(_process_file(f, handle_dir, quality) for f in batch)
        )

        taken = {p.id for p in trek}
        photos = []
        for file, outcome in zip(batch, outcomes):
            if outcome is None:
                continue
            location, camera, asset = outcome
            photos.append(TrekPhoto(
                id=_new_id(taken),
                name=file.name,
                display_handle=asset.display_handle,
                inline_encoding=asset.inline_encoding,
                location=location,
                camera=camera,
                mime_type=asset.mime_type,
            ))

        trek.extend(photos)
    finally:
        if on_busy:
            on_busy(False)

    dropped = len(batch) - len(photos)
    if dropped:
        logger.info("Ingested %d of %d file(s); %d dropped", len(photos), len(batch), dropped)
    else:
        logger.info("Ingested %d file(s)", len(photos))
    return photos
