"""Photo tools: ingest_photos, list_photos, remove_photo, clear_trek."""

import json
import logging
from pathlib import Path

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state, statistics_summary
from ._prereqs import require_state

logger = logging.getLogger(__name__)


def register_photo_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    async def ingest_photos(paths: list[str]) -> str:
        """Add photos to the trek, reading GPS and camera EXIF data from each.

        Files are processed concurrently. HEIC/HEIF photos are converted to JPEG
        for display. A file that cannot be read is skipped; the rest still load.
        **Next:** get_trek_stats, fit_all, start_playback or export_gpx.

        Args:
            paths: Absolute paths to image files (JPEG, PNG, HEIC, HEIF, ...).
        """
        if not paths:
            return "Error: Provide at least one image path."

        added = await state.ingest([Path(p).expanduser() for p in paths])
        dropped = len(paths) - len(added)
        geotagged = sum(1 for p in added if p.location is not None)
        stats = statistics_summary(state.trek.statistics)

        return (
            f"Ingested {len(added)} of {len(paths)} photo(s): {geotagged} geotagged, "
            f"{len(added) - geotagged} without location, {dropped} skipped. "
            f"Trek now has {len(state.trek.waypoints)} waypoint(s); distance {stats['distance']}."
        )

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def list_photos() -> str:
        """List every photo in trek order with its waypoint number, location and camera.

        Photos without a GPS fix are listed with waypoint null.
        """
        sequence = {p.id: i for i, p in enumerate(state.trek.waypoints, 1)}
        active = state.controller.selection.selected
        entries = []
        for p in state.trek.ordered_photos:
            loc = p.location
            entries.append({
                "id": p.id,
                "name": p.name,
                "mime_type": p.mime_type,
                "waypoint": sequence.get(p.id),
                "active": p.id == active,
                "lat": loc.lat if loc else None,
                "lng": loc.lng if loc else None,
                "alt": loc.alt if loc else None,
                "timestamp": loc.timestamp.isoformat() if loc and loc.timestamp else None,
                "camera": p.camera.model_dump(exclude_none=True) if p.camera else {},
            })
        return json.dumps(entries, indent=2)

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True))
    def remove_photo(photo_id: str) -> str:
        """Remove one photo from the trek and release its display bytes.

        Args:
            photo_id: Id from list_photos.
        """
        if not state.controller.remove_photo(photo_id):
            return f"Error: No photo with id {photo_id!r}."
        return f"Removed {photo_id}. Trek now has {len(state.trek)} photo(s)."

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True))
    def clear_trek(confirm: bool = False) -> str:
        """Permanently discard every photo, the selection and playback.

        Ask the user before calling with confirm=True.

        Args:
            confirm: Must be True to actually clear.
        """
        try:
            require_state(state, photos=True)
        except ValueError as e:
            return f"Error: {e}"
        if not confirm:
            return "Error: clear_trek wipes all waypoints. Call again with confirm=True once the user agrees."

        count = state.controller.clear_trek()
        logger.info("Cleared %d photo(s) from the trek", count)
        return f"Cleared {count} photo(s). The trek is empty."
