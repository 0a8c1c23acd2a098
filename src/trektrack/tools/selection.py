"""Selection tools: select_waypoint, start/stop_playback, fit_all and gallery navigation."""

from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state
from ._prereqs import require_state


def _describe_active() -> str:
    controller = state.controller
    photo_id = controller.selection.selected
    if photo_id is None:
        return "No active waypoint."
    photo = state.trek.get(photo_id)
    sequence = next(
        (i for i, p in enumerate(state.trek.waypoints, 1) if p.id == photo_id), None,
    )
    where = f"waypoint {sequence} of {len(state.trek.waypoints)}" if sequence else "no location"
    return f"Active: {photo.name} ({photo_id}, {where})."


def register_selection_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def select_waypoint(photo_id: Optional[str] = None) -> str:
        """Make a photo the active waypoint on the map, chart and gallery.

        Works during playback too. Omit photo_id to clear the selection.

        Args:
            photo_id: Id from list_photos, or None to clear.
        """
        if not state.controller.select(photo_id):
            return f"Error: No photo with id {photo_id!r}."
        return _describe_active()

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    async def start_playback() -> str:
        """Walk the trek: select each waypoint in time order, pausing on each.

        The pause per waypoint is dwell_seconds (see set_trek_params).
        **Next:** stop_playback to end early.
        """
        try:
            require_state(state, waypoints=True)
        except ValueError as e:
            return f"Error: {e}"
        if not state.controller.start_playback():
            return "Playback is already running."
        return (
            f"Playback started over {len(state.trek.waypoints)} waypoint(s), "
            f"{state.params.dwell_seconds:g}s each."
        )

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    async def stop_playback() -> str:
        """Stop playback, keeping the current waypoint active."""
        if not state.controller.stop_playback():
            return "Playback is not running."
        return f"Playback stopped. {_describe_active()}"

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def fit_all() -> str:
        """Frame every geotagged waypoint on the map."""
        bounds = state.controller.fit_all()
        if bounds is None:
            return "No geotagged waypoints to frame."
        return (
            f"Framing N={bounds.north:.6f}, S={bounds.south:.6f}, "
            f"E={bounds.east:.6f}, W={bounds.west:.6f}"
        )

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def open_gallery(index: Optional[int] = None, photo_id: Optional[str] = None) -> str:
        """Open the full-screen gallery and make the shown photo active.

        Args:
            index: 0-based position in trek order.
            photo_id: Open at this photo instead of an index.
        """
        try:
            require_state(state, photos=True)
        except ValueError as e:
            return f"Error: {e}"
        if not state.controller.open_gallery(index=index, photo_id=photo_id):
            return "Error: No such photo in the trek."
        return f"Gallery open at {state.controller.gallery.index + 1} of {len(state.trek)}. {_describe_active()}"

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def gallery_next() -> str:
        """Show the next photo in the gallery (wraps around)."""
        if not state.controller.gallery_next():
            return "Error: The gallery is not open."
        return _describe_active()

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def gallery_previous() -> str:
        """Show the previous photo in the gallery (wraps around)."""
        if not state.controller.gallery_previous():
            return "Error: The gallery is not open."
        return _describe_active()

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def close_gallery() -> str:
        """Close the gallery. The active waypoint stays selected."""
        if not state.controller.close_gallery():
            return "The gallery is not open."
        return "Gallery closed."
