"""Prerequisite checking helpers for MCP tools."""


def require_state(state, *, photos: bool = False, waypoints: bool = False) -> None:
    """Raise ValueError with a descriptive message if required state is not set.

    Usage in a tool:
        try:
            require_state(state, waypoints=True)
        except ValueError as e:
            return f"Error: {e}"
    """
    if photos and len(state.trek) == 0:
        raise ValueError(
            "The trek is empty. Add photos first with ingest_photos."
        )
    if waypoints and not state.trek.waypoints:
        raise ValueError(
            "No geotagged photos in the trek. Ingest photos that carry GPS EXIF data with ingest_photos."
        )
