"""Export tool: export_gpx."""

import logging
import os
from pathlib import Path
from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state
from ..exporters.gpx import default_filename, export_gpx as do_export_gpx
from ._prereqs import require_state

logger = logging.getLogger(__name__)


def _validate_output_path(output_path: str) -> None:
    """Raise ValueError if output_path resolves outside the user's home directory."""
    resolved = Path(output_path).resolve()
    home = Path.home().resolve()
    try:
        resolved.relative_to(home)
    except ValueError:
        raise ValueError(
            f"Output path {output_path!r} is outside the home directory. "
            "Use a path within your home directory."
        )


def register_export_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def export_gpx(output_path: Optional[str] = None) -> str:
        """Export the trek as a GPX 1.1 track, one point per geotagged photo in time order.

        Photos without a location are left out.

        Args:
            output_path: Where to save the .gpx file (absolute path). Defaults to
                trek_route_<date>.gpx in the home directory.
        """
        try:
            require_state(state, waypoints=True)
        except ValueError as e:
            return f"Error: {e}"

        if output_path is None:
            output_path = str(Path.home() / default_filename())

        try:
            _validate_output_path(output_path)
        except ValueError as e:
            return f"Error: {e}"

        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
        written = do_export_gpx(state.trek.photos, output_path)
        if written is None:
            return "Error: No geotagged waypoints to export."
        logger.info("Exported %d waypoint(s) to %s", len(state.trek.waypoints), written)
        return f"GPX exported to {written} ({len(state.trek.waypoints)} waypoints)"
