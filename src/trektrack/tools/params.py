"""Parameter tool: set_trek_params."""

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state


def register_params_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def set_trek_params(
        dwell_seconds: float | None = None,
        heic_quality: float | None = None,
    ) -> str:
        """Set playback and ingestion parameters.

        dwell_seconds applies from the next waypoint of a running playback.
        heic_quality applies to photos ingested afterwards.

        Args:
            dwell_seconds: Pause on each waypoint during playback (default 3).
            heic_quality: JPEG quality for converted HEIC/HEIF photos, 0-1 (default 0.6).
        """
        p = state.params
        try:
            if dwell_seconds is not None:
                p.dwell_seconds = dwell_seconds
            if heic_quality is not None:
                p.heic_quality = heic_quality
        except Exception as e:
            return f"Error: {e}"

        return f"Trek params: dwell_seconds={p.dwell_seconds:g}, heic_quality={p.heic_quality:g}"
