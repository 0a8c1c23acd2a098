"""Trek analysis tools: get_trek_stats, get_elevation_profile."""

import json

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..core.stats import elevation_profile
from ..state import state, statistics_summary


def register_trek_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def get_trek_stats() -> str:
        """Return distance, peak elevation and duration of the trek.

        Needs at least two geotagged photos; with fewer, every value is reported
        as "no data" rather than zero.
        """
        stats = state.trek.statistics
        data = {
            "waypoints": len(state.trek.waypoints),
            "display": statistics_summary(stats),
            "raw": stats.model_dump() if stats is not None else None,
        }
        return json.dumps(data, indent=2)

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def get_elevation_profile() -> str:
        """Return the altitude profile along the trek, normalized for charting.

        Each sample has the photo id, altitude in meters, position along the
        trek (0-1) and normalized height (0-1).
        """
        profile = elevation_profile(state.trek.photos)
        if profile is None:
            return "No data: fewer than two geotagged photos carry an altitude."
        return profile.model_dump_json(indent=2)
