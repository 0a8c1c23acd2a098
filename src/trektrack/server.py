"""MCP server for TrekTrack.

Registers all tools and runs via stdio transport.
"""

import logging
import os
import sys

from mcp.server.fastmcp import FastMCP

from .tools.photos import register_photo_tools
from .tools.trek import register_trek_tools
from .tools.selection import register_selection_tools
from .tools.params import register_params_tools
from .tools.preview import register_preview_tools
from .tools.export import register_export_tools
from .tools.status import register_status_tools

mcp = FastMCP(
    "trektrack",
    instructions=(
        "Reconstruct a walking route from geotagged photos: ingest photos, "
        "inspect distance, peak elevation and duration, replay the trek "
        "waypoint by waypoint, and export it as a GPX track"
    ),
)

# Register all tool groups
register_photo_tools(mcp)
register_trek_tools(mcp)
register_selection_tools(mcp)
register_params_tools(mcp)
register_preview_tools(mcp)
register_export_tools(mcp)
register_status_tools(mcp)


def configure_logging() -> None:
    # stdout carries the MCP protocol
    level = os.environ.get("TREKTRACK_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    configure_logging()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
