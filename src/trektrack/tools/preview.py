"""Preview tool: launch/refresh the map and gallery preview."""

import webbrowser
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state
from ..preview.server import start_preview_server, update_preview


def register_preview_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False, openWorldHint=False))
    async def preview(open_browser: bool = True) -> str:
        """Open or refresh the trek preview.

        Starts a local HTTP server on localhost:3535 serving the trek view and
        photo bytes, with a WebSocket one port above pushing every selection
        change. If the preview is already running, it re-sends the current view.

        Args:
            open_browser: Open the preview URL in the default browser.
        """
        url = f"http://localhost:{state.preview_port}"
        if not state.preview_running:
            try:
                await start_preview_server(
                    state, http_port=state.preview_port, ws_port=state.preview_port + 1,
                )
            except OSError as e:
                return f"Error: Could not start preview on port {state.preview_port}: {e}"
            state.preview_running = True
            if open_browser:
                webbrowser.open(url)
            return f"Preview opened at {url}"
        else:
            await update_preview(state)
            return f"Preview updated at {url}"
