"""HTTP + WebSocket preview surface for map and gallery clients.

HTTP serves the latest trek view as JSON and the bytes behind display
handles. The WebSocket pushes every published view and fit request, and
accepts marker activations and gallery navigation from clients.
"""

import asyncio
import json
import logging
from http.server import BaseHTTPRequestHandler, HTTPServer
from threading import Thread

import websockets

from ..core.handles import DisplayHandle
from ..models import Bounds, TrekView

logger = logging.getLogger(__name__)

_ws_clients: set = set()
_http_server: HTTPServer | None = None
_ws_server = None
_session = None

# Written on the event loop, read by the HTTP thread
_latest_view: str = "{}"
_handles: dict[str, DisplayHandle] = {}

FIT_PADDING_PX = 100


class PreviewHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        if self.path in ("/", "/view.json"):
            self._send(200, "application/json", _latest_view.encode("utf-8"))
        elif self.path.startswith("/photos/"):
            handle = _handles.get(self.path[len("/photos/"):])
            try:
                body = handle.read_bytes() if handle is not None else None
            except (OSError, ValueError):
                body = None
            if body is None:
                self._send(404, "text/plain", b"Not found")
            else:
                self._send(200, handle.mime_type, body)
        else:
            self._send(404, "text/plain", b"Not found")

    def _send(self, status: int, content_type: str, body: bytes) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass  # Suppress HTTP logs


def _view_message(view: TrekView) -> str:
    return json.dumps({"type": "view", "view": json.loads(view.model_dump_json())})


async def _broadcast(message: str) -> None:
    await asyncio.gather(
        *[client.send(message) for client in list(_ws_clients)],
        return_exceptions=True,
    )


def _broadcast_soon(message: str) -> None:
    if not _ws_clients:
        return
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return
    loop.create_task(_broadcast(message))


class PreviewSurface:
    """Map surface backed by the preview server's connected clients."""

    def __init__(self, session):
        self.session = session

    def render(self, view: TrekView) -> None:
        global _latest_view, _handles
        _latest_view = view.model_dump_json()
        _handles = {p.display_handle.token: p.display_handle for p in self.session.trek.photos}
        _broadcast_soon(_view_message(view))

    def fit_bounds(self, bounds: Bounds) -> None:
        _broadcast_soon(json.dumps({
            "type": "fit",
            "bounds": bounds.model_dump(),
            "padding": [FIT_PADDING_PX, FIT_PADDING_PX],
        }))


def handle_client_message(controller, raw: str | bytes) -> bool:
    """Apply one client message to the controller. Returns whether it took effect."""
    try:
        message = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.debug("Ignoring malformed preview message: %r", raw)
        return False
    if not isinstance(message, dict):
        return False

    kind = message.get("type")
    photo_id = message.get("id")
    if photo_id is not None and not isinstance(photo_id, str):
        return False

    if kind == "select":
        return controller.select(photo_id)
    if kind == "open_gallery":
        return controller.open_gallery(photo_id=photo_id)

    actions = {
        "gallery_next": controller.gallery_next,
        "gallery_previous": controller.gallery_previous,
        "close_gallery": controller.close_gallery,
        "start_playback": controller.start_playback,
        "stop_playback": controller.stop_playback,
    }
    action = actions.get(kind)
    if action is None:
        if kind == "fit_all":
            return controller.fit_all() is not None
        logger.debug("Unknown preview message type %r", kind)
        return False
    return action()


async def _ws_handler(websocket):
    _ws_clients.add(websocket)
    try:
        await websocket.send(json.dumps({"type": "view", "view": json.loads(_latest_view)}))
        async for message in websocket:
            if _session is not None:
                handle_client_message(_session.controller, message)
    finally:
        _ws_clients.discard(websocket)


async def start_preview_server(session, http_port: int = 3535, ws_port: int = 3536):
    """Start the HTTP and WebSocket servers and attach them as the session's map surface."""
    global _http_server, _ws_server, _session
    _session = session

    surface = PreviewSurface(session)
    session.controller.map_surface = surface

    # Start HTTP server in a thread
    _http_server = HTTPServer(("localhost", http_port), PreviewHandler)
    http_thread = Thread(target=_http_server.serve_forever, daemon=True)
    http_thread.start()

    _ws_server = await websockets.serve(_ws_handler, "localhost", ws_port)

    surface.render(session.controller.view())


async def update_preview(session):
    """Send the current trek view to all connected WebSocket clients."""
    if not _ws_clients:
        return
    await _broadcast(_view_message(session.controller.view()))
