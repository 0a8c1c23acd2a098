"""Tests for selection, playback, gallery and parameter tools."""
import asyncio
from unittest.mock import MagicMock

import pytest

from trektrack.state import state


def _tools():
    from trektrack.tools.params import register_params_tools
    from trektrack.tools.selection import register_selection_tools
    tools = {}
    mock_mcp = MagicMock()
    def capture(**kwargs):
        def decorator(fn):
            tools[fn.__name__] = fn
            return fn
        return decorator
    mock_mcp.tool = capture
    register_selection_tools(mock_mcp)
    register_params_tools(mock_mcp)
    return tools


def _load(make_photo):
    state.trek.extend([
        make_photo("a", lat=0, lng=0, minutes=0, name="start.jpg"),
        make_photo("b", lat=0, lng=1, minutes=10, name="summit.jpg"),
        make_photo("x", name="nogps.jpg"),
    ])


def test_select_waypoint(make_photo):
    tools = _tools()
    _load(make_photo)
    result = tools["select_waypoint"](photo_id="b")
    assert "summit.jpg" in result
    assert "waypoint 2 of 2" in result
    assert state.controller.selection.selected == "b"


def test_select_unknown_waypoint(make_photo):
    tools = _tools()
    _load(make_photo)
    assert tools["select_waypoint"](photo_id="zzz").startswith("Error:")


def test_select_none_clears(make_photo):
    tools = _tools()
    _load(make_photo)
    tools["select_waypoint"](photo_id="a")
    assert tools["select_waypoint"]() == "No active waypoint."


@pytest.mark.anyio
async def test_playback_start_and_stop(make_photo):
    tools = _tools()
    _load(make_photo)
    tools["set_trek_params"](dwell_seconds=5)
    result = await tools["start_playback"]()
    assert "2 waypoint(s)" in result
    assert "5s each" in result
    assert "already running" in await tools["start_playback"]()

    await asyncio.sleep(0)
    result = await tools["stop_playback"]()
    assert "stopped" in result
    assert "start.jpg" in result
    await state.controller.wait_for_playback()
    assert "not running" in await tools["stop_playback"]()


@pytest.mark.anyio
async def test_playback_needs_waypoints(make_photo):
    tools = _tools()
    state.trek.add(make_photo())
    assert (await tools["start_playback"]()).startswith("Error:")


def test_fit_all(make_photo):
    tools = _tools()
    assert "No geotagged" in tools["fit_all"]()
    _load(make_photo)
    result = tools["fit_all"]()
    assert "E=1.000000" in result
    assert "W=0.000000" in result


def test_gallery_tools(make_photo):
    tools = _tools()
    _load(make_photo)
    assert tools["gallery_next"]().startswith("Error:")
    result = tools["open_gallery"](index=0)
    assert "1 of 3" in result
    assert "nogps.jpg" in result
    assert "no location" in result
    assert "start.jpg" in tools["gallery_next"]()
    assert "nogps.jpg" in tools["gallery_previous"]()
    assert tools["close_gallery"]() == "Gallery closed."
    assert state.controller.selection.selected == "x"


def test_open_gallery_errors(make_photo):
    tools = _tools()
    assert tools["open_gallery"]().startswith("Error:")
    _load(make_photo)
    assert tools["open_gallery"](index=9).startswith("Error:")


def test_set_trek_params():
    tools = _tools()
    result = tools["set_trek_params"](dwell_seconds=1.5, heic_quality=0.9)
    assert "dwell_seconds=1.5" in result
    assert state.params.heic_quality == 0.9


def test_set_trek_params_rejects_invalid():
    tools = _tools()
    assert tools["set_trek_params"](dwell_seconds=-1).startswith("Error:")
    assert state.params.dwell_seconds == 3.0
