"""Shared fixtures: photo factory and a clean global session per test."""
from datetime import datetime, timedelta, timezone

import pytest


T0 = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_photo(tmp_path):
    """Build TrekPhoto records backed by real display handles under tmp_path."""
    from trektrack.core.handles import DisplayHandle
    from trektrack.models import GPSLocation, TrekPhoto

    counter = {"n": 0}

    def _make(photo_id=None, lat=None, lng=None, alt=None, minutes=None, name=None):
        counter["n"] += 1
        n = counter["n"]
        location = None
        if lat is not None and lng is not None:
            location = GPSLocation(
                lat=lat,
                lng=lng,
                alt=alt,
                timestamp=T0 + timedelta(minutes=minutes) if minutes is not None else None,
            )
        handle = DisplayHandle.create(tmp_path / "handles", b"\xff\xd8img", "image/jpeg", ".jpg")
        return TrekPhoto(
            id=photo_id or f"p{n}",
            name=name or f"IMG_{n:04d}.jpg",
            display_handle=handle,
            inline_encoding="/9g=",
            location=location,
            mime_type="image/jpeg",
        )

    return _make


@pytest.fixture(autouse=True)
def reset_session_state():
    """The MCP tools share one global session; start every test from empty."""
    from trektrack.state import TrekParams, state

    yield
    state.controller.clear_trek()
    state.controller.map_surface = None
    state.params = TrekParams()


@pytest.fixture
def anyio_backend():
    """The code under test is built on asyncio."""
    return "asyncio"
