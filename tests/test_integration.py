"""End-to-end: photos on disk -> trek -> playback -> GPX file."""

import pytest
from PIL import ExifTags, Image
from PIL.TiffImagePlugin import IFDRational


def _photo(path, lat, lng, alt, when):
    exif = Image.Exif()
    exif[ExifTags.Base.Make] = "Fujifilm"
    exif[ExifTags.IFD.GPSInfo] = {
        ExifTags.GPS.GPSLatitudeRef: "N",
        ExifTags.GPS.GPSLatitude: (IFDRational(lat, 1), IFDRational(0, 1), IFDRational(0, 1)),
        ExifTags.GPS.GPSLongitudeRef: "E",
        ExifTags.GPS.GPSLongitude: (IFDRational(lng, 1), IFDRational(0, 1), IFDRational(0, 1)),
        ExifTags.GPS.GPSAltitudeRef: b"\x00",
        ExifTags.GPS.GPSAltitude: IFDRational(alt, 1),
    }
    exif[ExifTags.IFD.Exif] = {ExifTags.Base.DateTimeOriginal: when}
    Image.new("RGB", (16, 16), color=(30, 80, 160)).save(path, format="JPEG", exif=exif)
    return path


@pytest.mark.anyio
async def test_full_pipeline_ingest_playback_export(tmp_path):
    """Full pipeline: ingest -> statistics -> playback -> GPX export."""
    import gpxpy
    from trektrack.exporters.gpx import export_gpx
    from trektrack.state import state

    state.params.handle_dir = str(tmp_path / "handles")
    state.params.dwell_seconds = 0.01
    views = []
    detach = state.controller.attach(views.append)

    # Step 1: ingest out of order, plus one unreadable file
    files = [
        _photo(tmp_path / "3.jpg", 46, 8, 2100, "2024:07:14 12:00:00"),
        _photo(tmp_path / "1.jpg", 45, 7, 1200, "2024:07:14 08:00:00"),
        _photo(tmp_path / "2.jpg", 45, 8, 1800, "2024:07:14 10:00:00"),
    ]
    bogus = tmp_path / "bogus.jpg"
    bogus.write_bytes(b"definitely not a jpeg")
    added = await state.ingest(files + [bogus])
    assert len(added) == 3
    assert [p.name for p in state.trek.waypoints] == ["1.jpg", "2.jpg", "3.jpg"]
    assert all(p.camera.make == "Fujifilm" for p in added)

    # Step 2: statistics
    stats = state.trek.statistics
    assert stats.peak_elevation_m == 2100
    assert stats.duration_minutes == 240
    assert stats.total_distance_km > 150

    # Step 3: playback visits every waypoint
    assert state.controller.start_playback()
    await state.controller.wait_for_playback()
    visited = []
    for v in views:
        if v.playing and v.active_id and v.active_id not in visited:
            visited.append(v.active_id)
    assert visited == [p.id for p in state.trek.waypoints]

    # Step 4: export
    out = export_gpx(state.trek.photos, tmp_path / "trek.gpx")
    parsed = gpxpy.parse(out.read_text(encoding="utf-8"))
    points = parsed.tracks[0].segments[0].points
    assert [p.name for p in points] == ["1.jpg", "2.jpg", "3.jpg"]
    assert [p.elevation for p in points] == [1200, 1800, 2100]

    detach()
