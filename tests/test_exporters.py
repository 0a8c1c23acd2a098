"""Tests for the GPX exporter."""
from datetime import date

import gpxpy


def _trek(make_photo):
    return [
        make_photo("b", lat=10.2, lng=20.7, alt=175.5, minutes=30, name="IMG_0002.jpg"),
        make_photo("a", lat=10.123456, lng=20.654321, alt=150.0, minutes=0, name="Trail & Ridge.jpg"),
        make_photo("x", name="no-gps.jpg"),
    ]


class TestBuildGpx:
    def test_no_waypoints_no_document(self, make_photo):
        from trektrack.exporters.gpx import build_gpx, to_track_document
        assert build_gpx([]) is None
        assert to_track_document([make_photo()]) is None

    def test_one_track_one_segment_in_time_order(self, make_photo):
        from trektrack.exporters.gpx import build_gpx
        gpx = build_gpx(_trek(make_photo), day=date(2024, 5, 1))
        assert gpx.creator == "TrekTrack"
        assert gpx.name == "Expedition Export 2024-05-01"
        assert len(gpx.tracks) == 1
        assert gpx.tracks[0].name == "Digital Trail"
        assert len(gpx.tracks[0].segments) == 1
        points = gpx.tracks[0].segments[0].points
        assert [p.name for p in points] == ["Trail & Ridge.jpg", "IMG_0002.jpg"]

    def test_single_waypoint_exports(self, make_photo):
        from trektrack.exporters.gpx import build_gpx
        gpx = build_gpx([make_photo(lat=1.0, lng=2.0)])
        assert len(gpx.tracks[0].segments[0].points) == 1


class TestTrackDocument:
    def test_point_serialization(self, make_photo):
        from trektrack.exporters.gpx import to_track_document
        xml = to_track_document(_trek(make_photo), day=date(2024, 5, 1))
        assert 'version="1.1"' in xml
        assert 'creator="TrekTrack"' in xml
        assert 'lat="10.123456"' in xml
        assert 'lon="20.654321"' in xml
        assert "<ele>150</ele>" in xml
        assert "<ele>175.5</ele>" in xml
        assert "<time>2024-05-01T10:00:00Z</time>" in xml
        assert "Trail &amp; Ridge.jpg" in xml
        assert "no-gps.jpg" not in xml

    def test_zero_altitude_is_written(self, make_photo):
        from trektrack.exporters.gpx import to_track_document
        xml = to_track_document([make_photo(lat=0.5, lng=0.5, alt=0.0, minutes=0)])
        assert "<ele>0</ele>" in xml

    def test_missing_altitude_and_time_omitted(self, make_photo):
        from trektrack.exporters.gpx import to_track_document
        xml = to_track_document([make_photo(lat=0.5, lng=0.5)])
        assert "<ele>" not in xml
        assert "<time>" not in xml

    def test_parses_back(self, make_photo):
        from trektrack.exporters.gpx import to_track_document
        parsed = gpxpy.parse(to_track_document(_trek(make_photo)))
        points = parsed.tracks[0].segments[0].points
        assert [(p.latitude, p.longitude) for p in points] == [(10.123456, 20.654321), (10.2, 20.7)]


class TestExportGpx:
    def test_writes_utf8_file(self, tmp_path, make_photo):
        from trektrack.exporters.gpx import export_gpx
        out = tmp_path / "trek.gpx"
        assert export_gpx(_trek(make_photo), out) == out
        assert out.read_text(encoding="utf-8").startswith("<?xml")

    def test_nothing_written_without_waypoints(self, tmp_path, make_photo):
        from trektrack.exporters.gpx import export_gpx
        out = tmp_path / "trek.gpx"
        assert export_gpx([make_photo()], out) is None
        assert not out.exists()

    def test_default_filename(self):
        from trektrack.exporters.gpx import default_filename
        assert default_filename(date(2024, 5, 1)) == "trek_route_2024-05-01.gpx"
