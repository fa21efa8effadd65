"""Shared GPX fixtures."""

from __future__ import annotations

import pytest

GPX_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">\n'
)


def make_gpx(tracks=(), waypoints=()) -> str:
    """tracks: list of segments lists of (lat, lon); waypoints: (lat, lon, name, sym)."""
    parts = [GPX_HEADER]
    for lat, lon, name, sym in waypoints:
        parts.append(f'  <wpt lat="{lat}" lon="{lon}">')
        if name is not None:
            parts.append(f"<name>{name}</name>")
        if sym is not None:
            parts.append(f"<sym>{sym}</sym>")
        parts.append("</wpt>\n")
    for segments in tracks:
        parts.append("  <trk>\n")
        for segment in segments:
            parts.append("    <trkseg>\n")
            for lat, lon in segment:
                parts.append(f'      <trkpt lat="{lat}" lon="{lon}"></trkpt>\n')
            parts.append("    </trkseg>\n")
        parts.append("  </trk>\n")
    parts.append("</gpx>\n")
    return "".join(parts)


@pytest.fixture
def write_gpx(tmp_path):
    def _write(name="route.gpx", **kwargs):
        path = tmp_path / name
        path.write_text(make_gpx(**kwargs), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def turn_gpx(write_gpx):
    """Three-point track with one left turn on the middle point."""
    return write_gpx(
        tracks=[[[(0, 0), (1, 1), (2, 2)]]],
        waypoints=[(1, 1, "Turn", "left")],
    )
