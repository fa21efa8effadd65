"""
GpyBryton — Bryton Navigation File Readers & Writers

A Bryton device navigates with three files sharing one base name:
  .smy    summary (point count, bounding box, total distance)
  .track  track points, 16 bytes each
  .tinfo  turn instructions, 44 bytes each

All layouts are little-endian. The summary starts with an init flag of 0x0001.
GPX input is parsed with gpxpy.
"""

from __future__ import annotations
import logging
import os
import struct
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import gpxpy
import gpxpy.gpx

from .errors import IOFailure, ParseFailure
from .models import (
    DESCRIPTION_LEN, DirectionCode, ExportBundle, GeoPoint, SummaryRecord,
    TrackPointSequence, Waypoint, direction_code_from_marker,
    encode_coordinate, wrap_int,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────

SOFT_NAME = "GpyBryton"
SOFT_VERSION = "1.0"
SOFT_FULL_NAME = f"{SOFT_NAME} v{SOFT_VERSION}"

BRYTON_DEFAULTS = {
    "encoding": "utf-8",
}


def adjust_filename(name: PathLike, extension: str) -> str:
    """Replace everything after the first period of the file name with `extension`."""
    head, tail = os.path.split(os.fspath(name))
    return os.path.join(head, tail.split(".")[0] + extension)


def _current_umask() -> int:
    old = os.umask(0)
    os.umask(old)
    return old


def store_to_file(data: bytes, filepath: str) -> int:
    """Write `data` to `filepath` all-or-nothing. Returns the byte count."""
    directory = os.path.dirname(os.path.abspath(filepath))
    if os.path.exists(filepath):
        mode = os.stat(filepath).st_mode & 0o777
    else:
        mode = 0o666 & ~_current_umask()
    fd, tmp_path = tempfile.mkstemp(prefix=".gpybryton-", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            os.chmod(tmp_path, mode)
            f.write(data)
        os.replace(tmp_path, filepath)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    logger.info("%d bytes has been saved to %s", len(data), filepath)
    return len(data)


def _read_records(filepath: PathLike, record_len: int) -> bytes:
    with open(filepath, "rb") as f:
        data = f.read()
    if len(data) % record_len:
        raise ParseFailure(
            f"{filepath}: size {len(data)} is not a multiple of {record_len}",
            details={"path": os.fspath(filepath), "size": len(data)},
        )
    return data


# ─────────────────────────────────────────────────────────────
# Summary - .smy
# ─────────────────────────────────────────────────────────────

SMY_INIT_FLAG = 0x0001
SMY_LAYOUT = struct.Struct("<hhiiiii")
SMY_LEN = SMY_LAYOUT.size  # 24


def pack_smy(summary: SummaryRecord) -> bytes:
    return SMY_LAYOUT.pack(
        SMY_INIT_FLAG,
        wrap_int(summary.coordinate_count, 16),
        summary.bbox_lat_ne,
        summary.bbox_lat_sw,
        summary.bbox_lon_ne,
        summary.bbox_lon_sw,
        wrap_int(summary.total_distance, 32),
    )


def read_smy(filepath: PathLike) -> SummaryRecord:
    """Read a Bryton .smy summary file."""
    data = _read_records(filepath, SMY_LEN)
    if len(data) != SMY_LEN:
        raise ParseFailure(f"{filepath}: expected exactly one {SMY_LEN}-byte record",
                           details={"path": os.fspath(filepath), "size": len(data)})
    flag, count, lat_ne, lat_sw, lon_ne, lon_sw, dist = SMY_LAYOUT.unpack(data)
    if flag != SMY_INIT_FLAG:
        logger.warning("%s: unexpected init flag 0x%04x", filepath, flag)
    return SummaryRecord(count, lat_ne, lat_sw, lon_ne, lon_sw, dist)


def write_smy(filepath: str, bundle: ExportBundle) -> int:
    """Write the Bryton .smy summary file."""
    return store_to_file(pack_smy(bundle.summary), filepath)


# ─────────────────────────────────────────────────────────────
# Track - .track
# ─────────────────────────────────────────────────────────────

# lat, lon, 8 reserved zero bytes
TRACK_LAYOUT = struct.Struct("<iiQ")
TRACK_RECORD_LEN = TRACK_LAYOUT.size  # 16


def pack_track(track: TrackPointSequence) -> bytes:
    return b"".join(TRACK_LAYOUT.pack(pt.lat, pt.lon, 0) for pt in track)


def read_track(filepath: PathLike) -> TrackPointSequence:
    """Read a Bryton .track file. Point count is file size / 16."""
    data = _read_records(filepath, TRACK_RECORD_LEN)
    return TrackPointSequence(
        GeoPoint(lat, lon) for lat, lon, _ in TRACK_LAYOUT.iter_unpack(data)
    )


def write_track(filepath: str, bundle: ExportBundle) -> int:
    """Write the Bryton .track file."""
    return store_to_file(pack_track(bundle.track), filepath)


# ─────────────────────────────────────────────────────────────
# Turn info - .tinfo
# ─────────────────────────────────────────────────────────────

# index, direction, 0, distance, 0, time, 0, description
TINFO_LAYOUT = struct.Struct(f"<HBBHHHH{DESCRIPTION_LEN}s")
TINFO_RECORD_LEN = TINFO_LAYOUT.size  # 44


def pack_tinfo(waypoints: List[Waypoint]) -> bytes:
    records = []
    for wpt in waypoints:
        records.append(TINFO_LAYOUT.pack(
            wrap_int(wpt.coordinate_index, 16, signed=False),
            int(wpt.direction_code),
            0,
            wrap_int(wpt.distance, 16, signed=False),
            0,
            wrap_int(wpt.time_sec, 16, signed=False),
            0,
            wpt.description[:DESCRIPTION_LEN],
        ))
    return b"".join(records)


def read_tinfo(filepath: PathLike) -> List[Waypoint]:
    """Read a Bryton .tinfo file."""
    data = _read_records(filepath, TINFO_RECORD_LEN)
    waypoints = []
    for index, direction, _, distance, _, time_sec, _, desc in TINFO_LAYOUT.iter_unpack(data):
        try:
            code = DirectionCode(direction)
        except ValueError as e:
            raise ParseFailure(f"{filepath}: unknown direction code 0x{direction:02x}",
                               details={"path": os.fspath(filepath)}) from e
        waypoints.append(Waypoint(index, code, distance, time_sec, desc))
    return waypoints


def write_tinfo(filepath: str, bundle: ExportBundle) -> int:
    """Write the Bryton .tinfo file."""
    return store_to_file(pack_tinfo(bundle.waypoints), filepath)


# ─────────────────────────────────────────────────────────────
# GPX import (parsing delegated to gpxpy)
# ─────────────────────────────────────────────────────────────

def first_segment_points(gpx: gpxpy.gpx.GPX) -> List[gpxpy.gpx.GPXTrackPoint]:
    """
    Flatten tracks/segments/points to one point list.

    Only the first segment of the first track is used; further tracks and
    segments are ignored.
    """
    if not gpx.tracks or not gpx.tracks[0].segments:
        return []
    return list(gpx.tracks[0].segments[0].points)


def track_bounds(gpx: gpxpy.gpx.GPX) -> SummaryRecord:
    """
    Bounding box over every point of every track, as fixed-point edges.

    All edges are 0 when the file has no track points.
    """
    lats, lons = [], []
    for track in gpx.tracks:
        for segment in track.segments:
            for p in segment.points:
                lats.append(p.latitude)
                lons.append(p.longitude)
    if not lats:
        return SummaryRecord()
    return SummaryRecord(
        bbox_lat_ne=encode_coordinate(max(lats)),
        bbox_lat_sw=encode_coordinate(min(lats)),
        bbox_lon_ne=encode_coordinate(max(lons)),
        bbox_lon_sw=encode_coordinate(min(lons)),
    )


def build_bundle(gpx: gpxpy.gpx.GPX) -> ExportBundle:
    """Populate an ExportBundle from a parsed GPX document."""
    bundle = ExportBundle()

    # smy data
    summary = bundle.summary
    summary.coordinate_count = wrap_int(gpx.get_track_points_no(), 16)
    length = gpx.length_3d() or 0.0
    summary.total_distance = wrap_int(int(length), 32)
    logger.info("Coordinate count: %d", summary.coordinate_count)
    logger.info("Total distance %.2fkm", length / 1000.0)

    bounds = track_bounds(gpx)
    summary.bbox_lat_ne = bounds.bbox_lat_ne
    summary.bbox_lat_sw = bounds.bbox_lat_sw
    summary.bbox_lon_ne = bounds.bbox_lon_ne
    summary.bbox_lon_sw = bounds.bbox_lon_sw

    # track data
    for p in first_segment_points(gpx):
        bundle.track.append(GeoPoint.from_degrees(p.latitude, p.longitude))

    # tinfo data
    logger.info("Waypoint count: %d", len(gpx.waypoints))
    for w in gpx.waypoints:
        point = GeoPoint.from_degrees(w.latitude, w.longitude)
        if bundle.track.find_coordinate_index(point) is None:
            logger.warning("Waypoint %r is not on the track, using index 0", w.name)
        bundle.waypoints.append(Waypoint(
            coordinate_index=bundle.track.coordinate_index(point),
            direction_code=direction_code_from_marker(w.symbol),
            description=Waypoint.pack_description(w.name),
        ))

    return bundle


def import_gpx(source, **opts) -> ExportBundle:
    """Parse a GPX file (path or open file) into an ExportBundle."""
    cfg = {**BRYTON_DEFAULTS, **opts}
    name = source.name if hasattr(source, "read") else source
    logger.info("Reading... %s", name)
    started = time.perf_counter()

    try:
        if hasattr(source, "read"):
            gpx = gpxpy.parse(source)
        else:
            with open(source, "r", encoding=cfg["encoding"]) as f:
                gpx = gpxpy.parse(f)
    except (OSError, ValueError, gpxpy.gpx.GPXException) as e:
        raise ParseFailure(f"Failed to parse {name}: {e}", details={"path": str(name)}) from e

    bundle = build_bundle(gpx)
    logger.info("...finished in %.3fs", time.perf_counter() - started)
    return bundle


# ─────────────────────────────────────────────────────────────
# Format Registry
# ─────────────────────────────────────────────────────────────

@dataclass
class FormatDesc:
    """Description of a Bryton file format."""
    extension: str
    name: str
    record_len: int
    reader: Callable
    writer: Callable


FORMAT_REGISTRY: List[FormatDesc] = [
    FormatDesc("smy",   "Bryton Summary",          SMY_LEN,          read_smy,   write_smy),
    FormatDesc("track", "Bryton Track",            TRACK_RECORD_LEN, read_track, write_track),
    FormatDesc("tinfo", "Bryton Turn Information", TINFO_RECORD_LEN, read_tinfo, write_tinfo),
]

_FORMAT_BY_EXT: Dict[str, FormatDesc] = {fmt.extension: fmt for fmt in FORMAT_REGISTRY}


def get_format(ext: str) -> Optional[FormatDesc]:
    """Get format descriptor by extension."""
    return _FORMAT_BY_EXT.get(ext.lower().lstrip("."))


def supported_formats() -> List[str]:
    return [fmt.extension for fmt in FORMAT_REGISTRY]


def output_paths(out_name: PathLike) -> Dict[str, str]:
    """Output file path per extension for a base name."""
    return {fmt.extension: adjust_filename(out_name, f".{fmt.extension}")
            for fmt in FORMAT_REGISTRY}


def read_file(filepath: PathLike):
    """Auto-detect format and read a Bryton file."""
    ext = Path(filepath).suffix.lower().lstrip(".")
    fmt = _FORMAT_BY_EXT.get(ext)
    if not fmt:
        raise ValueError(f"Unsupported input format: .{ext}\n"
                         f"Supported: {', '.join(supported_formats())}")
    return fmt.reader(filepath)


def export_bundle(bundle: ExportBundle, out_name: PathLike) -> List[str]:
    """
    Write the .smy, .track and .tinfo files for `bundle`.

    Files are written independently. A failure on one does not stop the
    others, and files already written are kept. Raises IOFailure after all
    three were attempted if any failed.
    """
    written: List[str] = []
    failures: Dict[str, str] = {}
    for ext, path in output_paths(out_name).items():
        try:
            _FORMAT_BY_EXT[ext].writer(path, bundle)
        except OSError as e:
            logger.error("Failed to save %s error: %s", path, e)
            failures[path] = str(e)
        else:
            written.append(path)

    if failures:
        raise IOFailure(f"Failed to save {', '.join(failures)}",
                        details=failures, written=written)
    return written


def convert(input_path: PathLike, out_name: Optional[PathLike] = None, **opts) -> ExportBundle:
    """Convert a GPX file to the three Bryton navigation files."""
    bundle = import_gpx(input_path, **opts)
    export_bundle(bundle, out_name if out_name is not None else input_path)
    return bundle
