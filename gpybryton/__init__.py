"""
GpyBryton — GPX to Bryton Navigation Converter
===============================================
Turn a GPX track and its GPSies.com turn markers into the three binary files
a Bryton GPS device uses for navigation (.smy, .track, .tinfo).

Quick start:
    brytonconv route.gpx              # CLI

Library:
    from gpybryton import convert, import_gpx, export_bundle
    convert("route.gpx", "route")
"""

from .models import (
    GeoPoint, TrackPointSequence, Waypoint, SummaryRecord, ExportBundle,
    DirectionCode, encode_coordinate, decode_coordinate, direction_code_from_marker,
)
from .errors import BrytonError, ParseFailure, IOFailure
from .formats import (
    import_gpx, export_bundle, convert, first_segment_points,
    read_file, get_format, FORMAT_REGISTRY,
)

__version__ = "1.0.0"
__all__ = [
    "GeoPoint", "TrackPointSequence", "Waypoint", "SummaryRecord", "ExportBundle",
    "DirectionCode", "encode_coordinate", "decode_coordinate",
    "direction_code_from_marker", "BrytonError", "ParseFailure", "IOFailure",
    "import_gpx", "export_bundle", "convert", "first_segment_points",
    "read_file", "get_format", "FORMAT_REGISTRY",
]
