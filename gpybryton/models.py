"""
GpyBryton — GPX to Bryton Navigation Converter
Data models: GeoPoint, TrackPointSequence, Waypoint, SummaryRecord, ExportBundle

Coordinates are kept in the device's fixed-point form (degrees * 1,000,000
as signed 32-bit integers) from the moment they enter the model.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

COORD_FACTOR = 1000000.0
DESCRIPTION_LEN = 32


def wrap_int(value: int, bits: int, signed: bool = True) -> int:
    """Wrap an integer into a fixed-width range, like a C cast would."""
    mask = (1 << bits) - 1
    value &= mask
    if signed and value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


# ─────────────────────────────────────────────────────────────
# Coordinate codec
# ─────────────────────────────────────────────────────────────

def encode_coordinate(degrees: float) -> int:
    """Degrees to device fixed-point. Truncates toward zero, no rounding."""
    return wrap_int(int(degrees * COORD_FACTOR), 32)


def decode_coordinate(value: int) -> float:
    return value / COORD_FACTOR


# ─────────────────────────────────────────────────────────────
# Direction codes
# ─────────────────────────────────────────────────────────────

class DirectionCode(IntEnum):
    """Arrow icon shown by the device. Values are the wire bytes."""
    GO_AHEAD = 0x01
    RIGHT = 0x02
    LEFT = 0x03
    SLIGHT_RIGHT = 0x04
    SLIGHT_LEFT = 0x05
    CLOSE_RIGHT = 0x06
    CLOSE_LEFT = 0x07


# GPSies.com waypoint symbols
GPSIES_MARKERS = {
    "tshl": DirectionCode.CLOSE_LEFT,
    "left": DirectionCode.LEFT,
    "tsll": DirectionCode.SLIGHT_LEFT,
    "straight": DirectionCode.GO_AHEAD,
    "tslr": DirectionCode.SLIGHT_RIGHT,
    "right": DirectionCode.RIGHT,
    "tshr": DirectionCode.CLOSE_RIGHT,
}


def direction_code_from_marker(marker: Optional[str]) -> DirectionCode:
    """Map a waypoint symbol to a direction code, falling back to GO_AHEAD."""
    code = GPSIES_MARKERS.get((marker or "").lower())
    if code is None:
        logger.warning("Unsupported direction code: %r! Using GoAhead!", marker)
        return DirectionCode.GO_AHEAD
    return code


# ─────────────────────────────────────────────────────────────
# Entities
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GeoPoint:
    """A track point in fixed-point coordinates. Equality is exact."""
    lat: int = 0
    lon: int = 0

    @classmethod
    def from_degrees(cls, lat: float, lon: float) -> GeoPoint:
        return cls(encode_coordinate(lat), encode_coordinate(lon))

    @property
    def lat_degrees(self) -> float:
        return decode_coordinate(self.lat)

    @property
    def lon_degrees(self) -> float:
        return decode_coordinate(self.lon)


class TrackPointSequence:
    """Ordered track points. Order is chronological and referenced by waypoints."""

    def __init__(self, points: Iterable[GeoPoint] = ()):
        self._points: List[GeoPoint] = list(points)

    def __len__(self) -> int:
        return len(self._points)

    def __getitem__(self, index) -> GeoPoint:
        return self._points[index]

    def __iter__(self):
        return iter(self._points)

    def __bool__(self) -> bool:
        return len(self._points) > 0

    def __eq__(self, other) -> bool:
        if isinstance(other, TrackPointSequence):
            return self._points == other._points
        if isinstance(other, list):
            return self._points == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"TrackPointSequence({len(self._points)} points)"

    def append(self, point: GeoPoint):
        self._points.append(point)

    def find_coordinate_index(self, point: GeoPoint) -> Optional[int]:
        """Index of the first point equal to `point`, or None."""
        for i, entry in enumerate(self._points):
            if entry == point:
                return i
        return None

    def coordinate_index(self, point: GeoPoint) -> int:
        """
        Device index of `point` in the track.

        Returns 0 when the point is not on the track, which the device cannot
        tell apart from a match on the first point.
        """
        index = self.find_coordinate_index(point)
        if index is None:
            return 0
        return wrap_int(index, 16, signed=False)


@dataclass
class Waypoint:
    """A turn instruction tied to a track point by index."""
    coordinate_index: int = 0
    direction_code: DirectionCode = DirectionCode.GO_AHEAD
    distance: int = 0
    time_sec: int = 0
    description: bytes = b"\x00" * DESCRIPTION_LEN

    @staticmethod
    def pack_description(text: Optional[str]) -> bytes:
        """UTF-8 text cut or zero-padded to exactly 32 bytes."""
        raw = (text or "").encode("utf-8")[:DESCRIPTION_LEN]
        return raw.ljust(DESCRIPTION_LEN, b"\x00")

    @property
    def name(self) -> str:
        return self.description.split(b"\x00")[0].decode("utf-8", errors="replace")


@dataclass
class SummaryRecord:
    coordinate_count: int = 0
    bbox_lat_ne: int = 0
    bbox_lat_sw: int = 0
    bbox_lon_ne: int = 0
    bbox_lon_sw: int = 0
    total_distance: int = 0


@dataclass
class ExportBundle:
    """Everything the device needs for one navigation run."""
    summary: SummaryRecord = field(default_factory=SummaryRecord)
    track: TrackPointSequence = field(default_factory=TrackPointSequence)
    waypoints: List[Waypoint] = field(default_factory=list)
