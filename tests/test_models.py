import logging

import pytest

from gpybryton.models import (
    DESCRIPTION_LEN,
    DirectionCode,
    GeoPoint,
    TrackPointSequence,
    Waypoint,
    decode_coordinate,
    direction_code_from_marker,
    encode_coordinate,
    wrap_int,
)


def test_encode_coordinate_truncates_toward_zero():
    assert encode_coordinate(51.507351) == 51507351
    assert encode_coordinate(-0.127758) == -127758
    assert encode_coordinate(1.0000009) == 1000000
    assert encode_coordinate(-1.0000009) == -1000000
    assert encode_coordinate(0.0) == 0


def test_encode_coordinate_overflows_silently():
    # 2148 degrees is past the int32 range once scaled
    assert encode_coordinate(2148.0) == 2148000000 - 2 ** 32


def test_decode_coordinate():
    assert decode_coordinate(51507351) == pytest.approx(51.507351)


def test_wrap_int():
    assert wrap_int(32768, 16) == -32768
    assert wrap_int(65536, 16, signed=False) == 0
    assert wrap_int(-1, 16, signed=False) == 65535
    assert wrap_int(123, 32) == 123


@pytest.mark.parametrize("marker,code", [
    ("tshl", 0x07),
    ("left", 0x03),
    ("tsll", 0x05),
    ("straight", 0x01),
    ("tslr", 0x04),
    ("right", 0x02),
    ("tshr", 0x06),
])
def test_gpsies_markers(marker, code):
    assert direction_code_from_marker(marker) == code


def test_marker_lookup_is_case_insensitive():
    assert direction_code_from_marker("TSHL") is DirectionCode.CLOSE_LEFT
    assert direction_code_from_marker("Right") is DirectionCode.RIGHT


def test_unknown_marker_defaults_to_go_ahead_and_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="gpybryton.models"):
        code = direction_code_from_marker("unknown-marker")
    assert code is DirectionCode.GO_AHEAD
    assert "unknown-marker" in caplog.text


def test_missing_marker_defaults_to_go_ahead(caplog):
    with caplog.at_level(logging.WARNING, logger="gpybryton.models"):
        assert direction_code_from_marker(None) is DirectionCode.GO_AHEAD
    assert caplog.records


def test_geopoint_is_immutable_and_exact():
    p = GeoPoint.from_degrees(1.5, -2.25)
    assert p == GeoPoint(1500000, -2250000)
    assert p != GeoPoint(1500001, -2250000)
    with pytest.raises(AttributeError):
        p.lat = 0


def test_coordinate_index_returns_lowest_match():
    seq = TrackPointSequence([GeoPoint(1, 1), GeoPoint(2, 2), GeoPoint(1, 1)])
    assert seq.coordinate_index(GeoPoint(1, 1)) == 0
    assert seq.coordinate_index(GeoPoint(2, 2)) == 1


def test_coordinate_index_finds_every_point():
    points = [GeoPoint(i, -i) for i in range(50)]
    seq = TrackPointSequence(points)
    assert [seq.coordinate_index(p) for p in points] == list(range(50))


def test_unmatched_point_resolves_to_zero():
    seq = TrackPointSequence([GeoPoint(5, 5), GeoPoint(6, 6)])
    assert seq.coordinate_index(GeoPoint(7, 7)) == 0
    assert seq.coordinate_index(GeoPoint(5, 5)) == 0
    assert seq.find_coordinate_index(GeoPoint(7, 7)) is None
    assert seq.find_coordinate_index(GeoPoint(5, 5)) == 0


def test_sequence_keeps_order_and_duplicates():
    seq = TrackPointSequence()
    for p in (GeoPoint(3, 3), GeoPoint(1, 1), GeoPoint(3, 3)):
        seq.append(p)
    assert list(seq) == [GeoPoint(3, 3), GeoPoint(1, 1), GeoPoint(3, 3)]
    assert len(seq) == 3


def test_pack_description_pads_and_truncates():
    assert Waypoint.pack_description("Turn") == b"Turn" + b"\x00" * 28
    long_name = "x" * 40
    packed = Waypoint.pack_description(long_name)
    assert len(packed) == DESCRIPTION_LEN
    assert packed == b"x" * 32
    assert Waypoint.pack_description(None) == b"\x00" * 32


def test_waypoint_name_strips_padding():
    wpt = Waypoint(description=Waypoint.pack_description("Bridge"))
    assert wpt.name == "Bridge"
    assert wpt.distance == 0
    assert wpt.time_sec == 0
