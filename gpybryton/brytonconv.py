#!/usr/bin/env python3
"""
GpyBryton — GPX to Bryton Navigation Converter
===============================================
Convert a GPX track with GPSies.com turn markers into the .smy/.track/.tinfo
files used by Bryton devices for turn-by-turn navigation.

Usage:
    brytonconv route.gpx                  # Writes route.smy, route.track, route.tinfo
    brytonconv route.gpx out/ride         # Writes out/ride.smy, ...
    brytonconv --info route.gpx           # Show what would be exported
    brytonconv --info route.tinfo         # Decode an existing device file
    brytonconv --formats                  # List device formats
"""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path

from .errors import BrytonError
from .formats import (
    FORMAT_REGISTRY, SOFT_FULL_NAME, convert, get_format, import_gpx,
    output_paths, read_file,
)
from .models import ExportBundle, SummaryRecord, TrackPointSequence, decode_coordinate


def format_distance(meters: float) -> str:
    """Format distance in human-readable form."""
    if meters >= 1000:
        return f"{meters / 1000:.2f} km"
    return f"{meters:.0f} m"


def _show_summary(summary: SummaryRecord):
    print(f"       Points: {summary.coordinate_count}")
    print(f"       Distance: {format_distance(summary.total_distance)}")
    print(f"       Bounds: ({decode_coordinate(summary.bbox_lat_sw):.6f}, "
          f"{decode_coordinate(summary.bbox_lon_sw):.6f}) → "
          f"({decode_coordinate(summary.bbox_lat_ne):.6f}, "
          f"{decode_coordinate(summary.bbox_lon_ne):.6f})")


def _show_track(track: TrackPointSequence):
    print(f"       Track points: {len(track)}")
    if track:
        first, last = track[0], track[-1]
        print(f"       Start: {first.lat_degrees:.6f}, {first.lon_degrees:.6f}")
        if len(track) > 1:
            print(f"       End:   {last.lat_degrees:.6f}, {last.lon_degrees:.6f}")


def _show_waypoints(waypoints):
    print(f"       Waypoints: {len(waypoints)}")
    for wpt in waypoints:
        print(f"         #{wpt.coordinate_index:<6} {wpt.direction_code.name:<13} {wpt.name}")


def show_info(data, filepath: str = ""):
    """Display information about a bundle or a decoded device file."""
    if filepath:
        print(f"\n📁 File: {filepath}")
        fmt = get_format(Path(filepath).suffix)
        if fmt:
            print(f"   Format: {fmt.name} (.{fmt.extension})")

    if isinstance(data, ExportBundle):
        _show_summary(data.summary)
        _show_track(data.track)
        _show_waypoints(data.waypoints)
    elif isinstance(data, SummaryRecord):
        _show_summary(data)
    elif isinstance(data, TrackPointSequence):
        _show_track(data)
    else:
        _show_waypoints(data)


def list_formats():
    """Display the device file formats."""
    print(f"\n{SOFT_FULL_NAME}")
    print("=" * 55)
    print(f"{'Extension':<12} {'Format Name':<30} {'Record':>8}")
    print("-" * 55)
    for fmt in FORMAT_REGISTRY:
        print(f"  .{fmt.extension:<10} {fmt.name:<30} {fmt.record_len:>6} B")
    print("-" * 55 + "\n")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="brytonconv",
        description=f"{SOFT_FULL_NAME} — GPX to Bryton converter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s route.gpx                Write route.smy, route.track, route.tinfo
  %(prog)s route.gpx out/ride       Write out/ride.smy, out/ride.track, ...
  %(prog)s --info route.gpx         Show file information
  %(prog)s --info route.tinfo       Decode a Bryton file
        """)

    parser.add_argument("input", nargs="?", help="Input GPX file (or Bryton file with --info)")
    parser.add_argument("output", nargs="?", help="Output base name (default: input name)")
    parser.add_argument("--formats", action="store_true", help="List Bryton formats")
    parser.add_argument("--info", action="store_true", help="Show file info only")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.formats:
        list_formats()
        return 0

    if not args.input:
        parser.print_help()
        return 1

    if args.info:
        try:
            if get_format(Path(args.input).suffix):
                data = read_file(args.input)
            else:
                data = import_gpx(args.input)
        except (BrytonError, OSError, ValueError) as e:
            code = getattr(e, "code", type(e).__name__)
            print(f"❌ [{code}] Error reading {args.input}: {e}", file=sys.stderr)
            return 1
        show_info(data, args.input)
        return 0

    out_name = args.output or args.input
    try:
        bundle = convert(args.input, out_name)
    except BrytonError as e:
        print(f"❌ [{e.code}] {e}", file=sys.stderr)
        return 1

    for ext, path in output_paths(out_name).items():
        print(f"✅ Converted → {path} ({get_format(ext).name})")
    print(f"   {len(bundle.track)} track points, {len(bundle.waypoints)} waypoints")
    return 0


if __name__ == "__main__":
    sys.exit(main())
