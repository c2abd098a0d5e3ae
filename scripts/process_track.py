"""Process a saved packets API response into a playback-ready track.

Usage:
  python scripts/process_track.py --input packets.json
  python scripts/process_track.py --input packets.json --output track.json
  python scripts/process_track.py --input packets.json --low 30 --normal 90 --over 130
  python scripts/process_track.py --input packets.json --play --interval-ms 200

``packets.json`` may be a bare record list, ``{"data": [...]}`` or the grouped
``{"data": [{"deviceId": ..., "logs": [...]}]}`` form.  Records are expected
newest first, as the API delivers them.
"""

from __future__ import annotations

import argparse
import json
import sys
import threading
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from fleet_track.config import Settings, configure_logging  # noqa: E402
from fleet_track.playback.clock import PlaybackClock  # noqa: E402
from fleet_track.track.models import ProcessedTrack, SpeedThresholds  # noqa: E402
from fleet_track.track.normalizer import flatten_records  # noqa: E402
from fleet_track.track.pipeline import process_batch  # noqa: E402


def _print_summary(track: ProcessedTrack) -> None:
    points = track.points
    print(f"Points    : {len(points)}")
    if not points:
        print("No data.")
        return
    trips = max(p.trip_id for p in points)
    print(f"Range     : {points[0].timestamp}  →  {points[-1].timestamp}")
    print(f"Trips     : {trips}")
    print(f"Segments  : {len(track.segments)}")
    print(f"Stops     : {len(track.stops)}")
    for i, stop in enumerate(track.stops, start=1):
        flag = "  [revisit]" if stop.is_revisit else ""
        print(
            f"  #{i:<3} {stop.start_time} → {stop.end_time}"
            f"  ({stop.dwell_sample_count} samples)"
            f"  {stop.lat:.5f},{stop.lng:.5f}{flag}"
        )


def _play(track: ProcessedTrack, interval_ms: int) -> None:
    done = threading.Event()

    with PlaybackClock(track.points, tick_interval_ms=interval_ms) as clock:

        def on_tick(cursor: int) -> None:
            p = track.points[cursor]
            print(
                f"  [{clock.progress() * 100:5.1f}%] {p.timestamp}"
                f"  {p.speed_kmh:6.1f} km/h  {p.movement_status:<7}"
                f"  trip {p.trip_id}  for {clock.duration_string(cursor)}",
                flush=True,
            )
            if not clock.is_playing:
                done.set()

        clock.register_callback(on_tick)
        if not clock.play():
            print("Nothing to play.")
            return
        try:
            done.wait()
        except KeyboardInterrupt:
            pass


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings)

    ap = argparse.ArgumentParser(description="Process a GPS packet dump into a track")
    ap.add_argument("--input", required=True, help="JSON file with raw packets")
    ap.add_argument("--output", default="", help="Write the processed track as JSON")
    ap.add_argument("--low", type=float, default=settings.speed_low, help="Low speed band limit, km/h")
    ap.add_argument("--normal", type=float, default=settings.speed_normal, help="Normal band limit, km/h")
    ap.add_argument("--over", type=float, default=settings.speed_over, help="Over-speed band limit, km/h")
    ap.add_argument("--start-date", default=None, help="Inclusive YYYY-MM-DD lower bound")
    ap.add_argument("--end-date", default=None, help="Inclusive YYYY-MM-DD upper bound")
    ap.add_argument("--play", action="store_true", help="Replay the track on the console")
    ap.add_argument("--interval-ms", type=int, default=settings.tick_ms, help="Playback tick interval")
    args = ap.parse_args()

    path = Path(args.input)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        print(f"  [!] Cannot read {path}: {exc}", file=sys.stderr)
        sys.exit(1)

    records = flatten_records(payload)
    thresholds = SpeedThresholds(low=args.low, normal=args.normal, over=args.over)
    track = process_batch(
        records, thresholds, start_date=args.start_date, end_date=args.end_date
    )

    _print_summary(track)

    if args.output:
        Path(args.output).write_text(json.dumps(track.to_dict(), indent=2), encoding="utf-8")
        print(f"\n[OK] Written: {args.output}")

    if args.play:
        if args.interval_ms <= 0:
            print("  [!] --interval-ms must be positive", file=sys.stderr)
            sys.exit(1)
        print()
        _play(track, args.interval_ms)


if __name__ == "__main__":
    main()
