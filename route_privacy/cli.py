"""Command-line interface for route_privacy.

Run:
    python -m route_privacy inspect --csv trace.csv
    python -m route_privacy anonymize --csv trace.csv --out shared.csv --seed 7
    python -m route_privacy check --distance-m 20000 --duration-s 3600 --coordinates 400 --route-type walking
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from dataclasses import asdict

from route_privacy.anonymize import apply_sharing_level
from route_privacy.csv_io import load_trace, write_endpoints_json, write_trace
from route_privacy.geo import elevation_gain_m, simplify_trace
from route_privacy.metrics import (
    format_distance,
    format_duration,
    format_pace,
    pace_min_per_km,
    route_metrics,
)
from route_privacy.models import DEFAULT_TZ, GeoPoint, RouteMetrics, RouteType, SharingLevel
from route_privacy.plausibility import check_plausibility
from route_privacy.timeutils import dt_from_epoch_ms, sampling_stats

ROUTE_TYPES = [t.value for t in RouteType]
SHARING_LEVELS = [s.value for s in SharingLevel]


def _cmd_inspect(args: argparse.Namespace) -> int:
    points, summary = load_trace(args.csv)
    metrics = route_metrics(points, args.route_type)
    stats = sampling_stats(points)

    print("### Rows")
    print(f"total_rows={summary.rows_total}, parsed={summary.rows_parsed}, skipped={summary.rows_skipped}")
    print()

    if points:
        print("### Time range (local)")
        start = dt_from_epoch_ms(points[0].timestamp_ms, args.tz)
        end = dt_from_epoch_ms(points[-1].timestamp_ms, args.tz)
        print(f"start={start.isoformat(sep=' ')}, end={end.isoformat(sep=' ')}")
        print()

        lats = [p.lat for p in points]
        lngs = [p.lng for p in points]
        print("### Bounds")
        print(f"lat=[{min(lats)}, {max(lats)}], lng=[{min(lngs)}, {max(lngs)}]")
        print()

    if stats is not None:
        print("### Sampling interval (seconds)")
        print(
            f"count={stats.intervals}, min={stats.min_s:.3f}, median={stats.median_s:.3f}, "
            f"p95={stats.p95_s:.3f}, max={stats.max_s:.3f}, out_of_order={stats.out_of_order}"
        )
        print()

    pace = pace_min_per_km(metrics.distance_m, metrics.duration_s)
    gain = elevation_gain_m(points)
    print("### Route")
    print(
        f"type={metrics.route_type.value}, distance={format_distance(metrics.distance_m)}, "
        f"duration={format_duration(metrics.duration_s)}, pace={format_pace(pace)} min/km, "
        f"elevation_gain={gain:.1f} m"
    )

    if args.json:
        payload = {
            "rows": asdict(summary) | {"fieldnames": list(summary.fieldnames)},
            "metrics": asdict(metrics) | {"route_type": metrics.route_type.value},
            "sampling": asdict(stats) if stats is not None else None,
            "pace_min_per_km": pace,
            "elevation_gain_m": gain,
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def _cmd_anonymize(args: argparse.Namespace) -> int:
    points, _ = load_trace(args.csv)
    if args.simplify is not None:
        before = len(points)
        points = simplify_trace(points, args.simplify)
        print(f"Simplified: {before} -> {len(points)} points", file=sys.stderr)

    if points:
        start = GeoPoint(lat=points[0].lat, lng=points[0].lng, name=args.start_name)
        end = GeoPoint(lat=points[-1].lat, lng=points[-1].lng, name=args.end_name)
    else:
        start = GeoPoint(lat=0.0, lng=0.0, name=args.start_name)
        end = GeoPoint(lat=0.0, lng=0.0, name=args.end_name)

    rng = random.Random(args.seed) if args.seed is not None else None
    shared = apply_sharing_level(args.level, points, start, end, rng)
    written = write_trace(shared.trace, args.out, args.tz)

    print(f"level={args.level}, kept={written}/{len(points)} points")
    print(f"start=({shared.start.lat:.6f}, {shared.start.lng:.6f}) name={shared.start.name!r}")
    print(f"end=({shared.end.lat:.6f}, {shared.end.lng:.6f}) name={shared.end.name!r}")
    print(f"Exported: {args.out}")
    if args.endpoints_json is not None:
        write_endpoints_json(shared, args.endpoints_json)
        print(f"Exported endpoints: {args.endpoints_json}")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    if args.csv is not None:
        points, _ = load_trace(args.csv)
        metrics = route_metrics(points, args.route_type)
    else:
        missing = [
            flag
            for flag, value in (
                ("--distance-m", args.distance_m),
                ("--duration-s", args.duration_s),
                ("--coordinates", args.coordinates),
            )
            if value is None
        ]
        if missing:
            args.parser.error(f"either --csv or all of {', '.join(missing)} are required")
        metrics = RouteMetrics(
            route_type=args.route_type,
            distance_m=args.distance_m,
            duration_s=args.duration_s,
            coordinate_count=args.coordinates,
        )

    verdict = check_plausibility(metrics)
    if args.json:
        print(json.dumps({"is_implausible": verdict.is_implausible, "reasons": list(verdict.reasons)}, indent=2))
    elif verdict.is_implausible:
        print("IMPLAUSIBLE")
        for reason in verdict.reasons:
            print(f"  - {reason}")
    else:
        print("OK")
    return 1 if verdict.is_implausible else 0


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    p = argparse.ArgumentParser(prog="route_privacy")
    p.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for diagnostics on stderr",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    p_ins = sub.add_parser("inspect", help="Summarize a trace CSV: time range, sampling, distance, pace")
    p_ins.add_argument("--csv", type=str, default="trace.csv", help="Input trace CSV")
    p_ins.add_argument("--route-type", type=str, default="walking", choices=ROUTE_TYPES, help="Declared activity")
    p_ins.add_argument("--tz", type=str, default=DEFAULT_TZ, help="Timezone (IANA) for displayed times")
    p_ins.add_argument("--json", action="store_true", help="Also print JSON (for post-processing)")
    p_ins.set_defaults(func=_cmd_inspect)

    p_anon = sub.add_parser("anonymize", help="Apply a sharing level to a trace and export the shared copy")
    p_anon.add_argument("--csv", type=str, default="trace.csv", help="Input trace CSV")
    p_anon.add_argument("--out", type=str, default="shared.csv", help="Output trace CSV")
    p_anon.add_argument("--level", type=str, default="anonymous", choices=SHARING_LEVELS, help="Sharing level")
    p_anon.add_argument("--start-name", type=str, default="", help="Place name of the first point")
    p_anon.add_argument("--end-name", type=str, default="", help="Place name of the last point")
    p_anon.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for endpoint fuzzing (reproducible output; omit in production)",
    )
    p_anon.add_argument(
        "--simplify",
        type=float,
        default=None,
        help="Douglas-Peucker tolerance in degrees applied before sharing (e.g. 0.00001)",
    )
    p_anon.add_argument(
        "--endpoints-json",
        type=str,
        default=None,
        help="Also write the displayed start/end points of the shared copy to this JSON file",
    )
    p_anon.add_argument("--tz", type=str, default=DEFAULT_TZ, help="Timezone (IANA) for the time_local column")
    p_anon.set_defaults(func=_cmd_anonymize)

    p_chk = sub.add_parser("check", help="Flag physically impossible routes (exit code 1 when flagged)")
    p_chk.add_argument("--csv", type=str, default=None, help="Derive metrics from this trace CSV")
    p_chk.add_argument("--route-type", type=str, required=True, choices=ROUTE_TYPES, help="Declared activity")
    p_chk.add_argument("--distance-m", type=float, default=None, help="Reported distance in meters")
    p_chk.add_argument("--duration-s", type=float, default=None, help="Reported duration in seconds")
    p_chk.add_argument("--coordinates", type=int, default=None, help="Number of recorded GPS points")
    p_chk.add_argument("--json", action="store_true", help="Print the verdict as JSON")
    p_chk.set_defaults(func=_cmd_check, parser=p_chk)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
