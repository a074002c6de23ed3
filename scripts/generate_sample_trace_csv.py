from __future__ import annotations

import argparse
import csv
import math
import random
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Final

from zoneinfo import ZoneInfo


TZ: Final[str] = "UTC"


@dataclass(frozen=True, slots=True)
class Activity:
    name: str
    speed_mps: float
    interval_s: float


ACTIVITIES: Final[dict[str, Activity]] = {
    "walking": Activity("walking", 1.4, 5.0),
    "running": Activity("running", 3.2, 3.0),
    "cycling": Activity("cycling", 6.0, 3.0),
    "commuting": Activity("commuting", 11.0, 5.0),
}


def _epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def generate_trace(
    *,
    rows: int,
    seed: int,
    start_local: datetime,
    start_lat: float,
    start_lng: float,
    activity: Activity,
) -> list[dict[str, str]]:
    """Generate a fake trace: a wandering walk/run/ride with GPS jitter."""

    rng = random.Random(seed)
    cur_ms = _epoch_ms(start_local.replace(tzinfo=ZoneInfo(TZ)))
    lat = start_lat
    lng = start_lng
    heading = rng.uniform(0, 2 * math.pi)
    elevation = rng.uniform(20, 200)

    out: list[dict[str, str]] = []
    for _ in range(rows):
        # Slowly turning heading, occasional sharp corner
        heading += rng.gauss(0, 0.15) if rng.random() > 0.05 else rng.uniform(-1.5, 1.5)
        step_m = activity.speed_mps * activity.interval_s * rng.uniform(0.7, 1.3)
        lat += (step_m * math.cos(heading)) / 111_320.0
        lng += (step_m * math.sin(heading)) / (111_320.0 * max(0.01, math.cos(math.radians(lat))))
        elevation = max(0.0, elevation + rng.gauss(0, 0.8))

        jitter_lat = rng.gauss(0, 0.00002)
        jitter_lng = rng.gauss(0, 0.00002)
        cur_ms += int(activity.interval_s * 1000 * rng.uniform(0.8, 1.2))

        out.append(
            {
                "timestamp": str(cur_ms),
                "lat": f"{lat + jitter_lat:.7f}",
                "lng": f"{lng + jitter_lng:.7f}",
                # Some devices do not report elevation
                "elevation": "" if rng.random() < 0.05 else f"{elevation:.1f}",
            }
        )
    return out


def main() -> int:
    p = argparse.ArgumentParser(description="Generate a fake trace CSV for demo/testing (privacy-safe).")
    p.add_argument("--out", type=str, default="sample_data/trace.csv", help="Output CSV path")
    p.add_argument("--rows", type=int, default=300, help="Number of points")
    p.add_argument("--seed", type=int, default=42, help="Random seed (reproducible)")
    p.add_argument("--activity", type=str, default="walking", choices=sorted(ACTIVITIES), help="Movement profile")
    p.add_argument("--start-lat", type=float, default=52.5200, help="Start latitude")
    p.add_argument("--start-lng", type=float, default=13.4050, help="Start longitude")
    p.add_argument(
        "--start",
        type=str,
        default="2025-01-01 08:00:00",
        help="Start time in UTC, e.g. '2025-01-01 08:00:00'",
    )
    args = p.parse_args()

    rows = generate_trace(
        rows=args.rows,
        seed=args.seed,
        start_local=datetime.fromisoformat(args.start),
        start_lat=args.start_lat,
        start_lng=args.start_lng,
        activity=ACTIVITIES[args.activity],
    )
    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    with out_path.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=["timestamp", "lat", "lng", "elevation"])
        w.writeheader()
        w.writerows(rows)

    print(f"Generated: {out_path} (rows={len(rows)}, seed={args.seed}, activity={args.activity})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
