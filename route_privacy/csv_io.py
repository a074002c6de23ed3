"""CSV input/output for GPS traces.

Columns:
  - timestamp: epoch milliseconds (required)
  - lat / lng: decimal degrees (required)
  - elevation: meters, empty when unknown (optional)
"""

from __future__ import annotations

import csv
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Sequence

from route_privacy.models import AnonymizedRoute, TracePoint
from route_privacy.timeutils import tzinfo_from_name

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: tuple[str, ...] = ("timestamp", "lat", "lng")


@dataclass(frozen=True, slots=True)
class CsvSummary:
    """Quick summary of CSV parsing."""

    rows_total: int
    rows_parsed: int
    rows_skipped: int
    fieldnames: Sequence[str]


def _parse_optional_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    return float(value.strip())


def _parse_row(row: dict[str, str]) -> TracePoint:
    return TracePoint(
        lat=float(row["lat"].strip()),
        lng=float(row["lng"].strip()),
        timestamp_ms=int(row["timestamp"].strip()),
        elevation=_parse_optional_float(row.get("elevation")),
    )


def load_trace(csv_path: str | Path) -> tuple[list[TracePoint], CsvSummary]:
    """Load a trace in file order (the file is assumed chronological).

    Args:
        csv_path: Path to the trace CSV.

    Returns:
        (points, summary)

    Raises:
        KeyError: If a required column is missing from the header.
    """

    p = Path(csv_path)
    rows_total = 0
    parsed: list[TracePoint] = []

    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        fieldnames: Sequence[str] = reader.fieldnames or ()
        missing = [c for c in REQUIRED_COLUMNS if c not in fieldnames]
        if missing:
            raise KeyError(f"CSV is missing required columns {missing}. Found: {list(fieldnames)}")

        for row in reader:
            rows_total += 1
            try:
                parsed.append(_parse_row(row))
            except (AttributeError, ValueError, TypeError):
                # broken or truncated row
                continue

    summary = CsvSummary(
        rows_total=rows_total,
        rows_parsed=len(parsed),
        rows_skipped=rows_total - len(parsed),
        fieldnames=tuple(fieldnames),
    )
    if summary.rows_skipped > 0:
        logger.warning("Skipped %s unparseable rows in %s", summary.rows_skipped, p)
    return parsed, summary


def write_trace(points: Iterable[TracePoint], out_path: str | Path, tz_name: str) -> int:
    """Write a trace CSV readable by :func:`load_trace`.

    A leading ``time_local`` column shows each timestamp in ``tz_name``.

    Returns:
        Number of rows written.
    """

    p = Path(out_path)
    # zone is resolved before the target file is truncated
    tz = tzinfo_from_name(tz_name)
    p.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    with p.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=["time_local", "timestamp", "lat", "lng", "elevation"])
        w.writeheader()
        for pt in points:
            w.writerow(
                {
                    "time_local": datetime.fromtimestamp(pt.timestamp_ms / 1000.0, tz=tz).isoformat(sep=" "),
                    "timestamp": pt.timestamp_ms,
                    "lat": pt.lat,
                    "lng": pt.lng,
                    "elevation": "" if pt.elevation is None else pt.elevation,
                }
            )
            written += 1
    return written


def write_endpoints_json(route: AnonymizedRoute, out_path: str | Path) -> None:
    """Write the displayed start/end of a shared route as JSON.

    Output shape::

        {"start": {"lat": ..., "lng": ..., "name": ...}, "end": {...}, "points": N}
    """

    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "start": {"lat": route.start.lat, "lng": route.start.lng, "name": route.start.name},
        "end": {"lat": route.end.lat, "lng": route.end.lng, "name": route.end.name},
        "points": len(route.trace),
    }
    p.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
