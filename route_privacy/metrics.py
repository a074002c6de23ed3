"""Route metrics derived from a trace, and their human-readable formatting."""

from __future__ import annotations

import math
from typing import Sequence

from route_privacy.geo import trace_distance_m
from route_privacy.models import RouteMetrics, RouteType, TracePoint


def trace_duration_s(trace: Sequence[TracePoint]) -> float:
    """Elapsed seconds between the first and last sample (never negative)."""

    if len(trace) < 2:
        return 0.0
    return max(0.0, (trace[-1].timestamp_ms - trace[0].timestamp_ms) / 1000.0)


def route_metrics(trace: Sequence[TracePoint], route_type: RouteType | str) -> RouteMetrics:
    """Aggregate a trace into the summary used for moderation.

    Args:
        trace: Chronologically ordered points. Not sorted here.
        route_type: Declared activity.

    Returns:
        RouteMetrics with haversine distance, elapsed duration and point count.
    """

    return RouteMetrics(
        route_type=RouteType(route_type),
        distance_m=trace_distance_m(trace),
        duration_s=trace_duration_s(trace),
        coordinate_count=len(trace),
    )


def pace_min_per_km(distance_m: float, duration_s: float) -> float:
    """Minutes per kilometer, 0.0 when no distance was covered."""

    if distance_m <= 0:
        return 0.0
    return (duration_s / 60.0) / (distance_m / 1000.0)


def format_duration(seconds: float) -> str:
    """Format as H:MM:SS, or M:SS under one hour."""

    s = int(round(max(0.0, seconds)))
    h = s // 3600
    m = (s % 3600) // 60
    sec = s % 60
    if h > 0:
        return f"{h}:{m:02d}:{sec:02d}"
    return f"{m}:{sec:02d}"


def format_distance(meters: float) -> str:
    """Format as "x.xx km" from 1 km up, otherwise whole meters."""

    if meters >= 1000:
        return f"{meters / 1000.0:.2f} km"
    return f"{round(meters)} m"


def format_pace(pace: float) -> str:
    """Format min/km as M:SS; "--:--" when pace is unknown."""

    if not math.isfinite(pace) or pace == 0:
        return "--:--"
    minutes = math.floor(pace)
    seconds = round((pace - minutes) * 60)
    if seconds == 60:
        minutes += 1
        seconds = 0
    return f"{minutes}:{seconds:02d}"
