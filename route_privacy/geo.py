"""Geospatial utilities (no external dependencies)."""

from __future__ import annotations

import math
from typing import Sequence

from route_privacy.models import TracePoint


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute Haversine distance in meters between two lat/lon points.

    Args:
        lat1: Latitude 1 in degrees.
        lon1: Longitude 1 in degrees.
        lat2: Latitude 2 in degrees.
        lon2: Longitude 2 in degrees.

    Returns:
        Distance in meters.
    """

    r = 6_371_000.0  # mean Earth radius in meters
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return r * c


def trace_distance_m(trace: Sequence[TracePoint]) -> float:
    """Sum of segment lengths along the trace, 0.0 for fewer than 2 points."""

    total = 0.0
    for i in range(1, len(trace)):
        prev = trace[i - 1]
        cur = trace[i]
        total += haversine_m(prev.lat, prev.lng, cur.lat, cur.lng)
    return total


def elevation_gain_m(trace: Sequence[TracePoint]) -> float:
    """Cumulative climb in meters. Missing elevation counts as 0."""

    gain = 0.0
    for i in range(1, len(trace)):
        prev = trace[i - 1].elevation or 0.0
        cur = trace[i].elevation or 0.0
        if cur > prev:
            gain += cur - prev
    return gain


def _perpendicular_distance(point: TracePoint, start: TracePoint, end: TracePoint) -> float:
    """Distance in degrees from point to the segment start-end (clamped to its ends)."""

    c = end.lat - start.lat
    d = end.lng - start.lng
    len_sq = c * c + d * d
    t = -1.0
    if len_sq != 0:
        t = ((point.lat - start.lat) * c + (point.lng - start.lng) * d) / len_sq

    if t < 0:
        xx, yy = start.lat, start.lng
    elif t > 1:
        xx, yy = end.lat, end.lng
    else:
        xx, yy = start.lat + t * c, start.lng + t * d

    return math.hypot(point.lat - xx, point.lng - yy)


def simplify_trace(trace: Sequence[TracePoint], tolerance: float = 0.00001) -> list[TracePoint]:
    """Drop redundant points with the Douglas-Peucker algorithm.

    Args:
        trace: Chronologically ordered points.
        tolerance: Maximum allowed deviation in degrees.

    Returns:
        A new list; first and last points are always kept.
    """

    pts = list(trace)
    if len(pts) <= 2:
        return pts

    start = pts[0]
    end = pts[-1]
    max_dist = 0.0
    max_idx = 0
    for i in range(1, len(pts) - 1):
        dist = _perpendicular_distance(pts[i], start, end)
        if dist > max_dist:
            max_dist = dist
            max_idx = i

    if max_dist > tolerance:
        left = simplify_trace(pts[: max_idx + 1], tolerance)
        right = simplify_trace(pts[max_idx:], tolerance)
        return left[:-1] + right
    return [start, end]
