"""Heuristic detection of physically impossible routes (automated moderation)."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Final, Mapping, Sequence

from route_privacy.metrics import route_metrics
from route_privacy.models import PlausibilityVerdict, RouteMetrics, RouteType, TracePoint

logger = logging.getLogger(__name__)

# Commuting is mixed-mode travel and has no ceiling.
SPEED_CEILINGS_KMH: Final[Mapping[RouteType, float]] = MappingProxyType(
    {
        RouteType.WALKING: 10.0,
        RouteType.RUNNING: 30.0,
        RouteType.CYCLING: 60.0,
    }
)

SPEED_REASONS: Final[Mapping[RouteType, str]] = MappingProxyType(
    {
        RouteType.WALKING: "Walking speed exceeds human capability",
        RouteType.RUNNING: "Running speed exceeds human capability",
        RouteType.CYCLING: "Cycling speed exceeds typical capability",
    }
)

MAX_DISTANCE_M: Final[float] = 200_000.0
MAX_DURATION_S: Final[float] = 86_400.0
MIN_COORDINATES: Final[int] = 10
MIN_DISTANCE_FOR_DENSITY_M: Final[float] = 1_000.0

DISTANCE_REASON: Final[str] = "Distance exceeds reasonable single-session limit"
DURATION_REASON: Final[str] = "Duration exceeds 24 hours"
DENSITY_REASON: Final[str] = "Insufficient GPS data for reported distance"


def speed_kmh(distance_m: float, duration_s: float) -> float | None:
    """Average speed in km/h, or None when duration is not positive."""

    if duration_s <= 0:
        return None
    return (distance_m / 1000.0) / (duration_s / 3600.0)


def check_plausibility(metrics: RouteMetrics) -> PlausibilityVerdict:
    """Flag route metrics that no human could produce for the declared activity.

    Every check runs; all triggered reasons are returned in a fixed order:
    speed, distance, duration, data density. A zero duration skips the speed
    check and is not penalized on its own.

    Args:
        metrics: Aggregated route metrics. Not validated.

    Returns:
        PlausibilityVerdict.
    """

    reasons: list[str] = []

    speed = speed_kmh(metrics.distance_m, metrics.duration_s)
    ceiling = SPEED_CEILINGS_KMH.get(metrics.route_type)
    if speed is not None and ceiling is not None and speed > ceiling:
        reasons.append(SPEED_REASONS[metrics.route_type])

    if metrics.distance_m > MAX_DISTANCE_M:
        reasons.append(DISTANCE_REASON)

    if metrics.duration_s > MAX_DURATION_S:
        reasons.append(DURATION_REASON)

    if metrics.coordinate_count < MIN_COORDINATES and metrics.distance_m > MIN_DISTANCE_FOR_DENSITY_M:
        reasons.append(DENSITY_REASON)

    if reasons:
        logger.info("Route flagged as implausible (%s): %s", metrics.route_type.value, "; ".join(reasons))
    return PlausibilityVerdict(is_implausible=bool(reasons), reasons=tuple(reasons))


def check_trace_plausibility(trace: Sequence[TracePoint], route_type: RouteType | str) -> PlausibilityVerdict:
    """Derive metrics from a raw trace and check them."""

    return check_plausibility(route_metrics(trace, route_type))
