"""Data models for GPS traces, route endpoints and moderation verdicts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final


class SharingLevel(str, Enum):
    """Visibility tier chosen by the route owner."""

    PRIVATE = "private"
    ANONYMOUS = "anonymous"
    PUBLIC = "public"


class RouteType(str, Enum):
    """Declared activity of a tracked route."""

    WALKING = "walking"
    RUNNING = "running"
    CYCLING = "cycling"
    COMMUTING = "commuting"


@dataclass(frozen=True, slots=True)
class TracePoint:
    """A single GPS sample.

    Attributes:
        lat: Latitude in decimal degrees.
        lng: Longitude in decimal degrees.
        timestamp_ms: Unix epoch milliseconds.
        elevation: Elevation in meters, None when the device did not report it.
    """

    lat: float
    lng: float
    timestamp_ms: int
    elevation: float | None = None

    @property
    def timestamp_s(self) -> float:
        """Unix epoch seconds as float."""

        return self.timestamp_ms / 1000.0


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A named location, e.g. the reverse-geocoded start of a route."""

    lat: float
    lng: float
    name: str


@dataclass(frozen=True, slots=True)
class RouteMetrics:
    """Aggregate summary of a route, the only input of the plausibility checker."""

    route_type: RouteType
    distance_m: float
    duration_s: float
    coordinate_count: int

    def __post_init__(self) -> None:
        # frozen: bypass __setattr__ to coerce "walking" -> RouteType.WALKING
        object.__setattr__(self, "route_type", RouteType(self.route_type))


@dataclass(frozen=True, slots=True)
class PlausibilityVerdict:
    """Result of a plausibility check. Reasons keep the order checks ran in."""

    is_implausible: bool
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class AnonymizedRoute:
    """A trace and its displayed endpoints after the sharing policy was applied."""

    trace: tuple[TracePoint, ...]
    start: GeoPoint
    end: GeoPoint


APPROXIMATE_LOCATION_NAME: Final[str] = "Approximate location"

DEFAULT_TZ: Final[str] = "UTC"
