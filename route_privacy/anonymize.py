"""Endpoint blurring and coordinate fuzzing for anonymously shared routes.

Two independent transformations are applied when a route is shared with
``SharingLevel.ANONYMOUS``:

  - the trace loses the points closest to its start and end (slicing only,
    kept points are never altered), and
  - the displayed start/end ``GeoPoint`` get a uniform random offset of up to
    ``FUZZ_DEGREES`` on each axis and a generic name.

Trimming depends only on the trace length, so repeated calls trim the same
way while the fuzz offsets differ every time. Running ``anonymize`` on an
already anonymized trace trims it again; the transformation is not idempotent.
Re-sharing goes through ``apply_sharing_level`` with ``current`` set, which
leaves an anonymous route alone.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import Final, Protocol, Sequence

from route_privacy.models import (
    APPROXIMATE_LOCATION_NAME,
    AnonymizedRoute,
    GeoPoint,
    SharingLevel,
    TracePoint,
)

logger = logging.getLogger(__name__)

SHORT_TRACE_MAX_POINTS: Final[int] = 20
SHORT_TRACE_KEEP_FROM: Final[float] = 0.25
SHORT_TRACE_KEEP_TO: Final[float] = 0.75
LONG_TRACE_TRIM_FRACTION: Final[float] = 0.1
# ~111 m of latitude; the east-west distance shrinks toward the poles.
FUZZ_DEGREES: Final[float] = 0.001


class RandomSource(Protocol):
    """Anything with ``random() -> float in [0, 1)``, e.g. ``random.Random``."""

    def random(self) -> float: ...


_local = threading.local()


def _thread_rng() -> random.Random:
    """Per-thread generator seeded from OS entropy (no shared state to lock)."""

    rng = getattr(_local, "rng", None)
    if rng is None:
        rng = random.Random()
        _local.rng = rng
    return rng


def blur_route_endpoints(trace: Sequence[TracePoint]) -> tuple[TracePoint, ...]:
    """Remove the points nearest to the start and end of a trace.

    Args:
        trace: Chronologically ordered points.

    Returns:
        The middle 50% for traces of at most 20 points, otherwise the
        middle 80%. Order is preserved; an empty slice is a valid result.
    """

    n = len(trace)
    if n <= SHORT_TRACE_MAX_POINTS:
        start = int(n * SHORT_TRACE_KEEP_FROM)
        end = int(n * SHORT_TRACE_KEEP_TO)
    else:
        drop = int(n * LONG_TRACE_TRIM_FRACTION)
        start = drop
        end = n - drop
    return tuple(trace[start:end])


def _offset(rng: RandomSource) -> float:
    return (rng.random() - 0.5) * (2.0 * FUZZ_DEGREES)


def fuzz_geo_point(point: GeoPoint, rng: RandomSource | None = None) -> GeoPoint:
    """Displace a point by an independent random offset per axis and hide its name."""

    if rng is None:
        rng = _thread_rng()
    lat_offset = _offset(rng)
    lng_offset = _offset(rng)
    return GeoPoint(
        lat=point.lat + lat_offset,
        lng=point.lng + lng_offset,
        name=APPROXIMATE_LOCATION_NAME,
    )


def anonymize(
    trace: Sequence[TracePoint],
    start: GeoPoint,
    end: GeoPoint,
    rng: RandomSource | None = None,
) -> AnonymizedRoute:
    """Prepare a route for anonymous sharing.

    Args:
        trace: Full chronologically ordered trace. Not validated.
        start: Displayed location of ``trace[0]``.
        end: Displayed location of ``trace[-1]``.
        rng: Random source for the fuzz offsets. Pass ``random.Random(seed)``
            for reproducible output; defaults to a per-thread generator.

    Returns:
        AnonymizedRoute with the blurred trace and fuzzed, renamed endpoints.
    """

    if rng is None:
        rng = _thread_rng()
    blurred = blur_route_endpoints(trace)
    logger.debug("Anonymized trace: kept %s of %s points", len(blurred), len(trace))
    return AnonymizedRoute(
        trace=blurred,
        start=fuzz_geo_point(start, rng),
        end=fuzz_geo_point(end, rng),
    )


def apply_sharing_level(
    level: SharingLevel | str,
    trace: Sequence[TracePoint],
    start: GeoPoint,
    end: GeoPoint,
    rng: RandomSource | None = None,
    *,
    current: SharingLevel | str | None = None,
    original_trace: Sequence[TracePoint] | None = None,
) -> AnonymizedRoute:
    """Apply the privacy policy of a sharing level to a route.

    Only ``anonymous`` transforms anything; ``private`` and ``public`` return
    the route as given.

    Args:
        level: Requested sharing level.
        trace: Trace as currently stored.
        start: Displayed start as currently stored.
        end: Displayed end as currently stored.
        rng: Random source for the fuzz offsets.
        current: Level the route is stored with, None for a first share.
            A route already stored as ``anonymous`` is returned unchanged
            when re-shared as ``anonymous``.
        original_trace: Untrimmed trace kept by the owner. Anonymization
            starts from it when given, and leaving ``anonymous`` restores it.

    Raises:
        ValueError: If ``level`` or ``current`` is not a known sharing level.
    """

    target = SharingLevel(level)
    previous = SharingLevel(current) if current is not None else None

    if target is SharingLevel.ANONYMOUS:
        if previous is SharingLevel.ANONYMOUS:
            return AnonymizedRoute(trace=tuple(trace), start=start, end=end)
        source = original_trace if original_trace is not None else trace
        return anonymize(source, start, end, rng)

    if original_trace is not None:
        return AnonymizedRoute(trace=tuple(original_trace), start=start, end=end)
    return AnonymizedRoute(trace=tuple(trace), start=start, end=end)
