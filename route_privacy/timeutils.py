"""Time conversion and sampling-interval utilities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Sequence

from zoneinfo import ZoneInfo

from route_privacy.models import TracePoint


def tzinfo_from_name(tz_name: str) -> tzinfo:
    """Create tzinfo from an IANA timezone name.

    Args:
        tz_name: Timezone name like "Europe/Berlin".

    Returns:
        tzinfo instance.

    Raises:
        ValueError: If timezone name is invalid on this system.
    """

    try:
        return ZoneInfo(tz_name)
    except Exception as exc:  # ZoneInfo raises KeyError / ZoneInfoNotFoundError (platform dependent)
        raise ValueError(f"Invalid timezone: {tz_name!r}. Example: UTC, Europe/Berlin") from exc


def dt_from_epoch_ms(epoch_ms: int, tz_name: str) -> datetime:
    """Convert epoch milliseconds to a timezone-aware datetime."""

    tz = tzinfo_from_name(tz_name)
    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=tz)


@dataclass(frozen=True, slots=True)
class SamplingStats:
    """Seconds between consecutive samples of a trace."""

    intervals: int
    min_s: float
    median_s: float
    p95_s: float
    max_s: float
    out_of_order: int


def sampling_stats(trace: Sequence[TracePoint]) -> SamplingStats | None:
    """Summarize the sampling cadence of a trace.

    Intervals are taken in trace order; steps going back in time are counted
    in ``out_of_order`` and left out of the statistics.

    Returns:
        SamplingStats, or None when the trace has no forward interval.
    """

    deltas: list[float] = []
    out_of_order = 0
    for i in range(1, len(trace)):
        step_ms = trace[i].timestamp_ms - trace[i - 1].timestamp_ms
        if step_ms < 0:
            out_of_order += 1
            continue
        deltas.append(step_ms / 1000.0)
    if not deltas:
        return None

    deltas.sort()
    n = len(deltas)
    median = deltas[n // 2] if n % 2 == 1 else 0.5 * (deltas[n // 2 - 1] + deltas[n // 2])
    return SamplingStats(
        intervals=n,
        min_s=deltas[0],
        median_s=median,
        p95_s=deltas[int(0.95 * (n - 1))],
        max_s=deltas[-1],
        out_of_order=out_of_order,
    )
