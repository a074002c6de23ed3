"""Shared fixtures for route_privacy tests."""

from __future__ import annotations

from typing import Callable

import pytest

from route_privacy.models import GeoPoint, TracePoint


def build_trace(
    n: int,
    *,
    start_lat: float = 52.52,
    start_lng: float = 13.405,
    step_deg: float = 0.0001,
    interval_ms: int = 5000,
) -> list[TracePoint]:
    """A straight north-east line of ``n`` points, one sample every ``interval_ms``."""

    return [
        TracePoint(
            lat=start_lat + i * step_deg,
            lng=start_lng + i * step_deg,
            timestamp_ms=1_700_000_000_000 + i * interval_ms,
            elevation=30.0 + i,
        )
        for i in range(n)
    ]


class ScriptedRandom:
    """Random source returning scripted values in order."""

    def __init__(self, values: list[float]) -> None:
        self._values = list(values)
        self.calls = 0

    def random(self) -> float:
        value = self._values[self.calls]
        self.calls += 1
        return value


@pytest.fixture
def make_trace() -> Callable[..., list[TracePoint]]:
    return build_trace


@pytest.fixture
def scripted_rng() -> Callable[[list[float]], ScriptedRandom]:
    return ScriptedRandom


@pytest.fixture
def home() -> GeoPoint:
    return GeoPoint(lat=52.52, lng=13.405, name="123 Main St")


@pytest.fixture
def office() -> GeoPoint:
    return GeoPoint(lat=52.53, lng=13.415, name="Acme Corp HQ")
