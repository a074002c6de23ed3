"""Tests for endpoint blurring and coordinate fuzzing."""

from __future__ import annotations

import random
import statistics
from concurrent.futures import ThreadPoolExecutor

import pytest

from route_privacy.anonymize import (
    FUZZ_DEGREES,
    anonymize,
    apply_sharing_level,
    blur_route_endpoints,
    fuzz_geo_point,
)
from route_privacy.models import APPROXIMATE_LOCATION_NAME, AnonymizedRoute, GeoPoint, SharingLevel


class TestBlurRouteEndpoints:
    """Trimming depends only on the trace length."""

    def test_short_trace_keeps_middle_half(self, make_trace):
        trace = make_trace(20)

        blurred = blur_route_endpoints(trace)

        assert len(blurred) == 10
        assert blurred == tuple(trace[5:15])

    def test_long_trace_keeps_middle_eighty_percent(self, make_trace):
        trace = make_trace(100)

        blurred = blur_route_endpoints(trace)

        assert len(blurred) == 80
        assert blurred == tuple(trace[10:90])

    def test_first_long_trace_length(self, make_trace):
        trace = make_trace(21)

        # floor(21 * 0.1) == 2 points dropped from each end
        assert blur_route_endpoints(trace) == tuple(trace[2:19])

    @pytest.mark.parametrize(
        ("n", "expected"),
        [(0, (0, 0)), (1, (0, 0)), (3, (0, 2)), (4, (1, 3)), (7, (1, 5))],
    )
    def test_tiny_traces(self, make_trace, n, expected):
        trace = make_trace(n)
        lo, hi = expected

        assert blur_route_endpoints(trace) == tuple(trace[lo:hi])

    def test_points_are_not_altered(self, make_trace):
        trace = make_trace(50)

        for point in blur_route_endpoints(trace):
            assert point in trace

    def test_trimming_is_deterministic(self, make_trace, home, office):
        trace = make_trace(57)

        first = anonymize(trace, home, office)
        second = anonymize(trace, home, office)

        assert first.trace == second.trace

    def test_re_anonymizing_trims_again(self, make_trace, home, office):
        trace = make_trace(100)

        once = anonymize(trace, home, office)
        twice = anonymize(once.trace, once.start, once.end)

        assert len(once.trace) == 80
        assert len(twice.trace) == 64


class TestFuzzGeoPoint:
    """Endpoint fuzzing and name genericization."""

    def test_scripted_offsets(self, scripted_rng, home):
        rng = scripted_rng([0.75, 0.25])

        fuzzed = fuzz_geo_point(home, rng)

        assert fuzzed.lat == pytest.approx(home.lat + 0.0005)
        assert fuzzed.lng == pytest.approx(home.lng - 0.0005)
        assert rng.calls == 2

    def test_offset_extremes(self, scripted_rng, home):
        fuzzed = fuzz_geo_point(home, scripted_rng([0.0, 0.5]))

        assert fuzzed.lat == pytest.approx(home.lat - FUZZ_DEGREES)
        assert fuzzed.lng == pytest.approx(home.lng)

    def test_name_is_generic(self, home):
        assert fuzz_geo_point(home).name == APPROXIMATE_LOCATION_NAME

    def test_fuzz_stays_within_bound(self, home):
        rng = random.Random(1234)
        for _ in range(2000):
            fuzzed = fuzz_geo_point(home, rng)
            assert abs(fuzzed.lat - home.lat) <= FUZZ_DEGREES + 1e-12
            assert abs(fuzzed.lng - home.lng) <= FUZZ_DEGREES + 1e-12

    def test_default_source_varies(self, home):
        results = {fuzz_geo_point(home) for _ in range(20)}

        assert len(results) > 1


class TestAnonymize:
    """Full anonymization of a route."""

    def test_returns_blurred_trace_and_fuzzed_endpoints(self, make_trace, home, office):
        trace = make_trace(30)

        result = anonymize(trace, home, office, random.Random(7))

        assert isinstance(result, AnonymizedRoute)
        assert result.trace == tuple(trace[3:27])
        assert result.start.name == APPROXIMATE_LOCATION_NAME
        assert result.end.name == APPROXIMATE_LOCATION_NAME
        assert result.start != home
        assert abs(result.end.lat - office.lat) <= FUZZ_DEGREES

    def test_draw_order_start_then_end(self, scripted_rng, make_trace, home, office):
        rng = scripted_rng([0.75, 0.25, 0.5, 0.0])

        result = anonymize(make_trace(10), home, office, rng)

        assert result.start.lat == pytest.approx(home.lat + 0.0005)
        assert result.start.lng == pytest.approx(home.lng - 0.0005)
        assert result.end.lat == pytest.approx(office.lat)
        assert result.end.lng == pytest.approx(office.lng - 0.001)

    def test_same_seed_reproduces_output(self, make_trace, home, office):
        trace = make_trace(40)

        assert anonymize(trace, home, office, random.Random(99)) == anonymize(trace, home, office, random.Random(99))

    def test_start_and_end_offsets_are_uncorrelated(self, home):
        same_point = GeoPoint(lat=home.lat, lng=home.lng, name="x")
        rng = random.Random(2024)
        start_lat, end_lat, start_lng = [], [], []
        for _ in range(2000):
            result = anonymize([], same_point, same_point, rng)
            start_lat.append(result.start.lat - home.lat)
            start_lng.append(result.start.lng - home.lng)
            end_lat.append(result.end.lat - home.lat)

        assert all(s != e for s, e in zip(start_lat, end_lat))
        assert abs(statistics.correlation(start_lat, end_lat)) < 0.1
        assert abs(statistics.correlation(start_lat, start_lng)) < 0.1

    def test_empty_trace_degenerates(self, home, office):
        result = anonymize([], home, office)

        assert result.trace == ()
        assert result.start.name == APPROXIMATE_LOCATION_NAME

    def test_out_of_range_coordinates_pass_through(self, scripted_rng):
        bogus = GeoPoint(lat=123.0, lng=-500.0, name="nowhere")

        result = anonymize([], bogus, bogus, scripted_rng([0.5, 0.5, 0.5, 0.5]))

        assert result.start.lat == pytest.approx(123.0)
        assert result.start.lng == pytest.approx(-500.0)

    def test_safe_across_threads(self, make_trace, home, office):
        trace = make_trace(100)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: anonymize(trace, home, office), range(64)))

        assert all(len(r.trace) == 80 for r in results)
        assert len({r.start for r in results}) > 1


class TestApplySharingLevel:
    """Only the anonymous level transforms the route."""

    @pytest.mark.parametrize("level", [SharingLevel.PRIVATE, SharingLevel.PUBLIC, "private", "public"])
    def test_non_anonymous_levels_leave_route_untouched(self, make_trace, home, office, level):
        trace = make_trace(30)

        result = apply_sharing_level(level, trace, home, office)

        assert result.trace == tuple(trace)
        assert result.start == home
        assert result.end == office

    @pytest.mark.parametrize("level", [SharingLevel.ANONYMOUS, "anonymous"])
    def test_anonymous_level_anonymizes(self, make_trace, home, office, level):
        trace = make_trace(30)

        result = apply_sharing_level(level, trace, home, office, random.Random(3))

        assert result == anonymize(trace, home, office, random.Random(3))

    def test_unknown_level_raises(self, make_trace, home, office):
        with pytest.raises(ValueError):
            apply_sharing_level("friends-only", make_trace(5), home, office)

    def test_re_sharing_anonymous_route_is_unchanged(self, make_trace, home, office):
        first = apply_sharing_level(SharingLevel.ANONYMOUS, make_trace(100), home, office, random.Random(11))

        again = apply_sharing_level(
            SharingLevel.ANONYMOUS,
            first.trace,
            first.start,
            first.end,
            random.Random(12),
            current=SharingLevel.ANONYMOUS,
        )

        assert len(again.trace) == 80
        assert again == first

    def test_becoming_anonymous_starts_from_original_trace(self, make_trace, home, office):
        original = make_trace(100)

        result = apply_sharing_level(
            "anonymous",
            original[:50],
            home,
            office,
            random.Random(4),
            current="public",
            original_trace=original,
        )

        assert result.trace == tuple(original[10:90])
        assert result.start.name == APPROXIMATE_LOCATION_NAME

    def test_leaving_anonymous_restores_original_trace(self, make_trace, home, office):
        original = make_trace(100)
        shared = anonymize(original, home, office, random.Random(5))

        result = apply_sharing_level(
            SharingLevel.PUBLIC,
            shared.trace,
            shared.start,
            shared.end,
            current=SharingLevel.ANONYMOUS,
            original_trace=original,
        )

        assert result.trace == tuple(original)
        assert result.start == shared.start

    def test_leaving_anonymous_without_original_keeps_stored_trace(self, make_trace, home, office):
        shared = anonymize(make_trace(100), home, office, random.Random(5))

        result = apply_sharing_level("private", shared.trace, shared.start, shared.end, current="anonymous")

        assert result.trace == shared.trace

    def test_unknown_current_level_raises(self, make_trace, home, office):
        with pytest.raises(ValueError):
            apply_sharing_level("public", make_trace(5), home, office, current="friends-only")
