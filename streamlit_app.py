from __future__ import annotations

import random
from pathlib import Path

import streamlit as st

from route_privacy.anonymize import apply_sharing_level
from route_privacy.csv_io import load_trace, write_endpoints_json, write_trace
from route_privacy.geo import elevation_gain_m
from route_privacy.metrics import format_distance, format_duration, format_pace, pace_min_per_km, route_metrics
from route_privacy.models import DEFAULT_TZ, GeoPoint, RouteType, SharingLevel, TracePoint
from route_privacy.plausibility import check_plausibility


@st.cache_data(show_spinner=False)
def _load_trace(trace_csv: str, mtime: float) -> list[TracePoint]:
    _ = mtime  # part of cache key so updated files reload automatically
    points, _summary = load_trace(trace_csv)
    return points


def _trace_rows(points: list[TracePoint]) -> list[dict[str, object]]:
    return [{"lat": p.lat, "lon": p.lng} for p in points]


def main() -> None:
    st.set_page_config(page_title="Route privacy review", layout="wide")
    st.title("Route privacy review: shared copy and plausibility")

    with st.sidebar:
        st.subheader("Input")
        trace_csv = st.text_input("Trace CSV path", value="trace.csv")
        tz_name = st.text_input("Timezone (IANA)", value=DEFAULT_TZ)
        route_type = st.selectbox("Route type", [t.value for t in RouteType])

        st.subheader("Sharing")
        level = st.selectbox("Sharing level", [s.value for s in SharingLevel], index=1)
        start_name = st.text_input("Start place name", value="")
        end_name = st.text_input("End place name", value="")
        seed_text = st.text_input("Fuzz seed (empty = random)", value="")
        out_csv = st.text_input("Export path", value="shared.csv")

    p = Path(trace_csv)
    if not p.exists():
        st.error(f"File not found: {trace_csv!r}")
        return

    try:
        points = _load_trace(trace_csv, p.stat().st_mtime)
    except (KeyError, ValueError) as exc:
        st.exception(exc)
        return
    if not points:
        st.warning("The trace has no parseable points.")
        return

    metrics = route_metrics(points, route_type)
    verdict = check_plausibility(metrics)

    st.subheader("Route")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Distance", format_distance(metrics.distance_m))
    c2.metric("Duration", format_duration(metrics.duration_s))
    c3.metric("Pace (min/km)", format_pace(pace_min_per_km(metrics.distance_m, metrics.duration_s)))
    c4.metric("Elevation gain", f"{elevation_gain_m(points):.0f} m")

    st.subheader("Plausibility")
    if verdict.is_implausible:
        st.error("Flagged for review")
        for reason in verdict.reasons:
            st.write(f"- {reason}")
    else:
        st.success("No plausibility issues")

    try:
        rng = random.Random(int(seed_text)) if seed_text.strip() else None
    except ValueError:
        st.error(f"Seed must be an integer: {seed_text!r}")
        return

    start = GeoPoint(lat=points[0].lat, lng=points[0].lng, name=start_name)
    end = GeoPoint(lat=points[-1].lat, lng=points[-1].lng, name=end_name)
    shared = apply_sharing_level(level, points, start, end, rng)

    st.subheader("Shared copy")
    c1, c2, c3 = st.columns(3)
    c1.metric("Points kept", f"{len(shared.trace)}/{len(points)}")
    c2.metric("Start", f"{shared.start.lat:.5f}, {shared.start.lng:.5f}", help=shared.start.name)
    c3.metric("End", f"{shared.end.lat:.5f}, {shared.end.lng:.5f}", help=shared.end.name)

    left, right = st.columns(2)
    with left:
        st.caption("Original trace")
        st.map(_trace_rows(points))
    with right:
        st.caption("Shared trace")
        if shared.trace:
            st.map(_trace_rows(list(shared.trace)))
        else:
            st.info("Nothing left after endpoint blurring.")

    if st.button("Export shared trace", type="primary"):
        written = write_trace(shared.trace, out_csv, tz_name)
        endpoints_json = str(Path(out_csv).with_suffix(".endpoints.json"))
        write_endpoints_json(shared, endpoints_json)
        st.success(f"Exported: {out_csv} (rows={written}), endpoints: {endpoints_json}")

    st.caption(
        "Anonymous sharing drops points near both ends of the trace and moves the displayed "
        "start/end by up to 0.001 degrees; the preview changes on every rerun unless a seed is set."
    )


if __name__ == "__main__":
    main()
