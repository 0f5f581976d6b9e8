import pytest

from route_engine.models.domain import RouteLeg, Waypoint
from route_engine.services.routing.segments import (
    PALETTE_SIZE,
    OverlapParams,
    build_segments,
    has_significant_overlap,
)


def _wp(wid: str, lat: float, lon: float) -> Waypoint:
    return Waypoint(id=wid, latitude=lat, longitude=lon)


def _line(start_lon: float, end_lon: float, count: int, lat: float = 0.0) -> list[tuple[float, float]]:
    step = (end_lon - start_lon) / (count - 1)
    return [(lat, round(start_lon + step * i, 6)) for i in range(count)]


def test_one_segment_per_consecutive_pair():
    waypoints = [_wp(str(i), 0.0, i * 0.01) for i in range(10)]
    coordinates = _line(0.0, 0.09, 91)
    segments = build_segments(waypoints, coordinates)

    assert len(segments) == len(waypoints) - 1
    assert [s.index for s in segments] == list(range(9))
    assert [s.suggested_color_index for s in segments] == [i % PALETTE_SIZE for i in range(9)]
    assert segments[8].suggested_color_index == 1
    assert segments[0].start_waypoint.id == "0"
    assert segments[0].end_waypoint.id == "1"


def test_fewer_than_two_waypoints_gives_no_segments():
    assert build_segments([_wp("A", 0.0, 0.0)], [(0.0, 0.0), (0.0, 1.0)]) == []
    assert build_segments([], []) == []


def test_approximate_segments_slice_path_and_estimate_timing():
    waypoints = [_wp("A", 0.0, 0.0), _wp("B", 0.0, 0.05), _wp("C", 0.0, 0.1)]
    coordinates = _line(0.0, 0.1, 11)
    segments = build_segments(waypoints, coordinates)

    assert segments[0].coordinates == coordinates[:6]
    assert segments[1].coordinates == coordinates[5:]
    # 0.05 degrees of longitude at the equator is about 5.6 km
    assert segments[0].distance_km == pytest.approx(5.6, abs=0.05)
    assert segments[0].duration_minutes == 11


def test_stops_snapping_to_same_sample_get_straight_segment():
    waypoints = [_wp("A", 1.0, 1.0), _wp("B", 1.0, 1.001)]
    segments = build_segments(waypoints, [(0.0, 0.0), (5.0, 5.0)])
    assert segments[0].coordinates == [(1.0, 1.0), (1.0, 1.001)]


def test_legs_provide_geometry_and_timing():
    waypoints = [_wp("A", 0.0, 0.0), _wp("B", 0.0, 0.01), _wp("C", 0.0, 0.02)]
    forward = _line(0.0, 0.01, 11)
    onward = _line(0.01, 0.02, 11)
    legs = [
        RouteLeg(distance_km=1.4, duration_minutes=3, coordinates=forward),
        RouteLeg(distance_km=1.2, duration_minutes=2, coordinates=onward),
    ]
    segments = build_segments(waypoints, forward + onward[1:], legs)

    assert [s.distance_km for s in segments] == [1.4, 1.2]
    assert [s.duration_minutes for s in segments] == [3, 2]
    assert segments[1].coordinates == onward


def test_mismatched_legs_fall_back_to_slicing():
    waypoints = [_wp("A", 0.0, 0.0), _wp("B", 0.0, 0.05), _wp("C", 0.0, 0.1)]
    coordinates = _line(0.0, 0.1, 11)
    legs = [RouteLeg(distance_km=99.0, duration_minutes=99, coordinates=coordinates)]
    segments = build_segments(waypoints, coordinates, legs)

    assert len(segments) == 2
    assert segments[0].distance_km != 99.0


def test_retraced_leg_is_flagged_as_return():
    waypoints = [_wp("A", 0.0, 0.0), _wp("B", 0.0, 0.01), _wp("A2", 0.0, 0.0), _wp("D", 0.5, 0.5)]
    forward = _line(0.0, 0.01, 11)
    back = list(reversed(forward))
    elsewhere = [(0.0 + i * 0.05, 0.0 + i * 0.05) for i in range(11)]
    legs = [
        RouteLeg(distance_km=1.1, duration_minutes=2, coordinates=forward),
        RouteLeg(distance_km=1.1, duration_minutes=2, coordinates=back),
        RouteLeg(distance_km=78.6, duration_minutes=60, coordinates=elsewhere[1:]),
    ]
    segments = build_segments(waypoints, forward + back[1:] + elsewhere[1:], legs)

    assert [s.is_return_segment for s in segments] == [False, True, False]


def test_first_segment_is_never_a_return():
    waypoints = [_wp("A", 0.0, 0.0), _wp("B", 0.0, 0.01)]
    segments = build_segments(waypoints, _line(0.0, 0.01, 11))
    assert segments[0].is_return_segment is False


def test_overlap_requires_enough_points():
    short = [(0.0, 0.0), (0.0, 0.001), (0.0, 0.002), (0.0, 0.003)]
    assert not has_significant_overlap(short, short)


def test_overlap_is_symmetric():
    a = _line(0.0, 0.01, 40)
    b = _line(0.005, 0.02, 120)
    c = _line(0.0, 0.01, 30, lat=1.0)
    for first, second in [(a, b), (a, c), (b, c), (a, list(reversed(a)))]:
        assert has_significant_overlap(first, second) == has_significant_overlap(second, first)


def test_identical_paths_overlap_and_distant_paths_do_not():
    path = _line(0.0, 0.01, 25)
    assert has_significant_overlap(path, list(reversed(path)))
    assert not has_significant_overlap(path, _line(0.0, 0.01, 25, lat=1.0))


def test_overlap_threshold_is_configurable():
    a = _line(0.0, 0.01, 25)
    b = _line(0.0, 0.01, 25, lat=0.0005)
    assert not has_significant_overlap(a, b)
    assert has_significant_overlap(a, b, OverlapParams(threshold_degrees=0.001))


def test_short_consecutive_legs_sharing_a_stop_count_as_overlapping():
    waypoints = [_wp("A", 0.0, 0.0), _wp("B", 0.0, 0.005), _wp("C", 0.0, 0.01)]
    short_legs = [
        RouteLeg(distance_km=0.6, duration_minutes=1, coordinates=_line(0.0, 0.005, 6)),
        RouteLeg(distance_km=0.6, duration_minutes=1, coordinates=_line(0.005, 0.01, 6)),
    ]
    segments = build_segments(waypoints, _line(0.0, 0.01, 11), short_legs)
    assert [s.is_return_segment for s in segments] == [False, True]

    waypoints = [_wp("A", 0.0, 0.0), _wp("B", 0.0, 0.01), _wp("C", 0.0, 0.02)]
    long_legs = [
        RouteLeg(distance_km=1.1, duration_minutes=2, coordinates=_line(0.0, 0.01, 11)),
        RouteLeg(distance_km=1.1, duration_minutes=2, coordinates=_line(0.01, 0.02, 11)),
    ]
    segments = build_segments(waypoints, _line(0.0, 0.02, 21), long_legs)
    assert [s.is_return_segment for s in segments] == [False, False]
