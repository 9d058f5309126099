"""Tests for segment geometry, bulge conversion, snapping and origin shift."""

import math

import pytest

from dxfcam.core.geometry import (
    Arc,
    Line,
    Point,
    arc_from_center,
    bounding_box,
    bulge_to_arc,
    is_degenerate,
    shift_origin,
    snap_point,
    snap_segments,
    snap_value,
)
from dxfcam.core.operation import OriginMode


def _residual(arc: Arc, p: Point) -> float:
    return abs(arc.center.distance(p) - arc.radius)


# ---------------------------------------------------------------------------
# Bulge conversion
# ---------------------------------------------------------------------------


class TestBulgeToArc:
    def test_quarter_arc_ccw(self):
        p, q = Point(0.0, 0.0), Point(1.0, 0.0)
        arc = bulge_to_arc(p, q, math.tan(math.pi / 8))
        assert isinstance(arc, Arc)
        assert arc.ccw
        assert arc.radius == pytest.approx(math.sqrt(0.5))
        assert arc.center.x == pytest.approx(0.5)
        assert arc.center.y == pytest.approx(0.5)
        assert arc.sweep == pytest.approx(math.pi / 2)

    def test_endpoints_on_circle(self):
        p, q = Point(0.3, -1.2), Point(2.7, 0.4)
        for bulge in (0.2, -0.2, 0.9, -0.9, 1.0, 1.7, -2.5):
            arc = bulge_to_arc(p, q, bulge)
            assert _residual(arc, arc.a) < 1e-9
            assert _residual(arc, arc.b) < 1e-9

    def test_angles_reproduce_endpoints(self):
        arc = bulge_to_arc(Point(1.0, 1.0), Point(3.0, 2.0), 0.6)
        start = arc.point_at_angle(arc.start_angle)
        end = arc.point_at_angle(arc.end_angle)
        assert start.x == pytest.approx(1.0) and start.y == pytest.approx(1.0)
        assert end.x == pytest.approx(3.0) and end.y == pytest.approx(2.0)

    def test_negative_bulge_is_clockwise(self):
        arc = bulge_to_arc(Point(0.0, 0.0), Point(1.0, 0.0), -math.tan(math.pi / 8))
        assert not arc.ccw
        assert arc.center.y == pytest.approx(-0.5)
        assert arc.sweep == pytest.approx(-math.pi / 2)

    def test_semicircle(self):
        arc = bulge_to_arc(Point(0.0, 0.0), Point(1.0, 0.0), 1.0)
        assert arc.center.x == pytest.approx(0.5)
        assert arc.center.y == pytest.approx(0.0)
        assert arc.radius == pytest.approx(0.5)
        assert arc.length == pytest.approx(math.pi * 0.5)

    def test_major_arc_sweep_matches_bulge(self):
        bulge = 2.0
        arc = bulge_to_arc(Point(0.0, 0.0), Point(1.0, 0.0), bulge)
        assert abs(arc.sweep) == pytest.approx(4 * math.atan(bulge))
        assert arc.center.y < 0

    def test_zero_bulge_is_line(self):
        seg = bulge_to_arc(Point(0.0, 0.0), Point(1.0, 0.0), 0.0)
        assert seg == Line(Point(0.0, 0.0), Point(1.0, 0.0))

    def test_zero_chord_degrades_to_empty_line(self):
        seg = bulge_to_arc(Point(1.0, 1.0), Point(1.0, 1.0), 0.5)
        assert isinstance(seg, Line)
        assert is_degenerate(seg)


# ---------------------------------------------------------------------------
# Segments
# ---------------------------------------------------------------------------


class TestSegments:
    def test_line_reverse(self):
        line = Line(Point(0, 0), Point(2, 1))
        assert line.reversed() == Line(Point(2, 1), Point(0, 0))

    def test_arc_reverse_flips_direction_and_angles(self):
        arc = arc_from_center(Point(0, 0), 1.0, 0.0, math.pi / 2, ccw=True)
        rev = arc.reversed()
        assert rev.a == arc.b and rev.b == arc.a
        assert rev.ccw is False
        assert rev.start_angle == arc.end_angle
        assert rev.end_angle == arc.start_angle
        assert rev.length == pytest.approx(arc.length)
        assert rev.sweep == pytest.approx(-arc.sweep)

    def test_arc_contains_angle(self):
        arc = arc_from_center(Point(0, 0), 1.0, 0.0, math.pi / 2)
        assert arc.contains_angle(math.pi / 4)
        assert not arc.contains_angle(math.pi)
        assert not arc.reversed().contains_angle(math.pi)

    def test_scaled(self):
        arc = arc_from_center(Point(1, 1), 2.0, 0.0, math.pi)
        big = arc.scaled(2.0)
        assert big.radius == pytest.approx(4.0)
        assert big.center == Point(2, 2)


# ---------------------------------------------------------------------------
# Snapping
# ---------------------------------------------------------------------------


class TestSnapping:
    def test_snap_value(self):
        assert snap_value(0.074, 0.05) == pytest.approx(0.05)
        assert snap_value(0.076, 0.05) == pytest.approx(0.1)
        assert snap_value(-0.074, 0.05) == pytest.approx(-0.05)

    def test_snap_point_axes_independent(self):
        p = snap_point(Point(1.02, 2.98), 0.05)
        assert p.x == pytest.approx(1.0)
        assert p.y == pytest.approx(3.0)

    def test_collapsed_lines_dropped(self):
        segs = [
            Line(Point(0, 0), Point(0.01, 0)),
            Line(Point(0, 0), Point(1.01, 0)),
        ]
        snapped = snap_segments(segs, 0.05)
        assert len(snapped) == 1
        assert snapped[0].b.x == pytest.approx(1.0)

    def test_arcs_untouched(self):
        arc = arc_from_center(Point(0.013, 0.0), 1.0, 0.0, 1.0)
        assert snap_segments([arc], 0.05) == [arc]

    def test_invalid_grid(self):
        with pytest.raises(ValueError, match="snap grid"):
            snap_segments([], 0.0)


# ---------------------------------------------------------------------------
# Bounds and origin shift
# ---------------------------------------------------------------------------


class TestOriginShift:
    def test_bounds_include_arc_extrema(self):
        upper = arc_from_center(Point(0, 0), 1.0, 0.0, math.pi)
        minx, miny, maxx, maxy = bounding_box([upper])
        assert (minx, maxx) == pytest.approx((-1.0, 1.0))
        assert miny == pytest.approx(0.0, abs=1e-9)
        assert maxy == pytest.approx(1.0)

    def test_bounds_of_full_circle(self):
        halves = [
            arc_from_center(Point(0, 0), 1.0, 0.0, math.pi),
            arc_from_center(Point(0, 0), 1.0, math.pi, 2 * math.pi),
        ]
        assert bounding_box(halves) == pytest.approx((-1.0, -1.0, 1.0, 1.0))

    def test_center(self):
        segs = [Line(Point(0, 0), Point(2, 0)), Line(Point(2, 0), Point(2, 4))]
        shifted = shift_origin(segs, OriginMode.CENTER)
        assert shifted[0].a == Point(-1, -2)
        assert shifted[1].b == Point(1, 2)

    @pytest.mark.parametrize("mode, expected", [
        (OriginMode.LOWER_LEFT, Point(0, 0)),
        (OriginMode.LOWER_RIGHT, Point(-2, 0)),
        (OriginMode.UPPER_LEFT, Point(0, -4)),
        (OriginMode.UPPER_RIGHT, Point(-2, -4)),
        (OriginMode.NONE, Point(1, 1)),
    ])
    def test_corners(self, mode, expected):
        segs = [Line(Point(1, 1), Point(3, 5))]
        assert shift_origin(segs, mode)[0].a == expected

    def test_arc_center_moves_with_geometry(self):
        arc = arc_from_center(Point(5, 5), 1.0, 0.0, math.pi / 2)
        shifted = shift_origin([arc], OriginMode.LOWER_LEFT)[0]
        # Bounds are (5, 5)-(6, 6), so the center lands on the origin
        assert shifted.center.x == pytest.approx(0.0)
        assert shifted.center.y == pytest.approx(0.0)
        assert _residual(shifted, shifted.a) < 1e-9
