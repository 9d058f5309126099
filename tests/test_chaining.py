"""Tests for exact and traced contour chaining."""

import math
import random

import pytest

from dxfcam.core.chaining import SpatialIndex, chain_exact, chain_segments, chain_traced
from dxfcam.core.geometry import Arc, Line, Point, arc_from_center
from dxfcam.core.operation import ChainMode, Operation


def L(x1, y1, x2, y2) -> Line:
    return Line(Point(x1, y1), Point(x2, y2))


def _key(seg):
    """Direction-free identity of a segment."""
    ends = sorted([seg.a.as_tuple(), seg.b.as_tuple()])
    return (type(seg).__name__, tuple(ends))


def _assert_conserved(segments, contours):
    out = sorted(_key(s) for c in contours for s in c)
    assert out == sorted(_key(s) for s in segments)


def _assert_contiguous(contours, tol):
    for c in contours:
        assert len(c) > 0
        for prev, nxt in zip(c, c[1:]):
            assert prev.b.distance(nxt.a) <= tol


@pytest.fixture
def square() -> list[Line]:
    return [L(0, 0, 1, 0), L(1, 0, 1, 1), L(1, 1, 0, 1), L(0, 1, 0, 0)]


# ---------------------------------------------------------------------------
# SpatialIndex
# ---------------------------------------------------------------------------


class TestSpatialIndex:
    def test_near_finds_neighbouring_cells(self):
        idx = SpatialIndex(0.1)
        idx.insert(Point(0.0, 0.0), 3)
        idx.insert(Point(0.09, 0.0), 1)
        idx.insert(Point(5.0, 5.0), 2)
        assert idx.near(Point(0.05, 0.0)) == [1, 3]
        assert idx.near(Point(5.0, 5.05)) == [2]
        assert len(idx) == 3

    def test_zero_cell_size_is_usable(self):
        idx = SpatialIndex(0.0)
        idx.insert(Point(1.0, 1.0), 0)
        assert idx.near(Point(1.0, 1.0)) == [0]


# ---------------------------------------------------------------------------
# Exact mode
# ---------------------------------------------------------------------------


class TestChainExact:
    def test_square_in_order(self, square):
        contours = chain_exact(square, 0.01)
        assert len(contours) == 1
        assert contours[0] == square

    def test_shuffled_and_reversed_input(self, square):
        segs = [square[2], square[0].reversed(), square[3], square[1].reversed()]
        contours = chain_exact(segs, 0.01)
        assert len(contours) == 1
        assert len(contours[0]) == 4
        _assert_conserved(segs, contours)
        _assert_contiguous(contours, 0.01)

    def test_grows_backward(self):
        segs = [L(1, 0, 2, 0), L(0, 0, 1, 0)]
        (contour,) = chain_exact(segs, 0.01)
        assert contour == [L(0, 0, 1, 0), L(1, 0, 2, 0)]

    def test_far_end_match_is_reversed(self):
        segs = [L(0, 0, 1, 0), L(2, 0, 1, 0)]
        (contour,) = chain_exact(segs, 0.01)
        assert contour[1] == L(1, 0, 2, 0)

    def test_disjoint_segments_stay_apart(self):
        segs = [L(0, 0, 1, 0), L(5, 5, 6, 5)]
        contours = chain_exact(segs, 0.01)
        assert contours == [[segs[0]], [segs[1]]]

    def test_gap_within_tolerance(self):
        segs = [L(0, 0, 1, 0), L(1.03, 0, 2, 0)]
        assert len(chain_exact(segs, 0.05)) == 1
        assert len(chain_exact(segs, 0.01)) == 2

    def test_arcs_and_lines_chain(self):
        arc = arc_from_center(Point(1, 1), 1.0, -math.pi / 2, 0.0)  # (1,0) → (2,1)
        segs = [L(0, 0, 1, 0), L(2, 1, 2, 3), arc]
        (contour,) = chain_exact(segs, 0.01)
        assert isinstance(contour[1], Arc)
        _assert_contiguous([contour], 0.01)

    def test_reversed_arc_keeps_circle(self):
        arc = arc_from_center(Point(0, 0), 1.0, 0.0, math.pi / 2)  # (1,0) → (0,1)
        segs = [L(-1, 1, 0, 1), arc]
        (contour,) = chain_exact(segs, 0.01)
        flipped = contour[1]
        assert isinstance(flipped, Arc)
        assert not flipped.ccw
        assert flipped.b.x == pytest.approx(1.0)

    def test_conservation_random_soup(self):
        rng = random.Random(7)
        segs = []
        for _ in range(60):
            x, y = rng.randint(0, 6), rng.randint(0, 6)
            dx, dy = rng.choice([(1, 0), (0, 1), (-1, 0), (0, -1)])
            segs.append(L(x, y, x + dx, y + dy))
        contours = chain_exact(segs, 0.01)
        _assert_conserved(segs, contours)
        _assert_contiguous(contours, 0.01)

    def test_deterministic(self, square):
        segs = square + [L(5, 5, 6, 5)]
        assert chain_exact(segs, 0.01) == chain_exact(segs, 0.01)

    def test_empty(self):
        assert chain_exact([], 0.01) == []


# ---------------------------------------------------------------------------
# Tracing mode
# ---------------------------------------------------------------------------


class TestChainTraced:
    def test_prefers_least_heading_deviation(self):
        segs = [L(0, 0, 1, 0), L(1, 0, 1, 1), L(1, 0, 2, 0)]
        contours = chain_traced(segs, 0.05, 12.0)
        assert contours == [[segs[0], segs[2]], [segs[1]]]

    def test_gentle_turn_chains(self):
        segs = [L(0, 0, 1, 0), L(1, 0, 2, 0.1)]
        assert len(chain_traced(segs, 0.05, 12.0)) == 1

    def test_sharp_turn_stops(self):
        segs = [L(0, 0, 1, 0), L(1, 0, 2, 1)]
        assert len(chain_traced(segs, 0.05, 12.0)) == 2

    def test_only_start_points_match(self):
        # Second segment touches with its end, which tracing never uses
        segs = [L(0, 0, 1, 0), L(2, 0, 1, 0)]
        assert len(chain_traced(segs, 0.05, 180.0)) == 2

    def test_arcs_pass_through(self):
        arc = arc_from_center(Point(0, 0), 1.0, 0.0, 1.0)
        segs = [L(-2, 0, -1, 0), arc]
        contours = chain_traced(segs, 0.05, 12.0)
        assert contours == [[segs[0]], [arc]]

    def test_conservation(self):
        segs = [L(0, 0, 1, 0), L(1, 0, 2, 0), L(1, 0, 1, 1), L(2, 0, 3, 0.05)]
        contours = chain_traced(segs, 0.05, 12.0)
        _assert_conserved(segs, contours)
        _assert_contiguous(contours, 0.05)


class TestDispatch:
    def test_exact(self, square):
        op = Operation(chain_mode=ChainMode.EXACT, chain_tolerance=0.01)
        assert len(chain_segments(square, op)) == 1

    def test_trace(self, square):
        # Every corner is a 90° turn, so tracing yields one contour per side
        op = Operation(chain_mode=ChainMode.TRACE, chain_tolerance=0.01)
        assert len(chain_segments(square, op)) == 4
