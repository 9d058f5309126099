"""Contour post-processing: collinear merge, travel ordering, fusion."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from .chaining import Contour
from .geometry import EPS, Arc, Line, Point
from .operation import Operation


def reverse_contour(contour: Contour) -> Contour:
    """Traverse *contour* the other way: reverse the order and flip each segment."""
    return [seg.reversed() for seg in reversed(contour)]


def contour_start(contour: Contour) -> Point:
    return contour[0].a


def contour_end(contour: Contour) -> Point:
    return contour[-1].b


def _continues_straight(run: Line, p: Point, eps: float) -> bool:
    """True if *p* extends *run* along its own direction."""
    ux = run.b.x - run.a.x
    uy = run.b.y - run.a.y
    vx = p.x - run.a.x
    vy = p.y - run.a.y
    cross = ux * vy - uy * vx
    if abs(cross) > eps:
        return False
    # Reject fold-backs; they are collinear but would erase geometry
    return (p.x - run.b.x) * ux + (p.y - run.b.y) * uy > 0


def merge_collinear(contour: Contour, tolerance: float) -> Contour:
    """Collapse runs of touching collinear lines into single lines.

    The collinearity threshold on the cross product is ``tolerance**2``.
    Arcs pass through unchanged; zero-length lines are dropped.
    """
    eps = tolerance * tolerance
    out: Contour = []
    run: Optional[Line] = None

    for seg in contour:
        if isinstance(seg, Arc):
            if run is not None:
                out.append(run)
                run = None
            out.append(seg)
            continue
        if not isinstance(seg, Line):
            raise TypeError(f"Unknown segment type: {type(seg).__name__}")
        if seg.length < EPS:
            continue
        if run is None:
            run = seg
        elif (
            run.b.distance(seg.a) <= tolerance
            and _continues_straight(run, seg.b, eps)
        ):
            run = Line(run.a, seg.b)
        else:
            out.append(run)
            run = seg

    if run is not None:
        out.append(run)
    return out


def order_nearest(
    contours: Sequence[Contour],
    start: Point = Point(0.0, 0.0),
) -> list[Contour]:
    """Greedy nearest-neighbour ordering of *contours*.

    From the cursor (initially *start*, then the end of the last chosen
    contour) pick the unvisited contour whose start or end is closest.  A
    contour entered at its end is reversed.  This is a greedy heuristic; it
    reduces rapid travel but does not find the shortest tour.
    """
    if not contours:
        return []
    starts = np.array([contour_start(c).as_tuple() for c in contours], dtype=float)
    ends = np.array([contour_end(c).as_tuple() for c in contours], dtype=float)
    visited = np.zeros(len(contours), dtype=bool)

    ordered: list[Contour] = []
    cursor = np.array(start.as_tuple(), dtype=float)
    for _ in range(len(contours)):
        d_start = np.hypot(starts[:, 0] - cursor[0], starts[:, 1] - cursor[1])
        d_end = np.hypot(ends[:, 0] - cursor[0], ends[:, 1] - cursor[1])
        d_start[visited] = np.inf
        d_end[visited] = np.inf

        i_start = int(np.argmin(d_start))
        i_end = int(np.argmin(d_end))
        if d_start[i_start] <= d_end[i_end]:
            idx, flip = i_start, False
        else:
            idx, flip = i_end, True

        visited[idx] = True
        chosen = reverse_contour(contours[idx]) if flip else list(contours[idx])
        ordered.append(chosen)
        cursor = np.array(contour_end(chosen).as_tuple(), dtype=float)

    return ordered


def fuse_continuous(contours: Sequence[Contour], tolerance: float) -> list[Contour]:
    """Concatenate consecutive contours whose end and start coincide."""
    fused: list[Contour] = []
    for contour in contours:
        if fused and contour_end(fused[-1]).distance(contour_start(contour)) <= tolerance:
            fused[-1] = fused[-1] + list(contour)
        else:
            fused.append(list(contour))
    return fused


def postprocess_contours(
    contours: Sequence[Contour],
    operation: Operation,
    start: Point = Point(0.0, 0.0),
) -> list[Contour]:
    """Apply merge, ordering and fusion as enabled on *operation*."""
    result: list[Contour] = [list(c) for c in contours]
    if operation.merge_collinear:
        result = [merge_collinear(c, operation.chain_tolerance) for c in result]
    result = [c for c in result if c]
    if operation.reorder:
        result = order_nearest(result, start)
    if operation.keeps_tool_down:
        result = fuse_continuous(result, operation.fusion_tolerance)
    return result


def contour_segment_count(contours: Sequence[Contour]) -> int:
    return sum(len(c) for c in contours)
