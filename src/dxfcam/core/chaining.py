"""Contour chaining: unordered segments -> ordered continuous contours.

Two strategies share one grid-hash index:

``chain_exact``
    Endpoint coincidence within a tolerance.  Lines and arcs.  Each chain
    grows forward from its end and then backward from its start; a segment
    that touches with its far end is taken reversed.

``chain_traced``
    For noisy, hand-traced line soups.  Endpoints are expected to be
    snapped already.  Only start points are indexed, and the chain end is
    extended by the unused candidate whose heading deviates least from the
    current heading, provided the deviation is under the angular tolerance.

Both consume every input segment exactly once and are deterministic for a
given input order (ties resolve to the lowest segment index).
"""

from __future__ import annotations

import math
from collections import defaultdict, deque
from typing import Callable, Optional, Sequence

from .geometry import EPS, Arc, Line, Point, Segment
from .operation import ChainMode, Operation

Contour = list[Segment]


class SpatialIndex:
    """Grid hash from quantized cell to segment indices.

    Cell size equals the lookup tolerance, so every point within tolerance
    of a query lies in the 3x3 block of cells around it.
    """

    def __init__(self, cell_size: float):
        self.cell_size = max(cell_size, EPS)
        self._cells: dict[tuple[int, int], list[int]] = defaultdict(list)

    def _key(self, p: Point) -> tuple[int, int]:
        return (
            math.floor(p.x / self.cell_size),
            math.floor(p.y / self.cell_size),
        )

    def insert(self, p: Point, index: int) -> None:
        self._cells[self._key(p)].append(index)

    def near(self, p: Point) -> list[int]:
        """Indices stored in the cells around *p*, ascending."""
        cx, cy = self._key(p)
        found: list[int] = []
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                found.extend(self._cells.get((cx + dx, cy + dy), ()))
        found.sort()
        return found

    def __len__(self) -> int:
        return sum(len(v) for v in self._cells.values())


def _first_within(
    candidates: list[int],
    used: list[bool],
    point_of: Callable[[int], Point],
    p: Point,
    tolerance: float,
) -> Optional[int]:
    for idx in candidates:
        if not used[idx] and point_of(idx).distance(p) <= tolerance:
            return idx
    return None


def chain_exact(segments: Sequence[Segment], tolerance: float) -> list[Contour]:
    """Chain *segments* by endpoint coincidence within *tolerance*."""
    starts = SpatialIndex(tolerance)
    ends = SpatialIndex(tolerance)
    for i, seg in enumerate(segments):
        starts.insert(seg.a, i)
        ends.insert(seg.b, i)

    used = [False] * len(segments)

    def start_of(i: int) -> Point:
        return segments[i].a

    def end_of(i: int) -> Point:
        return segments[i].b

    def take_after(p: Point) -> Optional[Segment]:
        idx = _first_within(starts.near(p), used, start_of, p, tolerance)
        if idx is not None:
            used[idx] = True
            return segments[idx]
        idx = _first_within(ends.near(p), used, end_of, p, tolerance)
        if idx is not None:
            used[idx] = True
            return segments[idx].reversed()
        return None

    def take_before(p: Point) -> Optional[Segment]:
        idx = _first_within(ends.near(p), used, end_of, p, tolerance)
        if idx is not None:
            used[idx] = True
            return segments[idx]
        idx = _first_within(starts.near(p), used, start_of, p, tolerance)
        if idx is not None:
            used[idx] = True
            return segments[idx].reversed()
        return None

    contours: list[Contour] = []
    for i, seg in enumerate(segments):
        if used[i]:
            continue
        used[i] = True
        chain: deque[Segment] = deque([seg])

        while True:
            nxt = take_after(chain[-1].b)
            if nxt is None:
                break
            chain.append(nxt)

        while True:
            prev = take_before(chain[0].a)
            if prev is None:
                break
            chain.appendleft(prev)

        contours.append(list(chain))

    return contours


def chain_traced(
    segments: Sequence[Segment],
    tolerance: float,
    angle_tolerance_deg: float,
) -> list[Contour]:
    """Chain snapped lines by endpoint proximity and heading similarity.

    Heading deviation is the plain absolute difference of the two
    ``atan2`` headings, without wrap-around.  Arcs are not chained and come
    out as single-segment contours in input order.
    """
    angle_tol = math.radians(angle_tolerance_deg)
    starts = SpatialIndex(tolerance)
    for i, seg in enumerate(segments):
        if isinstance(seg, Line):
            starts.insert(seg.a, i)

    used = [False] * len(segments)
    contours: list[Contour] = []

    for i, seg in enumerate(segments):
        if used[i]:
            continue
        used[i] = True
        if isinstance(seg, Arc):
            contours.append([seg])
            continue
        if not isinstance(seg, Line):
            raise TypeError(f"Unknown segment type: {type(seg).__name__}")

        chain: Contour = [seg]
        current = seg
        while True:
            heading = current.heading
            best: Optional[int] = None
            best_dev = angle_tol
            for idx in starts.near(current.b):
                if used[idx]:
                    continue
                cand = segments[idx]
                if cand.a.distance(current.b) > tolerance:
                    continue
                deviation = abs(heading - cand.heading)
                if deviation < best_dev:
                    best, best_dev = idx, deviation
            if best is None:
                break
            used[best] = True
            current = segments[best]
            chain.append(current)

        contours.append(chain)

    return contours


def chain_segments(segments: Sequence[Segment], operation: Operation) -> list[Contour]:
    """Dispatch to the chainer selected by ``operation.chain_mode``."""
    if operation.chain_mode is ChainMode.EXACT:
        return chain_exact(segments, operation.chain_tolerance)
    if operation.chain_mode is ChainMode.TRACE:
        return chain_traced(
            segments, operation.chain_tolerance, operation.angle_tolerance,
        )
    raise ValueError(f"Unknown chain mode: {operation.chain_mode!r}")
