"""Canonical 2D segment geometry and normalization.

Segments are a closed variant: every consumer dispatches on ``Line`` or
``Arc`` and raises ``TypeError`` for anything else.  Angles are radians.

Normalization steps
-------------------
1. Bulge-encoded polyline edges become ``Arc`` segments
   (:func:`bulge_to_arc`).
2. Optional snapping of line endpoints to a grid (:func:`snap_segments`),
   used before tracing-mode chaining.
3. Optional origin shift so a bounding-box reference point becomes (0, 0)
   (:func:`shift_origin`).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from shapely.geometry import MultiPoint

from .operation import OriginMode

EPS = 1e-9
TWO_PI = 2.0 * math.pi


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def distance(self, other: Point) -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def translated(self, dx: float, dy: float) -> Point:
        return Point(self.x + dx, self.y + dy)

    def scaled(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Line:
    a: Point
    b: Point

    @property
    def length(self) -> float:
        return self.a.distance(self.b)

    @property
    def heading(self) -> float:
        return math.atan2(self.b.y - self.a.y, self.b.x - self.a.x)

    def reversed(self) -> Line:
        return Line(self.b, self.a)

    def translated(self, dx: float, dy: float) -> Line:
        return Line(self.a.translated(dx, dy), self.b.translated(dx, dy))

    def scaled(self, factor: float) -> Line:
        return Line(self.a.scaled(factor), self.b.scaled(factor))


@dataclass(frozen=True)
class Arc:
    """Circular arc from ``a`` to ``b`` about ``center``.

    ``start_angle``/``end_angle`` reproduce ``a``/``b`` under
    ``center + radius * (cos, sin)``.  ``ccw`` selects the sweep direction.
    """

    a: Point
    b: Point
    center: Point
    radius: float
    ccw: bool
    start_angle: float
    end_angle: float

    @property
    def sweep(self) -> float:
        """Signed included angle, positive for counter-clockwise arcs."""
        return arc_sweep(self.start_angle, self.end_angle, self.ccw)

    @property
    def length(self) -> float:
        return abs(self.sweep) * self.radius

    def point_at_angle(self, angle: float) -> Point:
        return Point(
            self.center.x + self.radius * math.cos(angle),
            self.center.y + self.radius * math.sin(angle),
        )

    def contains_angle(self, angle: float) -> bool:
        """True if *angle* lies inside this arc's sweep."""
        span = abs(self.sweep)
        if self.ccw:
            delta = (angle - self.start_angle) % TWO_PI
        else:
            delta = (self.start_angle - angle) % TWO_PI
        return delta <= span + EPS

    def reversed(self) -> Arc:
        return Arc(
            a=self.b,
            b=self.a,
            center=self.center,
            radius=self.radius,
            ccw=not self.ccw,
            start_angle=self.end_angle,
            end_angle=self.start_angle,
        )

    def translated(self, dx: float, dy: float) -> Arc:
        return Arc(
            a=self.a.translated(dx, dy),
            b=self.b.translated(dx, dy),
            center=self.center.translated(dx, dy),
            radius=self.radius,
            ccw=self.ccw,
            start_angle=self.start_angle,
            end_angle=self.end_angle,
        )

    def scaled(self, factor: float) -> Arc:
        return Arc(
            a=self.a.scaled(factor),
            b=self.b.scaled(factor),
            center=self.center.scaled(factor),
            radius=self.radius * factor,
            ccw=self.ccw,
            start_angle=self.start_angle,
            end_angle=self.end_angle,
        )


Segment = Union[Line, Arc]


def arc_sweep(start_angle: float, end_angle: float, ccw: bool) -> float:
    """Signed sweep from *start_angle* to *end_angle* in direction *ccw*."""
    if ccw:
        return (end_angle - start_angle) % TWO_PI
    return -((start_angle - end_angle) % TWO_PI)


def arc_from_center(
    center: Point,
    radius: float,
    start_angle: float,
    end_angle: float,
    ccw: bool = True,
) -> Arc:
    """Build an Arc whose endpoints are derived from its angles."""
    return Arc(
        a=Point(center.x + radius * math.cos(start_angle),
                center.y + radius * math.sin(start_angle)),
        b=Point(center.x + radius * math.cos(end_angle),
                center.y + radius * math.sin(end_angle)),
        center=center,
        radius=radius,
        ccw=ccw,
        start_angle=start_angle,
        end_angle=end_angle,
    )


def is_degenerate(seg: Segment) -> bool:
    """Zero-length lines and zero-radius arcs carry no motion."""
    if isinstance(seg, Line):
        return seg.length < EPS
    if isinstance(seg, Arc):
        return seg.radius < EPS or seg.length < EPS
    raise TypeError(f"Unknown segment type: {type(seg).__name__}")


# ---------------------------------------------------------------------------
# Bulge conversion
# ---------------------------------------------------------------------------


def bulge_to_arc(p: Point, q: Point, bulge: float) -> Segment:
    """Convert a DXF polyline edge ``p -> q`` with *bulge* into a segment.

    ``bulge`` is ``tan(theta / 4)`` where ``theta`` is the included angle,
    positive for counter-clockwise arcs.  A zero bulge gives a ``Line``; a
    chord shorter than ``EPS`` degrades to a zero-length ``Line`` which the
    caller discards.
    """
    dx = q.x - p.x
    dy = q.y - p.y
    chord = math.hypot(dx, dy)
    if chord < EPS:
        return Line(p, p)
    if bulge == 0.0:
        return Line(p, q)

    theta = 4.0 * math.atan(bulge)
    ccw = theta > 0
    radius = chord / (2.0 * math.sin(abs(theta) / 2.0))

    # Left normal of the unit chord direction
    ux, uy = dx / chord, dy / chord
    nx, ny = -uy, ux
    h = math.sqrt(max(0.0, radius * radius - chord * chord / 4.0))
    side = 1.0 if bulge > 0 else -1.0
    if abs(bulge) > 1.0:
        # Major arc: center lies across the chord
        side = -side
    mx = (p.x + q.x) / 2.0
    my = (p.y + q.y) / 2.0
    center = Point(mx + nx * h * side, my + ny * h * side)

    return Arc(
        a=p,
        b=q,
        center=center,
        radius=radius,
        ccw=ccw,
        start_angle=math.atan2(p.y - center.y, p.x - center.x),
        end_angle=math.atan2(q.y - center.y, q.x - center.x),
    )


# ---------------------------------------------------------------------------
# Snapping
# ---------------------------------------------------------------------------


def snap_value(value: float, grid: float) -> float:
    """Round *value* half-up to the nearest multiple of *grid*."""
    return math.floor(value / grid + 0.5) * grid


def snap_point(p: Point, grid: float) -> Point:
    return Point(snap_value(p.x, grid), snap_value(p.y, grid))


def snap_segments(segments: Iterable[Segment], grid: float) -> list[Segment]:
    """Snap line endpoints to *grid* and drop lines that collapse.

    Arcs are passed through untouched; snapping them would break the
    on-circle invariant.
    """
    if grid <= 0:
        raise ValueError("snap grid must be positive")
    out: list[Segment] = []
    for seg in segments:
        if isinstance(seg, Line):
            snapped = Line(snap_point(seg.a, grid), snap_point(seg.b, grid))
            if not is_degenerate(snapped):
                out.append(snapped)
        elif isinstance(seg, Arc):
            out.append(seg)
        else:
            raise TypeError(f"Unknown segment type: {type(seg).__name__}")
    return out


# ---------------------------------------------------------------------------
# Bounds and origin shift
# ---------------------------------------------------------------------------


def _extreme_points(seg: Segment) -> list[tuple[float, float]]:
    if isinstance(seg, Line):
        return [seg.a.as_tuple(), seg.b.as_tuple()]
    if isinstance(seg, Arc):
        pts = [seg.a.as_tuple(), seg.b.as_tuple()]
        for quadrant in range(4):
            angle = quadrant * math.pi / 2.0
            if seg.contains_angle(angle):
                pts.append(seg.point_at_angle(angle).as_tuple())
        return pts
    raise TypeError(f"Unknown segment type: {type(seg).__name__}")


def bounding_box(segments: Sequence[Segment]) -> tuple[float, float, float, float]:
    """Return ``(minx, miny, maxx, maxy)`` including true arc extrema."""
    pts: list[tuple[float, float]] = []
    for seg in segments:
        pts.extend(_extreme_points(seg))
    if not pts:
        raise ValueError("Cannot compute bounds of empty geometry")
    return MultiPoint(pts).bounds


def origin_offset(
    bounds: tuple[float, float, float, float],
    mode: OriginMode,
) -> tuple[float, float]:
    """Translation that moves the *mode* reference point of *bounds* to (0, 0)."""
    minx, miny, maxx, maxy = bounds
    if mode is OriginMode.NONE:
        return (0.0, 0.0)
    if mode is OriginMode.CENTER:
        return (-(minx + maxx) / 2.0, -(miny + maxy) / 2.0)
    if mode is OriginMode.LOWER_LEFT:
        return (-minx, -miny)
    if mode is OriginMode.LOWER_RIGHT:
        return (-maxx, -miny)
    if mode is OriginMode.UPPER_LEFT:
        return (-minx, -maxy)
    if mode is OriginMode.UPPER_RIGHT:
        return (-maxx, -maxy)
    raise ValueError(f"Unknown origin mode: {mode!r}")


def translate_segments(
    segments: Iterable[Segment], dx: float, dy: float,
) -> list[Segment]:
    return [seg.translated(dx, dy) for seg in segments]


def scale_segments(segments: Iterable[Segment], factor: float) -> list[Segment]:
    return [seg.scaled(factor) for seg in segments]


def shift_origin(
    segments: Sequence[Segment],
    mode: OriginMode,
) -> list[Segment]:
    """Translate *segments* so the chosen bounding-box reference is (0, 0)."""
    if mode is OriginMode.NONE or not segments:
        return list(segments)
    dx, dy = origin_offset(bounding_box(segments), mode)
    return translate_segments(segments, dx, dy)
