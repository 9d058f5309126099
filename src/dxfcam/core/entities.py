"""Drawing entities handed over by the drawing parser.

Each entity is a plain container of numbers in drawing units; arc angles
are degrees, as DXF stores them.  :func:`entities_to_segments` turns them
into canonical ``Line``/``Arc`` segments.  An entity with a missing or
non-finite coordinate contributes nothing and raises a ``UserWarning``;
it never aborts the build.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Union

from .geometry import (
    EPS,
    TWO_PI,
    Arc,
    Line,
    Point,
    Segment,
    arc_from_center,
    bulge_to_arc,
    is_degenerate,
)


class MalformedEntityError(ValueError):
    """Raised internally when an entity lacks usable numeric fields."""


@dataclass
class LineEntity:
    start: Optional[tuple[float, float]] = None
    end: Optional[tuple[float, float]] = None


@dataclass
class ArcEntity:
    """DXF arc: always counter-clockwise from start to end angle."""

    center: Optional[tuple[float, float]] = None
    radius: Optional[float] = None
    start_angle: Optional[float] = None  # degrees
    end_angle: Optional[float] = None    # degrees


@dataclass
class CircleEntity:
    center: Optional[tuple[float, float]] = None
    radius: Optional[float] = None


@dataclass
class PolylineEntity:
    """Polyline; ``bulges[i]`` applies to the edge leaving vertex ``i``."""

    points: list[tuple[float, float]] = field(default_factory=list)
    bulges: Optional[list[float]] = None
    closed: bool = False


@dataclass
class SplineEntity:
    """Spline already flattened to a point list."""

    points: list[tuple[float, float]] = field(default_factory=list)


Entity = Union[LineEntity, ArcEntity, CircleEntity, PolylineEntity, SplineEntity]


def _number(value, name: str) -> float:
    if value is None:
        raise MalformedEntityError(f"missing {name}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise MalformedEntityError(f"{name} is not a number: {value!r}") from exc
    if not math.isfinite(number):
        raise MalformedEntityError(f"{name} is not finite: {value!r}")
    return number


def _point(value, name: str) -> Point:
    if value is None:
        raise MalformedEntityError(f"missing {name}")
    try:
        x, y = value[0], value[1]
    except (TypeError, IndexError, KeyError) as exc:
        raise MalformedEntityError(f"{name} is not a point: {value!r}") from exc
    return Point(_number(x, f"{name}.x"), _number(y, f"{name}.y"))


def _radius(value) -> float:
    radius = _number(value, "radius")
    if radius < 0:
        raise MalformedEntityError(f"negative radius {radius}")
    return radius


def _line_to_segments(entity: LineEntity) -> list[Segment]:
    return [Line(_point(entity.start, "start"), _point(entity.end, "end"))]


def _arc_to_segments(entity: ArcEntity) -> list[Segment]:
    center = _point(entity.center, "center")
    radius = _radius(entity.radius)
    start = math.radians(_number(entity.start_angle, "start_angle"))
    end = math.radians(_number(entity.end_angle, "end_angle"))
    sweep = (end - start) % TWO_PI
    if sweep < EPS:
        # Equal angles describe a full circle
        return _full_circle(center, radius, start)
    return [arc_from_center(center, radius, start, start + sweep, ccw=True)]


def _full_circle(center: Point, radius: float, start: float = 0.0) -> list[Segment]:
    # Two half arcs so no segment starts and ends at the same point
    return [
        arc_from_center(center, radius, start, start + math.pi, ccw=True),
        arc_from_center(center, radius, start + math.pi, start + TWO_PI, ccw=True),
    ]


def _circle_to_segments(entity: CircleEntity) -> list[Segment]:
    return _full_circle(_point(entity.center, "center"), _radius(entity.radius))


def _polyline_to_segments(entity: PolylineEntity) -> list[Segment]:
    points = [_point(p, f"points[{i}]") for i, p in enumerate(entity.points or [])]
    if len(points) < 2:
        return []
    bulges = [0.0] * len(points)
    if entity.bulges:
        for i, b in enumerate(entity.bulges[: len(points)]):
            bulges[i] = 0.0 if b is None else _number(b, f"bulges[{i}]")

    edges = list(zip(range(len(points) - 1), range(1, len(points))))
    if entity.closed:
        edges.append((len(points) - 1, 0))

    segs: list[Segment] = []
    for i, j in edges:
        segs.append(bulge_to_arc(points[i], points[j], bulges[i]))
    return segs


def _spline_to_segments(entity: SplineEntity) -> list[Segment]:
    points = [_point(p, f"points[{i}]") for i, p in enumerate(entity.points or [])]
    return [Line(a, b) for a, b in zip(points, points[1:])]


def entity_to_segments(entity: Entity) -> list[Segment]:
    """Convert one entity; raises ``MalformedEntityError`` on bad fields."""
    if isinstance(entity, LineEntity):
        segs = _line_to_segments(entity)
    elif isinstance(entity, ArcEntity):
        segs = _arc_to_segments(entity)
    elif isinstance(entity, CircleEntity):
        segs = _circle_to_segments(entity)
    elif isinstance(entity, PolylineEntity):
        segs = _polyline_to_segments(entity)
    elif isinstance(entity, SplineEntity):
        segs = _spline_to_segments(entity)
    else:
        raise MalformedEntityError(f"unsupported entity {type(entity).__name__}")
    return [s for s in segs if not is_degenerate(s)]


def entities_to_segments(entities: Iterable[Entity]) -> list[Segment]:
    """Flatten *entities* into canonical segments, skipping malformed ones."""
    segments: list[Segment] = []
    for index, entity in enumerate(entities):
        try:
            segments.extend(entity_to_segments(entity))
        except MalformedEntityError as exc:
            warnings.warn(
                f"Skipping entity #{index} ({type(entity).__name__}): {exc}",
                UserWarning,
                stacklevel=2,
            )
    return segments


def count_arcs(segments: Sequence[Segment]) -> int:
    return sum(1 for s in segments if isinstance(s, Arc))
