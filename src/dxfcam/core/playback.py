"""Length-parameterized playback of a move list.

Every ``RapidXY`` / ``CutLine`` / ``CutArc`` move becomes one
:class:`PlaybackSegment` in the XY plane.  Z-only moves (retract, plunge)
and feed declarations have no XY extent and are skipped.  A fraction
``t`` in [0, 1] of the total travelled length maps to a position by binary
search over cumulative lengths and interpolation inside the hit segment.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import numpy as np

from .geometry import EPS, TWO_PI, Point, arc_sweep
from .toolpath.base import CutArc, CutLine, Move, RapidXY


class PlaybackMode(Enum):
    RAPID = "rapid"
    CUT = "cut"


@dataclass(frozen=True)
class PlaybackSegment:
    a: Point
    b: Point
    mode: PlaybackMode
    length: float
    cumulative_length: float
    move_index: int
    # Arc reconstruction (only when is_arc)
    center: Optional[Point] = None
    radius: float = 0.0
    start_angle: float = 0.0
    end_angle: float = 0.0
    ccw: bool = False

    @property
    def is_arc(self) -> bool:
        return self.center is not None

    @property
    def sweep(self) -> float:
        if not self.is_arc:
            return 0.0
        return self.length / self.radius * (1.0 if self.ccw else -1.0)

    def point_at(self, u: float) -> Point:
        """Interpolate at local fraction *u* in [0, 1]."""
        if u <= 0.0:
            return self.a
        if u >= 1.0:
            return self.b
        if self.is_arc:
            angle = self.start_angle + self.sweep * u
            return Point(
                self.center.x + self.radius * math.cos(angle),
                self.center.y + self.radius * math.sin(angle),
            )
        return Point(
            self.a.x + (self.b.x - self.a.x) * u,
            self.a.y + (self.b.y - self.a.y) * u,
        )


def _arc_segment(
    start: Point, move: CutArc, total: float, index: int,
) -> PlaybackSegment:
    end = Point(move.x, move.y)
    center = Point(start.x + move.i, start.y + move.j)
    radius = math.hypot(move.i, move.j)
    start_angle = math.atan2(start.y - center.y, start.x - center.x)
    end_angle = math.atan2(end.y - center.y, end.x - center.x)
    sweep = abs(arc_sweep(start_angle, end_angle, move.ccw))
    if sweep < EPS and start.distance(end) < EPS:
        # Coincident endpoints on an arc move describe a full circle
        sweep = TWO_PI
    length = sweep * radius
    return PlaybackSegment(
        a=start,
        b=end,
        mode=PlaybackMode.CUT,
        length=length,
        cumulative_length=total + length,
        move_index=index,
        center=center,
        radius=radius,
        start_angle=start_angle,
        end_angle=end_angle,
        ccw=move.ccw,
    )


def build_segments(
    moves: Sequence[Move],
    origin: Optional[Point] = None,
) -> list[PlaybackSegment]:
    """Rebuild playback segments from *moves*, in move order.

    *origin* is the tool position before the first move; when unknown the
    first segment starts at its own target.
    """
    segments: list[PlaybackSegment] = []
    cursor = origin
    total = 0.0
    for index, move in enumerate(moves):
        if isinstance(move, (RapidXY, CutLine)):
            end = Point(move.x, move.y)
            start = cursor if cursor is not None else end
            length = start.distance(end)
            mode = PlaybackMode.RAPID if isinstance(move, RapidXY) else PlaybackMode.CUT
            total += length
            segments.append(PlaybackSegment(
                a=start, b=end, mode=mode, length=length,
                cumulative_length=total, move_index=index,
            ))
            cursor = end
        elif isinstance(move, CutArc):
            start = cursor if cursor is not None else Point(move.x, move.y)
            seg = _arc_segment(start, move, total, index)
            total = seg.cumulative_length
            segments.append(seg)
            cursor = seg.b
    return segments


class PlaybackModel:
    """Cumulative-length index over playback segments."""

    def __init__(self, segments: Sequence[PlaybackSegment]):
        self.segments: tuple[PlaybackSegment, ...] = tuple(segments)
        self._cumulative = np.array(
            [s.cumulative_length for s in self.segments], dtype=float,
        )

    @classmethod
    def from_moves(
        cls, moves: Sequence[Move], origin: Optional[Point] = None,
    ) -> PlaybackModel:
        return cls(build_segments(moves, origin))

    @property
    def total_length(self) -> float:
        """Total XY travel, or 1.0 when empty so fractions stay finite."""
        if not self.segments:
            return 1.0
        return float(self._cumulative[-1])

    @property
    def cut_length(self) -> float:
        return sum(s.length for s in self.segments if s.mode is PlaybackMode.CUT)

    @property
    def rapid_length(self) -> float:
        return sum(s.length for s in self.segments if s.mode is PlaybackMode.RAPID)

    def __len__(self) -> int:
        return len(self.segments)

    def _locate(self, t: float) -> Optional[tuple[int, float]]:
        if not self.segments:
            return None
        t = min(1.0, max(0.0, t))
        target = t * self.total_length
        idx = int(np.searchsorted(self._cumulative, target, side="left"))
        idx = min(idx, len(self.segments) - 1)
        seg = self.segments[idx]
        if seg.length > EPS:
            u = (target - (seg.cumulative_length - seg.length)) / seg.length
            u = min(1.0, max(0.0, u))
        else:
            u = 0.0
        return idx, u

    def segment_index_at(self, t: float) -> Optional[int]:
        """Index of the playback segment active at fraction *t*."""
        hit = self._locate(t)
        return None if hit is None else hit[0]

    def position_at(self, t: float) -> Optional[Point]:
        """Tool XY at fraction *t* of the total length, or None if empty."""
        hit = self._locate(t)
        if hit is None:
            return None
        idx, u = hit
        return self.segments[idx].point_at(u)
