"""Multi-pass contour move planning.

Algorithm
---------
For each depth pass (shallowest first), for each contour:

1. If the tool is not already within chain tolerance of the contour start
   at the pass depth: retract to safe Z (unless already there), rapid to
   the start, plunge to depth (feed word only when it changes) and declare
   the XY feed (only when it changes).
2. Emit one cut per segment: ``CutLine`` for lines, ``CutArc`` for arcs.

A retract closes every pass.  The skip in step 1 is what keeps the tool
engaged across contours that already touch, while still lifting before any
real reposition.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from ..chaining import Contour
from ..geometry import Arc, Line, Point, Segment
from ..operation import Operation
from .base import CutArc, CutLine, Plunge, RapidXY, Retract, SetFeedXY, Toolpath


def compute_pass_depths(total_depth: float, step_down: float) -> list[float]:
    """Z depth of each pass, shallowest first.

    ``ceil(|total_depth| / step_down)`` passes, pass ``k`` cutting at
    ``-min(|total_depth|, k * step_down)``.  A zero depth gives no passes.
    """
    if step_down <= 0:
        raise ValueError("step_down must be positive")
    depth = abs(total_depth)
    # Absorb float noise such as 0.25 / 0.05 == 5.000000000000001
    count = math.ceil(depth / step_down - 1e-9)
    return [
        round(-min(depth, k * step_down), 10)
        for k in range(1, count + 1)
    ]


@dataclass
class ToolState:
    """Where the planner believes the tool is.  ``None`` means unknown."""
    xy: Optional[Point] = None
    z: Optional[float] = None
    feed: Optional[float] = None

    def at_z(self, z: float) -> bool:
        return self.z is not None and math.isclose(self.z, z, abs_tol=1e-9)

    def near(self, p: Point, tolerance: float) -> bool:
        return self.xy is not None and self.xy.distance(p) <= tolerance


class MovePlanner:
    """Expands contours into depth passes of moves.

    The planner owns a :class:`ToolState` for the duration of one
    :meth:`plan` call; each step that would leave the state unchanged is
    elided.
    """

    def __init__(self, operation: Operation, state: Optional[ToolState] = None):
        self.op = operation
        self.state = state if state is not None else ToolState()
        self.toolpath = Toolpath(operation_name=operation.name)

    # -- elidable primitives -------------------------------------------------

    def retract(self) -> None:
        if self.state.at_z(self.op.safe_z):
            return
        self.toolpath.append(Retract(self.op.safe_z))
        self.state.z = self.op.safe_z

    def rapid(self, p: Point) -> None:
        if self.state.xy == p:
            return
        self.toolpath.append(RapidXY(p.x, p.y))
        self.state.xy = p

    def plunge(self, z: float) -> None:
        feed = self.op.feed_z if self.state.feed != self.op.feed_z else None
        self.toolpath.append(Plunge(z, feed))
        self.state.z = z
        self.state.feed = self.op.feed_z

    def set_feed_xy(self) -> None:
        if self.state.feed == self.op.feed_xy:
            return
        self.toolpath.append(SetFeedXY(self.op.feed_xy))
        self.state.feed = self.op.feed_xy

    def cut(self, seg: Segment) -> None:
        if isinstance(seg, Line):
            self.toolpath.append(CutLine(seg.b.x, seg.b.y))
        elif isinstance(seg, Arc):
            # Offsets from where the tool actually is, which may differ from
            # seg.a by up to the chain tolerance
            start = self.state.xy if self.state.xy is not None else seg.a
            self.toolpath.append(CutArc(
                x=seg.b.x,
                y=seg.b.y,
                i=seg.center.x - start.x,
                j=seg.center.y - start.y,
                ccw=seg.ccw,
            ))
        else:
            raise TypeError(f"Unknown segment type: {type(seg).__name__}")
        self.state.xy = seg.b

    # -- planning ------------------------------------------------------------

    def enter(self, start: Point, depth: float) -> None:
        """Bring the tool to *start* at *depth*, lifting only if needed."""
        engaged = (
            self.op.keeps_tool_down
            and self.state.near(start, self.op.chain_tolerance)
            and self.state.at_z(depth)
        )
        if engaged:
            return
        self.retract()
        self.rapid(start)
        self.plunge(depth)
        self.set_feed_xy()

    def plan_contour(self, contour: Contour, depth: float) -> None:
        self.enter(contour[0].a, depth)
        for seg in contour:
            self.cut(seg)

    def plan(self, contours: Sequence[Contour]) -> Toolpath:
        depths = compute_pass_depths(self.op.total_depth, self.op.step_down)
        self.toolpath.pass_depths = depths
        for depth in depths:
            for contour in contours:
                if contour:
                    self.plan_contour(contour, depth)
            self.retract()
        return self.toolpath


def plan_moves(contours: Sequence[Contour], operation: Operation) -> Toolpath:
    """Convenience wrapper: plan *contours* from an unknown tool state."""
    return MovePlanner(operation).plan(contours)
