"""Core toolpath data structures.

A toolpath is a flat list of moves.  Moves carry absolute targets only;
the current position, Z and feed are implicit state that the planner and
the emitter each track for themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class MoveType(Enum):
    """Type of CNC motion."""
    RETRACT = "retract"      # G0 Z: pull out of material to safe Z
    RAPID = "rapid"          # G0 XY: reposition at safe Z
    PLUNGE = "plunge"        # G1 Z: feed into material
    SET_FEED = "set_feed"    # F: XY cutting feed declaration
    CUT_LINE = "cut_line"    # G1 XY
    CUT_ARC = "cut_arc"      # G2/G3 XY IJ


@dataclass(frozen=True)
class Retract:
    z: float
    kind = MoveType.RETRACT


@dataclass(frozen=True)
class RapidXY:
    x: float
    y: float
    kind = MoveType.RAPID


@dataclass(frozen=True)
class Plunge:
    z: float
    feed: Optional[float] = None  # None → feed unchanged
    kind = MoveType.PLUNGE


@dataclass(frozen=True)
class SetFeedXY:
    feed: float
    kind = MoveType.SET_FEED


@dataclass(frozen=True)
class CutLine:
    x: float
    y: float
    kind = MoveType.CUT_LINE


@dataclass(frozen=True)
class CutArc:
    """Arc cut to (x, y); (i, j) is the center relative to the arc start."""
    x: float
    y: float
    i: float
    j: float
    ccw: bool
    kind = MoveType.CUT_ARC


Move = Union[Retract, RapidXY, Plunge, SetFeedXY, CutLine, CutArc]


@dataclass
class Toolpath:
    """An ordered list of moves making up one build."""
    moves: list[Move] = field(default_factory=list)
    pass_depths: list[float] = field(default_factory=list)
    operation_name: str = ""

    def append(self, move: Move) -> None:
        self.moves.append(move)

    def count(self, kind: MoveType) -> int:
        return sum(1 for m in self.moves if m.kind is kind)

    @property
    def is_empty(self) -> bool:
        return len(self.moves) == 0

    def __len__(self) -> int:
        return len(self.moves)
