"""Toolpath planning package."""

from .base import (
    CutArc,
    CutLine,
    Move,
    MoveType,
    Plunge,
    RapidXY,
    Retract,
    SetFeedXY,
    Toolpath,
)
from .planner import MovePlanner, ToolState, compute_pass_depths, plan_moves

__all__ = [
    "CutArc",
    "CutLine",
    "Move",
    "MoveType",
    "MovePlanner",
    "Plunge",
    "RapidXY",
    "Retract",
    "SetFeedXY",
    "ToolState",
    "Toolpath",
    "compute_pass_depths",
    "plan_moves",
]
