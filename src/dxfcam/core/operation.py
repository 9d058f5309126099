"""Contour-cut operation parameters.

An Operation carries every option the build pipeline consumes: clearance
and depth, feeds, chaining tolerances and the mode switches that select
between the exact and tracing chainers.  Values are trusted as given; use
``dxfcam.gcode.validate.validate_operation`` to check them beforehand.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ChainMode(Enum):
    EXACT = "exact"      # endpoint coincidence, lines and arcs
    TRACE = "trace"      # snapped endpoints + heading similarity, lines only


class FusionMode(Enum):
    NONE = "none"              # lift between every contour
    CONTINUOUS = "continuous"  # keep the tool down across touching contours


class OriginMode(Enum):
    NONE = "none"
    CENTER = "center"
    LOWER_LEFT = "lower-left"
    LOWER_RIGHT = "lower-right"
    UPPER_LEFT = "upper-left"
    UPPER_RIGHT = "upper-right"


@dataclass
class Operation:
    """Parameters for a single contour-cut build."""

    name: str = "Contour"

    # Clearance and depth (inches)
    safe_z: float = 0.1
    total_depth: float = 0.25     # sign ignored, always cut below Z0
    step_down: float = 0.25

    # Feeds (inches per minute)
    feed_xy: float = 20.0
    feed_z: float = 5.0

    # Chaining
    chain_mode: ChainMode = ChainMode.EXACT
    chain_tolerance: float = 0.05
    fusion_tolerance: float = 0.05
    snap_grid: float = 0.05        # tracing mode only
    angle_tolerance: float = 12.0  # degrees, tracing mode only

    # Post-processing
    merge_collinear: bool = True
    reorder: bool = True
    fusion: FusionMode = FusionMode.CONTINUOUS

    # Placement
    origin: OriginMode = OriginMode.CENTER

    # Output
    precision: int = 4
    extended_preamble: bool = False

    @property
    def keeps_tool_down(self) -> bool:
        return self.fusion is FusionMode.CONTINUOUS
