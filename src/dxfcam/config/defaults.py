"""Default operation and tool.

These are conservative starting points for cutting thin sheet with a small
endmill; users should adjust to their specific tooling and material.
"""

from ..core.operation import ChainMode, FusionMode, Operation, OriginMode
from ..core.tool import Tool

# Distances in inches, angles in degrees
DEFAULT_CHAIN_TOLERANCE = 0.05
DEFAULT_ANGLE_TOLERANCE = 12.0


def build_default_tool() -> Tool:
    """Return the 1/8" flat endmill used when no tool is given."""
    return Tool(
        number=1,
        name="1/8\" Flat Endmill 2-flute",
        diameter=0.125,
    )


def build_default_operation(chain_mode: ChainMode = ChainMode.EXACT) -> Operation:
    """Return an Operation with the stock tolerances for *chain_mode*."""
    return Operation(
        name="Contour",
        safe_z=0.1,
        total_depth=0.25,
        step_down=0.125,
        feed_xy=20.0,
        feed_z=5.0,
        chain_mode=chain_mode,
        chain_tolerance=DEFAULT_CHAIN_TOLERANCE,
        fusion_tolerance=DEFAULT_CHAIN_TOLERANCE,
        snap_grid=DEFAULT_CHAIN_TOLERANCE,
        angle_tolerance=DEFAULT_ANGLE_TOLERANCE,
        fusion=FusionMode.CONTINUOUS,
        origin=OriginMode.CENTER,
        precision=4,
    )
