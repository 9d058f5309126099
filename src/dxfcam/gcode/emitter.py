"""Move list → G-code command stream.

The emitter keeps its own shadow of XY, Z and the modal feed word rather
than trusting the planner's bookkeeping, and drops any command whose target
already matches that shadow (after quantizing to the output precision).
Every emitted line remembers which move produced it so a viewer can map a
playback position back to a program line.

Output layout::

    %
    (program comment)
    (tool comment)
    G90 G94 G17 G20
    [G40 G49 G54]
    G0 Z<safe>
    ... motion ...
    M30
    %
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from ..core.tool import Tool
from ..core.toolpath.base import (
    CutArc,
    CutLine,
    Move,
    Plunge,
    RapidXY,
    Retract,
    SetFeedXY,
)
from ..core.units import Units
from . import gcode_writer as gw


@dataclass(frozen=True)
class EmittedCommand:
    """One program line and the index of the move that produced it."""
    text: str
    move_index: Optional[int] = None


@dataclass
class PostProcessorConfig:
    """Options controlling the program text."""
    program_name: str = "dxfcam"
    tool: Optional[Tool] = None
    safe_z: float = 0.1
    precision: int = 4
    extended_preamble: bool = False   # G40 G49 G54
    units: Units = Units.INCH


@dataclass
class _Shadow:
    xy: Optional[tuple[float, float]] = None
    z: Optional[float] = None
    feed: Optional[float] = None


class GCodeEmitter:
    """Serializes a move list into deduplicated G-code lines."""

    def __init__(self, config: PostProcessorConfig):
        self.cfg = config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def emit(self, moves: Sequence[Move]) -> list[EmittedCommand]:
        """Return the full program as a list of commands."""
        shadow = _Shadow()
        out = [EmittedCommand(line) for line in self._preamble(shadow)]
        for index, move in enumerate(moves):
            text = self._emit_move(move, shadow)
            if text is not None:
                out.append(EmittedCommand(text, index))
        out.extend(EmittedCommand(line) for line in self._postamble())
        return out

    def get_lines(self, moves: Sequence[Move]) -> list[str]:
        return [cmd.text for cmd in self.emit(moves)]

    def generate(self, moves: Sequence[Move], output: Path) -> None:
        """Write the program for *moves* to *output*."""
        Path(output).write_text(program_text(self.emit(moves)))

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _q(self, value: float) -> float:
        return round(value, self.cfg.precision)

    def _preamble(self, shadow: _Shadow) -> list[str]:
        cfg = self.cfg
        tool_text = cfg.tool.describe() if cfg.tool is not None else "Tool unspecified"
        lines = [
            "%",
            gw.comment(cfg.program_name),
            gw.comment(tool_text),
            f"G90 G94 G17 {cfg.units.gcode_modal}",
        ]
        if cfg.extended_preamble:
            lines.append("G40 G49 G54")
        lines.append(gw.rapid(z=cfg.safe_z, decimals=cfg.precision))
        shadow.z = self._q(cfg.safe_z)
        return lines

    @staticmethod
    def _postamble() -> list[str]:
        return ["M30", "%"]

    # ------------------------------------------------------------------
    # Motion
    # ------------------------------------------------------------------

    def _emit_move(self, move: Move, shadow: _Shadow) -> Optional[str]:
        d = self.cfg.precision

        if isinstance(move, Retract):
            z = self._q(move.z)
            if shadow.z == z:
                return None
            shadow.z = z
            return gw.rapid(z=move.z, decimals=d)

        if isinstance(move, RapidXY):
            xy = (self._q(move.x), self._q(move.y))
            if shadow.xy == xy:
                return None
            shadow.xy = xy
            return gw.rapid(x=move.x, y=move.y, decimals=d)

        if isinstance(move, Plunge):
            z = self._q(move.z)
            feed = self._q(move.feed) if move.feed is not None else None
            new_feed = feed is not None and feed != shadow.feed
            if shadow.z == z and not new_feed:
                return None
            if new_feed:
                shadow.feed = feed
            shadow.z = z
            return gw.linear(z=move.z, f=move.feed if new_feed else None, decimals=d)

        if isinstance(move, SetFeedXY):
            feed = self._q(move.feed)
            if shadow.feed == feed:
                return None
            shadow.feed = feed
            return gw.feed(move.feed, decimals=d)

        if isinstance(move, CutLine):
            xy = (self._q(move.x), self._q(move.y))
            if shadow.xy == xy:
                return None
            shadow.xy = xy
            return gw.linear(x=move.x, y=move.y, decimals=d)

        if isinstance(move, CutArc):
            shadow.xy = (self._q(move.x), self._q(move.y))
            return gw.arc(move.x, move.y, move.i, move.j, move.ccw, decimals=d)

        raise TypeError(f"Unknown move type: {type(move).__name__}")


def line_index_for_move(
    commands: Sequence[EmittedCommand],
    move_index: int,
) -> Optional[int]:
    """Index of the last program line produced at or before *move_index*.

    Moves that emitted nothing map to the line that established the state
    they asked for.  Returns ``None`` before the first motion line.
    """
    found: Optional[int] = None
    for line_no, cmd in enumerate(commands):
        if cmd.move_index is None:
            continue
        if cmd.move_index > move_index:
            break
        found = line_no
    return found


def program_text(commands: Sequence[EmittedCommand]) -> str:
    return "\n".join(cmd.text for cmd in commands) + "\n"
