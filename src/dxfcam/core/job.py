"""Job orchestrator: drawing entities + operation → program and playback.

The Job class is the top-level entry point for the CLI.  Each call to
:meth:`Job.build` runs the whole pipeline from scratch:

normalize → chain → post-process → plan moves → emit G-code → playback

and either returns a fresh :class:`BuildResult` or raises a
:class:`~dxfcam.core.errors.BuildError`, in which case the previous result
stays in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..gcode.emitter import EmittedCommand, GCodeEmitter, PostProcessorConfig, program_text
from .chaining import chain_segments
from .entities import Entity, count_arcs, entities_to_segments
from .errors import EmptyGeometryError, NoPathsProducedError
from .geometry import Segment, scale_segments, shift_origin, snap_segments
from .operation import ChainMode, Operation
from .paths import contour_segment_count, postprocess_contours
from .playback import PlaybackModel
from .tool import Tool
from .toolpath.base import Move, Toolpath
from .toolpath.planner import MovePlanner
from .units import Units

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    """Immutable output of one successful build."""

    moves: tuple[Move, ...]
    commands: tuple[EmittedCommand, ...]
    playback: PlaybackModel
    path_count: int
    segment_count: int
    pass_depths: tuple[float, ...] = ()

    @property
    def gcode(self) -> str:
        return program_text(self.commands)

    @property
    def lines(self) -> list[str]:
        return [c.text for c in self.commands]


@dataclass
class Job:
    """A complete contour-cut job: drawing + operation + tool."""

    name: str = "Untitled"
    entities: list[Entity] = field(default_factory=list)
    operation: Operation = field(default_factory=Operation)
    tool: Optional[Tool] = None
    units: Units = Units.INCH          # units the drawing was authored in
    result: Optional[BuildResult] = None

    def normalize(self) -> list[Segment]:
        """Entities → canonical inch segments, snapped and shifted per operation.

        Raises
        ------
        EmptyGeometryError:
            If nothing survives extraction and snap filtering.
        """
        op = self.operation
        segments = entities_to_segments(self.entities)
        if self.units is not Units.INCH:
            segments = scale_segments(segments, self.units.scale_to(Units.INCH))
        if op.chain_mode is ChainMode.TRACE:
            segments = snap_segments(segments, op.snap_grid)
        if not segments:
            raise EmptyGeometryError()
        return shift_origin(segments, op.origin)

    def build(self) -> BuildResult:
        """Run the full pipeline and store the result on success."""
        op = self.operation
        segments = self.normalize()
        log.debug(
            "normalized %d segments (%d arcs)", len(segments), count_arcs(segments),
        )

        contours = chain_segments(segments, op)
        if not contours:
            raise NoPathsProducedError()
        log.debug("chained into %d contours", len(contours))

        contours = postprocess_contours(contours, op)
        if not contours:
            raise NoPathsProducedError()
        log.debug("post-processed into %d contours", len(contours))

        toolpath: Toolpath = MovePlanner(op).plan(contours)

        emitter = GCodeEmitter(PostProcessorConfig(
            program_name=self.name,
            tool=self.tool,
            safe_z=op.safe_z,
            precision=op.precision,
            extended_preamble=op.extended_preamble,
        ))
        commands = emitter.emit(toolpath.moves)

        result = BuildResult(
            moves=tuple(toolpath.moves),
            commands=tuple(commands),
            playback=PlaybackModel.from_moves(toolpath.moves),
            path_count=len(contours),
            segment_count=contour_segment_count(contours),
            pass_depths=tuple(toolpath.pass_depths),
        )
        log.debug(
            "built %d moves, %d program lines", len(result.moves), len(result.commands),
        )
        self.result = result
        return result
