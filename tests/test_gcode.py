"""Tests for G-code formatting and the deduplicating emitter."""

import pytest

from dxfcam.config.defaults import build_default_tool
from dxfcam.core.tool import Tool
from dxfcam.core.toolpath.base import CutArc, CutLine, Plunge, RapidXY, Retract, SetFeedXY
from dxfcam.gcode import gcode_writer as gw
from dxfcam.gcode.emitter import (
    EmittedCommand,
    GCodeEmitter,
    PostProcessorConfig,
    line_index_for_move,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _simple_moves():
    return [
        Retract(0.1),
        RapidXY(0.0, 0.0),
        RapidXY(0.0, 0.0),
        Plunge(-0.1, 5.0),
        SetFeedXY(20.0),
        CutLine(1.0, 0.0),
        CutLine(1.0, 0.0),
        CutArc(2.0, 1.0, 0.0, 1.0, True),
        Retract(0.1),
    ]


def _motion(lines):
    """Program lines between the preamble's initial retract and M30."""
    start = next(i for i, l in enumerate(lines) if l.startswith("G0 Z")) + 1
    end = lines.index("M30")
    return lines[start:end]


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


class TestFormatting:
    @pytest.mark.parametrize("value, decimals, expected", [
        (1.5, 4, "1.5"),
        (2.0, 4, "2"),
        (-1.25, 4, "-1.25"),
        (0.12345, 3, "0.123"),
        (-0.00001, 4, "0"),
        (10.0, 0, "10"),
        (100.0, 4, "100"),
    ])
    def test_fmt(self, value, decimals, expected):
        assert gw.fmt(value, decimals) == expected

    def test_rapid_and_linear(self):
        assert gw.rapid(x=1, y=2) == "G0 X1 Y2"
        assert gw.rapid(z=0.1) == "G0 Z0.1"
        assert gw.linear(z=-0.25, f=5) == "G1 Z-0.25 F5"

    def test_arc_direction_words(self):
        assert gw.arc(1, 1, 0, 1, ccw=True) == "G3 X1 Y1 I0 J1"
        assert gw.arc(1, 1, 0, 1, ccw=False) == "G2 X1 Y1 I0 J1"

    def test_comment_strips_parens(self):
        assert gw.comment("part (rev b)") == "(part rev b)"


# ---------------------------------------------------------------------------
# Emitter
# ---------------------------------------------------------------------------


class TestGCodeEmitter:
    def test_preamble_and_postamble(self):
        tool = Tool(number=2, name="1/4 endmill", diameter=0.25)
        cfg = PostProcessorConfig(program_name="bracket", tool=tool, safe_z=0.2)
        lines = GCodeEmitter(cfg).get_lines(_simple_moves())
        assert lines[:5] == [
            "%",
            "(bracket)",
            "(T2 1/4 endmill D=0.25)",
            "G90 G94 G17 G20",
            "G0 Z0.2",
        ]
        assert lines[-2:] == ["M30", "%"]

    def test_default_tool_comment(self):
        cfg = PostProcessorConfig(tool=build_default_tool())
        lines = GCodeEmitter(cfg).get_lines([])
        assert lines[2] == '(T1 1/8" Flat Endmill 2-flute D=0.125)'

    def test_extended_preamble(self):
        cfg = PostProcessorConfig(extended_preamble=True)
        lines = GCodeEmitter(cfg).get_lines([])
        assert lines[4] == "G40 G49 G54"
        assert lines[5] == "G0 Z0.1"

    def test_preamble_independent_of_geometry(self):
        emitter = GCodeEmitter(PostProcessorConfig())
        assert emitter.get_lines([])[:5] == emitter.get_lines(_simple_moves())[:5]

    def test_redundant_commands_suppressed(self):
        lines = GCodeEmitter(PostProcessorConfig()).get_lines(_simple_moves())
        assert _motion(lines) == [
            "G0 X0 Y0",
            "G1 Z-0.1 F5",
            "F20",
            "G1 X1 Y0",
            "G3 X2 Y1 I0 J1",
            "G0 Z0.1",
        ]

    def test_rapid_to_current_point_never_emitted(self):
        moves = [RapidXY(1.0, 1.0), Retract(0.5), RapidXY(1.0, 1.0)]
        lines = GCodeEmitter(PostProcessorConfig()).get_lines(moves)
        assert lines.count("G0 X1 Y1") == 1

    def test_plunge_feed_only_on_change(self):
        moves = [
            Plunge(-0.1, 5.0), Retract(0.1), Plunge(-0.2, 5.0),
            SetFeedXY(20.0), Retract(0.1), Plunge(-0.3, 5.0),
        ]
        lines = _motion(GCodeEmitter(PostProcessorConfig()).get_lines(moves))
        assert lines == [
            "G1 Z-0.1 F5", "G0 Z0.1", "G1 Z-0.2",
            "F20", "G0 Z0.1", "G1 Z-0.3 F5",
        ]

    def test_dedup_uses_output_precision(self):
        moves = [RapidXY(1.00001, 0.0), RapidXY(1.00002, 0.0)]
        lines = GCodeEmitter(PostProcessorConfig(precision=3)).get_lines(moves)
        assert _motion(lines) == ["G0 X1 Y0"]

    def test_move_back_references(self):
        commands = GCodeEmitter(PostProcessorConfig()).emit(_simple_moves())
        refs = [c.move_index for c in commands if c.move_index is not None]
        assert refs == [1, 3, 4, 5, 7, 8]
        assert commands[0] == EmittedCommand("%", None)

    def test_deterministic(self):
        emitter = GCodeEmitter(PostProcessorConfig())
        assert emitter.get_lines(_simple_moves()) == emitter.get_lines(_simple_moves())

    def test_write_to_file(self, tmp_path):
        out = tmp_path / "part.nc"
        GCodeEmitter(PostProcessorConfig()).generate(_simple_moves(), out)
        content = out.read_text()
        assert content.startswith("%\n")
        assert content.endswith("M30\n%\n")


class TestLineIndexForMove:
    def test_maps_moves_to_lines(self):
        commands = GCodeEmitter(PostProcessorConfig()).emit(_simple_moves())
        idx = line_index_for_move(commands, 5)
        assert commands[idx].text == "G1 X1 Y0"
        # Move 6 emitted nothing; it maps to the line that already put the tool there
        assert line_index_for_move(commands, 6) == idx

    def test_before_first_motion(self):
        commands = GCodeEmitter(PostProcessorConfig()).emit(_simple_moves())
        assert line_index_for_move(commands, 0) is None
