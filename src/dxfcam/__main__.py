"""CLI entry point: ``python -m dxfcam drawing.dxf -o output.nc``"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config.defaults import build_default_operation, build_default_tool
from .config.settings import AppSettings
from .core.dxf import load_dxf
from .core.errors import BuildError
from .core.job import Job
from .core.operation import ChainMode, FusionMode, OriginMode
from .gcode.validate import validate_operation


def _build_parser(settings: AppSettings) -> argparse.ArgumentParser:
    defaults = build_default_operation()
    p = argparse.ArgumentParser(
        prog="dxfcam",
        description="Generate 3-axis contour G-code from 2D DXF drawings.",
    )
    p.add_argument("input", type=Path, help="Input DXF file")
    p.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output program (default: <input>.nc)",
    )

    # Depth and clearance
    p.add_argument("--safe-z", type=float, default=defaults.safe_z,
                   help=f"Safe Z for rapids (default: {defaults.safe_z})")
    p.add_argument("--depth", type=float, default=defaults.total_depth,
                   help=f"Total cut depth (default: {defaults.total_depth})")
    p.add_argument("--step-down", type=float, default=defaults.step_down,
                   help=f"Depth per pass (default: {defaults.step_down})")

    # Feeds
    p.add_argument("--feed-xy", type=float, default=defaults.feed_xy,
                   help=f"XY cutting feed (default: {defaults.feed_xy})")
    p.add_argument("--feed-z", type=float, default=defaults.feed_z,
                   help=f"Plunge feed (default: {defaults.feed_z})")

    # Chaining
    p.add_argument("--mode", choices=[m.value for m in ChainMode],
                   default=settings.default_chain_mode,
                   help="Chaining mode (default: %(default)s)")
    p.add_argument("--tolerance", type=float, default=defaults.chain_tolerance,
                   help=f"Endpoint chain tolerance (default: {defaults.chain_tolerance})")
    p.add_argument("--fusion-tolerance", type=float, default=None,
                   help="Contour fusion tolerance (default: chain tolerance)")
    p.add_argument("--snap", type=float, default=None,
                   help="Snap grid for trace mode (default: chain tolerance)")
    p.add_argument("--angle", type=float, default=defaults.angle_tolerance,
                   help=f"Heading tolerance in degrees (default: {defaults.angle_tolerance})")
    p.add_argument("--no-merge", action="store_true",
                   help="Keep collinear segments separate")
    p.add_argument("--no-reorder", action="store_true",
                   help="Cut contours in chaining order")
    p.add_argument("--no-fusion", action="store_true",
                   help="Lift the tool between every contour")

    # Placement and output
    p.add_argument("--origin", choices=[m.value for m in OriginMode],
                   default=settings.default_origin,
                   help="Drawing reference moved to X0 Y0 (default: %(default)s)")
    p.add_argument("--precision", type=int, default=settings.default_precision,
                   help="Output decimal places (default: %(default)s)")
    p.add_argument("--extended-preamble", action=argparse.BooleanOptionalAction,
                   default=settings.extended_preamble,
                   help="Emit G40 G49 G54 after the modal line (default: %(default)s)")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Log pipeline statistics")
    return p


def main(argv: list[str] | None = None) -> int:
    settings = AppSettings.load()
    args = _build_parser(settings).parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    output: Path = args.output or args.input.with_suffix(".nc")

    op = build_default_operation(ChainMode(args.mode))
    op.safe_z = args.safe_z
    op.total_depth = args.depth
    op.step_down = args.step_down
    op.feed_xy = args.feed_xy
    op.feed_z = args.feed_z
    op.chain_tolerance = args.tolerance
    op.fusion_tolerance = (
        args.fusion_tolerance if args.fusion_tolerance is not None else args.tolerance
    )
    op.snap_grid = args.snap if args.snap is not None else args.tolerance
    op.angle_tolerance = args.angle
    op.merge_collinear = not args.no_merge
    op.reorder = not args.no_reorder
    op.fusion = FusionMode.NONE if args.no_fusion else FusionMode.CONTINUOUS
    op.origin = OriginMode(args.origin)
    op.precision = args.precision
    op.extended_preamble = args.extended_preamble

    result = validate_operation(op)
    if result.has_errors:
        print("INVALID OPTIONS:", file=sys.stderr)
        for issue in result.issues:
            if issue.severity == "error":
                print(f"  ERROR: {issue.message}", file=sys.stderr)
        return 1
    for issue in result.issues:
        print(f"  Warning: {issue.message}")

    print(f"Loading {args.input} ...")
    try:
        drawing = load_dxf(args.input)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(f"  {len(drawing.entities)} entities ({drawing.units.label()}), "
          f"{drawing.skipped} skipped")

    job = Job(
        name=args.input.stem,
        entities=drawing.entities,
        operation=op,
        tool=build_default_tool(),
        units=drawing.units,
    )
    try:
        build = job.build()
    except BuildError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"  {build.path_count} contours, {build.segment_count} segments, "
          f"{len(build.pass_depths)} passes")
    print(f"  {len(build.moves)} moves -> {len(build.commands)} program lines")
    print(f"  Travel: cut {build.playback.cut_length:.3f} in, "
          f"rapid {build.playback.rapid_length:.3f} in")

    output.write_text(build.gcode)
    print(f"Wrote {output}")

    settings.last_open_dir = str(args.input.resolve().parent)
    settings.last_save_dir = str(output.resolve().parent)
    settings.save()
    return 0


if __name__ == "__main__":
    sys.exit(main())
