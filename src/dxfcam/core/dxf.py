"""DXF loading via ezdxf.

Maps modelspace LINE, ARC, CIRCLE, LWPOLYLINE, 2D POLYLINE and SPLINE
entities onto the plain entity containers in :mod:`dxfcam.core.entities`.
Everything else (text, dimensions, hatches, ...) is ignored.  Planar
entities drawn with a -Z extrusion are mirrored into world coordinates;
ones tilted out of the XY plane are skipped with a warning.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from pathlib import Path

import ezdxf
from ezdxf.math import Z_AXIS, Vec3

from .entities import (
    ArcEntity,
    CircleEntity,
    Entity,
    LineEntity,
    PolylineEntity,
    SplineEntity,
)
from .units import Units

SUPPORTED_TYPES = ("LINE", "ARC", "CIRCLE", "LWPOLYLINE", "POLYLINE", "SPLINE")

# Max chord deviation when flattening splines (drawing units)
SPLINE_FLATTEN_DISTANCE = 0.001


@dataclass
class Drawing:
    """Entities read from one DXF file."""

    source_path: Path
    units: Units = Units.INCH
    entities: list[Entity] = field(default_factory=list)
    skipped: int = 0


def _xy(vec) -> tuple[float, float]:
    return (float(vec.x), float(vec.y))


def _mirror_ocs(e):
    """OCS of a planar entity drawn upside down, or None for a plain +Z one.

    ARC, CIRCLE and polyline coordinates are stored in the object
    coordinate system; an extrusion of (0, 0, -1) mirrors them in X.
    """
    extrusion = Vec3(e.dxf.get("extrusion", Z_AXIS)).normalize()
    if extrusion.isclose(Z_AXIS):
        return None
    if extrusion.isclose(-Z_AXIS):
        return e.ocs()
    raise ValueError(f"extrusion {extrusion} is not parallel to the Z axis")


def convert_entity(e) -> Entity | None:
    """Convert one ezdxf entity, or return None for unsupported types."""
    kind = e.dxftype()
    if kind == "LINE":
        return LineEntity(start=_xy(e.dxf.start), end=_xy(e.dxf.end))
    if kind == "ARC":
        ocs = _mirror_ocs(e)
        center = e.dxf.center
        start, end = e.dxf.start_angle, e.dxf.end_angle
        if ocs is not None:
            # Mirroring reverses the sweep; swap ends to keep it CCW
            center = ocs.to_wcs(center)
            start, end = 180.0 - end, 180.0 - start
        return ArcEntity(
            center=_xy(center),
            radius=e.dxf.radius,
            start_angle=start,
            end_angle=end,
        )
    if kind == "CIRCLE":
        ocs = _mirror_ocs(e)
        center = e.dxf.center if ocs is None else ocs.to_wcs(e.dxf.center)
        return CircleEntity(center=_xy(center), radius=e.dxf.radius)
    if kind == "LWPOLYLINE":
        ocs = _mirror_ocs(e)
        pts = list(e.get_points("xyb"))
        bulges = [p[2] for p in pts]
        if ocs is None:
            points = [(p[0], p[1]) for p in pts]
        else:
            points = [_xy(v) for v in e.vertices_in_wcs()]
            bulges = [-b for b in bulges]
        return PolylineEntity(points=points, bulges=bulges, closed=bool(e.closed))
    if kind == "POLYLINE":
        if not e.is_2d_polyline:
            return None
        ocs = _mirror_ocs(e)
        verts = list(e.vertices)
        locations = [v.dxf.location for v in verts]
        bulges = [v.dxf.get("bulge", 0.0) for v in verts]
        if ocs is not None:
            locations = [ocs.to_wcs(p) for p in locations]
            bulges = [-b for b in bulges]
        return PolylineEntity(
            points=[_xy(p) for p in locations],
            bulges=bulges,
            closed=bool(e.is_closed),
        )
    if kind == "SPLINE":
        return SplineEntity(
            points=[_xy(p) for p in e.flattening(SPLINE_FLATTEN_DISTANCE)],
        )
    return None


def load_dxf(path: Path) -> Drawing:
    """Load the modelspace geometry of the DXF at *path*.

    Raises FileNotFoundError or ValueError on failure.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"DXF file not found: {path}")

    try:
        doc = ezdxf.readfile(str(path))
    except (OSError, ezdxf.DXFStructureError) as exc:
        raise ValueError(f"Could not read DXF {path}: {exc}") from exc

    drawing = Drawing(
        source_path=path,
        units=Units.from_insunits(doc.header.get("$INSUNITS", 0)),
    )
    for e in doc.modelspace():
        if e.dxftype() not in SUPPORTED_TYPES:
            continue
        try:
            entity = convert_entity(e)
        except (ezdxf.DXFError, ValueError) as exc:
            warnings.warn(
                f"Skipping {e.dxftype()} {e.dxf.handle}: {exc}",
                UserWarning,
                stacklevel=2,
            )
            drawing.skipped += 1
            continue
        if entity is None:
            drawing.skipped += 1
            continue
        drawing.entities.append(entity)
    return drawing
