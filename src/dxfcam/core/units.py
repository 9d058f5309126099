"""Drawing/machine unit systems.

Geometry is normalized to inches before chaining; a drawing authored in
millimetres is scaled by ``Units.MM.scale_to(Units.INCH)``.
"""

from enum import Enum

# DXF $INSUNITS header codes we understand; anything else is read as inches
_INSUNITS = {1: "inch", 4: "mm"}


class Units(Enum):
    INCH = "inch"
    MM = "mm"

    @property
    def mm_per_unit(self) -> float:
        return 1.0 if self is Units.MM else 25.4

    def to_mm(self, value: float) -> float:
        return value * self.mm_per_unit

    def from_mm(self, value: float) -> float:
        return value / self.mm_per_unit

    def scale_to(self, other: "Units") -> float:
        """Factor that converts a length in these units into *other*."""
        return self.mm_per_unit / other.mm_per_unit

    def label(self) -> str:
        return "in" if self is Units.INCH else "mm"

    @property
    def gcode_modal(self) -> str:
        """Modal group 6 word."""
        return "G20" if self is Units.INCH else "G21"

    @classmethod
    def from_insunits(cls, code: int) -> "Units":
        return cls(_INSUNITS.get(code, "inch"))
