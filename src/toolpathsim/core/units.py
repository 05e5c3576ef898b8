"""Program unit detection and display helpers.

Coordinates are never converted; the unit word only changes how distances
are labelled.  Programs without G20/G21 are assumed to be metric.
"""

from __future__ import annotations

from enum import Enum

from .toolpath.base import CompiledProgram


class Units(Enum):
    INCH = "inch"
    MM = "mm"

    def label(self) -> str:
        return "in" if self is Units.INCH else "mm"

    @classmethod
    def from_g(cls, g: int | None) -> Units | None:
        if g == 20:
            return cls.INCH
        if g == 21:
            return cls.MM
        return None


def detect_units(program: CompiledProgram) -> Units:
    """Unit system selected by the first G20/G21 command."""
    for cmd in program.commands:
        units = Units.from_g(cmd.g)
        if units is not None:
            return units
    return Units.MM
