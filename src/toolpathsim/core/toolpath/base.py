"""Core data structures for a compiled G-code program."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

Position = tuple[float, float, float]


class MotionType(Enum):
    """Motion group of one interpreted line."""
    RAPID = "rapid"          # G0
    LINEAR = "linear"        # G1
    ARC_CW = "arc-cw"        # G2
    ARC_CCW = "arc-ccw"      # G3
    OTHER = "other"          # comments, M-codes, setup words

    @property
    def is_arc(self) -> bool:
        return self in (MotionType.ARC_CW, MotionType.ARC_CCW)

    @classmethod
    def from_g(cls, g: Optional[int]) -> Optional[MotionType]:
        """Motion class for a G number, or None if it is not a motion code."""
        return _G_MOTION.get(g) if g is not None else None


_G_MOTION = {
    0: MotionType.RAPID,
    1: MotionType.LINEAR,
    2: MotionType.ARC_CW,
    3: MotionType.ARC_CCW,
}


class MoveClass(Enum):
    """Binary classification used for rendering and analytics."""
    RAPID = "rapid"
    CUTTING = "cutting"


@dataclass(frozen=True)
class Command:
    """One interpreted source line."""
    line_number: int
    raw_text: str
    motion_type: MotionType = MotionType.OTHER
    g: Optional[int] = None
    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None
    feed_rate: Optional[float] = None
    i: Optional[float] = None
    j: Optional[float] = None
    k: Optional[float] = None
    comment: Optional[str] = None

    @property
    def has_axis_words(self) -> bool:
        return self.x is not None or self.y is not None or self.z is not None

    def to_dict(self) -> dict:
        return {
            "line": self.line_number,
            "raw": self.raw_text,
            "type": self.motion_type.value,
            "g": self.g,
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "f": self.feed_rate,
            "i": self.i,
            "j": self.j,
            "k": self.k,
            "comment": self.comment,
        }


@dataclass(frozen=True)
class ToolpathPoint:
    """A single vertex of the resolved tool motion."""
    position: Position
    move_class: MoveClass = MoveClass.CUTTING
    source_line: int = 0

    @property
    def x(self) -> float:
        return self.position[0]

    @property
    def y(self) -> float:
        return self.position[1]

    @property
    def z(self) -> float:
        return self.position[2]

    @property
    def is_rapid(self) -> bool:
        return self.move_class is MoveClass.RAPID

    def to_dict(self) -> dict:
        return {
            "position": list(self.position),
            "type": self.move_class.value,
            "line": self.source_line,
        }


ORIGIN_POINT = ToolpathPoint((0.0, 0.0, 0.0), MoveClass.RAPID, 0)


@dataclass(frozen=True)
class BoundingVolume:
    """Axis-aligned box around the toolpath."""
    min: Position = (0.0, 0.0, 0.0)
    max: Position = (1.0, 1.0, 1.0)

    @classmethod
    def unit(cls) -> BoundingVolume:
        return cls((0.0, 0.0, 0.0), (1.0, 1.0, 1.0))

    @property
    def extents(self) -> Position:
        return (
            self.max[0] - self.min[0],
            self.max[1] - self.min[1],
            self.max[2] - self.min[2],
        )

    def to_dict(self) -> dict:
        return {"min": list(self.min), "max": list(self.max)}


@dataclass(frozen=True)
class CompiledProgram:
    """Commands, toolpath and bounds produced by one compilation.

    Instances are never mutated; a text change yields a new program.
    """
    commands: tuple[Command, ...] = ()
    toolpath: tuple[ToolpathPoint, ...] = (ORIGIN_POINT,)
    bounds: BoundingVolume = field(default_factory=BoundingVolume.unit)
    _line_index: dict = field(default=None, init=False, repr=False, compare=False)

    def command_for_line(self, line_number: int) -> Optional[Command]:
        """First command recorded for *line_number*, if any."""
        if self._line_index is None:
            index: dict[int, Command] = {}
            for cmd in self.commands:
                index.setdefault(cmd.line_number, cmd)
            object.__setattr__(self, "_line_index", index)
        return self._line_index.get(line_number)

    def command_for_point(self, index: int) -> Optional[Command]:
        if not 0 <= index < len(self.toolpath):
            return None
        return self.command_for_line(self.toolpath[index].source_line)

    @property
    def last_index(self) -> int:
        return len(self.toolpath) - 1

    def positions(self) -> np.ndarray:
        """Toolpath positions as an ``(n, 3)`` float array."""
        return np.array([pt.position for pt in self.toolpath], dtype=np.float64)

    def to_dict(self) -> dict:
        return {
            "commands": [c.to_dict() for c in self.commands],
            "toolpath": [p.to_dict() for p in self.toolpath],
            "bounds": self.bounds.to_dict(),
        }
