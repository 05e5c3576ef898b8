"""Compiled toolpath package."""

from .base import (
    BoundingVolume,
    Command,
    CompiledProgram,
    MotionType,
    MoveClass,
    ToolpathPoint,
)

__all__ = [
    "BoundingVolume",
    "Command",
    "CompiledProgram",
    "MotionType",
    "MoveClass",
    "ToolpathPoint",
]
