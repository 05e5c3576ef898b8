"""Kinematic queries over a compiled program.

Every function here is pure and tolerant: out-of-range indexes fall back to
documented defaults instead of raising, so playback and statistics code can
call them with whatever the UI hands over.

Feed rates are in distance units per minute.  Rapid moves always run at
the traverse rate; cutting moves use the F word on their own source line,
or the default feed when the line has none.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Optional, Union

import numpy as np

from .toolpath.base import CompiledProgram, MoveClass, Position, ToolpathPoint
from .units import Units

RAPID_FEED_RATE = 2000.0
DEFAULT_FEED_RATE = 500.0
FALLBACK_SEGMENT_DURATION = 0.1
MIN_SEGMENT_DURATION = 0.01

POINTER_SCALE_FACTOR = 0.02
POINTER_SCALE_MIN = 0.01
POINTER_SCALE_MAX = 0.05

PointLike = Union[ToolpathPoint, Position]


@dataclass
class ToolpathStatistics:
    """Distance, time and move counts for a whole toolpath."""

    total_distance: float = 0.0
    rapid_distance: float = 0.0
    cutting_distance: float = 0.0
    estimated_time_seconds: float = 0.0
    rapid_move_count: int = 0
    cutting_move_count: int = 0
    arc_move_count: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Measurement:
    """Distance between two picked points."""

    total: float
    dx: float
    dy: float
    dz: float


def _position(p: PointLike) -> Position:
    return p.position if isinstance(p, ToolpathPoint) else p


def _distance(a: Position, b: Position) -> float:
    return math.sqrt(
        (b[0] - a[0]) ** 2 + (b[1] - a[1]) ** 2 + (b[2] - a[2]) ** 2
    )


def feed_rate_for_point(
    program: CompiledProgram,
    index: int,
    rapid_feed: float = RAPID_FEED_RATE,
    default_feed: float = DEFAULT_FEED_RATE,
) -> float:
    """Feed rate governing the move that ends at toolpath point *index*."""
    point = program.toolpath[index]
    if point.move_class is MoveClass.RAPID:
        return rapid_feed
    cmd = program.command_for_line(point.source_line)
    if cmd is not None and cmd.feed_rate and cmd.feed_rate > 0:
        return cmd.feed_rate
    return default_feed


def segment_duration(
    program: CompiledProgram,
    from_index: int,
    to_index: int,
    rapid_feed: float = RAPID_FEED_RATE,
    default_feed: float = DEFAULT_FEED_RATE,
) -> float:
    """Seconds needed to travel from one toolpath point to another.

    Returns ``FALLBACK_SEGMENT_DURATION`` when either index is out of range
    and never less than ``MIN_SEGMENT_DURATION``.
    """
    n = len(program.toolpath)
    if not (0 <= from_index < n and 0 <= to_index < n):
        return FALLBACK_SEGMENT_DURATION

    distance = _distance(
        program.toolpath[from_index].position,
        program.toolpath[to_index].position,
    )
    feed = feed_rate_for_point(program, to_index, rapid_feed, default_feed)
    feed_per_second = feed / 60.0
    return max(MIN_SEGMENT_DURATION, distance / feed_per_second)


def interpolate_position(a: PointLike, b: PointLike, fraction: float) -> Position:
    """Linear per-axis interpolation; *fraction* is not clamped."""
    pa = _position(a)
    pb = _position(b)
    return (
        pa[0] + (pb[0] - pa[0]) * fraction,
        pa[1] + (pb[1] - pa[1]) * fraction,
        pa[2] + (pb[2] - pa[2]) * fraction,
    )


def adaptive_pointer_scale(program: Optional[CompiledProgram]) -> float:
    """Size of the tool indicator relative to the workpiece."""
    if program is None:
        return POINTER_SCALE_FACTOR
    ex, ey, ez = program.bounds.extents
    max_dim = max(ex, ey, abs(ez))
    return max(POINTER_SCALE_MIN, min(POINTER_SCALE_MAX, max_dim * POINTER_SCALE_FACTOR))


def aggregate_statistics(
    program: CompiledProgram,
    rapid_feed: float = RAPID_FEED_RATE,
    default_feed: float = DEFAULT_FEED_RATE,
) -> ToolpathStatistics:
    """Walk the toolpath once and sum distances, time and move counts.

    Each move is classified by its destination point.
    """
    stats = ToolpathStatistics()
    if len(program.toolpath) < 2:
        return stats

    positions = program.positions()
    distances = np.linalg.norm(np.diff(positions, axis=0), axis=1)

    minutes = 0.0
    for offset, distance in enumerate(distances):
        index = offset + 1
        point = program.toolpath[index]
        distance = float(distance)
        stats.total_distance += distance
        minutes += distance / feed_rate_for_point(program, index, rapid_feed, default_feed)

        if point.move_class is MoveClass.RAPID:
            stats.rapid_distance += distance
            stats.rapid_move_count += 1
        else:
            stats.cutting_distance += distance
            stats.cutting_move_count += 1
            cmd = program.command_for_line(point.source_line)
            if cmd is not None and cmd.motion_type.is_arc:
                stats.arc_move_count += 1

    stats.estimated_time_seconds = minutes * 60.0
    return stats


def measure_distance(a: PointLike, b: PointLike) -> Measurement:
    """Straight-line distance and absolute per-axis deltas."""
    pa = _position(a)
    pb = _position(b)
    return Measurement(
        total=_distance(pa, pb),
        dx=abs(pb[0] - pa[0]),
        dy=abs(pb[1] - pa[1]),
        dz=abs(pb[2] - pa[2]),
    )


def depth_range(program: CompiledProgram) -> tuple[float, float]:
    """``(z_min, z_max)`` of the program bounds."""
    return program.bounds.min[2], program.bounds.max[2]


def points_in_depth_range(
    program: CompiledProgram,
    z_min: float,
    z_max: float,
) -> list[int]:
    """Indexes of toolpath points with ``z_min <= z <= z_max``."""
    if z_min > z_max:
        z_min, z_max = z_max, z_min
    zs = program.positions()[:, 2]
    mask = (zs >= z_min) & (zs <= z_max)
    return [int(i) for i in np.flatnonzero(mask)]


def format_distance(distance: float, units: Units = Units.MM) -> str:
    """Human-readable distance; metric values switch to metres from 1000 mm."""
    if units is Units.INCH:
        return f"{distance:.2f} {units.label()}"
    if distance >= 1000:
        return f"{distance / 1000:.2f} m"
    return f"{distance:.1f} {units.label()}"


def format_duration(seconds: float) -> str:
    """Human-readable duration: ``12.3s``, ``2m 5s`` or ``1h 2m``."""
    if seconds >= 3600:
        hours = int(seconds // 3600)
        mins = int((seconds % 3600) // 60)
        return f"{hours}h {mins}m"
    if seconds >= 60:
        mins = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{mins}m {secs}s"
    return f"{seconds:.1f}s"
