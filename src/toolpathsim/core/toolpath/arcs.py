"""Circular arc tessellation for G2/G3 moves.

The arc centre is the start point offset by (I, J).  The radius comes from
the offset alone, so an end point that does not sit on that circle is not
corrected: the last tessellated point lies on the computed circle at the
end angle.  Z is interpolated linearly (helical pitch from K is ignored).
"""

from __future__ import annotations

import math

import numpy as np

from .base import MoveClass, Position, ToolpathPoint

# Maximum sweep of one tessellated segment (radians)
MAX_SEGMENT_ANGLE = math.pi / 16
MIN_SEGMENTS = 8


def arc_sweep(
    start: Position,
    end: Position,
    center: tuple[float, float],
    clockwise: bool,
) -> tuple[float, float]:
    """Return ``(start_angle, end_angle)`` resolved to the arc direction."""
    cx, cy = center
    start_angle = math.atan2(start[1] - cy, start[0] - cx)
    end_angle = math.atan2(end[1] - cy, end[0] - cx)

    if clockwise:
        if end_angle >= start_angle:
            end_angle -= 2 * math.pi
    elif end_angle <= start_angle:
        end_angle += 2 * math.pi

    return start_angle, end_angle


def segment_count(span: float) -> int:
    """Number of chords for an angular *span*."""
    if not math.isfinite(span):
        return MIN_SEGMENTS
    return max(MIN_SEGMENTS, math.ceil(abs(span) / MAX_SEGMENT_ANGLE))


def tessellate_arc(
    start: Position,
    end: Position,
    i: float,
    j: float,
    clockwise: bool,
    source_line: int,
) -> list[ToolpathPoint]:
    """Approximate an arc from *start* to *end* by cutting points.

    The start point itself is not emitted; the result holds
    ``segment_count(span)`` points ending at the end angle.
    """
    center = (start[0] + i, start[1] + j)
    radius = math.hypot(i, j)
    start_angle, end_angle = arc_sweep(start, end, center, clockwise)
    segments = segment_count(end_angle - start_angle)

    t = np.arange(1, segments + 1, dtype=np.float64) / segments
    angles = start_angle + (end_angle - start_angle) * t
    xs = center[0] + radius * np.cos(angles)
    ys = center[1] + radius * np.sin(angles)
    zs = start[2] + (end[2] - start[2]) * t

    return [
        ToolpathPoint((float(x), float(y), float(z)), MoveClass.CUTTING, source_line)
        for x, y, z in zip(xs, ys, zs)
    ]
