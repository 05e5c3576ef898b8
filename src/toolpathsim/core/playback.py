"""Playback driver: advances a tool marker along a compiled toolpath.

The driver is ticked from a display loop with the elapsed wall time.  It
keeps an index into the toolpath plus a sub-segment progress in ``[0, 1)``;
the marker position is the interpolation between the current point and the
next one.  All transport operations (step, seek, stop) are immediate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .kinematics import (
    DEFAULT_FEED_RATE,
    RAPID_FEED_RATE,
    interpolate_position,
    segment_duration,
)
from .toolpath.base import CompiledProgram, Position

SPEED_OPTIONS = (0.25, 0.5, 1.0, 2.0, 4.0)


@dataclass
class PlaybackState:
    """Mutable transport state owned by the application."""

    current_index: int = 0
    progress: float = 0.0
    is_playing: bool = False
    speed: float = 1.0

    def play(self) -> None:
        self.is_playing = True

    def pause(self) -> None:
        self.is_playing = False

    def reset(self) -> None:
        """Back to the first point without touching play/pause."""
        self.current_index = 0
        self.progress = 0.0

    def stop(self) -> None:
        self.is_playing = False
        self.reset()

    def seek(self, program: CompiledProgram, index: int) -> None:
        self.current_index = max(0, min(index, program.last_index))
        self.progress = 0.0

    def seek_fraction(self, program: CompiledProgram, fraction: float) -> None:
        """Jump to a fraction of the toolpath, as a scrub bar does.

        The fraction is clamped to ``[0, 1]``; NaN leaves the state alone.
        """
        if math.isnan(fraction):
            return
        fraction = max(0.0, min(1.0, fraction))
        self.seek(program, math.floor(fraction * program.last_index))

    def step_forward(self, program: CompiledProgram) -> None:
        self.seek(program, self.current_index + 1)

    def step_backward(self, program: CompiledProgram) -> None:
        self.seek(program, self.current_index - 1)


def advance(
    state: PlaybackState,
    program: CompiledProgram,
    elapsed: float,
    rapid_feed: float = RAPID_FEED_RATE,
    default_feed: float = DEFAULT_FEED_RATE,
) -> None:
    """Advance *state* by *elapsed* seconds of wall time.

    At most one toolpath point is passed per call; progress beyond the end
    of a segment is dropped.  Playback pauses on the last point.
    """
    if not state.is_playing:
        return
    if state.current_index >= program.last_index:
        state.current_index = program.last_index
        state.progress = 0.0
        state.pause()
        return

    duration = segment_duration(
        program, state.current_index, state.current_index + 1,
        rapid_feed, default_feed,
    )
    state.progress += elapsed * state.speed / duration

    if state.progress >= 1.0:
        state.progress = 0.0
        state.current_index += 1
        if state.current_index >= program.last_index:
            state.pause()


def current_position(state: PlaybackState, program: CompiledProgram) -> Position:
    """Interpolated tool position for *state*."""
    index = max(0, min(state.current_index, program.last_index))
    point = program.toolpath[index]
    if index >= program.last_index:
        return point.position
    return interpolate_position(point, program.toolpath[index + 1], state.progress)


def progress_percent(state: PlaybackState, program: CompiledProgram) -> float:
    """Position through the toolpath as a percentage of its points."""
    if program.last_index <= 0:
        return 0.0
    return state.current_index / program.last_index * 100.0
