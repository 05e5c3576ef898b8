"""G-code interpreter: program text to a compiled toolpath.

Each line is handled in order with two pieces of modal state carried
forward: the absolute tool position and the current motion mode (G0-G3).
Fields are pulled out with patterns rather than a tokenizer; values never
contain the comment delimiters, so stripping ``(...)`` and ``;...`` first is
enough.  Malformed content never raises; it degrades into an ``OTHER``
command with no coordinate effect.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Optional

import numpy as np

from .toolpath.arcs import tessellate_arc
from .toolpath.base import (
    ORIGIN_POINT,
    BoundingVolume,
    Command,
    CompiledProgram,
    MotionType,
    MoveClass,
    ToolpathPoint,
)

log = logging.getLogger(__name__)

_COMMENT_RE = re.compile(r"\(([^)]*)\)|;(.*)$")
_PAREN_COMMENT_RE = re.compile(r"\([^)]*\)")
_TAIL_COMMENT_RE = re.compile(r";.*$")
_G_RE = re.compile(r"G(\d+)", re.IGNORECASE)
_NUMBER = r"(-?(?:\d+(?:\.\d*)?|\.\d+))"
_WORD_RES = {
    letter: re.compile(letter + _NUMBER, re.IGNORECASE)
    for letter in "XYZFIJK"
}


def split_comment(line: str) -> tuple[str, Optional[str]]:
    """Split a trimmed line into ``(code_body, comment)``.

    Only the first comment is reported, but every parenthesised run and the
    ``;`` tail are removed from the code body.
    """
    comment = None
    match = _COMMENT_RE.search(line)
    if match:
        comment = match.group(1) if match.group(1) is not None else match.group(2)
    body = _TAIL_COMMENT_RE.sub("", _PAREN_COMMENT_RE.sub("", line)).strip()
    return body, comment.strip() if comment and comment.strip() else None


def parse_word(code: str, letter: str) -> Optional[float]:
    """First signed decimal directly after *letter*, or None."""
    match = _WORD_RES[letter.upper()].search(code)
    return float(match.group(1)) if match else None


def parse_g(code: str) -> Optional[int]:
    match = _G_RE.search(code)
    return int(match.group(1)) if match else None


class _Interpreter:
    """Modal state for a single compilation pass."""

    def __init__(self) -> None:
        self.position = [0.0, 0.0, 0.0]
        self.mode = MotionType.RAPID
        self.commands: list[Command] = []
        self.toolpath: list[ToolpathPoint] = [ORIGIN_POINT]
        self.moved = False

    def feed_line(self, index: int, line: str) -> None:
        trimmed = line.strip()
        if not trimmed:
            return

        code, comment = split_comment(trimmed)
        if not code:
            self.commands.append(Command(index, trimmed, comment=comment))
            return

        g = parse_g(code)
        g_motion = MotionType.from_g(g)
        if g_motion is not None:
            self.mode = g_motion

        x = parse_word(code, "X")
        y = parse_word(code, "Y")
        z = parse_word(code, "Z")
        i = parse_word(code, "I")
        j = parse_word(code, "J")

        cmd = Command(
            line_number=index,
            raw_text=trimmed,
            g=g,
            x=x,
            y=y,
            z=z,
            feed_rate=parse_word(code, "F"),
            i=i,
            j=j,
            k=parse_word(code, "K"),
            comment=comment,
        )
        if g_motion is not None:
            motion = g_motion
        elif cmd.has_axis_words:
            motion = self.mode
        else:
            motion = MotionType.OTHER
        self.commands.append(replace(cmd, motion_type=motion))

        if not cmd.has_axis_words:
            return

        for axis, value in enumerate((x, y, z)):
            if value is not None:
                self.position[axis] = value
        target = (self.position[0], self.position[1], self.position[2])

        if motion.is_arc and (i is not None or j is not None):
            self.toolpath.extend(tessellate_arc(
                self.toolpath[-1].position,
                target,
                i or 0.0,
                j or 0.0,
                clockwise=motion is MotionType.ARC_CW,
                source_line=index,
            ))
        else:
            move_class = MoveClass.RAPID if motion is MotionType.RAPID else MoveClass.CUTTING
            self.toolpath.append(ToolpathPoint(target, move_class, index))
        self.moved = True

    def bounds(self) -> BoundingVolume:
        if not self.moved:
            return BoundingVolume.unit()
        # Fold every point so tessellated arc interiors are enclosed
        pts = np.array([pt.position for pt in self.toolpath], dtype=np.float64)
        lo = pts.min(axis=0)
        hi = pts.max(axis=0)
        return BoundingVolume(
            (float(lo[0]), float(lo[1]), float(lo[2])),
            (float(hi[0]), float(hi[1]), float(hi[2])),
        )


def compile_program(source_text: str) -> CompiledProgram:
    """Interpret *source_text* and return the compiled program.

    The result depends only on the text: modal state starts fresh (tool at
    the origin, rapid mode) on every call.
    """
    interp = _Interpreter()
    for index, line in enumerate(source_text.split("\n")):
        interp.feed_line(index, line)

    program = CompiledProgram(
        commands=tuple(interp.commands),
        toolpath=tuple(interp.toolpath),
        bounds=interp.bounds(),
    )
    log.debug(
        "Compiled %d commands into %d toolpath points",
        len(program.commands), len(program.toolpath),
    )
    return program
