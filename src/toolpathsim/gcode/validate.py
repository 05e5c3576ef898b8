"""G-code validation and sanity checks.

Two independent passes:

- :func:`validate_gcode` is a line-based lint of the program text
  (unsupported codes, missing feed, rapid plunges, stray characters).
  It does not share the interpreter's parsing, so a program it flags still
  compiles.
- :func:`check_envelope` checks a compiled toolpath against machine travel
  limits.

Line numbers in issues are 1-based, as shown in an editor gutter.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from ..core.toolpath.base import CompiledProgram

SUPPORTED_GCODES = frozenset({
    "G0", "G00", "G1", "G01", "G2", "G02", "G3", "G03",
    "G17", "G20", "G21", "G90", "G91",
})
SUPPORTED_MCODES = frozenset({
    "M0", "M1", "M2", "M3", "M4", "M5", "M6", "M8", "M9", "M30",
})
_CUTTING_GCODES = frozenset({"G1", "G01", "G2", "G02", "G3", "G03"})
_RAPID_GCODES = frozenset({"G0", "G00"})

_PAREN_COMMENT_RE = re.compile(r"\([^)]*\)")
_TAIL_COMMENT_RE = re.compile(r";.*$")
_GCODE_RE = re.compile(r"G\d+", re.IGNORECASE)
_MCODE_RE = re.compile(r"M\d+", re.IGNORECASE)
_FEED_RE = re.compile(r"F(\d+(?:\.\d*)?|\.\d+)", re.IGNORECASE)
_Z_RE = re.compile(r"Z(-?(?:\d+(?:\.\d*)?|\.\d+))", re.IGNORECASE)
_AXIS_RE = re.compile(r"[XYZ][-\d.]+", re.IGNORECASE)
_RAPID_WORD_RE = re.compile(r"G0?0?\s", re.IGNORECASE)
_VALID_CHARS_RE = re.compile(r"^[GMXYZIJKFSPRT%\d\s.\-]+$", re.IGNORECASE)


@dataclass
class MachineEnvelope:
    """Axis travel limits of a machine, in program units."""

    x_min: float = -1000.0
    x_max: float = 1000.0
    y_min: float = -1000.0
    y_max: float = 1000.0
    z_min: float = -500.0
    z_max: float = 500.0

    def limits(self) -> tuple[tuple[str, float, float], ...]:
        return (
            ("X", self.x_min, self.x_max),
            ("Y", self.y_min, self.y_max),
            ("Z", self.z_min, self.z_max),
        )


@dataclass
class ValidationIssue:
    """A single problem found in the program."""

    line: int
    severity: str  # "error" or "warning"
    message: str
    code: str

    def to_dict(self) -> dict:
        return {
            "line": self.line,
            "severity": self.severity,
            "message": self.message,
            "code": self.code,
        }


@dataclass
class ValidationResult:
    """Result of validating a program."""

    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == "error")

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == "warning")

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    @property
    def has_warnings(self) -> bool:
        return self.warning_count > 0

    @property
    def is_ok(self) -> bool:
        return len(self.issues) == 0

    def for_line(self, line: int) -> list[ValidationIssue]:
        return [i for i in self.issues if i.line == line]


def validate_gcode(text: str) -> ValidationResult:
    """Lint *text* line by line.

    Checks performed:
    - G- and M-codes outside the supported set (warning)
    - Axis move in cutting mode before any feed rate (warning)
    - Rapid move down to a negative Z (warning)
    - Characters that cannot appear in a supported block (error)
    """
    result = ValidationResult()
    feed_rate: Optional[float] = None
    last_z: Optional[float] = None
    cutting_mode = False

    for index, raw in enumerate(text.split("\n")):
        line_no = index + 1
        line = raw.strip()
        if not line or line[0] in "(;%":
            continue

        code = _TAIL_COMMENT_RE.sub("", _PAREN_COMMENT_RE.sub("", line)).strip()
        if not code:
            continue

        gcodes = [g.upper() for g in _GCODE_RE.findall(code)]
        for gcode in gcodes:
            if gcode not in SUPPORTED_GCODES:
                result.issues.append(ValidationIssue(
                    line_no, "warning", f"Unsupported G-code: {gcode}", gcode,
                ))
            if gcode in _CUTTING_GCODES:
                cutting_mode = True
            elif gcode in _RAPID_GCODES:
                cutting_mode = False

        for mcode in (m.upper() for m in _MCODE_RE.findall(code)):
            if mcode not in SUPPORTED_MCODES:
                result.issues.append(ValidationIssue(
                    line_no, "warning", f"Unsupported M-code: {mcode}", mcode,
                ))

        feed_match = _FEED_RE.search(code)
        if feed_match:
            feed_rate = float(feed_match.group(1))

        if cutting_mode and feed_rate is None and _AXIS_RE.search(code):
            result.issues.append(ValidationIssue(
                line_no, "warning",
                "Cutting move without feed rate specified", "MISSING_FEED",
            ))

        is_rapid = bool(_RAPID_WORD_RE.search(code)) or (not gcodes and not cutting_mode)
        z_match = _Z_RE.search(code)
        if z_match:
            new_z = float(z_match.group(1))
            if is_rapid and last_z is not None and new_z < last_z and new_z < 0:
                result.issues.append(ValidationIssue(
                    line_no, "warning",
                    f"Rapid plunge detected: Z{new_z:g} (consider using G1)",
                    "RAPID_PLUNGE",
                ))
            last_z = new_z

        if not _VALID_CHARS_RE.match(code):
            result.issues.append(ValidationIssue(
                line_no, "error", "Malformed command syntax", "SYNTAX_ERROR",
            ))

    return result


def check_envelope(
    program: CompiledProgram,
    envelope: MachineEnvelope,
) -> ValidationResult:
    """Flag toolpath points outside *envelope*.

    Reports at most one issue per axis per source line; arcs produce many
    points for a single line.
    """
    result = ValidationResult()
    seen: set[tuple[int, str]] = set()

    for pt in program.toolpath[1:]:
        for (axis, lo, hi), value in zip(envelope.limits(), pt.position):
            if lo <= value <= hi or (pt.source_line, axis) in seen:
                continue
            seen.add((pt.source_line, axis))
            result.issues.append(ValidationIssue(
                pt.source_line + 1, "error",
                f"{axis}={value:.4f} outside travel [{lo}, {hi}]",
                "OUT_OF_TRAVEL",
            ))

    return result
