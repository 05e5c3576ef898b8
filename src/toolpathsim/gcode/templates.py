"""Built-in example programs.

Apart from the short sample, the templates are generated from the line
helpers in :mod:`gcode_writer` so that layer and hole repetition stays in
one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .gcode_writer import arc, comment, linear, rapid, with_comment

SAMPLE_GCODE = """\
; Sample CNC Program - Square Pocket
; Units: mm
G21 ; Set to millimeters
G90 ; Absolute positioning
G17 ; XY plane selection

; Initialize
G0 Z5.0 ; Rapid to safe height
G0 X0 Y0 ; Rapid to origin

; Start cutting
M3 S12000 ; Spindle on
G0 X10 Y10 ; Move to start position
G1 Z-2.0 F100 ; Plunge

; Cut square pocket - Layer 1
G1 X50 Y10 F500
G1 X50 Y50
G1 X10 Y50
G1 X10 Y10

; Inner pass
G1 X20 Y20
G1 X40 Y20
G1 X40 Y40
G1 X20 Y40
G1 X20 Y20

; Circular pocket
G0 Z2.0
G0 X70 Y30
G1 Z-2.0 F100
G2 X70 Y30 I10 J0 F400

; Retract
G0 Z5.0
G0 X0 Y0

M5 ; Spindle off
M30 ; Program end
"""


@dataclass(frozen=True)
class GCodeTemplate:
    """A named example program."""

    id: str
    name: str
    description: str
    gcode: str

    @property
    def file_name(self) -> str:
        return f"{self.id}.nc"


def _banner(*lines: str) -> list[str]:
    rule = "=" * 43
    return [comment(rule), *(comment(line) for line in lines), comment(rule), ""]


def _setup(safe_z: float, rpm: int, dwell: int) -> list[str]:
    return [
        with_comment("G21", "Metric units (mm)"),
        with_comment("G90", "Absolute positioning"),
        with_comment("G17", "XY plane selection"),
        with_comment("G54", "Work coordinate system"),
        "",
        comment("INITIALIZE"),
        with_comment(rapid(z=safe_z), "Rapid to safe height"),
        with_comment(f"M3 S{rpm}", f"Spindle ON, {rpm} RPM"),
        with_comment(f"G4 P{dwell}", "Dwell for spindle"),
        "",
    ]


def _finish(safe_z: float) -> list[str]:
    return [
        "",
        comment("RETRACT"),
        rapid(z=safe_z),
        rapid(0, 0),
        with_comment("M5", "Spindle OFF"),
        with_comment("M30", "Program end"),
    ]


def _build_facing() -> str:
    lines = _banner(
        "FACE MILLING OPERATION",
        "Workpiece: 100 x 100 x 20 mm Aluminum",
        "Tool: 50mm Face Mill",
        "Depth of Cut: 1.0mm",
        "Stepover: 35mm (70%)",
    )
    lines += _setup(safe_z=25.0, rpm=2000, dwell=2)
    lines += [comment("APPROACH"), rapid(-30, 15), rapid(z=2.0)]

    rows = (15, 50, 85)
    for n, y in enumerate(rows):
        x_end = 130 if n % 2 == 0 else -30
        lines += [
            "",
            comment(f"PASS {n + 1}"),
            with_comment(linear(z=-1.0, f=150), "Plunge"),
            with_comment(linear(x_end, y, f=800), "Cut across workpiece"),
            with_comment(rapid(z=2.0), "Rapid up"),
        ]
        if n + 1 < len(rows):
            lines.append(with_comment(rapid(x_end, rows[n + 1]), "Rapid to next row start"))

    lines += _finish(25.0)
    return "\n".join(lines) + "\n"


_POCKET_LOOP = [
    (20, 50), (70, 50), (70, 20), (26, 20),
    (26, 44), (64, 44), (64, 26), (32, 26),
    (32, 38), (58, 38), (58, 32), (38, 32),
]


def _build_pocket() -> str:
    lines = _banner(
        "POCKET MILLING OPERATION",
        "Pocket: 60 x 40 x 8 mm",
        "Tool: 10mm End Mill",
        "Depth per Pass: 2.0mm",
        "Stepover: 6mm (60%)",
    )
    lines += _setup(safe_z=20.0, rpm=3000, dwell=1)
    lines += [comment("POCKET START POSITION"), rapid(20, 20), rapid(z=2.0)]

    for layer, depth in enumerate((-2.0, -4.0, -6.0, -8.0), start=1):
        lines += ["", comment(f"LAYER {layer}: Z{depth}")]
        if layer > 1:
            lines.append(rapid(20, 20))
        lines.append(with_comment(linear(z=depth, f=100), "Plunge"))
        first_x, first_y = _POCKET_LOOP[0]
        lines.append(linear(first_x, first_y, f=600))
        lines += [linear(x, y) for x, y in _POCKET_LOOP[1:]]
        if layer < 4:
            lines.append(rapid(z=2.0))

    lines += [
        "",
        comment("FINISH PASS - perimeter"),
        linear(20, 20, f=300),
        linear(20, 50),
        linear(70, 50),
        linear(70, 20),
        linear(20, 20),
    ]
    lines += _finish(20.0)
    return "\n".join(lines) + "\n"


def _build_drilling() -> str:
    lines = _banner(
        "DRILLING OPERATION - PECK DRILL",
        "Pattern: 4 x 4 holes (16 total)",
        "Hole Spacing: 20mm",
        "Hole Depth: 15mm",
        "Peck Depth: 3mm",
    )
    lines += _setup(safe_z=25.0, rpm=1500, dwell=1)

    spacing = (15, 35, 55, 75)
    for row, y in enumerate(spacing, start=1):
        lines += ["", comment(f"ROW {row}")]
        for x in spacing:
            lines.append(rapid(x, y))
            if row == 1:
                # Pecked with G0/G1 pairs rather than a G83 cycle
                for depth in (-3.0, -6.0, -9.0, -12.0):
                    lines.append(linear(z=depth, f=100))
                    lines.append(with_comment(rapid(z=1.0), "Retract"))
                lines.append(with_comment(linear(z=-15.0, f=100), "Final depth"))
            else:
                lines.append(linear(z=-15.0, f=80))
            lines.append(rapid(z=2.0))

    lines += _finish(25.0)
    return "\n".join(lines) + "\n"


def _contour_profile(feed: float) -> list[str]:
    return [
        linear(10, 10, f=feed),
        arc(20, 0, 10, 0, clockwise=True),
        linear(60, 0),
        arc(70, 10, 0, 10, clockwise=True),
        linear(70, 30),
        arc(60, 40, -10, 0, clockwise=False),
        linear(50, 40),
        arc(40, 50, 0, 10, clockwise=False),
        linear(40, 60),
        arc(30, 70, -10, 0, clockwise=True),
        linear(20, 70),
        arc(10, 60, 0, -10, clockwise=True),
        linear(10, 40),
    ]


def _build_contour() -> str:
    lines = _banner(
        "CONTOUR CUTTING OPERATION",
        "Profile: shape with arcs",
        "Material: 80 x 80 x 10 mm",
        "Tool: 6mm End Mill",
        "Depth: 10mm (full through)",
    )
    lines += _setup(safe_z=20.0, rpm=4000, dwell=1)
    lines += [
        comment("APPROACH"),
        rapid(0, 40),
        rapid(z=2.0),
        with_comment(linear(z=-2.5, f=100), "Plunge"),
        with_comment(linear(10, 40, f=400), "Lead-in"),
    ]

    for layer, depth in enumerate((-2.5, -5.0, -7.5, -10.0), start=1):
        lines += ["", comment(f"LAYER {layer}: Z{depth}")]
        if layer > 1:
            lines += [rapid(10, 40), linear(z=depth, f=100)]
        lines += _contour_profile(250.0 if layer == 4 else 400.0)
        if layer < 4:
            lines.append(rapid(z=2.0))

    lines.append(with_comment(linear(0, 40), "Lead-out"))
    lines += _finish(20.0)
    return "\n".join(lines) + "\n"


_BUILDERS: dict[str, tuple[str, str, Callable[[], str]]] = {
    "facing": ("Face Milling", "Surface facing operation - 100x100mm workpiece", _build_facing),
    "pocket": ("Pocket Milling", "Rectangular pocket - 60x40mm, 8mm deep", _build_pocket),
    "drilling": ("Drilling Pattern", "4x4 hole pattern - 15mm deep", _build_drilling),
    "contour": ("Contour Cut", "Profile cut with arcs", _build_contour),
    "sample": ("Sample Program", "Quick demo - square pocket with circle", lambda: SAMPLE_GCODE),
}


def get_template(template_id: str) -> GCodeTemplate:
    """Return the built-in template *template_id*.

    Raises
    ------
    KeyError:
        If no template has that id.
    """
    try:
        name, description, build = _BUILDERS[template_id]
    except KeyError:
        raise KeyError(f"Unknown template: {template_id!r}") from None
    return GCodeTemplate(template_id, name, description, build())


def list_templates() -> list[GCodeTemplate]:
    return [get_template(template_id) for template_id in _BUILDERS]
