"""Low-level G-code line formatting helpers."""

from __future__ import annotations

from typing import Optional


def fmt(value: float, decimals: int = 4) -> str:
    """Format a float for G-code, stripping trailing zeros."""
    text = f"{value:.{decimals}f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _axes(
    x: Optional[float],
    y: Optional[float],
    z: Optional[float],
) -> list[str]:
    parts = []
    if x is not None:
        parts.append(f"X{fmt(x)}")
    if y is not None:
        parts.append(f"Y{fmt(y)}")
    if z is not None:
        parts.append(f"Z{fmt(z)}")
    return parts


def with_comment(line: str, text: Optional[str]) -> str:
    """Append a trailing ``;`` comment to *line*."""
    if not text:
        return line
    return f"{line} ; {text}"


def rapid(
    x: Optional[float] = None,
    y: Optional[float] = None,
    z: Optional[float] = None,
) -> str:
    """G0 rapid traverse."""
    return " ".join(["G0", *_axes(x, y, z)])


def linear(
    x: Optional[float] = None,
    y: Optional[float] = None,
    z: Optional[float] = None,
    f: Optional[float] = None,
) -> str:
    """G1 linear interpolation."""
    parts = ["G1", *_axes(x, y, z)]
    if f is not None:
        parts.append(f"F{fmt(f, 1)}")
    return " ".join(parts)


def arc(
    x: float,
    y: float,
    i: float,
    j: float,
    clockwise: bool = True,
    z: Optional[float] = None,
    f: Optional[float] = None,
) -> str:
    """G2/G3 arc with centre offset (I, J) from the start point."""
    parts = ["G2" if clockwise else "G3", *_axes(x, y, z)]
    parts.append(f"I{fmt(i)}")
    parts.append(f"J{fmt(j)}")
    if f is not None:
        parts.append(f"F{fmt(f, 1)}")
    return " ".join(parts)


def comment(text: str) -> str:
    """Whole-line ``;`` comment."""
    return f"; {text}" if text else ";"


def block_comment(text: str) -> str:
    """Wrap *text* in a parenthetical comment."""
    # Nested parens would end the comment early
    cleaned = text.replace("(", "").replace(")", "")
    return f"({cleaned})"
