"""CLI entry point: ``python -m toolpathsim program.nc``"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .app import ViewerApp
from .config.machine_profiles import DEFAULT_PROFILE, list_profiles
from .core.kinematics import format_distance, format_duration
from .core.units import detect_units
from .gcode.templates import list_templates
from .logging_utils import setup_logging

log = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="toolpathsim",
        description="Compile a G-code program and report its toolpath.",
    )
    p.add_argument("input", type=Path, nargs="?", default=None,
                   help="G-code file (omit to use --template)")
    p.add_argument("--template", choices=[t.id for t in list_templates()],
                   default=None,
                   help="Built-in program to use instead of a file (default: sample)")
    p.add_argument("--machine", choices=[m.name for m in list_profiles()],
                   default=DEFAULT_PROFILE,
                   help=f"Machine profile for time estimates (default: {DEFAULT_PROFILE})")
    p.add_argument("--json", action="store_true",
                   help="Print the compiled program and statistics as JSON")
    p.add_argument("--validate", action="store_true",
                   help="Lint the program text and check machine travel")
    p.add_argument("--strict", action="store_true",
                   help="Exit with status 1 when validation finds errors")
    p.add_argument("--seek", type=int, default=None, metavar="INDEX",
                   help="Report the tool position at a toolpath index")
    p.add_argument("--log-level", default="WARNING")
    return p


def _print_report(app: ViewerApp) -> None:
    program = app.program
    stats = app.statistics
    units = detect_units(program)
    lo, hi = program.bounds.min, program.bounds.max

    print(f"Program: {app.settings.current_file_name}")
    print(f"  Commands: {len(program.commands)}  Toolpath points: {len(program.toolpath)}")
    print(f"  Bounds: ({lo[0]:g}, {lo[1]:g}, {lo[2]:g}) -> ({hi[0]:g}, {hi[1]:g}, {hi[2]:g})")
    print(f"Machine: {app.profile}")
    print(f"  Total distance: {format_distance(stats.total_distance, units)}")
    print(f"  Cutting: {format_distance(stats.cutting_distance, units)}"
          f"  Rapid: {format_distance(stats.rapid_distance, units)}")
    print(f"  Moves: {stats.cutting_move_count} cut, {stats.rapid_move_count} rapid,"
          f" {stats.arc_move_count} arc")
    print(f"  Est. time: {format_duration(stats.estimated_time_seconds)}")


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(args.log_level)

    app = ViewerApp()
    app.set_machine_profile(args.machine)
    if args.input is not None:
        try:
            app.load_file(args.input)
        except FileNotFoundError:
            print(f"Error: file not found: {args.input}", file=sys.stderr)
            return 1
        except OSError as exc:
            print(f"Error: cannot read {args.input}: {exc}", file=sys.stderr)
            return 1
    else:
        app.load_template(args.template or "sample")

    result = app.validate(include_envelope=True) if args.validate else None

    if args.seek is not None:
        app.seek(args.seek)

    if args.json:
        payload = {
            "file": app.settings.current_file_name,
            "machine": app.profile.name,
            "program": app.program.to_dict(),
            "statistics": app.statistics.to_dict(),
        }
        if result is not None:
            payload["issues"] = [i.to_dict() for i in result.issues]
        if args.seek is not None:
            payload["seek"] = {
                "index": app.playback.current_index,
                "position": list(app.tool_position),
            }
        print(json.dumps(payload, indent=2))
    else:
        _print_report(app)
        if args.seek is not None:
            x, y, z = app.tool_position
            cmd = app.current_command
            print(f"Position at index {app.playback.current_index}: ({x:g}, {y:g}, {z:g})")
            if cmd is not None:
                print(f"  Line {cmd.line_number + 1}: {cmd.raw_text}")
        if result is not None:
            if result.is_ok:
                print("Validation: no issues")
            else:
                print(f"Validation: {result.error_count} error(s), "
                      f"{result.warning_count} warning(s)")
                for issue in result.issues:
                    print(f"  line {issue.line}: {issue.severity.upper()}: "
                          f"{issue.message} [{issue.code}]")

    if args.strict and result is not None and result.has_errors:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
