"""Tests for G-code validation."""

import pytest

from toolpathsim.core.interpreter import compile_program
from toolpathsim.gcode.validate import MachineEnvelope, check_envelope, validate_gcode


@pytest.fixture
def small_envelope() -> MachineEnvelope:
    return MachineEnvelope(
        x_min=0.0, x_max=10.0,
        y_min=0.0, y_max=6.0,
        z_min=-10.0, z_max=5.0,
    )


def _codes(result):
    return [issue.code for issue in result.issues]


class TestValidateGCode:
    def test_clean_program_passes(self):
        text = "G21\nG90\nG0 Z5\nG1 Z-1 F100\nG1 X10 Y10\nG0 Z5\nM30"
        result = validate_gcode(text)
        assert result.is_ok
        assert result.error_count == 0

    def test_unsupported_gcode_is_warning(self):
        result = validate_gcode("G54\nG0 X1")
        assert _codes(result) == ["G54"]
        assert result.issues[0].severity == "warning"
        assert result.issues[0].line == 1
        assert not result.has_errors

    def test_unsupported_mcode_is_warning(self):
        result = validate_gcode("M7")
        assert _codes(result) == ["M7"]
        assert result.has_warnings

    def test_lowercase_codes_are_normalised(self):
        result = validate_gcode("g54")
        assert _codes(result) == ["G54"]

    def test_missing_feed(self):
        result = validate_gcode("G1 X10 Y10")
        assert _codes(result) == ["MISSING_FEED"]

    def test_feed_on_earlier_line_counts(self):
        result = validate_gcode("G1 Z-1 F100\nG1 X10")
        assert "MISSING_FEED" not in _codes(result)

    def test_rapid_plunge(self):
        result = validate_gcode("G0 Z5\nG0 Z-2")
        (issue,) = result.issues
        assert issue.code == "RAPID_PLUNGE"
        assert issue.line == 2
        assert issue.message == "Rapid plunge detected: Z-2 (consider using G1)"

    def test_feed_plunge_is_fine(self):
        result = validate_gcode("G0 Z5\nG1 Z-2 F100")
        assert result.is_ok

    def test_rapid_retract_is_fine(self):
        result = validate_gcode("G0 Z-2\nG0 Z5")
        assert result.is_ok

    def test_syntax_error(self):
        result = validate_gcode("G1 X10 Q5 F100")
        assert _codes(result) == ["SYNTAX_ERROR"]
        assert result.has_errors

    def test_comments_are_ignored(self):
        text = "; header with Q and ! chars\n(more #notes)\n%\nG0 X1 (inline !) ; tail @"
        assert validate_gcode(text).is_ok

    def test_line_numbers_are_one_based(self):
        result = validate_gcode("\n\nG1 X1")
        assert result.issues[0].line == 3
        assert result.for_line(3) == result.issues

    def test_to_dict(self):
        issue = validate_gcode("M7").issues[0]
        assert issue.to_dict() == {
            "line": 1,
            "severity": "warning",
            "message": "Unsupported M-code: M7",
            "code": "M7",
        }


class TestCheckEnvelope:
    def test_inside_envelope(self, small_envelope):
        program = compile_program("G0 Z5\nG1 X5 Y5 Z-1 F100")
        assert check_envelope(program, small_envelope).is_ok

    @pytest.mark.parametrize("text, axis", [
        ("G1 X15 F100", "X"),
        ("G1 Y-1 F100", "Y"),
        ("G1 Z-11 F100", "Z"),
    ])
    def test_out_of_travel(self, small_envelope, text, axis):
        result = check_envelope(compile_program(text), small_envelope)
        (issue,) = result.issues
        assert issue.code == "OUT_OF_TRAVEL"
        assert issue.severity == "error"
        assert issue.line == 1
        assert issue.message.startswith(f"{axis}=")

    def test_arc_reported_once_per_axis(self, small_envelope):
        # Half circle over the top reaches Y=5, beyond the 0..6 window only in X
        program = compile_program("G0 X5\nG2 X15 Y0 I5 J0 F100")
        result = check_envelope(program, small_envelope)
        assert [(i.line, i.message[0]) for i in result.issues] == [(2, "X")]

    def test_origin_is_not_checked(self):
        envelope = MachineEnvelope(x_min=1.0, x_max=10.0)
        program = compile_program("G0 X5")
        assert check_envelope(program, envelope).is_ok
