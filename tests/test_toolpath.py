"""Tests for toolpath data structures and arc tessellation."""

import math

import pytest

from toolpathsim.core.toolpath.arcs import arc_sweep, segment_count, tessellate_arc
from toolpathsim.core.toolpath.base import (
    BoundingVolume,
    Command,
    CompiledProgram,
    MotionType,
    MoveClass,
    ToolpathPoint,
)


class TestMotionType:
    @pytest.mark.parametrize("g, expected", [
        (0, MotionType.RAPID),
        (1, MotionType.LINEAR),
        (2, MotionType.ARC_CW),
        (3, MotionType.ARC_CCW),
    ])
    def test_motion_codes(self, g, expected):
        assert MotionType.from_g(g) is expected

    @pytest.mark.parametrize("g", [None, 4, 17, 21, 90])
    def test_non_motion_codes(self, g):
        assert MotionType.from_g(g) is None

    def test_is_arc(self):
        assert MotionType.ARC_CW.is_arc
        assert MotionType.ARC_CCW.is_arc
        assert not MotionType.LINEAR.is_arc


class TestDataModel:
    def test_point_accessors(self):
        pt = ToolpathPoint((1.0, 2.0, 3.0), MoveClass.RAPID, 4)
        assert (pt.x, pt.y, pt.z) == (1.0, 2.0, 3.0)
        assert pt.is_rapid

    def test_bounds_extents(self):
        bounds = BoundingVolume((-1.0, 0.0, -5.0), (9.0, 4.0, 0.0))
        assert bounds.extents == (10.0, 4.0, 5.0)

    def test_has_axis_words(self):
        assert Command(0, "G1 Z-1", g=1, z=-1.0).has_axis_words
        assert not Command(0, "G1 F100 I5", g=1, feed_rate=100.0, i=5.0).has_axis_words

    def test_empty_program_has_origin(self):
        program = CompiledProgram()
        assert len(program.toolpath) == 1
        assert program.last_index == 0
        assert program.bounds == BoundingVolume.unit()

    def test_command_for_point(self):
        cmd = Command(3, "G1 X1 F100", MotionType.LINEAR, g=1, x=1.0, feed_rate=100.0)
        program = CompiledProgram(
            commands=(cmd,),
            toolpath=(
                ToolpathPoint((0.0, 0.0, 0.0), MoveClass.RAPID, 0),
                ToolpathPoint((1.0, 0.0, 0.0), MoveClass.CUTTING, 3),
            ),
        )
        assert program.command_for_point(1) is cmd
        assert program.command_for_point(0) is None
        assert program.command_for_point(7) is None


class TestArcs:
    def test_clockwise_sweep_is_negative(self):
        start, end = arc_sweep((0, 0, 0), (10, 0, 0), (5, 0), clockwise=True)
        assert start == pytest.approx(math.pi)
        assert end - start == pytest.approx(-math.pi)

    def test_counter_clockwise_sweep_is_positive(self):
        start, end = arc_sweep((10, 0, 0), (0, 0, 0), (5, 0), clockwise=False)
        assert end - start == pytest.approx(math.pi)

    def test_coincident_endpoints_sweep_full_turn(self):
        start, end = arc_sweep((0, 0, 0), (0, 0, 0), (5, 0), clockwise=False)
        assert end - start == pytest.approx(2 * math.pi)

    def test_segment_count(self):
        assert segment_count(0.1) == 8
        assert segment_count(math.pi) == 16
        assert segment_count(-2 * math.pi) == 32
        assert segment_count(float("nan")) == 8

    def test_quarter_arc(self):
        pts = tessellate_arc((10, 0, 0), (0, 10, 0), -10, 0, clockwise=False, source_line=5)
        assert len(pts) == 8
        assert pts[-1].x == pytest.approx(0.0, abs=1e-9)
        assert pts[-1].y == pytest.approx(10.0)
        assert all(p.source_line == 5 for p in pts)
        assert all(p.move_class is MoveClass.CUTTING for p in pts)

    def test_start_point_not_emitted(self):
        pts = tessellate_arc((10, 0, 0), (0, 10, 0), -10, 0, clockwise=False, source_line=0)
        assert pts[0].position != (10, 0, 0)
        angle = math.atan2(pts[0].y, pts[0].x)
        assert angle == pytest.approx((math.pi / 2) / 8)

    def test_points_lie_on_offset_radius(self):
        pts = tessellate_arc((0, 0, 0), (8, 0, 0), 5, 0, clockwise=True, source_line=0)
        for p in pts:
            assert math.hypot(p.x - 5, p.y) == pytest.approx(5.0)
