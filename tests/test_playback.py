"""Tests for the playback driver."""

import pytest

from toolpathsim.core.interpreter import compile_program
from toolpathsim.core.playback import (
    PlaybackState,
    advance,
    current_position,
    progress_percent,
)


@pytest.fixture
def one_second_program():
    """Two 10 mm cutting moves at 600 mm/min: one second each."""
    return compile_program("G1 X10 F600\nG1 X20 F600")


@pytest.fixture
def playing() -> PlaybackState:
    state = PlaybackState()
    state.play()
    return state


class TestAdvance:
    def test_partial_progress(self, one_second_program, playing):
        advance(playing, one_second_program, 0.5)
        assert playing.current_index == 0
        assert playing.progress == pytest.approx(0.5)
        assert current_position(playing, one_second_program) == pytest.approx((5.0, 0.0, 0.0))

    def test_overflow_is_discarded(self, one_second_program, playing):
        advance(playing, one_second_program, 0.6)
        advance(playing, one_second_program, 0.6)
        assert playing.current_index == 1
        assert playing.progress == 0.0

    def test_one_point_per_tick(self, one_second_program, playing):
        advance(playing, one_second_program, 10.0)
        assert playing.current_index == 1

    def test_speed_multiplier(self, one_second_program, playing):
        playing.speed = 2.0
        advance(playing, one_second_program, 0.25)
        assert playing.progress == pytest.approx(0.5)

    def test_pauses_at_end(self, one_second_program, playing):
        for _ in range(5):
            advance(playing, one_second_program, 1.0)
        assert playing.current_index == one_second_program.last_index
        assert not playing.is_playing

    def test_paused_state_does_not_move(self, one_second_program):
        state = PlaybackState()
        advance(state, one_second_program, 1.0)
        assert state.current_index == 0
        assert state.progress == 0.0

    def test_single_point_program(self, playing):
        program = compile_program("")
        advance(playing, program, 1.0)
        assert playing.current_index == 0
        assert not playing.is_playing
        assert current_position(playing, program) == (0.0, 0.0, 0.0)


class TestTransport:
    def test_stop_resets(self, one_second_program, playing):
        advance(playing, one_second_program, 1.0)
        advance(playing, one_second_program, 0.3)
        playing.stop()
        assert (playing.current_index, playing.progress, playing.is_playing) == (0, 0.0, False)

    def test_step_clamps(self, one_second_program):
        state = PlaybackState()
        state.step_backward(one_second_program)
        assert state.current_index == 0
        for _ in range(5):
            state.step_forward(one_second_program)
        assert state.current_index == one_second_program.last_index

    def test_step_clears_progress(self, one_second_program, playing):
        advance(playing, one_second_program, 0.5)
        playing.step_forward(one_second_program)
        assert playing.progress == 0.0

    @pytest.mark.parametrize("index, expected", [(-3, 0), (1, 1), (99, 2)])
    def test_seek_clamps(self, one_second_program, index, expected):
        state = PlaybackState()
        state.seek(one_second_program, index)
        assert state.current_index == expected

    def test_seek_fraction(self, one_second_program):
        state = PlaybackState()
        state.seek_fraction(one_second_program, 0.5)
        assert state.current_index == 1
        state.seek_fraction(one_second_program, 1.0)
        assert state.current_index == 2

    @pytest.mark.parametrize("fraction, expected", [(-0.5, 0), (1.7, 2), (float("inf"), 2)])
    def test_seek_fraction_clamps(self, one_second_program, fraction, expected):
        state = PlaybackState()
        state.seek_fraction(one_second_program, fraction)
        assert state.current_index == expected

    def test_seek_fraction_nan_is_ignored(self, one_second_program):
        state = PlaybackState(current_index=1)
        state.seek_fraction(one_second_program, float("nan"))
        assert state.current_index == 1

    def test_reset_keeps_play_flag(self, one_second_program, playing):
        playing.seek(one_second_program, 2)
        playing.reset()
        assert playing.current_index == 0
        assert playing.is_playing


class TestProgress:
    def test_percent(self, one_second_program):
        state = PlaybackState(current_index=1)
        assert progress_percent(state, one_second_program) == pytest.approx(50.0)

    def test_percent_single_point(self):
        assert progress_percent(PlaybackState(), compile_program("")) == 0.0

    def test_position_at_last_point(self, one_second_program):
        state = PlaybackState(current_index=2, progress=0.5)
        assert current_position(state, one_second_program) == (20.0, 0.0, 0.0)
