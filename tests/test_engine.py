"""Tests for the progress wheel animation engine."""

import math
import random

import pytest

from progresswheel import (CYCLE_COMPLETED, AnimationEngine, ArrowPhase, ArrowStyle, ConfigurationError, WheelConfig,
                           WheelSavedState, progress_to_degrees)


def make_engine(**kwargs):
    return AnimationEngine(WheelConfig(**kwargs), clock=lambda: 0.0)


def run_ticks(engine, start_ms, end_ms, step_ms=16):
    frames = []
    t = start_ms
    while t <= end_ms:
        frames.append(engine.tick(t))
        t += step_ms
    return frames


class TestProgressConversion:
    """Test clamping of progress values."""

    def test_in_range(self):
        assert progress_to_degrees(0.5) == 180.0

    def test_above_one_wraps_once(self):
        assert progress_to_degrees(1.5) == 180.0

    def test_one_is_full_circle(self):
        assert progress_to_degrees(1.0) == 360.0

    def test_far_above_one_is_capped(self):
        assert progress_to_degrees(5.0) == 360.0

    def test_negative_is_zero(self):
        assert progress_to_degrees(-0.3) == 0.0


class TestInstantProgress:
    """Test set_progress_instant."""

    @pytest.mark.parametrize("p", [0.0, 0.1, 0.25, 0.5, 0.75, 0.99])
    def test_normalized_progress_matches(self, p):
        """Setting p instantly should read back p and leave spin mode."""
        engine = make_engine()
        engine.set_progress_instant(p)
        assert abs(engine.get_normalized_progress() - p) < 1e-9
        assert engine.is_spinning is False

    def test_cancels_spinning(self):
        engine = make_engine()
        engine.start_spin(0)
        engine.tick(0)
        engine.tick(200)
        engine.set_progress_instant(0.3)
        assert engine.is_spinning is False
        assert abs(engine.get_normalized_progress() - 0.3) < 1e-9

    def test_same_value_twice_is_noop(self):
        """A repeated value should not request a redraw or notify."""
        engine = make_engine()
        engine.set_progress_instant(0.3)
        values = []
        engine.on_progress_changed(values.append)
        requests = engine.redraw_requests
        state = engine.state

        engine.set_progress_instant(0.3)

        assert engine.redraw_requests == requests
        assert engine.state == state
        assert values == []

    def test_stays_put_on_ticks(self):
        engine = make_engine()
        engine.set_progress_instant(0.25)
        frames = run_ticks(engine, 0, 500)
        assert all(f.start_angle == 0 for f in frames)


class TestAnimatedProgress:
    """Test set_progress_animated."""

    def test_moves_to_target_without_overshoot(self):
        """From rest the angle should reach 180 and never pass it."""
        engine = make_engine()
        values = []
        engine.on_progress_changed(values.append)
        engine.set_progress_animated(0.5, now_ms=0)

        angles = []
        t = 16
        while t <= 320:
            engine.tick(t)
            angles.append(engine.state.current_angle)
            t += 16

        assert all(b >= a for a, b in zip(angles, angles[1:]))
        assert all(a <= 180 for a in angles)
        assert angles[-1] == 180
        assert all(a == 180 for a in angles)
        assert values == [0.5]

    def test_only_target_changes_before_tick(self):
        engine = make_engine()
        engine.set_progress_animated(0.5, now_ms=0)
        state = engine.state
        assert state.target_progress == 180
        assert state.current_angle == 0

    def test_same_target_is_noop(self):
        engine = make_engine()
        engine.set_progress_animated(0.5, now_ms=0)
        requests = engine.redraw_requests
        engine.set_progress_animated(0.5, now_ms=10)
        assert engine.redraw_requests == requests

    def test_cancelling_spin_notifies_once(self):
        """Leaving spin mode should report the reset progress once."""
        engine = make_engine()
        engine.start_spin(0)
        engine.tick(0)
        engine.tick(100)
        values = []
        engine.on_progress_changed(values.append)

        engine.set_progress_animated(0.4, now_ms=100)
        assert values == [0.0]
        assert engine.is_spinning is False

        engine.tick(116)
        assert values == [0.0, 0.4]

    def test_settle_reports_two_decimals(self):
        engine = make_engine()
        values = []
        engine.on_progress_changed(values.append)
        engine.set_progress_animated(0.123456, now_ms=0)
        engine.tick(16)
        assert values == [0.12]


class TestSpinning:
    """Test indeterminate mode."""

    def test_scenario_half_second(self):
        """500ms of wall clock advances 250ms of animation clock."""
        engine = make_engine(bar_length=16, bar_max_length=270, spin_speed=230)
        engine.start_spin()
        engine.tick(0)
        frame = engine.tick(500)

        assert engine.state.current_angle == pytest.approx(57.5)
        expected_extra = (math.cos((250 / 460 + 1) * math.pi) / 2 + 0.5) * (270 - 16)
        assert frame.sweep_angle == pytest.approx(16 + expected_extra)
        assert frame.sweep_angle > 16
        assert frame.start_angle == pytest.approx(57.5 - 90)

    def test_full_turn_notifies(self):
        engine = make_engine()
        values = []
        engine.on_progress_changed(values.append)
        engine.start_spin(0)
        run_ticks(engine, 0, 4000)
        assert CYCLE_COMPLETED in values

    def test_normalized_progress_while_spinning(self):
        engine = make_engine()
        engine.start_spin(0)
        engine.tick(100)
        assert engine.get_normalized_progress() == -1

    def test_start_spin_is_idempotent(self):
        engine = make_engine()
        engine.start_spin(0)
        run_ticks(engine, 0, 400)
        state = engine.state
        requests = engine.redraw_requests

        engine.start_spin(1000)

        assert engine.state == state
        assert engine.redraw_requests == requests

    def test_extra_length_stays_in_range(self):
        """Random positive deltas must never push the arc out of range."""
        engine = make_engine()
        engine.start_spin(0)
        rng = random.Random(1234)
        t = 0.0
        for _ in range(10000):
            t += rng.uniform(0.1, 100.0)
            frame = engine.tick(t)
            extra = engine.state.extra_arc_length
            assert 0 <= extra <= 270 - 16
            assert 16 <= frame.sweep_angle <= 270

    def test_same_timestamp_twice(self):
        engine = make_engine()
        engine.start_spin(0)
        run_ticks(engine, 0, 288)
        first = engine.tick(304)
        second = engine.tick(304)
        assert first == second

    def test_clock_regression_is_ignored(self):
        engine = make_engine()
        engine.start_spin(0)
        frames = run_ticks(engine, 0, 480)
        angle = engine.state.current_angle
        frame = engine.tick(400)
        assert frame.sweep_angle == frames[-1].sweep_angle
        assert engine.state.current_angle == angle

    def test_angle_wraps_below_360(self):
        engine = make_engine()
        engine.start_spin(0)
        for t in range(0, 6000, 16):
            engine.tick(t)
            assert engine.state.current_angle <= 360

    def test_visibility_resets_clock(self):
        engine = make_engine()
        engine.start_spin(0)
        engine.tick(0)
        engine.on_visibility_changed(True, now_ms=10000)
        engine.tick(10016)
        assert engine.state.current_angle == pytest.approx(8 * 230 / 1000)

    def test_hidden_window_keeps_clock(self):
        engine = make_engine()
        engine.start_spin(0)
        engine.tick(0)
        engine.on_visibility_changed(False, now_ms=10000)
        assert engine.state.last_tick_timestamp == 0


class TestStopSpinning:
    """Test the deferred stop and the arrow state machine."""

    def test_noop_when_not_spinning(self):
        engine = make_engine()
        requests = engine.redraw_requests
        engine.stop_spin()
        assert engine.redraw_requests == requests
        assert engine.state.arrow_phase == ArrowPhase.AT_START

    def test_stop_is_deferred(self):
        engine = make_engine()
        engine.start_spin(0)
        run_ticks(engine, 0, 1000)
        engine.stop_spin()
        assert engine.is_spinning is True
        assert engine.state.arrow_phase == ArrowPhase.TRANSITIONING

    def test_stop_terminates(self):
        """Spinning ends with a final arrow frame after a stop request."""
        engine = make_engine()
        engine.start_spin(0)
        run_ticks(engine, 0, 1000)
        engine.stop_spin()

        frames = []
        spinning = []
        t = 1016
        while t <= 5000:
            frames.append(engine.tick(t))
            spinning.append(engine.is_spinning)
            t += 16

        assert spinning[-1] is False
        last = spinning.index(False)
        assert frames[last].show_arrow is True
        assert any(f.show_arrow for f in frames[:last])
        assert engine.state.arrow_phase == ArrowPhase.HIDDEN

    def test_stop_bound_over_a_full_cycle(self):
        """Wherever in the growth cycle a stop lands, spinning ends within
        one front-growing and one back-growing half, each with its pause."""
        config = WheelConfig()
        frame_ms = 16
        bound = 2 * (config.growth_cycle_duration + config.pause_after_growth) + frame_ms
        worst = 0.0
        for stop_at in range(0, 3000 + 1, frame_ms):
            engine = AnimationEngine(config, clock=lambda: 0.0)
            engine.start_spin(0)
            run_ticks(engine, 0, stop_at, frame_ms)
            engine.stop_spin()
            t = stop_at
            while engine.is_spinning:
                t += frame_ms
                engine.tick(t)
                assert t - stop_at < 10000
            # Back to the animation clock
            worst = max(worst, (t - stop_at) / 2)

        assert worst <= bound
        assert worst > config.growth_cycle_duration

    def test_arrow_only_while_growing_from_front(self):
        engine = make_engine()
        engine.start_spin(0)
        run_ticks(engine, 0, 1000)
        engine.stop_spin()
        t = 1016
        while engine.is_spinning:
            frame = engine.tick(t)
            if engine.is_spinning and frame.show_arrow:
                assert engine.state.growing_from_front is True
                assert engine.state.arrow_phase == ArrowPhase.AT_END
            t += 16

    def test_no_arrow_after_stop(self):
        engine = make_engine()
        engine.start_spin(0)
        run_ticks(engine, 0, 1000)
        engine.stop_spin()
        frames = run_ticks(engine, 1016, 6000)
        assert engine.is_spinning is False
        assert frames[-1].show_arrow is False

    def test_start_arrow_shown_while_shrinking(self):
        """A spin started while shrinking shows the start arrow at once."""
        engine = make_engine()
        engine.start_spin(0)
        run_ticks(engine, 0, 1000)
        engine.stop_spin()
        run_ticks(engine, 1016, 6000)
        assert engine.state.growing_from_front is False

        engine.start_spin(6000)
        frame = engine.tick(6016)
        assert engine.state.arrow_phase == ArrowPhase.AT_START
        assert frame.show_arrow is True
        assert frame.arrow_style == ArrowStyle.TRIANGLE


class TestConfiguration:
    """Test engine configuration."""

    def test_rejects_bar_length_at_max(self):
        with pytest.raises(ConfigurationError):
            AnimationEngine(WheelConfig(bar_length=270, bar_max_length=270), clock=lambda: 0.0)

    def test_configure_rejects_bar_length_above_max(self):
        engine = make_engine()
        with pytest.raises(ConfigurationError):
            engine.configure({"bar_length": 300})

    def test_configure_rejects_invalid_types(self):
        engine = make_engine()
        with pytest.raises(ConfigurationError):
            engine.configure({"spin_speed": "fast"})

    def test_non_positive_values_fall_back(self):
        engine = make_engine(spin_speed=100)
        engine.configure(WheelConfig(spin_speed=0, growth_cycle_duration=-1))
        assert engine.config.spin_speed == 100
        assert engine.config.growth_cycle_duration == 460

    def test_shorter_max_length_clamps_arc(self):
        engine = make_engine()
        engine.start_spin(0)
        run_ticks(engine, 0, 800)
        engine.configure(WheelConfig(bar_max_length=40))
        assert engine.state.extra_arc_length <= 40 - 16

    def test_spin_speed_in_turns(self):
        engine = make_engine()
        engine.spin_speed = 1.0
        assert engine.config.spin_speed == 360.0
        assert engine.spin_speed == 1.0

    def test_partial_dict_keeps_current_values(self):
        engine = make_engine()
        engine.spin_speed = 1.0
        engine.configure({"bar_thickness": 8})
        assert engine.config.bar_thickness == 8
        assert engine.config.spin_speed == 360.0

    def test_partial_dict_still_validated(self):
        engine = make_engine()
        with pytest.raises(ConfigurationError):
            engine.configure({"bar_length": 300})
        assert engine.config.bar_length == 16

    def test_setters_request_redraw(self):
        engine = make_engine()
        requests = engine.redraw_requests
        engine.bar_thickness = 8
        engine.rim_color = 0xFF112233
        assert engine.redraw_requests == requests + 2
        assert engine.config.bar_thickness == 8
        assert engine.rim_color == 0xFF112233


class TestSaveRestore:
    """Test the restorable state."""

    def test_round_trip_through_json(self):
        engine = make_engine()
        engine.set_progress_instant(0.25)
        engine.bar_color = 0xFF00FF00
        engine.linear_progress = True
        data = engine.save_state().model_dump_json()

        other = make_engine()
        other.restore_state(WheelSavedState.model_validate_json(data), now_ms=50)

        assert other.get_normalized_progress() == pytest.approx(0.25)
        assert other.bar_color == 0xFF00FF00
        assert other.linear_progress is True
        assert other.state.last_tick_timestamp == 50

    def test_restores_spinning(self):
        engine = make_engine()
        engine.start_spin(0)
        saved = engine.save_state()

        other = make_engine()
        other.restore_state(saved)
        assert other.is_spinning is True

    def test_reset_count(self):
        engine = make_engine()
        engine.set_progress_instant(0.6)
        engine.reset_count()
        assert engine.get_normalized_progress() == 0
        assert engine.state.target_progress == 0


class TestRedraw:
    """Test the redraw flag hosts use to skip idle frames."""

    def test_new_engine_needs_first_frame(self):
        engine = make_engine()
        assert engine.needs_redraw is True
        engine.tick(16)
        assert engine.needs_redraw is False

    def test_stays_set_while_spinning(self):
        engine = make_engine()
        engine.start_spin(0)
        for frame_time in range(16, 1000, 16):
            engine.tick(frame_time)
            assert engine.needs_redraw is True

    def test_cleared_once_stop_completes(self):
        engine = make_engine()
        engine.start_spin(0)
        run_ticks(engine, 0, 1000)
        engine.stop_spin()
        t = 1000
        while engine.is_spinning:
            t += 16
            engine.tick(t)
        assert engine.needs_redraw is False
        engine.tick(t + 16)
        assert engine.needs_redraw is False

    def test_set_by_command_until_next_tick(self):
        engine = make_engine()
        engine.tick(16)
        engine.set_progress_animated(0.4, 32)
        assert engine.needs_redraw is True
        frame = engine.tick(48)
        assert frame.start_angle == pytest.approx(0.4 * 360 - 90)
        assert engine.needs_redraw is False
