import dataclasses
import enum
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import BaseModel

from .config import ArrowStyle, WheelConfig, validate_config

# The animation clock runs at half of the wall clock rate. All durations and
# speeds in WheelConfig are expressed in this clock.
CLOCK_RATE_DIVISOR = 2

# Progress value reported each time a full indeterminate turn completes
CYCLE_COMPLETED = -1.0


class ArrowPhase(enum.Enum):
    AT_START = 0
    HIDDEN = 1
    TRANSITIONING = 2
    AT_END = 3


# (phase, growing from front) -> (next phase, arrow shown, spinning ends)
_ARROW_TRANSITIONS = {
    (ArrowPhase.AT_START, False): (ArrowPhase.AT_START, True, False),
    (ArrowPhase.AT_START, True): (ArrowPhase.HIDDEN, False, False),
    (ArrowPhase.HIDDEN, False): (ArrowPhase.HIDDEN, False, False),
    (ArrowPhase.HIDDEN, True): (ArrowPhase.HIDDEN, False, False),
    (ArrowPhase.TRANSITIONING, False): (ArrowPhase.TRANSITIONING, False, False),
    (ArrowPhase.TRANSITIONING, True): (ArrowPhase.AT_END, True, False),
    (ArrowPhase.AT_END, True): (ArrowPhase.AT_END, True, False),
    (ArrowPhase.AT_END, False): (ArrowPhase.HIDDEN, True, True),
}


@dataclass(frozen=True, slots=True)
class FrameGeometry:
    start_angle: float
    sweep_angle: float
    show_arrow: bool
    arrow_style: ArrowStyle
    arrow_growth_fraction: float


@dataclass(slots=True)
class AnimationState:
    current_angle: float = 0.0
    target_progress: float = 0.0
    extra_arc_length: float = 0.0
    is_spinning: bool = False
    growth_phase_elapsed: float = 0.0
    paused_elapsed: float = 0.0
    growing_from_front: bool = True
    arrow_phase: ArrowPhase = ArrowPhase.AT_START
    last_tick_timestamp: float = 0.0


class WheelSavedState(BaseModel):
    """Everything a host needs to bring a wheel back after being torn down."""
    current_angle: float
    target_progress: float
    is_spinning: bool
    spin_speed: float
    bar_thickness: int
    bar_color: int
    rim_thickness: int
    rim_color: int
    circle_radius: int
    linear_progress: bool
    fill_radius: bool


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def progress_to_degrees(progress: float) -> float:
    """Clamp a 0..1 progress value and convert it to degrees.

    Values above 1 wrap around once, negative values become 0.
    """
    if progress > 1.0:
        progress -= 1.0
    elif progress < 0:
        progress = 0.0
    return min(progress * 360.0, 360.0)


def round_progress(angle: float) -> float:
    # Half-up rounding to two decimals
    return math.floor(angle * 100 / 360.0 + 0.5) / 100


class AnimationEngine:
    """Time driven state machine behind the progress wheel.

    The host calls :meth:`tick` once per displayed frame with a monotonic
    timestamp in milliseconds and draws the returned :class:`FrameGeometry`.
    Commands (:meth:`start_spin`, :meth:`stop_spin`,
    :meth:`set_progress_instant`, :meth:`set_progress_animated`) only change
    state; the visible effect happens on the following ticks.

    Not thread safe, calls must come from a single (UI) thread.
    """

    def __init__(self, config: Optional[WheelConfig] = None, clock: Optional[Callable[[], float]] = None):
        self._clock = clock if clock is not None else _monotonic_ms
        self._config = validate_config(config)
        self._callback = None
        self._needs_redraw = True
        self._redraw_requests = 0
        self._state = AnimationState(paused_elapsed=self._config.pause_after_growth,
                                     last_tick_timestamp=self._clock())
        self._frame = self._derive_frame(False)

    # ----------------------------------
    # Configuration
    # ----------------------------------

    @property
    def config(self) -> WheelConfig:
        return self._config

    def configure(self, config) -> None:
        """Apply a WheelConfig, or a dict of fields merged over the current config."""
        if isinstance(config, dict):
            config = {**self._config.model_dump(), **config}
        self._config = validate_config(config, self._config)

        # A shorter max length must not leave the arc longer than allowed
        state = self._state
        state.extra_arc_length = min(state.extra_arc_length, self._config.destination_length())
        self._frame = self._derive_frame(self._frame.show_arrow)
        self._request_redraw()

    def _update_config(self, **kwargs) -> None:
        self.configure(self._config.model_copy(update=kwargs))

    @property
    def spin_speed(self) -> float:
        """Base spinning speed in full turns per second."""
        return self._config.spin_speed / 360.0

    @spin_speed.setter
    def spin_speed(self, turns_per_second: float) -> None:
        self._update_config(spin_speed=turns_per_second * 360.0)

    @property
    def bar_thickness(self) -> int:
        return self._config.bar_thickness

    @bar_thickness.setter
    def bar_thickness(self, value: int) -> None:
        self._update_config(bar_thickness=value)

    @property
    def rim_thickness(self) -> int:
        return self._config.rim_thickness

    @rim_thickness.setter
    def rim_thickness(self, value: int) -> None:
        self._update_config(rim_thickness=value)

    @property
    def bar_color(self) -> int:
        return self._config.bar_color

    @bar_color.setter
    def bar_color(self, value: int) -> None:
        self._update_config(bar_color=value)

    @property
    def rim_color(self) -> int:
        return self._config.rim_color

    @rim_color.setter
    def rim_color(self, value: int) -> None:
        self._update_config(rim_color=value)

    @property
    def circle_radius(self) -> int:
        return self._config.circle_radius

    @circle_radius.setter
    def circle_radius(self, value: int) -> None:
        self._update_config(circle_radius=value)

    @property
    def linear_progress(self) -> bool:
        return self._config.linear_progress

    @linear_progress.setter
    def linear_progress(self, value: bool) -> None:
        self._update_config(linear_progress=value)

    # ----------------------------------
    # Observers and read-only views
    # ----------------------------------

    def on_progress_changed(self, callback: Optional[Callable[[float], None]]) -> None:
        """Register the single progress observer (None removes it).

        The callback receives the progress rounded to two decimals when a
        determinate change settles, and -1.0 each time an indeterminate turn
        completes.
        """
        self._callback = callback

    @property
    def is_spinning(self) -> bool:
        return self._state.is_spinning

    @property
    def state(self) -> AnimationState:
        """A copy of the current animation state."""
        return dataclasses.replace(self._state)

    @property
    def needs_redraw(self) -> bool:
        """True while spinning, and after a command until the next tick."""
        return self._needs_redraw

    @property
    def redraw_requests(self) -> int:
        return self._redraw_requests

    def get_normalized_progress(self) -> float:
        """Current progress between 0 and 1, or -1 while spinning."""
        if self._state.is_spinning:
            return CYCLE_COMPLETED
        return self._state.current_angle / 360.0

    def current_frame(self) -> FrameGeometry:
        return self._frame

    # ----------------------------------
    # Commands
    # ----------------------------------

    def _now(self, now_ms: Optional[float]) -> float:
        return self._clock() if now_ms is None else now_ms

    def _request_redraw(self) -> None:
        self._needs_redraw = True
        self._redraw_requests += 1

    def _notify(self, value: float) -> None:
        if self._callback is not None:
            self._callback(value)

    def _notify_settled(self) -> None:
        self._notify(round_progress(self._state.current_angle))

    def reset_clock(self, now_ms: Optional[float] = None) -> None:
        self._state.last_tick_timestamp = self._now(now_ms)

    def on_visibility_changed(self, visible: bool, now_ms: Optional[float] = None) -> None:
        # Time spent invisible must not turn into one huge animation step
        if visible:
            self.reset_clock(now_ms)

    def start_spin(self, now_ms: Optional[float] = None) -> None:
        state = self._state
        if state.is_spinning:
            return

        state.is_spinning = True
        state.arrow_phase = ArrowPhase.AT_START
        state.last_tick_timestamp = self._now(now_ms)
        self._request_redraw()

    def stop_spin(self) -> None:
        """Stop spinning once the arrow has animated to its closed position."""
        state = self._state
        if not state.is_spinning:
            return

        state.arrow_phase = ArrowPhase.TRANSITIONING
        self._request_redraw()

    def _cancel_spin(self) -> bool:
        state = self._state
        if not state.is_spinning:
            return False

        state.current_angle = 0.0
        state.is_spinning = False
        state.arrow_phase = ArrowPhase.HIDDEN
        self._request_redraw()
        return True

    def set_progress_instant(self, progress: float, now_ms: Optional[float] = None) -> None:
        """Set the progress (0..1), the bar jumps to that value immediately."""
        state = self._state
        was_spinning = self._cancel_spin()

        target = progress_to_degrees(progress)
        if target == state.target_progress and not was_spinning:
            return

        state.target_progress = target
        state.current_angle = target
        state.growth_phase_elapsed = 0.0
        state.paused_elapsed = self._config.pause_after_growth
        state.last_tick_timestamp = self._now(now_ms)
        self._request_redraw()

    def set_progress_animated(self, progress: float, now_ms: Optional[float] = None) -> None:
        """Set the progress (0..1), the bar moves there over the next ticks."""
        state = self._state
        if self._cancel_spin():
            self._notify_settled()

        target = progress_to_degrees(progress)
        if target == state.target_progress:
            return

        # Already at rest, so the motion starts from now rather than from the
        # last (possibly old) tick
        if state.current_angle == state.target_progress:
            state.last_tick_timestamp = self._now(now_ms)

        state.target_progress = target
        self._request_redraw()

    def reset_count(self) -> None:
        self._state.current_angle = 0.0
        self._state.target_progress = 0.0
        self._request_redraw()

    # ----------------------------------
    # Animation
    # ----------------------------------

    def tick(self, now_ms: Optional[float] = None) -> FrameGeometry:
        """Advance the animation to ``now_ms`` and return the frame to draw."""
        now = self._now(now_ms)
        state = self._state
        config = self._config

        delta = max(0.0, (now - state.last_tick_timestamp) / CLOCK_RATE_DIVISOR)
        state.last_tick_timestamp = now
        previous_angle = state.current_angle

        if state.is_spinning:
            self._update_bar_length(delta)

            state.current_angle += delta * config.spin_speed / 1000.0
            while state.current_angle > 360:
                state.current_angle -= 360.0
                # A full turn has been completed
                self._notify(CYCLE_COMPLETED)
        else:
            state.paused_elapsed = config.pause_after_growth
            state.growth_phase_elapsed = 0.0
            self._update_bar_length(0.0)

            state.current_angle = state.target_progress
            if state.current_angle != previous_angle:
                self._notify_settled()

        show_arrow = False
        if state.is_spinning:
            show_arrow = self._advance_arrow_phase()

        self._needs_redraw = state.is_spinning
        self._frame = self._derive_frame(show_arrow)
        return self._frame

    def _update_bar_length(self, delta: float) -> None:
        state = self._state
        config = self._config

        if state.paused_elapsed < config.pause_after_growth:
            state.paused_elapsed += delta
            return

        state.growth_phase_elapsed += delta
        if state.growth_phase_elapsed > config.growth_cycle_duration:
            # A size change cycle (growing or shrinking) is complete
            state.growth_phase_elapsed -= config.growth_cycle_duration
            state.paused_elapsed = 0.0
            state.growing_from_front = not state.growing_from_front

        distance = math.cos((state.growth_phase_elapsed / config.growth_cycle_duration + 1) * math.pi) / 2 + 0.5
        dest_length = config.destination_length()

        if state.growing_from_front:
            state.extra_arc_length = distance * dest_length
        else:
            # The trailing edge stays put while the leading edge shrinks
            new_length = dest_length * (1 - distance)
            state.current_angle += state.extra_arc_length - new_length
            state.extra_arc_length = new_length

    def _advance_arrow_phase(self) -> bool:
        state = self._state
        next_phase, show_arrow, stops = _ARROW_TRANSITIONS[(state.arrow_phase, state.growing_from_front)]
        state.arrow_phase = next_phase
        if stops:
            state.is_spinning = False
        return show_arrow

    def _derive_frame(self, show_arrow: bool) -> FrameGeometry:
        state = self._state
        config = self._config
        sweep_angle = config.bar_length + state.extra_arc_length
        return FrameGeometry(
            start_angle=state.current_angle - 90,
            sweep_angle=sweep_angle,
            show_arrow=show_arrow,
            arrow_style=config.arrow_style,
            arrow_growth_fraction=(config.bar_max_length - sweep_angle) / config.destination_length(),
        )

    # ----------------------------------
    # Save / restore
    # ----------------------------------

    def save_state(self) -> WheelSavedState:
        state = self._state
        config = self._config
        return WheelSavedState(
            current_angle=state.current_angle,
            target_progress=state.target_progress,
            is_spinning=state.is_spinning,
            spin_speed=config.spin_speed,
            bar_thickness=config.bar_thickness,
            bar_color=config.bar_color,
            rim_thickness=config.rim_thickness,
            rim_color=config.rim_color,
            circle_radius=config.circle_radius,
            linear_progress=config.linear_progress,
            fill_radius=config.fill_radius,
        )

    def restore_state(self, saved: WheelSavedState, now_ms: Optional[float] = None) -> None:
        self._config = validate_config(
            self._config.model_copy(update={
                "spin_speed": saved.spin_speed,
                "bar_thickness": saved.bar_thickness,
                "bar_color": saved.bar_color,
                "rim_thickness": saved.rim_thickness,
                "rim_color": saved.rim_color,
                "circle_radius": saved.circle_radius,
                "linear_progress": saved.linear_progress,
                "fill_radius": saved.fill_radius,
            }), self._config)

        state = self._state
        state.current_angle = saved.current_angle
        state.target_progress = saved.target_progress
        state.is_spinning = saved.is_spinning
        state.arrow_phase = ArrowPhase.HIDDEN
        state.last_tick_timestamp = self._now(now_ms)
        self._frame = self._derive_frame(False)
        self._request_redraw()
