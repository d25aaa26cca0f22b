"""Arrowhead geometry for the leading end of the wheel's arc.

Angles are in degrees with 0 pointing right and increasing clockwise (screen
coordinates, y down), the same convention as FrameGeometry.start_angle.
"""
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .config import ArrowStyle, WheelConfig

Point = Tuple[float, float]


@dataclass(frozen=True, slots=True)
class ArrowGeometry:
    style: ArrowStyle
    # Triangle: three corners. Line: start and end of the inner segment,
    # then start and end of the outer segment.
    points: Tuple[Point, ...]

    def segments(self):
        return [(self.points[i], self.points[i + 1]) for i in range(0, len(self.points) - 1, 2)]


def _polar(angle_deg: float, radius: float, center: Point) -> Point:
    angle = math.radians(angle_deg)
    return (math.cos(angle) * radius + center[0], math.sin(angle) * radius + center[1])


def triangle_arrow(start_angle: float,
                   sweep_angle: float,
                   extra_arc_length: float,
                   radius: float,
                   bar_thickness: float,
                   bar_max_length: float,
                   center: Point = (0.0, 0.0)) -> ArrowGeometry:
    """Filled triangle across the bar at the end of the arc.

    The base spans the bar radially and grows with the extra arc length, the
    apex points along the tangent in the direction of rotation.
    """
    arrow_size = bar_thickness * 2 * (1 - (bar_max_length - extra_arc_length) / bar_max_length)

    end_angle = start_angle + sweep_angle
    sin = math.sin(math.radians(end_angle))
    cos = math.cos(math.radians(end_angle))

    x, y = _polar(end_angle, radius, center)
    inner = _polar(end_angle, radius - bar_thickness - arrow_size, center)
    outer = _polar(end_angle, radius + bar_thickness + arrow_size, center)
    apex = (x - sin * arrow_size * 2, y + cos * arrow_size * 2)

    return ArrowGeometry(ArrowStyle.TRIANGLE, (inner, outer, apex))


def line_arrow(start_angle: float,
               sweep_angle: float,
               growth_fraction: float,
               radius: float,
               bar_thickness: float,
               max_arrow_line_length: float,
               center: Point = (0.0, 0.0)) -> ArrowGeometry:
    """Two strokes forming an open arrowhead.

    ``growth_fraction`` is 0 when the arc is at its longest and 1 when it is
    at its shortest; the strokes fold into the bar as it approaches 1.
    """
    p = growth_fraction
    end_angle = start_angle + sweep_angle
    base_angle = end_angle + 5 - 5 * p

    sin = math.sin(math.radians(base_angle))
    cos = math.cos(math.radians(base_angle))
    sin_45 = math.sin(math.radians(end_angle + 45 - 5 * p))
    sin_minus_45 = math.sin(math.radians(end_angle - (45 - 5 * p)))

    arrow_length = max_arrow_line_length * (1 - p)
    in_x = sin_minus_45 * max_arrow_line_length * (1 - p) + sin * arrow_length * p
    in_y = -sin_45 * max_arrow_line_length * (1 - p) - cos * arrow_length * p
    in_base = _polar(base_angle, radius + bar_thickness / 4, center)

    rotate_sin = math.sin(math.radians(base_angle + 45 + p * 115))
    rotate_sin_minus = math.sin(math.radians(end_angle - (5 - 5 * p + 45) + p * 115))
    out_x = rotate_sin * arrow_length
    out_y = rotate_sin_minus * arrow_length

    # The outer stroke moves out for the first half and back in for the second
    if p < 0.5:
        out_radius = radius + max_arrow_line_length * p - bar_thickness / 4
    else:
        out_radius = radius + max_arrow_line_length * (1 - p) - bar_thickness / 4
    out_base = _polar(base_angle - p * bar_thickness, out_radius, center)

    return ArrowGeometry(ArrowStyle.LINE, (
        in_base,
        (in_base[0] + in_x, in_base[1] + in_y),
        out_base,
        (out_base[0] + out_x, out_base[1] + out_y),
    ))


def arrow_geometry(frame, config: WheelConfig, radius: Optional[float] = None,
                   center: Point = (0.0, 0.0)) -> Optional[ArrowGeometry]:
    """Arrow for a frame, or None when the frame shows no arrow."""
    if not frame.show_arrow or frame.arrow_style == ArrowStyle.NONE:
        return None

    if radius is None:
        radius = config.circle_radius

    if frame.arrow_style == ArrowStyle.LINE:
        return line_arrow(frame.start_angle, frame.sweep_angle, frame.arrow_growth_fraction, radius,
                          config.bar_thickness, config.max_arrow_line_length, center)

    return triangle_arrow(frame.start_angle, frame.sweep_angle, frame.sweep_angle - config.bar_length, radius,
                          config.bar_thickness, config.bar_max_length, center)
