import math
import pygame

from progresswheel import ArrowStyle, arrow_geometry


def argb_to_rgba(color):
    return ((color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF, (color >> 24) & 0xFF)


def circle_bounds(width, height, config, padding=0):
    """
    Rectangle the wheel's arc is drawn in.

    Unless fill_radius is set the wheel is a circle of circle_radius centred in
    the available space, otherwise it stretches to fill it.
    """
    bar = config.bar_thickness
    if not config.fill_radius:
        # Width should equal height, use the smaller side
        min_value = min(width - padding * 2, height - padding * 2)
        diameter = min(min_value, config.circle_radius * 2 - bar * 2)

        x_offset = (width - padding * 2 - diameter) // 2 + padding
        y_offset = (height - padding * 2 - diameter) // 2 + padding
        return pygame.Rect(x_offset + bar, y_offset + bar, diameter - bar * 2, diameter - bar * 2)

    return pygame.Rect(padding + bar, padding + bar, width - padding * 2 - bar * 2, height - padding * 2 - bar * 2)


def arc_points(rect, start_deg, sweep_deg, step_deg=3.0):
    # Clockwise from start_deg, screen coordinates
    cx, cy = rect.center
    r = rect.width / 2
    steps = max(2, int(math.ceil(abs(sweep_deg) / step_deg)) + 1)
    points = []
    for i in range(steps):
        a = math.radians(start_deg + sweep_deg * i / (steps - 1))
        points.append((cx + math.cos(a) * r, cy + math.sin(a) * r))
    return points


# ---------- Spinner ----------------------------------------------------------
class WheelSpinner:
    def __init__(self, engine, size=None, padding=0, bg_alpha=0):
        self.engine = engine
        self.padding = padding
        self.bg_alpha = bg_alpha
        if size is None:
            side = engine.config.circle_radius * 2 + padding * 2
            size = (side, side)
        self.resize(*size)

    def resize(self, width, height):
        self.size = (width, height)
        self.surface = pygame.Surface((width, height), pygame.SRCALPHA)
        self.bounds = circle_bounds(width, height, self.engine.config, self.padding)

    def draw(self, target_surface, center_pos, now_ms=None):
        """
        Advance the engine to now_ms and draw the resulting frame.

        :return: the FrameGeometry that was drawn
        """
        config = self.engine.config
        frame = self.engine.tick(now_ms)

        # Clear spinner surface each frame
        self.surface.fill((0, 0, 0, self.bg_alpha))

        radius = self.bounds.width / 2
        center = self.bounds.center

        rim_color = argb_to_rgba(config.rim_color)
        if rim_color[3] > 0:
            pygame.draw.circle(self.surface, rim_color, center, int(radius + config.rim_thickness / 2),
                               config.rim_thickness)

        bar_color = argb_to_rgba(config.bar_color)
        pygame.draw.lines(self.surface, bar_color, False,
                          arc_points(self.bounds, frame.start_angle, frame.sweep_angle), config.bar_thickness)

        arrow = arrow_geometry(frame, config, radius, center)
        if arrow is not None:
            if arrow.style == ArrowStyle.TRIANGLE:
                pygame.draw.polygon(self.surface, bar_color, arrow.points)
            else:
                for start, end in arrow.segments():
                    pygame.draw.line(self.surface, bar_color, start, end, config.bar_thickness)

        # Blit centered at center_pos
        rect = self.surface.get_rect(center=center_pos)
        target_surface.blit(self.surface, rect)
        return frame
