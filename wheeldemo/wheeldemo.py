import argparse
import asyncio
import json

import pygame

from progresswheel import (CYCLE_COMPLETED, AnimationEngine, ArrowStyle, ConfigurationError, load_config, save_config,
                           validate_config)
from wheeldemo.app import AppState, DemoStep, apply_step, scripted_step
from wheeldemo.prettyprint import PrettyPrinter as PP
from wheeldemo.wheelspinner import WheelSpinner

try:
    import importlib.metadata
    _version = f"v{importlib.metadata.version('progresswheel')}"
except Exception:
    _version = ""

BACKGROUND = (240, 240, 240)
TEXT_COLOR = (60, 60, 60)


def main(args):
    # Load config
    try:
        config = load_config(args.config_file)
        config = apply_overrides(config, args)
    except (ConfigurationError, json.JSONDecodeError, OSError) as e:
        print(f"Could not use config from {args.config_file}: {e}")
        return 1

    if args.command == "config":
        save_config(config, args.config_file)
        return 0

    if args.command == "trace":
        rows = trace(config,
                     duration_ms=args.duration_ms,
                     fps=args.fps,
                     spin=args.spin,
                     stop_at_ms=args.stop_at_ms,
                     progress=args.progress,
                     progress_at_ms=args.progress_at_ms,
                     autonomous=args.autonomous)
        print(json.dumps(rows)) if args.json else PP.print_pretty(rows, args.csv)
        return 0

    asyncio.run(run_window(config, args))
    return 0


def apply_overrides(config, args):
    overrides = {}
    if getattr(args, "circle_radius", None) is not None:
        overrides["circle_radius"] = args.circle_radius
    if getattr(args, "bar_thickness", None) is not None:
        overrides["bar_thickness"] = args.bar_thickness
    if getattr(args, "arrow_style", None) is not None:
        overrides["arrow_style"] = ArrowStyle(args.arrow_style)
    if not overrides:
        return config
    return validate_config(config.model_copy(update=overrides), config)


def trace(config, duration_ms=2000, fps=60, spin=False, stop_at_ms=None, progress=None, progress_at_ms=0,
          autonomous=False):
    """Run the engine without a display and collect one row per frame."""
    now = 0.0
    engine = AnimationEngine(config, clock=lambda: now)
    events = []
    engine.on_progress_changed(events.append)

    app = AppState()
    if spin and not autonomous:
        engine.start_spin(now)
        app.step = DemoStep.SPINNING

    frame_ms = 1000.0 / fps
    stopped = False
    progress_set = False
    rows = []
    for n in range(int(duration_ms // frame_ms) + 1):
        now = n * frame_ms
        if autonomous:
            step, step_progress = scripted_step(now / 1000.0)
            apply_step(engine, app, step, step_progress, now)
        else:
            if stop_at_ms is not None and now >= stop_at_ms and not stopped:
                engine.stop_spin()
                stopped = True
            if progress is not None and now >= progress_at_ms and not progress_set:
                engine.set_progress_animated(progress, now)
                progress_set = True

        frame = engine.tick(now)
        rows.append({
            "Time": now,
            "Start": frame.start_angle,
            "Sweep": frame.sweep_angle,
            "Arrow": "yes" if frame.show_arrow else "no",
            "Progress": engine.get_normalized_progress(),
            "Events": " ".join(f"{v:.2f}" for v in events),
        })
        events.clear()

    return rows


def should_redraw(engine, events):
    return engine.needs_redraw or len(events) > 0


def status_line(engine, app):
    progress = engine.get_normalized_progress()
    status = "spinning" if progress < 0 else f"{progress * 100:.0f}%"
    line = f"{status}  turns: {app.cycles_completed}"
    if app.last_progress_reported is not None:
        line += f"  last reported: {app.last_progress_reported:.2f}"
    return line


async def run_window(config, args):
    pygame.init()
    try:
        W, H = args.width, args.height
        screen = pygame.display.set_mode((W, H))
        pygame.display.set_caption(f"progresswheel {_version}")
        clock = pygame.time.Clock()
        font = pygame.font.SysFont("Arial", 18)

        engine = AnimationEngine(config, clock=pygame.time.get_ticks)
        app = AppState()
        app.autonomous = args.autonomous

        def on_progress(value):
            if value == CYCLE_COMPLETED:
                app.cycles_completed += 1
            else:
                app.last_progress_reported = value
                print(f"Progress: {value:.2f}")

        engine.on_progress_changed(on_progress)

        size = (W, H) if config.fill_radius else None
        spinner = WheelSpinner(engine, size=size, padding=args.padding)

        start_ticks = pygame.time.get_ticks()
        running = True
        while running:
            events = pygame.event.get()
            for event in events:
                if event.type == pygame.QUIT:
                    running = False
                elif event.type in (pygame.WINDOWSHOWN, pygame.WINDOWRESTORED):
                    engine.on_visibility_changed(True)
                elif event.type == pygame.KEYDOWN:
                    if event.key in (pygame.K_ESCAPE, pygame.K_q):
                        running = False
                    elif event.key == pygame.K_s:
                        engine.start_spin()
                    elif event.key == pygame.K_x:
                        engine.stop_spin()
                    elif event.key == pygame.K_i:
                        engine.set_progress_instant(0.5)
                    elif event.key == pygame.K_r:
                        engine.reset_count()
                    elif event.unicode.isdigit() and event.unicode != "0":
                        engine.set_progress_animated(int(event.unicode) / 10.0)

            if app.autonomous:
                t = (pygame.time.get_ticks() - start_ticks) / 1000.0
                step, progress = scripted_step(t)
                apply_step(engine, app, step, progress)
                if step == DemoStep.COMPLETED and t > 14:
                    running = False

            # An idle wheel with nothing new to show keeps the last frame
            if should_redraw(engine, events):
                screen.fill(BACKGROUND)
                spinner.draw(screen, (W // 2, H // 2))

                text = font.render(status_line(engine, app), True, TEXT_COLOR)
                screen.blit(text, (10, H - text.get_height() - 10))

                pygame.display.flip()
            clock.tick(args.fps)
            await asyncio.sleep(0)
    finally:
        pygame.quit()


def cmdline():
    parser = argparse.ArgumentParser()
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {_version} (pygame v{pygame.version.ver})")
    parser.add_argument("-c", "--config_file", help="Path to config file", default="./progresswheel.json")
    pp_group = parser.add_mutually_exclusive_group()
    pp_group.add_argument("--json", help="Print as JSON", action="store_true", default=False)
    pp_group.add_argument("--csv", help="Print grids as CSV", action="store_true", default=False)

    subparser_top = parser.add_subparsers(dest="command", required=True)

    # Options shared by commands that build a wheel
    wheel_parent = argparse.ArgumentParser(add_help=False)
    wheel_parent.add_argument("--circle_radius", help="Override the wheel radius (pixels)", type=int, default=None)
    wheel_parent.add_argument("--bar_thickness", help="Override the bar thickness (pixels)", type=int, default=None)
    wheel_parent.add_argument("--arrow_style",
                              help="Override the arrow style",
                              choices=[s.value for s in ArrowStyle],
                              default=None)
    wheel_parent.add_argument("--autonomous",
                              help="Play the scripted demo (spin, stop, progress)",
                              action="store_true",
                              default=False)

    run_parser = subparser_top.add_parser("run", parents=[wheel_parent], help="Show the wheel in a window")
    run_parser.add_argument("--width", help="Window width", type=int, default=400)
    run_parser.add_argument("--height", help="Window height", type=int, default=400)
    run_parser.add_argument("--fps", help="Frames per second", type=int, default=60)
    run_parser.add_argument("--padding", help="Padding around the wheel (pixels)", type=int, default=0)

    trace_parser = subparser_top.add_parser("trace", parents=[wheel_parent], help="Print frame geometry without a display")
    trace_parser.add_argument("-d", "--duration_ms", help="Duration to trace (ms)", type=float, default=2000)
    trace_parser.add_argument("--fps", help="Frames per second", type=int, default=60)
    trace_parser.add_argument("--spin", help="Start spinning at time 0", action="store_true", default=False)
    trace_parser.add_argument("--stop_at_ms", help="Request a stop at this time (ms)", type=float, default=None)
    trace_parser.add_argument("--progress", help="Animate to this progress (0..1)", type=float, default=None)
    trace_parser.add_argument("--progress_at_ms",
                              help="Time at which --progress is applied (ms)",
                              type=float,
                              default=0)

    subparser_top.add_parser("config", parents=[wheel_parent], help="Write the effective config to the config file")

    args = parser.parse_args()
    raise SystemExit(main(args))


if __name__ == '__main__':
    cmdline()
