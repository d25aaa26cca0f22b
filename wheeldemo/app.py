import enum


class DemoStep(enum.Enum):
    IDLE = 0
    SPINNING = 1
    STOPPING = 2
    PROGRESS = 3
    COMPLETED = 4


class AppState:
    step = DemoStep.IDLE
    progress = 0.0
    cycles_completed = 0
    last_progress_reported = None
    autonomous = False


def scripted_step(t_seconds):
    """Step and progress of the autonomous demo at a given time."""
    if t_seconds < 4:
        return DemoStep.SPINNING, 0.0
    if t_seconds < 6:
        return DemoStep.STOPPING, 0.0
    if t_seconds < 12:
        return DemoStep.PROGRESS, round((t_seconds - 6) / 6, 1)
    return DemoStep.COMPLETED, 1.0


def apply_step(engine, app, step, progress, now_ms=None):
    """Drive the engine into ``step``, issuing each command only on a change."""
    if step != app.step:
        if step == DemoStep.SPINNING:
            engine.start_spin(now_ms)
        elif step == DemoStep.STOPPING:
            engine.stop_spin()
        elif step == DemoStep.IDLE:
            engine.reset_count()
        app.step = step

    if step in (DemoStep.PROGRESS, DemoStep.COMPLETED) and progress != app.progress:
        app.progress = progress
        engine.set_progress_animated(progress, now_ms)
