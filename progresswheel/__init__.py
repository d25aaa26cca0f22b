from .arrow import ArrowGeometry, arrow_geometry, line_arrow, triangle_arrow
from .config import ArrowStyle, ConfigurationError, WheelConfig, load_config, save_config, validate_config
from .engine import (CYCLE_COMPLETED, AnimationEngine, AnimationState, ArrowPhase, FrameGeometry, WheelSavedState,
                     progress_to_degrees)
