import enum
import json
import os.path

from pydantic import BaseModel, ConfigDict, ValidationError


class ConfigurationError(ValueError):
    """Raised when a wheel configuration cannot drive the animation."""


class ArrowStyle(str, enum.Enum):
    NONE = "none"
    LINE = "line"
    TRIANGLE = "triangle"


class WheelConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Arc lengths in degrees
    bar_length: float = 16
    bar_max_length: float = 270

    # Durations in ms of the (half-rate) animation clock
    growth_cycle_duration: float = 460
    pause_after_growth: float = 200

    # Degrees per second
    spin_speed: float = 230.0

    arrow_style: ArrowStyle = ArrowStyle.TRIANGLE
    max_arrow_line_length: float = 15

    # Sizes in pixels
    bar_thickness: int = 4
    rim_thickness: int = 4
    circle_radius: int = 28

    # ARGB
    bar_color: int = 0xAA000000
    rim_color: int = 0x00FFFFFF

    linear_progress: bool = False
    fill_radius: bool = False

    def destination_length(self) -> float:
        return self.bar_max_length - self.bar_length


def validate_config(config, last_good=None):
    """Check a config and return the one the engine should use.

    Accepts a WheelConfig, a dict or None. The arc lengths must leave room
    for the growth oscillator; durations and speeds that make no sense fall
    back to the values of ``last_good`` (or the defaults).
    """
    if config is None:
        config = WheelConfig()
    elif isinstance(config, dict):
        try:
            config = WheelConfig.model_validate(config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid wheel configuration: {e}") from e

    if config.bar_length <= 0:
        raise ConfigurationError(f"bar_length must be positive, got {config.bar_length}")
    if config.bar_length >= config.bar_max_length:
        raise ConfigurationError(f"bar_length ({config.bar_length}) must be smaller than "
                                 f"bar_max_length ({config.bar_max_length})")

    if last_good is None:
        last_good = WheelConfig()
    fallback = {}
    if config.growth_cycle_duration <= 0:
        fallback["growth_cycle_duration"] = last_good.growth_cycle_duration
    if config.pause_after_growth < 0:
        fallback["pause_after_growth"] = last_good.pause_after_growth
    if config.spin_speed <= 0:
        fallback["spin_speed"] = last_good.spin_speed
    if config.max_arrow_line_length <= 0:
        fallback["max_arrow_line_length"] = last_good.max_arrow_line_length
    if fallback:
        config = config.model_copy(update=fallback)

    return config


def load_config(config_file):
    config = WheelConfig().model_dump(mode="json")
    if os.path.isfile(config_file):
        with open(config_file, "r") as c:
            read_config = json.loads(c.read())
            if type(read_config) != dict:
                raise ConfigurationError(f"Expected a JSON object in {config_file}")
            config = {**config, **read_config}

    return validate_config(config)


def save_config(config, config_file):
    with open(config_file, "w") as c:
        c.write(json.dumps(config.model_dump(mode="json"), indent=4))
        print(f"Config updated in {config_file}")
