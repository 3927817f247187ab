"""Configuration for the bed simulator and its inclination policy."""

from dataclasses import dataclass, field
from typing import List, Tuple


class ConfigurationError(ValueError):
    """Raised when simulator configuration is malformed."""


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class InclinationPolicy:
    """Policy constants driving the inclination state machine."""

    meal_start_times: List[Tuple[int, int]] = field(
        default_factory=lambda: [(8, 0), (12, 0), (18, 0)]
    )
    meal_duration_minutes: int = 30
    meal_inclination_degrees: float = 60.0
    minor_inclination_degrees: float = 30.0
    minor_duration_base_minutes: int = 10
    minor_duration_jitter_minutes: int = 5
    flat_duration_base_minutes: int = 45
    flat_duration_jitter_minutes: int = 15
    minor_incline_probability: float = 0.20

    def __post_init__(self):
        self.validate()

    def validate(self):
        if not self.meal_start_times:
            raise ConfigurationError("At least one meal start time is required")
        if not _is_int(self.meal_duration_minutes) or self.meal_duration_minutes <= 0:
            raise ConfigurationError(
                f"Meal duration must be a positive whole number, got {self.meal_duration_minutes}"
            )
        # windows running past midnight simply end at 23:59
        for hour, minute in self.meal_start_times:
            if not 0 <= hour < 24 or not 0 <= minute < 60:
                raise ConfigurationError(f"Invalid meal start time {hour}:{minute}")
        for name in (
            "minor_duration_base_minutes",
            "minor_duration_jitter_minutes",
            "flat_duration_base_minutes",
            "flat_duration_jitter_minutes",
        ):
            value = getattr(self, name)
            if not _is_int(value):
                raise ConfigurationError(
                    f"{name} must be a whole number of minutes, got {value!r}"
                )
            if value < 0:
                raise ConfigurationError(f"{name} must not be negative")
        if self.meal_inclination_degrees <= 0 or self.minor_inclination_degrees <= 0:
            raise ConfigurationError("Inclination angles must be positive")
        if not 0.0 <= self.minor_incline_probability <= 1.0:
            raise ConfigurationError(
                f"Minor incline probability must be in [0, 1], "
                f"got {self.minor_incline_probability}"
            )


@dataclass
class VitalsRanges:
    """Half-open sampling ranges for simulated vital signs."""

    heart_rate: Tuple[float, float] = (55.0, 85.0)
    spo2: Tuple[float, float] = (95.0, 99.5)

    def __post_init__(self):
        for name in ("heart_rate", "spo2"):
            low, high = getattr(self, name)
            if low >= high:
                raise ConfigurationError(f"Empty {name} range [{low}, {high})")


@dataclass
class SimulatorConfig:
    """Configuration for a single simulated bed."""

    device_id: str
    topic_prefix: str = "PatientBed"
    qos: int = 1
    tick_interval_seconds: float = 5.0
    policy: InclinationPolicy = field(default_factory=InclinationPolicy)
    vitals: VitalsRanges = field(default_factory=VitalsRanges)

    def __post_init__(self):
        if not self.device_id:
            raise ConfigurationError("Device id must not be empty")
        if not self.topic_prefix:
            raise ConfigurationError("Topic prefix must not be empty")
        if self.qos not in (0, 1, 2):
            raise ConfigurationError(f"QoS must be 0, 1 or 2, got {self.qos}")
        if self.tick_interval_seconds <= 0:
            raise ConfigurationError(
                f"Tick interval must be positive, got {self.tick_interval_seconds}"
            )

    @property
    def topic(self) -> str:
        return f"{self.topic_prefix}/{self.device_id}/data"


def parse_meal_time(value: str) -> Tuple[int, int]:
    """Parse an "HH:MM" meal start time."""
    try:
        hour, minute = value.split(":")
        return int(hour), int(minute)
    except (AttributeError, ValueError) as e:
        raise ConfigurationError(f"Invalid meal start time {value!r}") from e


def policy_from_dict(policy_config: dict) -> InclinationPolicy:
    """Build an inclination policy from the "policy" section of a JSON config."""
    values = dict(policy_config)
    if "meal_start_times" in values:
        values["meal_start_times"] = [
            parse_meal_time(t) for t in values["meal_start_times"]
        ]
    try:
        return InclinationPolicy(**values)
    except TypeError as e:
        raise ConfigurationError(f"Unknown policy setting: {e}") from e


def vitals_from_dict(vitals_config: dict) -> VitalsRanges:
    try:
        return VitalsRanges(**{k: tuple(v) for k, v in vitals_config.items()})
    except TypeError as e:
        raise ConfigurationError(f"Unknown vitals setting: {e}") from e
