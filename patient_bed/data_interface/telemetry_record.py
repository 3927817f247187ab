"""Telemetry record types."""

import json
from dataclasses import dataclass
from enum import Enum


class BedState(str, Enum):
    FLAT = "FLAT"
    INCLINED = "INCLINED"


@dataclass(frozen=True)
class TelemetryRecord:
    """Represents one tick of patient bed telemetry."""

    device_id: str
    timestamp: str
    heart_rate: float
    spo2: float
    inclination_degrees: float
    bed_state: BedState

    def __post_init__(self):
        flat = self.inclination_degrees == 0.0
        if flat != (self.bed_state == BedState.FLAT):
            raise ValueError(
                f"Bed state {self.bed_state.value} does not match inclination "
                f"{self.inclination_degrees}"
            )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "deviceId": self.device_id,
            "timestamp": self.timestamp,
            "heartRate": self.heart_rate,
            "spo2": self.spo2,
            "inclination": self.inclination_degrees,
            "bedState": self.bed_state.value,
        }

    def to_payload(self) -> bytes:
        """Serialize to the JSON payload published downstream."""
        return json.dumps(self.to_dict(), indent=4).encode("utf-8")
