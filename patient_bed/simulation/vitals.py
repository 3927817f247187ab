"""Telemetry generator producing vital sign samples for a bed."""

import random
from typing import Optional, Tuple

from patient_bed.data_interface import TelemetryRecord

from .clocks import CalendarClock, format_timestamp, local_now
from .config import VitalsRanges
from .inclination import InclinationState


class TelemetryGenerator:
    """
    Samples heart rate and SpO2 and combines them with the bed position.

    Args:
        ranges (VitalsRanges): Half-open sampling ranges.
        rng (random.Random): Random source, one per simulated bed.
        calendar_clock (callable): Returns the local time used for timestamps.
    """

    def __init__(
        self,
        ranges: Optional[VitalsRanges] = None,
        rng: Optional[random.Random] = None,
        calendar_clock: CalendarClock = local_now,
    ):
        self.ranges = ranges if ranges is not None else VitalsRanges()
        self.random = rng if rng is not None else random.Random()
        self.calendar_clock = calendar_clock

    def _sample(self, bounds: Tuple[float, float]) -> float:
        low, high = bounds
        value = self.random.uniform(low, high)
        # Guard the open upper bound against float rounding
        return value if value < high else low

    def sample_vitals(self) -> Tuple[float, float]:
        """Return a (heart_rate, spo2) pair."""
        heart_rate = self._sample(self.ranges.heart_rate)
        spo2 = self._sample(self.ranges.spo2)
        return heart_rate, spo2

    def build_record(
        self, device_id: str, vitals: Tuple[float, float], state: InclinationState
    ) -> TelemetryRecord:
        heart_rate, spo2 = vitals
        return TelemetryRecord(
            device_id=device_id,
            timestamp=format_timestamp(self.calendar_clock()),
            heart_rate=heart_rate,
            spo2=spo2,
            inclination_degrees=state.degrees,
            bed_state=state.mode,
        )

    def generate(self, device_id: str, state: InclinationState) -> TelemetryRecord:
        """Sample vitals and snapshot them with the current inclination state."""
        return self.build_record(device_id, self.sample_vitals(), state)
