import random
import threading
from typing import Optional, Protocol

import jsonschema

from patient_bed.data_interface import TelemetryRecord
from patient_bed.mqtt.schema_loader import get_schema_for_topic, load_schemas

from .clocks import CalendarClock, MonotonicClock, local_now, monotonic_now
from .config import SimulatorConfig
from .inclination import InclinationStateMachine
from .vitals import TelemetryGenerator


class Publisher(Protocol):
    def publish(self, topic: str, payload: bytes, qos: int = 1) -> bool: ...


class BedSimulator:
    """
    Simulates one patient bed and publishes a telemetry record every tick.

    Args:
        config (SimulatorConfig): Device identity, topic, tick interval and policy.
        publisher (Publisher): Transport the serialized records are handed to.
        rng (random.Random): Random source owned by this bed only.
        calendar_clock (callable): Local wall-clock time source.
        monotonic_clock (callable): Monotonic time source for dwell durations.
        verbose (bool): Print every published record.
    """

    def __init__(
        self,
        config: SimulatorConfig,
        publisher: Publisher,
        rng: Optional[random.Random] = None,
        calendar_clock: CalendarClock = local_now,
        monotonic_clock: MonotonicClock = monotonic_now,
        verbose: bool = False,
    ):
        self.config = config
        self.publisher = publisher
        self.verbose = verbose
        rng = rng if rng is not None else random.Random()

        self.state_machine = InclinationStateMachine(
            policy=config.policy,
            rng=rng,
            calendar_clock=calendar_clock,
            monotonic_clock=monotonic_clock,
            device_id=config.device_id,
        )
        self.generator = TelemetryGenerator(
            ranges=config.vitals, rng=rng, calendar_clock=calendar_clock
        )

        self.schemas = load_schemas()
        if not self.schemas:
            raise ValueError("Failed to start simulator: Could not load schemas.")
        self.schema = get_schema_for_topic(self.schemas, config.topic)
        if not self.schema:
            raise ValueError(f"No schema defined for topic {config.topic}")

        self.published_count = 0
        self.failed_count = 0
        self._stop_event = threading.Event()

    def tick(self) -> TelemetryRecord:
        """Sample vitals, update the bed position and publish one record."""
        vitals = self.generator.sample_vitals()
        state = self.state_machine.update()
        record = self.generator.build_record(self.config.device_id, vitals, state)
        self._publish(record)
        return record

    def _publish(self, record: TelemetryRecord) -> bool:
        topic = self.config.topic
        message = record.to_dict()
        try:
            jsonschema.validate(instance=message, schema=self.schema)
        except jsonschema.ValidationError as e:
            print(f"Invalid message for topic {topic}: {e.message} at {list(e.path)}")
            self.failed_count += 1
            return False

        if self.publisher.publish(topic, record.to_payload(), self.config.qos):
            self.published_count += 1
            if self.verbose:
                print(f"Published to {topic}: {message}")
            return True

        self.failed_count += 1
        print(f"[{record.timestamp}] Error publishing record for {record.device_id}")
        return False

    def run(self, max_ticks: Optional[int] = None) -> int:
        """Tick until stopped (or max_ticks reached); returns ticks completed."""
        print(f"Starting Patient Bed Simulator: {self.config.device_id}")
        print(f"Publishing to topic: {self.config.topic}")
        ticks = 0
        while not self._stop_event.is_set():
            self.tick()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            self._stop_event.wait(self.config.tick_interval_seconds)
        print(
            f"Simulator {self.config.device_id} stopped after {ticks} ticks "
            f"({self.published_count} published, {self.failed_count} failed)"
        )
        return ticks

    def stop(self):
        """Request shutdown; the tick in progress finishes first."""
        self._stop_event.set()

    def is_running(self) -> bool:
        return not self._stop_event.is_set()
