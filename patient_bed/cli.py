"""Main entry point for the patient bed simulator."""

import argparse
import json
import os
import random
import signal
import sys
import threading
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from patient_bed.mqtt.mqtt_config import device_id_for_instance, device_mqtt_config
from patient_bed.mqtt.publisher import MQTTPublisher, StdoutPublisher
from patient_bed.simulation.bed_simulator import BedSimulator
from patient_bed.simulation.config import (
    ConfigurationError,
    SimulatorConfig,
    policy_from_dict,
    vitals_from_dict,
)
from patient_bed.simulation.inclination import print_transition


class SimulatorRunner:
    """Runs one bed simulator per device instance, each on its own thread."""

    def __init__(self, simulators: List[Tuple[BedSimulator, object]]):
        self.simulators = simulators
        self.threads: List[threading.Thread] = []
        self._previous_handlers = {}

    def start(self, max_ticks: Optional[int] = None) -> int:
        for simulator, publisher in self.simulators:
            if not publisher.connect():
                print(
                    f"Exiting because {simulator.config.device_id} could not "
                    "connect to the MQTT broker"
                )
                self._cleanup()
                return 1

        for sig in (signal.SIGINT, signal.SIGTERM):
            self._previous_handlers[sig] = signal.signal(sig, self._signal_handler)

        for simulator, _ in self.simulators:
            thread = threading.Thread(
                target=simulator.run, kwargs={"max_ticks": max_ticks}, daemon=True
            )
            self.threads.append(thread)
            thread.start()

        # join with a timeout so the main thread keeps handling signals
        while any(t.is_alive() for t in self.threads):
            for thread in self.threads:
                thread.join(timeout=0.5)

        self._cleanup()
        return 0

    def stop(self):
        for simulator, _ in self.simulators:
            simulator.stop()

    def _signal_handler(self, sig, frame):
        """Handle interrupt signal."""
        print("\nReceived interrupt signal, finishing current tick...")
        self.stop()

    def _cleanup(self):
        for _, publisher in self.simulators:
            if publisher.is_connected():
                publisher.disconnect()
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler)
        self._previous_handlers = {}
        print("Patient Bed Simulator stopped.")


def parse_config_and_env(config_path: Optional[str]):
    """Parse configuration from a JSON file and broker settings from .env."""
    if config_path:
        load_dotenv(dotenv_path=os.path.join(os.path.dirname(config_path), ".env"))
        with open(config_path, "r") as f:
            config = json.load(f)
    else:
        print("No configuration file provided, using default settings.")
        load_dotenv()
        config = {}
    env = {
        "broker_url": os.getenv("MQTT_BROKER_URL"),
        "ca_cert": os.getenv("MQTT_CA_CERT"),
        "cert_dir": os.getenv("MQTT_CERT_DIR"),
    }
    return config, env


def build_simulator_config(config: dict, instance: str) -> SimulatorConfig:
    simulation = config.get("simulation", {})
    return SimulatorConfig(
        device_id=device_id_for_instance(instance),
        topic_prefix=simulation.get("topic_prefix", "PatientBed"),
        qos=simulation.get("qos", 1),
        tick_interval_seconds=simulation.get("tick_interval_seconds", 5.0),
        policy=policy_from_dict(config.get("policy", {})),
        vitals=vitals_from_dict(config.get("vitals", {})),
    )


def build_publisher(config: dict, env: dict, instance: str, dry_run: bool = False):
    if dry_run:
        return StdoutPublisher(device_id_for_instance(instance))

    mqtt_section = config.get("mqtt", {})
    broker_url = env.get("broker_url") or mqtt_section.get("broker_url")
    if not broker_url:
        raise ConfigurationError(
            "MQTT broker URL not configured (set MQTT_BROKER_URL or mqtt.broker_url)"
        )
    return MQTTPublisher(
        device_mqtt_config(
            broker_url,
            instance,
            ca_cert=env.get("ca_cert") or mqtt_section.get("ca_cert"),
            cert_dir=env.get("cert_dir") or mqtt_section.get("cert_dir"),
            keepalive=mqtt_section.get("keepalive", 60),
            publish_timeout=mqtt_section.get("publish_timeout", 10.0),
        )
    )


def build_runner(
    config: dict,
    env: dict,
    instances: List[str],
    seed: Optional[int] = None,
    dry_run: bool = False,
    verbose: bool = False,
) -> SimulatorRunner:
    simulators = []
    for index, instance in enumerate(instances):
        rng = random.Random(seed + index) if seed is not None else random.Random()
        publisher = build_publisher(config, env, instance, dry_run=dry_run)
        simulator = BedSimulator(
            build_simulator_config(config, instance),
            publisher,
            rng=rng,
            verbose=verbose,
        )
        simulator.state_machine.subscribe(print_transition)
        simulators.append((simulator, publisher))
    return SimulatorRunner(simulators)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Patient Bed Telemetry Simulator")
    parser.add_argument(
        "instances",
        nargs="+",
        help="Device instance numbers (e.g. 1 2); each runs as PatientBed<n>",
    )
    parser.add_argument("--config", type=str, help="JSON file simulator configurations")
    parser.add_argument("--seed", type=int, help="Seed for reproducible runs")
    parser.add_argument("--ticks", type=int, help="Stop after this many ticks")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print payloads to stdout instead of publishing to MQTT",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Print every published record"
    )
    args = parser.parse_args(argv)

    try:
        config, env = parse_config_and_env(args.config)
        runner = build_runner(
            config,
            env,
            args.instances,
            seed=args.seed,
            dry_run=args.dry_run,
            verbose=args.verbose,
        )
    except (OSError, ValueError) as e:
        print(f"Configuration error: {e}")
        return 2
    return runner.start(max_ticks=args.ticks)


if __name__ == "__main__":
    sys.exit(main())
