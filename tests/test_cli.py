import json
from pathlib import Path

import pytest

from patient_bed.cli import (
    build_publisher,
    build_runner,
    build_simulator_config,
    main,
    parse_config_and_env,
)
from patient_bed.mqtt.publisher import MQTTPublisher, StdoutPublisher
from patient_bed.simulation.config import ConfigurationError

EXAMPLE_CONFIG = Path(__file__).parent.parent / "config" / "simulator.example.json"


@pytest.fixture
def config_file(tmp_path):
    with open(EXAMPLE_CONFIG) as f:
        config = json.load(f)
    config["simulation"]["tick_interval_seconds"] = 0.01
    path = tmp_path / "simulator.json"
    path.write_text(json.dumps(config))
    return path


@pytest.fixture(autouse=True)
def clear_broker_env(monkeypatch):
    # setenv first so teardown also removes values loaded from .env files
    for name in ("MQTT_BROKER_URL", "MQTT_CA_CERT", "MQTT_CERT_DIR"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_example_config_builds_simulator_config():
    with open(EXAMPLE_CONFIG) as f:
        config = json.load(f)

    simulator_config = build_simulator_config(config, "3")

    assert simulator_config.device_id == "PatientBed3"
    assert simulator_config.topic == "PatientBed/PatientBed3/data"
    assert simulator_config.policy.meal_start_times == [(8, 0), (12, 0), (18, 0)]
    assert simulator_config.vitals.spo2 == (95.0, 99.5)


def test_env_file_beside_config_is_loaded(config_file):
    (config_file.parent / ".env").write_text(
        "MQTT_BROKER_URL=ssl://broker.example.com:8883\nMQTT_CERT_DIR=certs\n"
    )

    _, env = parse_config_and_env(str(config_file))

    assert env["broker_url"] == "ssl://broker.example.com:8883"
    assert env["cert_dir"] == "certs"


def test_missing_broker_url_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        build_publisher({}, {}, "1")


def test_build_publisher_variants():
    assert isinstance(build_publisher({}, {}, "1", dry_run=True), StdoutPublisher)
    publisher = build_publisher({}, {"broker_url": "localhost:1883"}, "1")
    assert isinstance(publisher, MQTTPublisher)
    assert publisher.id == "PatientBed1"


def test_runner_gives_each_device_its_own_state():
    runner = build_runner({}, {}, ["1", "2"], seed=5, dry_run=True)

    (first, _), (second, _) = runner.simulators
    assert first.config.topic == "PatientBed/PatientBed1/data"
    assert second.config.topic == "PatientBed/PatientBed2/data"
    assert first.state_machine is not second.state_machine
    assert first.state_machine.random is not second.state_machine.random


def test_dry_run_main(config_file, capsys):
    exit_code = main(
        ["1", "2", "--config", str(config_file), "--dry-run", "--ticks", "2"]
    )

    out = capsys.readouterr().out
    assert exit_code == 0
    assert out.count("PatientBed/PatientBed1/data") == 3
    assert out.count("PatientBed/PatientBed2/data") == 3
    assert "Patient Bed Simulator stopped." in out


def test_bad_policy_exits_with_configuration_error(tmp_path, capsys):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"policy": {"meal_start_times": []}}))

    assert main(["1", "--config", str(path), "--dry-run"]) == 2
    assert "Configuration error" in capsys.readouterr().out


def test_missing_config_file_exits_with_configuration_error(tmp_path, capsys):
    missing = tmp_path / "nope.json"

    assert main(["1", "--config", str(missing), "--dry-run"]) == 2
    assert "Configuration error" in capsys.readouterr().out


def test_invalid_json_config_exits_with_configuration_error(tmp_path, capsys):
    path = tmp_path / "broken.json"
    path.write_text("{ not json")

    assert main(["1", "--config", str(path), "--dry-run"]) == 2
    assert "Configuration error" in capsys.readouterr().out


def test_fractional_duration_exits_with_configuration_error(tmp_path, capsys):
    path = tmp_path / "fractional.json"
    path.write_text(json.dumps({"policy": {"flat_duration_jitter_minutes": 7.5}}))

    assert main(["1", "--config", str(path), "--dry-run"]) == 2
    assert "whole number of minutes" in capsys.readouterr().out
