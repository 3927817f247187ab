"""MQTT transport for publishing bed telemetry."""
