"""Patient bed telemetry simulator."""
