"""Data interface module."""

from .telemetry_record import BedState, TelemetryRecord

__all__ = ["BedState", "TelemetryRecord"]
