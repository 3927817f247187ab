"""Bed inclination and vital sign simulation."""

from .bed_simulator import BedSimulator
from .config import (
    ConfigurationError,
    InclinationPolicy,
    SimulatorConfig,
    VitalsRanges,
)
from .inclination import (
    InclinationState,
    InclinationStateMachine,
    TransitionEvent,
    TransitionKind,
    print_transition,
)
from .vitals import TelemetryGenerator

__all__ = [
    "BedSimulator",
    "ConfigurationError",
    "InclinationPolicy",
    "InclinationState",
    "InclinationStateMachine",
    "SimulatorConfig",
    "TelemetryGenerator",
    "TransitionEvent",
    "TransitionKind",
    "VitalsRanges",
    "print_transition",
]
