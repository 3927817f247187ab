"""Bed inclination state machine.

Each call to ``update`` re-evaluates the bed position in strict order:

1. Inside a meal window the bed is forced to the meal angle.
2. On the first tick after a meal window the bed is laid flat and a new flat
   period starts.
3. Otherwise the current non-meal state is held until its rolled duration has
   elapsed, after which a flat bed may tilt to the minor angle and a tilted bed
   is laid flat. A flat bed that stays flat still starts a new flat period.

Meal windows are checked against the local calendar clock, elapsed durations
against the monotonic clock.
"""

import random
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from patient_bed.data_interface import BedState

from .clocks import (
    CalendarClock,
    MonotonicClock,
    format_timestamp,
    local_now,
    monotonic_now,
)
from .config import InclinationPolicy
from .meal_windows import in_meal_window, meal_windows_from_policy


class TransitionKind(Enum):
    MEAL_INCLINE = "meal_incline"
    MEAL_END_FLAT = "meal_end_flat"
    MINOR_INCLINE = "minor_incline"
    MINOR_END_FLAT = "minor_end_flat"
    FLAT_RENEWED = "flat_renewed"


@dataclass
class InclinationState:
    """Mutable inclination state owned by one simulated bed."""

    mode: BedState
    degrees: float
    meal_override_active: bool
    last_non_meal_change: float
    non_meal_state_duration_seconds: int

    @property
    def non_meal_state_deadline(self) -> float:
        """Monotonic time at which the current non-meal state may change."""
        return self.last_non_meal_change + self.non_meal_state_duration_seconds


@dataclass(frozen=True)
class TransitionEvent:
    kind: TransitionKind
    device_id: str
    mode: BedState
    degrees: float
    at: datetime
    duration_seconds: Optional[int] = None


TransitionObserver = Callable[[TransitionEvent], None]


class InclinationStateMachine:
    """Decides each tick whether the bed is flat or inclined."""

    def __init__(
        self,
        policy: Optional[InclinationPolicy] = None,
        rng: Optional[random.Random] = None,
        calendar_clock: CalendarClock = local_now,
        monotonic_clock: MonotonicClock = monotonic_now,
        device_id: str = "",
    ):
        self.policy = policy if policy is not None else InclinationPolicy()
        self.random = rng if rng is not None else random.Random()
        self.calendar_clock = calendar_clock
        self.monotonic_clock = monotonic_clock
        self.device_id = device_id
        self.meal_windows = meal_windows_from_policy(self.policy)
        self._observers: List[TransitionObserver] = []

        self.state = InclinationState(
            mode=BedState.FLAT,
            degrees=0.0,
            meal_override_active=False,
            last_non_meal_change=self.monotonic_clock(),
            non_meal_state_duration_seconds=self._roll_flat_duration(),
        )

    def subscribe(self, observer: TransitionObserver):
        """Register a callback invoked with every transition event."""
        self._observers.append(observer)

    def update(self) -> InclinationState:
        """Evaluate one tick and return the (mutated) state."""
        now_local = self.calendar_clock()
        now_steady = self.monotonic_clock()
        state = self.state

        if in_meal_window(self.meal_windows, now_local):
            rising_edge = not state.meal_override_active
            state.mode = BedState.INCLINED
            state.degrees = self.policy.meal_inclination_degrees
            state.meal_override_active = True
            if rising_edge:
                self._emit(TransitionKind.MEAL_INCLINE, now_local)
        elif state.meal_override_active:
            state.meal_override_active = False
            self._enter_flat(now_steady)
            self._emit(TransitionKind.MEAL_END_FLAT, now_local)
        elif now_steady - state.last_non_meal_change >= (
            state.non_meal_state_duration_seconds
        ):
            if state.mode == BedState.FLAT:
                if self.random.random() < self.policy.minor_incline_probability:
                    self._enter_minor_incline(now_steady)
                    self._emit(TransitionKind.MINOR_INCLINE, now_local)
                else:
                    self._enter_flat(now_steady)
                    self._emit(TransitionKind.FLAT_RENEWED, now_local)
            else:
                self._enter_flat(now_steady)
                self._emit(TransitionKind.MINOR_END_FLAT, now_local)

        return state

    def _enter_flat(self, now_steady: float):
        self.state.mode = BedState.FLAT
        self.state.degrees = 0.0
        self.state.non_meal_state_duration_seconds = self._roll_flat_duration()
        self.state.last_non_meal_change = now_steady

    def _enter_minor_incline(self, now_steady: float):
        self.state.mode = BedState.INCLINED
        self.state.degrees = self.policy.minor_inclination_degrees
        self.state.non_meal_state_duration_seconds = self._roll_minor_duration()
        self.state.last_non_meal_change = now_steady

    def _roll_flat_duration(self) -> int:
        return self._roll_minutes(
            self.policy.flat_duration_base_minutes,
            self.policy.flat_duration_jitter_minutes,
        )

    def _roll_minor_duration(self) -> int:
        return self._roll_minutes(
            self.policy.minor_duration_base_minutes,
            self.policy.minor_duration_jitter_minutes,
        )

    def _roll_minutes(self, base: int, jitter: int) -> int:
        """Return base + uniform integer in [0, jitter) minutes, in seconds."""
        extra = self.random.randrange(jitter) if jitter > 0 else 0
        return (base + extra) * 60

    def _emit(self, kind: TransitionKind, now_local: datetime):
        event = TransitionEvent(
            kind=kind,
            device_id=self.device_id,
            mode=self.state.mode,
            degrees=self.state.degrees,
            at=now_local,
            duration_seconds=None
            if kind == TransitionKind.MEAL_INCLINE
            else self.state.non_meal_state_duration_seconds,
        )
        for observer in self._observers:
            observer(event)


def print_transition(event: TransitionEvent):
    """Console observer for bed movements. Flat renewals are not printed."""
    messages = {
        TransitionKind.MEAL_INCLINE: f"INCLINED for meal to {event.degrees} degrees.",
        TransitionKind.MEAL_END_FLAT: "set to FLAT after meal.",
        TransitionKind.MINOR_INCLINE: f"INCLINED (minor) to {event.degrees} degrees.",
        TransitionKind.MINOR_END_FLAT: "set to FLAT after minor incline.",
    }
    message = messages.get(event.kind)
    if message:
        print(f"[{format_timestamp(event.at)}] Bed {event.device_id} {message}")
