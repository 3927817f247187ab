"""Pytest configuration and shared fixtures for patient bed simulator tests."""

import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add repository root to path for imports
root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path))

LOCAL_TZ = timezone(timedelta(hours=5, minutes=30))


class FakeClock:
    """Drives both the local calendar clock and the monotonic clock."""

    def __init__(self, local: datetime, monotonic: float = 0.0):
        self.local = local
        self.monotonic_time = monotonic

    def now(self) -> datetime:
        return self.local

    def monotonic(self) -> float:
        return self.monotonic_time

    def advance(self, seconds: float):
        self.local += timedelta(seconds=seconds)
        self.monotonic_time += seconds

    def set_local(self, hour: int, minute: int):
        """Jump the wall clock without moving monotonic time."""
        self.local = self.local.replace(hour=hour, minute=minute)


class ScriptedRandom(random.Random):
    """Random source returning scripted probability draws and jitters."""

    def __init__(self, draws=(), jitters=()):
        super().__init__(0)
        self.draws = list(draws)
        self.jitters = list(jitters)

    def random(self):
        return self.draws.pop(0) if self.draws else 0.99

    def randrange(self, *args, **kwargs):
        return self.jitters.pop(0) if self.jitters else 0


class RecordingPublisher:
    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.messages = []
        self.connected = False

    def connect(self, timeout: float = 0.0) -> bool:
        self.connected = True
        return True

    def disconnect(self):
        self.connected = False

    def is_connected(self) -> bool:
        return self.connected

    def publish(self, topic, payload, qos=1):
        self.messages.append((topic, payload, qos))
        return self.succeed


@pytest.fixture
def clock():
    """Clock starting at 10:00 local time, well outside any meal window."""
    return FakeClock(datetime(2025, 5, 1, 10, 0, tzinfo=LOCAL_TZ))


@pytest.fixture
def publisher():
    return RecordingPublisher()
