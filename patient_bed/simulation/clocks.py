"""Time sources injected into the simulator."""

import time
from datetime import datetime
from typing import Callable

CalendarClock = Callable[[], datetime]
MonotonicClock = Callable[[], float]


def local_now() -> datetime:
    """Current local wall-clock time, aware of its UTC offset."""
    return datetime.now().astimezone()


def monotonic_now() -> float:
    return time.monotonic()


def format_timestamp(moment: datetime) -> str:
    """Format as ISO 8601 with a numeric UTC offset, e.g. 2025-05-01T08:15:00+0530."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.strftime("%Y-%m-%dT%H:%M:%S%z")
