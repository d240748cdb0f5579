from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, now: datetime, cutoff: datetime) -> AttendanceStrategy:
        # strictly after the cutoff is late; exactly on it is still on time
        if now > cutoff:
            return LateStrategy()
        return OnTimeStrategy()
