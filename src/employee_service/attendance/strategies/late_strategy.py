from __future__ import annotations

from datetime import datetime

from .base import AttendanceStrategy, CheckInDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, office_start: datetime) -> CheckInDecision:
        minutes = int((now - office_start).total_seconds() // 60)
        return CheckInDecision(is_late=True, minutes_late=max(minutes, 0))
