from __future__ import annotations

from datetime import datetime

from .base import AttendanceStrategy, CheckInDecision


class OnTimeStrategy(AttendanceStrategy):
    """Check-in at or before the cutoff."""

    def decide_checkin(self, *, now: datetime, office_start: datetime) -> CheckInDecision:
        return CheckInDecision(is_late=False)
