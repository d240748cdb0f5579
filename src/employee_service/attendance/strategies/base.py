from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CheckInDecision:
    is_late: bool
    minutes_late: int = 0


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we judge a check-in."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, office_start: datetime) -> CheckInDecision:
        raise NotImplementedError
