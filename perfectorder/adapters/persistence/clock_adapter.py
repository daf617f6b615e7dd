"""시간 어댑터"""
from datetime import datetime, timezone

from perfectorder.core.ports.clock_port import ClockPort


class ClockAdapter(ClockPort):
    """시스템 시계"""

    def now(self) -> datetime:
        """현재 UTC 시각"""
        return datetime.now(timezone.utc)


class FixedClock(ClockPort):
    """고정 시각 (테스트, 재현용)"""

    def __init__(self, fixed: datetime):
        if fixed.tzinfo is None:
            fixed = fixed.replace(tzinfo=timezone.utc)
        self.fixed = fixed

    def now(self) -> datetime:
        return self.fixed
