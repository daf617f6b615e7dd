"""시간 포트 (인터페이스)"""
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

# 한국 표준시 (마켓 API 날짜 기준)
KST = timezone(timedelta(hours=9), name="KST")


class ClockPort(ABC):
    """시간 인터페이스 (서명 시각, 조회 기간 계산용)"""

    @abstractmethod
    def now(self) -> datetime:
        """현재 UTC 시각 (timezone-aware)"""
        pass

    def now_kst(self) -> datetime:
        """현재 한국 시각"""
        return self.now().astimezone(KST)
