"""마켓 연동 포트 (인터페이스)"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from perfectorder.core.entities.credential import Credential, Marketplace
from perfectorder.core.entities.order import Order


@dataclass(frozen=True)
class DateRange:
    """주문 조회 기간 (양 끝 포함)"""
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("조회 시작일이 종료일보다 늦습니다")


class MarketPort(ABC):
    """마켓 주문 수집 인터페이스

    구현체는 외부 호출만 하고 저장소에 쓰지 않는다. 실패는 AdapterError 하위 예외로 알린다.
    """

    marketplace: Marketplace

    @abstractmethod
    async def fetch_orders(
        self,
        credential: Credential,
        date_range: Optional[DateRange] = None,
        status: Optional[str] = None
    ) -> List[Order]:
        """주문 목록을 정규화된 Order로 반환"""
        pass
