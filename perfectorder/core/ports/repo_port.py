"""저장소 포트 (인터페이스)"""
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from perfectorder.core.entities.credential import Credential, Marketplace
from perfectorder.core.entities.order import Order, OrderStatus


class CredentialRepositoryPort(ABC):
    """자격증명 저장소 인터페이스"""

    @abstractmethod
    async def add(self, credential: Credential) -> None:
        """자격증명 저장"""
        pass

    @abstractmethod
    async def get(self, user_id: str, credential_id: str) -> Optional[Credential]:
        """ID로 조회"""
        pass

    @abstractmethod
    async def list_by_user(
        self,
        user_id: str,
        marketplace: Optional[Marketplace] = None
    ) -> List[Credential]:
        """사용자 자격증명 목록"""
        pass

    @abstractmethod
    async def list_active(self, user_id: str) -> List[Credential]:
        """동기화 대상(활성) 자격증명 목록"""
        pass

    @abstractmethod
    async def set_active(self, user_id: str, credential_id: str, is_active: bool) -> bool:
        """활성 상태 변경. 대상이 없으면 False"""
        pass

    @abstractmethod
    async def delete(self, user_id: str, credential_id: str) -> bool:
        """삭제. 대상이 없으면 False"""
        pass


class OrderRepositoryPort(ABC):
    """주문 저장소 인터페이스"""

    @abstractmethod
    async def insert_new(self, user_id: str, orders: Sequence[Order]) -> List[Order]:
        """이미 있는 주문 ID는 건드리지 않고 새 주문만 추가. 추가된 주문 반환"""
        pass

    @abstractmethod
    async def get(self, user_id: str, order_id: str) -> Optional[Order]:
        """주문 조회"""
        pass

    @abstractmethod
    async def get_many(self, user_id: str, order_ids: Sequence[str]) -> List[Order]:
        """여러 주문 조회 (없는 ID는 무시)"""
        pass

    @abstractmethod
    async def list_by_user(
        self,
        user_id: str,
        status: Optional[OrderStatus] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Order]:
        """주문 목록 (주문일시 최신순)"""
        pass

    @abstractmethod
    async def save_all(self, orders: Sequence[Order]) -> None:
        """상태/배송 정보 변경 저장"""
        pass
