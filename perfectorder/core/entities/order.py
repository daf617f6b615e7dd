"""주문 도메인 엔티티"""
from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from datetime import datetime, timezone
from enum import Enum

from perfectorder.core.entities.credential import Marketplace
from perfectorder.core.exceptions import InvalidStatusTransition


class OrderStatus(Enum):
    """주문 상태"""
    NEW = "NEW"                 # 신규 주문
    PENDING = "PENDING"         # 발주 확인 (배송 준비)
    SHIPPING = "SHIPPING"       # 배송 중
    DELIVERED = "DELIVERED"     # 배송 완료
    CANCELLED = "CANCELLED"     # 취소
    RETURNED = "RETURNED"       # 반품/교환


# 주문 ID 접두사: {접두사}-{마켓 주문번호}
ORDER_ID_PREFIX = {
    Marketplace.NAVER: "N",
    Marketplace.COUPANG: "C",
    Marketplace.ELEVENST: "E",
    Marketplace.GMARKET: "G",
    Marketplace.AUCTION: "A",
}


def make_order_id(marketplace: Marketplace, order_number: str) -> str:
    """마켓 + 마켓 주문번호로 결정적인 주문 ID 생성 (재동기화해도 동일)"""
    order_number = str(order_number).strip()
    if not order_number:
        raise ValueError("마켓 주문번호가 비어 있습니다")
    return f"{ORDER_ID_PREFIX[marketplace]}-{order_number}"


@dataclass
class Order:
    """정규화된 주문 도메인 엔티티"""
    id: str
    user_id: str
    credential_id: str
    marketplace: Marketplace
    order_number: str                    # 중복 판단 키 (마켓 기준 주문/상품주문 번호)
    status: OrderStatus = OrderStatus.NEW
    parent_order_number: Optional[str] = None

    # 상품 정보
    product_id: str = ""
    product_name: str = ""
    option: str = ""
    quantity: int = 1
    amount: int = 0

    # 주문자 / 수취인
    orderer_name: str = ""
    orderer_phone: str = ""
    orderer_id: str = ""
    receiver_name: str = ""
    receiver_phone: str = ""
    receiver_address: str = ""
    shipping_memo: str = ""

    # 배송 정보 (사용자가 입력)
    courier: Optional[str] = None
    invoice_number: Optional[str] = None

    ordered_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    # 시스템 정보
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_vendor(cls, marketplace: Marketplace, order_number: str, **fields) -> "Order":
        """마켓 주문번호로 ID를 만들어 주문 생성"""
        return cls(
            id=make_order_id(marketplace, order_number),
            marketplace=marketplace,
            order_number=str(order_number),
            **fields
        )

    def confirm(self) -> None:
        """발주 확인: NEW -> PENDING"""
        if self.status != OrderStatus.NEW:
            raise InvalidStatusTransition(
                f"{self.id}: {self.status.value} 상태의 주문은 발주 확인할 수 없습니다"
            )
        self.status = OrderStatus.PENDING
        self.updated_at = datetime.now(timezone.utc)

    def update_shipping(self, courier: Optional[str] = None, invoice_number: Optional[str] = None) -> None:
        """택배사/송장번호 입력"""
        if courier is not None:
            self.courier = courier.strip() or None
        if invoice_number is not None:
            self.invoice_number = invoice_number.strip() or None
        self.updated_at = datetime.now(timezone.utc)

    def dispatch(self) -> None:
        """송장 전송: PENDING -> SHIPPING (택배사, 송장번호 필수)"""
        if self.status != OrderStatus.PENDING:
            raise InvalidStatusTransition(
                f"{self.id}: {self.status.value} 상태의 주문은 발송 처리할 수 없습니다"
            )
        if not self.courier or not self.invoice_number:
            raise InvalidStatusTransition(f"{self.id}: 택배사와 송장번호를 먼저 입력해주세요")
        self.status = OrderStatus.SHIPPING
        self.updated_at = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리 변환 (직렬화용)"""
        return {
            'id': self.id,
            'credential_id': self.credential_id,
            'platform': self.marketplace.value,
            'order_number': self.order_number,
            'parent_order_number': self.parent_order_number,
            'status': self.status.value,
            'product_id': self.product_id,
            'product_name': self.product_name,
            'option': self.option,
            'quantity': self.quantity,
            'amount': self.amount,
            'orderer_name': self.orderer_name,
            'orderer_phone': self.orderer_phone,
            'orderer_id': self.orderer_id,
            'receiver_name': self.receiver_name,
            'receiver_phone': self.receiver_phone,
            'receiver_address': self.receiver_address,
            'shipping_memo': self.shipping_memo,
            'courier': self.courier,
            'invoice_number': self.invoice_number,
            'ordered_at': self.ordered_at.isoformat() if self.ordered_at else None,
            'paid_at': self.paid_at.isoformat() if self.paid_at else None,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat()
        }
