"""주문 관련 DTO 스키마"""
from typing import List, Optional
from datetime import datetime
from pydantic import Field

from perfectorder.core.entities.order import Order
from perfectorder.presentation.schemas.base import CamelModel


class OrderIdsRequest(CamelModel):
    """주문 ID 목록 요청 (발주 확인)"""
    order_ids: List[str] = Field(..., min_length=1)


class DispatchItem(CamelModel):
    """송장 전송 대상"""
    order_id: str
    courier: Optional[str] = None
    invoice_number: Optional[str] = None


class DispatchRequest(CamelModel):
    """송장 전송 요청"""
    items: List[DispatchItem] = Field(..., min_length=1)


class ShippingUpdateRequest(CamelModel):
    """택배사/송장번호 입력 요청"""
    courier: Optional[str] = None
    invoice_number: Optional[str] = None


class OrderResponse(CamelModel):
    """주문 응답"""
    id: str
    credential_id: str
    platform: str
    order_number: str
    parent_order_number: Optional[str] = None
    status: str
    product_id: str
    product_name: str
    option: str
    quantity: int
    amount: int
    orderer_name: str
    orderer_phone: str
    orderer_id: str
    receiver_name: str
    receiver_phone: str
    receiver_address: str
    shipping_memo: str
    courier: Optional[str] = None
    invoice_number: Optional[str] = None
    ordered_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> "OrderResponse":
        return cls.model_validate(order.to_dict())


class OrderListResponse(CamelModel):
    """주문 목록 응답"""
    orders: List[OrderResponse]
    total: int
    limit: int
    offset: int
