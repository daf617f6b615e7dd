"""주문 관련 라우트 (헥사고날 아키텍처)"""
from typing import Optional
from fastapi import APIRouter, Depends, Query

from perfectorder.app.di import get_order_service
from perfectorder.services.order_service import OrderService
from perfectorder.core.entities.order import OrderStatus
from perfectorder.core.exceptions import create_http_exception
from perfectorder.presentation.schemas.orders import (
    OrderIdsRequest,
    DispatchRequest,
    ShippingUpdateRequest,
    OrderResponse,
    OrderListResponse
)
from perfectorder.shared.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("", response_model=OrderListResponse)
async def list_orders(
    user_id: str,
    status: Optional[OrderStatus] = Query(None, description="주문 상태 필터"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    order_service: OrderService = Depends(get_order_service)
):
    """주문 목록 조회 (주문일시 최신순)"""
    result = await order_service.get_orders(user_id, status=status, limit=limit, offset=offset)
    if result.is_failure():
        raise create_http_exception(result.cause or result.get_error())

    orders = result.get_value()
    return OrderListResponse(
        orders=[OrderResponse.from_entity(order) for order in orders],
        total=len(orders),
        limit=limit,
        offset=offset
    )


@router.post("/confirm", response_model=OrderListResponse)
async def confirm_orders(
    user_id: str,
    request: OrderIdsRequest,
    order_service: OrderService = Depends(get_order_service)
):
    """발주 확인 (NEW -> PENDING)"""
    result = await order_service.confirm_orders(user_id, request.order_ids)
    if result.is_failure():
        raise create_http_exception(result.cause or result.get_error())

    orders = result.get_value()
    return OrderListResponse(
        orders=[OrderResponse.from_entity(order) for order in orders],
        total=len(orders),
        limit=len(orders),
        offset=0
    )


@router.post("/dispatch", response_model=OrderListResponse)
async def dispatch_orders(
    user_id: str,
    request: DispatchRequest,
    order_service: OrderService = Depends(get_order_service)
):
    """송장 전송 (PENDING -> SHIPPING)"""
    result = await order_service.dispatch_orders(
        user_id,
        [(item.order_id, item.courier, item.invoice_number) for item in request.items]
    )
    if result.is_failure():
        raise create_http_exception(result.cause or result.get_error())

    orders = result.get_value()
    return OrderListResponse(
        orders=[OrderResponse.from_entity(order) for order in orders],
        total=len(orders),
        limit=len(orders),
        offset=0
    )


@router.put("/{order_id}/shipping", response_model=OrderResponse)
async def update_shipping(
    user_id: str,
    order_id: str,
    request: ShippingUpdateRequest,
    order_service: OrderService = Depends(get_order_service)
):
    """택배사/송장번호 입력"""
    result = await order_service.update_shipping(
        user_id, order_id, courier=request.courier, invoice_number=request.invoice_number
    )
    if result.is_failure():
        raise create_http_exception(result.cause or result.get_error())
    return OrderResponse.from_entity(result.get_value())
