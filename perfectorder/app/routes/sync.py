"""주문 동기화 라우트"""
from fastapi import APIRouter, Depends

from perfectorder.app.di import get_sync_orders_usecase
from perfectorder.core.usecases.sync_orders import SyncOrdersUseCase
from perfectorder.presentation.schemas.sync import SyncResponse
from perfectorder.shared.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/sync", response_model=SyncResponse)
async def sync_orders(
    user_id: str,
    usecase: SyncOrdersUseCase = Depends(get_sync_orders_usecase)
):
    """활성 자격증명 전체 주문 동기화

    자격증명별 실패는 errors에 담겨 200으로 응답한다.
    """
    result = await usecase.sync_all(user_id)
    return SyncResponse.from_result(result)
