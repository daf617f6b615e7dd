"""헬스체크 라우트"""
from fastapi import APIRouter
from datetime import datetime, timezone

from perfectorder.shared.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health")
async def health_check():
    """서비스 헬스체크"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "perfectorder-api",
        "version": "2.0.0"
    }
