"""외부 호출 IP 확인 라우트 (마켓 IP 허용 목록 등록용)"""
from fastapi import APIRouter, Depends
import httpx

from perfectorder.app.di import get_app_settings, get_http_client
from perfectorder.adapters.markets.http import probe_egress_ip
from perfectorder.shared.config import Settings

router = APIRouter()


@router.get("/ip")
async def egress_ip(
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_app_settings)
):
    """현재 서버의 외부 IP"""
    ip = await probe_egress_ip(client)
    return {
        "ip": ip,
        "via_proxy": settings.fixed_ip_proxy_url is not None,
    }
