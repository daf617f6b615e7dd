"""마켓 API 공통 HTTP 처리 (고정 IP 프록시, 타임아웃, 오류 분류)"""
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from perfectorder.core.exceptions import (
    AccessDenied, AuthFailure, MappingError, VendorRejected, VendorUnavailable
)
from perfectorder.shared.config import Settings
from perfectorder.shared.logging import get_logger, log_api_request, mask_url_password

logger = get_logger(__name__)

USER_AGENT = "PerfectOrder/2.0"
EGRESS_IP_URL = "https://api.ipify.org?format=json"


@dataclass(frozen=True)
class EgressConfig:
    """외부 호출 설정. proxy_url이 없으면 직접 연결"""
    proxy_url: Optional[str] = None
    timeout: float = 15.0
    connect_timeout: float = 5.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "EgressConfig":
        return cls(
            proxy_url=settings.fixed_ip_proxy_url,
            timeout=settings.request_timeout,
            connect_timeout=settings.connect_timeout,
        )


def build_http_client(config: EgressConfig, **kwargs) -> httpx.AsyncClient:
    """모든 마켓 호출이 공유하는 AsyncClient 생성"""
    if config.proxy_url:
        logger.info(f"[Proxy] 고정 IP 프록시 사용: {mask_url_password(config.proxy_url)}")
    return httpx.AsyncClient(
        proxy=config.proxy_url,
        timeout=httpx.Timeout(config.timeout, connect=config.connect_timeout),
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        **kwargs
    )


async def send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    vendor: str,
    **kwargs
) -> httpx.Response:
    """요청 전송. 네트워크 오류와 타임아웃은 VendorUnavailable로 변환"""
    started = time.monotonic()
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        raise VendorUnavailable(f"{vendor} API 응답 시간 초과: {type(e).__name__}") from e
    except httpx.HTTPError as e:
        raise VendorUnavailable(f"{vendor} API 연결 실패: {e}") from e

    log_api_request(logger, method, response.request.url.path, response.status_code, time.monotonic() - started)
    return response


def raise_for_vendor_status(response: httpx.Response, vendor: str, access_denied_hint: Optional[str] = None) -> None:
    """마켓 응답 상태 코드를 오류 분류로 변환 (2xx는 통과)"""
    code = response.status_code
    if 200 <= code < 300:
        return

    detail = _error_detail(response)
    message = f"{vendor} API 오류 ({code}): {detail}" if detail else f"{vendor} API 오류 ({code})"
    logger.error(message)

    if code == 401:
        raise AuthFailure(message, status_code=code)
    if code == 403:
        raise AccessDenied(message, hint=access_denied_hint, status_code=code)
    if code == 429 or code >= 500:
        raise VendorUnavailable(message, status_code=code)
    raise VendorRejected(message, status_code=code)


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error_description") or data.get("error") or data.get("code") or "")[:200]
    return ""


def parse_json(response: httpx.Response, vendor: str) -> Dict[str, Any]:
    """JSON 객체 응답 파싱"""
    try:
        data = response.json()
    except ValueError as e:
        raise MappingError(f"{vendor} API 응답이 JSON이 아닙니다") from e
    if not isinstance(data, dict):
        raise MappingError(f"{vendor} API 응답 형식 오류: {type(data).__name__}")
    return data


async def probe_egress_ip(client: httpx.AsyncClient) -> Optional[str]:
    """현재 외부로 나가는 IP 확인 (IP 허용 목록 진단용). 실패하면 None"""
    try:
        response = await client.get(EGRESS_IP_URL)
        response.raise_for_status()
        return response.json().get("ip")
    except (httpx.HTTPError, ValueError, AttributeError) as e:
        logger.warning(f"[IP Check] 실패: {e}")
        return None
