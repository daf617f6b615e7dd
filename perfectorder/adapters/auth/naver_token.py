"""네이버 커머스 API 토큰 발급 (OAuth2 client_credentials)

동기화할 때마다 새 토큰을 발급받는다. 실행 간 토큰 캐시는 두지 않는다.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import httpx

from perfectorder.adapters.markets.http import parse_json, raise_for_vendor_status, send
from perfectorder.core.entities.credential import NaverKeys
from perfectorder.core.exceptions import AuthFailure, MissingCredential, VendorRejected
from perfectorder.shared.logging import get_logger

logger = get_logger(__name__)

TOKEN_PATH = "/v1/oauth2/token"


@dataclass
class TokenInfo:
    """토큰 정보"""
    access_token: str
    token_type: str = "Bearer"
    expires_at: Optional[datetime] = None

    @property
    def authorization(self) -> str:
        return f"{self.token_type} {self.access_token}"


class NaverTokenProvider:
    """client_id / client_secret으로 액세스 토큰 발급"""

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        self.client = client
        self.base_url = base_url.rstrip('/')

    @property
    def token_url(self) -> str:
        return f"{self.base_url}{TOKEN_PATH}"

    async def issue_token(self, keys: NaverKeys, now: Optional[datetime] = None) -> TokenInfo:
        """토큰 발급. 실패하면 AuthFailure / AccessDenied / VendorUnavailable"""
        keys = keys.sanitized()
        missing = keys.missing_fields()
        if missing:
            raise MissingCredential(f"네이버 인증 정보 누락: {', '.join(missing)}")

        response = await send(
            self.client,
            "POST",
            self.token_url,
            vendor="네이버",
            data={
                "client_id": keys.client_id,
                "client_secret": keys.client_secret,
                "grant_type": "client_credentials",
                "type": "SELF",
            },
        )

        try:
            raise_for_vendor_status(response, "네이버 토큰")
        except VendorRejected as e:
            # 잘못된 client_id/secret은 400으로 내려온다. 403(IP 미등록)은 AccessDenied 그대로
            raise AuthFailure(e.message, status_code=e.status_code) from e

        data = parse_json(response, "네이버 토큰")
        access_token = data.get("access_token")
        if not access_token:
            raise AuthFailure("네이버 토큰 응답에 access_token이 없습니다")

        expires_at = None
        if now is not None and data.get("expires_in"):
            expires_at = now + timedelta(seconds=int(data["expires_in"]))

        logger.info("네이버 액세스 토큰 발급 완료")
        return TokenInfo(
            access_token=access_token,
            token_type=data.get("token_type") or "Bearer",
            expires_at=expires_at,
        )
