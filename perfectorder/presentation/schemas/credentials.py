"""마켓 자격증명 DTO 스키마"""
from typing import Any, Dict, List, Optional
from datetime import datetime
from pydantic import Field

from perfectorder.core.entities.credential import Credential
from perfectorder.presentation.schemas.base import CamelModel


class CredentialCreateRequest(CamelModel):
    """자격증명 등록 요청 (마켓별로 필요한 항목만 채움)"""
    marketplace: str = Field(..., description="NAVER, COUPANG, 11ST, GMARKET, AUCTION")
    alias: str = Field(..., min_length=1)
    is_active: bool = True

    # 쿠팡
    vendor_id: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    # 네이버
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    # 11번가
    api_key: Optional[str] = None
    # 지마켓/옥션 (ESM PLUS)
    username: Optional[str] = None
    password: Optional[str] = None

    def secret_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"marketplace", "alias", "is_active"}, exclude_none=True)


class CredentialActiveRequest(CamelModel):
    """활성 상태 변경 요청"""
    is_active: bool


class CredentialResponse(CamelModel):
    """자격증명 응답 (비밀 값 제외)"""
    id: str
    marketplace: str
    alias: str
    auth_mode: str
    is_active: bool
    created_at: datetime

    @classmethod
    def from_entity(cls, credential: Credential) -> "CredentialResponse":
        return cls(
            id=credential.id,
            marketplace=credential.marketplace.value,
            alias=credential.alias,
            auth_mode=credential.auth_mode.value,
            is_active=credential.is_active,
            created_at=credential.created_at,
        )


class CredentialListResponse(CamelModel):
    """자격증명 목록 응답"""
    credentials: List[CredentialResponse]
    total: int
