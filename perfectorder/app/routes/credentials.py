"""마켓 자격증명 라우트"""
from fastapi import APIRouter, Depends, status

from perfectorder.app.di import get_credential_service
from perfectorder.services.credential_service import CredentialService
from perfectorder.presentation.schemas.credentials import (
    CredentialCreateRequest,
    CredentialActiveRequest,
    CredentialResponse,
    CredentialListResponse
)
from perfectorder.core.exceptions import create_http_exception
from perfectorder.shared.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("", response_model=CredentialListResponse)
async def list_credentials(
    user_id: str,
    credential_service: CredentialService = Depends(get_credential_service)
):
    """자격증명 목록 (비밀 값 제외)"""
    result = await credential_service.list_credentials(user_id)
    if result.is_failure():
        raise create_http_exception(result.cause or result.get_error())

    credentials = result.get_value()
    return CredentialListResponse(
        credentials=[CredentialResponse.from_entity(c) for c in credentials],
        total=len(credentials)
    )


@router.post("", response_model=CredentialResponse, status_code=status.HTTP_201_CREATED)
async def create_credential(
    user_id: str,
    request: CredentialCreateRequest,
    credential_service: CredentialService = Depends(get_credential_service)
):
    """자격증명 등록"""
    result = await credential_service.register(
        user_id=user_id,
        marketplace=request.marketplace,
        alias=request.alias,
        fields=request.secret_fields(),
        is_active=request.is_active
    )
    if result.is_failure():
        raise create_http_exception(result.cause or result.get_error())
    return CredentialResponse.from_entity(result.get_value())


@router.patch("/{credential_id}/active", response_model=CredentialResponse)
async def set_credential_active(
    user_id: str,
    credential_id: str,
    request: CredentialActiveRequest,
    credential_service: CredentialService = Depends(get_credential_service)
):
    """활성/비활성 전환"""
    result = await credential_service.set_active(user_id, credential_id, request.is_active)
    if result.is_failure():
        raise create_http_exception(result.cause or result.get_error())
    return CredentialResponse.from_entity(result.get_value())


@router.delete("/{credential_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_credential(
    user_id: str,
    credential_id: str,
    credential_service: CredentialService = Depends(get_credential_service)
):
    """자격증명 삭제"""
    result = await credential_service.remove(user_id, credential_id)
    if result.is_failure():
        raise create_http_exception(result.cause or result.get_error())
