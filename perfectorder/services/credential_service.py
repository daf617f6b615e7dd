"""마켓 자격증명 서비스 (헥사고날 아키텍처)"""
from typing import List, Dict, Any, Optional
import uuid

from perfectorder.core.ports.repo_port import CredentialRepositoryPort
from perfectorder.core.entities.credential import Credential, Marketplace, secrets_from_fields
from perfectorder.core.exceptions import (
    CredentialConflict, CredentialNotFound, InvalidCredential, PerfectOrderError
)
from perfectorder.shared.result import Result, success, failure
from perfectorder.shared.logging import get_logger, mask_secret

logger = get_logger(__name__)


class CredentialService:
    """자격증명 서비스 파사드"""

    def __init__(self, repository: CredentialRepositoryPort):
        self.repository = repository

    async def register(
        self,
        user_id: str,
        marketplace: str,
        alias: str,
        fields: Dict[str, Any],
        is_active: bool = True
    ) -> Result[Credential]:
        """자격증명 등록 (입력 값 정제 후 중복 검사)"""
        try:
            try:
                market = Marketplace(str(marketplace).strip().upper())
            except ValueError:
                raise InvalidCredential(f"지원하지 않는 마켓입니다: {marketplace}")

            alias = (alias or "").strip()
            if not alias:
                raise InvalidCredential("계정 별칭을 입력해주세요")

            secrets = secrets_from_fields(market, fields)
            missing = secrets.missing_fields()
            if missing:
                raise InvalidCredential(f"필수 항목이 비어 있습니다: {', '.join(missing)}")
            invalid = secrets.non_ascii_fields()
            if invalid:
                raise InvalidCredential(f"ASCII 이외 문자가 포함되어 있습니다: {', '.join(invalid)}")

            credential = Credential(
                id=uuid.uuid4().hex,
                user_id=user_id,
                marketplace=market,
                alias=alias,
                secrets=secrets,
                is_active=is_active,
            )

            existing = await self.repository.list_by_user(user_id, market)
            if any(c.alias == alias for c in existing):
                raise CredentialConflict(f"이미 사용 중인 별칭입니다: {alias}")
            if is_active:
                self._check_identity(credential, existing)

            await self.repository.add(credential)
            first = fields.get("access_key") or fields.get("client_id") or fields.get("api_key") or ""
            logger.info(f"자격증명 등록: {credential.label()} ({mask_secret(str(first))})")
            return success(credential)

        except PerfectOrderError as e:
            logger.warning(f"자격증명 등록 거절: {e}")
            return failure(e)
        except Exception as e:
            logger.error(f"자격증명 등록 실패: {e}")
            return failure(e)

    async def list_credentials(
        self,
        user_id: str,
        marketplace: Optional[Marketplace] = None
    ) -> Result[List[Credential]]:
        """자격증명 목록"""
        try:
            return success(await self.repository.list_by_user(user_id, marketplace))
        except Exception as e:
            logger.error(f"자격증명 목록 조회 실패: {e}")
            return failure(e)

    async def set_active(self, user_id: str, credential_id: str, is_active: bool) -> Result[Credential]:
        """활성/비활성 전환. 같은 키가 이미 활성이면 활성화 불가"""
        try:
            credential = await self.repository.get(user_id, credential_id)
            if credential is None:
                raise CredentialNotFound(f"자격증명을 찾을 수 없습니다: {credential_id}")

            if is_active and not credential.is_active:
                others = await self.repository.list_by_user(user_id, credential.marketplace)
                self._check_identity(credential, others)

            await self.repository.set_active(user_id, credential_id, is_active)
            credential.is_active = is_active
            logger.info(f"자격증명 {'활성화' if is_active else '비활성화'}: {credential.label()}")
            return success(credential)

        except PerfectOrderError as e:
            return failure(e)
        except Exception as e:
            logger.error(f"자격증명 상태 변경 실패: {e}")
            return failure(e)

    async def remove(self, user_id: str, credential_id: str) -> Result[bool]:
        """자격증명 삭제"""
        try:
            deleted = await self.repository.delete(user_id, credential_id)
            if not deleted:
                raise CredentialNotFound(f"자격증명을 찾을 수 없습니다: {credential_id}")
            logger.info(f"자격증명 삭제: {credential_id}")
            return success(True)

        except PerfectOrderError as e:
            return failure(e)
        except Exception as e:
            logger.error(f"자격증명 삭제 실패: {e}")
            return failure(e)

    @staticmethod
    def _check_identity(credential: Credential, existing: List[Credential]) -> None:
        identity = credential.secrets.identity()
        for other in existing:
            if other.id != credential.id and other.is_active and other.secrets.identity() == identity:
                raise CredentialConflict(
                    f"같은 키로 활성화된 계정이 이미 있습니다: {other.alias}"
                )
