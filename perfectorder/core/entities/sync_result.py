"""동기화 결과 (저장하지 않는 1회성 값)"""
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from perfectorder.core.entities.credential import Credential
from perfectorder.core.exceptions import AdapterError, ErrorKind


@dataclass
class CredentialError:
    """자격증명별 동기화 실패 정보"""
    credential_id: str
    alias: str
    marketplace: str
    kind: ErrorKind
    message: str
    hint: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'credential_id': self.credential_id,
            'alias': self.alias,
            'marketplace': self.marketplace,
            'kind': self.kind.value,
            'message': self.message,
            'hint': self.hint,
        }


@dataclass
class SyncResult:
    """동기화 1회 실행 결과"""
    inserted_count: int = 0
    fetched_count: int = 0
    errors: List[CredentialError] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)  # 어댑터가 없는 마켓의 자격증명 ID

    @property
    def failure_count(self) -> int:
        return len(self.errors)

    def add_failure(self, credential: Credential, error: Exception) -> None:
        """자격증명 실패 기록"""
        if isinstance(error, AdapterError):
            kind, message, hint = error.kind, error.message, error.hint
        else:
            kind, message, hint = ErrorKind.INTERNAL, f"{type(error).__name__}: {error}", ""
        self.errors.append(CredentialError(
            credential_id=credential.id,
            alias=credential.alias,
            marketplace=credential.marketplace.value,
            kind=kind,
            message=message,
            hint=hint,
        ))

    def error_for(self, credential_id: str) -> Optional[CredentialError]:
        return next((e for e in self.errors if e.credential_id == credential_id), None)

    def is_successful(self) -> bool:
        """전체 성공 여부"""
        return self.failure_count == 0

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리 변환 (직렬화용)"""
        return {
            'inserted_count': self.inserted_count,
            'fetched_count': self.fetched_count,
            'errors': [e.to_dict() for e in self.errors],
            'skipped': list(self.skipped),
        }
