"""동기화 관련 DTO 스키마"""
from typing import List
from pydantic import Field

from perfectorder.core.entities.sync_result import SyncResult
from perfectorder.presentation.schemas.base import CamelModel


class SyncErrorResponse(CamelModel):
    """자격증명별 동기화 실패"""
    credential_id: str
    alias: str
    marketplace: str
    kind: str
    message: str
    hint: str = ""


class SyncResponse(CamelModel):
    """동기화 결과 응답"""
    inserted_count: int = 0
    fetched_count: int = 0
    errors: List[SyncErrorResponse] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: SyncResult) -> "SyncResponse":
        return cls.model_validate(result.to_dict())
