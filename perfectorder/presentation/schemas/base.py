"""공통 DTO 베이스"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase로 주고받는 모델 (snake_case 입력도 허용)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
