"""
依赖边 Pydantic Schema
"""
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

ENDPOINT_TYPES = ['project', 'action']


class DependencyCreate(BaseModel):
    """
    创建依赖边 Schema

    只校验字段存在（非空字符串）与类型标签，不校验端点是否存在。
    """
    source_type: str = Field(..., description="源类型 project/action")
    source_id: str = Field(..., min_length=1, description="源实体ID")
    target_type: str = Field(..., description="目标类型 project/action")
    target_id: str = Field(..., min_length=1, description="目标实体ID")
    created_by: str = Field("system", min_length=1, max_length=100, description="创建者")
    organization_id: Optional[str] = Field(None, description="所属组织ID")

    @field_validator('source_type', 'target_type')
    @classmethod
    def validate_endpoint_type(cls, v):
        """验证端点类型"""
        if v not in ENDPOINT_TYPES:
            raise ValueError(f"端点类型必须是 {ENDPOINT_TYPES} 之一，当前值: {v}")
        return v

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class DependencyResponse(BaseModel):
    """依赖边响应 Schema"""
    id: str
    source_type: str
    source_id: str
    target_type: str
    target_id: str
    organization_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True
