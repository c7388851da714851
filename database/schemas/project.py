"""
项目 Pydantic Schema
"""
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

PROJECT_STATUSES = ['NYS', 'OT', 'OH', 'B', 'C']


def _check_project_status(v):
    if v is not None and v not in PROJECT_STATUSES:
        raise ValueError(f"项目状态必须是 {PROJECT_STATUSES} 之一，当前值: {v}")
    return v


class ProjectBase(BaseModel):
    """项目基础 Schema"""
    title: str = Field(..., min_length=1, max_length=255, description="项目名称")
    description: str = Field("", description="项目描述")
    start_date: Optional[datetime] = Field(None, description="开始时间")
    due_date: Optional[datetime] = Field(None, description="截止时间")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ProjectCreate(ProjectBase):
    """创建项目 Schema"""
    strategy_id: str = Field(..., min_length=1, description="所属战略ID")
    status: str = Field("NYS", description="项目状态")
    is_archived: bool = Field(False, description="是否归档")
    organization_id: Optional[str] = Field(None, description="所属组织ID")
    created_by: str = Field("system", min_length=1, max_length=100, description="创建者")

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        """验证项目状态"""
        return _check_project_status(v)


class ProjectUpdate(BaseModel):
    """更新项目 Schema（进度由行动汇总，不可直接修改）"""
    title: Optional[str] = Field(None, min_length=1, max_length=255, description="项目名称")
    description: Optional[str] = Field(None, description="项目描述")
    strategy_id: Optional[str] = Field(None, min_length=1, description="所属战略ID")
    status: Optional[str] = Field(None, description="项目状态")
    is_archived: Optional[bool] = Field(None, description="是否归档")
    start_date: Optional[datetime] = Field(None, description="开始时间")
    due_date: Optional[datetime] = Field(None, description="截止时间")

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        """验证项目状态"""
        return _check_project_status(v)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ProjectResponse(ProjectBase):
    """项目响应 Schema"""
    id: str
    strategy_id: str
    status: str
    progress: int
    is_archived: bool
    organization_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True  # Pydantic v2 语法
        alias_generator = to_camel
        populate_by_name = True
