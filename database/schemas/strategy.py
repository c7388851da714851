"""
战略 Pydantic Schema
"""
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

STRATEGY_STATUSES = ['Active', 'NotStarted', 'InProgress', 'OnTrack', 'Behind', 'Completed', 'Archived']
ACTIVE_STRATEGY_STATUSES = ['Active', 'NotStarted', 'InProgress', 'OnTrack', 'Behind']
COLOR_CODE_PATTERN = r'^#[0-9A-Fa-f]{6}$'


class StrategyBase(BaseModel):
    """战略基础 Schema"""
    title: str = Field(..., min_length=1, max_length=255, description="战略标题")
    description: str = Field("", description="战略描述")
    goal: Optional[str] = Field(None, description="战略目标陈述")
    color_code: str = Field("#3B82F6", pattern=COLOR_CODE_PATTERN, description="分组颜色")
    display_order: int = Field(0, ge=0, description="排序")
    organization_id: Optional[str] = Field(None, description="所属组织ID")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class StrategyCreate(StrategyBase):
    """创建战略 Schema"""
    status: str = Field("Active", description="初始状态（仅限工作中状态）")
    created_by: str = Field("system", min_length=1, max_length=100, description="创建者")

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        """新建战略只能处于工作中状态"""
        if v not in ACTIVE_STRATEGY_STATUSES:
            raise ValueError(f"状态必须是 {ACTIVE_STRATEGY_STATUSES} 之一，当前值: {v}")
        return v


class StrategyUpdate(BaseModel):
    """更新战略 Schema（进度由系统汇总，不可直接修改）"""
    title: Optional[str] = Field(None, min_length=1, max_length=255, description="战略标题")
    description: Optional[str] = Field(None, description="战略描述")
    goal: Optional[str] = Field(None, description="战略目标陈述")
    color_code: Optional[str] = Field(None, pattern=COLOR_CODE_PATTERN, description="分组颜色")
    display_order: Optional[int] = Field(None, ge=0, description="排序")
    status: Optional[str] = Field(None, description="状态（经状态机校验）")

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in STRATEGY_STATUSES:
            raise ValueError(f"状态必须是 {STRATEGY_STATUSES} 之一，当前值: {v}")
        return v

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class StrategyOrderItem(BaseModel):
    """批量排序条目"""
    id: str = Field(..., min_length=1, description="战略ID")
    display_order: int = Field(..., ge=0, description="新的排序值")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class StrategyResponse(StrategyBase):
    """战略响应 Schema"""
    id: str
    status: str
    progress: int
    completion_date: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True
