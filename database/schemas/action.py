"""
行动 Pydantic Schema
"""
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

ACTION_STATUSES = ['not_started', 'in_progress', 'at_risk', 'achieved']


def _check_action_status(v):
    if v is not None and v not in ACTION_STATUSES:
        raise ValueError(f"行动状态必须是 {ACTION_STATUSES} 之一，当前值: {v}")
    return v


class ActionBase(BaseModel):
    """行动基础 Schema"""
    title: str = Field(..., min_length=1, max_length=255, description="行动标题")
    description: str = Field("", description="行动描述")
    due_date: Optional[datetime] = Field(None, description="截止时间")
    target_value: Optional[str] = Field(None, max_length=100, description="目标值")
    current_value: Optional[str] = Field(None, max_length=100, description="当前值")
    measurement_unit: Optional[str] = Field(None, max_length=50, description="计量单位")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ActionCreate(ActionBase):
    """创建行动 Schema"""
    strategy_id: str = Field(..., min_length=1, description="所属战略ID")
    project_id: Optional[str] = Field(None, min_length=1, description="所属项目ID（可选）")
    status: str = Field("in_progress", description="行动状态")
    is_archived: bool = Field(False, description="是否归档")
    organization_id: Optional[str] = Field(None, description="所属组织ID")
    created_by: str = Field("system", min_length=1, max_length=100, description="创建者")

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        """验证行动状态"""
        return _check_action_status(v)


class ActionUpdate(BaseModel):
    """更新行动 Schema"""
    title: Optional[str] = Field(None, min_length=1, max_length=255, description="行动标题")
    description: Optional[str] = Field(None, description="行动描述")
    project_id: Optional[str] = Field(None, description="所属项目ID，传 null 表示脱离项目")
    status: Optional[str] = Field(None, description="行动状态")
    is_archived: Optional[bool] = Field(None, description="是否归档")
    due_date: Optional[datetime] = Field(None, description="截止时间")
    target_value: Optional[str] = Field(None, max_length=100, description="目标值")
    current_value: Optional[str] = Field(None, max_length=100, description="当前值")
    measurement_unit: Optional[str] = Field(None, max_length=50, description="计量单位")

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        """验证行动状态"""
        return _check_action_status(v)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ActionResponse(ActionBase):
    """行动响应 Schema"""
    id: str
    strategy_id: str
    project_id: Optional[str] = None
    status: str
    is_archived: bool
    organization_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True
