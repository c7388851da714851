"""
活动流水 Pydantic Schema（只读）
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime


class ActivityResponse(BaseModel):
    """活动响应 Schema"""
    id: str
    type: str
    description: str
    user_id: str
    strategy_id: Optional[str] = None
    project_id: Optional[str] = None
    organization_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True
