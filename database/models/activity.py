"""
活动记录模型
"""
from sqlalchemy import Column, String, Text, Index
from database.models.base import BaseModel


class Activity(BaseModel):
    """活动流水表（只追加，不设外键以保留已删除实体的记录）"""
    __tablename__ = "activities"

    type = Column(String(50), nullable=False, comment="活动类型，如 strategy_created")
    description = Column(Text, nullable=False, comment="活动描述")
    user_id = Column(String(100), nullable=False, default="system", comment="操作者")
    strategy_id = Column(String(36), comment="相关战略ID")
    project_id = Column(String(36), comment="相关项目ID")
    organization_id = Column(String(36), comment="所属组织ID")

    __table_args__ = (
        Index('idx_activity_user', 'user_id'),
        Index('idx_activity_org', 'organization_id'),
    )

    def __repr__(self):
        return f"<Activity(id={self.id}, type='{self.type}')>"
