"""
战略模型定义
"""
from sqlalchemy import Column, String, Text, Integer, DateTime, Enum, Index
from sqlalchemy.orm import relationship
from database.models.base import BaseModel
import enum


class StrategyStatus(enum.Enum):
    """战略状态枚举"""
    ACTIVE = "Active"
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    ON_TRACK = "OnTrack"
    BEHIND = "Behind"
    COMPLETED = "Completed"
    ARCHIVED = "Archived"

    @property
    def is_active(self) -> bool:
        """是否处于工作中（可完成）状态"""
        return self not in (StrategyStatus.COMPLETED, StrategyStatus.ARCHIVED)


class Strategy(BaseModel):
    """战略主表"""
    __tablename__ = "strategies"

    # 基本信息
    title = Column(String(255), nullable=False, comment="战略标题")
    description = Column(Text, default="", comment="战略描述")
    goal = Column(Text, comment="战略目标陈述")
    color_code = Column(String(16), default="#3B82F6", nullable=False, comment="分组颜色")
    status = Column(
        Enum(StrategyStatus, values_callable=lambda e: [m.value for m in e]),
        default=StrategyStatus.ACTIVE,
        nullable=False,
        comment="战略状态"
    )
    progress = Column(Integer, default=0, nullable=False, comment="进度0-100（自动汇总）")
    display_order = Column(Integer, default=0, nullable=False, comment="排序")
    completion_date = Column(DateTime, comment="完成时间")
    organization_id = Column(String(36), comment="所属组织ID")
    created_by = Column(String(100), default="system", comment="创建者")

    # 一对多关系
    projects = relationship("Project", back_populates="strategy", cascade="all, delete-orphan")
    actions = relationship("Action", back_populates="strategy", cascade="all, delete-orphan")

    # 索引
    __table_args__ = (
        Index('idx_strategy_org', 'organization_id'),
        Index('idx_strategy_order', 'display_order'),
    )

    def __repr__(self):
        return f"<Strategy(id={self.id}, title='{self.title}', progress={self.progress})>"
