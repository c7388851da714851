"""
行动（成果）模型定义
"""
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from database.models.base import BaseModel
import enum


class ActionStatus(enum.Enum):
    """行动状态枚举"""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    AT_RISK = "at_risk"
    ACHIEVED = "achieved"


class Action(BaseModel):
    """行动表"""
    __tablename__ = "actions"

    # 外键
    strategy_id = Column(
        String(36),
        ForeignKey("strategies.id", ondelete="CASCADE"),
        nullable=False,
        comment="所属战略ID"
    )
    project_id = Column(
        String(36),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=True,
        comment="所属项目ID（可为空，直接挂在战略下）"
    )

    # 行动信息
    title = Column(String(255), nullable=False, comment="行动标题")
    description = Column(Text, default="", comment="行动描述")
    status = Column(
        Enum(ActionStatus, values_callable=lambda e: [m.value for m in e]),
        default=ActionStatus.IN_PROGRESS,
        nullable=False,
        comment="行动状态"
    )
    due_date = Column(DateTime, comment="截止时间")
    target_value = Column(String(100), comment="目标值")
    current_value = Column(String(100), comment="当前值")
    measurement_unit = Column(String(50), comment="计量单位")
    is_archived = Column(Boolean, default=False, nullable=False, comment="是否归档")
    organization_id = Column(String(36), comment="所属组织ID")
    created_by = Column(String(100), default="system", comment="创建者")

    # 关系定义
    strategy = relationship("Strategy", back_populates="actions")
    project = relationship("Project", back_populates="actions")

    # 索引
    __table_args__ = (
        Index('idx_action_strategy', 'strategy_id'),
        Index('idx_action_project', 'project_id'),
    )

    def __repr__(self):
        return f"<Action(id={self.id}, title='{self.title}', status={self.status})>"
