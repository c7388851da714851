"""
项目（战术）模型定义
"""
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from database.models.base import BaseModel
import enum


class ProjectStatus(enum.Enum):
    """项目状态枚举"""
    NOT_YET_STARTED = "NYS"
    ON_TRACK = "OT"
    ON_HOLD = "OH"
    BEHIND = "B"
    COMPLETED = "C"


class Project(BaseModel):
    """项目主表"""
    __tablename__ = "projects"

    # 外键
    strategy_id = Column(
        String(36),
        ForeignKey("strategies.id", ondelete="CASCADE"),
        nullable=False,
        comment="所属战略ID"
    )

    # 基本信息
    title = Column(String(255), nullable=False, comment="项目名称")
    description = Column(Text, default="", comment="项目描述")
    status = Column(
        Enum(ProjectStatus, values_callable=lambda e: [m.value for m in e]),
        default=ProjectStatus.NOT_YET_STARTED,
        nullable=False,
        comment="项目状态"
    )
    progress = Column(Integer, default=0, nullable=False, comment="进度0-100（由行动汇总）")
    is_archived = Column(Boolean, default=False, nullable=False, comment="是否归档")
    start_date = Column(DateTime, comment="开始时间")
    due_date = Column(DateTime, comment="截止时间")
    organization_id = Column(String(36), comment="所属组织ID")
    created_by = Column(String(100), default="system", comment="创建者")

    # 关系定义
    strategy = relationship("Strategy", back_populates="projects")
    actions = relationship("Action", back_populates="project", cascade="all, delete-orphan")

    # 索引
    __table_args__ = (
        Index('idx_project_strategy', 'strategy_id'),
    )

    def __repr__(self):
        return f"<Project(id={self.id}, title='{self.title}', progress={self.progress})>"
