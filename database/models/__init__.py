"""
数据库模型包初始化
"""
from database.models.base import Base, BaseModel, TimestampMixin

# 战略层级
from database.models.strategy import Strategy, StrategyStatus
from database.models.project import Project, ProjectStatus
from database.models.action import Action, ActionStatus

# 依赖关系与活动流水
from database.models.dependency import Dependency
from database.models.activity import Activity

__all__ = [
    # 基础类
    "Base",
    "BaseModel",
    "TimestampMixin",

    # 战略层级
    "Strategy",
    "StrategyStatus",
    "Project",
    "ProjectStatus",
    "Action",
    "ActionStatus",

    # 依赖与活动
    "Dependency",
    "Activity",
]
