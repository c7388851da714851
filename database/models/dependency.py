"""
依赖边模型
"""
from sqlalchemy import Column, String, Index
from database.models.base import BaseModel


class Dependency(BaseModel):
    """依赖边表（源 依赖于 目标），端点不设外键，允许悬空引用"""
    __tablename__ = "dependencies"

    # 边信息
    source_type = Column(String(20), nullable=False, comment="源类型 project/action")
    source_id = Column(String(36), nullable=False, comment="源实体ID")
    target_type = Column(String(20), nullable=False, comment="目标类型 project/action")
    target_id = Column(String(36), nullable=False, comment="目标实体ID")
    organization_id = Column(String(36), comment="所属组织ID")
    created_by = Column(String(100), default="system", comment="创建者")

    # 索引
    __table_args__ = (
        Index('idx_dependency_source', 'source_type', 'source_id'),
        Index('idx_dependency_target', 'target_type', 'target_id'),
        Index('idx_dependency_org', 'organization_id'),
    )

    def __repr__(self):
        return (
            f"<Dependency(id={self.id}, source={self.source_type}:{self.source_id}, "
            f"target={self.target_type}:{self.target_id})>"
        )
