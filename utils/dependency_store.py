"""
依赖关系存储

项目/行动之间有向的“依赖于”边，独立于战略层级：
- 创建时只做字段校验，不检查端点是否存在、不检测环、不去重
- 删除或归档端点实体时不会删除边，读取方需容忍悬空引用
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

import networkx as nx
from sqlalchemy import select

from database.engine import Database
from database.models import Action, Activity, Dependency, Project
from database.schemas import DependencyCreate
from utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)

ENDPOINT_MODELS = {
    "project": Project,
    "action": Action,
}

UNKNOWN_LABELS = {
    "project": "Unknown Project",
    "action": "Unknown Action",
}


def _unknown_label(kind: str) -> str:
    return UNKNOWN_LABELS.get(kind, f"Unknown {kind.title()}")


def node_key(kind: str, entity_id: str) -> str:
    """图节点键，如 project-<id>"""
    return f"{kind}-{entity_id}"


class DependencyStore:
    """依赖边的增删查"""

    def __init__(self, database: Database):
        self.database = database

    # ==================== 写操作 ====================

    def create_dependency(
        self,
        source_type: str,
        source_id: str,
        target_type: str,
        target_id: str,
        created_by: str = "system",
        organization_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        创建依赖边

        Raises:
            pydantic.ValidationError: 字段为空或类型标签非法
        """
        data = DependencyCreate(
            source_type=source_type,
            source_id=source_id,
            target_type=target_type,
            target_id=target_id,
            created_by=created_by,
            organization_id=organization_id,
        )

        with self.database.session() as session:
            edge = Dependency(**data.model_dump())
            session.add(edge)
            session.add(Activity(
                type="dependency_created",
                description=f"Linked {data.source_type} {data.source_id} to {data.target_type} {data.target_id}",
                user_id=data.created_by,
                organization_id=data.organization_id,
            ))
            session.flush()
            logger.info("创建依赖边 %s: %s -> %s", edge.id,
                        node_key(edge.source_type, edge.source_id),
                        node_key(edge.target_type, edge.target_id))
            return edge.to_dict()

    def delete_dependency(self, dependency_id: str, deleted_by: str = "system") -> None:
        """
        硬删除依赖边（端点是否存在不影响删除）

        Raises:
            NotFoundError: 边不存在
        """
        with self.database.session() as session:
            edge = session.get(Dependency, dependency_id)
            if edge is None:
                raise NotFoundError("Dependency", dependency_id)
            session.delete(edge)
            session.add(Activity(
                type="dependency_deleted",
                description=f"Removed dependency {dependency_id}",
                user_id=deleted_by,
                organization_id=edge.organization_id,
            ))
        logger.info("删除依赖边 %s", dependency_id)

    # ==================== 查询 ====================

    def get_dependency(self, dependency_id: str) -> Dict[str, Any]:
        with self.database.session() as session:
            edge = session.get(Dependency, dependency_id)
            if edge is None:
                raise NotFoundError("Dependency", dependency_id)
            return edge.to_dict()

    def list_dependencies(self, organization_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """全部依赖边（可按组织过滤）"""
        stmt = select(Dependency).order_by(Dependency.created_at)
        if organization_id is not None:
            stmt = stmt.where(Dependency.organization_id == organization_id)
        with self.database.session() as session:
            return [edge.to_dict() for edge in session.execute(stmt).scalars()]

    def list_dependencies_by_source(self, source_type: str, source_id: str) -> List[Dict[str, Any]]:
        """某实体“依赖于”哪些实体"""
        stmt = (
            select(Dependency)
            .where(Dependency.source_type == source_type, Dependency.source_id == source_id)
            .order_by(Dependency.created_at)
        )
        with self.database.session() as session:
            return [edge.to_dict() for edge in session.execute(stmt).scalars()]

    def list_dependencies_by_target(self, target_type: str, target_id: str) -> List[Dict[str, Any]]:
        """哪些实体依赖于某实体（反向，“阻塞”标签）"""
        stmt = (
            select(Dependency)
            .where(Dependency.target_type == target_type, Dependency.target_id == target_id)
            .order_by(Dependency.created_at)
        )
        with self.database.session() as session:
            return [edge.to_dict() for edge in session.execute(stmt).scalars()]

    # ==================== 端点解析 ====================

    def _lookup_title(self, kind: str, entity_id: str) -> Optional[str]:
        """端点实体的标题；实体不存在时返回 None"""
        model = ENDPOINT_MODELS.get(kind)
        if model is None:
            return None
        with self.database.session() as session:
            entity = session.get(model, entity_id)
            return entity.title if entity is not None else None

    def resolve_endpoint_title(self, kind: str, entity_id: str) -> str:
        """端点标题；实体不存在时返回 Unknown Project / Unknown Action"""
        title = self._lookup_title(kind, entity_id)
        return title if title is not None else _unknown_label(kind)

    def describe_dependency(self, edge: Dict[str, Any]) -> Dict[str, Any]:
        """在边字典上附加源/目标标题，悬空端点标记为未解析"""
        source_title = self._lookup_title(edge["source_type"], edge["source_id"])
        target_title = self._lookup_title(edge["target_type"], edge["target_id"])
        return {
            **edge,
            "source_title": source_title if source_title is not None else _unknown_label(edge["source_type"]),
            "target_title": target_title if target_title is not None else _unknown_label(edge["target_type"]),
            "source_resolved": source_title is not None,
            "target_resolved": target_title is not None,
        }

    # ==================== 维护 ====================

    def find_dangling_dependencies(self) -> List[Dict[str, Any]]:
        """端点已不存在的依赖边"""
        with self.database.session() as session:
            existing = {
                "project": set(session.execute(select(Project.id)).scalars()),
                "action": set(session.execute(select(Action.id)).scalars()),
            }
            edges = session.execute(select(Dependency)).scalars().all()
            return [
                edge.to_dict() for edge in edges
                if edge.source_id not in existing.get(edge.source_type, set())
                or edge.target_id not in existing.get(edge.target_type, set())
            ]

    def prune_dangling_dependencies(self) -> int:
        """删除悬空依赖边，返回删除数量（不会被自动调用）"""
        dangling_ids = [edge["id"] for edge in self.find_dangling_dependencies()]
        if not dangling_ids:
            return 0
        with self.database.session() as session:
            for edge in session.execute(select(Dependency).where(Dependency.id.in_(dangling_ids))).scalars():
                session.delete(edge)
        logger.info("清理悬空依赖边 %d 条", len(dangling_ids))
        return len(dangling_ids)


def build_dependency_graph(edges: Iterable[Dict[str, Any]]) -> nx.DiGraph:
    """
    依赖边构建有向图，节点键为 <type>-<id>

    同一对端点的重复边合并为一条，边属性 ids 记录全部边ID。
    """
    graph = nx.DiGraph()
    for edge in edges:
        source = node_key(edge["source_type"], edge["source_id"])
        target = node_key(edge["target_type"], edge["target_id"])
        if graph.has_edge(source, target):
            graph[source][target]["ids"].append(edge["id"])
        else:
            graph.add_edge(source, target, ids=[edge["id"]])
    return graph
