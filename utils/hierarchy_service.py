"""
战略层级服务 - Strategy / Project / Action 的增删改查

- 每次项目/行动变更提交后，调用 ProgressAggregator 依次重算项目与战略进度
- 战略生命周期: 工作中(Active 等) → Completed → Archived，Archived 为终态
- 归档战略时在同一事务内级联归档其全部项目与行动，重复归档是幂等的
"""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel as SchemaModel
from sqlalchemy import select

from database.engine import Database
from database.models import (
    Action, ActionStatus, Activity, Project, ProjectStatus, Strategy, StrategyStatus
)
from database.schemas import (
    ActionCreate, ActionUpdate, ProjectCreate, ProjectUpdate,
    StrategyCreate, StrategyOrderItem, StrategyUpdate
)
from utils.exceptions import InvalidTransitionError, NotFoundError
from utils.progress_aggregator import ProgressAggregator

logger = logging.getLogger(__name__)

Payload = Union[Dict[str, Any], SchemaModel]

# 更新时允许显式置空的字段
NULLABLE_FIELDS = {
    Strategy: {"goal"},
    Project: {"start_date", "due_date"},
    Action: {"project_id", "due_date", "target_value", "current_value", "measurement_unit"},
}


def _parse(schema, data: Payload):
    """字典或 Schema 实例统一为 Schema 实例（边界校验）"""
    if isinstance(data, schema):
        return data
    return schema.model_validate(data)


def _updates(schema, data: Payload, model) -> Dict[str, Any]:
    """取出显式提交的字段，丢弃不可为空字段上的 null"""
    updates = _parse(schema, data).model_dump(exclude_unset=True)
    nullable = NULLABLE_FIELDS.get(model, set())
    return {key: value for key, value in updates.items() if value is not None or key in nullable}


class HierarchyService:
    """战略 → 项目 → 行动 层级服务"""

    def __init__(self, database: Database, aggregator: Optional[ProgressAggregator] = None):
        self.database = database
        self.aggregator = aggregator or ProgressAggregator(database)

    # ==================== 战略 ====================

    def create_strategy(self, data: Payload) -> Dict[str, Any]:
        """创建战略"""
        payload = _parse(StrategyCreate, data)
        values = payload.model_dump()
        values["status"] = StrategyStatus(values["status"])

        with self.database.session() as session:
            strategy = Strategy(progress=0, **values)
            session.add(strategy)
            session.flush()
            session.add(Activity(
                type="strategy_created",
                description=f'Created strategy "{strategy.title}"',
                user_id=strategy.created_by,
                strategy_id=strategy.id,
                organization_id=strategy.organization_id,
            ))
            logger.info("创建战略 %s (%s)", strategy.id, strategy.title)
            return strategy.to_dict()

    def get_strategy(self, strategy_id: str) -> Dict[str, Any]:
        with self.database.session() as session:
            return self._load(session, Strategy, strategy_id).to_dict()

    def list_strategies(self, organization_id: Optional[str] = None,
                        include_archived: bool = True) -> List[Dict[str, Any]]:
        """按 display_order 升序列出战略"""
        stmt = select(Strategy).order_by(Strategy.display_order, Strategy.created_at)
        if organization_id is not None:
            stmt = stmt.where(Strategy.organization_id == organization_id)
        if not include_archived:
            stmt = stmt.where(Strategy.status != StrategyStatus.ARCHIVED)
        with self.database.session() as session:
            return [s.to_dict() for s in session.execute(stmt).scalars()]

    def update_strategy(self, strategy_id: str, data: Payload, user_id: str = "system") -> Dict[str, Any]:
        """更新战略字段；状态变更经过状态机"""
        updates = _updates(StrategyUpdate, data, Strategy)
        status = updates.pop("status", None)

        with self.database.session() as session:
            strategy = self._load(session, Strategy, strategy_id)
            strategy.update_from_dict(updates)
            if status is not None:
                self._transition(session, strategy, StrategyStatus(status), user_id)
            session.flush()
            result = strategy.to_dict()
        logger.info("更新战略 %s: %s", strategy_id, sorted(updates) + (["status"] if status else []))

        if status == StrategyStatus.ARCHIVED.value:
            # 级联归档后已无未归档项目，进度归零
            self.aggregator.recalculate_after_project_change([], [strategy_id])
            return self.get_strategy(strategy_id)
        return result

    def complete_strategy(self, strategy_id: str, user_id: str = "system") -> Dict[str, Any]:
        """工作中 → Completed"""
        return self.update_strategy(strategy_id, {"status": StrategyStatus.COMPLETED.value}, user_id)

    def archive_strategy(self, strategy_id: str, user_id: str = "system") -> Dict[str, Any]:
        """
        Completed → Archived，并级联归档全部项目与行动

        对已归档战略重复调用会重新执行级联，结果不变，不报错。

        Raises:
            InvalidTransitionError: 战略尚未完成
        """
        return self.update_strategy(strategy_id, {"status": StrategyStatus.ARCHIVED.value}, user_id)

    def delete_strategy(self, strategy_id: str, user_id: str = "system") -> None:
        """删除战略及其项目、行动（依赖边保留）"""
        with self.database.session() as session:
            strategy = self._load(session, Strategy, strategy_id)
            project_count = len(strategy.projects)
            action_count = len(strategy.actions)
            organization_id = strategy.organization_id
            session.delete(strategy)
            session.add(Activity(
                type="strategy_deleted",
                description=f"Deleted strategy and {project_count} projects, {action_count} actions",
                user_id=user_id,
                organization_id=organization_id,
            ))
        logger.info("删除战略 %s（%d 个项目, %d 个行动）", strategy_id, project_count, action_count)

    def reorder_strategies(self, items: Iterable[Union[Payload, tuple]]) -> List[Dict[str, Any]]:
        """
        批量调整排序，逐条提交（非原子：中途失败时之前的条目已生效）

        Args:
            items: [{"id": ..., "displayOrder": ...}] 或 [(id, display_order)]

        Raises:
            NotFoundError: 某个战略不存在
        """
        parsed = []
        for item in items:
            if isinstance(item, tuple):
                item = {"id": item[0], "display_order": item[1]}
            parsed.append(_parse(StrategyOrderItem, item))

        for item in parsed:
            with self.database.session() as session:
                strategy = self._load(session, Strategy, item.id)
                strategy.display_order = item.display_order

        logger.info("调整战略排序 %d 条", len(parsed))
        return self.list_strategies()

    def _transition(self, session, strategy: Strategy, target: StrategyStatus, user_id: str) -> None:
        """战略状态机"""
        current = strategy.status

        if current == StrategyStatus.ARCHIVED:
            if target != StrategyStatus.ARCHIVED:
                raise InvalidTransitionError(current.value, target.value)
            # 重复归档：重新级联，保证中途失败后可重试
            self._cascade_archive(strategy)
            return

        if target == current:
            return

        if target == StrategyStatus.ARCHIVED:
            if current != StrategyStatus.COMPLETED:
                raise InvalidTransitionError(current.value, target.value)
            strategy.status = StrategyStatus.ARCHIVED
            self._cascade_archive(strategy)
            activity_type = "strategy_archived"
        elif target == StrategyStatus.COMPLETED:
            strategy.status = StrategyStatus.COMPLETED
            strategy.completion_date = datetime.utcnow()
            activity_type = "strategy_completed"
        else:
            # 工作中状态之间切换，或从 Completed 重新打开
            strategy.status = target
            strategy.completion_date = None
            activity_type = "strategy_updated"

        session.add(Activity(
            type=activity_type,
            description=f'Strategy "{strategy.title}" moved from {current.value} to {target.value}',
            user_id=user_id,
            strategy_id=strategy.id,
            organization_id=strategy.organization_id,
        ))

    @staticmethod
    def _cascade_archive(strategy: Strategy) -> None:
        for project in strategy.projects:
            project.is_archived = True
        for action in strategy.actions:
            action.is_archived = True
        logger.info("战略 %s 归档级联: %d 个项目, %d 个行动",
                    strategy.id, len(strategy.projects), len(strategy.actions))

    # ==================== 项目 ====================

    def create_project(self, data: Payload) -> Dict[str, Any]:
        """创建项目，返回已重算进度的项目"""
        payload = _parse(ProjectCreate, data)
        values = payload.model_dump()
        values["status"] = ProjectStatus(values["status"])

        with self.database.session() as session:
            strategy = self._load(session, Strategy, payload.strategy_id)
            if values["organization_id"] is None:
                values["organization_id"] = strategy.organization_id
            project = Project(progress=0, **values)
            session.add(project)
            session.flush()
            session.add(Activity(
                type="project_created",
                description=f'Created project "{project.title}"',
                user_id=project.created_by,
                strategy_id=project.strategy_id,
                project_id=project.id,
                organization_id=project.organization_id,
            ))
            project_id = project.id
        logger.info("创建项目 %s (%s)", project_id, payload.title)

        self.aggregator.recalculate_after_project_change([project_id], [payload.strategy_id])
        return self.get_project(project_id)

    def get_project(self, project_id: str) -> Dict[str, Any]:
        with self.database.session() as session:
            return self._load(session, Project, project_id).to_dict()

    def list_projects(self, strategy_id: Optional[str] = None,
                      include_archived: bool = True) -> List[Dict[str, Any]]:
        stmt = select(Project).order_by(Project.created_at)
        if strategy_id is not None:
            stmt = stmt.where(Project.strategy_id == strategy_id)
        if not include_archived:
            stmt = stmt.where(Project.is_archived.is_(False))
        with self.database.session() as session:
            return [p.to_dict() for p in session.execute(stmt).scalars()]

    def update_project(self, project_id: str, data: Payload) -> Dict[str, Any]:
        """更新项目；转移到其他战略时两个战略都会重算"""
        updates = _updates(ProjectUpdate, data, Project)
        if "status" in updates:
            updates["status"] = ProjectStatus(updates["status"])

        with self.database.session() as session:
            project = self._load(session, Project, project_id)
            old_strategy_id = project.strategy_id
            new_strategy_id = updates.get("strategy_id") or old_strategy_id
            if new_strategy_id != old_strategy_id:
                self._load(session, Strategy, new_strategy_id)
                # 项目下的行动随项目迁移
                for action in project.actions:
                    action.strategy_id = new_strategy_id
            project.update_from_dict(updates)
        logger.info("更新项目 %s: %s", project_id, sorted(updates))

        self.aggregator.recalculate_after_project_change([project_id], [old_strategy_id, new_strategy_id])
        return self.get_project(project_id)

    def delete_project(self, project_id: str, user_id: str = "system") -> None:
        """删除项目及其行动，然后重算所属战略"""
        with self.database.session() as session:
            project = self._load(session, Project, project_id)
            strategy_id = project.strategy_id
            session.add(Activity(
                type="project_deleted",
                description=f'Deleted project "{project.title}" and {len(project.actions)} actions',
                user_id=user_id,
                strategy_id=strategy_id,
                organization_id=project.organization_id,
            ))
            session.delete(project)
        logger.info("删除项目 %s", project_id)

        self.aggregator.recalculate_after_project_change([], [strategy_id])

    # ==================== 行动 ====================

    def create_action(self, data: Payload) -> Dict[str, Any]:
        """创建行动（可不挂项目），随后重算项目与战略"""
        payload = _parse(ActionCreate, data)
        values = payload.model_dump()
        values["status"] = ActionStatus(values["status"])

        with self.database.session() as session:
            strategy = self._load(session, Strategy, payload.strategy_id)
            if payload.project_id is not None:
                self._check_project_owner(session, payload.project_id, payload.strategy_id)
            if values["organization_id"] is None:
                values["organization_id"] = strategy.organization_id
            action = Action(**values)
            session.add(action)
            session.flush()
            session.add(Activity(
                type="action_created",
                description=f'Created action "{action.title}"',
                user_id=action.created_by,
                strategy_id=action.strategy_id,
                project_id=action.project_id,
                organization_id=action.organization_id,
            ))
            result = action.to_dict()
        logger.info("创建行动 %s (%s)", result["id"], payload.title)

        self.aggregator.recalculate_after_action_change([payload.project_id], [payload.strategy_id])
        return result

    def get_action(self, action_id: str) -> Dict[str, Any]:
        with self.database.session() as session:
            return self._load(session, Action, action_id).to_dict()

    def list_actions(self, strategy_id: Optional[str] = None, project_id: Optional[str] = None,
                     include_archived: bool = True) -> List[Dict[str, Any]]:
        stmt = select(Action).order_by(Action.created_at)
        if strategy_id is not None:
            stmt = stmt.where(Action.strategy_id == strategy_id)
        if project_id is not None:
            stmt = stmt.where(Action.project_id == project_id)
        if not include_archived:
            stmt = stmt.where(Action.is_archived.is_(False))
        with self.database.session() as session:
            return [a.to_dict() for a in session.execute(stmt).scalars()]

    def update_action(self, action_id: str, data: Payload) -> Dict[str, Any]:
        """更新行动；在项目间移动时新旧项目都会重算"""
        updates = _updates(ActionUpdate, data, Action)
        if "status" in updates:
            updates["status"] = ActionStatus(updates["status"])

        with self.database.session() as session:
            action = self._load(session, Action, action_id)
            old_project_id = action.project_id
            if updates.get("project_id") is not None:
                self._check_project_owner(session, updates["project_id"], action.strategy_id)
            action.update_from_dict(updates)
            session.flush()
            result = action.to_dict()
        logger.info("更新行动 %s: %s", action_id, sorted(updates))

        self.aggregator.recalculate_after_action_change(
            [old_project_id, result["project_id"]], [result["strategy_id"]]
        )
        return result

    def delete_action(self, action_id: str, user_id: str = "system") -> None:
        with self.database.session() as session:
            action = self._load(session, Action, action_id)
            project_id, strategy_id = action.project_id, action.strategy_id
            session.add(Activity(
                type="action_deleted",
                description=f'Deleted action "{action.title}"',
                user_id=user_id,
                strategy_id=strategy_id,
                project_id=project_id,
                organization_id=action.organization_id,
            ))
            session.delete(action)
        logger.info("删除行动 %s", action_id)

        self.aggregator.recalculate_after_action_change([project_id], [strategy_id])

    # ==================== 活动流水 ====================

    def list_activities(self, user_id: Optional[str] = None, organization_id: Optional[str] = None,
                        limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """活动流水，最新在前"""
        stmt = select(Activity).order_by(Activity.created_at.desc())
        if user_id is not None:
            stmt = stmt.where(Activity.user_id == user_id)
        if organization_id is not None:
            stmt = stmt.where(Activity.organization_id == organization_id)
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.database.session() as session:
            return [a.to_dict() for a in session.execute(stmt).scalars()]

    # ==================== 内部工具 ====================

    @staticmethod
    def _load(session, model, entity_id: str):
        entity = session.get(model, entity_id)
        if entity is None:
            raise NotFoundError(model.__name__, entity_id)
        return entity

    def _check_project_owner(self, session, project_id: str, strategy_id: str) -> Project:
        """行动挂接的项目必须存在且属于同一战略"""
        project = self._load(session, Project, project_id)
        if project.strategy_id != strategy_id:
            raise ValueError(
                f"Project {project_id} belongs to strategy {project.strategy_id}, not {strategy_id}"
            )
        return project
