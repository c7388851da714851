"""
进度汇总器

行动(Action) → 项目(Project) → 战略(Strategy) 的级联进度计算：
- 项目进度 = 未归档行动完成度权重的算术平均（四舍五入取整），无行动为 0
- 战略进度 = 未归档项目进度的算术平均（四舍五入取整），无项目为 0
- 直接挂在战略下（无项目）的行动不参与战略汇总

汇总在触发它的实体写入提交之后、于独立事务中执行；
失败只记录日志，不回滚也不影响触发方的写入结果。
"""
import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from sqlalchemy import select

from database.config import ACTION_IN_PROGRESS_WEIGHT
from database.engine import Database
from database.models import Action, ActionStatus, Project, ProjectStatus, Strategy, StrategyStatus

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """四舍五入到整数（避免 Python round 的银行家舍入）"""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def action_weight(status, in_progress_weight: int = ACTION_IN_PROGRESS_WEIGHT) -> int:
    """
    行动状态对应的完成度权重

    Args:
        status: ActionStatus 或其字符串值
        in_progress_weight: 进行中行动的权重

    Returns:
        achieved=100, in_progress=in_progress_weight, at_risk/not_started=0
    """
    status = ActionStatus(status)
    if status == ActionStatus.ACHIEVED:
        return 100
    if status == ActionStatus.IN_PROGRESS:
        return in_progress_weight
    return 0


def compute_project_progress(actions: Iterable, in_progress_weight: int = ACTION_IN_PROGRESS_WEIGHT) -> int:
    """根据行动集合计算项目进度（忽略已归档行动）"""
    weights = [
        action_weight(action.status, in_progress_weight)
        for action in actions
        if not action.is_archived
    ]
    if not weights:
        return 0
    return round_half_up(sum(weights) / len(weights))


def compute_strategy_progress(projects: Iterable) -> int:
    """根据项目集合计算战略进度（忽略已归档项目）"""
    values = [project.progress or 0 for project in projects if not project.is_archived]
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


class ProgressAggregator:
    """进度汇总器：保持 Project.progress / Strategy.progress 与子实体一致"""

    def __init__(self, database: Database, in_progress_weight: int = ACTION_IN_PROGRESS_WEIGHT):
        self.database = database
        self.in_progress_weight = in_progress_weight

    def recalculate_project_progress(self, project_id: str) -> Optional[int]:
        """
        重新计算并写回项目进度

        Returns:
            新的进度值；项目不存在时返回 None（不抛异常）
        """
        with self.database.session() as session:
            project = session.get(Project, project_id)
            if project is None:
                logger.warning("重新计算进度时未找到项目: %s", project_id)
                return None

            actions = session.execute(
                select(Action).where(
                    Action.project_id == project_id,
                    Action.is_archived.is_(False)
                )
            ).scalars().all()

            project.progress = compute_project_progress(actions, self.in_progress_weight)
            logger.debug("项目 %s 进度更新为 %s（%d 个行动）", project_id, project.progress, len(actions))
            return project.progress

    def recalculate_strategy_progress(self, strategy_id: str) -> Optional[int]:
        """
        重新计算并写回战略进度

        进度为 100 且全部项目状态为完成时，工作中的战略自动完成；
        已完成战略进度回落到 100 以下时恢复为 Active。已归档战略的状态不变。

        Returns:
            新的进度值；战略不存在时返回 None（不抛异常）
        """
        with self.database.session() as session:
            strategy = session.get(Strategy, strategy_id)
            if strategy is None:
                logger.warning("重新计算进度时未找到战略: %s", strategy_id)
                return None

            projects = session.execute(
                select(Project).where(
                    Project.strategy_id == strategy_id,
                    Project.is_archived.is_(False)
                )
            ).scalars().all()

            progress = compute_strategy_progress(projects)
            strategy.progress = progress

            all_completed = bool(projects) and all(p.status == ProjectStatus.COMPLETED for p in projects)
            if progress == 100 and all_completed and strategy.status.is_active:
                strategy.status = StrategyStatus.COMPLETED
                strategy.completion_date = datetime.utcnow()
                logger.info("战略 %s 所有项目已完成，自动标记为 Completed", strategy_id)
            elif strategy.status == StrategyStatus.COMPLETED and progress < 100:
                strategy.status = StrategyStatus.ACTIVE
                strategy.completion_date = None
                logger.info("战略 %s 进度回落到 %s，恢复为 Active", strategy_id, progress)

            logger.debug("战略 %s 进度更新为 %s（%d 个项目）", strategy_id, progress, len(projects))
            return progress

    def refresh(self, project_ids: Iterable[str] = (), strategy_ids: Iterable[str] = ()) -> bool:
        """
        变更后的级联重算：先项目，后战略

        每一步单独捕获异常并记录日志，调用方的写入不受影响。

        Args:
            project_ids: 需要重算的项目ID（None 会被忽略）
            strategy_ids: 需要重算的战略ID（None 会被忽略）

        Returns:
            全部重算成功返回 True
        """
        ok = True

        for project_id in _unique(project_ids):
            try:
                self.recalculate_project_progress(project_id)
            except Exception:
                ok = False
                logger.exception("重新计算项目进度失败: %s", project_id)

        for strategy_id in _unique(strategy_ids):
            try:
                self.recalculate_strategy_progress(strategy_id)
            except Exception:
                ok = False
                logger.exception("重新计算战略进度失败: %s", strategy_id)

        return ok

    def recalculate_after_action_change(self, project_ids: Iterable[Optional[str]],
                                        strategy_ids: Iterable[Optional[str]]) -> bool:
        """行动增删改后：受影响的项目 → 战略"""
        return self.refresh(project_ids=project_ids, strategy_ids=strategy_ids)

    def recalculate_after_project_change(self, project_ids: Iterable[Optional[str]],
                                         strategy_ids: Iterable[Optional[str]]) -> bool:
        """项目增删改后：项目自身（若仍存在）→ 新旧战略"""
        return self.refresh(project_ids=project_ids, strategy_ids=strategy_ids)


def _unique(ids: Iterable[Optional[str]]) -> list:
    """去重并保持顺序"""
    seen = []
    for item in ids:
        if item and item not in seen:
            seen.append(item)
    return seen
