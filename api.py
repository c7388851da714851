"""
REST API Blueprint

挂载在 Dash 的 Flask 服务器上，前缀 /api：

  Strategy
    - GET    /strategies                  列表（organizationId, includeArchived）
    - POST   /strategies                  创建
    - GET    /strategies/<id>
    - PATCH  /strategies/<id>             更新（status 经状态机）
    - DELETE /strategies/<id>
    - POST   /strategies/<id>/complete
    - POST   /strategies/<id>/archive     级联归档，可重复调用
    - POST   /strategies/reorder          [{id, displayOrder}]

  Project / Action
    - GET, POST          /projects, /actions
    - GET, PATCH, DELETE /projects/<id>, /actions/<id>

  Dependency
    - GET    /dependencies                sourceType&sourceId 或 targetType&targetId 过滤
    - POST   /dependencies
    - DELETE /dependencies/<id>

  Activity
    - GET    /activities                  userId, organizationId, limit

JSON 键统一为 camelCase。
"""
import logging

from flask import Blueprint, jsonify, request
from pydantic import ValidationError
from pydantic.alias_generators import to_camel
from werkzeug.exceptions import HTTPException

from database.engine import Database, default_database
from database.schemas import (
    ActionResponse, ActivityResponse, DependencyCreate, DependencyResponse,
    ProjectResponse, StrategyResponse
)
from utils.dependency_store import DependencyStore
from utils.exceptions import DatabaseBusyError, InvalidTransitionError, NotFoundError
from utils.hierarchy_service import HierarchyService
from utils.validation_helpers import format_validation_error

logger = logging.getLogger(__name__)


def _dump(schema, data):
    """服务层字典 → camelCase JSON 字典"""
    return schema.model_validate(data).model_dump(by_alias=True, mode="json")


def _flag(name: str, default: bool = True) -> bool:
    value = request.args.get(name)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes")


def _body() -> dict:
    """请求体 JSON 对象；缺失或非对象时视为空"""
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def _user_id(body=None) -> str:
    body = body if body is not None else _body()
    return body.get("userId") or request.args.get("userId") or "system"


def create_api_blueprint(database: Database = default_database) -> Blueprint:
    """
    创建 API Blueprint

    Args:
        database: 注入的数据库句柄（测试使用内存库）
    """
    bp = Blueprint("api", __name__, url_prefix="/api")
    service = HierarchyService(database)
    store = DependencyStore(database)

    # ==================== 错误映射 ====================

    @bp.errorhandler(ValidationError)
    def _handle_validation(ex: ValidationError):
        return jsonify({"message": "数据验证失败", "errors": format_validation_error(ex)}), 400

    @bp.errorhandler(NotFoundError)
    def _handle_not_found(ex: NotFoundError):
        return jsonify({"message": str(ex)}), 404

    @bp.errorhandler(InvalidTransitionError)
    def _handle_transition(ex: InvalidTransitionError):
        return jsonify({"message": str(ex), "current": ex.current, "requested": ex.requested}), 409

    @bp.errorhandler(ValueError)
    def _handle_value_error(ex: ValueError):
        return jsonify({"message": str(ex)}), 400

    @bp.errorhandler(DatabaseBusyError)
    def _handle_busy(ex: DatabaseBusyError):
        logger.error("数据库繁忙: %s %s", request.method, request.path)
        return jsonify({"message": str(ex)}), 500

    @bp.errorhandler(Exception)
    def _handle_unexpected(ex: Exception):
        if isinstance(ex, HTTPException):
            return ex
        logger.exception("未处理的异常: %s %s", request.method, request.path)
        return jsonify({"message": "服务器内部错误"}), 500

    # ==================== 战略 ====================

    @bp.get("/strategies")
    def list_strategies():
        strategies = service.list_strategies(
            organization_id=request.args.get("organizationId"),
            include_archived=_flag("includeArchived"),
        )
        return jsonify([_dump(StrategyResponse, s) for s in strategies])

    @bp.post("/strategies")
    def create_strategy():
        return jsonify(_dump(StrategyResponse, service.create_strategy(_body()))), 201

    @bp.post("/strategies/reorder")
    def reorder_strategies():
        items = request.get_json(silent=True)
        if not isinstance(items, list):
            raise ValueError("请求体必须是 [{id, displayOrder}] 数组")
        strategies = service.reorder_strategies(items)
        return jsonify([_dump(StrategyResponse, s) for s in strategies])

    @bp.get("/strategies/<strategy_id>")
    def get_strategy(strategy_id):
        return jsonify(_dump(StrategyResponse, service.get_strategy(strategy_id)))

    @bp.patch("/strategies/<strategy_id>")
    def update_strategy(strategy_id):
        body = _body()
        strategy = service.update_strategy(strategy_id, body, user_id=_user_id(body))
        return jsonify(_dump(StrategyResponse, strategy))

    @bp.delete("/strategies/<strategy_id>")
    def delete_strategy(strategy_id):
        service.delete_strategy(strategy_id, user_id=_user_id())
        return "", 204

    @bp.post("/strategies/<strategy_id>/complete")
    def complete_strategy(strategy_id):
        return jsonify(_dump(StrategyResponse, service.complete_strategy(strategy_id, _user_id())))

    @bp.post("/strategies/<strategy_id>/archive")
    def archive_strategy(strategy_id):
        return jsonify(_dump(StrategyResponse, service.archive_strategy(strategy_id, _user_id())))

    # ==================== 项目 ====================

    @bp.get("/projects")
    def list_projects():
        projects = service.list_projects(
            strategy_id=request.args.get("strategyId"),
            include_archived=_flag("includeArchived"),
        )
        return jsonify([_dump(ProjectResponse, p) for p in projects])

    @bp.post("/projects")
    def create_project():
        return jsonify(_dump(ProjectResponse, service.create_project(_body()))), 201

    @bp.get("/projects/<project_id>")
    def get_project(project_id):
        return jsonify(_dump(ProjectResponse, service.get_project(project_id)))

    @bp.patch("/projects/<project_id>")
    def update_project(project_id):
        return jsonify(_dump(ProjectResponse, service.update_project(project_id, _body())))

    @bp.delete("/projects/<project_id>")
    def delete_project(project_id):
        service.delete_project(project_id, user_id=_user_id())
        return "", 204

    # ==================== 行动 ====================

    @bp.get("/actions")
    def list_actions():
        actions = service.list_actions(
            strategy_id=request.args.get("strategyId"),
            project_id=request.args.get("projectId"),
            include_archived=_flag("includeArchived"),
        )
        return jsonify([_dump(ActionResponse, a) for a in actions])

    @bp.post("/actions")
    def create_action():
        return jsonify(_dump(ActionResponse, service.create_action(_body()))), 201

    @bp.get("/actions/<action_id>")
    def get_action(action_id):
        return jsonify(_dump(ActionResponse, service.get_action(action_id)))

    @bp.patch("/actions/<action_id>")
    def update_action(action_id):
        return jsonify(_dump(ActionResponse, service.update_action(action_id, _body())))

    @bp.delete("/actions/<action_id>")
    def delete_action(action_id):
        service.delete_action(action_id, user_id=_user_id())
        return "", 204

    # ==================== 依赖 ====================

    @bp.get("/dependencies")
    def list_dependencies():
        args = request.args
        if args.get("sourceType") and args.get("sourceId"):
            edges = store.list_dependencies_by_source(args["sourceType"], args["sourceId"])
        elif args.get("targetType") and args.get("targetId"):
            edges = store.list_dependencies_by_target(args["targetType"], args["targetId"])
        else:
            edges = store.list_dependencies(organization_id=args.get("organizationId"))

        if _flag("describe", default=False):
            return jsonify([
                {to_camel(key): value for key, value in store.describe_dependency(edge).items()}
                for edge in edges
            ])
        return jsonify([_dump(DependencyResponse, edge) for edge in edges])

    @bp.post("/dependencies")
    def create_dependency():
        payload = DependencyCreate.model_validate(_body())
        edge = store.create_dependency(**payload.model_dump())
        return jsonify(_dump(DependencyResponse, edge)), 201

    @bp.delete("/dependencies/<dependency_id>")
    def delete_dependency(dependency_id):
        store.delete_dependency(dependency_id, deleted_by=_user_id())
        return "", 204

    # ==================== 活动 ====================

    @bp.get("/activities")
    def list_activities():
        activities = service.list_activities(
            user_id=request.args.get("userId"),
            organization_id=request.args.get("organizationId"),
            limit=request.args.get("limit", type=int),
        )
        return jsonify([_dump(ActivityResponse, a) for a in activities])

    return bp
