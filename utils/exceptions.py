"""
层级服务异常定义
"""


class HierarchyError(Exception):
    """战略层级服务异常基类"""


class NotFoundError(HierarchyError, LookupError):
    """引用的实体不存在"""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class InvalidTransitionError(HierarchyError, ValueError):
    """战略状态机不允许的状态迁移"""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move strategy from {current} to {requested}")


class DatabaseBusyError(HierarchyError):
    """数据库锁等待超时，调用方需手动重试"""
