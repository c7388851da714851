"""
Pydantic Schemas - Data Validation Layer
"""

from database.schemas.strategy import (
    StrategyBase,
    StrategyCreate,
    StrategyUpdate,
    StrategyOrderItem,
    StrategyResponse
)

from database.schemas.project import (
    ProjectBase,
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse
)

from database.schemas.action import (
    ActionBase,
    ActionCreate,
    ActionUpdate,
    ActionResponse
)

from database.schemas.dependency import (
    DependencyCreate,
    DependencyResponse
)

from database.schemas.activity import ActivityResponse

__all__ = [
    # Strategy schemas
    "StrategyBase",
    "StrategyCreate",
    "StrategyUpdate",
    "StrategyOrderItem",
    "StrategyResponse",

    # Project schemas
    "ProjectBase",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",

    # Action schemas
    "ActionBase",
    "ActionCreate",
    "ActionUpdate",
    "ActionResponse",

    # Dependency schemas
    "DependencyCreate",
    "DependencyResponse",

    # Activity schemas
    "ActivityResponse",
]
