"""
数据库与运行配置管理
"""
import os
from pathlib import Path

# 项目根目录
BASE_DIR = Path(__file__).resolve().parent.parent

# 数据库文件路径
DATABASE_URL = os.getenv(
    'DATABASE_URL',
    f'sqlite:///{BASE_DIR}/strategicflow.db'
)

# SQLAlchemy配置
SQLALCHEMY_CONFIG = {
    'echo': os.getenv('DB_ECHO', 'False') == 'True',  # 是否打印SQL语句
    'pool_pre_ping': True,  # 连接池健康检查
    'pool_recycle': 3600,   # 连接回收时间（秒）
}

# SQLite PRAGMA（仅SQLite生效）
SQLITE_PRAGMAS = {
    'journal_mode': os.getenv('DB_JOURNAL_MODE', 'WAL').strip().upper(),
    'busy_timeout': max(0, int(os.getenv('DB_BUSY_TIMEOUT_MS', '5000'))),  # 锁等待（毫秒）
    'foreign_keys': 'ON',
}


def _read_in_progress_weight() -> int:
    """进行中(in_progress)行动的完成度权重，限制在 0-100"""
    raw = os.getenv('ACTION_IN_PROGRESS_WEIGHT', '50')
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"ACTION_IN_PROGRESS_WEIGHT 必须是整数，当前值: {raw!r}")
    return min(100, max(0, value))


# 进度汇总配置
ACTION_IN_PROGRESS_WEIGHT = _read_in_progress_weight()

# 日志级别（run.py 使用）
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
