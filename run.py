#!/usr/bin/env python
"""
启动脚本 - 战略规划平台Web界面
"""

import logging
import sys

from database.config import LOG_LEVEL


def setup_logging(level: str = LOG_LEVEL) -> None:
    """配置根日志记录器"""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)


if __name__ == '__main__':
    setup_logging()

    from app import app
    from database.engine import close_database

    print("=" * 60)
    print("战略规划平台 - Web界面")
    print("=" * 60)
    print("\n启动信息:")
    print(f"  - 访问地址: http://localhost:8050")
    print(f"  - API前缀: http://localhost:8050/api")
    print(f"  - 日志级别: {LOG_LEVEL}")
    print(f"  - Python版本: {sys.version.split()[0]}")
    print("\n按 Ctrl+C 停止服务器")
    print("=" * 60)
    print()

    try:
        app.run(
            debug=True,
            host='0.0.0.0',
            port=8050
        )
    finally:
        close_database()
