import sqlite3
import sys
from pathlib import Path

from loguru import logger

# 通知去重依赖 INSERT ... ON CONFLICT DO NOTHING
MIN_SQLITE_VERSION = (3, 24, 0)


def check_sqlite_version(version: tuple[int, int, int] = sqlite3.sqlite_version_info) -> None:
    """SQLite 版本过低时直接退出"""
    if version >= MIN_SQLITE_VERSION:
        logger.info("SQLite 版本检查通过：{}", ".".join(map(str, version)))
        return
    required = ".".join(map(str, MIN_SQLITE_VERSION))
    current = ".".join(map(str, version))
    logger.error("SQLite 版本过低（{}），通知去重需要 {} 及以上", current, required)
    sys.exit(f"SQLite {current} 不受支持，请升级到 {required} 或更高版本：https://www.sqlite.org/download.html")


def ensure_parent_dirs(*paths: Path) -> None:
    """创建数据库文件与规则文件所在目录"""
    for path in paths:
        if not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            logger.info("已创建目录 {}", path.parent)
