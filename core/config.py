import logging
import sys
from functools import lru_cache
from pathlib import Path

from loguru import logger
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).parent.parent


def setup_logging():
    settings = get_settings()
    LOGS_DIR = BASE_DIR / 'logs'
    LOGS_DIR.mkdir(parents=True, exist_ok=True)

    logger.remove()

    logger.add(
        sys.stderr,
        level="INFO",
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        colorize=True
    )

    logger.add(
        LOGS_DIR / "wtw_{time:YYYY-MM-DD}.log",
        level=settings.log_level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        rotation="00:00",  # 每天生成一个新的日志文件
        retention="7 days",
        compression="zip",
        encoding="utf-8",
        enqueue=True,  # 异步写日志，防止阻塞事件循环
        backtrace=True,
        diagnose=True
    )

    class InterceptHandler(logging.Handler):
        def emit(self, record):
            # 获取 Loguru 的日志级别
            try:
                level = logger.level(record.levelname).name
            except ValueError:
                level = record.levelno
            # 找到调用日志的堆栈深度
            frame, depth = logging.currentframe(), 2
            while frame and frame.f_code.co_filename == logging.__file__:
                frame = frame.f_back
                depth += 1
            logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.access", "fastapi", "httpx", "apscheduler"):
        logging.getLogger(name).handlers = [InterceptHandler()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    log_level: str = 'INFO'
    port: int = 3000
    database_path: Path = BASE_DIR / 'wtw.db'
    rules_file: Path = BASE_DIR / 'config' / 'rules.json'

    # 媒体服务器（主数据源，必需）
    jellyfin_url: str = ''
    jellyfin_api_key: str = ''
    jellyfin_user_id: str = ''
    jellyfin_public_url: str = ''

    # 追踪服务（可选）
    sonarr_url: str = ''
    sonarr_api_key: str = ''
    radarr_url: str = ''
    radarr_api_key: str = ''

    sync_interval_minutes: int = Field(default=15, ge=1)
    source_timeout: float = Field(default=30.0, gt=0)
    webhook_timeout: float = Field(default=10.0, gt=0)

    @property
    def jellyfin_configured(self) -> bool:
        return bool(self.jellyfin_url and self.jellyfin_api_key and self.jellyfin_user_id)

    @property
    def sonarr_configured(self) -> bool:
        return bool(self.sonarr_url and self.sonarr_api_key)

    @property
    def radarr_configured(self) -> bool:
        return bool(self.radarr_url and self.radarr_api_key)


@lru_cache
def get_settings() -> Settings:
    """读取环境配置，校验失败时回退到默认值，不中断启动。"""
    try:
        return Settings()
    except ValidationError as e:
        logger.error("环境变量校验失败，使用默认配置继续运行: {}", e)
        return Settings.model_construct()
