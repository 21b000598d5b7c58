import json
from pathlib import Path

from loguru import logger
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models.rules import RulesConfig
from repositories.settings_repo import SettingsRepository

DEFAULT_RULES_CONFIG = RulesConfig()


class RulesConfigService:
    """就绪规则配置加载

    优先级：数据库 settings 表 -> rules.json（成功后导入数据库）-> 默认值。
    任何校验失败都会记录到 last_error 并回退到默认配置，不会中断同步。
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], rules_file: Path | None = None):
        self.session_factory = session_factory
        self.rules_file = rules_file
        self.last_error: str | None = None

    def _fail(self, source: str, error: Exception) -> RulesConfig:
        self.last_error = f"{source}: {error}"
        logger.warning("规则配置无效（{}），使用默认配置：{}", source, error)
        return DEFAULT_RULES_CONFIG

    async def load(self) -> RulesConfig:
        settings = None
        try:
            async with self.session_factory() as session:
                settings = await SettingsRepository(session).get_all()
        except json.JSONDecodeError as e:
            return self._fail("database", e)
        except SQLAlchemyError as e:
            logger.warning("读取数据库规则配置失败，尝试配置文件：{}", e)

        if settings:
            payload = RulesConfig.settings_to_payload(settings)
            if payload:
                try:
                    config = RulesConfig.model_validate(payload)
                except ValidationError as e:
                    return self._fail("database", e)
                if self.rules_file and self.rules_file.exists():
                    logger.debug("数据库配置优先于 {}", self.rules_file)
                self.last_error = None
                return config

        if self.rules_file and self.rules_file.exists():
            try:
                config = RulesConfig.model_validate(json.loads(self.rules_file.read_text(encoding='utf-8')))
            except (OSError, json.JSONDecodeError, ValidationError) as e:
                return self._fail(str(self.rules_file), e)
            await self._import(config)
            self.last_error = None
            return config

        self.last_error = None
        return DEFAULT_RULES_CONFIG

    async def save(self, config: RulesConfig) -> None:
        async with self.session_factory() as session:
            await SettingsRepository(session).set_many(config.to_settings())

    async def _import(self, config: RulesConfig) -> None:
        try:
            await self.save(config)
        except SQLAlchemyError as e:
            logger.warning("导入 {} 到数据库失败：{}", self.rules_file, e)
            return
        logger.info("已将 {} 导入数据库", self.rules_file)
