import json
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.orm import Setting


class SettingsRepository:
    """settings 表读写，值以 JSON 文本保存"""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_all(self) -> dict[str, Any]:
        """读取所有配置。
        Raises:
            json.JSONDecodeError: 某个值不是合法的 JSON。
        """
        result = await self.session.execute(select(Setting))
        return {row.key: json.loads(row.value) for row in result.scalars().all()}

    async def set_many(self, values: dict[str, Any]) -> None:
        """在同一事务中写入多个配置"""
        for key, value in values.items():
            setting = await self.session.get(Setting, key)
            if setting:
                setting.value = json.dumps(value)
            else:
                self.session.add(Setting(key=key, value=json.dumps(value)))
        await self.session.commit()
