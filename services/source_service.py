from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from clients.base_client import BaseClient
from models.sync import ServiceName

RecordsT = TypeVar('RecordsT')


class SourceNotConfiguredError(Exception):
    """数据源未配置时调用 fetch_catalog 抛出"""
    def __init__(self, name: ServiceName):
        super().__init__(f"{name} 未配置")
        self.name = name


class SourceAdapter(ABC, Generic[RecordsT]):
    """数据源适配器：拉取并规范化单个上游服务的目录视图。

    适配器之间互不引用；失败一律以 UpstreamError 抛出。
    """
    name: ServiceName

    def __init__(self, client: BaseClient):
        self.client = client

    @property
    def configured(self) -> bool:
        return True

    @abstractmethod
    async def fetch_catalog(self) -> RecordsT:
        raise NotImplementedError

    async def close(self) -> None:
        await self.client.close()


class UnconfiguredSource(SourceAdapter[Any]):
    """未配置的数据源，调用方通过 configured 判断而不是到处检查配置项"""

    def __init__(self, name: ServiceName):
        self.name = name

    @property
    def configured(self) -> bool:
        return False

    async def fetch_catalog(self) -> Any:
        raise SourceNotConfiguredError(self.name)

    async def close(self) -> None:
        return None
