from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel, TypeAdapter, ValidationError

T = TypeVar('T', bound=BaseModel)
R = TypeVar('R')

class UpstreamError(Exception):
    """上游服务请求失败（不可达、超时、非 2xx、响应结构不符）"""
    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message

def list_parser(model: type[T]) -> Callable[[Any], list[T]]:
    """构造校验 JSON 数组的解析器"""
    adapter = TypeAdapter(list[model])
    return adapter.validate_python

class BaseClient(ABC):
    """抽象基类，定义了基本的HTTP客户端接口

    所有失败均以 UpstreamError 抛出，调用方不会拿到部分校验通过的数据。
    """
    source_name = "upstream"

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def close(self):
        """关闭HTTP客户端连接"""
        if self._client:
            await self._client.aclose()

    @abstractmethod
    def _apply_auth(self) -> dict[str, str]:
        """子类返回认证请求头"""
        raise NotImplementedError("子类必须实现 _apply_auth 方法")

    async def _request(self,
                       method: str,
                       url: str,
                       *,
                       response_model: type[T] | None = None,
                       parser: Callable[[Any], R] | None = None,
                       **kwargs
    ) -> T | R | httpx.Response:
        """发送HTTP请求并校验响应
        Args:
            method (str): HTTP方法，如'GET', 'POST', 'DELETE'等。
            url (str): 请求的URL路径。
            response_model (type[T], optional): 用于验证响应数据的Pydantic模型类。
            parser (Callable, optional): 自定义解析函数（如列表校验）。
            **kwargs: 传递给httpx请求方法的其他参数，如params, json, headers等。
        Returns:
            校验后的模型 / 解析结果；两者都未提供时返回 httpx.Response。
        Raises:
            UpstreamError: 请求失败或响应结构不符合预期。
        """
        kwargs['headers'] = {**self._apply_auth(), **kwargs.get('headers', {})}
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("{} HTTP 错误：{} {} - {}", self.source_name, e.response.status_code, url, e.response.text[:200])
            raise UpstreamError(self.source_name, f"HTTP {e.response.status_code} for {url}") from e
        except httpx.TimeoutException as e:
            logger.error("{} 请求超时：{}", self.source_name, url)
            raise UpstreamError(self.source_name, f"timeout for {url}") from e
        except httpx.RequestError as e:
            logger.error("{} 请求错误：{}", self.source_name, e)
            raise UpstreamError(self.source_name, f"request error for {url}: {e}") from e

        if response_model is None and parser is None:
            return response

        try:
            data = response.json()
            if response_model is not None:
                return response_model.model_validate(data)
            return parser(data)
        except ValueError as e:
            # ValidationError 是 ValueError 的子类，JSON 解码错误同样如此
            if isinstance(e, ValidationError):
                logger.error("{} 响应验证错误: {}", self.source_name, repr(e.errors()))
            else:
                logger.error("{} 响应不是有效的 JSON: {}", self.source_name, url)
            raise UpstreamError(self.source_name, f"unexpected response shape for {url}") from e

    async def get(self, url: str, *, response_model: type[T] | None = None, **kwargs) -> Any:
        """发送GET请求"""
        return await self._request("GET", url, response_model=response_model, **kwargs)

    async def post(self, url: str, *, response_model: type[T] | None = None, **kwargs) -> Any:
        """发送POST请求"""
        return await self._request("POST", url, response_model=response_model, **kwargs)

    async def delete(self, url: str, *, response_model: type[T] | None = None, **kwargs) -> Any:
        """发送DELETE请求"""
        return await self._request("DELETE", url, response_model=response_model, **kwargs)
