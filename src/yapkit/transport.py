"""HTTP 传输抽象

Transport 协议只有一个方法：发送请求、返回 httpx.Response。
传输层异常（httpx.TransportError 及其子类）原样抛出，由调用方映射为各自的错误类型。
"""

from typing import Protocol

import httpx
from pydantic import ValidationError

from .config import DEFAULT_TIMEOUT_S
from .models import ErrorResponse


class Transport(Protocol):
    """HTTP 传输接口"""

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        content: bytes | None = None,
    ) -> httpx.Response:
        """发送一次 HTTP 请求并返回完整响应"""
        ...


class HttpxTransport:
    """基于 httpx.AsyncClient 的传输实现

    传入 client 时复用该 client（调用方负责关闭）；
    否则每次请求创建一个短生命周期的 client。
    timeout_s 为 None 时，注入的 client 使用其自身超时配置，
    短生命周期 client 使用 DEFAULT_TIMEOUT_S。
    重定向（301/302/307/308）自动跟随。
    除注入的 client 外不持有任何状态，可在并发调用间共享。
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout_s: float | None = None,
    ) -> None:
        self._client = client
        self._timeout_s = timeout_s

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        content: bytes | None = None,
    ) -> httpx.Response:
        if self._client is not None:
            timeout = httpx.USE_CLIENT_DEFAULT if self._timeout_s is None else self._timeout_s
            return await self._client.request(
                method,
                url,
                headers=headers,
                content=content,
                timeout=timeout,
                follow_redirects=True,
            )

        timeout_s = DEFAULT_TIMEOUT_S if self._timeout_s is None else self._timeout_s
        async with httpx.AsyncClient(timeout=timeout_s, follow_redirects=True) as client:
            return await client.request(method, url, headers=headers, content=content)


def is_success(response: httpx.Response) -> bool:
    return 200 <= response.status_code <= 299


def decode_error_message(response: httpx.Response) -> str | None:
    """尽力解码非 2xx 响应体中的 {error: ...}，失败返回 None"""
    try:
        return ErrorResponse.model_validate_json(response.content).error
    except ValidationError:
        return None
