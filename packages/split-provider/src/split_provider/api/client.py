from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping

import httpx

from ..config import DEFAULT_BASE_URL, ProviderConfig
from ..errors import DecodeError, NotFoundError, TransportError
from ..observability import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class SplitResponse:
    data: Any
    headers: Mapping[str, str] = field(default_factory=dict)
    status_code: int | None = None


RequestFunc = Callable[
    [str, str, dict | None, Any | None],
    Awaitable[SplitResponse],
]


class SplitRestClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        request_func: RequestFunc | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._request_func = request_func
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None
        if request_func is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                    "User-Agent": "split-provider",
                },
                timeout=timeout,
                transport=transport,
            )

    @classmethod
    def from_config(
        cls,
        config: ProviderConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SplitRestClient":
        return cls(
            api_key=config.api_key.get_secret_value(),
            base_url=config.base_url,
            transport=transport,
            timeout=config.timeout,
        )

    async def __aenter__(self) -> "SplitRestClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: Any | None = None,
    ) -> SplitResponse:
        log.debug("split.http.request", method=method, path=path, params=params)
        if self._request_func is not None:
            return await self._request_func(method, path, params, json)

        if self._client is None:
            raise RuntimeError("HTTP client not initialized")
        try:
            response = await self._client.request(
                method, path, params=params, json=json
            )
        except httpx.HTTPError as exc:
            log.debug("split.http.failed", method=method, path=path, error=str(exc))
            raise TransportError.from_exception(exc, method=method, path=path) from exc

        if not response.is_success:
            raise _status_error(method, path, response)
        return SplitResponse(
            data=_decode_body(method, path, response),
            headers=response.headers,
            status_code=response.status_code,
        )

    async def get_json(self, path: str, params: dict | None = None) -> Any:
        response = await self.request("GET", path, params=params)
        return response.data

    async def post_json(self, path: str, body: Any) -> Any:
        response = await self.request("POST", path, json=body)
        return response.data

    async def put_json(self, path: str, body: Any) -> Any:
        response = await self.request("PUT", path, json=body)
        return response.data

    async def delete(self, path: str) -> None:
        await self.request("DELETE", path)


def _decode_body(method: str, path: str, response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise DecodeError(
            f"{method} {path} returned malformed JSON",
            details={"status_code": response.status_code, "error": str(exc)},
        ) from exc


def _status_error(method: str, path: str, response: httpx.Response) -> TransportError:
    error_cls = NotFoundError if response.status_code == 404 else TransportError
    message = f"{method} {path} failed with HTTP {response.status_code}"
    body = response.text.strip()
    if body:
        message = f"{message}: {body}"
    log.debug(
        "split.http.failed", method=method, path=path, status_code=response.status_code
    )
    return error_cls(
        message,
        status_code=response.status_code,
        method=method,
        path=path,
    )
