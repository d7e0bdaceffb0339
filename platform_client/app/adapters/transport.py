"""
HTTP transport for the platform API.
"""

import time
from typing import Any, Callable, Dict, List, Mapping, Optional, TYPE_CHECKING

import httpx

from shared.config import DEFAULT_BASE_URL
from shared.logging import get_logger
from .params import flatten_params

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import ClientMetrics


JSON_API_CONTENT_TYPE = "application/vnd.api+json"

ResponseInterceptor = Callable[[Any], Any]


class PlatformTransport:
    """
    Thin wrapper over ``httpx.AsyncClient`` bound to one access token.

    Non-2xx responses raise ``httpx.HTTPStatusError`` unchanged. Every
    successful decoded body is handed to the registered response
    interceptors before it is returned.
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        metrics: Optional["ClientMetrics"] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.metrics = metrics
        self.logger = get_logger("platform_client.transport")
        self.headers: Dict[str, str] = {
            "Content-Type": JSON_API_CONTENT_TYPE,
            "Accept": JSON_API_CONTENT_TYPE,
            "Authorization": f"Bearer {access_token}",
        }
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)
        self._interceptors: List[ResponseInterceptor] = []

    def add_response_interceptor(self, interceptor: ResponseInterceptor) -> None:
        self._interceptors.append(interceptor)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (``None`` for an empty body)."""
        url = self._url(path)
        start_time = time.time()
        response = await self._client.request(
            method,
            url,
            params=flatten_params(params) or None,
            json=json,
            headers=self.headers,
        )
        duration = time.time() - start_time
        if self.metrics is not None:
            self.metrics.record_http_request(method, response.status_code, duration)

        if response.is_error:
            self.logger.warning(
                "Platform request failed",
                method=method,
                url=url,
                status_code=response.status_code
            )
        response.raise_for_status()

        body = response.json() if response.content else None
        self.logger.debug("Platform request succeeded", method=method, url=url, duration=duration)

        for interceptor in self._interceptors:
            interceptor(body)
        return body

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "PlatformTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
