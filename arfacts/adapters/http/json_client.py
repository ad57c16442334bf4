"""
Async JSON-over-HTTP client shared by the vision, chat and speech adapters.

One call = one request. No retries, no caching. Every failure is raised as
one of the HttpError subclasses so callers never see raw httpx exceptions:

  TransportFailure  no response (connect error, timeout, dropped stream)
  ServiceError      non-2xx, carries status code + raw body
  ParseFailure      body is not JSON / does not fit the response model
"""
from typing import Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from arfacts.orchestrator.errors import TransportFailure, ServiceError, ParseFailure

T = TypeVar("T", bound=BaseModel)


class HttpJsonClient:
    def __init__(self, status_store, timeout: float = 30.0, client: Optional[httpx.AsyncClient] = None):
        self.status = status_store
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def send(
        self,
        url: str,
        payload: dict,
        *,
        response_model: Type[T],
        headers: Optional[dict] = None,
        params: Optional[dict] = None,
        method: str = "POST",
    ) -> T:
        # never log params: the Google key travels there
        self.status.log(f"http: {method} {url}")
        try:
            resp = await self._client.request(
                method, url, json=payload, headers=headers, params=params, timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportFailure(f"timeout after {self.timeout:.0f}s calling {url}") from e
        except httpx.RequestError as e:
            raise TransportFailure(f"{type(e).__name__} calling {url}: {e}") from e

        if not resp.is_success:
            self.status.log(f"http: {url} -> HTTP {resp.status_code} {resp.text[:300]}")
            raise ServiceError(resp.status_code, resp.text, url=url)

        try:
            data = resp.json()
        except ValueError as e:
            raise ParseFailure(f"non-JSON body from {url}: {resp.text[:200]!r}") from e
        try:
            return response_model.model_validate(data)
        except ValidationError as e:
            raise ParseFailure(f"unexpected response shape from {url}: {e.error_count()} error(s)") from e

    async def aclose(self):
        await self._client.aclose()
