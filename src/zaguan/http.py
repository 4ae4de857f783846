"""Thin httpx transport for the gateway."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from zaguan.config import DEFAULT_TIMEOUT
from zaguan.errors import APIError, ZaguanError, classify_error

__all__ = ["HttpTransport", "error_from_response", "read_json"]


class HttpTransport:
    """
    Sends requests relative to a base URL.

    Pass ``client`` to reuse a configured ``httpx.AsyncClient`` (tests
    inject one built on ``httpx.MockTransport``); it is then left open by
    `aclose`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def send(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str],
        json: Any = None,
        params: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        stream: bool = False,
    ) -> httpx.Response:
        """
        Issue one request. With ``stream=True`` the body is left unread and
        the caller must close the response.
        """
        kwargs: dict[str, Any] = {"headers": dict(headers)}
        if json is not None:
            kwargs["json"] = json
        if params:
            kwargs["params"] = dict(params)
        if timeout is not None:
            kwargs["timeout"] = timeout
        request = self._client.build_request(method, f"{self.base_url}{path}", **kwargs)
        return await self._client.send(request, stream=stream)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def error_from_response(
    response: httpx.Response, logger: Optional[logging.Logger] = None
) -> APIError:
    """Classify a non-success response whose body has been read."""
    return classify_error(
        response.status_code,
        response.content,
        response.headers,
        reason_phrase=response.reason_phrase,
        logger=logger,
    )


def read_json(response: httpx.Response) -> Any:
    """Decode a successful response body; an empty body decodes to ``{}``."""
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError as exc:
        raise ZaguanError(
            f"Gateway returned a body that is not JSON (status {response.status_code})"
        ) from exc
