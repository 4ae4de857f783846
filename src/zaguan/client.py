"""
Async client for the Zaguán gateway with unified chat() and chat_stream().
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, AsyncIterator, Mapping, Optional, Type, TypeVar, Union
from urllib.parse import quote

import httpx
from anthropic.types import Message
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from zaguan.config import (
    DEFAULT_TIMEOUT,
    build_headers,
    get_api_key,
    get_base_url,
    new_request_id,
)
from zaguan.errors import REQUEST_ID_HEADER, ValidationError, ZaguanError
from zaguan.http import HttpTransport, error_from_response, read_json
from zaguan.params import validate_chat_request
from zaguan.reconstruct import reconstruct_message, reconstruct_stream
from zaguan.streaming import ChunkStream
from zaguan.thinking import extract_thinking, has_reasoning_tokens
from zaguan.types import (
    Batch,
    BatchList,
    ChatRequest,
    ChatResponse,
    CreditsBalance,
    CreditsHistory,
    CreditsStats,
    EmbeddingsResponse,
    ModelCapabilities,
    ModelInfo,
    ModerationResponse,
)

__all__ = ["ZaguanClient", "RequestOptions"]

M = TypeVar("M", bound=BaseModel)
Request = Union[ChatRequest, Mapping[str, Any]]

_CHAT_PATH = "/v1/chat/completions"


@dataclass(slots=True)
class RequestOptions:
    """Per-request overrides."""

    request_id: Optional[str] = None
    timeout: Optional[float] = None
    headers: Optional[dict[str, str]] = None


def _query(**filters: Any) -> dict[str, str]:
    """Drop unset filters and render booleans the way the gateway expects."""
    query: dict[str, str] = {}
    for key, value in filters.items():
        if value is None:
            continue
        query[key] = str(value).lower() if isinstance(value, bool) else str(value)
    return query


def _batch_path(batch_id: str) -> str:
    if not isinstance(batch_id, str) or not batch_id:
        raise ValidationError("batch_id is required and must be a non-empty string")
    return f"/v1/batches/{quote(batch_id, safe='')}"


class ZaguanClient:
    """
    Client for the Zaguán chat-completion gateway (async only).

    Args:
        base_url: Gateway URL, e.g. ``https://api.zaguan.example.com``.
            Read from ``ZAGUAN_BASE_URL`` when omitted.
        api_key: Gateway API key. Read from ``ZAGUAN_API_KEY`` when omitted.
        timeout: Default request timeout in seconds.
        http_client: Optional pre-configured ``httpx.AsyncClient``.
        logger: Optional logger; defaults to this module's logger.
        name: Tag used in log lines; defaults to the class name.

    Raises:
        ZaguanError: if the configuration is invalid.
    """

    # Static helpers, usable without a client instance.
    reconstruct_message_from_chunks = staticmethod(reconstruct_message)
    extract_thinking = staticmethod(extract_thinking)
    has_reasoning_tokens = staticmethod(has_reasoning_tokens)

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        base_url = get_base_url() if base_url is None else base_url
        api_key = get_api_key() if api_key is None else api_key

        if not isinstance(base_url, str) or not base_url:
            raise ZaguanError("base_url is required and must be a non-empty string")
        if not isinstance(api_key, str) or not api_key:
            raise ZaguanError("api_key is required and must be a non-empty string")
        try:
            url = httpx.URL(base_url)
        except httpx.InvalidURL as exc:
            raise ZaguanError("base_url must be a valid URL") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ZaguanError("base_url must be a valid URL")
        if timeout is not None and (
            isinstance(timeout, bool)
            or not isinstance(timeout, (int, float))
            or timeout <= 0
        ):
            raise ZaguanError("timeout must be a positive number")

        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = float(timeout) if timeout is not None else DEFAULT_TIMEOUT
        self.logger = logger or logging.getLogger(__name__)
        self.name = name or self.__class__.__name__
        self._transport = HttpTransport(
            self.base_url, timeout=self.timeout, client=http_client
        )

    # --- chat --------------------------------------------------------------
    async def chat(
        self,
        request: Request,
        *,
        options: Optional[RequestOptions] = None,
    ) -> ChatResponse:
        """
        Send a chat completion request and return the complete response.

        When the request sets ``stream=True`` the response is streamed and
        reconstructed chunk by chunk; otherwise the JSON body is decoded
        directly.

        Raises:
            ValidationError: malformed request (no network call is made).
            APIError: the gateway answered with a non-2xx status.
            StreamDecodeError: a streamed event could not be decoded.
        """
        payload = self._checked(request)
        if payload.get("stream"):
            return await reconstruct_stream(self._open_stream(payload, options))
        data = await self._request_json("POST", _CHAT_PATH, options, json=payload)
        return self._parse(ChatResponse, data)

    def chat_stream(
        self,
        request: Request,
        *,
        options: Optional[RequestOptions] = None,
    ) -> ChunkStream:
        """
        Start a streaming chat completion.

        The request is validated immediately, so a `ValidationError` is
        raised by this call itself. The HTTP request is only sent when the
        returned stream is first advanced.

        Example
        -------
        >>> async for chunk in client.chat_stream(request):
        ...     print(chunk.choices[0].delta.content or "", end="")
        """
        payload = self._checked(request, stream=True)
        return self._open_stream(payload, options)

    def _open_stream(
        self, payload: dict[str, Any], options: Optional[RequestOptions]
    ) -> ChunkStream:
        headers, request_id = self._headers(options)
        body = self._stream_body(payload, headers, request_id, options)
        return ChunkStream(
            body, request_id=request_id, on_close=body.aclose, logger=self.logger
        )

    async def _stream_body(
        self,
        payload: dict[str, Any],
        headers: dict[str, str],
        request_id: str,
        options: Optional[RequestOptions],
    ) -> AsyncIterator[bytes]:
        response = await self._send(
            "POST",
            _CHAT_PATH,
            headers,
            request_id,
            options,
            json=payload,
            stream=True,
        )
        try:
            if not response.is_success:
                await response.aread()
                raise error_from_response(response, self.logger)
            async for piece in response.aiter_bytes():
                yield piece
        finally:
            await response.aclose()

    # --- Anthropic-compatible Messages API ----------------------------------
    async def messages(
        self,
        request: Mapping[str, Any],
        *,
        options: Optional[RequestOptions] = None,
    ) -> Message:
        """
        Send a request to the Anthropic-compatible ``/v1/messages`` endpoint.

        *request* follows Anthropic's ``MessageCreateParams`` shape
        (``model``, ``max_tokens``, ``messages``, optional ``system``,
        ``thinking``, ...).
        """
        payload = self._checked(request)
        data = await self._request_json("POST", "/v1/messages", options, json=payload)
        return self._parse(Message, data)

    # --- models ------------------------------------------------------------
    async def list_models(
        self, *, options: Optional[RequestOptions] = None
    ) -> list[ModelInfo]:
        data = await self._request_json("GET", "/v1/models", options)
        if isinstance(data, dict):
            data = data.get("data", [])
        return [self._parse(ModelInfo, item) for item in data]

    async def get_capabilities(
        self,
        *,
        provider: Optional[str] = None,
        supports_vision: Optional[bool] = None,
        supports_tools: Optional[bool] = None,
        supports_reasoning: Optional[bool] = None,
        options: Optional[RequestOptions] = None,
    ) -> list[ModelCapabilities]:
        """Model capabilities, optionally filtered on the server side."""
        params = _query(
            provider=provider,
            supports_vision=supports_vision,
            supports_tools=supports_tools,
            supports_reasoning=supports_reasoning,
        )
        data = await self._request_json("GET", "/v1/capabilities", options, params=params)
        if isinstance(data, dict):
            data = data.get("data", [])
        return [self._parse(ModelCapabilities, item) for item in data]

    # --- credits -----------------------------------------------------------
    async def get_credits_balance(
        self, *, options: Optional[RequestOptions] = None
    ) -> CreditsBalance:
        data = await self._request_json("GET", "/v1/credits/balance", options)
        return self._parse(CreditsBalance, data)

    async def get_credits_history(
        self,
        *,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        model: Optional[str] = None,
        provider: Optional[str] = None,
        options: Optional[RequestOptions] = None,
    ) -> CreditsHistory:
        params = _query(
            page=page,
            page_size=page_size,
            start_date=start_date,
            end_date=end_date,
            model=model,
            provider=provider,
        )
        data = await self._request_json("GET", "/v1/credits/history", options, params=params)
        return self._parse(CreditsHistory, data)

    async def get_credits_stats(
        self,
        *,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        group_by: Optional[str] = None,
        model: Optional[str] = None,
        provider: Optional[str] = None,
        band: Optional[str] = None,
        options: Optional[RequestOptions] = None,
    ) -> CreditsStats:
        params = _query(
            start_date=start_date,
            end_date=end_date,
            group_by=group_by,
            model=model,
            provider=provider,
            band=band,
        )
        data = await self._request_json("GET", "/v1/credits/stats", options, params=params)
        return self._parse(CreditsStats, data)

    # --- embeddings and moderation -----------------------------------------
    async def create_embeddings(
        self,
        request: Mapping[str, Any],
        *,
        options: Optional[RequestOptions] = None,
    ) -> EmbeddingsResponse:
        """*request* carries ``model`` and ``input`` (a string or list of strings)."""
        data = await self._request_json("POST", "/v1/embeddings", options, json=dict(request))
        return self._parse(EmbeddingsResponse, data)

    async def create_moderation(
        self,
        request: Mapping[str, Any],
        *,
        options: Optional[RequestOptions] = None,
    ) -> ModerationResponse:
        data = await self._request_json("POST", "/v1/moderations", options, json=dict(request))
        return self._parse(ModerationResponse, data)

    # --- batches -----------------------------------------------------------
    async def create_batch(
        self,
        request: Mapping[str, Any],
        *,
        options: Optional[RequestOptions] = None,
    ) -> Batch:
        """
        Submit a batch job. *request* carries ``input_file_id``,
        ``endpoint`` and ``completion_window`` (``"24h"``).
        """
        data = await self._request_json("POST", "/v1/batches", options, json=dict(request))
        return self._parse(Batch, data)

    async def retrieve_batch(
        self, batch_id: str, *, options: Optional[RequestOptions] = None
    ) -> Batch:
        data = await self._request_json("GET", _batch_path(batch_id), options)
        return self._parse(Batch, data)

    async def cancel_batch(
        self, batch_id: str, *, options: Optional[RequestOptions] = None
    ) -> Batch:
        data = await self._request_json("POST", f"{_batch_path(batch_id)}/cancel", options)
        return self._parse(Batch, data)

    async def list_batches(self, *, options: Optional[RequestOptions] = None) -> BatchList:
        data = await self._request_json("GET", "/v1/batches", options)
        return self._parse(BatchList, data)

    # --- plumbing ----------------------------------------------------------
    def _checked(self, request: Request, *, stream: Optional[bool] = None) -> dict[str, Any]:
        outcome = validate_chat_request(request, stream=stream)
        if not outcome.ok:
            raise ValidationError(outcome.error)
        return outcome.payload

    def _headers(self, options: Optional[RequestOptions]) -> tuple[dict[str, str], str]:
        options = options or RequestOptions()
        request_id = options.request_id or new_request_id()
        return build_headers(self.api_key, request_id, options.headers), request_id

    async def _send(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        request_id: str,
        options: Optional[RequestOptions],
        **kwargs: Any,
    ) -> httpx.Response:
        timeout = options.timeout if options is not None else None
        self._log(f"{method} {path} request_id={request_id}", logging.DEBUG)
        started = time.perf_counter()
        try:
            response = await self._transport.send(
                method, path, headers=headers, timeout=timeout, **kwargs
            )
        except httpx.HTTPError as exc:
            latency_ms = (time.perf_counter() - started) * 1000
            self._log(
                f"{method} {path} failed after {latency_ms:.0f} ms "
                f"request_id={request_id}: {exc!r}",
                logging.WARNING,
            )
            raise
        latency_ms = (time.perf_counter() - started) * 1000
        self._log(
            f"{method} {path} -> {response.status_code} in {latency_ms:.0f} ms "
            f"request_id={response.headers.get(REQUEST_ID_HEADER) or request_id}"
        )
        return response

    async def _request_json(
        self,
        method: str,
        path: str,
        options: Optional[RequestOptions],
        **kwargs: Any,
    ) -> Any:
        headers, request_id = self._headers(options)
        response = await self._send(method, path, headers, request_id, options, **kwargs)
        if not response.is_success:
            raise error_from_response(response, self.logger)
        return read_json(response)

    def _parse(self, model: Type[M], data: Any) -> M:
        try:
            return model.model_validate(data)
        except PydanticValidationError as exc:
            raise ZaguanError(
                f"Unexpected {model.__name__} payload from gateway: {exc.error_count()} error(s)"
            ) from exc

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")

    # --- lifecycle ---------------------------------------------------------
    async def aclose(self) -> None:
        """Close the underlying HTTP client. Safe to call multiple times."""
        await self._transport.aclose()

    async def __aenter__(self) -> "ZaguanClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
