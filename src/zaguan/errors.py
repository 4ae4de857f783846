"""
Typed errors for the Zaguán SDK, and the classifier that turns a non-2xx
gateway response into one of them.

`classify_error` never raises: an empty or non-JSON body degrades to a
plain `APIError` whose message still names the HTTP status.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Final, Mapping, Optional

__all__: tuple[str, ...] = (
    "ZaguanError",
    "ValidationError",
    "EmptyStreamError",
    "StreamDecodeError",
    "APIError",
    "RateLimitError",
    "InsufficientCreditsError",
    "BandAccessDeniedError",
    "classify_error",
    "REQUEST_ID_HEADER",
    "RETRY_AFTER_HEADER",
)

REQUEST_ID_HEADER: Final = "X-Request-Id"
RETRY_AFTER_HEADER: Final = "Retry-After"

_logger = logging.getLogger(__name__)


class ZaguanError(Exception):
    """Base class for every error raised by the SDK."""


class ValidationError(ZaguanError, ValueError):
    """Caller input was rejected before any network call was made."""


class EmptyStreamError(ZaguanError, ValueError):
    """Reconstruction was asked to fold zero chunks."""

    def __init__(
        self, message: str = "Cannot reconstruct message from empty chunks array"
    ) -> None:
        super().__init__(message)


class StreamDecodeError(ZaguanError):
    """A streamed event carried a payload that is not a valid chunk.

    Attributes:
        payload: The raw payload text of the offending event.
        request_id: Correlation id of the stream, when known.
    """

    def __init__(
        self, message: str, *, payload: str, request_id: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.payload = payload
        self.request_id = request_id


class APIError(ZaguanError):
    """The gateway answered with a non-success HTTP status.

    Attributes:
        status_code: The real HTTP status.
        message: `error.message` from the body, or an ``HTTP <status>`` fallback.
        request_id: Value of the ``X-Request-Id`` response header, or None.
        error_type: `error.type` from the body, if any.
        body: The parsed JSON body, or None when it was empty or not JSON.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        request_id: Optional[str] = None,
        *,
        error_type: Optional[str] = None,
        body: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.request_id = request_id
        self.error_type = error_type
        self.body = body

    def to_dict(self) -> dict[str, Any]:
        data = {k: v for k, v in vars(self).items() if not k.startswith("_")}
        data["name"] = type(self).__name__
        return data

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self.to_dict() == other.to_dict()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self.status_code, self.message, self.request_id))

    def __str__(self) -> str:
        if self.request_id:
            return f"{self.message} (status {self.status_code}, request id {self.request_id})"
        return f"{self.message} (status {self.status_code})"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(status_code={self.status_code!r}, "
            f"message={self.message!r}, request_id={self.request_id!r})"
        )


class RateLimitError(APIError):
    """HTTP 429. `retry_after` is the server's suggested delay in seconds."""

    def __init__(
        self,
        message: str,
        status_code: int = 429,
        request_id: Optional[str] = None,
        retry_after: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(status_code, message, request_id, **kwargs)
        self.retry_after = retry_after


class InsufficientCreditsError(APIError):
    """HTTP 402. The account cannot pay for the request."""

    def __init__(
        self,
        message: str,
        status_code: int = 402,
        request_id: Optional[str] = None,
        credits_required: Optional[float] = None,
        credits_remaining: Optional[float] = None,
        reset_date: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(status_code, message, request_id, **kwargs)
        self.credits_required = credits_required
        self.credits_remaining = credits_remaining
        self.reset_date = reset_date


class BandAccessDeniedError(APIError):
    """HTTP 403 with ``error.type == "band_access_denied"``.

    The requested model belongs to a band the caller's tier does not unlock.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 403,
        request_id: Optional[str] = None,
        band: Optional[str] = None,
        required_tier: Optional[str] = None,
        current_tier: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(status_code, message, request_id, **kwargs)
        self.band = band
        self.required_tier = required_tier
        self.current_tier = current_tier


# --------------------------------------------------------------------------- #
# Classification
# --------------------------------------------------------------------------- #

def _parse_body(body: str | bytes | None) -> Optional[dict[str, Any]]:
    if not body:
        return None
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    try:
        parsed = json.loads(body)
    except (ValueError, RecursionError):
        # RecursionError: pathologically nested bodies
        return None
    return parsed if isinstance(parsed, dict) else None


def _error_fields(parsed: Optional[dict[str, Any]]) -> dict[str, Any]:
    if parsed is None:
        return {}
    error = parsed.get("error")
    return error if isinstance(error, dict) else {}


_LEADING_INT: Final = re.compile(r"\s*([+-]?\d+)")


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Leading integer of the header ("30.5" -> 30); None when there is none."""
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _number_or_none(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _rate_limited(status, message, request_id, fields, headers, common):
    return RateLimitError(
        message,
        status,
        request_id,
        _parse_retry_after(headers.get(RETRY_AFTER_HEADER)),
        **common,
    )


def _insufficient_credits(status, message, request_id, fields, headers, common):
    return InsufficientCreditsError(
        message,
        status,
        request_id,
        _number_or_none(fields.get("credits_required")),
        _number_or_none(fields.get("credits_remaining")),
        _str_or_none(fields.get("reset_date")),
        **common,
    )


def _forbidden(status, message, request_id, fields, headers, common):
    if fields.get("type") == "band_access_denied":
        return BandAccessDeniedError(
            message,
            status,
            request_id,
            _str_or_none(fields.get("band")),
            _str_or_none(fields.get("required_tier")),
            _str_or_none(fields.get("current_tier")),
            **common,
        )
    return APIError(status, message, request_id, **common)


_Builder = Callable[..., APIError]

# Statuses without an entry (401 included) map to a plain APIError.
_STATUS_BUILDERS: Final[dict[int, _Builder]] = {
    402: _insufficient_credits,
    403: _forbidden,
    429: _rate_limited,
}


class _CaseInsensitiveHeaders:
    """Minimal case-insensitive view over a plain mapping of headers."""

    def __init__(self, headers: Mapping[str, str] | None) -> None:
        self._data = {k.lower(): v for k, v in (headers or {}).items()}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key.lower())


def classify_error(
    status_code: int,
    body: str | bytes | None,
    headers: Mapping[str, str] | None = None,
    *,
    reason_phrase: str = "",
    logger: Optional[logging.Logger] = None,
) -> APIError:
    """
    Build the typed error for a non-success gateway response.

    Args:
        status_code: HTTP status of the response.
        body: Raw response body; may be empty or not JSON.
        headers: Response headers (looked up case-insensitively).
        reason_phrase: HTTP status text, used only in the fallback message.
        logger: Logger for recording the classification.

    Returns:
        An `APIError` or one of its subclasses. Never raises.
    """
    log = logger or _logger
    lookup = _CaseInsensitiveHeaders(headers)
    request_id = lookup.get(REQUEST_ID_HEADER) or None

    parsed = _parse_body(body)
    fields = _error_fields(parsed)
    message = fields.get("message")
    if not isinstance(message, str) or not message:
        message = f"HTTP {status_code}: {reason_phrase}" if reason_phrase else f"HTTP {status_code}"

    common = {"error_type": _str_or_none(fields.get("type")), "body": parsed}
    builder = _STATUS_BUILDERS.get(status_code)
    if builder is None:
        error = APIError(status_code, message, request_id, **common)
    else:
        error = builder(status_code, message, request_id, fields, lookup, common)

    log.warning(
        "Classified gateway error as %s",
        type(error).__name__,
        extra={"status_code": status_code, "request_id": request_id},
    )
    return error
