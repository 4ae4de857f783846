from __future__ import annotations

import os
import uuid
from typing import Final, Mapping, Optional

from dotenv import load_dotenv

__all__ = [
    "API_KEY_ENV",
    "BASE_URL_ENV",
    "DEFAULT_TIMEOUT",
    "get_api_key",
    "get_base_url",
    "new_request_id",
    "build_headers",
]

API_KEY_ENV: Final = "ZAGUAN_API_KEY"
BASE_URL_ENV: Final = "ZAGUAN_BASE_URL"
DEFAULT_TIMEOUT: Final = 60.0


def _from_env(env_var: str) -> str:
    load_dotenv()
    value = os.environ.get(env_var)
    if not value:
        raise RuntimeError(f"{env_var} missing")
    return value


def get_api_key() -> str:
    """Return the gateway API key from the environment (or ``.env``)."""
    return _from_env(API_KEY_ENV)


def get_base_url() -> str:
    """Return the gateway base URL from the environment (or ``.env``)."""
    return _from_env(BASE_URL_ENV)


def new_request_id() -> str:
    return str(uuid.uuid4())


def build_headers(
    api_key: str,
    request_id: str,
    extra: Optional[Mapping[str, str]] = None,
) -> dict[str, str]:
    """Default request headers; entries in *extra* override them."""
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "X-Request-Id": request_id,
        **(extra or {}),
    }
