"""
Shared HTTP request helpers for routing backends.

Keeps JSON request/response handling and network error mapping consistent
across the Mapbox, OpenRouteService and Valhalla adapters. Vendor-specific
status and body interpretation is left to each adapter.
"""

from __future__ import annotations

import asyncio
import json as jsonlib
import logging
from typing import TYPE_CHECKING, Any

import aiohttp

from core.exceptions import (
    ExternalServiceError,
    ProviderTimeoutError,
    ServiceUnavailableError,
    UnknownProviderError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


def _parse_body(text: str) -> Any:
    if not text:
        return None
    try:
        return jsonlib.loads(text)
    except ValueError:
        return text


async def request_json(
    method: str,
    url: str,
    *,
    session: Any,
    params: dict[str, Any] | None = None,
    json: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    expected_status: int | Iterable[int] = 200,
    service_name: str = "Service",
    provider: str | None = None,
    timeout: float | None = None,
) -> Any:
    """Issue a JSON request and return the decoded body.

    Timeouts raise ProviderTimeoutError, connection failures raise
    ServiceUnavailableError, and unexpected statuses raise
    ExternalServiceError with the status and decoded body in ``details``.
    """
    method_upper = method.upper()
    if isinstance(expected_status, int):
        expected = {expected_status}
    else:
        expected = set(expected_status)

    if method_upper == "GET":
        request_fn = session.get
    elif method_upper == "POST":
        request_fn = session.post
    else:
        msg = f"{service_name} request error: unsupported method {method_upper}"
        raise UnknownProviderError(msg, provider=provider, details={"url": url})

    request_kwargs: dict[str, Any] = {
        "params": params,
        "json": json,
        "headers": headers,
    }
    if timeout is not None:
        request_kwargs["timeout"] = aiohttp.ClientTimeout(total=timeout)

    try:
        async with request_fn(url, **request_kwargs) as response:
            if response.status not in expected:
                body = _parse_body(await response.text())
                msg = f"{service_name} error: {response.status}"
                details: dict[str, Any] = {
                    "status": response.status,
                    "body": body,
                }
                if response.status == 429:
                    details["retry_after"] = response.headers.get("Retry-After")
                raise ExternalServiceError(msg, details)
            return await response.json()
    except asyncio.TimeoutError as exc:
        msg = f"{service_name} request timeout after {timeout}s"
        logger.warning("%s timed out (provider=%s)", service_name, provider)
        raise ProviderTimeoutError(
            msg,
            provider=provider,
            details={"timeout": timeout},
        ) from exc
    except aiohttp.ClientConnectionError as exc:
        msg = f"{service_name} connection failed: {exc}"
        logger.warning("%s unreachable (provider=%s): %s", service_name, provider, exc)
        raise ServiceUnavailableError(msg, provider=provider) from exc
    except aiohttp.ClientError as exc:
        msg = f"{service_name} request error: {exc}"
        raise UnknownProviderError(msg, provider=provider) from exc
