"""API utilities for FastAPI route handling."""

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from core.constants import DISCONNECT_POLL_INTERVAL
from core.exceptions import (
    InvalidProfileError,
    ProviderError,
    ProviderNotFoundError,
    RoutingError,
    ServiceUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# nginx's "client closed request"; never seen by the departed client
CLIENT_CLOSED_REQUEST = 499


def error_response(
    status_code: int,
    code: str,
    message: str,
    **extra: Any,
) -> JSONResponse:
    content = {"code": code, "message": message}
    content.update({key: value for key, value in extra.items() if value is not None})
    return JSONResponse(status_code=status_code, content=content)


def api_route(logger: logging.Logger):
    """
    Decorator for FastAPI endpoints that provides standardized error handling.

    Wraps async endpoint functions with try/except to:
    - Re-raise HTTPException instances as-is
    - Map routing exceptions to JSON error bodies with the matching status
    - Log and convert other exceptions to a 500 error body

    Usage:
        @router.get("/api/example")
        @api_route(logger)
        async def my_endpoint():
            # ... business logic ...
            return result
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except ValidationError as e:
                logger.warning("Validation error in %s: %s", func.__name__, e.message)
                return error_response(
                    status.HTTP_400_BAD_REQUEST,
                    e.code,
                    e.message,
                    errors=e.details.get("errors"),
                )
            except ProviderNotFoundError as e:
                logger.info("Provider not found in %s: %s", func.__name__, e.message)
                return error_response(status.HTTP_404_NOT_FOUND, e.code, e.message)
            except InvalidProfileError as e:
                logger.info("Invalid profile in %s: %s", func.__name__, e.message)
                return error_response(
                    status.HTTP_400_BAD_REQUEST,
                    e.code,
                    e.message,
                    availableProfiles=e.available_profiles,
                )
            except ServiceUnavailableError as e:
                logger.warning(
                    "Provider %s unavailable in %s: %s",
                    e.provider,
                    func.__name__,
                    e.message,
                )
                return JSONResponse(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    content={
                        "code": ServiceUnavailableError.code,
                        "message": e.message,
                        "details": {"kind": e.code, **e.details},
                        "provider": e.provider,
                    },
                )
            except ProviderError as e:
                logger.error(
                    "Provider %s failed in %s (%s): %s",
                    e.provider,
                    func.__name__,
                    e.code,
                    e.message,
                )
                return error_response(
                    status.HTTP_500_INTERNAL_SERVER_ERROR,
                    "Error",
                    e.message,
                    provider=e.provider,
                    kind=e.code,
                )
            except RoutingError as e:
                # Catch-all for other custom exceptions
                logger.exception(
                    "Application error in %s: %s",
                    func.__name__,
                    e.message,
                )
                return error_response(
                    status.HTTP_500_INTERNAL_SERVER_ERROR,
                    "Error",
                    e.message,
                    provider=e.details.get("provider"),
                    kind=e.code,
                )
            except Exception as e:
                logger.exception("Unexpected error in %s", func.__name__)
                return error_response(
                    status.HTTP_500_INTERNAL_SERVER_ERROR,
                    "Error",
                    str(e) or type(e).__name__,
                )

        return wrapper

    return decorator


async def run_until_disconnected(
    request: Request,
    awaitable: Awaitable[T],
    *,
    poll_interval: float = DISCONNECT_POLL_INTERVAL,
) -> T | Response:
    """Await ``awaitable``, cancelling it if the client goes away first.

    Returns the awaitable's result, or a bare 499 response when the client
    disconnected and the work was cancelled.
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info(
                    "Client disconnected from %s; cancelling upstream call",
                    request.url.path,
                )
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
                return Response(status_code=CLIENT_CLOSED_REQUEST)
    finally:
        if not task.done():
            task.cancel()


def register_exception_handlers(app: FastAPI, logger: logging.Logger) -> None:
    """Render request-body validation failures in the routing error shape."""

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = [
            {
                "loc": list(error.get("loc", ())),
                "msg": error.get("msg", ""),
                "type": error.get("type", ""),
            }
            for error in exc.errors()
        ]
        logger.info(
            "Rejected %s %s: %d validation error(s)",
            request.method,
            request.url.path,
            len(errors),
        )
        message = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in errors
        )
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            ValidationError.code,
            message or "Invalid request",
            errors=errors,
        )
