"""Caller side of the AI proxy.

Workflow controllers never talk to the LLM directly: they invoke an action
through an AI proxy, which is either dispatched in-process or reached over
HTTP when ``AI_PROXY_URL`` is configured. Both transports fold every failure
into the AIProxyError family so callers only need one error path.
"""

import logging
from typing import Any, Protocol, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from app.core.config import get_settings
from app.core.errors import (
    AIProxyReportedError,
    AIProxyTransportError,
    AIResponseShapeError,
)
from app.core.logging import get_logger, log_event
from app.core.schemas_ai import AIAction, AIProxyResponse

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class AIProxy(Protocol):
    async def invoke(self, action: str, payload: dict[str, Any]) -> AIProxyResponse: ...


class LocalAIProxy:
    """Dispatches actions in-process."""

    async def invoke(self, action: str, payload: dict[str, Any]) -> AIProxyResponse:
        from app.core.ai_gateway import dispatch

        _, response = await dispatch(action, payload)
        return response


class HttpAIProxy:
    """Posts ``{action, payload}`` to a remote AI proxy endpoint."""

    def __init__(self, url: str, token: str | None = None, timeout: float = 120.0):
        self.url = url
        self.token = token
        self.timeout = timeout

    async def invoke(self, action: str, payload: dict[str, Any]) -> AIProxyResponse:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.url, json={"action": action, "payload": payload}, headers=headers
            )
        # The proxy reports failures in the body with 4xx/5xx codes
        return AIProxyResponse.model_validate(response.json())


def get_ai_proxy(token: str | None = None) -> AIProxy:
    """Return the configured AI proxy transport."""
    settings = get_settings()
    if settings.AI_PROXY_URL:
        return HttpAIProxy(settings.AI_PROXY_URL, token=token, timeout=settings.AI_PROXY_TIMEOUT_SECONDS)
    return LocalAIProxy()


async def invoke_action(
    action: AIAction,
    payload: dict[str, Any],
    shape: type[T],
    token: str | None = None,
) -> T:
    """
    Invoke an AI proxy action and validate its data.

    Args:
        action: Action to run
        payload: Action payload
        shape: Pydantic model the returned ``data`` must match
        token: Caller's access token, forwarded to a remote proxy

    Returns:
        Validated data

    Raises:
        AIProxyTransportError: Proxy could not be reached
        AIProxyReportedError: Proxy answered ``success: false``
        AIResponseShapeError: ``data`` did not match ``shape``
    """
    proxy = get_ai_proxy(token)
    try:
        response = await proxy.invoke(action.value, payload)
    except (httpx.HTTPError, ValueError) as e:
        log_event(logger, logging.ERROR, "ai_proxy_transport_error", action=action.value, message=str(e))
        raise AIProxyTransportError(str(e)) from e

    if not response.success:
        message = response.error or "Unknown error from AI gateway"
        log_event(logger, logging.ERROR, "ai_proxy_reported_error", action=action.value, message=message)
        raise AIProxyReportedError(message)

    try:
        return shape.model_validate(response.data or {})
    except ValidationError as e:
        log_event(logger, logging.ERROR, "ai_proxy_shape_error", action=action.value, message=str(e))
        raise AIResponseShapeError(f"Unexpected AI response shape for {action.value}") from e
