"""Tests for invoking AI proxy actions from workflows."""

from unittest.mock import patch

import httpx
import pytest

from app.core.ai_client import HttpAIProxy, LocalAIProxy, get_ai_proxy, invoke_action
from app.core.errors import (
    AIProxyError,
    AIProxyReportedError,
    AIProxyTransportError,
    AIResponseShapeError,
)
from app.core.schemas_ai import AIAction, StepsData


@pytest.mark.asyncio
async def test_returns_validated_data(fake_ai):
    fake_ai.respond(AIAction.GENERATE_SOP_STEPS, {"steps": [{"step_number": 1, "title": "Open"}]})

    data = await invoke_action(AIAction.GENERATE_SOP_STEPS, {"transcript": "x"}, StepsData)

    assert isinstance(data, StepsData)
    assert data.steps[0].title == "Open"


@pytest.mark.asyncio
async def test_reported_failure(fake_ai):
    fake_ai.respond(AIAction.GENERATE_SOP_STEPS, error="Failed to parse AI response as JSON")

    with pytest.raises(AIProxyReportedError) as exc_info:
        await invoke_action(AIAction.GENERATE_SOP_STEPS, {"transcript": "x"}, StepsData)

    assert exc_info.value.message == "Failed to parse AI response as JSON"


@pytest.mark.asyncio
async def test_transport_failure(fake_ai):
    fake_ai.respond(AIAction.GENERATE_SOP_STEPS, error=httpx.ConnectError("connection refused"))

    with pytest.raises(AIProxyTransportError):
        await invoke_action(AIAction.GENERATE_SOP_STEPS, {"transcript": "x"}, StepsData)


@pytest.mark.asyncio
async def test_shape_mismatch(fake_ai):
    fake_ai.respond(AIAction.GENERATE_SOP_STEPS, {"steps": "not a list"})

    with pytest.raises(AIResponseShapeError):
        await invoke_action(AIAction.GENERATE_SOP_STEPS, {"transcript": "x"}, StepsData)


@pytest.mark.asyncio
async def test_all_failures_share_one_base(fake_ai):
    fake_ai.respond(AIAction.GENERATE_SOP_STEPS, error="boom")

    with pytest.raises(AIProxyError) as exc_info:
        await invoke_action(AIAction.GENERATE_SOP_STEPS, {"transcript": "x"}, StepsData)

    assert exc_info.value.user_message


def test_local_proxy_without_url():
    with patch("app.core.ai_client.get_settings") as mock_settings:
        mock_settings.return_value.AI_PROXY_URL = None
        assert isinstance(get_ai_proxy("tok"), LocalAIProxy)


def test_http_proxy_with_url():
    with patch("app.core.ai_client.get_settings") as mock_settings:
        mock_settings.return_value.AI_PROXY_URL = "https://proxy.example.com/ai"
        mock_settings.return_value.AI_PROXY_TIMEOUT_SECONDS = 30.0
        proxy = get_ai_proxy("tok")

    assert isinstance(proxy, HttpAIProxy)
    assert proxy.url == "https://proxy.example.com/ai"
    assert proxy.token == "tok"
