"""Tests for processdoc.llm_client — OpenRouter chat-completions over httpx."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from processdoc.config import LLMConfig
from processdoc.llm_client import LLMClient, LLMError, is_transient


@pytest.fixture
def llm() -> LLMClient:
    return LLMClient(LLMConfig(api_key="or-test", base_url="https://llm.test/api/v1", model="test/model"))


def _mock_response(json_data: dict) -> MagicMock:
    resp = MagicMock()
    resp.status_code = 200
    resp.json.return_value = json_data
    resp.raise_for_status = MagicMock()
    return resp


def _patched_client(resp: MagicMock):
    instance = AsyncMock()
    instance.post = AsyncMock(return_value=resp)
    instance.__aenter__ = AsyncMock(return_value=instance)
    instance.__aexit__ = AsyncMock(return_value=False)
    return instance


@pytest.mark.asyncio
async def test_generate_text(llm: LLMClient) -> None:
    resp = _mock_response({
        "choices": [{"message": {"role": "assistant", "content": "# Doc"}}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 3},
    })
    with patch("httpx.AsyncClient") as MockClient:
        instance = _patched_client(resp)
        MockClient.return_value = instance

        text = await llm.generate_text("system prompt", "user prompt")

    assert text == "# Doc"
    call = instance.post.call_args
    assert call[0][0] == "https://llm.test/api/v1/chat/completions"
    assert call[1]["headers"]["Authorization"] == "Bearer or-test"
    body = call[1]["json"]
    assert body["model"] == "test/model"
    assert body["messages"] == [
        {"role": "system", "content": "system prompt"},
        {"role": "user", "content": "user prompt"},
    ]


@pytest.mark.asyncio
async def test_empty_completion_raises(llm: LLMClient) -> None:
    resp = _mock_response({"choices": [{"message": {"content": "   "}}]})
    with patch("httpx.AsyncClient") as MockClient:
        MockClient.return_value = _patched_client(resp)
        with pytest.raises(LLMError, match="Empty completion"):
            await llm.generate_text("s", "p")


@pytest.mark.asyncio
async def test_no_choices_raises(llm: LLMClient) -> None:
    with patch("httpx.AsyncClient") as MockClient:
        MockClient.return_value = _patched_client(_mock_response({"choices": []}))
        with pytest.raises(LLMError):
            await llm.generate_text("s", "p")


@pytest.mark.asyncio
async def test_missing_api_key() -> None:
    client = LLMClient(LLMConfig(api_key=""))
    with patch("httpx.AsyncClient") as MockClient:
        with pytest.raises(LLMError, match="OPENROUTER_API_KEY"):
            await client.generate_text("s", "p")
        MockClient.assert_not_called()


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://llm.test/api/v1/chat/completions")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


class TestIsTransient:
    def test_server_error(self) -> None:
        assert is_transient(_status_error(502)) is True

    def test_rate_limited(self) -> None:
        assert is_transient(_status_error(429)) is True

    def test_client_error(self) -> None:
        assert is_transient(_status_error(401)) is False

    def test_timeout(self) -> None:
        assert is_transient(httpx.ReadTimeout("slow")) is True

    def test_connect_error(self) -> None:
        assert is_transient(httpx.ConnectError("refused")) is True

    def test_llm_error(self) -> None:
        assert is_transient(LLMError("empty")) is False
