"""Tests for the Anthropic adapter with a fake SDK client."""

from types import SimpleNamespace

import pytest
from anthropic import APIConnectionError, AsyncAnthropic
from anthropic.types import TextBlock, ToolUseBlock

from onboarding_bot.config import ModelConfig
from onboarding_bot.llm.client import AnthropicChatModel, MissingCredentialsError, ModelReply


class FakeMessages:
    def __init__(self, response):
        self._response = response
        self.requests: list[dict] = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        return self._response


def _fake_client(content, stop_reason="end_turn"):
    messages = FakeMessages(SimpleNamespace(content=content, stop_reason=stop_reason))
    return SimpleNamespace(messages=messages), messages


class TestModelReply:
    def test_text_only(self):
        reply = ModelReply.from_blocks([{"type": "text", "text": "Hello"}])
        assert reply.text == "Hello"
        assert reply.has_tool_calls is False

    def test_text_and_tool_use(self):
        reply = ModelReply.from_blocks([
            {"type": "text", "text": "Saving now."},
            {"type": "tool_use", "id": "toolu_1", "name": "complete", "input": {"a": 1}},
        ], stop_reason="tool_use")
        assert reply.text == "Saving now."
        assert reply.tool_calls[0].name == "complete"
        assert reply.tool_calls[0].input == {"a": 1}
        assert reply.stop_reason == "tool_use"
        assert len(reply.content) == 2

    def test_multiple_text_blocks_joined(self):
        reply = ModelReply.from_blocks([
            {"type": "text", "text": "One."},
            {"type": "text", "text": "Two."},
        ])
        assert reply.text == "One.\nTwo."


class TestAnthropicChatModel:
    @pytest.mark.asyncio
    async def test_request_shape(self):
        client, messages = _fake_client([TextBlock(type="text", text="Hi!")])
        config = ModelConfig(llm_model="claude-test", llm_max_tokens=256)
        model = AnthropicChatModel(config, client=client)
        tools = [{"name": "complete", "description": "d", "input_schema": {"type": "object"}}]

        reply = await model.complete(
            "SYSTEM", [{"role": "user", "content": "Start onboarding"}], tools
        )

        request = messages.requests[0]
        assert request["model"] == "claude-test"
        assert request["max_tokens"] == 256
        assert "temperature" not in request
        assert request["system"] == "SYSTEM"
        assert request["messages"] == [{"role": "user", "content": "Start onboarding"}]
        assert request["tools"] == tools
        assert reply.text == "Hi!"

    @pytest.mark.asyncio
    async def test_tools_omitted_when_empty(self):
        client, messages = _fake_client([TextBlock(type="text", text="Hi!")])
        model = AnthropicChatModel(ModelConfig(), client=client)
        await model.complete("SYSTEM", [{"role": "user", "content": "hi"}])
        assert "tools" not in messages.requests[0]

    @pytest.mark.asyncio
    async def test_tool_use_block_parsed(self):
        block = ToolUseBlock(type="tool_use", id="toolu_1", name="complete", input={"x": 1})
        client, _ = _fake_client([block], stop_reason="tool_use")
        model = AnthropicChatModel(ModelConfig(), client=client)

        reply = await model.complete("SYSTEM", [{"role": "user", "content": "hi"}])

        assert reply.has_tool_calls
        assert reply.tool_calls[0].id == "toolu_1"
        assert reply.content[0]["type"] == "tool_use"
        assert reply.stop_reason == "tool_use"

    @pytest.mark.asyncio
    async def test_sdk_errors_propagate(self):
        class BrokenMessages:
            async def create(self, **kwargs):
                raise RuntimeError("boom")

        model = AnthropicChatModel(ModelConfig(), client=SimpleNamespace(messages=BrokenMessages()))
        with pytest.raises(RuntimeError, match="boom"):
            await model.complete("SYSTEM", [{"role": "user", "content": "hi"}])

    def test_model_name_exposed(self):
        model = AnthropicChatModel(ModelConfig(llm_model="claude-x"), client=SimpleNamespace())
        assert model.model == "claude-x"


class TestRealClientRequest:
    """Requests built by the installed SDK against an unreachable endpoint."""

    @pytest.mark.asyncio
    async def test_request_reaches_transport(self):
        client = AsyncAnthropic(
            api_key="test-key", base_url="http://127.0.0.1:9", max_retries=0, timeout=5.0
        )
        model = AnthropicChatModel(ModelConfig(llm_model="claude-test"), client=client)
        tools = [{"name": "complete", "description": "d", "input_schema": {"type": "object"}}]

        with pytest.raises(APIConnectionError):
            await model.complete("SYSTEM", [{"role": "user", "content": "hi"}], tools)

    @pytest.mark.asyncio
    async def test_missing_credentials_fail_the_call(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        monkeypatch.delenv("ANTHROPIC_AUTH_TOKEN", raising=False)
        model = AnthropicChatModel(ModelConfig())

        with pytest.raises(MissingCredentialsError, match="ANTHROPIC_API_KEY"):
            await model.complete("SYSTEM", [{"role": "user", "content": "hi"}])

    def test_credentials_from_environment(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
        model = AnthropicChatModel(ModelConfig())
        assert model._has_credentials is True
