"""
Completion service adapter.

Wraps the Anthropic Messages API behind a single ``complete`` call that
takes a system instruction, the transcript and the tool definitions, and
returns a ``ModelReply``. No retries: any SDK error propagates.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from anthropic import AsyncAnthropic

from onboarding_bot.config import ModelConfig, settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolCall:
    """A tool_use block requested by the model."""
    id: str
    name: str
    input: dict[str, Any]


@dataclass
class ModelReply:
    """One assistant turn as returned by the completion service."""
    text: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    stop_reason: Optional[str] = None
    content: list[dict[str, Any]] = field(default_factory=list)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    @classmethod
    def from_blocks(
        cls, blocks: list[dict[str, Any]], stop_reason: Optional[str] = None
    ) -> "ModelReply":
        """Build a reply from API-shaped content blocks."""
        texts = [b.get("text", "") for b in blocks if b.get("type") == "text"]
        calls = [
            ToolCall(id=b["id"], name=b["name"], input=dict(b.get("input") or {}))
            for b in blocks
            if b.get("type") == "tool_use"
        ]
        return cls(
            text="\n".join(t for t in texts if t).strip(),
            tool_calls=calls,
            stop_reason=stop_reason,
            content=list(blocks),
        )


class MissingCredentialsError(RuntimeError):
    """Raised on a model call when no Anthropic credential is configured."""


class AnthropicChatModel:
    """Non-streaming chat model backed by ``AsyncAnthropic``.

    An injected ``client`` is trusted as-is. A default client built from the
    environment is checked for an API key or auth token, and ``complete``
    raises ``MissingCredentialsError`` when neither is set.
    """

    def __init__(
        self,
        config: Optional[ModelConfig] = None,
        client: Optional[AsyncAnthropic] = None,
    ) -> None:
        self._config = config or settings.model
        if client is None:
            client = AsyncAnthropic()
            self._has_credentials = bool(client.api_key or client.auth_token)
        else:
            self._has_credentials = True
        self._client = client

    @property
    def model(self) -> str:
        return self._config.llm_model

    async def complete(
        self,
        system: str,
        messages: list[dict[str, Any]],
        tools: Optional[list[dict[str, Any]]] = None,
    ) -> ModelReply:
        """Send one request and wait for the whole reply.

        Raises:
            MissingCredentialsError: If neither ANTHROPIC_API_KEY nor
                ANTHROPIC_AUTH_TOKEN is set.
            anthropic.APIError: On any service or transport failure.
        """
        if not self._has_credentials:
            raise MissingCredentialsError(
                "No Anthropic credentials found: set ANTHROPIC_API_KEY"
            )
        kwargs: dict[str, Any] = {
            "model": self._config.llm_model,
            "max_tokens": self._config.llm_max_tokens,
            "system": system,
            "messages": messages,
        }
        if tools:
            kwargs["tools"] = tools

        logger.debug("Requesting completion (%d messages)", len(messages))
        response = await self._client.messages.create(**kwargs)
        blocks = [block.model_dump(exclude_none=True) for block in response.content]
        logger.debug(
            "Completion received: stop_reason=%s, blocks=%s",
            response.stop_reason, [b.get("type") for b in blocks],
        )
        return ModelReply.from_blocks(blocks, stop_reason=response.stop_reason)
