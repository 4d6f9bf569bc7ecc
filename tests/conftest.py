"""Shared test fixtures and helpers."""

import copy
from typing import Any, Optional

import pytest

from onboarding_bot.config import ConversationConfig
from onboarding_bot.conversation.loop import ConversationLoop
from onboarding_bot.conversation.state_machine import ConversationStateMachine
from onboarding_bot.llm.client import ModelReply

VALID_RECORD: dict[str, Any] = {
    "businessName": "Acme Cuts",
    "firstServices": {
        "serviceName": "Haircut",
        "durationInMinutes": 30,
        "price": 20,
        "priceCurrency": "USD",
    },
    "businessHours": [
        {"startTime24hr": "09:00", "endTime24hr": "17:00", "dayOfWeek": "Monday"},
    ],
    "yourEmailAddress": "a@b.com",
    "doYouWantUsToTakePaymentsDirectlyFromYourCustomers": True,
}


def valid_record() -> dict[str, Any]:
    """Return a fresh deep copy of the example record."""
    return copy.deepcopy(VALID_RECORD)


def text_reply(text: str) -> ModelReply:
    """Helper to create a plain conversational reply."""
    return ModelReply.from_blocks([{"type": "text", "text": text}], stop_reason="end_turn")


def tool_reply(
    payload: Any,
    name: str = "complete",
    call_id: str = "toolu_01",
    text: str = "",
) -> ModelReply:
    """Helper to create a reply that invokes a tool."""
    blocks: list[dict[str, Any]] = []
    if text:
        blocks.append({"type": "text", "text": text})
    blocks.append({"type": "tool_use", "id": call_id, "name": name, "input": payload})
    return ModelReply.from_blocks(blocks, stop_reason="tool_use")


class ScriptedChatModel:
    """In-memory stand-in for the completion service.

    Returns the scripted replies in order and records every request.
    """

    def __init__(self, replies: Optional[list[ModelReply]] = None) -> None:
        self._replies = list(replies or [])
        self.calls: list[dict[str, Any]] = []

    async def complete(self, system, messages, tools=None) -> ModelReply:
        self.calls.append({
            "system": system,
            "messages": copy.deepcopy(messages),
            "tools": tools,
        })
        if not self._replies:
            raise AssertionError("Unexpected model call")
        return self._replies.pop(0)


def make_loop(
    replies: list[ModelReply],
    max_completion_rejections: int = 2,
    **kwargs: Any,
) -> tuple[ConversationLoop, ScriptedChatModel]:
    """Build a loop wired to a scripted model."""
    model = ScriptedChatModel(replies)
    config = ConversationConfig(
        exit_sentinel="exit",
        seed_message="Start onboarding",
        max_completion_rejections=max_completion_rejections,
    )
    loop = ConversationLoop(model, config=config, session_id="onboarding-test", **kwargs)
    return loop, model


@pytest.fixture
def state_machine():
    return ConversationStateMachine()


@pytest.fixture
def record():
    return valid_record()
