"""Transcript schemas for the onboarding conversation."""

from enum import Enum
from typing import Any, Iterator, Union

from pydantic import BaseModel


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatMessage(BaseModel):
    """A single role-tagged message.

    ``content`` is plain text, or a list of content blocks when the message
    carries a tool invocation or a tool result.
    """

    role: Role
    content: Union[str, list[dict[str, Any]]]

    def to_api(self) -> dict[str, Any]:
        return {"role": self.role.value, "content": self.content}


class Transcript:
    """Append-only message history owned by one conversation loop."""

    def __init__(self) -> None:
        self._messages: list[ChatMessage] = []

    def append(self, role: Role, content: Union[str, list[dict[str, Any]]]) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        self._messages.append(message)
        return message

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def to_api(self) -> list[dict[str, Any]]:
        """Render the history in the shape the Messages API expects."""
        return [m.to_api() for m in self._messages]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(self._messages)
