"""
Conversation loop around the completion service.

Each call to ``start`` or ``step`` is one explicit state transition: it
returns a ``StepResult`` carrying the new state, the text to show the user
and, once onboarding is complete, the validated record. There is no
process-wide completion flag; callers branch on the returned state.

Usage:
    loop = ConversationLoop(AnthropicChatModel())
    result = await loop.start()
    while not result.is_terminal:
        result = await loop.step(input("You: "))
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from onboarding_bot.config import ConversationConfig, settings
from onboarding_bot.conversation.completion import (
    COMPLETE_TOOL,
    COMPLETE_TOOL_NAME,
    CompletionResult,
    reject_unknown_tool,
    validate_completion,
)
from onboarding_bot.conversation.state_machine import (
    TERMINAL_STATES,
    ConversationState,
    ConversationStateMachine,
    TransitionTrigger,
)
from onboarding_bot.llm.client import ModelReply, ToolCall
from onboarding_bot.logging_context import set_session_id
from onboarding_bot.prompts.system_prompts import ONBOARDING_SYSTEM_PROMPT
from onboarding_bot.schemas.conversation_schema import Role, Transcript
from onboarding_bot.utils import new_session_id

logger = logging.getLogger(__name__)


@dataclass
class StepResult:
    """What one loop step produced."""
    state: ConversationState
    reply: str = ""
    record: Optional[dict[str, Any]] = None
    errors: list[str] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        return self.state == ConversationState.COMPLETED

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES


class ConversationLoop:
    """
    Drives one onboarding conversation.

    The transcript and the state machine belong to the loop and are only
    touched between turns. ``model`` is any object exposing an async
    ``complete(system, messages, tools) -> ModelReply``.
    """

    def __init__(
        self,
        model: Any,
        system_prompt: str = ONBOARDING_SYSTEM_PROMPT,
        tools: Optional[list[dict[str, Any]]] = None,
        config: Optional[ConversationConfig] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self._model = model
        self._system_prompt = system_prompt
        self._tools = tools if tools is not None else [COMPLETE_TOOL]
        self._config = config or settings.conversation
        self.session_id = session_id or new_session_id()
        self._sm = ConversationStateMachine()
        self._transcript = Transcript()
        self._record: Optional[dict[str, Any]] = None
        self._model_calls = 0
        self._started = False
        set_session_id(self.session_id)
        logger.debug("Conversation loop created: %s", self.session_id)

    @property
    def state(self) -> ConversationState:
        return self._sm.current_state

    @property
    def transcript(self) -> Transcript:
        return self._transcript

    @property
    def record(self) -> Optional[dict[str, Any]]:
        return self._record

    @property
    def completed(self) -> bool:
        return self._sm.current_state == ConversationState.COMPLETED

    @property
    def model_calls(self) -> int:
        return self._model_calls

    @property
    def exit_sentinel(self) -> str:
        return self._config.exit_sentinel

    def get_state_trace(self) -> list[str]:
        return self._sm.get_state_trace()

    def is_exit(self, text: str) -> bool:
        return text.strip().lower() == self._config.exit_sentinel.strip().lower()

    async def start(self) -> StepResult:
        """Send the seed message and return the model's greeting."""
        if self._started:
            raise RuntimeError("Conversation already started")
        self._started = True
        logger.debug("Starting conversation")
        self._transcript.append(Role.USER, self._config.seed_message)
        return await self._run_model_turn()

    async def step(self, user_text: str) -> StepResult:
        """Handle one line typed by the user.

        Raises:
            InvalidTransitionError: If the conversation is already over.
        """
        if self.is_exit(user_text):
            self._sm.transition(TransitionTrigger.USER_EXIT)
            logger.debug("User requested to exit")
            return StepResult(state=self.state)

        self._sm.transition(TransitionTrigger.USER_MESSAGE)
        self._transcript.append(Role.USER, user_text)
        return await self._run_model_turn()

    def close(self) -> StepResult:
        """End the session because input is no longer available."""
        if self._sm.current_state == ConversationState.AWAITING_USER:
            self._sm.transition(TransitionTrigger.INPUT_CLOSED)
            logger.debug("Input closed, conversation ended")
        return StepResult(state=self.state, record=self._record)

    async def _invoke_model(self) -> ModelReply:
        self._model_calls += 1
        logger.debug(
            "Invoking model (call %d, %d messages)",
            self._model_calls, len(self._transcript),
        )
        return await self._model.complete(
            self._system_prompt, self._transcript.to_api(), self._tools
        )

    async def _run_model_turn(self) -> StepResult:
        rejections = 0
        while True:
            reply = await self._invoke_model()

            if not reply.has_tool_calls:
                if reply.text:
                    self._transcript.append(Role.ASSISTANT, reply.text)
                self._sm.transition(TransitionTrigger.REPLY_RECEIVED)
                return StepResult(state=self.state, reply=reply.text)

            self._transcript.append(Role.ASSISTANT, reply.content)
            outcomes = [(call, self._evaluate(call)) for call in reply.tool_calls]
            self._transcript.append(Role.USER, [_tool_result(c, r) for c, r in outcomes])

            accepted = next((r for _, r in outcomes if r.accepted), None)
            if accepted is not None:
                self._record = accepted.payload
                self._sm.transition(TransitionTrigger.COMPLETION_ACCEPTED)
                logger.info("Onboarding completed")
                return StepResult(state=self.state, reply=reply.text, record=self._record)

            errors = [e for _, r in outcomes for e in r.errors]
            rejections += 1
            if rejections > self._config.max_completion_rejections:
                self._sm.transition(TransitionTrigger.REJECTIONS_EXHAUSTED)
                logger.warning(
                    "Completion rejected %d times, waiting for user input", rejections
                )
                text = reply.text or (
                    "I still need a few corrections before I can finish: " + "; ".join(errors)
                )
                return StepResult(state=self.state, reply=text, errors=errors)

            self._sm.transition(TransitionTrigger.COMPLETION_REJECTED)
            logger.debug("Completion rejected, asking model to follow up: %s", errors)

    def _evaluate(self, call: ToolCall) -> CompletionResult:
        if call.name != COMPLETE_TOOL_NAME:
            return reject_unknown_tool(call.name)
        return validate_completion(call.input)


def _tool_result(call: ToolCall, result: CompletionResult) -> dict[str, Any]:
    block: dict[str, Any] = {
        "type": "tool_result",
        "tool_use_id": call.id,
        "content": result.message,
    }
    if not result.accepted:
        block["is_error"] = True
    return block
