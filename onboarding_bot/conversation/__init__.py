from onboarding_bot.conversation.completion import (
    COMPLETE_TOOL,
    COMPLETE_TOOL_NAME,
    CompletionResult,
    validate_completion,
)
from onboarding_bot.conversation.state_machine import (
    ConversationState,
    ConversationStateMachine,
    InvalidTransitionError,
    TransitionTrigger,
)

__all__ = [
    "ConversationStateMachine",
    "ConversationState",
    "TransitionTrigger",
    "InvalidTransitionError",
    "COMPLETE_TOOL",
    "COMPLETE_TOOL_NAME",
    "CompletionResult",
    "validate_completion",
]
