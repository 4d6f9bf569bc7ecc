from onboarding_bot.llm.client import (
    AnthropicChatModel,
    MissingCredentialsError,
    ModelReply,
    ToolCall,
)

__all__ = ["AnthropicChatModel", "MissingCredentialsError", "ModelReply", "ToolCall"]
