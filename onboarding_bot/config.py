"""
Centralized configuration with environment variable overrides.

Model settings, conversation constants and logging toggles live here.
The API credential is read by the Anthropic SDK itself, so a missing key
fails the first model call rather than startup.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from onboarding_bot.logging_context import attach_session_filter

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] [%(session_id)s] %(levelname)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _env_flag(env_var: str, default: str = "false") -> bool:
    return os.getenv(env_var, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ModelConfig:
    """Completion service settings."""

    llm_model: str = os.getenv("LLM_MODEL", "claude-3-5-sonnet-20240620")
    llm_max_tokens: int = _safe_int("LLM_MAX_TOKENS", "1024")


@dataclass(frozen=True)
class ConversationConfig:
    """Conversation loop constants."""

    exit_sentinel: str = os.getenv("EXIT_SENTINEL", "exit")
    seed_message: str = os.getenv("SEED_MESSAGE", "Start onboarding")
    max_completion_rejections: int = _safe_int("MAX_COMPLETION_REJECTIONS", "2")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    model: ModelConfig = field(default_factory=ModelConfig)
    conversation: ConversationConfig = field(default_factory=ConversationConfig)
    log_level: str = os.getenv("LOG_LEVEL", "WARNING")
    debug: bool = _env_flag("DEBUG")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.model.llm_max_tokens < 1:
        raise ValueError(
            f"LLM_MAX_TOKENS must be >= 1, got {config.model.llm_max_tokens}"
        )
    if not config.conversation.exit_sentinel.strip():
        raise ValueError("EXIT_SENTINEL must not be empty")
    if not config.conversation.seed_message.strip():
        raise ValueError("SEED_MESSAGE must not be empty")
    if config.conversation.max_completion_rejections < 0:
        raise ValueError(
            "MAX_COMPLETION_REJECTIONS must be >= 0, "
            f"got {config.conversation.max_completion_rejections}"
        )


def configure_logging(level: str, debug: bool = False) -> None:
    """Install the root handler; ``debug`` wins over ``level``.

    Every root handler gets the session ID filter, so ``LOG_FORMAT`` can
    reference ``%(session_id)s`` for records from any logger.
    """
    resolved = logging.DEBUG if debug else getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    root = logging.getLogger()
    root.setLevel(resolved)
    attach_session_filter(root.handlers)


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    configure_logging(config.log_level, config.debug)
    logger.debug("Configuration loaded (model=%s)", config.model.llm_model)
    return config


# Singleton instance
settings = load_config()
