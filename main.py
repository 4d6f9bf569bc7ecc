"""
Onboarding chatbot entry point.

Walks a business owner through the onboarding questionnaire in the
terminal and prints the collected record as JSON.

Usage:
    python main.py
    python main.py --output record.json
    python main.py --model claude-3-5-sonnet-20240620 --debug
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional

from anthropic import APIError

from onboarding_bot.config import configure_logging, settings

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Business onboarding chatbot")
    parser.add_argument("--model", default=None, help="Override LLM_MODEL")
    parser.add_argument("--output", type=Path, default=None, help="Write the record JSON here")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    from onboarding_bot.console import ConsoleSession
    from onboarding_bot.conversation.loop import ConversationLoop
    from onboarding_bot.llm.client import AnthropicChatModel, MissingCredentialsError

    args = _parse_args(argv)
    if args.debug:
        configure_logging(settings.log_level, debug=True)

    model_config = settings.model
    if args.model:
        model_config = dataclasses.replace(model_config, llm_model=args.model)

    loop = ConversationLoop(AnthropicChatModel(model_config))
    logger.debug("Session ID: %s", loop.session_id)
    session = ConsoleSession(loop, output_path=args.output)

    try:
        asyncio.run(session.run())
    except KeyboardInterrupt:
        print("\nSession ended.")
        return 0
    except (APIError, MissingCredentialsError):
        logger.exception("Completion service request failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
