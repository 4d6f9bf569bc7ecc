"""
Terminal front end for the onboarding conversation.

Reads lines from stdin, prints the assistant's replies in yellow and, when
the model's ``complete`` call is accepted, prints the record as JSON.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Optional

from onboarding_bot.conversation.loop import ConversationLoop, StepResult
from onboarding_bot.utils import to_pretty_json

logger = logging.getLogger(__name__)

GREEN = "\033[92m"
YELLOW = "\033[93m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


class ConsoleSession:
    """Runs one onboarding conversation in the terminal."""

    def __init__(
        self,
        loop: ConversationLoop,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], Any] = print,
        output_path: Optional[Path] = None,
    ) -> None:
        self.loop = loop
        self._input = input_fn
        self._print = output_fn
        self._output_path = output_path

    def bot_say(self, text: str) -> None:
        self._print(f"{YELLOW}Bot: {text}{RESET}")

    def system_log(self, text: str) -> None:
        self._print(f"{DIM}  >> {text}{RESET}")

    async def _read_line(self) -> Optional[str]:
        try:
            return await asyncio.to_thread(self._input, "You: ")
        except (EOFError, KeyboardInterrupt):
            return None

    async def run(self) -> StepResult:
        """Run until the record is accepted or the user leaves."""
        self._print("")
        self._print(f"{BOLD}{'=' * 60}{RESET}")
        self._print(f"{BOLD}  BUSINESS ONBOARDING ASSISTANT{RESET}")
        self._print(f"{BOLD}  Type '{self.loop.exit_sentinel}' to quit{RESET}")
        self._print(f"{BOLD}{'=' * 60}{RESET}")
        self._print("")

        result = await self.loop.start()
        self._show(result)

        while not result.is_terminal:
            line = await self._read_line()
            if line is None:
                result = self.loop.close()
                self._print(f"\n{DIM}Session ended.{RESET}")
                break
            if not line.strip():
                continue

            result = await self.loop.step(line)
            if result.is_terminal and not result.completed:
                self._print(f"\n{DIM}Session ended.{RESET}")
                break
            self._show(result)

        logger.debug("State trace: %s", " -> ".join(self.loop.get_state_trace()))
        return result

    def _show(self, result: StepResult) -> None:
        if result.reply:
            self.bot_say(result.reply)
        if result.errors:
            logger.debug("Completion errors: %s", result.errors)
        if result.completed and result.record is not None:
            self._print(f"{GREEN}Onboarding completed!{RESET}")
            self._print(to_pretty_json(result.record))
            if self._output_path is not None:
                self._output_path.write_text(to_pretty_json(result.record) + "\n", encoding="utf-8")
                self.system_log(f"Record written to {self._output_path}")
