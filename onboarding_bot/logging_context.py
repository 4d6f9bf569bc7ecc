"""Session ID logging context.

Every log line of a run carries the onboarding session ID, so one session's
output can be grepped end to end. ``configure_logging`` attaches
``SessionIdFilter`` to the root handlers; the filter copies the current
context's ID onto each record as ``session_id`` for the format string.

Usage:
    from onboarding_bot.logging_context import set_session_id

    set_session_id("onboarding-1718000000000")
    logger.debug("Calling model")
    # 2024-06-10 09:00:00 [onboarding_bot.conversation.loop] [onboarding-1718000000000] DEBUG: Calling model
"""

import logging
from contextvars import ContextVar
from typing import Iterable

NO_SESSION_ID = "-"

_session_id: ContextVar[str] = ContextVar("session_id", default=NO_SESSION_ID)


def set_session_id(session_id: str) -> None:
    _session_id.set(session_id)


def get_session_id() -> str:
    return _session_id.get()


class SessionIdFilter(logging.Filter):
    """Stamps ``session_id`` on records; never drops one."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def attach_session_filter(handlers: Iterable[logging.Handler]) -> None:
    """Add one ``SessionIdFilter`` to each handler that lacks it."""
    for handler in handlers:
        if not any(isinstance(f, SessionIdFilter) for f in handler.filters):
            handler.addFilter(SessionIdFilter())
