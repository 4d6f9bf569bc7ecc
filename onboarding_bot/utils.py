"""Shared utilities used across the onboarding bot."""

import json
import time
from typing import Any, Optional


def new_session_id(now: Optional[float] = None) -> str:
    """Build a session ID from the current epoch time in milliseconds.

    Examples:
        >>> new_session_id(1718000000.123)
        'onboarding-1718000000123'
    """
    if now is None:
        now = time.time()
    return f"onboarding-{int(round(now * 1000))}"


def to_pretty_json(value: Any) -> str:
    """Serialize a record for console output."""
    return json.dumps(value, indent=2, ensure_ascii=False)
