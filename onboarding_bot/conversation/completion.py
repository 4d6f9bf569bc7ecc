"""
The ``complete`` structured action.

The model calls this tool once it believes every onboarding field has been
collected. The payload is only accepted when it validates against
``OnboardingRecord``; otherwise the call is rejected with a readable list of
problems that is fed back to the model as an error tool result.
"""

import logging
import copy
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import ValidationError

from onboarding_bot.schemas.onboarding_schema import OnboardingRecord, onboarding_json_schema

logger = logging.getLogger(__name__)

COMPLETE_TOOL_NAME = "complete"

COMPLETE_TOOL: dict[str, Any] = {
    "name": COMPLETE_TOOL_NAME,
    "description": "Mark onboarding as completed with onboarding data provided",
    "input_schema": onboarding_json_schema(),
}


@dataclass
class CompletionResult:
    """Outcome of validating a ``complete`` call."""
    accepted: bool
    record: Optional[OnboardingRecord] = None
    payload: Optional[dict[str, Any]] = None
    errors: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.accepted:
            return "Onboarding record accepted."
        return "Onboarding record rejected: " + "; ".join(self.errors)


def _format_error(error: dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "<record>"
    if error.get("type") == "missing":
        return f"{location}: field required"
    if error.get("type") == "extra_forbidden":
        return f"{location}: unexpected field"
    return f"{location}: {error.get('msg', 'invalid value')}"


def validate_completion(payload: Any) -> CompletionResult:
    """Validate a ``complete`` payload against the onboarding schema."""
    if not isinstance(payload, dict):
        return CompletionResult(
            accepted=False,
            errors=[f"<record>: expected an object, got {type(payload).__name__}"],
        )
    try:
        record = OnboardingRecord.model_validate(payload)
    except ValidationError as exc:
        errors = [_format_error(e) for e in exc.errors()]
        logger.info("Completion payload rejected (%d errors)", len(errors))
        logger.debug("Rejected payload errors: %s", errors)
        return CompletionResult(accepted=False, payload=payload, errors=errors)

    logger.info("Completion payload accepted for '%s'", record.businessName)
    return CompletionResult(accepted=True, record=record, payload=copy.deepcopy(payload))


def reject_unknown_tool(name: str) -> CompletionResult:
    """Build the rejection returned for any tool other than ``complete``."""
    logger.warning("Model requested unknown tool '%s'", name)
    return CompletionResult(
        accepted=False,
        errors=[f"unknown tool '{name}', only '{COMPLETE_TOOL_NAME}' is available"],
    )
