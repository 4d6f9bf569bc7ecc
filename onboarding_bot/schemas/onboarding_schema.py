"""Onboarding record data models and the JSON schema handed to the model."""

import copy
from typing import Annotated, Any, Literal, Union, get_args

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    WithJsonSchema,
)

DayOfWeek = Literal[
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
]

DAYS_OF_WEEK: tuple[str, ...] = get_args(DayOfWeek)

# Accepts ints and floats but keeps the caller's representation (30 stays 30).
Number = Annotated[Union[StrictInt, StrictFloat], WithJsonSchema({"type": "number"})]


class _ClosedModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ServiceEssentials(_ClosedModel):
    """The first service the business offers."""
    serviceName: StrictStr
    durationInMinutes: Number
    price: Number
    priceCurrency: StrictStr


class HoursForDay(_ClosedModel):
    """One weekly opening window."""
    startTime24hr: StrictStr
    endTime24hr: StrictStr
    dayOfWeek: DayOfWeek


class OnboardingRecord(_ClosedModel):
    """
    The complete onboarding payload.

    Every field is required and unknown keys are rejected at every level,
    so an instance only exists once the conversation has gathered everything.
    """
    businessName: StrictStr
    firstServices: ServiceEssentials
    businessHours: list[HoursForDay]
    yourEmailAddress: EmailStr
    doYouWantUsToTakePaymentsDirectlyFromYourCustomers: StrictBool


def _inline_refs(node: Any, defs: dict[str, Any]) -> Any:
    if isinstance(node, dict):
        ref = node.get("$ref")
        if ref is not None:
            return _inline_refs(copy.deepcopy(defs[ref.rsplit("/", 1)[-1]]), defs)
        return {
            key: _inline_refs(value, defs)
            for key, value in node.items()
            if key not in ("title", "$defs")
        }
    if isinstance(node, list):
        return [_inline_refs(item, defs) for item in node]
    return node


def onboarding_json_schema() -> dict[str, Any]:
    """Return the OnboardingRecord JSON schema with all ``$ref`` entries inlined.

    Titles are stripped; property names are kept verbatim so the schema reads
    the same in the system prompt as in the tool definition.
    """
    raw = OnboardingRecord.model_json_schema()
    return _inline_refs(raw, raw.get("$defs", {}))
