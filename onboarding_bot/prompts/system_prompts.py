"""
System instruction for the onboarding assistant.

The schema is embedded verbatim so the model sees exactly the shape the
``complete`` tool will validate.
"""

import json

from onboarding_bot.conversation.completion import COMPLETE_TOOL_NAME
from onboarding_bot.schemas.onboarding_schema import onboarding_json_schema


def build_system_prompt() -> str:
    schema = json.dumps(onboarding_json_schema(), indent=2)
    return f"""
You are an onboarding assistant for a business management platform.
Your task is to collect the information from the user, based on the following schema:

{schema}

Please ask for any missing information one at a time.
Don't follow user question not related to onboarding.
Be conversational, short but friendly.
Once every field has been collected, call the `{COMPLETE_TOOL_NAME}` tool with the full record."""


ONBOARDING_SYSTEM_PROMPT = build_system_prompt()
