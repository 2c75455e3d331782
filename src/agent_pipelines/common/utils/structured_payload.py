# helpers to pull a JSON payload out of free-form LLM output

import json
import re
from typing import Any

from agent_pipelines.common.errors import StructuredPayloadError

# first ```json ... ``` region; closing fence is optional so truncated responses still parse
_JSON_FENCE_PATTERN = re.compile(r"```json\s*(.*?)(?:```|$)", re.DOTALL | re.IGNORECASE)

def strip_markdown_fences(text: str) -> str:
    """Strip markdown code fences (```json ... ``` or ``` ... ```) wrapping the whole text."""
    stripped = text.strip()
    if stripped.startswith("```"):
        # remove opening fence (```json or ```)
        first_newline = stripped.index("\n") if "\n" in stripped else len(stripped)
        stripped = stripped[first_newline + 1:]
        # remove closing fence
        if stripped.rstrip().endswith("```"):
            stripped = stripped.rstrip()[:-3].rstrip()
    return stripped

def extract_structured_payload(text: str) -> Any:
    """
    Extract a JSON payload (object or array) from an LLM response.

    Accepts either a bare JSON document or one embedded in a ```json fenced region
    within surrounding prose. When several fenced regions exist, the first one wins.

    Raises StructuredPayloadError if nothing parseable is found.
    """
    if not isinstance(text, str) or not text.strip():
        raise StructuredPayloadError("LLM response was empty, no structured payload to extract.")

    match = _JSON_FENCE_PATTERN.search(text)
    candidate = match.group(1).strip() if match else strip_markdown_fences(text)

    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise StructuredPayloadError(f"Failed to parse structured payload: {e.msg} (line {e.lineno}, col {e.colno})") from e

    if not isinstance(payload, (dict, list)):
        raise StructuredPayloadError(f"Expected a JSON object or array, got {type(payload).__name__}.")
    return payload
