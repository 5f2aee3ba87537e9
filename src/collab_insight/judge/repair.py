"""Recovery of truncated JSON from the effort judge.

Judge output is untrusted text and is often cut off mid-object. The
repair is a single scan that tracks brace and bracket depth and whether
the scan ends inside a string, then appends whatever closers are missing:
a quote, then ``]`` per open bracket, then ``}`` per open brace.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from ..logging_config import get_logger

logger = get_logger(__name__)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence, if any."""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def repair_truncated_json(text: str) -> str:
    open_braces = 0
    open_brackets = 0
    in_string = False
    escaped = False

    for ch in text:
        if escaped:
            escaped = False
            continue
        if ch == "\\":
            escaped = True
            continue
        if ch == '"':
            in_string = not in_string
        elif not in_string:
            if ch == "{":
                open_braces += 1
            elif ch == "}":
                open_braces -= 1
            elif ch == "[":
                open_brackets += 1
            elif ch == "]":
                open_brackets -= 1

    repaired = text
    if in_string:
        repaired += '"'
    repaired += "]" * max(open_brackets, 0)
    repaired += "}" * max(open_braces, 0)
    return repaired


def parse_json_object(text: str, label: str = "") -> Optional[dict[str, Any]]:
    """Parse a JSON object, repairing truncation if needed.

    Returns:
        The parsed dict, or None when neither the raw nor the repaired
        text is a JSON object.
    """
    cleaned = strip_code_fences(text)
    try:
        parsed = json.loads(cleaned)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError as e:
        logger.debug(f"Initial parse failed for {label}, attempting repair: {e}")

    repaired = repair_truncated_json(cleaned)
    try:
        parsed = json.loads(repaired)
    except json.JSONDecodeError:
        logger.warning(f"JSON repair failed for {label}. Original: {cleaned[:100]!r}")
        return None
    if not isinstance(parsed, dict):
        logger.warning(f"Judge response for {label} is not a JSON object")
        return None
    logger.info(f"Repaired truncated JSON for {label}")
    return parsed
