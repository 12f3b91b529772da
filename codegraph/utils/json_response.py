"""Parsing of JSON payloads returned by LLM providers."""

import json
from typing import Any

from codegraph.utils.exceptions import ResponseParseError


def strip_code_fences(content: str) -> str:
    """
    Remove a Markdown code-fence wrapper (``` or ```json) around content.

    Args:
        content: Raw content that may be wrapped in a code fence

    Returns:
        Content without the surrounding fence
    """
    content = content.strip()

    if content.startswith("```json"):
        content = content[len("```json") :]
    elif content.startswith("```"):
        content = content[3:]
    else:
        return content

    content = content.strip()
    if content.endswith("```"):
        content = content[:-3]

    return content.strip()


def parse_json_response(content: str) -> dict[str, Any]:
    """
    Parse a JSON object from an LLM reply.

    Parsing is attempted on the raw text first and recovered once by
    stripping a Markdown code fence. Anything else fails.

    Args:
        content: Raw LLM reply

    Returns:
        Parsed JSON object

    Raises:
        ResponseParseError: If the reply is not a JSON object
    """
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        try:
            parsed = json.loads(strip_code_fences(content))
        except json.JSONDecodeError as e:
            raise ResponseParseError(
                f"Failed to parse AI response as JSON: {e}",
                context={"preview": content[:500]},
            ) from e

    if not isinstance(parsed, dict):
        raise ResponseParseError(
            "AI response JSON must be an object",
            context={"preview": content[:500]},
        )

    return parsed
