"""JMESPath filtering and JSON rendering for raw API responses."""

import json
import logging
from typing import Any

import jmespath
from jmespath.exceptions import JMESPathError

logger = logging.getLogger("mcp-bitbucket.utils.jq")

EMPTY_RESPONSE_MESSAGE = "No content returned (empty response)."


def apply_jq_filter(data: Any, expression: str | None) -> Any:
    """Filter or reshape data with a JMESPath expression.

    Args:
        data: Parsed API response
        expression: JMESPath expression; None or blank leaves data unchanged

    Returns:
        The filtered data

    Raises:
        ValueError: If the expression cannot be compiled or evaluated
    """
    if not expression or not expression.strip():
        return data
    try:
        return jmespath.search(expression, data)
    except JMESPathError as e:
        logger.warning(f"Invalid JMESPath expression '{expression}': {e}")
        raise ValueError(f"Invalid JMESPath expression '{expression}': {e}") from e


def to_json_string(data: Any) -> str:
    """Render filtered data for display.

    Strings (raw diffs, file contents) are returned as they are; everything
    else is pretty-printed JSON.
    """
    if data is None:
        return EMPTY_RESPONSE_MESSAGE
    if isinstance(data, str):
        return data
    return json.dumps(data, indent=2, ensure_ascii=False)
