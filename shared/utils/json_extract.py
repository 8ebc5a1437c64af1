"""
Recover a JSON object from free-form completion text.

Completion services often wrap JSON in markdown fences or add a sentence
before it. Both the analysis generator and the digest composer parse
through ``extract_json_from_response``.
"""

import json
import re
from typing import Any

from shared.app_logging.logger import get_logger
from shared.utils.errors import JSONExtractionError

logger = get_logger("shared.json_extract")

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)```")
_ANY_FENCE = re.compile(r"```\s*([\s\S]*?)```")
_OBJECT = re.compile(r"\{[\s\S]*\}")

PREVIEW_CHARS = 300


def extract_json_from_response(text: str) -> Any:
    """Parse JSON out of ``text``, trying progressively looser strategies.

    Order: the trimmed text as-is, a ```json fenced block, any fenced block,
    then the greedy ``{...}`` span.

    Raises:
        JSONExtractionError: if the text is empty or nothing parses.
    """
    if not text:
        raise JSONExtractionError("Empty response from completion service")

    try:
        return json.loads(text.strip())
    except ValueError:
        pass

    for name, pattern, group in (
        ("json fence", _JSON_FENCE, 1),
        ("code fence", _ANY_FENCE, 1),
        ("object span", _OBJECT, 0),
    ):
        match = pattern.search(text)
        if not match:
            continue
        try:
            return json.loads(match.group(group).strip())
        except ValueError:
            logger.debug(f"Failed to parse JSON from {name}")

    raise JSONExtractionError(
        f"Could not extract valid JSON from response: {text[:PREVIEW_CHARS]}..."
    )
