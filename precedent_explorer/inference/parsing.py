"""Extract JSON payloads from free-form model responses."""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_FENCED = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)
_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_ARRAY = re.compile(r"\[.*\]", re.DOTALL)


def _strip_comments(text: str) -> str:
    return re.sub(r"(?m)^\s*//.*$|\s//[^\"\n]*$", "", text)


def _strip_trailing_commas(text: str) -> str:
    return re.sub(r",(\s*[}\]])", r"\1", text)


def _candidates(content: str) -> list[str]:
    candidates = []
    fenced = _FENCED.search(content)
    if fenced:
        candidates.append(fenced.group(1))

    object_match = _OBJECT.search(content)
    array_match = _ARRAY.search(content)
    matches = [m for m in (object_match, array_match) if m]
    # Whichever bracket opens first encloses the other
    for match in sorted(matches, key=lambda m: m.start()):
        candidates.append(match.group(0))

    candidates.append(content.strip())
    return candidates


def extract_json(content: str) -> Any | None:
    """
    Parse the first JSON object or array found in ``content``.

    Looks inside a fenced code block first, then at the outermost
    ``{...}`` or ``[...]`` span. Each candidate is retried with ``//``
    comments removed, trailing commas removed, and both.

    Returns:
        The parsed value, or None if nothing parses
    """
    if not content or not content.strip():
        return None

    for candidate in _candidates(content):
        parse_attempts = [
            ("original", candidate),
            ("remove_comments", _strip_comments(candidate)),
            ("fix_trailing_commas", _strip_trailing_commas(candidate)),
            ("fix_both", _strip_trailing_commas(_strip_comments(candidate))),
        ]
        for attempt_name, attempt_str in parse_attempts:
            try:
                value = json.loads(attempt_str)
            except json.JSONDecodeError:
                continue
            if not isinstance(value, (dict, list)):
                break
            if attempt_name != "original":
                logger.debug(f"Parsed JSON after repair: {attempt_name}")
            return value

    logger.warning(f"No JSON found in response: {content[:200]!r}")
    return None
