## Tolerant parsing of LLM JSON output
import json
import logging
import re
from typing import List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from learnstream.errors import GenerationFailed

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def extract_first_json_block(text: str, opener: str = "[") -> str | None:
    """
    Extract the first balanced JSON block starting with `opener` ("[" or "{").
    Brackets inside string literals are ignored.
    Returns None if no balanced block is found.
    """
    closer = "]" if opener == "[" else "}"
    start = text.find(opener)
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return text[start:i + 1]

    return None


def _load_list(text: str) -> list:
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        block = extract_first_json_block(cleaned, "[")
        if block is None:
            raise GenerationFailed("no JSON array in model output")
        try:
            data = json.loads(block)
        except json.JSONDecodeError as e:
            raise GenerationFailed(f"unparsable JSON array: {e}") from e

    # Accept {"steps": [...]} / {"resources": [...]} wrappers
    if isinstance(data, dict):
        lists = [v for v in data.values() if isinstance(v, list)]
        if len(lists) == 1:
            data = lists[0]

    if not isinstance(data, list):
        raise GenerationFailed(f"expected a JSON array, got {type(data).__name__}")
    return data


def parse_json_list(text: str, item_model: Type[M]) -> List[M]:
    """Parse a JSON array of objects, dropping items that fail validation."""
    items: List[M] = []
    for raw in _load_list(text):
        try:
            items.append(item_model.model_validate(raw))
        except ValidationError as e:
            logger.debug("dropping invalid %s item: %s", item_model.__name__, e.errors()[:1])
    return items
