# letteros/ai/parsing.py
import json
import re
import logging
from typing import Optional, Dict, Any
from letteros.ai.errors import AIResponseParseError

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\s*")

def strip_code_fences(text: str) -> str:
    return _CODE_FENCE.sub("", text).strip()

def _balanced_end(text: str, start: int) -> Optional[int]:
    """Index of the brace closing the one at `start`, ignoring braces inside strings"""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        char = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return i
    return None

def find_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Return the first balanced {...} block of `text` that decodes to a JSON object"""
    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end is None:
            return None
        try:
            candidate = json.loads(text[start:end + 1])
        except json.JSONDecodeError:
            candidate = None
        if isinstance(candidate, dict):
            return candidate
        start = text.find("{", start + 1)
    return None

def require_json_object(text: str) -> Dict[str, Any]:
    parsed = find_json_object(strip_code_fences(text))
    if parsed is None:
        logger.warning(f"AI response contained no JSON object: {text[:200]!r}")
        raise AIResponseParseError("AI returned invalid JSON response")
    return parsed
