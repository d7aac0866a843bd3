"""
Lenient JSON extraction

Judge models frequently wrap their JSON verdict in prose or code fences.
All judge-consuming components share this single parser.
"""

import json

_DECODER = json.JSONDecoder()


def extract_json_object(text: str) -> dict | None:
    """
    Extract the JSON object embedded in a model reply

    Takes the span from the first "{" to the last "}" and decodes it. When that span
    holds more than one object, the first balanced object is decoded instead.

    Args:
        text: Raw model reply

    Returns:
        The decoded object, or None when no object can be decoded
    """
    if not text:
        return None

    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None

    try:
        data = json.loads(text[start:end + 1])
    except (json.JSONDecodeError, ValueError):
        try:
            data, _ = _DECODER.raw_decode(text, start)
        except (json.JSONDecodeError, ValueError):
            return None

    return data if isinstance(data, dict) else None


def get_field(data: dict, name: str, default=None):
    """Case-insensitive key lookup (judges drift between camelCase and other casings)"""
    if name in data:
        return data[name]
    lowered = name.lower()
    for key, value in data.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return default
