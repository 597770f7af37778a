"""Input sanitization for free-text address and note fields."""

import re

MAX_TEXT_LENGTH = 500

_UNSAFE_CHARS = re.compile(r"[<>'\"`\\/]")
_WHITESPACE = re.compile(r"\s+")


def sanitize_address(value: object, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Strip markup/quote characters, collapse whitespace, trim, cap length."""
    if not isinstance(value, str):
        return ""
    cleaned = _UNSAFE_CHARS.sub("", value)
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    return cleaned[:max_length]
