import re

_TAG_RE = re.compile(r"<[^>]*>")
_JS_RE = re.compile(r"javascript:", re.IGNORECASE)
_HANDLER_RE = re.compile(r"on\w+\s*=", re.IGNORECASE)

CUSTOMER_NAME_PUNCTUATION = set(".,'-")


def sanitize_text(value: str) -> str:
    """Remove HTML tags, script handlers and NUL bytes from free text."""
    value = _TAG_RE.sub("", value)
    value = _JS_RE.sub("", value)
    value = _HANDLER_RE.sub("", value)
    return value.replace("\0", "").strip()


def sanitize_customer_name(name: str | None) -> str:
    """Letters, digits, whitespace and .,'- only, at most 255 characters."""
    if not name:
        return ""
    cleaned = sanitize_text(name)
    cleaned = "".join(
        ch for ch in cleaned if ch.isalnum() or ch.isspace() or ch in CUSTOMER_NAME_PUNCTUATION
    )
    return cleaned[:255]
