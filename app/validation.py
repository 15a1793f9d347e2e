from app.errors import InvalidTargetError


def normalize_text(text: str) -> str:
    """Unify line endings and drop trailing whitespace so the last char is typeable."""
    return (text or "").replace("\r\n", "\n").replace("\r", "\n").rstrip()


def require_target(text: str) -> str:
    if not text:
        raise InvalidTargetError("Target text must be a non-empty string")
    return text


def sanitize_title(name: str) -> str:
    return " ".join((name or "").split())[:60]
