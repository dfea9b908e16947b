"""
Aether Intel - Request field validation

Small checks shared by the CRUD routers. Each failure raises InvalidField
with a field-specific code (MISSING_HANDLE, INVALID_PLATFORM, ...), which the
app renders as a 400 ``{"error", "code"}`` body.
"""

from typing import Any, Iterable, Optional
from urllib.parse import urlparse

from errors import InvalidField

# Largest value a BIGINT primary key column can hold
MAX_ID = 2**63 - 1


def clean_text(value: Optional[str]) -> Optional[str]:
    """Stripped string, or None for missing/blank input."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def require_text(value: Any, code: str, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidField(code, message)
    return value.strip()


def optional_http_url(value: Any, code: str = "INVALID_URL",
                      message: str = "URL must be an absolute http(s) URL") -> Optional[str]:
    """None for blank input, else the stripped URL if it is absolute http(s)."""
    value = clean_text(value)
    if value is None:
        return None
    parsed = urlparse(value)
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        raise InvalidField(code, message)
    return value


def require_choice(value: Optional[str], allowed: Iterable[str], code: str, label: str) -> str:
    allowed = tuple(allowed)
    if value not in allowed:
        raise InvalidField(code, f"{label} must be one of: {', '.join(allowed)}")
    return value


def parse_id(value: Any, code: str = "INVALID_ID", message: str = "Valid ID is required") -> int:
    """Positive integer (up to MAX_ID) from an int or numeric string."""
    if isinstance(value, bool) or value is None:
        raise InvalidField(code, message)
    try:
        parsed = int(value.strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidField(code, message)
    if parsed <= 0 or parsed > MAX_ID or (isinstance(value, float) and not value.is_integer()):
        raise InvalidField(code, message)
    return parsed
