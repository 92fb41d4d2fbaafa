import re
from typing import Optional

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?\d{10,15}$")
PHONE_SEPARATORS_RE = re.compile(r"[\s\-().]")
MIN_PASSWORD_LENGTH = 6


def normalize_email(raw: str) -> Optional[str]:
    candidate = raw.strip().lower()
    if EMAIL_RE.match(candidate):
        return candidate
    return None


def normalize_phone(raw: str) -> Optional[str]:
    # Only separators are dropped; anything else left over fails PHONE_RE
    digits = PHONE_SEPARATORS_RE.sub("", raw)
    if PHONE_RE.match(digits):
        return digits
    return None


def normalize_identifier(raw) -> Optional[str]:
    """Return the canonical email or phone form of raw, or None if it is neither."""
    if not isinstance(raw, str):
        return None
    return normalize_email(raw) or normalize_phone(raw)


def is_valid_password(password) -> bool:
    return isinstance(password, str) and len(password) >= MIN_PASSWORD_LENGTH
