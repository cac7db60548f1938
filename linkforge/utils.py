import re
import string
import time
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from linkforge.config import BASE_DOMAIN

ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
SHORT_CODE_LENGTH = 7
MAX_CODE_ATTEMPTS = 10
MAX_EXPIRATION_DAYS = 36500

ALIAS_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
ALIAS_MIN_LENGTH = 3
ALIAS_MAX_LENGTH = 20


class ShortCodeError(ValueError):
    pass


class AliasValidationError(ShortCodeError):
    pass


class AliasUnavailableError(ShortCodeError):
    pass


def _now_ms() -> int:
    return int(time.time() * 1000)


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def url_hash(url: str) -> int:
    """Signed 32-bit rolling hash (hash * 31 + code) over UTF-16 code units."""
    data = url.encode("utf-16-le")
    h = 0
    for i in range(0, len(data), 2):
        h = _to_int32(h * 31 + int.from_bytes(data[i:i + 2], "little"))
    return h


def validate_custom_alias(alias: str) -> str:
    if not ALIAS_MIN_LENGTH <= len(alias) <= ALIAS_MAX_LENGTH:
        raise AliasValidationError(
            f"Custom alias must be between {ALIAS_MIN_LENGTH} and {ALIAS_MAX_LENGTH} characters"
        )
    if not ALIAS_PATTERN.match(alias):
        raise AliasValidationError(
            "Custom alias can only contain letters, numbers, hyphens and underscores"
        )
    return alias


def generate_short_code(url: str, custom_alias: Optional[str] = None, now_ms: Optional[int] = None) -> str:
    """Derive a short code for ``url``.

    A custom alias is validated and returned verbatim. Otherwise the URL hash
    is mixed with the timestamp in milliseconds and emitted as seven base-62
    digits, least significant first.
    """
    if custom_alias:
        return validate_custom_alias(custom_alias)
    value = abs(url_hash(url) + (_now_ms() if now_ms is None else now_ms))
    chars = []
    for _ in range(SHORT_CODE_LENGTH):
        chars.append(ALPHABET[value % len(ALPHABET)])
        value //= len(ALPHABET)
    return "".join(chars)


def is_custom_alias_available(alias: str, records: Iterable) -> bool:
    return not any(r.short_code == alias or r.custom_alias == alias for r in records)


def get_unique_short_code(url: str, records: Iterable, custom_alias: Optional[str] = None,
                          now_ms: Optional[int] = None) -> str:
    records = list(records)
    if custom_alias:
        validate_custom_alias(custom_alias)
        if not is_custom_alias_available(custom_alias, records):
            raise AliasUnavailableError("This alias is already taken")
        return custom_alias
    now_ms = _now_ms() if now_ms is None else now_ms
    for attempt in range(MAX_CODE_ATTEMPTS):
        code = generate_short_code(url, now_ms=now_ms + attempt)
        if is_custom_alias_available(code, records):
            return code
    raise ShortCodeError("Could not generate a unique short code")


def create_short_url(short_code: str, base_domain: str = BASE_DOMAIN) -> str:
    return f"{base_domain.rstrip('/')}/{short_code}"


def calculate_expiration(days: Optional[int] = None, now: Optional[datetime] = None) -> Optional[datetime]:
    if not days or days <= 0:
        return None
    return (now or datetime.now(timezone.utc)) + timedelta(days=days)


def is_expired(record, now: Optional[datetime] = None) -> bool:
    if record.expires_at is None:
        return False
    return (now or datetime.now(timezone.utc)) > record.expires_at


def filter_links(records: Iterable, status: str = "all", now: Optional[datetime] = None) -> List:
    if status == "active":
        return [r for r in records if r.is_active and not is_expired(r, now)]
    if status == "expired":
        return [r for r in records if is_expired(r, now) or not r.is_active]
    return list(records)


def normalize_tags(tags: Iterable[str]) -> List[str]:
    seen = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen
