import logging
import re
from pydantic import AnyUrl, TypeAdapter, ValidationError

from linkforge.schemas import ValidationResult

logger = logging.getLogger(__name__)

MALICIOUS_PATTERNS = [
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"data:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"file:", re.IGNORECASE),
    re.compile(r"ftp:", re.IGNORECASE),
]

SUSPICIOUS_DOMAINS = [
    "bit.ly",
    "tinyurl.com",
    "short.link",
    "ow.ly",
    "t.co",
]

ALLOWED_SCHEMES = ("http", "https")
HTTP_PREFIX = re.compile(r"^https?://", re.IGNORECASE)
SHORTENED_URL_WARNING = "This appears to be a shortened URL. Consider using the original URL instead."

_url_adapter = TypeAdapter(AnyUrl)


def validate_url(url: str) -> ValidationResult:
    if not url or not url.strip():
        return ValidationResult(is_valid=False, is_safe=False, error="URL cannot be empty")

    trimmed = url.strip()
    for pattern in MALICIOUS_PATTERNS:
        if pattern.search(trimmed):
            logger.warning("Rejected URL with malicious pattern %s", pattern.pattern)
            return ValidationResult(is_valid=False, is_safe=False,
                                    error="URL contains potentially malicious content")

    normalized = trimmed if HTTP_PREFIX.match(trimmed) else f"https://{trimmed}"
    try:
        parsed = _url_adapter.validate_python(normalized)
    except ValidationError:
        return ValidationResult(is_valid=False, is_safe=False, error="Invalid URL format")
    if not parsed.host:
        return ValidationResult(is_valid=False, is_safe=False, error="Invalid URL format")

    if parsed.scheme not in ALLOWED_SCHEMES:
        return ValidationResult(is_valid=False, is_safe=False,
                                error="Only HTTP and HTTPS URLs are allowed")

    host = parsed.host.lower()
    suspicious = any(domain in host for domain in SUSPICIOUS_DOMAINS)
    return ValidationResult(
        is_valid=True,
        is_safe=not suspicious,
        normalized_url=normalized,
        error=SHORTENED_URL_WARNING if suspicious else None,
    )


def sanitize_url(url: str) -> str:
    return re.sub(r"[<>'\"]", "", url.strip())
