from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse

DENIED_DOMAINS = (
    "facebook.com",
    "twitter.com",
    "x.com",
    "instagram.com",
    "whatsapp.com",
    "linkedin.com",
    "pinterest.com",
    "reddit.com",
    "tiktok.com",
    "youtube.com",
    "t.me",
)

DENIED_URL_PATTERNS = (
    re.compile(r"^mailto:"),
    re.compile(r"^javascript:"),
    re.compile(r"^tel:"),
    re.compile(r"[?&](?:share|page)=", re.IGNORECASE),
    re.compile(r"/(?:tag|tags|topic|topics|category|categories|author|authors)/", re.IGNORECASE),
    re.compile(r"/page/\d+", re.IGNORECASE),
    re.compile(r"/(?:login|signin|sign-in|signup|sign-up|register|account|subscribe|share)(?:[/?#]|$)", re.IGNORECASE),
)


def is_valid_url(url: str) -> bool:
    """Basic URL validation."""
    try:
        result = urlparse(url)
        return all([result.scheme in ("http", "https"), result.netloc])
    except Exception:
        return False


def resolve_url(href: str, base_url: str) -> str | None:
    """Absolute http(s) URL for ``href`` relative to ``base_url``, or None."""
    href = (href or "").strip()
    if not href or href.startswith("#"):
        return None
    if href.lower().startswith(("mailto:", "javascript:", "tel:")):
        return None
    try:
        absolute = urljoin(base_url, href)
    except ValueError:
        return None
    return absolute if is_valid_url(absolute) else None


def extract_domain(url: str) -> str:
    """Extract domain from URL for display."""
    try:
        host = (urlparse(url).hostname or "").lower()
    except Exception:
        return ""
    return host[4:] if host.startswith("www.") else host


def is_denied_url(url: str) -> bool:
    """True for social, mail, pagination, tag/category, and account links."""
    lowered = (url or "").strip().lower()
    if not lowered:
        return True
    domain = extract_domain(lowered)
    if any(domain == d or domain.endswith("." + d) for d in DENIED_DOMAINS):
        return True
    return any(pattern.search(lowered) for pattern in DENIED_URL_PATTERNS)


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def truncate(text: str, max_chars: int) -> str:
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    return text[:max_chars].rstrip() + "..."
