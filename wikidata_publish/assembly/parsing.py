"""Parsers that turn loose crawl strings into Wikibase-ready values.

Every parser returns ``None`` for anything it does not recognise; callers treat that as
a mapping gap and omit the property.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from urllib.parse import urlparse

from wikidata_publish.common.text import clean_text

_DATE_RE = re.compile(r"^(\d{4})(?:-(\d{1,2})(?:-(\d{1,2}))?)?(?:[T\s].*)?$")
_PHONE_RE = re.compile(r"^[+\d\s().-]+$")
_EMAIL_RE = re.compile(r"^[^@\s:/]+@[^@\s]+\.[A-Za-z]{2,}$")
_TICKER_RE = re.compile(r"^[A-Z]{1,5}$")
_EXACT_COUNT_RE = re.compile(r"^\+?(\d+)$")
_RANGE_COUNT_RE = re.compile(r"^(\d+)\s*[-\u2013\u2014]\s*(\d+)$")
_OPEN_COUNT_RE = re.compile(r"^(\d+)\s*\+$")

_TWITTER_PATH_RE = re.compile(r"^/([A-Za-z0-9_]{1,15})/?$")
_FACEBOOK_PATH_RE = re.compile(r"/pages/[^/]+/(\d+)|^/([A-Za-z0-9.]+)/?$")
_INSTAGRAM_PATH_RE = re.compile(r"^/([A-Za-z0-9._]+)/?$")
_LINKEDIN_PATH_RE = re.compile(r"^/company/([A-Za-z0-9_-]+)/?$")

_SOCIAL_HOSTS = {
    "twitter": ("twitter.com", "x.com"),
    "facebook": ("facebook.com", "fb.com"),
    "instagram": ("instagram.com",),
    "linkedin": ("linkedin.com",),
}
_HANDLE_RES = {
    "twitter": re.compile(r"^[A-Za-z0-9_]{1,15}$"),
    "facebook": re.compile(r"^[A-Za-z0-9.]+$"),
    "instagram": re.compile(r"^[A-Za-z0-9._]+$"),
    "linkedin": re.compile(r"^[A-Za-z0-9_-]+$"),
}
_RESERVED_PATHS = {"home", "share", "sharer.php", "intent", "login", "explore", "search", "profile.php"}


@dataclass(frozen=True)
class ParsedDate:
    """A calendar date known to year (9), month (10) or day (11) precision."""

    year: int
    month: int = 0
    day: int = 0
    precision: int = 9

    def wikibase_time(self) -> str:
        return f"+{self.year:04d}-{self.month:02d}-{self.day:02d}T00:00:00Z"


@dataclass(frozen=True)
class EmployeeCount:
    amount: int
    lower_bound: int | None = None
    upper_bound: int | None = None


def is_http_url(value: str | None) -> bool:
    text = clean_text(value)
    if text is None:
        return False
    try:
        parsed = urlparse(text)
    except ValueError:
        # malformed netloc, e.g. an unclosed "[" host
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def parse_partial_date(value: object) -> ParsedDate | None:
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    text = clean_text(value)
    if text is None:
        return None
    match = _DATE_RE.match(text)
    if match is None:
        return None
    year = int(match.group(1))
    if year == 0:
        return None
    if match.group(2) is None:
        return ParsedDate(year=year, precision=9)
    month = int(match.group(2))
    if not 1 <= month <= 12:
        return None
    if match.group(3) is None:
        return ParsedDate(year=year, month=month, precision=10)
    day = int(match.group(3))
    try:
        date(year, month, day)
    except ValueError:
        return None
    return ParsedDate(year=year, month=month, day=day, precision=11)


def parse_employee_count(value: object) -> EmployeeCount | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return EmployeeCount(amount=value) if value > 0 else None
    text = clean_text(value)
    if text is None:
        return None
    text = text.replace(",", "")
    exact = _EXACT_COUNT_RE.match(text)
    if exact:
        amount = int(exact.group(1))
        return EmployeeCount(amount=amount) if amount > 0 else None
    ranged = _RANGE_COUNT_RE.match(text)
    if ranged:
        low, high = int(ranged.group(1)), int(ranged.group(2))
        if low <= 0 or high < low:
            return None
        return EmployeeCount(amount=low, lower_bound=low, upper_bound=high)
    open_ended = _OPEN_COUNT_RE.match(text)
    if open_ended:
        low = int(open_ended.group(1))
        return EmployeeCount(amount=low, lower_bound=low) if low > 0 else None
    return None


def normalise_phone(value: object) -> str | None:
    text = clean_text(value)
    if text is None or not _PHONE_RE.match(text):
        return None
    if sum(char.isdigit() for char in text) < 7:
        return None
    return text


def normalise_email(value: object) -> str | None:
    text = clean_text(value)
    if text is None:
        return None
    if text.lower().startswith("mailto:"):
        text = text[len("mailto:"):]
    if not _EMAIL_RE.match(text):
        return None
    return text


def normalise_ticker(value: object) -> str | None:
    text = clean_text(value)
    if text is None:
        return None
    text = text.upper()
    return text if _TICKER_RE.match(text) else None


def _host_matches(host: str, platform: str) -> bool:
    host = host.lower().split(":")[0]
    return any(host == allowed or host.endswith("." + allowed) for allowed in _SOCIAL_HOSTS[platform])


def _username_from_path(path: str, platform: str) -> str | None:
    if platform == "twitter":
        match = _TWITTER_PATH_RE.match(path)
        username = match.group(1) if match else None
    elif platform == "facebook":
        match = _FACEBOOK_PATH_RE.search(path)
        username = (match.group(1) or match.group(2)) if match else None
    elif platform == "instagram":
        match = _INSTAGRAM_PATH_RE.match(path)
        username = match.group(1) if match else None
    elif platform == "linkedin":
        match = _LINKEDIN_PATH_RE.match(path)
        username = match.group(1) if match else None
    else:
        raise ValueError(f"Unknown social platform: {platform}")
    if username is None or username.lower() in _RESERVED_PATHS:
        return None
    return username


def extract_social_username(value: object, platform: str) -> str | None:
    """Return the username (or page id) from a profile URL or an ``@handle``."""
    if platform not in _SOCIAL_HOSTS:
        raise ValueError(f"Unknown social platform: {platform}")
    text = clean_text(value)
    if text is None:
        return None
    if text.startswith("@"):
        handle = text[1:]
        return handle if _HANDLE_RES[platform].match(handle) else None
    candidate = text if "://" in text else f"https://{text}"
    try:
        parsed = urlparse(candidate)
    except ValueError:
        return None
    if parsed.netloc and _host_matches(parsed.netloc, platform):
        return _username_from_path(parsed.path or "/", platform)
    if "/" not in text and "." not in text and _HANDLE_RES[platform].match(text):
        return text
    return None
