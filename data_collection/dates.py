"""
data_collection/dates.py

Lenient date parsing and formatting shared by scraping, inference and cleaning.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any

DATE_PATTERNS = [
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%d.%m.%Y",
    "%d.%m.%Y %H:%M:%S",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
]

_FORMAT_TOKENS = re.compile(r"YYYY|MM|DD|HH|mm|ss")


def parse_date(value: Any) -> datetime | None:
    """
    Parse a date-like value, returning None when it is not a recognizable date.

    Naive results are treated as UTC.
    """

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        parsed = _parse_date_text(value.strip())
        if parsed is None:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _parse_date_text(text: str) -> datetime | None:
    if not text:
        return None
    iso_candidate = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(iso_candidate)
    except ValueError:
        pass
    for pattern in DATE_PATTERNS:
        try:
            return datetime.strptime(text, pattern)
        except ValueError:
            continue
    return None


def is_parseable_date(value: Any) -> bool:
    return parse_date(value) is not None


def to_iso(value: datetime) -> str:
    """
    Format as UTC ISO-8601 with millisecond precision, e.g. ``2024-01-05T00:00:00.000Z``.
    """

    utc_value = value.astimezone(timezone.utc) if value.tzinfo else value
    return utc_value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_value.microsecond // 1000:03d}Z"


def format_date(value: datetime, pattern: str) -> str:
    """
    Render ``value`` through a token pattern using YYYY, MM, DD, HH, mm and ss.
    """

    tokens = {
        "YYYY": f"{value.year:04d}",
        "MM": f"{value.month:02d}",
        "DD": f"{value.day:02d}",
        "HH": f"{value.hour:02d}",
        "mm": f"{value.minute:02d}",
        "ss": f"{value.second:02d}",
    }
    return _FORMAT_TOKENS.sub(lambda match: tokens[match.group(0)], pattern)
