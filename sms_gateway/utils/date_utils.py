"""Date manipulation utilities"""

import calendar
import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

_MONTHS = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*"

DATE_PATTERNS = (
    re.compile(r"\b\d{1,2}[-/.]\d{1,2}[-/.]\d{2,4}\b"),  # 12-04-23, 12/04/2023
    re.compile(r"\b\d{4}-\d{1,2}-\d{1,2}\b"),  # 2024-02-15
    re.compile(rf"\b\d{{1,2}}[- ]?{_MONTHS}[-, ]*\d{{2,4}}\b", re.IGNORECASE),  # 15-Feb-24, 15 Feb 2024
    re.compile(rf"\b{_MONTHS}[- ]\d{{1,2}},?[- ]\d{{2,4}}\b", re.IGNORECASE),  # Feb 15, 2024
)

TIME_PATTERN = re.compile(r"\b\d{1,2}:\d{2}(?::\d{2})?(?:\s*[ap]m)?\b", re.IGNORECASE)

# Shapes that reference extraction must never mistake for a reference number
DATE_SHAPED = (
    re.compile(r"^\d{2}[/-]\d{2}[/-]\d{2,4}$"),
    re.compile(rf"^\d{{1,2}}{_MONTHS}\d{{2,4}}$", re.IGNORECASE),
)


def find_date_token(body: str) -> Optional[str]:
    """Best-effort date (and time, when present) mentioned in a message body"""
    date_text = None
    for pattern in DATE_PATTERNS:
        match = pattern.search(body)
        if match:
            date_text = match.group(0)
            break
    if date_text is None:
        return None
    time_match = TIME_PATTERN.search(body)
    token = date_text if time_match is None else f"{date_text} {time_match.group(0)}"
    return re.sub(r"[^0-9a-z:]", "", token.lower())


def is_date_shaped(value: str) -> bool:
    return any(p.match(value) for p in DATE_SHAPED)


def minute_token(moment: datetime) -> str:
    """Receive-minute granularity used when a body carries no date"""
    return moment.strftime("%Y%m%d%H%M")


def to_utc_naive(moment: datetime) -> datetime:
    """Normalise timestamps to naive UTC, the representation used in storage"""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """First and last instant of a calendar month"""
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime(year, month, last_day, 23, 59, 59, 999999)
    return start, end


def window_start(moment: datetime, seconds: float) -> datetime:
    return moment - timedelta(seconds=seconds)
