"""Parsing and display of the dates found in the item sheet.

Dates in the sheet are written day first (``DD/MM/YYYY``). ``NA`` marks a
date that does not apply to the item.
"""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Optional, Union

logger = logging.getLogger(__name__)

NA = "NA"

DateInput = Union[str, date, None]

# The script embedded in each page (ihic.render) applies the same rules; keep
# both in step.
_INT_PART = re.compile(r"\s*[+-]?[0-9]+\s*")
_ISO_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_ISO_DATETIME = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}[T ]")


def _lenient_date(year: int, month: int, day: int) -> date:
    """Build a date, rolling out-of-range month/day into neighbouring months.

    Month 13 is January of the following year and day 0 is the last day of
    the previous month, so ``31/02/2024`` becomes ``02/03/2024``.
    """
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return date(year, month, 1) + timedelta(days=day - 1)


def _day_first(s: str) -> Optional[date]:
    parts = s.split("/")
    if len(parts) < 3 or not all(_INT_PART.fullmatch(p) for p in parts[:3]):
        return None
    day, month, year = (int(p) for p in parts[:3])
    # Two-digit years mean 19xx, as with the Date constructor in the page script
    if 0 <= year <= 99:
        year += 1900
    try:
        return _lenient_date(year, month, day)
    except (ValueError, OverflowError):
        return None


def parse_date(raw: DateInput) -> Optional[date]:
    if raw is None:
        return None
    # openpyxl hands back datetime objects for date-formatted cells
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw

    s = str(raw).strip()
    if not s or s == NA:
        return None

    parsed = None
    if "/" in s:
        parsed = _day_first(s)
    elif _ISO_DATE.fullmatch(s):
        parsed = _iso(date.fromisoformat, s)
    elif _ISO_DATETIME.match(s):
        parsed = _iso(datetime.fromisoformat, s)
    if parsed is None:
        logger.debug("Unparseable date %r", raw)
    return parsed


def _iso(parser, s: str) -> Optional[date]:
    try:
        parsed = parser(s)
    except ValueError:
        return None
    return parsed.date() if isinstance(parsed, datetime) else parsed


def format_date(d: Optional[date]) -> str:
    if d is None:
        return "N/A"
    return f"{d.day:02d}/{d.month:02d}/{d.year}"
