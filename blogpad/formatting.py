"""Display formatting for stored timestamps.

Timestamps are stored timezone-aware and locale-agnostic; this module is the
only place that turns them into human text. Output is always rendered in the
runtime's local timezone.
"""
from __future__ import annotations
from datetime import datetime
from typing import Optional

INVALID_DATE = "Invalid Date"

THAI_MONTHS = (
    "มกราคม", "กุมภาพันธ์", "มีนาคม", "เมษายน", "พฤษภาคม", "มิถุนายน",
    "กรกฎาคม", "สิงหาคม", "กันยายน", "ตุลาคม", "พฤศจิกายน", "ธันวาคม",
)
ENGLISH_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
# Buddhist era
THAI_YEAR_OFFSET = 543


def _thai(d: datetime) -> str:
    month = THAI_MONTHS[d.month - 1]
    return f"{d.day} {month} {d.year + THAI_YEAR_OFFSET} เวลา {d:%H:%M}"

def _english(d: datetime) -> str:
    month = ENGLISH_MONTHS[d.month - 1]
    hour = d.hour % 12 or 12
    meridiem = "AM" if d.hour < 12 else "PM"
    return f"{month} {d.day}, {d.year} at {hour:02d}:{d.minute:02d} {meridiem}"


FORMATTERS = {
    "th-TH": _thai,
    "en-US": _english,
}


def format_timestamp(value: Optional[datetime], locale: str = "th-TH") -> str:
    """Render ``value`` as day, long month, year and HH:MM in local time.

    ``None`` is the invalid-timestamp state and renders as ``Invalid Date``.
    Unknown locales raise ``ValueError``.
    """
    try:
        formatter = FORMATTERS[locale]
    except KeyError:
        raise ValueError(f"Unsupported locale '{locale}'") from None
    if value is None:
        return INVALID_DATE
    try:
        local = value.astimezone()
    except (OverflowError, ValueError):
        # in range as stored, out of range once shifted to local time
        return INVALID_DATE
    return formatter(local)
