"""Date helpers for spreadsheet rows and output file names."""

import re
from datetime import datetime, timedelta
from typing import Optional

# IFTTT writes rows like "March 17, 2025 at 10:35PM"
_SHEET_DATE = re.compile(
    r"([A-Za-z]+)\s+(\d{1,2}),\s+(\d{4})\s+at\s+(\d{1,2}):(\d{2})\s*([AP]M)"
)


def parse_sheet_date(value: str) -> datetime:
    """Parse a spreadsheet date cell; raises ValueError when nothing matches."""
    value = (value or "").strip()
    match = _SHEET_DATE.search(value)
    if match:
        month, day, year, hours, minutes, ampm = match.groups()
        parsed = datetime.strptime(
            f"{month} {day} {year} {hours}:{minutes} {ampm}", "%B %d %Y %I:%M %p"
        )
        return parsed

    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        # windows are naive local time
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def get_date_range(days: int = 7, now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """Window ending now and starting ``days`` days earlier."""
    end = now or datetime.now()
    return end - timedelta(days=days), end


def is_date_in_range(value: datetime, start: datetime, end: datetime) -> bool:
    return start <= value <= end


def file_stamp(moment: Optional[datetime] = None) -> str:
    """Filesystem-safe timestamp, e.g. 2025-04-12_08-30-00."""
    return (moment or datetime.now()).strftime("%Y-%m-%d_%H-%M-%S")


def format_display_date(moment: Optional[datetime] = None) -> str:
    return (moment or datetime.now()).strftime("%B %d, %Y")
