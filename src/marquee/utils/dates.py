"""Date and time normalisation shared by every cinema scraper.

Cinema listings rarely carry full dates. Typical inputs are "Tue Feb 17",
"Feb 6—Feb 19, 2026", a weekly tab labelled SAT with a day-of-month buried
in an HTML comment, "MUST END THURSDAY", or a bare "12:15" with no AM/PM.
Every function here is pure and takes the reference ``today`` as an
argument so the heuristics can be tested against fixed calendars.
"""

import re
from datetime import date, timedelta

HORIZON_DAYS = 14
ROLLOVER_DAYS = 30

MONTHS: dict[str, int] = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

# Python weekday numbers (Monday=0)
WEEKDAYS: dict[str, int] = {
    "mon": 0, "tue": 1, "wed": 2, "thu": 3, "fri": 4, "sat": 5, "sun": 6,
}

MONTH_PATTERN = (
    r"(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|"
    r"aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)
WEEKDAY_PATTERN = (
    r"(mon(?:day)?|tue(?:s(?:day)?)?|wed(?:nesday)?|thu(?:rs?(?:day)?)?|"
    r"fri(?:day)?|sat(?:urday)?|sun(?:day)?)"
)

_MONTH_DAY_RE = re.compile(
    rf"\b{MONTH_PATTERN}\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?(?!\d)(?:,?\s+(\d{{4}}))?",
    re.IGNORECASE,
)
_RANGE_RE = re.compile(
    rf"\b{MONTH_PATTERN}\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?,?\s*"
    rf"(?:[—–-]+|\bthrough\b|\bthru\b|\bto\b|\buntil\b)\s*"
    rf"(?:{MONTH_PATTERN}\.?\s+)?(\d{{1,2}})(?:st|nd|rd|th)?(?![\d:]|\.\d|\s*[ap]\.?m\b)"
    rf"(?:,?\s+(\d{{4}}))?",
    re.IGNORECASE,
)
_CLOSING_RE = re.compile(
    r"\b(?:must\s+end|ends?|closes?|closing|final\s+day|last\s+(?:day|show(?:ing)?s?))"
    rf"\s*:?\s+(today|tonight|tomorrow|{WEEKDAY_PATTERN})\b",
    re.IGNORECASE,
)
_NUMERIC_RE = re.compile(r"(?<![\d/])(\d{1,2})/(\d{1,2})(?:/(\d{2}|\d{4}))?(?![\d/])")
_ISO_RE = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})")
_ISO_TIME_RE = re.compile(r"\d{4}-\d{2}-\d{2}[T ](\d{2}):(\d{2})")

_MERIDIEM_TIME_RE = re.compile(
    r"(?<![\d:])(\d{1,2})(?:[:.](\d{2}))?\s*([ap])\.?\s*m\b\.?", re.IGNORECASE
)
_BARE_TIME_RE = re.compile(r"(?<![\d:])(\d{1,2}):(\d{2})(?![\d:])")
_NOON_RE = re.compile(r"\bnoon\b", re.IGNORECASE)


def month_number(name: str) -> int | None:
    """Map "Feb", "february" or "Sept" to a month number."""
    return MONTHS.get(name.strip().lower()[:3])


def weekday_number(name: str) -> int | None:
    """Map "SAT", "Thurs" or "wednesday" to a Python weekday number."""
    return WEEKDAYS.get(name.strip().lower()[:3])


def horizon_end(today: date, horizon_days: int = HORIZON_DAYS) -> date:
    """Last date included in the listings window (today counts as day one)."""
    return today + timedelta(days=horizon_days - 1)


def within_horizon(day: date, today: date, horizon_days: int = HORIZON_DAYS) -> bool:
    return today <= day <= horizon_end(today, horizon_days)


def infer_year(month: int, day: int, today: date) -> date | None:
    """
    Attach a year to a month/day pair that was published without one.

    The current year is assumed; a date more than 30 days in the past is
    rolled forward a year ("Feb 3" seen on Dec 20 is next February). The
    previous year wins when its date is still within those 30 days, so a
    "Dec 15" seen on Jan 10 is last December rather than eleven months out.

    Returns None when no candidate year gives a valid date (Feb 30).
    """
    for year in (today.year - 1, today.year, today.year + 1):
        try:
            candidate = date(year, month, day)
        except ValueError:
            continue
        if (candidate - today).days >= -ROLLOVER_DAYS:
            return candidate
    return None


def parse_iso_date(text: str | None) -> date | None:
    """Extract a YYYY-MM-DD date from text like "2025-11-26-00:00:00"."""
    m = _ISO_RE.search(text or "")
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


def parse_month_day(text: str | None, today: date) -> date | None:
    """
    Parse "Tue Feb 17", "February 17th" or "Wed, Feb 11, 2026" into a date.

    An explicit year is used as-is; otherwise the year is inferred.
    """
    m = _MONTH_DAY_RE.search(text or "")
    if not m:
        return None

    month = month_number(m.group(1))
    day = int(m.group(2))
    if month is None:
        return None

    if m.group(3):
        try:
            return date(int(m.group(3)), month, day)
        except ValueError:
            return None
    return infer_year(month, day, today)


def parse_numeric_date(text: str | None, today: date) -> date | None:
    """Parse US-style "2/17" or "2/17/26" into a date."""
    m = _NUMERIC_RE.search(text or "")
    if not m:
        return None

    month, day = int(m.group(1)), int(m.group(2))
    year_text = m.group(3)
    if year_text:
        year = int(year_text)
        if year < 100:
            year += 2000
        try:
            return date(year, month, day)
        except ValueError:
            return None
    if not (1 <= month <= 12):
        return None
    return infer_year(month, day, today)


def nearest_weekday(weekday: int, today: date) -> date:
    """
    Return the occurrence of ``weekday`` in the current week window.

    The window spans three days either side of today; a weekday that fell
    more than three days ago belongs to next week.
    """
    diff = (weekday - today.weekday()) % 7
    if diff > 3:
        diff -= 7
    return today + timedelta(days=diff)


def next_weekday(weekday: int, today: date) -> date:
    """Return the next occurrence of ``weekday``, counting today."""
    return today + timedelta(days=(weekday - today.weekday()) % 7)


def resolve_weekday_date(weekday: int, day_of_month: int, today: date) -> date:
    """
    Resolve a weekly schedule tab (day-of-week plus day-of-month) to a date.

    Weekly schedules straddle the current date, so offsets from -6 to +7
    days are searched for a date matching both numbers. When the day of
    month does not line up (stale comment, typo), the weekday alone decides.
    """
    for offset in range(-6, 8):
        candidate = today + timedelta(days=offset)
        if candidate.weekday() == weekday and candidate.day == day_of_month:
            return candidate
    return nearest_weekday(weekday, today)


def expand_range(
    start: date,
    end: date,
    today: date,
    horizon_days: int = HORIZON_DAYS,
) -> list[date]:
    """
    Expand an inclusive date range into individual days.

    The result never starts before today and never runs past the horizon,
    so a run listed as "Jan 1 – Mar 1" yields at most ``horizon_days`` days.
    """
    first = max(start, today)
    last = min(end, horizon_end(today, horizon_days))

    days: list[date] = []
    current = first
    while current <= last:
        days.append(current)
        current += timedelta(days=1)
    return days


def parse_date_range(
    text: str | None,
    today: date,
    horizon_days: int = HORIZON_DAYS,
) -> list[date] | None:
    """
    Parse and expand a run such as "Feb 6—Feb 19, 2026" or "Dec 28 – Jan 4".

    A missing end month reuses the start month ("Feb 6 - 19"). The year
    belongs to the end date, printed or inferred, so a long run that opened
    months ago still resolves to the current one. A start that falls after
    the end in calendar order is in the previous year.

    Returns None when the text holds no range, and a (possibly empty) list
    of in-horizon days when it does.
    """
    m = _RANGE_RE.search(text or "")
    if not m:
        return None

    start_month = month_number(m.group(1))
    start_day = int(m.group(2))
    end_month = month_number(m.group(3)) if m.group(3) else start_month
    end_day = int(m.group(4))
    if start_month is None or end_month is None:
        return None

    try:
        if m.group(5):
            end = date(int(m.group(5)), end_month, end_day)
        else:
            inferred = infer_year(end_month, end_day, today)
            if inferred is None:
                return None
            end = inferred
        crosses_year = (start_month, start_day) > (end_month, end_day)
        start = date(end.year - 1 if crosses_year else end.year, start_month, start_day)
    except ValueError:
        return None

    return expand_range(start, end, today, horizon_days)


def parse_closing_day(
    text: str | None,
    today: date,
    horizon_days: int = HORIZON_DAYS,
) -> list[date] | None:
    """
    Parse a closing phrase like "MUST END THURSDAY" or "Ends Friday".

    The film is assumed to be playing every day from today through the
    next occurrence of the named weekday (today included).
    """
    m = _CLOSING_RE.search(text or "")
    if not m:
        return None

    word = m.group(1).lower()
    if word in ("today", "tonight"):
        last = today
    elif word == "tomorrow":
        last = today + timedelta(days=1)
    else:
        weekday = weekday_number(word)
        if weekday is None:
            return None
        last = next_weekday(weekday, today)

    return expand_range(today, last, today, horizon_days)


def parse_date_text(
    text: str | None,
    today: date,
    horizon_days: int = HORIZON_DAYS,
) -> date | list[date] | None:
    """
    Turn free-form listing text into a single date or a list of dates.

    Closing phrases and ranges come first because they contain month/day
    fragments that would otherwise be read as a single date. A closing
    phrase that names its date ("Last showing Sat Feb 21") is that date.
    """
    if not text:
        return None

    closing = _CLOSING_RE.search(text)
    if closing:
        rest = text[closing.end():].lstrip(" ,")
        if _MONTH_DAY_RE.match(rest):
            dated = parse_month_day(rest, today)
            if dated is not None:
                return dated

    for parse_many in (parse_closing_day, parse_date_range):
        days = parse_many(text, today, horizon_days)
        if days is not None:
            return days

    return (
        parse_iso_date(text)
        or parse_month_day(text, today)
        or parse_numeric_date(text, today)
    )


def parse_time(text: str | None) -> str | None:
    """
    Parse a showtime into 12-hour display form ("7:30 PM").

    Handles "3:00pm", "3pm", "3.00 p.m.", "20:45pm", 24-hour "13:15" and
    bare "12:15". Bare times without AM/PM use cinema hours: 9-11 are
    morning shows, 12 and 1-8 are afternoon/evening. A genuine 1-8 AM
    screening is therefore misread as PM; sources that list those print
    a meridiem.

    Returns None when the text holds no valid time.
    """
    if not text:
        return None

    m = _MERIDIEM_TIME_RE.search(text)
    if m:
        hour = int(m.group(1))
        minute = int(m.group(2)) if m.group(2) else 0
        period = "AM" if m.group(3).lower() == "a" else "PM"

        if minute > 59:
            return None
        if hour == 0 and period == "AM":
            hour = 12
        elif 13 <= hour <= 23 and period == "PM":
            # 24-hour clock with a redundant suffix
            hour -= 12
        elif not 1 <= hour <= 12:
            return None
        return f"{hour}:{minute:02d} {period}"

    m = _BARE_TIME_RE.search(text)
    if m:
        hour, minute = int(m.group(1)), int(m.group(2))
        if hour > 23 or minute > 59:
            return None
        if hour == 0:
            return f"12:{minute:02d} AM"
        if 9 <= hour <= 11:
            return f"{hour}:{minute:02d} AM"
        if hour >= 13:
            return f"{hour - 12}:{minute:02d} PM"
        # 12 and 1-8: matinee through late show
        return f"{hour}:{minute:02d} PM"

    if _NOON_RE.search(text):
        return "12:00 PM"

    return None


def to_minutes(display_time: str | None) -> int | None:
    """Minutes after midnight for a showtime, or None if it is not a time."""
    canonical = parse_time(display_time)
    if canonical is None:
        return None

    clock, period = canonical.split(" ")
    hour_text, minute_text = clock.split(":")
    hour = int(hour_text) % 12
    if period == "PM":
        hour += 12
    return hour * 60 + int(minute_text)


def to_24_hour(display_time: str | None) -> str | None:
    """Convert "7:30 PM" to "19:30"."""
    minutes = to_minutes(display_time)
    if minutes is None:
        return None
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_time(hour: int, minute: int) -> str:
    """Format a 24-hour clock reading as a display time ("19:05" → "7:05 PM")."""
    period = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12}:{minute:02d} {period}"


def parse_iso_time(text: str | None) -> str | None:
    """Display time from an ISO datetime such as "2026-02-17T19:00:00-05:00"."""
    m = _ISO_TIME_RE.search(text or "")
    if not m:
        return None
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        return None
    return format_time(hour, minute)
