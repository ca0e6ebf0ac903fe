"""
Date helpers exposed to templates as `date`.

Formats use moment-style tokens (`YYYY-MM-DD`, `dddd, MMMM Do`, `h:mm A`) and
text in square brackets is copied literally. A format containing `%` is handed
to `strftime` unchanged. Offsets are either a number of days or a shorthand
such as `+3d`, `-1w`, `2M` or `1y`.

"""

import calendar
import re
from collections.abc import Callable
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

if TYPE_CHECKING:
    from notetemplate.config import TemplatingConfig

Clock = Callable[[], datetime]
DateLike = datetime | date | str | None
Offset = int | float | str

DEFAULT_DATE_FORMAT = "YYYY-MM-DD"
DEFAULT_TIMESTAMP_FORMAT = "YYYY-MM-DD h:mm A"

FORMAT_TOKEN = re.compile(
    r"\[[^\]]*\]|YYYY|YY|MMMM|MMM|MM|Mo|M|DDDD|DDD|Do|DD|D|dddd|ddd|dd|d"
    r"|HH|H|hh|h|mm|m|ss|s|A|a|WW|W|ww|w|Q|X"
)
OFFSET_PATTERN = re.compile(r"^\s*([+-]?\d+)\s*([ymMwdhs]?)\s*$")

OFFSET_UNITS = {
    "y": "years",
    "M": "months",
    "w": "weeks",
    "d": "days",
    "": "days",
    "h": "hours",
    "m": "minutes",
    "s": "seconds",
}


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def _hour12(dt: datetime) -> int:
    return dt.hour % 12 or 12


# moment's `d` counts from Sunday
def _moment_weekday(dt: datetime) -> int:
    return (dt.weekday() + 1) % 7


TOKEN_FORMATTERS: dict[str, Callable[[datetime], str]] = {
    "YYYY": lambda dt: f"{dt.year:04d}",
    "YY": lambda dt: f"{dt.year % 100:02d}",
    "MMMM": lambda dt: calendar.month_name[dt.month],
    "MMM": lambda dt: calendar.month_abbr[dt.month],
    "MM": lambda dt: f"{dt.month:02d}",
    "Mo": lambda dt: _ordinal(dt.month),
    "M": lambda dt: str(dt.month),
    "DDDD": lambda dt: f"{dt.timetuple().tm_yday:03d}",
    "DDD": lambda dt: str(dt.timetuple().tm_yday),
    "Do": lambda dt: _ordinal(dt.day),
    "DD": lambda dt: f"{dt.day:02d}",
    "D": lambda dt: str(dt.day),
    "dddd": lambda dt: calendar.day_name[dt.weekday()],
    "ddd": lambda dt: calendar.day_abbr[dt.weekday()],
    "dd": lambda dt: calendar.day_abbr[dt.weekday()][:2],
    "d": lambda dt: str(_moment_weekday(dt)),
    "HH": lambda dt: f"{dt.hour:02d}",
    "H": lambda dt: str(dt.hour),
    "hh": lambda dt: f"{_hour12(dt):02d}",
    "h": lambda dt: str(_hour12(dt)),
    "mm": lambda dt: f"{dt.minute:02d}",
    "m": lambda dt: str(dt.minute),
    "ss": lambda dt: f"{dt.second:02d}",
    "s": lambda dt: str(dt.second),
    "A": lambda dt: "AM" if dt.hour < 12 else "PM",
    "a": lambda dt: "am" if dt.hour < 12 else "pm",
    "WW": lambda dt: f"{dt.isocalendar()[1]:02d}",
    "W": lambda dt: str(dt.isocalendar()[1]),
    "ww": lambda dt: f"{dt.isocalendar()[1]:02d}",
    "w": lambda dt: str(dt.isocalendar()[1]),
    "Q": lambda dt: str((dt.month - 1) // 3 + 1),
    "X": lambda dt: str(int(dt.timestamp())),
}


def format_date(value: datetime | date, fmt: str) -> str:
    """Format a date with moment-style tokens, or strftime directives when `fmt` has a `%`."""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)

    if "%" in fmt:
        return value.strftime(fmt)

    def _replace(match: re.Match) -> str:
        token = match.group(0)
        if token.startswith("["):
            return token[1:-1]
        return TOKEN_FORMATTERS[token](value)

    return FORMAT_TOKEN.sub(_replace, fmt)


def parse_offset(offset: Offset) -> relativedelta:
    """
    Convert an offset into a relativedelta.

    Raises:
        ValueError: the offset is not a number or a recognised shorthand
    """
    if isinstance(offset, bool):
        raise ValueError(f"Invalid date offset: {offset!r}")
    if isinstance(offset, int | float):
        return relativedelta(days=int(offset))

    match = OFFSET_PATTERN.match(str(offset))
    if match is None:
        raise ValueError(f"Invalid date offset: {offset!r}")

    amount, unit = match.groups()
    return relativedelta(**{OFFSET_UNITS[unit]: int(amount)})


class DateModule:
    """Date arithmetic and formatting relative to an injectable clock."""

    def __init__(
        self, config: "TemplatingConfig | None" = None, clock: Clock | None = None
    ) -> None:
        self.clock = clock or datetime.now
        self.date_format = config.date_format if config else DEFAULT_DATE_FORMAT
        self.timestamp_format = (
            config.timestamp_format if config else DEFAULT_TIMESTAMP_FORMAT
        )
        # 0 = Sunday, matching `d`
        self.first_day_of_week = config.first_day_of_week if config else 0

    def _to_datetime(self, value: DateLike) -> datetime:
        if value is None or value == "":
            return self.clock()
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        return date_parser.parse(str(value))

    def _format(self, value: datetime, fmt: str) -> str:
        return format_date(value, fmt or self.date_format)

    def now(self, fmt: str = "", offset: Offset = 0) -> str:
        return self._format(self.clock() + parse_offset(offset), fmt)

    def today(self, fmt: str = "") -> str:
        return self.now(fmt)

    def tomorrow(self, fmt: str = "") -> str:
        return self.now(fmt, 1)

    def yesterday(self, fmt: str = "") -> str:
        return self.now(fmt, -1)

    def format(self, fmt: str = "", value: DateLike = None) -> str:
        return self._format(self._to_datetime(value), fmt)

    def timestamp(self, fmt: str = "") -> str:
        return format_date(self.clock(), fmt or self.timestamp_format)

    def weekday(self, fmt: str = "", offset: int = 0, pivot: DateLike = None) -> str:
        """Move `offset` business days from `pivot` (default today), skipping weekends."""
        current = self._to_datetime(pivot)
        step = 1 if offset >= 0 else -1
        remaining = abs(int(offset))
        while remaining:
            current += timedelta(days=step)
            if current.weekday() < 5:
                remaining -= 1
        return self._format(current, fmt)

    def week_number(self, value: DateLike = None) -> int:
        return self._to_datetime(value).isocalendar()[1]

    def day_number(self, value: DateLike = None) -> int:
        """Day of the week, 0 for Sunday through 6 for Saturday."""
        return _moment_weekday(self._to_datetime(value))

    def is_weekend(self, value: DateLike = None) -> bool:
        return self._to_datetime(value).weekday() >= 5

    def is_weekday(self, value: DateLike = None) -> bool:
        return not self.is_weekend(value)

    def start_of_week(self, fmt: str = "", value: DateLike = None) -> str:
        current = self._to_datetime(value)
        back = (_moment_weekday(current) - self.first_day_of_week) % 7
        return self._format(current - timedelta(days=back), fmt)

    def end_of_week(self, fmt: str = "", value: DateLike = None) -> str:
        current = self._to_datetime(value)
        back = (_moment_weekday(current) - self.first_day_of_week) % 7
        return self._format(current + timedelta(days=6 - back), fmt)

    def start_of_month(self, fmt: str = "", value: DateLike = None) -> str:
        return self._format(self._to_datetime(value).replace(day=1), fmt)

    def end_of_month(self, fmt: str = "", value: DateLike = None) -> str:
        current = self._to_datetime(value)
        return self._format(current.replace(day=self.days_in_month(current)), fmt)

    def days_in_month(self, value: DateLike = None) -> int:
        current = self._to_datetime(value)
        return calendar.monthrange(current.year, current.month)[1]

    def days_between(self, start: DateLike, end: DateLike) -> int:
        return (self._to_datetime(end).date() - self._to_datetime(start).date()).days

    def days_until(self, value: DateLike) -> int:
        return self.days_between(None, value)

    def add(self, value: DateLike = None, offset: Offset = 1, fmt: str = "") -> str:
        return self._format(self._to_datetime(value) + parse_offset(offset), fmt)

    def subtract(self, value: DateLike = None, offset: Offset = 1, fmt: str = "") -> str:
        return self._format(self._to_datetime(value) - parse_offset(offset), fmt)
