"""GTFS time-of-day and date values.

Time formats accepted by :func:`parse_time`:

- ``int`` seconds since midnight (7:00 AM = 25200)
- ``"H:MM AM/PM"`` (``"1:30 PM"``), human readable
- ``"HH:MM:SS"`` (``"13:30:00"``), GTFS time
- ``"HH:MM"`` (``"13:30"``)
- ``"HHMM"`` (``"1330"``)

Hours go up to 32 because GTFS writes post-midnight service of the previous
service day as ``24:00:00`` or later (``25:30:00`` = 1:30 AM the next morning).

Dates are integers in the form ``yyyymmdd``.
"""
import re
from datetime import date as date_cls, datetime, timedelta
from functools import total_ordering
from typing import Optional, Union

from trip_resolver.core.errors import InvalidArgument, ParseError

MAX_HOURS = 32
MAX_TIME_SECONDS = MAX_HOURS * 3600
SECONDS_PER_DAY = 86400

MIN_DATE = 19700101
MAX_DATE = 21001231

DAYS_OF_WEEK = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]
_DAY_ABBR = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
_MONTH_ABBR = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

_READABLE_RE = re.compile(r"(1[0-2]|0?[1-9]):([0-5][0-9])\s?([AaPp][Mm])")
_DIGITS_RE = re.compile(r"[0-9]+")
_ISO_DATE_RE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")
_INT_DATE_RE = re.compile(r"[0-9]{8}")

TimeInput = Union[int, str]
DateInput = Union[int, str, date_cls]


def _checked_seconds(h: int, m: int, s: int, raw) -> int:
    if 0 <= h <= MAX_HOURS and 0 <= m <= 59 and 0 <= s <= 59:
        total = h * 3600 + m * 60 + s
        if total <= MAX_TIME_SECONDS:
            return total
    raise ParseError(f"Could not parse the time {raw!r}: h={h}, m={m}, s={s}")


def parse_time(t: TimeInput) -> int:
    """Convierte una hora en cualquiera de los formatos soportados a segundos desde medianoche.

    Raises ParseError when no format matches or a component is out of range.
    """
    if isinstance(t, bool):
        raise ParseError(f"Unsupported time value: {t!r}")
    if isinstance(t, int):
        if 0 <= t <= MAX_TIME_SECONDS:
            return t
        raise ParseError(f"Time integer is out of bounds: {t} seconds")
    if not isinstance(t, str):
        raise ParseError(f"Unsupported time value: {t!r}")

    value = t.strip()

    # h:mm AM/PM
    match = _READABLE_RE.fullmatch(value)
    if match:
        h = int(match.group(1))
        m = int(match.group(2))
        aa = match.group(3).lower()
        if aa == "am" and h == 12:
            h = 0
        elif aa == "pm" and h != 12:
            h += 12
        return h * 3600 + m * 60

    # HH:MM:SS or HH:MM
    if ":" in value:
        parts = value.split(":")
        if len(parts) not in (2, 3) or not all(_DIGITS_RE.fullmatch(p) for p in parts):
            raise ParseError(f"Could not parse the time: {t!r}")
        h = int(parts[0])
        m = int(parts[1])
        s = int(parts[2]) if len(parts) == 3 else 0
        return _checked_seconds(h, m, s, t)

    # HHMM
    if len(value) == 4 and _DIGITS_RE.fullmatch(value):
        return _checked_seconds(int(value[0:2]), int(value[2:4]), 0, t)

    raise ParseError(f"Could not parse the time: {t!r}")


def parse_date(d: DateInput) -> int:
    """Normalize ``yyyymmdd`` ints, ``"yyyymmdd"``, ``"yyyy-mm-dd"`` or ``date`` objects to a date integer."""
    if isinstance(d, bool):
        raise ParseError(f"Unsupported date value: {d!r}")
    if isinstance(d, date_cls):
        value = d.year * 10000 + d.month * 100 + d.day
    elif isinstance(d, int):
        value = d
    elif isinstance(d, str):
        raw = d.strip()
        iso = _ISO_DATE_RE.fullmatch(raw)
        if iso:
            value = int("".join(iso.groups()))
        elif _INT_DATE_RE.fullmatch(raw):
            value = int(raw)
        else:
            raise ParseError(f"Could not parse the date: {d!r}")
    else:
        raise ParseError(f"Unsupported date value: {d!r}")

    if not (MIN_DATE <= value <= MAX_DATE):
        raise ParseError(f"Date is not within the expected range: {value}")
    try:
        datetime.strptime(str(value), "%Y%m%d")
    except ValueError as e:
        raise ParseError(f"Date is not a valid calendar date: {value}") from e
    return value


def date_int_to_date(d: int) -> date_cls:
    return date_cls(d // 10000, (d // 100) % 100, d % 100)


def date_to_int(d: date_cls) -> int:
    return d.year * 10000 + d.month * 100 + d.day


def format_time_gtfs(seconds: int) -> str:
    """Devuelve la hora GTFS ``HH:MM:SS`` con ceros a la izquierda."""
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{h:02d}:{m:02d}:{s:02d}"


def format_time_readable(seconds: int) -> str:
    """12 hour clock rendering; hours 24 and above wrap into the next morning."""
    h = seconds // 3600
    m = (seconds % 3600) // 60
    if h == 0:
        return f"12:{m:02d} AM"
    if h < 12:
        return f"{h}:{m:02d} AM"
    if h == 12:
        return f"12:{m:02d} PM"
    if h < 24:
        return f"{h - 12}:{m:02d} PM"
    if h == 24:
        return f"12:{m:02d} AM"
    return f"{h - 24}:{m:02d} AM"


def day_of_week(d: int) -> str:
    """Lowercase weekday name (``"sunday"`` .. ``"saturday"``) of a date integer."""
    # isoweekday: Monday=1 .. Sunday=7
    return DAYS_OF_WEEK[date_int_to_date(d).isoweekday() % 7]


@total_ordering
class DateTime:
    """An immutable (date, time-of-day) pair.

    ``time`` is seconds since midnight of ``date`` and may exceed 24 hours.
    ``date`` is a ``yyyymmdd`` integer or ``None`` when no date was given.

    Ordering compares ``(date, time)`` as-is. Two instants on different
    service days that use extended times must be normalized by the caller
    (add 86400 to the time on the earlier date) before comparing.
    """

    __slots__ = ("_time", "_date")

    def __init__(self, time: TimeInput, date: Optional[DateInput] = None):
        self._time = parse_time(time)
        self._date = parse_date(date) if date is not None else None

    # factories

    @classmethod
    def create(cls, time: TimeInput, date: Optional[DateInput] = None) -> "DateTime":
        return cls(time, date)

    @classmethod
    def from_date(cls, date: DateInput) -> "DateTime":
        return cls(0, date)

    @classmethod
    def from_datetime(cls, dt: datetime) -> "DateTime":
        return cls(dt.hour * 3600 + dt.minute * 60 + dt.second, dt.date())

    @classmethod
    def now(cls) -> "DateTime":
        return cls.from_datetime(datetime.now())

    @classmethod
    def from_time(cls, time: TimeInput, guess_date: bool = False, now: Optional[datetime] = None) -> "DateTime":
        """Build a DateTime from a time only.

        With ``guess_date`` the date is taken relative to ``now``: shortly
        after midnight, late evening times belong to yesterday; in the
        afternoon, early morning times belong to tomorrow.
        """
        if not guess_date:
            return cls(time)

        current = cls.from_datetime(now or datetime.now())
        requested = parse_time(time)
        delta = 0
        if current.time <= 4 * 3600:
            if requested >= 20 * 3600:
                delta = -1
        elif current.time >= 16 * 3600:
            if requested <= 8 * 3600:
                delta = 1
        return cls(requested, current.date).add_days(delta)

    # accessors

    @property
    def time(self) -> int:
        return self._time

    @property
    def date(self) -> Optional[int]:
        return self._date

    @property
    def is_date_set(self) -> bool:
        return self._date is not None

    @property
    def time_gtfs(self) -> str:
        return format_time_gtfs(self._time)

    @property
    def time_int(self) -> str:
        return self.time_gtfs.replace(":", "")[0:4]

    @property
    def time_readable(self) -> str:
        return format_time_readable(self._time)

    @property
    def date_dow(self) -> str:
        return day_of_week(self._require_date())

    def date_readable(self, dow: bool = False) -> str:
        d = date_int_to_date(self._require_date())
        rtn = f"{_MONTH_ABBR[d.month - 1]} {d.day}, {d.year}"
        if dow:
            rtn = f"{_DAY_ABBR[d.isoweekday() % 7]}, " + rtn
        return rtn

    def to_datetime(self) -> datetime:
        """Wall clock ``datetime``; extended times roll into the following day."""
        d = date_int_to_date(self._require_date())
        return datetime(d.year, d.month, d.day) + timedelta(seconds=self._time)

    def to_iso_string(self) -> str:
        d = date_int_to_date(self._require_date())
        return f"{d.isoformat()} {self.time_gtfs}"

    # derived values

    def add_days(self, delta: int) -> "DateTime":
        d = date_int_to_date(self._require_date()) + timedelta(days=delta)
        return DateTime(self._time, date_to_int(d))

    def add_minutes(self, delta: int) -> "DateTime":
        """Shift by ``delta`` minutes.

        The result is normalized to a wall clock time, so ``25:10`` on one
        date becomes ``01:10`` on the next. Without a date the time wraps
        around midnight.
        """
        if self._date is None:
            return DateTime((self._time + delta * 60) % SECONDS_PER_DAY)
        return DateTime.from_datetime(self.to_datetime() + timedelta(minutes=delta))

    def _require_date(self) -> int:
        if self._date is None:
            raise InvalidArgument("DateTime has no date set")
        return self._date

    # comparison

    def _key(self):
        return (self._date if self._date is not None else 0, self._time)

    def __eq__(self, other):
        if not isinstance(other, DateTime):
            return NotImplemented
        return self._date == other._date and self._time == other._time

    def __lt__(self, other):
        if not isinstance(other, DateTime):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self):
        return hash((self._date, self._time))

    def __str__(self):
        if self._date is None:
            return f"@ {self.time_gtfs}"
        d = date_int_to_date(self._date)
        return f"{d.isoformat()} @ {self.time_gtfs}"

    def __repr__(self):
        return f"DateTime(time={self.time_gtfs!r}, date={self._date!r})"
