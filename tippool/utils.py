import math
from dataclasses import dataclass
from datetime import date, datetime, time

from dateutil import parser as date_parser
from dateutil import tz

from .errors import ConfigurationError


@dataclass(frozen=True)
class PayPeriod:
    start: datetime
    end: datetime

    def contains(self, moment):
        return self.start <= moment <= self.end


def is_blank(value):
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def to_local(dt, zone):
    """Naive datetimes are taken as local wall-clock time."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=zone)
    return dt.astimezone(zone)


def parse_timestamp(value, zone):
    """
    Returns an aware datetime in `zone`, or None if the value is empty
    or cannot be parsed.
    """
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return to_local(value, zone)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=zone)
    try:
        return to_local(date_parser.parse(str(value)), zone)
    except (ValueError, OverflowError):
        return None


def combine_date_and_time(day, clock, zone):
    """
    Joins a date cell with a time-of-day cell such as "4:54:35 PM PDT"
    or "16:54". Any zone suffix on the clock is ignored; the result is
    local time. An unreadable clock gives None.
    """
    if is_blank(day):
        return None
    if is_blank(clock):
        return parse_timestamp(day, zone)

    if isinstance(day, datetime):
        day = day.date()
    elif not isinstance(day, date):
        try:
            day = date_parser.parse(str(day)).date()
        except (ValueError, OverflowError):
            return None

    if isinstance(clock, datetime):
        clock = clock.time()
    if isinstance(clock, time):
        return datetime.combine(day, clock.replace(microsecond=0, tzinfo=None), tzinfo=zone)

    try:
        parsed = date_parser.parse(str(clock), default=datetime.combine(day, time.min), ignoretz=True)
    except (ValueError, OverflowError):
        return None
    return parsed.replace(microsecond=0, tzinfo=zone)


def parse_money(value):
    """'$1,234.50' -> 1234.5, '(5.00)' -> -5.0; anything unreadable or non-finite is 0."""
    if is_blank(value):
        return 0.0
    negative = False
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        text = str(value).strip().replace("$", "").replace(",", "").replace(" ", "")
        negative = text.startswith("(") and text.endswith(")")
        if negative:
            text = text[1:-1]
        try:
            amount = float(text)
        except ValueError:
            return 0.0
    if not math.isfinite(amount):
        return 0.0
    return -amount if negative else amount


def normalize_email(email):
    if is_blank(email):
        return ""
    return str(email).strip().lower()


def get_pay_period(shifts, zone=None):
    """
    Pay period spanning every shift: midnight of the earliest clock-in
    day through the last instant of the latest clock-out day.
    """
    shifts = list(shifts)
    if not shifts:
        raise ConfigurationError("No shifts found - cannot determine pay period")

    zone = zone or tz.gettz("America/New_York")
    earliest = min(s.clock_in for s in shifts).astimezone(zone)
    latest = max(s.clock_out for s in shifts).astimezone(zone)

    start = earliest.replace(hour=0, minute=0, second=0, microsecond=0)
    end = datetime.combine(latest.date(), time.max, tzinfo=zone)
    return PayPeriod(start, end)
