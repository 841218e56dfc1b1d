import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .config import TipoutConfig
from .diagnostics import Diagnostics, DEFAULTED_BOOKING_DURATION, SKIPPED_RECORD
from .payments import CustomerIdentity
from .utils import combine_date_and_time, is_blank, normalize_email, parse_money, parse_timestamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Booking:
    start_time: datetime
    end_time: datetime
    duration_minutes: float
    customer: CustomerIdentity = field(default_factory=CustomerIdentity)
    duration_defaulted: bool = False

    def contains(self, moment):
        return self.start_time <= moment <= self.end_time

    def distance_to(self, moment):
        """Time from `moment` to the nearest edge; zero when inside."""
        if moment < self.start_time:
            return self.start_time - moment
        if moment > self.end_time:
            return moment - self.end_time
        return timedelta(0)


def _customer_name(record):
    name = record.get("name")
    if not is_blank(name):
        return " ".join(str(name).split())
    parts = [record.get("first_name"), record.get("last_name")]
    return " ".join(str(p).strip() for p in parts if not is_blank(p))


def collect_bookings(records, period, config=None, diagnostics=None):
    """
    Builds Booking intervals for every booking that starts inside
    `period`. A missing or non-positive duration becomes the configured
    default (60 minutes) and is recorded.
    """
    config = config or TipoutConfig()
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    bookings = []

    for i, rec in enumerate(records):
        start = parse_timestamp(rec.get("start"), config.local_tz)
        if start is None:
            start = combine_date_and_time(rec.get("date"), rec.get("time"), config.local_tz)
        if start is None:
            diagnostics.record(SKIPPED_RECORD, f"Booking row {i} has no readable start", level=logging.DEBUG)
            continue
        if not period.contains(start):
            continue

        duration = parse_money(rec.get("duration_minutes"))
        defaulted = duration <= 0
        if defaulted:
            duration = config.default_booking_minutes

        email = normalize_email(rec.get("email"))
        if defaulted:
            diagnostics.record(
                DEFAULTED_BOOKING_DURATION,
                f"Booking at {start:%m/%d/%Y %I:%M %p} has no usable duration, using {duration} min",
                email or None,
                level=logging.DEBUG,
            )

        bookings.append(Booking(
            start_time=start,
            end_time=start + timedelta(minutes=duration),
            duration_minutes=duration,
            customer=CustomerIdentity(
                id="" if is_blank(rec.get("customer_id")) else str(rec.get("customer_id")).strip(),
                name=_customer_name(rec),
                email=email,
            ),
            duration_defaulted=defaulted,
        ))

    fixed = sum(1 for b in bookings if b.duration_defaulted)
    if fixed:
        logger.info("Fixed %d bookings with 0 or invalid duration (assigned %d min default)",
                    fixed, config.default_booking_minutes)
    logger.info("Found %d valid bookings in pay period", len(bookings))
    return bookings
