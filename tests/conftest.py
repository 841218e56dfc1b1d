import sys
import pathlib
from datetime import datetime, timedelta

import pytest
from dateutil import tz

# Ensure repo root is on sys.path so tests can import tippool and tippool_main
ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from tippool.bookings import Booking
from tippool.config import DEFAULT_TZ_NAME, TipoutConfig
from tippool.payments import CustomerIdentity, TipEvent
from tippool.timecards import EmployeeId, Shift

LOCAL_TZ = tz.gettz(DEFAULT_TZ_NAME)


def at(hour, minute=0, day=10):
    """2025-01-<day> hour:minute local time."""
    return datetime(2025, 1, day, hour, minute, tzinfo=LOCAL_TZ)


def make_shift(name, start, end, eligible=True, paid_hours=None):
    return Shift(
        employee_id=EmployeeId(name.lower().replace(" ", "-")),
        full_name=name,
        job_title="Bay Attendant",
        clock_in=start,
        clock_out=end,
        tip_eligible=eligible,
        paid_hours=paid_hours,
    )


def make_event(transaction_id, when, amount, name="", email=""):
    return TipEvent(transaction_id, when, amount, CustomerIdentity(name=name, email=email))


def make_booking(start, minutes=60, name="", email=""):
    return Booking(
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        duration_minutes=minutes,
        customer=CustomerIdentity(name=name, email=email),
    )


@pytest.fixture
def config():
    return TipoutConfig(exempt_employees=("Pat Owner",))
