from tippool.bookings import collect_bookings
from tippool.diagnostics import Diagnostics, DEFAULTED_BOOKING_DURATION
from tippool.utils import PayPeriod

from conftest import at

PERIOD = PayPeriod(at(0), at(23, 59))


def test_duration_zero_defaults_to_sixty_minutes():
    diagnostics = Diagnostics()
    bookings = collect_bookings([
        {"start": "2025-01-10 13:00", "duration_minutes": 0, "email": "a@example.com"},
        {"start": "2025-01-10 15:00", "duration_minutes": None},
        {"start": "2025-01-10 17:00", "duration_minutes": "-30"},
    ], PERIOD, diagnostics=diagnostics)

    assert [b.end_time for b in bookings] == [at(14), at(16), at(18)]
    assert all(b.duration_defaulted for b in bookings)
    assert all(b.duration_minutes == 60 for b in bookings)
    assert diagnostics.count(DEFAULTED_BOOKING_DURATION) == 3


def test_end_time_follows_duration():
    bookings = collect_bookings([
        {"date": "2025-01-10", "time": "1:00:00 PM", "duration_minutes": "90",
         "first_name": "Jo", "last_name": "Golfer", "email": " Jo@Example.com"},
    ], PERIOD)

    booking = bookings[0]
    assert booking.start_time == at(13)
    assert booking.end_time == at(14, 30)
    assert not booking.duration_defaulted
    assert booking.customer.name == "Jo Golfer"
    assert booking.customer.email == "jo@example.com"


def test_bookings_outside_period_are_dropped():
    bookings = collect_bookings([
        {"start": "2025-01-09 22:00", "duration_minutes": 60},
        {"start": "2025-01-10 10:00", "duration_minutes": 60},
        {"start": None, "duration_minutes": 60},
    ], PERIOD)
    assert [b.start_time for b in bookings] == [at(10)]
