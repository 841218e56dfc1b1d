import logging
from datetime import timedelta

logger = logging.getLogger(__name__)

DEFAULT_PROXIMITY = timedelta(hours=3)


class BookingMatcher:
    """Picks the booking a tip was paid for, or None."""

    def match(self, tip_event, bookings):
        raise NotImplementedError("Matcher must implement match()")


class ProximityMatcher(BookingMatcher):
    """
    Time-only matching. Customer identity is ignored because the email
    and name fields on payments are unreliable join keys.

    1. The first booking (in list order) whose interval contains the
       payment time.
    2. Otherwise the booking with the nearest edge, if that edge is
       closer than `threshold`. Ties keep the earlier booking.
    """

    def __init__(self, threshold=DEFAULT_PROXIMITY):
        self.threshold = threshold

    def match(self, tip_event, bookings):
        paid_at = tip_event.timestamp
        closest = None
        smallest = None

        for booking in bookings:
            if booking.contains(paid_at):
                return booking

            gap = booking.distance_to(paid_at)
            if gap < self.threshold and (smallest is None or gap < smallest):
                smallest = gap
                closest = booking

        return closest


def _name_tokens(name):
    return [t for t in name.lower().split() if len(t) >= 3]


def names_overlap(a, b):
    """True if any token of 3+ letters in one name equals or contains one in the other."""
    for x in _name_tokens(a):
        for y in _name_tokens(b):
            if x == y or x in y or y in x:
                return True
    return False


class IdentityMatcher(BookingMatcher):
    """
    Matches on who paid: same-day bookings with the payment's email,
    then same-day bookings whose customer name shares a name part.
    Returns the earliest-starting candidate.
    """

    def match(self, tip_event, bookings):
        day = tip_event.timestamp.date()
        same_day = [b for b in bookings if b.start_time.date() == day]
        customer = tip_event.customer

        candidates = []
        if customer.email:
            candidates = [b for b in same_day if b.customer.email == customer.email]

        if not candidates and customer.name:
            candidates = [b for b in same_day if b.customer.name and names_overlap(customer.name, b.customer.name)]

        if not candidates:
            logger.debug("No identity match for transaction %s", tip_event.transaction_id)
            return None
        return min(candidates, key=lambda b: b.start_time)
