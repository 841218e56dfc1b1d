import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from .aggregation import TipLedger
from .bookings import Booking, collect_bookings
from .config import TipoutConfig
from .diagnostics import Diagnostics, NO_BOOKING_MATCH, NO_ELIGIBLE_WORKER, NO_WORKER_FOUND
from .matching import ProximityMatcher
from .payments import TipEvent, collect_tip_events
from .timecards import Shift, ShiftStore, find_employees_at_time, load_shifts
from .utils import PayPeriod, get_pay_period

logger = logging.getLogger(__name__)


class ReasonCode(str, Enum):
    ALLOCATED = "ALLOCATED"
    NO_ELIGIBLE_WORKER = "NO_ELIGIBLE_WORKER"
    NO_WORKER_FOUND = "NO_WORKER_FOUND"
    FALLBACK_EVEN_SPLIT = "FALLBACK_EVEN_SPLIT"


@dataclass(frozen=True)
class EmployeeShare:
    shift: Shift
    overlap_percent: float
    tip_amount: float
    note: str = ""

    @property
    def employee_id(self):
        return self.shift.employee_id


@dataclass(frozen=True)
class AllocationRecord:
    tip_event: TipEvent
    booking: Optional[Booking]
    window_start: datetime
    window_end: datetime
    employees: Tuple[EmployeeShare, ...]
    overpaid_amount: float
    reason: ReasonCode

    @property
    def distributed_amount(self):
        return sum(e.tip_amount for e in self.employees)


@dataclass
class TipoutResult:
    period: PayPeriod
    records: List[AllocationRecord]
    ledger: TipLedger
    diagnostics: Diagnostics
    shifts: ShiftStore


def _ineligible_note(shift):
    return f"Not tip-eligible ({shift.full_name})"


def find_working_employees(shifts, window_start, window_end):
    """
    Shifts overlapping [window_start, window_end] as (shift, overlap %)
    pairs. A zero-length window is the payment instant: every shift
    clocked in at that moment counts 100%. An inverted window has no
    workers.
    """
    window = (window_end - window_start).total_seconds()
    if window < 0:
        return []
    if window == 0:
        return [(s, 100.0) for s in find_employees_at_time(shifts, window_end)]

    working = []
    for shift in shifts:
        overlap_start = max(window_start, shift.clock_in)
        overlap_end = min(window_end, shift.clock_out)
        if overlap_start < overlap_end:
            overlap = (overlap_end - overlap_start).total_seconds()
            working.append((shift, overlap / window * 100))
    return working


def _overpaid(tip_event, booking, start, end, working, reason):
    employees = tuple(
        EmployeeShare(shift, pct, 0.0, _ineligible_note(shift))
        for shift, pct in working
    )
    return AllocationRecord(tip_event, booking, start, end, employees, tip_event.tip_amount, reason)


def allocate_tip(tip_event, booking, shifts):
    """
    Splits one tip among the employees who were working.

    With a booking the work window runs from the booking start to the
    payment time, and eligible workers are paid in proportion to their
    overlap with it. Without one, eligible workers clocked in at the
    payment time split the tip evenly. Whatever cannot go to an
    eligible worker is recorded as overpaid.
    """
    paid_at = tip_event.timestamp

    if booking is not None:
        start = booking.start_time
        working = find_working_employees(shifts, start, paid_at)
        if not working:
            return _overpaid(tip_event, booking, start, paid_at, working, ReasonCode.NO_WORKER_FOUND)

        eligible = [(s, pct) for s, pct in working if s.tip_eligible]
        if not eligible:
            return _overpaid(tip_event, booking, start, paid_at, working, ReasonCode.NO_ELIGIBLE_WORKER)

        total_overlap = sum(pct for _, pct in eligible)
        employees = []
        for shift, pct in working:
            if shift.tip_eligible:
                employees.append(EmployeeShare(shift, pct, tip_event.tip_amount * (pct / total_overlap)))
            else:
                employees.append(EmployeeShare(shift, pct, 0.0, _ineligible_note(shift)))
        return AllocationRecord(tip_event, booking, start, paid_at, tuple(employees), 0.0, ReasonCode.ALLOCATED)

    clocked_in = [(s, 100.0) for s in find_employees_at_time(shifts, paid_at)]
    if not clocked_in:
        return _overpaid(tip_event, None, paid_at, paid_at, clocked_in, ReasonCode.NO_WORKER_FOUND)

    eligible_count = sum(1 for s, _ in clocked_in if s.tip_eligible)
    if not eligible_count:
        return _overpaid(tip_event, None, paid_at, paid_at, clocked_in, ReasonCode.NO_ELIGIBLE_WORKER)

    share = tip_event.tip_amount / eligible_count
    employees = tuple(
        EmployeeShare(s, pct, share) if s.tip_eligible
        else EmployeeShare(s, pct, 0.0, _ineligible_note(s))
        for s, pct in clocked_in
    )
    return AllocationRecord(tip_event, None, paid_at, paid_at, employees, 0.0, ReasonCode.FALLBACK_EVEN_SPLIT)


def distribute_tips(tip_events, bookings, shifts, config=None, matcher=None, diagnostics=None, max_workers=None):
    """
    Allocates every tip event. Records come back in the order of
    `tip_events` whether or not a thread pool is used.
    """
    config = config or TipoutConfig()
    matcher = matcher or ProximityMatcher(config.proximity_threshold)
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    shifts = tuple(shifts)
    bookings = list(bookings)

    def allocate(event):
        return allocate_tip(event, matcher.match(event, bookings), shifts)

    if max_workers and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="tippool") as pool:
            records = list(pool.map(allocate, tip_events))
    else:
        records = [allocate(e) for e in tip_events]

    for rec in records:
        tid = rec.tip_event.transaction_id
        if rec.booking is None:
            diagnostics.record(NO_BOOKING_MATCH, f"No booking near transaction {tid}", tid, level=logging.DEBUG)
        if rec.reason is ReasonCode.NO_ELIGIBLE_WORKER:
            diagnostics.record(
                NO_ELIGIBLE_WORKER,
                f"Only non-eligible staff worked for {tid} | Tip: ${rec.tip_event.tip_amount:.2f} -> overpaid",
                tid,
            )
        elif rec.reason is ReasonCode.NO_WORKER_FOUND:
            diagnostics.record(
                NO_WORKER_FOUND,
                f"No employees working for {tid} | Tip: ${rec.tip_event.tip_amount:.2f} -> overpaid",
                tid,
            )

    logger.info(
        "Distributed %d tips: %d matched a booking, %d did not",
        len(records), sum(1 for r in records if r.booking is not None), diagnostics.count(NO_BOOKING_MATCH),
    )
    return records


def run_tipout(shift_records, tip_records, booking_records, config=None, matcher=None, max_workers=None):
    """
    Full batch: shifts -> pay period -> tips and bookings in the period
    -> allocation -> ledger. Raises ReconciliationInvariantError if the
    books do not balance.
    """
    config = config or TipoutConfig()
    diagnostics = Diagnostics()

    store = load_shifts(shift_records, config, diagnostics)
    period = get_pay_period(store, config.local_tz)
    logger.info("Pay period: %s to %s", f"{period.start:%m/%d/%Y}", f"{period.end:%m/%d/%Y}")

    events = collect_tip_events(tip_records, period, config, diagnostics)
    bookings = collect_bookings(booking_records, period, config, diagnostics)

    records = distribute_tips(events, bookings, store, config, matcher, diagnostics, max_workers)

    ledger = TipLedger.from_records(records)
    ledger.check(config.epsilon)
    return TipoutResult(period, records, ledger, diagnostics, store)
