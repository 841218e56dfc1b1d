"""
Tip pool distribution.

Usage:
    python3 tippool_main.py --shifts shifts.csv --tips tips.csv --bookings bookings.csv
"""
from .config import TipoutConfig
from .errors import TipoutError, ConfigurationError, ReconciliationInvariantError
from .diagnostics import Diagnostics, DataQualityWarning
from .timecards import EmployeeId, Shift, ShiftStore, load_shifts, find_employees_at_time
from .payments import CustomerIdentity, TipEvent, collect_tip_events
from .bookings import Booking, collect_bookings
from .matching import BookingMatcher, ProximityMatcher, IdentityMatcher
from .aggregation import TipLedger
from .distribution import (
    ReasonCode, EmployeeShare, AllocationRecord, TipoutResult,
    find_working_employees, allocate_tip, distribute_tips, run_tipout,
)
from .payroll import PayrollLine, build_payroll
from .reporting import print_tip_summary, print_payroll_summary, allocation_rows, save_results
from .utils import PayPeriod, get_pay_period
