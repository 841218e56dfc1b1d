import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, NewType, Optional

from .config import TipoutConfig, normalize_name
from .diagnostics import Diagnostics, SKIPPED_RECORD
from .utils import combine_date_and_time, is_blank, parse_timestamp

logger = logging.getLogger(__name__)

EmployeeId = NewType("EmployeeId", str)


@dataclass(frozen=True)
class Shift:
    employee_id: EmployeeId
    full_name: str
    job_title: str
    clock_in: datetime
    clock_out: datetime
    tip_eligible: bool
    paid_hours: Optional[float] = None

    @property
    def hours(self):
        if self.paid_hours is not None:
            return self.paid_hours
        return (self.clock_out - self.clock_in).total_seconds() / 3600

    def covers(self, moment):
        return self.clock_in <= moment <= self.clock_out


class EmployeeRegistry:
    """
    Maps employees to stable ids. Built once while loading shifts so
    every later lookup goes through an EmployeeId, never a display name.
    """

    def __init__(self):
        self._names: Dict[EmployeeId, str] = {}

    def register(self, full_name, explicit_id=None):
        if not is_blank(explicit_id):
            emp_id = EmployeeId(str(explicit_id).strip())
        else:
            emp_id = EmployeeId(normalize_name(full_name).replace(" ", "-"))

        known = self._names.get(emp_id)
        if known is not None and normalize_name(known) != normalize_name(full_name):
            logger.warning("Employee id %s used for both %r and %r", emp_id, known, full_name)
        self._names.setdefault(emp_id, full_name)
        return emp_id

    def name(self, emp_id):
        return self._names.get(emp_id, str(emp_id))

    def items(self):
        return self._names.items()

    def __len__(self):
        return len(self._names)


class ShiftStore:
    def __init__(self, shifts, registry):
        self.shifts = tuple(shifts)
        self.registry = registry

    def employee_name(self, emp_id):
        return self.registry.name(emp_id)

    def __iter__(self):
        return iter(self.shifts)

    def __len__(self):
        return len(self.shifts)


def _clock(record, prefix, zone):
    stamp = parse_timestamp(record.get(prefix), zone)
    if stamp is None:
        stamp = combine_date_and_time(record.get(f"{prefix}_date"), record.get(f"{prefix}_time"), zone)
    return stamp


def _full_name(record):
    name = record.get("name")
    if is_blank(name):
        first = "" if is_blank(record.get("first_name")) else str(record.get("first_name"))
        last = "" if is_blank(record.get("last_name")) else str(record.get("last_name"))
        name = f"{first} {last}"
    return " ".join(str(name).split())


def load_shifts(records, config=None, diagnostics=None):
    """
    Turns raw timecard rows into Shift objects.

    Rows with no name, unreadable clock times, or clock-out not after
    clock-in are skipped and recorded.
    """
    config = config or TipoutConfig()
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    registry = EmployeeRegistry()
    shifts = []

    for i, rec in enumerate(records):
        full_name = _full_name(rec)
        if not full_name:
            diagnostics.record(SKIPPED_RECORD, f"Shift row {i} has no employee name", level=logging.DEBUG)
            continue

        clock_in = _clock(rec, "clock_in", config.local_tz)
        clock_out = _clock(rec, "clock_out", config.local_tz)
        if clock_in is None or clock_out is None:
            diagnostics.record(SKIPPED_RECORD, f"Shift row {i} for {full_name} is missing clock times", full_name)
            continue
        if clock_in >= clock_out:
            diagnostics.record(SKIPPED_RECORD, f"Shift row {i} for {full_name} clocks out before clocking in", full_name)
            continue

        paid = rec.get("paid_hours")
        try:
            paid_hours = None if is_blank(paid) else float(paid)
        except (TypeError, ValueError):
            paid_hours = None

        job_title = rec.get("job_title")
        shifts.append(Shift(
            employee_id=registry.register(full_name, rec.get("employee_id")),
            full_name=full_name,
            job_title="" if is_blank(job_title) else str(job_title),
            clock_in=clock_in,
            clock_out=clock_out,
            tip_eligible=not config.is_exempt(full_name),
            paid_hours=paid_hours,
        ))

    logger.info("Parsed %d valid shifts for %d employees", len(shifts), len(registry))
    return ShiftStore(shifts, registry)


def find_employees_at_time(shifts, moment):
    """Shifts clocked in at `moment` (both ends inclusive)."""
    return [s for s in shifts if s.covers(moment)]
